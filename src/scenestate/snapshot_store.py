"""
Baseline snapshot store.

A SnapshotStore holds at most one baseline. The baseline is captured only when
none exists, so repeated apply cycles never drift it: revert always returns to
the state before the first apply, not the state before the most recent one.
forget_baseline() is the only way to start over.

A store keyed by VOLATILE identities (runtime instance ids) is valid for one
session only and refuses to be persisted. A DURABLE store may be saved to and
loaded from JSON.
"""

import copy
import json
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from scenestate.errors import VolatileIdentityError
from scenestate.host import SceneHost
from scenestate.interaction import ProgressCallback
from scenestate.reports import RestoreReport
from scenestate.snapshot_model import AttributeSnapshot, IdentityKind, Key, SnapshotSet

logger = logging.getLogger(__name__)

RestoreGroup = Tuple[Key, List[Tuple[str, Any]]]


def restore_groups(
    host: SceneHost,
    groups: Sequence[RestoreGroup],
    resolver: Callable[[Key], Optional[Key]],
    progress: Optional[ProgressCallback] = None,
    tag: str = "RESTORE",
) -> RestoreReport:
    """Write captured values back onto the objects they were captured from.

    Each group is ``(object_id, [(attribute, value), ...])``. Objects whose id
    no longer resolves, or that expose none of the captured attributes, are
    counted once as missing. Writes share a single batch edit; each changed
    object is refreshed once after the batch.
    """
    report = RestoreReport()
    changed_keys: List[Key] = []
    total = len(groups)

    with host.batch_edit():
        for index, (object_id, values) in enumerate(groups):
            if progress is not None and progress(index, total, str(object_id)):
                report.cancelled = True
                logger.info(f"{tag}: Cancelled at {index}/{total}")
                break

            key = resolver(object_id)
            if key is None or host.kind_of(key) is None:
                report.missing_count += 1
                logger.debug(f"{tag}: {object_id!r} no longer resolves")
                continue

            applicable = [(name, value) for name, value in values if host.has_attribute(key, name)]
            if not applicable:
                report.missing_count += 1
                continue

            object_changed = False
            try:
                for name, value in applicable:
                    if host.read(key, name) != value:
                        host.write(key, name, copy.deepcopy(value))
                        object_changed = True
            except Exception as e:
                report.failed_count += 1
                logger.warning(f"{tag}: Failed restoring {key!r}: {e}")
            else:
                report.restored_count += 1
            if object_changed:
                changed_keys.append(key)

    for key in changed_keys:
        host.refresh(key)

    logger.info(f"{tag}: restored={report.restored_count} missing={report.missing_count} "
                f"failed={report.failed_count}")
    return report


class SnapshotStore:
    """Holds the revert baseline for one tool instance."""

    def __init__(self, identity: IdentityKind = IdentityKind.VOLATILE, label: str = "baseline"):
        self._identity = identity
        self._label = label
        self._baseline: Optional[SnapshotSet] = None

    @property
    def identity(self) -> IdentityKind:
        return self._identity

    @property
    def has_snapshot(self) -> bool:
        return self._baseline is not None

    @property
    def baseline(self) -> Optional[SnapshotSet]:
        return self._baseline

    def capture_if_absent(self, host: SceneHost, keys: Iterable[Key],
                          attributes: Sequence[str]) -> SnapshotSet:
        """Capture the baseline unless one already exists.

        Returns the (new or existing) baseline.
        """
        if self._baseline is not None:
            logger.debug(f"SNAPSHOT: Baseline '{self._label}' already captured, keeping it")
            return self._baseline

        entries: List[AttributeSnapshot] = []
        seen = set()
        for key in keys:
            object_id = host.identity_of(key, self._identity)
            if object_id is None:
                logger.debug(f"SNAPSHOT: {key!r} has no {self._identity.value} identity, skipped")
                continue
            if object_id in seen:
                continue
            seen.add(object_id)

            for name in attributes:
                if not host.has_attribute(key, name):
                    continue
                try:
                    value = copy.deepcopy(host.read(key, name))
                except Exception as e:
                    logger.warning(f"SNAPSHOT: Cannot read {name!r} of {key!r}: {e}")
                    continue
                entries.append(AttributeSnapshot(object_id=object_id, attribute=name, value=value))

        self._baseline = SnapshotSet.create(self._label, tuple(entries), self._identity)
        logger.info(f"SNAPSHOT: Captured '{self._label}' with {len(entries)} value(s) "
                    f"from {len(seen)} object(s) (id={self._baseline.id[:8]})")
        return self._baseline

    def forget_baseline(self) -> None:
        if self._baseline is not None:
            logger.info(f"SNAPSHOT: Forgot baseline '{self._label}' (id={self._baseline.id[:8]})")
        self._baseline = None

    def groups(self) -> List[RestoreGroup]:
        """Baseline entries grouped per object, in capture order."""
        if self._baseline is None:
            return []
        grouped: Dict[Key, List[Tuple[str, Any]]] = {}
        for entry in self._baseline.entries:
            grouped.setdefault(entry.object_id, []).append((entry.attribute, entry.value))
        return list(grouped.items())

    def restore(self, host: SceneHost, progress: Optional[ProgressCallback] = None) -> RestoreReport:
        """Write baseline values back. The baseline itself is kept."""
        return restore_groups(
            host,
            self.groups(),
            lambda object_id: host.resolve(object_id, self._identity),
            progress=progress,
            tag="REVERT",
        )

    # ========== PERSISTENCE ==========

    def export_to_dict(self) -> Dict[str, Any]:
        if self._identity is IdentityKind.VOLATILE:
            raise VolatileIdentityError(
                f"Baseline '{self._label}' is keyed by session-only ids and cannot be persisted")
        return {
            'label': self._label,
            'identity': self._identity.value,
            'baseline': self._baseline.to_dict() if self._baseline else None,
        }

    def import_from_dict(self, data: Dict[str, Any]) -> None:
        if self._identity is IdentityKind.VOLATILE:
            raise VolatileIdentityError(
                f"Baseline '{self._label}' is keyed by session-only ids and cannot be loaded")
        identity = IdentityKind(data['identity'])
        if identity is not self._identity:
            raise VolatileIdentityError(
                f"Cannot import a {identity.value} baseline into a {self._identity.value} store")
        baseline = data.get('baseline')
        self._baseline = SnapshotSet.from_dict(baseline) if baseline else None

    def save_to_file(self, filepath: str) -> None:
        data = self.export_to_dict()
        with open(filepath, 'w') as f:
            json.dump(data, f, indent=2)
        logger.info(f"SNAPSHOT: Saved baseline '{self._label}' to {filepath}")

    def load_from_file(self, filepath: str) -> None:
        with open(filepath, 'r') as f:
            data = json.load(f)
        self.import_from_dict(data)
        logger.info(f"SNAPSHOT: Loaded baseline '{self._label}' from {filepath}")
