"""
SSAR engine: Scan, Snapshot, Apply, Revert in one object.

Tools build on this facade. It enforces the only fatal precondition (a live
scope must exist before any work starts), wires backups and baseline capture
into apply, and reports every count in a single end-of-operation summary.
"""

import logging
from typing import Any, Iterable, List, Optional, Sequence, Union

from scenestate.applier import UNSET, Applier
from scenestate.backup_store import BackupStore
from scenestate.errors import ScopeUnavailableError
from scenestate.host import SceneHost
from scenestate.interaction import HeadlessInteraction, Interaction, ProgressCallback
from scenestate.reports import ApplyReport, Candidate, RestoreReport
from scenestate.revert import RevertCoordinator
from scenestate.scanner import Predicate, Proposer, Scanner, Scope
from scenestate.snapshot_model import Key
from scenestate.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class SSAREngine:
    """Scanner, applier, revert coordinator and backup store over one host."""

    def __init__(
        self,
        host: SceneHost,
        *,
        interaction: Optional[Interaction] = None,
        snapshot_store: Optional[SnapshotStore] = None,
        backup_store: Optional[BackupStore] = None,
    ):
        self.host = host
        self.interaction = interaction if interaction is not None else HeadlessInteraction()
        self.scanner = Scanner(host)
        self.applier = Applier(host)
        self.coordinator = RevertCoordinator(host, snapshot_store)
        self.backups = backup_store

    def require_scope(self) -> None:
        if not self.host.has_live_scope():
            raise ScopeUnavailableError("No active loaded scene found.")

    def collect(self, scope: Scope) -> List[Key]:
        self.require_scope()
        return self.scanner.collect(scope)

    def scan(self, scope: Scope, attribute: str, target: Any = None, *,
             propose: Optional[Proposer] = None, predicate: Optional[Predicate] = None,
             progress: Optional[ProgressCallback] = None) -> List[Candidate]:
        self.require_scope()
        return self.scanner.scan(scope, attribute, target, propose=propose,
                                 predicate=predicate, progress=progress)

    def evaluate(self, keys: Iterable[Key], attribute: str, target: Any = None, *,
                 propose: Optional[Proposer] = None, predicate: Optional[Predicate] = None,
                 progress: Optional[ProgressCallback] = None) -> List[Candidate]:
        self.require_scope()
        return self.scanner.evaluate(keys, attribute, target, propose=propose,
                                     predicate=predicate, progress=progress)

    def apply(
        self,
        candidates: Sequence[Candidate],
        target_value: Any = UNSET,
        *,
        predicate: Optional[Predicate] = None,
        capture: Optional[Iterable[Key]] = None,
        capture_attributes: Union[Sequence[str], None] = None,
        backup: bool = False,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyReport:
        """Apply candidates, optionally capturing the baseline and backing up first.

        Args:
            capture: Keys whose current values form the revert baseline if none
                exists yet. Defaults to no capture. An empty set captures
                nothing, so a later apply can still take the baseline.
            capture_attributes: Attributes captured for ``capture`` keys;
                defaults to the attributes of the candidates.
            backup: Back up each candidate's original value in the durable
                backup store before it is written.
        """
        self.require_scope()
        candidates = list(candidates)

        capture = list(capture) if capture is not None else []
        if capture:
            attributes = capture_attributes or list(dict.fromkeys(c.attribute for c in candidates))
            self.coordinator.capture_if_absent(capture, attributes)

        if not backup:
            return self.applier.apply(candidates, target_value, predicate=predicate, progress=progress)
        if self.backups is None:
            raise ValueError("backup=True requires a BackupStore")
        store = self.backups

        def before_write(candidate: Candidate, current: Any) -> None:
            store.ensure_backed_up_object(self.host, candidate.object_key, current)

        try:
            report = self.applier.apply(candidates, target_value, predicate=predicate,
                                        before_write=before_write, progress=progress)
        except Exception:
            # Keep backups taken before the failure; the original error wins
            try:
                self.backups.save()
            except Exception as e:
                logger.error(f"APPLY: Failed to save backups after apply error: {e}")
            raise
        self.backups.save()
        return report

    def revert(self, progress: Optional[ProgressCallback] = None) -> RestoreReport:
        return self.coordinator.revert(progress=progress)

    def restore_backups(self, progress: Optional[ProgressCallback] = None) -> RestoreReport:
        if self.backups is None:
            raise ValueError("No BackupStore configured")
        return self.backups.restore(self.host, progress=progress)

    def summarize(self, title: str, report: Union[ApplyReport, RestoreReport]) -> str:
        """Log and show the single end-of-operation summary."""
        text = report.summary()
        logger.info(f"[{title}] {text.replace(chr(10), '; ')}")
        self.interaction.notify(title, f"Done.\n{text}")
        return text
