"""
Durable backup of original attribute values.

Entries are keyed by persistent guid and written to a JSON file, so a restore
works after the process restarts. The first backup of a guid wins: applying
several times never overwrites the true original value.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from scenestate.host import SceneHost
from scenestate.interaction import ProgressCallback
from scenestate.reports import RestoreReport
from scenestate.snapshot_model import BackupEntry, Key
from scenestate.snapshot_store import restore_groups

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class BackupStore:
    """Persistent first-write-wins backup of one attribute across many objects."""

    def __init__(self, attribute: str, path: Optional[PathLike] = None):
        self.attribute = attribute
        self.path = Path(path) if path is not None else None
        self._entries: Dict[str, BackupEntry] = {}

    @classmethod
    def open(cls, attribute: str, path: PathLike) -> 'BackupStore':
        """Load the backup at ``path`` or start an empty one."""
        store = cls(attribute, path)
        if store.path.exists():
            store.load()
        return store

    @property
    def entries(self) -> List[BackupEntry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, guid: str) -> bool:
        return guid in self._entries

    def get(self, guid: str) -> Optional[BackupEntry]:
        return self._entries.get(guid)

    def ensure_backed_up(self, guid: Optional[str], original_value: Any) -> bool:
        """Record ``original_value`` for ``guid`` unless already backed up.

        Returns True when a new entry was added.
        """
        if not guid or not str(guid).strip():
            return False
        if guid in self._entries:
            return False
        self._entries[guid] = BackupEntry(guid=guid, original_value=original_value)
        logger.debug(f"BACKUP: {guid} -> {original_value!r}")
        return True

    def ensure_backed_up_object(self, host: SceneHost, key: Key, original_value: Any) -> bool:
        """Back up an object through its durable identity. Objects without one are ignored."""
        return self.ensure_backed_up(host.durable_id(key), original_value)

    def clear(self) -> None:
        self._entries.clear()
        logger.info(f"BACKUP: Cleared '{self.attribute}' backup")
        self.save()

    def restore(self, host: SceneHost, progress: Optional[ProgressCallback] = None) -> RestoreReport:
        """Write every original value back onto the object its guid resolves to."""
        groups = [(entry.guid, [(self.attribute, entry.original_value)]) for entry in self._entries.values()]
        return restore_groups(host, groups, host.resolve_durable, progress=progress, tag="RESTORE")

    # ========== PERSISTENCE ==========

    def to_dict(self) -> Dict[str, Any]:
        return {
            'attribute': self.attribute,
            'entries': [entry.to_dict() for entry in self._entries.values()],
        }

    def save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"BACKUP: Saved {len(self._entries)} entries to {self.path}")

    def load(self) -> None:
        with open(self.path, 'r') as f:
            data = json.load(f)
        if data.get('attribute', self.attribute) != self.attribute:
            raise ValueError(f"Backup at {self.path} is for {data['attribute']!r}, not {self.attribute!r}")
        self._entries = {}
        for entry_data in data.get('entries', []):
            entry = BackupEntry.from_dict(entry_data)
            self._entries.setdefault(entry.guid, entry)
        logger.info(f"BACKUP: Loaded {len(self._entries)} entries from {self.path}")
