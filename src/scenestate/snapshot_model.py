"""
Snapshot and backup dataclasses for scene mutation revert.

Design Philosophy: Correct by Construction
- Immutable snapshots (frozen dataclass)
- UUID-based identity for snapshot sets
- Identity kind carried with every snapshot set, so session-only ids can
  never be mistaken for persistent ones
- No host object references - keys and values only
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple, Union
import time
import uuid

Key = Union[int, str]


class IdentityKind(Enum):
    """How a snapshot refers to the objects it captured."""
    VOLATILE = "volatile"  # runtime instance id, valid for one session
    DURABLE = "durable"    # persisted guid or asset path, valid across restarts


@dataclass(frozen=True)
class AttributeSnapshot:
    """Captured value of one attribute of one object."""
    object_id: Key
    attribute: str
    value: Any

    def to_dict(self) -> Dict:
        return {'object_id': self.object_id, 'attribute': self.attribute, 'value': self.value}

    @classmethod
    def from_dict(cls, data: Dict) -> 'AttributeSnapshot':
        return cls(object_id=data['object_id'], attribute=data['attribute'], value=data['value'])


@dataclass(frozen=True)
class SnapshotSet:
    """Ordered set of attribute snapshots forming a revert baseline."""
    id: str  # UUID string
    timestamp: float
    label: str
    identity: IdentityKind
    entries: Tuple[AttributeSnapshot, ...]
    committed: bool = True

    @classmethod
    def create(
        cls,
        label: str,
        entries: Tuple[AttributeSnapshot, ...],
        identity: IdentityKind,
    ) -> 'SnapshotSet':
        """Create a new snapshot set with auto-generated ID and timestamp."""
        return cls(
            id=str(uuid.uuid4()),
            timestamp=time.time(),
            label=label,
            identity=identity,
            entries=tuple(entries),
        )

    def object_ids(self) -> Tuple[Key, ...]:
        """Distinct object ids in capture order."""
        return tuple(dict.fromkeys(entry.object_id for entry in self.entries))

    def to_dict(self) -> Dict:
        """Export to JSON-serializable dict."""
        return {
            'id': self.id,
            'timestamp': self.timestamp,
            'label': self.label,
            'identity': self.identity.value,
            'committed': self.committed,
            'entries': [entry.to_dict() for entry in self.entries],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'SnapshotSet':
        """Import from dict (e.g., loaded from JSON)."""
        return cls(
            id=data['id'],
            timestamp=data['timestamp'],
            label=data['label'],
            identity=IdentityKind(data['identity']),
            entries=tuple(AttributeSnapshot.from_dict(e) for e in data['entries']),
            committed=data.get('committed', True),
        )


@dataclass(frozen=True)
class BackupEntry:
    """Original value of a durable object, recorded before its first mutation."""
    guid: str
    original_value: Any

    def to_dict(self) -> Dict:
        return {'guid': self.guid, 'original_value': self.original_value}

    @classmethod
    def from_dict(cls, data: Dict) -> 'BackupEntry':
        return cls(guid=data['guid'], original_value=data['original_value'])
