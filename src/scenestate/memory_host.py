"""
Dictionary-backed SceneHost.

Useful for scripting against exported scene data, for demos, and as the host
the test-suite runs the engine against. Objects live either in a scene
(instances) or on disk (assets, scene=None). Assets receive a persistent guid;
every object receives a session-only integer id that is never reused, so an
object removed and re-added is a different object for volatile identity.
"""

from dataclasses import dataclass, field
import uuid
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from scenestate.errors import HostWriteError
from scenestate.host import SceneHost
from scenestate.snapshot_model import Key

_ACTIVE_SCENE = object()


@dataclass
class HostObject:
    key: Key
    kind: str
    volatile_id: int
    scene: Optional[str] = None
    guid: Optional[str] = None
    order: str = ""
    attributes: Dict[str, Any] = field(default_factory=dict)


class InMemoryHost(SceneHost):
    """In-memory scene graph with asset/instance distinction and batch bookkeeping."""

    def __init__(self, active_scene: Optional[str] = "Main"):
        self.active_scene = active_scene
        self.loaded_scenes: Set[str] = {active_scene} if active_scene else set()
        self._objects: Dict[Key, HostObject] = {}
        self._by_volatile: Dict[int, Key] = {}
        self._by_guid: Dict[str, Key] = {}
        self._next_volatile_id = 1000
        self._rejected: Dict[Key, str] = {}
        self._unreadable: Set[Tuple[Key, str]] = set()

        # Bookkeeping inspected by callers and tests
        self.batch_depth = 0
        self.batch_acquisitions = 0
        self.batch_releases = 0
        self.refreshed: List[Key] = []
        self.writes: List[Tuple[Key, str, Any]] = []

    # ========== POPULATION ==========

    def add(self, key: Key, kind: str, *, scene: Any = _ACTIVE_SCENE,
            guid: Optional[str] = None, order: Optional[str] = None, **attributes) -> Key:
        """Add an object. Pass scene=None for an asset on disk."""
        if key in self._objects:
            raise ValueError(f"Object already exists: {key!r}")
        if scene is _ACTIVE_SCENE:
            scene = self.active_scene
        if scene is None and guid is None:
            guid = uuid.uuid4().hex

        volatile_id = self._next_volatile_id
        self._next_volatile_id += 1

        self._objects[key] = HostObject(
            key=key,
            kind=kind,
            volatile_id=volatile_id,
            scene=scene,
            guid=guid,
            order=order if order is not None else str(key),
            attributes=dict(attributes),
        )
        self._by_volatile[volatile_id] = key
        if guid:
            self._by_guid[guid] = key
        return key

    def remove(self, key: Key) -> None:
        obj = self._objects.pop(key)
        self._by_volatile.pop(obj.volatile_id, None)
        if obj.guid:
            self._by_guid.pop(obj.guid, None)

    def move(self, key: Key, new_key: Key) -> None:
        """Rename an object (e.g. an asset moved on disk). Identities are kept."""
        obj = self._objects.pop(key)
        obj.key = new_key
        if obj.order == str(key):
            obj.order = str(new_key)
        self._objects[new_key] = obj
        self._by_volatile[obj.volatile_id] = new_key
        if obj.guid:
            self._by_guid[obj.guid] = new_key

    def load_scene(self, name: str) -> None:
        self.loaded_scenes.add(name)

    def unload_scene(self, name: str) -> None:
        self.loaded_scenes.discard(name)
        if self.active_scene == name:
            self.active_scene = None

    def reject_writes(self, key: Key, reason: str = "read-only") -> None:
        self._rejected[key] = reason

    def make_unreadable(self, key: Key, name: str) -> None:
        self._unreadable.add((key, name))

    def get(self, key: Key, name: str, default: Any = None) -> Any:
        """Direct attribute access that bypasses capability checks and bookkeeping."""
        obj = self._objects.get(key)
        return obj.attributes.get(name, default) if obj else default

    def set(self, key: Key, name: str, value: Any) -> None:
        """Direct mutation, as if a user edited the object outside any tool."""
        self._objects[key].attributes[name] = value

    def delete_attribute(self, key: Key, name: str) -> None:
        self._objects[key].attributes.pop(name, None)

    def exists(self, key: Key) -> bool:
        return key in self._objects

    def scene_of(self, key: Key) -> Optional[str]:
        obj = self._objects.get(key)
        return obj.scene if obj else None

    # ========== SceneHost: SCOPE ==========

    def has_live_scope(self) -> bool:
        return self.active_scene is not None and self.active_scene in self.loaded_scenes

    def enumerate(self, kind: str) -> Iterable[Key]:
        return [key for key, obj in self._objects.items() if obj.kind == kind]

    def in_live_scope(self, key: Key) -> bool:
        obj = self._objects.get(key)
        return obj is not None and obj.scene is not None and obj.scene in self.loaded_scenes

    def kind_of(self, key: Key) -> Optional[str]:
        obj = self._objects.get(key)
        return obj.kind if obj else None

    def sort_key(self, key: Key) -> str:
        obj = self._objects.get(key)
        return obj.order if obj else str(key)

    # ========== SceneHost: ATTRIBUTES ==========

    def has_attribute(self, key: Key, name: str) -> bool:
        obj = self._objects.get(key)
        return obj is not None and name in obj.attributes

    def read(self, key: Key, name: str) -> Any:
        if (key, name) in self._unreadable:
            raise RuntimeError(f"Attribute {name!r} of {key!r} is not readable")
        return self._objects[key].attributes[name]

    def write(self, key: Key, name: str, value: Any) -> None:
        if key in self._rejected:
            raise HostWriteError(key, name, self._rejected[key])
        obj = self._objects.get(key)
        if obj is None:
            raise HostWriteError(key, name, "object no longer exists")
        obj.attributes[name] = value
        self.writes.append((key, name, value))

    # ========== SceneHost: IDENTITY ==========

    def volatile_id(self, key: Key) -> Optional[int]:
        obj = self._objects.get(key)
        return obj.volatile_id if obj else None

    def resolve_volatile(self, volatile_id: int) -> Optional[Key]:
        return self._by_volatile.get(volatile_id)

    def durable_id(self, key: Key) -> Optional[str]:
        obj = self._objects.get(key)
        return obj.guid if obj else None

    def resolve_durable(self, guid: str) -> Optional[Key]:
        return self._by_guid.get(guid)

    # ========== SceneHost: BATCHING ==========

    def begin_batch_edit(self) -> None:
        self.batch_depth += 1
        self.batch_acquisitions += 1

    def end_batch_edit(self) -> None:
        self.batch_depth -= 1
        self.batch_releases += 1

    def refresh(self, key: Key) -> None:
        self.refreshed.append(key)
