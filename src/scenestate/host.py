"""
Host capability interface.

The host engine owns every object; scenestate only holds opaque keys and
resolves them through this interface at the moment of use. A host object may
be destroyed or recreated between two calls, so no reference is kept across
a scan/apply boundary.

Two identity spaces are exposed, each queryable in both directions:

    volatile_id(key) <-> resolve_volatile(id)     session-only instance ids
    durable_id(key)  <-> resolve_durable(guid)    persisted guids

Attribute access is capability-checked: callers ask has_attribute() before
read()/write(), and treat a missing attribute as "not applicable".
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Generator, Iterable, Optional

from scenestate.snapshot_model import IdentityKind, Key


class SceneHost(ABC):
    """Abstract host: scene enumeration, attribute access, identity and batching."""

    # ========== SCOPE ==========

    @abstractmethod
    def has_live_scope(self) -> bool:
        """True when there is an active, loaded scope to operate on."""

    @abstractmethod
    def enumerate(self, kind: str) -> Iterable[Key]:
        """All objects of a kind, including library assets outside the live scope."""

    @abstractmethod
    def in_live_scope(self, key: Key) -> bool:
        """True only for objects instantiated in the live scope (not assets on disk)."""

    @abstractmethod
    def kind_of(self, key: Key) -> Optional[str]:
        """Kind of the object, or None when the key no longer resolves."""

    def sort_key(self, key: Key) -> str:
        """Stable ordering key (asset path or hierarchy position)."""
        return str(key)

    # ========== ATTRIBUTES ==========

    @abstractmethod
    def has_attribute(self, key: Key, name: str) -> bool:
        """Whether the object exposes the attribute."""

    @abstractmethod
    def read(self, key: Key, name: str) -> Any:
        """Read an attribute. Only called after has_attribute()."""

    @abstractmethod
    def write(self, key: Key, name: str, value: Any) -> None:
        """Write an attribute. Raises when the host rejects the mutation."""

    # ========== IDENTITY ==========

    @abstractmethod
    def volatile_id(self, key: Key) -> Optional[int]:
        """Session-only identity of the object."""

    @abstractmethod
    def resolve_volatile(self, volatile_id: int) -> Optional[Key]:
        """Object key for a session-only identity, or None if gone."""

    @abstractmethod
    def durable_id(self, key: Key) -> Optional[str]:
        """Persistent identity of the object, or None for objects without one."""

    @abstractmethod
    def resolve_durable(self, guid: str) -> Optional[Key]:
        """Object key for a persistent identity, or None if gone."""

    def identity_of(self, key: Key, identity: IdentityKind) -> Optional[Key]:
        if identity is IdentityKind.VOLATILE:
            return self.volatile_id(key)
        return self.durable_id(key)

    def resolve(self, object_id: Key, identity: IdentityKind) -> Optional[Key]:
        if identity is IdentityKind.VOLATILE:
            return self.resolve_volatile(object_id)
        return self.resolve_durable(object_id)

    # ========== BATCHING ==========

    @abstractmethod
    def begin_batch_edit(self) -> None:
        """Suspend per-object reimport/refresh until end_batch_edit()."""

    @abstractmethod
    def end_batch_edit(self) -> None:
        """Resume reimport/refresh."""

    @contextmanager
    def batch_edit(self) -> Generator[None, None, None]:
        """Acquire the batch scope once and release it exactly once, even on error."""
        self.begin_batch_edit()
        try:
            yield
        finally:
            self.end_batch_edit()

    @abstractmethod
    def refresh(self, key: Key) -> None:
        """Reimport / mark dirty a changed object."""
