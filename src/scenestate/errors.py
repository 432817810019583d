"""
Error taxonomy for scene mutation operations.

Only precondition failures are raised to the caller. Per-object problems
(not applicable, stale, unresolvable, rejected writes) are counted in the
operation reports instead, so a single bad object never aborts a batch.
"""


class SceneStateError(Exception):
    """Base class for all scenestate errors."""


class ScopeUnavailableError(SceneStateError):
    """No live scope (e.g. no active loaded scene). Fatal before any work starts."""


class NoBaselineError(SceneStateError):
    """Revert was requested but no baseline snapshot has been captured."""


class HostWriteError(SceneStateError):
    """The host rejected a mutation of a single object attribute."""

    def __init__(self, key, attribute: str, reason: str = ""):
        self.key = key
        self.attribute = attribute
        self.reason = reason
        super().__init__(f"Cannot write {attribute!r} on {key!r}: {reason}" if reason
                         else f"Cannot write {attribute!r} on {key!r}")


class VolatileIdentityError(SceneStateError):
    """Attempt to persist a snapshot keyed by session-only identities."""
