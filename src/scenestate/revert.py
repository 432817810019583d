"""
Revert coordinator.

States:
    NO_BASELINE  --capture_if_absent-->  BASELINE_CAPTURED
    BASELINE_CAPTURED  --forget_baseline-->  NO_BASELINE

"Applied" and "reverted" are not stored states. They are observations
computed from the diff between the live values and the baseline. revert()
never clears the baseline, so it can be repeated and is idempotent.
"""

from enum import Enum
import logging
from typing import Callable, Iterable, List, Optional, Sequence

from scenestate.errors import NoBaselineError
from scenestate.host import SceneHost
from scenestate.interaction import ProgressCallback
from scenestate.reports import RestoreReport
from scenestate.snapshot_model import Key, SnapshotSet
from scenestate.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


class RevertState(Enum):
    NO_BASELINE = "no baseline"
    BASELINE_CAPTURED = "baseline captured"


class Observation(Enum):
    NO_BASELINE = "no baseline"
    APPLIED = "applied"
    REVERTED = "reverted"


class RevertCoordinator:
    """Owns the baseline lifecycle of one SnapshotStore."""

    def __init__(self, host: SceneHost, store: Optional[SnapshotStore] = None):
        self.host = host
        self.store = store if store is not None else SnapshotStore()
        self._on_state_changed_callbacks: List[Callable[[RevertState], None]] = []

    @property
    def state(self) -> RevertState:
        return RevertState.BASELINE_CAPTURED if self.store.has_snapshot else RevertState.NO_BASELINE

    def add_state_changed_callback(self, callback: Callable[[RevertState], None]) -> None:
        """Subscribe to baseline capture/forget events."""
        if callback not in self._on_state_changed_callbacks:
            self._on_state_changed_callbacks.append(callback)

    def remove_state_changed_callback(self, callback: Callable[[RevertState], None]) -> None:
        if callback in self._on_state_changed_callbacks:
            self._on_state_changed_callbacks.remove(callback)

    def _fire_state_changed(self) -> None:
        state = self.state
        for callback in self._on_state_changed_callbacks:
            try:
                callback(state)
            except Exception as e:
                logger.warning(f"Error in state_changed callback: {e}")

    def capture_if_absent(self, keys: Iterable[Key], attributes: Sequence[str]) -> SnapshotSet:
        had_snapshot = self.store.has_snapshot
        baseline = self.store.capture_if_absent(self.host, keys, attributes)
        if not had_snapshot:
            self._fire_state_changed()
        return baseline

    def forget_baseline(self) -> None:
        had_snapshot = self.store.has_snapshot
        self.store.forget_baseline()
        if had_snapshot:
            self._fire_state_changed()

    def recapture(self, keys: Iterable[Key], attributes: Sequence[str]) -> SnapshotSet:
        """Make the current state the new revert baseline."""
        self.forget_baseline()
        return self.capture_if_absent(keys, attributes)

    def revert(self, progress: Optional[ProgressCallback] = None) -> RestoreReport:
        if not self.store.has_snapshot:
            raise NoBaselineError("No baseline captured yet; apply once or recapture first")
        return self.store.restore(self.host, progress=progress)

    def observe(self) -> Observation:
        """Compare live values against the baseline.

        Objects that no longer resolve or cannot be read are ignored.
        """
        baseline = self.store.baseline
        if baseline is None:
            return Observation.NO_BASELINE

        for entry in baseline.entries:
            key = self.host.resolve(entry.object_id, baseline.identity)
            if key is None or not self.host.has_attribute(key, entry.attribute):
                continue
            try:
                current = self.host.read(key, entry.attribute)
            except Exception as e:
                logger.warning(f"REVERT: Cannot read {entry.attribute!r} of {key!r}: {e}")
                continue
            if current != entry.value:
                return Observation.APPLIED
        return Observation.REVERTED
