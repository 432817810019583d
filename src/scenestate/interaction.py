"""
User interaction primitives: confirmation dialogs, notifications and a
cancelable progress indicator.

Operations never talk to a UI directly; they receive an Interaction and a
progress callback with the signature ``(index, total, label) -> bool`` where
returning True requests cancellation before the next item.
"""

from abc import ABC, abstractmethod
import logging
from typing import Callable, List, Optional, Tuple

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], Optional[bool]]


class Interaction(ABC):

    @abstractmethod
    def confirm(self, title: str, message: str) -> bool:
        """Ask the user to confirm an operation."""

    @abstractmethod
    def notify(self, title: str, message: str) -> None:
        """Show a single message."""

    @abstractmethod
    def progress(self, title: str, info: str, fraction: float) -> bool:
        """Update the progress indicator. Returns True if the user cancelled."""

    @abstractmethod
    def clear_progress(self) -> None:
        """Hide the progress indicator."""


class HeadlessInteraction(Interaction):
    """Interaction for scripts and tests: answers confirmations with a fixed
    value and logs everything else.
    """

    def __init__(self, auto_confirm: bool = True, cancel_after: Optional[int] = None):
        self.auto_confirm = auto_confirm
        self.cancel_after = cancel_after
        self.confirmations: List[Tuple[str, str]] = []
        self.notifications: List[Tuple[str, str]] = []
        self.progress_updates = 0

    def confirm(self, title: str, message: str) -> bool:
        self.confirmations.append((title, message))
        logger.debug(f"CONFIRM: {title}: {message} -> {self.auto_confirm}")
        return self.auto_confirm

    def notify(self, title: str, message: str) -> None:
        self.notifications.append((title, message))
        logger.info(f"{title}: {message}")

    def progress(self, title: str, info: str, fraction: float) -> bool:
        self.progress_updates += 1
        return self.cancel_after is not None and self.progress_updates > self.cancel_after

    def clear_progress(self) -> None:
        pass


def progress_reporter(interaction: Optional[Interaction], title: str) -> Optional[ProgressCallback]:
    """Adapt an Interaction's progress bar to the ``(index, total, label)`` callback."""
    if interaction is None:
        return None

    def report(index: int, total: int, label: str) -> bool:
        fraction = (index + 1) / total if total else 1.0
        return bool(interaction.progress(title, f"{label} ({index + 1}/{total})", fraction))

    return report
