"""
Scan candidates and end-of-operation reports.

Candidates are derived fresh on every scan and never persisted. Reports carry
every count an operation produced so a caller can surface a single summary.
"""

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Tuple

from scenestate.snapshot_model import Key


class SkipReason(Enum):
    """Why the applier left a candidate untouched."""
    NOT_APPLICABLE = "not applicable"
    NO_CHANGE = "no change"
    ALREADY_AT_TARGET = "already at target"
    STALE_CANDIDATE = "stale candidate"


@dataclass(frozen=True)
class Candidate:
    """A proposed mutation of one attribute of one object."""
    object_key: Key
    attribute: str
    current_value: Any
    proposed_value: Any
    will_change: bool
    sort_key: str = ""
    applicable: bool = True


@dataclass
class ApplyReport:
    changed: int = 0
    skipped: int = 0
    failed: int = 0
    skip_reasons: Counter = field(default_factory=Counter)
    failures: List[Tuple[Key, str, str]] = field(default_factory=list)
    changed_keys: List[Key] = field(default_factory=list)
    cancelled: bool = False

    def record_skip(self, reason: SkipReason) -> None:
        self.skipped += 1
        self.skip_reasons[reason] += 1

    def record_failure(self, key: Key, attribute: str, message: str) -> None:
        self.failed += 1
        self.failures.append((key, attribute, message))

    def record_change(self, key: Key) -> None:
        self.changed += 1
        if key not in self.changed_keys:
            self.changed_keys.append(key)

    def summary(self) -> str:
        text = f"Changed: {self.changed}\nSkipped: {self.skipped}\nFailed: {self.failed}"
        if self.skip_reasons:
            details = ", ".join(f"{reason.value}={count}" for reason, count in self.skip_reasons.items())
            text += f"\nSkip reasons: {details}"
        if self.cancelled:
            text += "\nCancelled before completion."
        return text


@dataclass
class RestoreReport:
    restored_count: int = 0
    missing_count: int = 0
    failed_count: int = 0
    cancelled: bool = False

    def summary(self) -> str:
        text = (f"Restored: {self.restored_count}\nMissing/unrestorable: {self.missing_count}"
                f"\nFailed: {self.failed_count}")
        if self.cancelled:
            text += "\nCancelled before completion."
        return text
