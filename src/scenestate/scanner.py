"""
Scanner: turns host objects into sorted, side-effect free candidate lists.

Host enumeration by kind may return library assets as well as scene
instances. Scope membership, not type, decides what is scanned: only objects
the host reports as instantiated in the live scope are kept.
"""

from dataclasses import dataclass
import logging
from typing import Any, Callable, Iterable, List, Optional

from scenestate.host import SceneHost
from scenestate.interaction import ProgressCallback
from scenestate.reports import Candidate
from scenestate.snapshot_model import Key

logger = logging.getLogger(__name__)

Predicate = Callable[[Any, Any], bool]
Proposer = Callable[[Key, Any], Any]


def differs(current: Any, proposed: Any) -> bool:
    return current != proposed


def exceeds(current: Any, proposed: Any) -> bool:
    """Only reduce: change when current is strictly above the proposed value."""
    return current is not None and current > proposed


def at_least(current: Any, proposed: Any) -> bool:
    return current is not None and current >= proposed


@dataclass(frozen=True)
class Scope:
    """A kind of host object restricted to the live scope."""
    kind: str


class Scanner:

    def __init__(self, host: SceneHost):
        self.host = host

    def collect(self, scope: Scope) -> List[Key]:
        """Live-scope keys of the scope's kind, in stable order."""
        keys = [key for key in self.host.enumerate(scope.kind) if self.host.in_live_scope(key)]
        return sorted(keys, key=lambda k: (self.host.sort_key(k).casefold(), str(k)))

    def scan(
        self,
        scope: Scope,
        attribute: str,
        target: Any = None,
        *,
        propose: Optional[Proposer] = None,
        predicate: Optional[Predicate] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> List[Candidate]:
        return self.evaluate(self.collect(scope), attribute, target,
                             propose=propose, predicate=predicate, progress=progress)

    def evaluate(
        self,
        keys: Iterable[Key],
        attribute: str,
        target: Any = None,
        *,
        propose: Optional[Proposer] = None,
        predicate: Optional[Predicate] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> List[Candidate]:
        """Compute candidates for already-collected keys.

        Args:
            keys: Objects to evaluate. Duplicates are evaluated once.
            attribute: Attribute to compare and later write.
            target: Proposed value for every object, unless ``propose`` is given.
            propose: ``propose(key, current)`` computing a per-object value.
            predicate: ``predicate(current, proposed)`` deciding will_change.
            progress: ``(index, total, label)`` callback; True stops the scan.
        """
        predicate = predicate or differs
        unique = list(dict.fromkeys(keys))
        total = len(unique)
        candidates: List[Candidate] = []

        for index, key in enumerate(unique):
            if progress is not None and progress(index, total, str(key)):
                logger.info(f"SCAN: Cancelled at {index}/{total}")
                break

            sort_key = self.host.sort_key(key)
            not_applicable = Candidate(
                object_key=key, attribute=attribute, current_value=None,
                proposed_value=None, will_change=False, sort_key=sort_key, applicable=False,
            )
            if not self.host.has_attribute(key, attribute):
                candidates.append(not_applicable)
                continue

            try:
                current = self.host.read(key, attribute)
            except Exception as e:
                logger.warning(f"SCAN: Cannot read {attribute!r} of {key!r}: {e}")
                candidates.append(not_applicable)
                continue

            proposed = propose(key, current) if propose is not None else target
            candidates.append(Candidate(
                object_key=key,
                attribute=attribute,
                current_value=current,
                proposed_value=proposed,
                will_change=bool(predicate(current, proposed)),
                sort_key=sort_key,
            ))

        candidates.sort(key=lambda c: (c.sort_key.casefold(), str(c.object_key), c.attribute))
        logger.debug(f"SCAN: '{attribute}' over {total} object(s), "
                     f"{sum(c.will_change for c in candidates)} will change")
        return candidates
