"""
Applier: writes confirmed candidates inside a single batch edit.

Every candidate is re-validated against the live value right before the
write, because the user may have changed things between scan and apply.
A rejected write is recorded and the batch continues; each changed object is
refreshed exactly once after the batch, however many attributes changed.
"""

import logging
from typing import Any, Callable, Iterable, Optional

from scenestate.host import SceneHost
from scenestate.interaction import ProgressCallback
from scenestate.reports import ApplyReport, Candidate, SkipReason
from scenestate.scanner import Predicate

logger = logging.getLogger(__name__)

UNSET = object()

BeforeWrite = Callable[[Candidate, Any], None]


class Applier:

    def __init__(self, host: SceneHost):
        self.host = host

    def apply(
        self,
        candidates: Iterable[Candidate],
        target_value: Any = UNSET,
        *,
        predicate: Optional[Predicate] = None,
        before_write: Optional[BeforeWrite] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ApplyReport:
        """Apply candidates.

        Args:
            candidates: Candidates from a scan.
            target_value: Value to write to every candidate. Defaults to each
                candidate's proposed value.
            predicate: Re-checked as ``predicate(current, target)`` at write
                time; a candidate that no longer qualifies is skipped as stale.
            before_write: Called as ``before_write(candidate, current)`` right
                before the write (e.g. to back up the original value).
            progress: ``(index, total, label)`` callback; True stops before
                the next candidate. Writes already done are kept.
        """
        report = ApplyReport()
        candidates = list(candidates)
        total = len(candidates)

        with self.host.batch_edit():
            for index, candidate in enumerate(candidates):
                if progress is not None and progress(index, total, str(candidate.object_key)):
                    report.cancelled = True
                    logger.info(f"APPLY: Cancelled at {index}/{total}")
                    break

                if not candidate.will_change:
                    report.record_skip(SkipReason.NOT_APPLICABLE if not candidate.applicable
                                       else SkipReason.NO_CHANGE)
                    continue

                key = candidate.object_key
                target = candidate.proposed_value if target_value is UNSET else target_value

                if self.host.kind_of(key) is None or not self.host.has_attribute(key, candidate.attribute):
                    report.record_skip(SkipReason.NOT_APPLICABLE)
                    continue

                try:
                    current = self.host.read(key, candidate.attribute)
                    if current == target:
                        report.record_skip(SkipReason.ALREADY_AT_TARGET)
                        continue
                    if predicate is not None and not predicate(current, target):
                        report.record_skip(SkipReason.STALE_CANDIDATE)
                        continue

                    if before_write is not None:
                        before_write(candidate, current)
                    self.host.write(key, candidate.attribute, target)
                except Exception as e:
                    report.record_failure(key, candidate.attribute, str(e))
                    logger.warning(f"APPLY: Failed writing {candidate.attribute!r} on {key!r}: {e}")
                    continue

                report.record_change(key)

        for key in report.changed_keys:
            try:
                self.host.refresh(key)
            except Exception as e:
                logger.warning(f"APPLY: Refresh of {key!r} failed: {e}")

        logger.info(f"APPLY: changed={report.changed} skipped={report.skipped} failed={report.failed}")
        return report
