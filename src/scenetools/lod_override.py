"""
LOD scene override.

Forces a single LOD level on every LOD group in the loaded scenes: LOD groups
are disabled so the engine cannot auto-switch, and only the selected level's
renderers stay enabled. Revert restores the original group and renderer
enabled states from a session baseline keyed by instance ids.
"""

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional

from scenestate.engine import SSAREngine
from scenestate.errors import NoBaselineError
from scenestate.host import SceneHost
from scenestate.interaction import Interaction
from scenestate.reports import ApplyReport, RestoreReport
from scenestate.snapshot_model import IdentityKind, Key
from scenestate.snapshot_store import SnapshotStore
from scenetools import conventions as c
from scenetools.base import SceneTool

logger = logging.getLogger(__name__)


@dataclass
class LodApplyResult:
    lod_index: int
    report: ApplyReport = field(default_factory=ApplyReport)
    groups_missing_lod: int = 0


class LodOverrideTool(SceneTool):

    TITLE = "LOD Scene Override"

    def __init__(self, host: SceneHost, interaction: Optional[Interaction] = None):
        super().__init__(SSAREngine(
            host,
            interaction=interaction,
            snapshot_store=SnapshotStore(IdentityKind.VOLATILE, label="lod override"),
        ))
        self.lod_groups_enabled = True
        if host.has_live_scope():
            self.recompute_enabled_toggle()

    @property
    def has_snapshot(self) -> bool:
        return self.engine.coordinator.store.has_snapshot

    def find_lod_groups(self) -> List[Key]:
        return self.scene_objects(c.LOD_GROUP)

    def count_lod_groups(self) -> int:
        return len(self.find_lod_groups())

    def lod_levels(self, group: Key) -> List[List[Key]]:
        """Renderers per LOD level, skipping renderers that no longer exist."""
        levels = []
        for renderers in self.read(group, c.LODS) or []:
            levels.append([r for r in renderers or [] if r is not None and self.host.kind_of(r) is not None])
        return levels

    def recompute_enabled_toggle(self) -> bool:
        """True when every LOD group is enabled (or there are none)."""
        groups = self.find_lod_groups()
        self.lod_groups_enabled = all(self.read(g, c.ENABLED, True) for g in groups)
        return self.lod_groups_enabled

    def set_all_lod_groups_enabled(self, enabled: bool) -> ApplyReport:
        groups = self.find_lod_groups()
        candidates = self.engine.evaluate(groups, c.ENABLED, enabled)
        report = self.engine.apply(candidates)
        self.lod_groups_enabled = enabled
        return report

    def _baseline_keys(self, groups: List[Key]) -> List[Key]:
        keys = list(groups)
        for group in groups:
            for renderers in self.lod_levels(group):
                keys.extend(renderers)
        return keys

    def _renderer_proposals(self, groups: List[Key], lod_index: int, result: LodApplyResult) -> Dict[Key, bool]:
        follow_selected = self.config.shared_renderer_follows_selected_lod
        proposals: Dict[Key, bool] = {}

        for group in groups:
            levels = self.lod_levels(group)
            if lod_index < 0 or lod_index >= len(levels):
                result.groups_missing_lod += 1
                if not self.config.missing_lod_disables_renderers:
                    continue
                for renderers in levels:
                    for renderer in renderers:
                        proposals.setdefault(renderer, False)
                continue

            for level, renderers in enumerate(levels):
                should_enable = level == lod_index
                for renderer in renderers:
                    if follow_selected:
                        proposals[renderer] = proposals.get(renderer, False) or should_enable
                    else:
                        proposals[renderer] = should_enable
        return proposals

    def apply_selected_lod(self, lod_index: int) -> LodApplyResult:
        """Capture the baseline if needed, then force ``lod_index`` on every group."""
        result = LodApplyResult(lod_index=lod_index)
        groups = self.find_lod_groups()
        if not groups:
            return result

        self.engine.coordinator.capture_if_absent(self._baseline_keys(groups), (c.ENABLED,))

        proposals = self._renderer_proposals(groups, lod_index, result)
        candidates = self.engine.evaluate(groups, c.ENABLED, False)
        candidates += self.engine.evaluate(list(proposals), c.ENABLED,
                                           propose=lambda key, current: proposals[key])
        result.report = self.engine.apply(candidates)

        self.lod_groups_enabled = False
        if result.groups_missing_lod:
            logger.warning(f"LOD Scene Override: {result.groups_missing_lod} LODGroup(s) did not have "
                           f"LOD{lod_index}. Their LOD renderers were "
                           f"{'disabled' if self.config.missing_lod_disables_renderers else 'left unchanged'}.")
        return result

    def revert(self) -> Optional[RestoreReport]:
        """Restore the baseline. Returns None when no baseline exists yet."""
        try:
            report = self.engine.revert(progress=self.progress("Reverting"))
        except NoBaselineError:
            self.notify("No snapshot exists yet. Click 'Apply Selected LOD' (or 'Forget Snapshot') "
                        "to capture a baseline first.")
            return None
        self.recompute_enabled_toggle()
        return report

    def forget_snapshot(self) -> None:
        """Make the current scene state the new revert baseline."""
        groups = self.find_lod_groups()
        self.engine.coordinator.recapture(self._baseline_keys(groups), (c.ENABLED,))
        self.notify("Snapshot reset. Revert baseline updated to current scene state.")
