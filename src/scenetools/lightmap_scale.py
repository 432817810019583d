"""Scale-in-lightmap for every scene renderer, with session revert."""

from typing import Optional

from scenestate.engine import SSAREngine
from scenestate.host import SceneHost
from scenestate.interaction import Interaction
from scenestate.reports import ApplyReport, RestoreReport
from scenestate.snapshot_model import IdentityKind
from scenestate.snapshot_store import SnapshotStore
from scenetools import conventions as c
from scenetools.base import SceneTool


class LightmapScaleTool(SceneTool):

    TITLE = "Lightmap Scale Editor"

    def __init__(self, host: SceneHost, interaction: Optional[Interaction] = None):
        super().__init__(SSAREngine(
            host,
            interaction=interaction,
            snapshot_store=SnapshotStore(IdentityKind.VOLATILE, label="lightmap scale"),
        ))

    def apply_scale(self, scale: float) -> ApplyReport:
        renderers = self.scene_objects(c.RENDERER)
        candidates = self.engine.evaluate(renderers, c.SCALE_IN_LIGHTMAP, float(scale))
        return self.engine.apply(candidates, capture=renderers)

    def revert(self) -> RestoreReport:
        return self.engine.revert()

    def forget_baseline(self) -> None:
        self.engine.coordinator.forget_baseline()
