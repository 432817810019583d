"""
Secondary UV (lightmap UV) generation for models used by the active scene.

If any mesh of a model asset lacks a usable UV2 channel, generation is turned
on for that model's importer. Meshes whose importer already generates UV2 are
not inspected.
"""

from dataclasses import dataclass, field
import logging
from typing import List, Optional

from scenestate.engine import SSAREngine
from scenestate.host import SceneHost
from scenestate.interaction import Interaction
from scenestate.reports import SkipReason
from scenestate.snapshot_model import Key
from scenetools import conventions as c
from scenetools.base import SceneTool

logger = logging.getLogger(__name__)


@dataclass
class UvGenerationStats:
    unique_meshes: int = 0
    meshes_with_uv2: int = 0
    meshes_missing_uv2: int = 0
    uv_read_errors: int = 0
    skipped_no_path: int = 0
    skipped_not_model_importer: int = 0
    paths_needing_uv2: List[str] = field(default_factory=list)
    changed_importers: int = 0
    already_enabled_importers: int = 0
    failed_importers: int = 0

    def summary(self) -> str:
        return (f"Unique meshes scanned: {self.unique_meshes}\n"
                f"Meshes already with UV2 (or importer already enabled): {self.meshes_with_uv2}\n"
                f"Meshes missing UV2: {self.meshes_missing_uv2}\n"
                f"UV read errors (treated as missing): {self.uv_read_errors}\n\n"
                f"Model assets needing UV2 generation: {len(self.paths_needing_uv2)}\n"
                f"Model importers changed: {self.changed_importers}\n"
                f"Model importers already enabled: {self.already_enabled_importers}\n"
                f"Model importers failed: {self.failed_importers}\n\n"
                f"Skipped (no asset path): {self.skipped_no_path}\n"
                f"Skipped (not a model importer): {self.skipped_not_model_importer}")


class SecondaryUvTool(SceneTool):

    TITLE = "Generate Scene UV Lightmaps"

    def __init__(self, host: SceneHost, interaction: Optional[Interaction] = None):
        super().__init__(SSAREngine(host, interaction=interaction))

    def mesh_has_uv2(self, mesh: Key) -> bool:
        """UV2 exists and matches the vertex count. Raises when the mesh is unreadable."""
        vertex_count = self.host.read(mesh, c.VERTEX_COUNT)
        uv2_count = self.host.read(mesh, c.UV2_COUNT)
        return vertex_count > 0 and uv2_count == vertex_count

    def scan(self) -> UvGenerationStats:
        stats = UvGenerationStats()
        meshes = list(dict.fromkeys(mesh for _, _, mesh in self.scene_meshes()))
        stats.unique_meshes = len(meshes)
        progress = self.progress("Scanning UV2 on meshes")
        needing = set()

        for index, mesh in enumerate(meshes):
            if progress is not None and progress(index, len(meshes), str(mesh)):
                break

            path = self.asset_path_of(mesh)
            if path is None:
                stats.skipped_no_path += 1
                continue
            importer = self.importer_at(path, c.MODEL_IMPORTER)
            if importer is None:
                stats.skipped_not_model_importer += 1
                continue

            if self.read(importer, c.GENERATE_SECONDARY_UV, False):
                stats.meshes_with_uv2 += 1
                continue

            try:
                has_uv2 = self.mesh_has_uv2(mesh)
            except Exception as e:
                logger.debug(f"[{self.TITLE}] UV read failed for {mesh!r}: {e}")
                stats.uv_read_errors += 1
                has_uv2 = False

            if has_uv2:
                stats.meshes_with_uv2 += 1
            else:
                stats.meshes_missing_uv2 += 1
                needing.add(path)

        stats.paths_needing_uv2 = sorted(needing, key=str.casefold)
        return stats

    def run(self) -> UvGenerationStats:
        stats = self.scan()
        if stats.unique_meshes == 0:
            self.notify("No MeshFilter or SkinnedMeshRenderer meshes found in the current scene hierarchy.")
            return stats
        if not stats.paths_needing_uv2:
            self.notify(f"No changes needed.\n\n{stats.summary()}")
            return stats

        candidates = self.engine.evaluate(stats.paths_needing_uv2, c.GENERATE_SECONDARY_UV, True)
        report = self.engine.apply(candidates, progress=self.progress("Enabling Generate Secondary UVs"))
        stats.changed_importers = report.changed
        stats.already_enabled_importers = (report.skip_reasons[SkipReason.ALREADY_AT_TARGET]
                                           + report.skip_reasons[SkipReason.NO_CHANGE])
        stats.failed_importers = report.failed

        self.notify(f"Completed.\n\n{stats.summary()}")
        logger.info(f"[{self.TITLE}] finished. Meshes={stats.unique_meshes}, "
                    f"WithUv2OrImporterOn={stats.meshes_with_uv2}, MissingUv2={stats.meshes_missing_uv2}, "
                    f"UvReadErrors={stats.uv_read_errors}, AssetsToReimport={len(stats.paths_needing_uv2)}, "
                    f"ChangedImporters={stats.changed_importers}")
        return stats
