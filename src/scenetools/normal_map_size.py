"""
Normal map size reduction.

Only importers whose texture type is the normal-map type are considered.
Never upscales: the default max size and every overridden platform max size
above the target are lowered, and each asset is reimported once.
"""

import logging
from typing import List, Optional

from scenestate.engine import SSAREngine
from scenestate.host import SceneHost
from scenestate.interaction import Interaction
from scenestate.reports import ApplyReport, Candidate
from scenestate.scanner import exceeds
from scenestate.snapshot_model import Key
from scenetools import conventions as c
from scenetools.base import SceneTool

logger = logging.getLogger(__name__)


class NormalMapSizeTool(SceneTool):

    TITLE = "Reduce Scene Normal Map Size"

    def __init__(self, host: SceneHost, interaction: Optional[Interaction] = None,
                 target_size: Optional[int] = None):
        super().__init__(SSAREngine(host, interaction=interaction))
        self.target_size = self.config.validate_texture_size(target_size or self.config.default_texture_size)
        self.normals_found: List[Key] = []
        self.candidates: List[Candidate] = []

    @property
    def normals_needing_change(self) -> List[Key]:
        return list(dict.fromkeys(cand.object_key for cand in self.candidates if cand.will_change))

    def size_attributes(self) -> List[str]:
        return [c.MAX_TEXTURE_SIZE] + [c.platform_max_size(p) for p in self.config.known_platforms]

    def refresh_list(self) -> List[Key]:
        """Find scene normal maps and the size attributes that exceed the target."""
        renderers = self.scene_objects(c.RENDERER)
        textures = self.textures_of(self.materials_of(renderers))

        importers = []
        for texture in textures:
            importer = self.importer_at(self.asset_path_of(texture), c.TEXTURE_IMPORTER)
            if importer is None:
                continue
            if self.read(importer, c.TEXTURE_TYPE) != self.config.normal_map_texture_type:
                continue
            importers.append(importer)
        self.normals_found = list(dict.fromkeys(importers))

        candidates: List[Candidate] = []
        for attribute in self.size_attributes():
            candidates += [
                candidate
                for candidate in self.engine.evaluate(self.normals_found, attribute, self.target_size,
                                                      predicate=exceeds)
                if candidate.applicable
            ]
        candidates.sort(key=lambda cand: (cand.sort_key.casefold(), str(cand.object_key), cand.attribute))
        self.candidates = candidates
        return self.normals_needing_change

    def process(self) -> Optional[ApplyReport]:
        needing = self.normals_needing_change
        if not needing:
            return None
        if not self.confirm(f"This will reduce up to {len(needing)} normal map(s) to {self.target_size} "
                            f"Max Size (never upscales).\n\nContinue?"):
            return None

        report = self.engine.apply([cand for cand in self.candidates if cand.will_change], self.target_size,
                                   predicate=exceeds, progress=self.progress())
        if report.failed:
            logger.warning(f"[{self.TITLE}] Completed with failures. Failed: {report.failed}")
            for key, attribute, message in report.failures:
                logger.warning(f"[{self.TITLE}] Failed: {key} ({attribute}): {message}")

        self.notify(f"Done.\nChanged: {len(report.changed_keys)}\nFailed: {report.failed}")
        self.refresh_list()
        return report
