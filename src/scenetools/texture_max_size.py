"""
Texture max size reduction for textures used by the active scene.

Textures are found through scene renderers' materials. The importer max size
of each texture above the target is lowered; the original value is written to
a durable backup first, so "Restore Original" works in a later session.
"""

import logging
from os import PathLike
from typing import List, Optional, Union

from scenestate.backup_store import BackupStore
from scenestate.engine import SSAREngine
from scenestate.host import SceneHost
from scenestate.interaction import Interaction
from scenestate.reports import ApplyReport, Candidate, RestoreReport
from scenestate.scanner import at_least, exceeds
from scenetools import conventions as c
from scenetools.base import SceneTool

logger = logging.getLogger(__name__)


class TextureMaxSizeTool(SceneTool):

    TITLE = "Texture Max Size"

    def __init__(
        self,
        host: SceneHost,
        interaction: Optional[Interaction] = None,
        *,
        backup_path: Union[str, PathLike, None] = None,
        target_size: Optional[int] = None,
        include_equal: bool = False,
    ):
        config = self.config
        backups = BackupStore.open(c.MAX_TEXTURE_SIZE, backup_path or config.backup_path)
        super().__init__(SSAREngine(host, interaction=interaction, backup_store=backups))
        self.target_size = config.validate_texture_size(target_size or config.default_texture_size)
        self.include_equal = include_equal
        self.candidates: List[Candidate] = []

    @property
    def backups(self) -> BackupStore:
        return self.engine.backups

    @property
    def backup_count(self) -> int:
        return len(self.backups)

    @property
    def will_change_count(self) -> int:
        return sum(1 for candidate in self.candidates if candidate.will_change)

    def set_target_size(self, size: int) -> None:
        self.target_size = self.config.validate_texture_size(size)

    def _predicate(self):
        return at_least if self.include_equal else exceeds

    def scan(self) -> List[Candidate]:
        """Preview every unique texture in the scene; non-importable ones are listed as not applicable."""
        renderers = self.scene_objects(c.RENDERER)
        textures = self.textures_of(self.materials_of(renderers))

        keys = []
        for texture in textures:
            importer = self.importer_at(self.asset_path_of(texture), c.TEXTURE_IMPORTER)
            keys.append(importer if importer is not None else texture)

        self.candidates = self.engine.evaluate(keys, c.MAX_TEXTURE_SIZE, self.target_size,
                                               predicate=self._predicate())
        logger.info(f"[{self.TITLE}] Scan complete. Found {len(self.candidates)} unique textures in scene, "
                    f"{self.will_change_count} will change.")
        return self.candidates

    def apply(self) -> Optional[ApplyReport]:
        if not self.candidates:
            self.notify("Nothing to apply. Scan the scene first.")
            return None

        to_change = [candidate for candidate in self.candidates if candidate.will_change]
        if not to_change:
            self.notify("No textures need changing for the selected target size.")
            return None

        if not self.confirm(f"This will set importer Max Size to {self.target_size} for {len(to_change)} "
                            f"texture(s).\n\nA backup of original Max Size values will be saved so you "
                            f"can restore later.\n\nContinue?"):
            return None

        report = self.engine.apply(to_change, self.target_size, predicate=self._predicate(),
                                   backup=True, progress=self.progress("Applying"))
        self.engine.summarize(self.TITLE, report)
        self.scan()
        return report

    def restore(self) -> Optional[RestoreReport]:
        if not self.backup_count:
            self.notify("No backup entries found. Apply changes first (or you already cleared the backup).")
            return None

        if not self.confirm(f"This will restore importer Max Size for {self.backup_count} texture(s) "
                            f"from the saved backup.\n\nContinue?"):
            return None

        report = self.engine.restore_backups(progress=self.progress("Restoring"))
        self.engine.summarize(self.TITLE, report)
        if self.host.has_live_scope():
            self.scan()
        return report

    def clear_backup(self) -> bool:
        if not self.backup_count:
            return False
        if not self.confirm("This removes the saved original max sizes. This cannot be undone.\n\nContinue?"):
            return False
        self.backups.clear()
        return True
