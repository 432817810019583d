"""
Shared plumbing for scene tools.

A tool is a thin service over an SSAREngine: it knows which host objects and
attributes matter for its job, and delegates scanning, snapshots, writes and
reverts to the engine. Traversal helpers here never mutate the host.
"""

from typing import Any, Iterable, List, Optional, Tuple

from scenestate.config import SceneStateConfig, get_current_config
from scenestate.engine import SSAREngine
from scenestate.host import SceneHost
from scenestate.interaction import ProgressCallback, progress_reporter
from scenestate.scanner import Scope
from scenestate.snapshot_model import Key
from scenetools import conventions as c


class SceneTool:
    """Base class: engine access, current config and scene traversal."""

    TITLE = "Scene Tool"

    def __init__(self, engine: SSAREngine):
        self.engine = engine

    @property
    def host(self) -> SceneHost:
        return self.engine.host

    @property
    def config(self) -> SceneStateConfig:
        return get_current_config()

    def progress(self, title: Optional[str] = None) -> Optional[ProgressCallback]:
        return progress_reporter(self.engine.interaction, title or self.TITLE)

    def notify(self, message: str) -> None:
        self.engine.interaction.notify(self.TITLE, message)

    def confirm(self, message: str) -> bool:
        return self.engine.interaction.confirm(self.TITLE, message)

    # ========== TRAVERSAL ==========

    def read(self, key: Key, name: str, default: Any = None) -> Any:
        """Capability-checked read: ``default`` when the object lacks the attribute."""
        if key is None or not self.host.has_attribute(key, name):
            return default
        return self.host.read(key, name)

    def scene_objects(self, kind: str) -> List[Key]:
        """Live-scope objects of a kind; raises ScopeUnavailableError without a scene."""
        return self.engine.collect(Scope(kind))

    def asset_path_of(self, key: Key) -> Optional[str]:
        path = self.read(key, c.ASSET_PATH)
        return path if path and str(path).strip() else None

    def importer_at(self, path: Optional[str], kind: str) -> Optional[str]:
        """Importer key for an asset path when the importer is of the given kind."""
        if not path or self.host.kind_of(path) != kind:
            return None
        return path

    def materials_of(self, renderers: Iterable[Key]) -> List[Key]:
        """Unique materials referenced by the renderers, first-seen order."""
        materials = []
        for renderer in renderers:
            for material in self.read(renderer, c.SHARED_MATERIALS) or []:
                if material is not None and self.host.kind_of(material) is not None:
                    materials.append(material)
        return list(dict.fromkeys(materials))

    def textures_of(self, materials: Iterable[Key]) -> List[Key]:
        """Unique textures assigned to any texture property of the materials, sorted."""
        textures = []
        for material in materials:
            for texture in (self.read(material, c.TEXTURE_PROPERTIES) or {}).values():
                if texture is not None and self.host.kind_of(texture) is not None:
                    textures.append(texture)
        return sorted(dict.fromkeys(textures), key=lambda k: (self.host.sort_key(k).casefold(), str(k)))

    def scene_meshes(self) -> List[Tuple[Key, str, Key]]:
        """``(component, kind, mesh)`` for every mesh filter and skinned renderer in scope."""
        references = []
        for kind in (c.MESH_FILTER, c.SKINNED_MESH_RENDERER):
            for component in self.scene_objects(kind):
                mesh = self.read(component, c.SHARED_MESH)
                if mesh is None or self.host.kind_of(mesh) is None:
                    continue
                references.append((component, kind, mesh))
        return references
