"""
Mesh compression for model assets used by the active scene.

Mesh filters and skinned renderers in the scene are traced back to their model
importer. Scan results are grouped per model asset together with the scene
objects referencing it, so the preview shows what each import change affects.
"""

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Dict, List, Optional

from scenestate.engine import SSAREngine
from scenestate.host import SceneHost
from scenestate.interaction import Interaction
from scenestate.reports import ApplyReport
from scenestate.snapshot_model import Key
from scenetools import conventions as c
from scenetools.base import SceneTool

logger = logging.getLogger(__name__)


class MeshCompression(Enum):
    OFF = "Off"
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass
class SceneObjectRef:
    component: Key
    component_label: str
    hierarchy_path: str


@dataclass
class AssetEntry:
    asset_path: str
    asset_name: str
    current_compression: str
    scene_objects: List[SceneObjectRef] = field(default_factory=list)


@dataclass
class MeshScanResults:
    """Pure data container for one scan; no logic beyond ordering."""
    assets_by_path: Dict[str, AssetEntry] = field(default_factory=dict)
    meshes_without_asset_path: int = 0
    non_model_importers: int = 0
    scene_object_reference_count: int = 0

    @property
    def assets_to_change(self) -> List[AssetEntry]:
        return sorted(self.assets_by_path.values(), key=lambda e: e.asset_path.casefold())


class MeshCompressionTool(SceneTool):

    TITLE = "Apply Mesh Compression"

    def __init__(self, host: SceneHost, interaction: Optional[Interaction] = None,
                 target: MeshCompression = MeshCompression.MEDIUM):
        super().__init__(SSAREngine(host, interaction=interaction))
        self.target = target
        self.results: Optional[MeshScanResults] = None

    def scan(self) -> MeshScanResults:
        results = MeshScanResults()
        for component, kind, mesh in self.scene_meshes():
            path = self.asset_path_of(mesh)
            if path is None:
                results.meshes_without_asset_path += 1
                continue

            importer = self.importer_at(path, c.MODEL_IMPORTER)
            if importer is None:
                results.non_model_importers += 1
                continue

            current = self.read(importer, c.MESH_COMPRESSION)
            if current == self.target.value:
                continue

            entry = results.assets_by_path.get(path)
            if entry is None:
                entry = AssetEntry(asset_path=path, asset_name=str(mesh), current_compression=current)
                results.assets_by_path[path] = entry
            entry.scene_objects.append(SceneObjectRef(
                component=component,
                component_label=kind,
                hierarchy_path=self.host.sort_key(component),
            ))
            results.scene_object_reference_count += 1

        for entry in results.assets_by_path.values():
            entry.scene_objects.sort(key=lambda ref: ref.hierarchy_path.casefold())

        self.results = results
        logger.debug(f"[{self.TITLE}] {len(results.assets_by_path)} model asset(s) would change, "
                     f"{results.scene_object_reference_count} scene reference(s)")
        return results

    def apply(self) -> Optional[ApplyReport]:
        if self.results is None or not self.results.assets_by_path:
            logger.info(f"[{self.TITLE}] Nothing to apply.")
            return None

        entries = self.results.assets_to_change
        if not self.confirm(f"Apply '{self.target.value}' mesh compression to {len(entries)} model asset(s)?"):
            return None

        candidates = self.engine.evaluate([e.asset_path for e in entries], c.MESH_COMPRESSION, self.target.value)
        report = self.engine.apply(candidates, progress=self.progress())
        self.scan()
        return report
