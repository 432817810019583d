"""
Mask-map packing for packed-workflow materials.

Scene materials using the target shader get their separate occlusion,
roughness, metallic and height maps packed into one mask map
(R=Occlusion, G=Roughness, B=Metallic, A=Height). The material is then
switched to the packed workflow. Channel compositing happens on the host
through a TextureBaker; this module only decides what to pack and where.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging
import posixpath
from typing import Dict, List, Optional, Tuple

from scenestate.engine import SSAREngine
from scenestate.host import SceneHost
from scenestate.interaction import Interaction
from scenestate.reports import Candidate
from scenestate.snapshot_model import Key
from scenetools import conventions as c
from scenetools.base import SceneTool

logger = logging.getLogger(__name__)

WHITE = "white"
BLACK = "black"

# Material property names of the packed-workflow shader
PRIMARY_WORKFLOW = "_PrimaryWorkflow"
PACKED_MAP = "_PackedMap"
PACKED_HEIGHT = "_PackedHeight"
PACKED_KEYWORD = "_WORKFLOW_PACKED_ON"
PARALLAX_KEYWORD = "_PARALLAX_ON"

# (sample toggle, texture property) per packed channel
CHANNEL_SOURCES = {
    "red": ("_SampleOcclusion", "_OcclusionMap"),
    "green": ("_SampleRoughness", "_RoughnessMap"),
    "blue": ("_SampleMetallic", "_MetallicMap"),
}
HEIGHT_MAP = "_HeightMap"

CHANNEL_INDICES = {
    "_OcclusionChannel": 0.0,  # Red
    "_RoughnessChannel": 1.0,  # Green
    "_MetallicChannel": 2.0,   # Blue
    "_HeightChannel": 3.0,     # Alpha
}


@dataclass(frozen=True)
class ChannelPlan:
    """Input texture per output channel; None falls back to a constant."""
    red: Optional[Key] = None
    green: Optional[Key] = None
    blue: Optional[Key] = None
    alpha: Optional[Key] = None

    @property
    def is_empty(self) -> bool:
        return self.red is None and self.green is None and self.blue is None and self.alpha is None

    def sources(self) -> Dict[str, Key]:
        """Texture or fallback per channel: white for RGB, black for alpha."""
        return {
            "red": self.red if self.red is not None else WHITE,
            "green": self.green if self.green is not None else WHITE,
            "blue": self.blue if self.blue is not None else WHITE,
            "alpha": self.alpha if self.alpha is not None else BLACK,
        }


class TextureBaker(ABC):
    """Host capability that composites channels on the GPU and writes an image asset."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the packing shader exists on the host."""

    @abstractmethod
    def bake(self, plan: ChannelPlan, output_path: str, size: int, mipmaps: bool) -> Optional[Key]:
        """Bake the red channel of each source into ``output_path``; returns the texture key."""


@dataclass
class PackResult:
    packed: List[Key] = field(default_factory=list)
    skipped: List[Tuple[Key, str]] = field(default_factory=list)


class MaskMapPacker(SceneTool):

    TITLE = "Texture Packer"

    def __init__(self, host: SceneHost, baker: TextureBaker, interaction: Optional[Interaction] = None,
                 *, output_size: Optional[int] = None, generate_mipmaps: bool = True,
                 skip_packed: Optional[bool] = None):
        super().__init__(SSAREngine(host, interaction=interaction))
        self.baker = baker
        self.output_size = self.config.validate_texture_size(output_size or self.config.default_texture_size)
        self.generate_mipmaps = generate_mipmaps
        self.skip_packed = self.config.skip_packed_materials if skip_packed is None else skip_packed

    def target_materials(self) -> List[Key]:
        shader = self.config.packer_target_shader
        materials = self.materials_of(self.scene_objects(c.RENDERER))
        targets = [m for m in materials if self.read(m, c.SHADER) == shader]
        return sorted(targets, key=lambda k: (self.host.sort_key(k).casefold(), str(k)))

    def _flag(self, material: Key, name: str) -> Optional[int]:
        value = self.read(material, name)
        return None if value is None else int(round(float(value)))

    def _texture(self, material: Key, prop: str) -> Optional[Key]:
        return (self.read(material, c.TEXTURE_PROPERTIES) or {}).get(prop)

    def skip_reason(self, material: Key) -> Optional[str]:
        """Why a material is not packed, or None when it should be."""
        if self.asset_path_of(material) is None:
            return "Material is not an asset on disk (likely instantiated)."
        if not self.skip_packed:
            return None

        workflow = self._flag(material, PRIMARY_WORKFLOW)
        if workflow is not None and workflow != self.config.separate_workflow_value:
            return "Material is already using Packed workflow."
        if PACKED_KEYWORD in (self.read(material, c.KEYWORDS) or []):
            return f"Material has {PACKED_KEYWORD} enabled (Packed workflow)."
        if self._texture(material, PACKED_MAP) is not None:
            return f"Material already has a {PACKED_MAP} assigned."
        return None

    def channel_plan(self, material: Key) -> ChannelPlan:
        """Only maps the material actually samples are packed."""
        channels = {}
        for channel, (toggle, prop) in CHANNEL_SOURCES.items():
            channels[channel] = self._texture(material, prop) if self._flag(material, toggle) == 1 else None
        parallax = PARALLAX_KEYWORD in (self.read(material, c.KEYWORDS) or [])
        channels["alpha"] = self._texture(material, HEIGHT_MAP) if parallax else None
        return ChannelPlan(**channels)

    def output_path(self, material: Key) -> str:
        """``<material folder>/<material file name>_Packed.png``, stable across re-runs."""
        material_path = self.asset_path_of(material)
        folder = posixpath.dirname(material_path.replace("\\", "/")) or "Assets"
        base = posixpath.splitext(posixpath.basename(material_path))[0]
        return f"{folder}/{base}{self.config.packed_texture_suffix}.png"

    def apply_mask_import_settings(self, path: str) -> bool:
        importer = self.importer_at(path, c.TEXTURE_IMPORTER)
        if importer is None:
            logger.warning(f"[{self.TITLE}] Could not get TextureImporter for generated packed texture. "
                           f"Path: {path}")
            return False
        candidates: List[Candidate] = []
        for name, value in ((c.TEXTURE_TYPE, "Default"), (c.SRGB, False),
                            (c.ALPHA_SOURCE, "FromInput"), (c.MIPMAPS, self.generate_mipmaps)):
            candidates += self.engine.evaluate([importer], name, value)
        return self.engine.apply(candidates).failed == 0

    def switch_to_packed(self, material: Key, packed_texture: Key, has_height: bool) -> bool:
        properties = dict(self.read(material, c.TEXTURE_PROPERTIES) or {})
        properties[PACKED_MAP] = packed_texture

        candidates = self.engine.evaluate([material], c.TEXTURE_PROPERTIES, properties)
        candidates += self.engine.evaluate([material], PRIMARY_WORKFLOW,
                                           float(self.config.packed_workflow_value))
        candidates += self.engine.evaluate([material], PACKED_HEIGHT, 1.0 if has_height else 0.0)
        for name, index in CHANNEL_INDICES.items():
            candidates += self.engine.evaluate([material], name, index)
        return self.engine.apply(candidates).failed == 0

    def pack_one(self, material: Key) -> Optional[str]:
        """Pack a single material. Returns the skip reason, or None when packed."""
        reason = self.skip_reason(material)
        if reason is not None:
            return reason

        plan = self.channel_plan(material)
        if plan.is_empty:
            return "No sampled maps found (Sample toggles off, or textures missing)."

        path = self.output_path(material)
        packed_texture = self.baker.bake(plan, path, self.output_size, self.generate_mipmaps)
        if not self.apply_mask_import_settings(path):
            return ("Could not get TextureImporter for generated packed texture. "
                    "Is the output path inside the project's Assets folder?")
        if packed_texture is None:
            return "Baking produced no texture."

        if not self.switch_to_packed(material, packed_texture, plan.alpha is not None):
            return "Host rejected the material changes."
        return None

    def pack_all(self) -> Optional[PackResult]:
        if not self.baker.is_available():
            self.notify("Could not find the texture packer shader. Ensure the shader package is imported.")
            return None

        targets = self.target_materials()
        if not targets:
            self.notify(f"No {self.config.packer_target_shader} materials found in the active scene.")
            return None

        result = PackResult()
        for material in targets:
            reason = self.pack_one(material)
            if reason is None:
                result.packed.append(material)
                logger.info(f"[{self.TITLE}] Packed '{material}'")
            else:
                result.skipped.append((material, reason))
                logger.info(f"[{self.TITLE}] Skipped '{material}': {reason}")

        self.notify(f"Done.\nPacked: {len(result.packed)}\nSkipped: {len(result.skipped)}\n\n"
                    f"See log for details.")
        return result
