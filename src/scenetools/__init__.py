"""
Batch scene tools built on the scenestate engine.

Each tool scans the active scene through a SceneHost, previews what it would
change, applies through SSAREngine and (where it makes sense) reverts.

Tools:
    - lod_override: force a single LOD level on every LOD group, with revert
    - texture_max_size: lower texture max size, durable backup and restore
    - normal_map_size: lower normal map max sizes, never upscaling
    - mesh_compression: set mesh compression on scene model assets
    - lightmap_scale: set scale-in-lightmap on scene renderers, with revert
    - secondary_uv: enable lightmap UV generation where UV2 is missing
    - texture_packer: pack separate maps into one mask map
    - path_follow: runtime path followers

Quick Start:
    >>> from scenestate import InMemoryHost
    >>> from scenetools import LightmapScaleTool
    >>> host = InMemoryHost()
    >>> host.add("Floor", "Renderer", scale_in_lightmap=1.0)
    'Floor'
    >>> tool = LightmapScaleTool(host)
    >>> tool.apply_scale(0.5).changed
    1
    >>> tool.revert().restored_count
    1
"""

from scenetools.base import SceneTool
from scenetools.lod_override import LodOverrideTool, LodApplyResult
from scenetools.texture_max_size import TextureMaxSizeTool
from scenetools.normal_map_size import NormalMapSizeTool
from scenetools.mesh_compression import (
    MeshCompression,
    MeshCompressionTool,
    MeshScanResults,
    AssetEntry,
    SceneObjectRef,
)
from scenetools.lightmap_scale import LightmapScaleTool
from scenetools.secondary_uv import SecondaryUvTool, UvGenerationStats
from scenetools.texture_packer import MaskMapPacker, TextureBaker, ChannelPlan, PackResult
from scenetools.path_follow import (
    Frame,
    Pose,
    PathCurve,
    PolylinePath,
    PathFollower,
    ClosestPointFollower,
)

__all__ = [
    'SceneTool',
    # Scene tools
    'LodOverrideTool',
    'LodApplyResult',
    'TextureMaxSizeTool',
    'NormalMapSizeTool',
    'MeshCompression',
    'MeshCompressionTool',
    'MeshScanResults',
    'AssetEntry',
    'SceneObjectRef',
    'LightmapScaleTool',
    'SecondaryUvTool',
    'UvGenerationStats',
    # Texture packing
    'MaskMapPacker',
    'TextureBaker',
    'ChannelPlan',
    'PackResult',
    # Path following
    'Frame',
    'Pose',
    'PathCurve',
    'PolylinePath',
    'PathFollower',
    'ClosestPointFollower',
]
