"""
Object kinds and attribute names the tools expect a host to expose.

Scene instances:
    Renderer             enabled, shared_materials (list of material keys),
                         scale_in_lightmap
    LODGroup             enabled, lods (list of lists of renderer keys,
                         index 0 = LOD0)
    MeshFilter           shared_mesh (mesh key or None)
    SkinnedMeshRenderer  shared_mesh

Assets (scene=None, with a persistent guid):
    Mesh                 asset_path, vertex_count, uv2_count
    Material             shader, asset_path, texture_properties
                         (property name -> texture key or None), keywords,
                         float properties by their shader name
    Texture              asset_path
    TextureImporter      keyed by asset path: max_texture_size, texture_type,
                         max_texture_size@<platform> (only when the platform
                         is overridden), srgb, mipmaps, alpha_source
    ModelImporter        keyed by asset path: mesh_compression,
                         generate_secondary_uv
"""

# Kinds
RENDERER = "Renderer"
LOD_GROUP = "LODGroup"
MESH_FILTER = "MeshFilter"
SKINNED_MESH_RENDERER = "SkinnedMeshRenderer"
MESH = "Mesh"
MATERIAL = "Material"
TEXTURE = "Texture"
TEXTURE_IMPORTER = "TextureImporter"
MODEL_IMPORTER = "ModelImporter"

# Scene attributes
ENABLED = "enabled"
SHARED_MATERIALS = "shared_materials"
SCALE_IN_LIGHTMAP = "scale_in_lightmap"
LODS = "lods"
SHARED_MESH = "shared_mesh"

# Asset attributes
ASSET_PATH = "asset_path"
VERTEX_COUNT = "vertex_count"
UV2_COUNT = "uv2_count"
SHADER = "shader"
TEXTURE_PROPERTIES = "texture_properties"
KEYWORDS = "keywords"

# Importer attributes
MAX_TEXTURE_SIZE = "max_texture_size"
TEXTURE_TYPE = "texture_type"
SRGB = "srgb"
MIPMAPS = "mipmaps"
ALPHA_SOURCE = "alpha_source"
MESH_COMPRESSION = "mesh_compression"
GENERATE_SECONDARY_UV = "generate_secondary_uv"


def platform_max_size(platform: str) -> str:
    """Attribute name of an overridden platform's max texture size."""
    return f"{MAX_TEXTURE_SIZE}@{platform}"
