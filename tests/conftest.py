"""Pytest configuration and shared fixtures."""
import pytest

from scenestate import HeadlessInteraction, InMemoryHost, reset_current_config
from scenetools import conventions as c


def add_textured_renderer(host, name, max_size, *, texture_type="Default", platform_sizes=None,
                          importable=True):
    """Add a renderer -> material -> texture -> importer chain. Returns the importer (or texture) key."""
    texture_path = f"Assets/Textures/{name}.png"
    texture = host.add(f"{name}Tex", c.TEXTURE, scene=None, asset_path=texture_path if importable else "")
    if importable:
        attributes = {c.MAX_TEXTURE_SIZE: max_size, c.TEXTURE_TYPE: texture_type}
        for platform, size in (platform_sizes or {}).items():
            attributes[c.platform_max_size(platform)] = size
        host.add(texture_path, c.TEXTURE_IMPORTER, scene=None, **attributes)
    material = host.add(f"{name}Mat", c.MATERIAL, scene=None, shader="Standard",
                        asset_path=f"Assets/Materials/{name}.mat",
                        texture_properties={"_MainTex": texture})
    host.add(f"{name}Renderer", c.RENDERER, enabled=True, shared_materials=[material])
    return texture_path if importable else texture


@pytest.fixture(autouse=True)
def reset_config():
    """Reset the thread-local config before and after each test."""
    reset_current_config()
    yield
    reset_current_config()


@pytest.fixture
def host():
    """Provide an empty host with one active, loaded scene."""
    return InMemoryHost()


@pytest.fixture
def interaction():
    """Provide an interaction that confirms everything."""
    return HeadlessInteraction()


@pytest.fixture
def renderer_scene(host):
    """Three enabled scene renderers plus a renderer asset outside the scene."""
    for name in ("Chair", "Lamp", "Table"):
        host.add(name, c.RENDERER, enabled=True, scale_in_lightmap=1.0)
    host.add("PrefabRenderer", c.RENDERER, scene=None, enabled=True, scale_in_lightmap=1.0)
    return host


@pytest.fixture
def texture_scene(host):
    """Ten scene textures imported at 2048."""
    for i in range(10):
        add_textured_renderer(host, f"Wall{i:02d}", 2048)
    return host


@pytest.fixture
def lod_scene(host):
    """Two LOD groups with three levels each, all enabled."""
    for group in ("TreeA", "TreeB"):
        levels = []
        for level in range(3):
            renderer = host.add(f"{group}_LOD{level}", c.RENDERER, enabled=True)
            levels.append([renderer])
        host.add(group, c.LOD_GROUP, enabled=True, lods=levels)
    return host
