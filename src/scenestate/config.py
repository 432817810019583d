"""
Policy configuration and thread-local current-config storage.

SceneStateConfig holds the product policy constants the tools rely on
(allowed texture sizes, workflow flag values, LOD fallbacks). They are data,
not branches, so a project can change them without touching tool code.

Thread-local storage mirrors the global-config pattern: each thread sees the
config last set on it, falling back to the defaults.
"""

from contextlib import contextmanager
from dataclasses import dataclass, replace
import threading
from typing import Generator, Optional, Tuple


@dataclass(frozen=True)
class SceneStateConfig:
    """Product policy constants."""
    # Texture sizing
    allowed_texture_sizes: Tuple[int, ...] = (512, 1024, 2048, 4096)
    default_texture_size: int = 1024
    known_platforms: Tuple[str, ...] = ("Standalone", "Android", "iPhone")
    normal_map_texture_type: str = "NormalMap"

    # Durable backup of texture importer max sizes
    backup_path: str = "TextureMaxSizeBackup.json"

    # Mask-map packing (material workflow flag: 0 = separate maps, 1 = packed)
    packer_target_shader: str = "Mochie/Standard"
    separate_workflow_value: int = 0
    packed_workflow_value: int = 1
    skip_packed_materials: bool = True
    packed_texture_suffix: str = "_Packed"

    # LOD override
    missing_lod_disables_renderers: bool = True
    shared_renderer_follows_selected_lod: bool = True

    def validate_texture_size(self, size: int) -> int:
        if size not in self.allowed_texture_sizes:
            raise ValueError(f"Texture size {size} not in {self.allowed_texture_sizes}")
        return size


_DEFAULT_CONFIG = SceneStateConfig()
_current_config_context = threading.local()


def set_current_config(config: SceneStateConfig) -> None:
    """Set the config seen by tools running on this thread."""
    _current_config_context.value = config


def get_current_config() -> SceneStateConfig:
    """Config for this thread, or the defaults when none was set."""
    return getattr(_current_config_context, 'value', None) or _DEFAULT_CONFIG


def reset_current_config() -> None:
    _current_config_context.value = None


@contextmanager
def config_override(**changes) -> Generator[SceneStateConfig, None, None]:
    """Temporarily replace fields of the current config.

    Example:
        with config_override(skip_packed_materials=False):
            packer.pack_all()
    """
    previous: Optional[SceneStateConfig] = getattr(_current_config_context, 'value', None)
    overridden = replace(get_current_config(), **changes)
    set_current_config(overridden)
    try:
        yield overridden
    finally:
        _current_config_context.value = previous
