"""
Texture budget walkthrough against an in-memory scene.

Builds a small scene, lowers every texture above 1024 with a durable backup,
then restores the originals from a fresh tool instance the way a later
editor session would.
"""

import logging
import tempfile
from pathlib import Path

from scenestate import HeadlessInteraction, InMemoryHost
from scenetools import TextureMaxSizeTool
from scenetools import conventions as c

logger = logging.getLogger(__name__)


def build_scene() -> InMemoryHost:
    host = InMemoryHost(active_scene="Courtyard")
    for name, size in (("Wall", 4096), ("Floor", 2048), ("Door", 1024), ("Sign", 512)):
        path = f"Assets/Textures/{name}.png"
        host.add(path, c.TEXTURE_IMPORTER, scene=None, max_texture_size=size)
        texture = host.add(f"{name}Tex", c.TEXTURE, scene=None, asset_path=path)
        material = host.add(f"{name}Mat", c.MATERIAL, scene=None, texture_properties={"_MainTex": texture})
        host.add(name, c.RENDERER, shared_materials=[material])
    return host


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    host = build_scene()
    backup_path = Path(tempfile.mkdtemp()) / "TextureMaxSizeBackup.json"

    tool = TextureMaxSizeTool(host, HeadlessInteraction(), backup_path=backup_path, target_size=1024)
    for candidate in tool.scan():
        logger.info(f"{candidate.object_key}: {candidate.current_value} -> "
                    f"{candidate.proposed_value if candidate.will_change else '(unchanged)'}")
    tool.apply()

    # A later session only has the backup file
    TextureMaxSizeTool(host, HeadlessInteraction(), backup_path=backup_path).restore()
    for key in sorted(host.enumerate(c.TEXTURE_IMPORTER)):
        logger.info(f"{key}: {host.get(key, c.MAX_TEXTURE_SIZE)}")


if __name__ == "__main__":
    main()
