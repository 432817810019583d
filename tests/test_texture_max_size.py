"""Tests for the texture max size tool."""
import pytest

from scenestate import HeadlessInteraction, InMemoryHost, SkipReason
from scenetools import TextureMaxSizeTool

from conftest import add_textured_renderer


@pytest.fixture
def backup_path(tmp_path):
    return tmp_path / "TextureMaxSizeBackup.json"


def test_scan_finds_scene_textures_once(host, backup_path):
    """Test that a texture shared by two materials is listed once."""
    importer = add_textured_renderer(host, "Brick", 2048)
    host.add("BrickMat2", "Material", scene=None, texture_properties={"_BumpMap": "BrickTex"})
    host.add("Wall", "Renderer", shared_materials=["BrickMat2"])

    candidates = TextureMaxSizeTool(host, backup_path=backup_path).scan()

    assert [c.object_key for c in candidates] == [importer]
    assert candidates[0].will_change


def test_scan_ignores_textures_outside_scene(host, backup_path):
    add_textured_renderer(host, "Brick", 2048)
    host.add("Assets/Textures/Unused.png", "TextureImporter", scene=None, max_texture_size=4096)

    candidates = TextureMaxSizeTool(host, backup_path=backup_path).scan()
    assert len(candidates) == 1


def test_non_importable_texture_listed_not_applicable(host, backup_path):
    add_textured_renderer(host, "Runtime", 2048, importable=False)
    tool = TextureMaxSizeTool(host, backup_path=backup_path)

    candidates = tool.scan()

    assert candidates[0].applicable is False
    assert tool.will_change_count == 0


def test_include_equal(host, backup_path):
    add_textured_renderer(host, "Brick", 1024)
    assert TextureMaxSizeTool(host, backup_path=backup_path).scan()[0].will_change is False

    tool = TextureMaxSizeTool(host, backup_path=backup_path, include_equal=True)
    tool.scan()
    report = tool.apply()

    assert report.changed == 0
    assert report.skip_reasons[SkipReason.ALREADY_AT_TARGET] == 1


def test_target_size_must_be_allowed(host, backup_path):
    with pytest.raises(ValueError):
        TextureMaxSizeTool(host, backup_path=backup_path, target_size=1000)
    tool = TextureMaxSizeTool(host, backup_path=backup_path)
    with pytest.raises(ValueError):
        tool.set_target_size(8192)


def test_apply_backs_up_and_rescans(texture_scene, backup_path):
    """Test ten textures reduced, backed up, and nothing left to change."""
    interaction = HeadlessInteraction()
    tool = TextureMaxSizeTool(texture_scene, interaction, backup_path=backup_path)
    tool.scan()

    report = tool.apply()

    assert (report.changed, report.skipped, report.failed) == (10, 0, 0)
    assert tool.backup_count == 10
    assert tool.will_change_count == 0
    assert backup_path.exists()
    assert interaction.notifications[-1][1].startswith("Done.\nChanged: 10")


def test_apply_without_scan_notifies(texture_scene, backup_path):
    interaction = HeadlessInteraction()
    tool = TextureMaxSizeTool(texture_scene, interaction, backup_path=backup_path)
    assert tool.apply() is None
    assert "Scan the scene first" in interaction.notifications[0][1]


def test_apply_declined_changes_nothing(texture_scene, backup_path):
    tool = TextureMaxSizeTool(texture_scene, HeadlessInteraction(auto_confirm=False), backup_path=backup_path)
    tool.scan()
    assert tool.apply() is None
    assert texture_scene.writes == []


def test_restore_in_new_session(texture_scene, backup_path):
    """Test that originals restore from the saved backup after a restart."""
    tool = TextureMaxSizeTool(texture_scene, backup_path=backup_path, target_size=512)
    tool.scan()
    tool.apply()
    tool.set_target_size(1024)

    # Second apply at a different size must not overwrite the originals
    texture_scene.set("Assets/Textures/Wall00.png", "max_texture_size", 4096)
    tool.scan()
    tool.apply()

    fresh = TextureMaxSizeTool(texture_scene, backup_path=backup_path)
    report = fresh.restore()

    assert report.restored_count == 10
    assert texture_scene.get("Assets/Textures/Wall00.png", "max_texture_size") == 2048
    assert texture_scene.get("Assets/Textures/Wall09.png", "max_texture_size") == 2048


def test_restore_without_backup_notifies(host, backup_path):
    interaction = HeadlessInteraction()
    assert TextureMaxSizeTool(host, interaction, backup_path=backup_path).restore() is None
    assert "No backup entries found" in interaction.notifications[0][1]


def test_restore_without_scene_skips_rescan(texture_scene, backup_path):
    tool = TextureMaxSizeTool(texture_scene, backup_path=backup_path)
    tool.scan()
    tool.apply()
    texture_scene.unload_scene("Main")

    report = tool.restore()

    assert report.restored_count == 10


def test_clear_backup(texture_scene, backup_path):
    tool = TextureMaxSizeTool(texture_scene, backup_path=backup_path)
    tool.scan()
    tool.apply()

    assert tool.clear_backup() is True
    assert TextureMaxSizeTool(InMemoryHost(), backup_path=backup_path).backup_count == 0
