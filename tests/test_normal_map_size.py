"""Tests for the normal map size tool."""
from scenestate import HeadlessInteraction, config_override
from scenetools import NormalMapSizeTool

from conftest import add_textured_renderer


def test_only_normal_maps_are_found(host):
    normal = add_textured_renderer(host, "RockNormal", 2048, texture_type="NormalMap")
    add_textured_renderer(host, "RockAlbedo", 2048)

    tool = NormalMapSizeTool(host)
    assert tool.refresh_list() == [normal]
    assert tool.normals_found == [normal]


def test_platform_overrides_are_reduced(host):
    """Test that default and overridden platform sizes above target are lowered."""
    normal = add_textured_renderer(host, "RockNormal", 1024, texture_type="NormalMap",
                                   platform_sizes={"Android": 4096, "Standalone": 512})
    interaction = HeadlessInteraction()
    tool = NormalMapSizeTool(host, interaction)
    tool.refresh_list()

    assert [c.attribute for c in tool.candidates if c.will_change] == ["max_texture_size@Android"]

    report = tool.process()

    assert report.changed == 1
    assert host.get(normal, "max_texture_size@Android") == 1024
    assert host.get(normal, "max_texture_size@Standalone") == 512
    assert "Done.\nChanged: 1\nFailed: 0" in interaction.notifications[-1][1]


def test_never_upscales(host):
    normal = add_textured_renderer(host, "SmallNormal", 512, texture_type="NormalMap")
    tool = NormalMapSizeTool(host, target_size=2048)
    assert tool.refresh_list() == []
    assert tool.process() is None
    assert host.get(normal, "max_texture_size") == 512


def test_one_refresh_per_asset(host):
    normal = add_textured_renderer(host, "RockNormal", 4096, texture_type="NormalMap",
                                   platform_sizes={"Android": 4096, "iPhone": 2048})
    tool = NormalMapSizeTool(host)
    tool.refresh_list()
    report = tool.process()

    assert report.changed == 3
    assert report.changed_keys == [normal]
    assert host.refreshed == [normal]
    assert tool.normals_needing_change == []


def test_normal_map_type_is_configurable(host):
    normal = add_textured_renderer(host, "Bump", 2048, texture_type="Bump")
    with config_override(normal_map_texture_type="Bump"):
        assert NormalMapSizeTool(host).refresh_list() == [normal]


def test_failures_are_reported(host):
    normal = add_textured_renderer(host, "RockNormal", 2048, texture_type="NormalMap")
    host.reject_writes(normal, "read-only package")
    interaction = HeadlessInteraction()
    tool = NormalMapSizeTool(host, interaction)
    tool.refresh_list()

    report = tool.process()

    assert report.failed == 1
    assert "Failed: 1" in interaction.notifications[-1][1]
