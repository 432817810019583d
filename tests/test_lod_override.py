"""Tests for the LOD scene override tool."""
from scenestate import HeadlessInteraction, InMemoryHost, config_override
from scenetools import LodOverrideTool


def enabled(host, key):
    return host.get(key, "enabled")


def test_count_lod_groups(lod_scene):
    lod_scene.add("PrefabTree", "LODGroup", scene=None, enabled=True, lods=[])
    tool = LodOverrideTool(lod_scene)
    assert tool.count_lod_groups() == 2
    assert tool.lod_groups_enabled is True


def test_apply_selected_lod(lod_scene):
    """Test that groups are disabled and only the chosen level stays visible."""
    tool = LodOverrideTool(lod_scene)
    result = tool.apply_selected_lod(1)

    assert result.groups_missing_lod == 0
    assert result.report.failed == 0
    for group in ("TreeA", "TreeB"):
        assert enabled(lod_scene, group) is False
        assert enabled(lod_scene, f"{group}_LOD0") is False
        assert enabled(lod_scene, f"{group}_LOD1") is True
        assert enabled(lod_scene, f"{group}_LOD2") is False
    assert tool.lod_groups_enabled is False
    assert tool.has_snapshot


def test_revert_restores_original_state(lod_scene):
    tool = LodOverrideTool(lod_scene)
    tool.apply_selected_lod(2)
    tool.apply_selected_lod(0)

    report = tool.revert()

    assert report.missing_count == 0
    assert all(enabled(lod_scene, key) for key in lod_scene.enumerate("Renderer"))
    assert enabled(lod_scene, "TreeA") is True
    assert tool.lod_groups_enabled is True


def test_revert_without_snapshot_notifies():
    interaction = HeadlessInteraction()
    tool = LodOverrideTool(InMemoryHost(), interaction)

    assert tool.revert() is None
    assert "No snapshot exists yet" in interaction.notifications[0][1]


def test_missing_level_disables_group_renderers(lod_scene):
    """Test that groups lacking the level are counted and hidden."""
    tool = LodOverrideTool(lod_scene)
    result = tool.apply_selected_lod(5)

    assert result.groups_missing_lod == 2
    assert not any(enabled(lod_scene, key) for key in lod_scene.enumerate("Renderer"))


def test_missing_level_can_leave_renderers_unchanged(lod_scene):
    with config_override(missing_lod_disables_renderers=False):
        result = LodOverrideTool(lod_scene).apply_selected_lod(5)

    assert result.groups_missing_lod == 2
    assert all(enabled(lod_scene, key) for key in lod_scene.enumerate("Renderer"))
    assert enabled(lod_scene, "TreeA") is False


def test_shared_renderer_follows_selected_level(host):
    """Test a renderer used by two levels stays visible when either is selected."""
    shared = host.add("Trunk", "Renderer", enabled=True)
    leaves = host.add("Leaves", "Renderer", enabled=True)
    host.add("Tree", "LODGroup", enabled=True, lods=[[shared, leaves], [shared]])

    LodOverrideTool(host).apply_selected_lod(1)

    assert enabled(host, "Trunk") is True
    assert enabled(host, "Leaves") is False


def test_destroyed_renderers_are_ignored(lod_scene):
    lod_scene.remove("TreeA_LOD2")
    tool = LodOverrideTool(lod_scene)
    assert len(tool.lod_levels("TreeA")[2]) == 0

    result = tool.apply_selected_lod(2)
    assert result.report.failed == 0
    assert enabled(lod_scene, "TreeB_LOD2") is True


def test_set_all_lod_groups_enabled(lod_scene):
    tool = LodOverrideTool(lod_scene)
    report = tool.set_all_lod_groups_enabled(False)

    assert report.changed == 2
    assert tool.lod_groups_enabled is False
    assert tool.recompute_enabled_toggle() is False

    tool.set_all_lod_groups_enabled(True)
    assert tool.recompute_enabled_toggle() is True


def test_forget_snapshot_recaptures(lod_scene):
    """Test that revert after forgetting returns to the state at forget time."""
    interaction = HeadlessInteraction()
    tool = LodOverrideTool(lod_scene, interaction)
    tool.apply_selected_lod(0)
    tool.forget_snapshot()

    lod_scene.set("TreeA_LOD1", "enabled", True)
    tool.revert()

    assert enabled(lod_scene, "TreeA_LOD1") is False
    assert enabled(lod_scene, "TreeA_LOD0") is True
    assert "Snapshot reset" in interaction.notifications[-1][1]
