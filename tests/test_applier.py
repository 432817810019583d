"""Tests for batched, re-validating apply."""
from scenestate import Applier, Scanner, Scope, SkipReason, exceeds


def scan_enabled(host, value=False):
    return Scanner(host).scan(Scope("Renderer"), "enabled", value)


def test_apply_writes_all_candidates(renderer_scene):
    report = Applier(renderer_scene).apply(scan_enabled(renderer_scene))

    assert report.changed == 3
    assert report.skipped == 0
    assert report.failed == 0
    assert renderer_scene.get("Chair", "enabled") is False
    # The renderer asset is out of scope
    assert renderer_scene.get("PrefabRenderer", "enabled") is True


def test_apply_is_idempotent(renderer_scene):
    """Test that re-applying the same candidates changes nothing."""
    candidates = scan_enabled(renderer_scene)
    applier = Applier(renderer_scene)
    applier.apply(candidates)
    second = applier.apply(candidates)

    assert second.changed == 0
    assert second.skip_reasons[SkipReason.ALREADY_AT_TARGET] == 3


def test_batch_acquired_and_released_once(renderer_scene):
    Applier(renderer_scene).apply(scan_enabled(renderer_scene))
    assert renderer_scene.batch_acquisitions == 1
    assert renderer_scene.batch_releases == 1
    assert renderer_scene.batch_depth == 0


def test_failed_write_does_not_abort_batch(renderer_scene):
    """Test that one rejected write is recorded while the others succeed."""
    renderer_scene.reject_writes("Lamp", "locked")
    report = Applier(renderer_scene).apply(scan_enabled(renderer_scene))

    assert report.changed == 2
    assert report.failed == 1
    assert report.failures[0][0] == "Lamp"
    assert "locked" in report.failures[0][2]
    assert renderer_scene.get("Table", "enabled") is False
    assert renderer_scene.batch_depth == 0


def test_refresh_once_per_changed_object(renderer_scene):
    """Test that an object with several changed attributes is refreshed once."""
    scanner = Scanner(renderer_scene)
    candidates = scanner.evaluate(["Chair"], "enabled", False)
    candidates += scanner.evaluate(["Chair"], "scale_in_lightmap", 0.25)

    report = Applier(renderer_scene).apply(candidates)

    assert report.changed == 2
    assert report.changed_keys == ["Chair"]
    assert renderer_scene.refreshed == ["Chair"]


def test_stale_candidate_is_skipped(texture_scene):
    """Test that a value changed by the user after scan is re-validated."""
    candidates = Scanner(texture_scene).evaluate(["Assets/Textures/Wall00.png"], "max_texture_size", 1024,
                                                 predicate=exceeds)
    texture_scene.set("Assets/Textures/Wall00.png", "max_texture_size", 512)

    report = Applier(texture_scene).apply(candidates, 1024, predicate=exceeds)

    assert report.skip_reasons[SkipReason.STALE_CANDIDATE] == 1
    assert texture_scene.get("Assets/Textures/Wall00.png", "max_texture_size") == 512


def test_vanished_object_is_not_applicable(renderer_scene):
    candidates = scan_enabled(renderer_scene)
    renderer_scene.remove("Lamp")

    report = Applier(renderer_scene).apply(candidates)

    assert report.changed == 2
    assert report.skip_reasons[SkipReason.NOT_APPLICABLE] == 1


def test_unchanged_candidates_are_skipped(renderer_scene):
    renderer_scene.delete_attribute("Table", "enabled")
    candidates = scan_enabled(renderer_scene, value=True)

    report = Applier(renderer_scene).apply(candidates)

    assert report.changed == 0
    assert report.skip_reasons[SkipReason.NO_CHANGE] == 2
    assert report.skip_reasons[SkipReason.NOT_APPLICABLE] == 1


def test_before_write_sees_current_value(renderer_scene):
    seen = []
    Applier(renderer_scene).apply(scan_enabled(renderer_scene),
                                  before_write=lambda candidate, current: seen.append(current))
    assert seen == [True, True, True]


def test_cancel_keeps_completed_writes(renderer_scene):
    """Test that cancelling stops before the next candidate."""
    report = Applier(renderer_scene).apply(scan_enabled(renderer_scene),
                                           progress=lambda index, total, label: index == 2)

    assert report.cancelled
    assert report.changed == 2
    assert renderer_scene.get("Table", "enabled") is True
    assert renderer_scene.batch_depth == 0
    assert "Cancelled" in report.summary()
