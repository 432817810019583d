"""Tests for mask-map packing."""
import pytest

from scenestate import HeadlessInteraction, config_override
from scenetools import ChannelPlan, MaskMapPacker, TextureBaker

SHADER = "Mochie/Standard"


class RecordingBaker(TextureBaker):
    """Creates the packed texture and its importer on the host instead of rendering."""

    def __init__(self, host, available=True, create_importer=True):
        self.host = host
        self.available = available
        self.create_importer = create_importer
        self.bakes = []

    def is_available(self):
        return self.available

    def bake(self, plan, output_path, size, mipmaps):
        self.bakes.append((plan, output_path, size, mipmaps))
        texture = f"tex:{output_path}"
        if not self.host.exists(texture):
            self.host.add(texture, "Texture", scene=None, asset_path=output_path)
        if self.create_importer and not self.host.exists(output_path):
            self.host.add(output_path, "TextureImporter", scene=None, texture_type="NormalMap",
                          srgb=True, alpha_source="None", mipmaps=False)
        return texture


def add_material(host, name, *, sample=(1, 1, 1), parallax=False, workflow=0.0, keywords=(),
                 asset_path=None, shader=SHADER, packed_map=None):
    maps = {}
    for prop in ("_OcclusionMap", "_RoughnessMap", "_MetallicMap", "_HeightMap"):
        maps[prop] = host.add(f"{name}{prop}", "Texture", scene=None, asset_path=f"Assets/T/{name}{prop}.png")
    maps["_PackedMap"] = packed_map
    keywords = list(keywords) + (["_PARALLAX_ON"] if parallax else [])
    material = host.add(
        name, "Material", scene=None, shader=shader,
        asset_path=f"Assets/Materials/{name}.mat" if asset_path is None else asset_path,
        texture_properties=maps, keywords=keywords,
        _SampleOcclusion=float(sample[0]), _SampleRoughness=float(sample[1]), _SampleMetallic=float(sample[2]),
        _PrimaryWorkflow=workflow, _PackedHeight=0.0,
        _OcclusionChannel=1.0, _RoughnessChannel=1.0, _MetallicChannel=1.0, _HeightChannel=1.0,
    )
    host.add(f"{name}Renderer", "Renderer", shared_materials=[material])
    return material


def test_channel_plan_fallbacks():
    plan = ChannelPlan(green="rough")
    assert plan.sources() == {"red": "white", "green": "rough", "blue": "white", "alpha": "black"}
    assert ChannelPlan().is_empty


def test_pack_material(host):
    """Test bake, import settings and material switch for one material."""
    material = add_material(host, "Stone", parallax=True)
    baker = RecordingBaker(host)
    interaction = HeadlessInteraction()

    result = MaskMapPacker(host, baker, interaction).pack_all()

    assert result.packed == [material]
    plan, path, size, mipmaps = baker.bakes[0]
    assert path == "Assets/Materials/Stone_Packed.png"
    assert (size, mipmaps) == (1024, True)
    assert plan.red == "Stone_OcclusionMap"
    assert plan.alpha == "Stone_HeightMap"

    assert host.get(path, "srgb") is False
    assert host.get(path, "texture_type") == "Default"
    assert host.get(path, "alpha_source") == "FromInput"
    assert host.get(path, "mipmaps") is True

    assert host.get(material, "texture_properties")["_PackedMap"] == f"tex:{path}"
    assert host.get(material, "_PrimaryWorkflow") == 1.0
    assert host.get(material, "_PackedHeight") == 1.0
    assert [host.get(material, f"_{n}Channel") for n in ("Occlusion", "Roughness", "Metallic", "Height")] \
        == [0.0, 1.0, 2.0, 3.0]
    assert interaction.notifications[-1][1].startswith("Done.\nPacked: 1\nSkipped: 0")


def test_only_sampled_maps_are_packed(host):
    add_material(host, "Tile", sample=(0, 1, 0))
    baker = RecordingBaker(host)
    MaskMapPacker(host, baker).pack_all()

    plan = baker.bakes[0][0]
    assert (plan.red, plan.green, plan.blue, plan.alpha) == (None, "Tile_RoughnessMap", None, None)
    assert host.get("Tile", "_PackedHeight") == 0.0


def test_nothing_sampled_is_skipped(host):
    material = add_material(host, "Plain", sample=(0, 0, 0))
    baker = RecordingBaker(host)
    result = MaskMapPacker(host, baker).pack_all()

    assert result.skipped[0][0] == material
    assert "No sampled maps" in result.skipped[0][1]
    assert baker.bakes == []


class TestSkipPolicy:
    """Materials already on the packed workflow are left alone by default."""

    @pytest.mark.parametrize("kwargs", [
        {"workflow": 1.0},
        {"keywords": ["_WORKFLOW_PACKED_ON"]},
        {"packed_map": "ExistingMask"},
    ])
    def test_packed_materials_skipped(self, host, kwargs):
        add_material(host, "Done", **kwargs)
        baker = RecordingBaker(host)
        result = MaskMapPacker(host, baker).pack_all()
        assert result.packed == []
        assert len(result.skipped) == 1
        assert baker.bakes == []

    def test_skip_policy_can_be_disabled(self, host):
        add_material(host, "Again", workflow=1.0)
        with config_override(skip_packed_materials=False):
            result = MaskMapPacker(host, RecordingBaker(host)).pack_all()
        assert result.packed == ["Again"]

    def test_instantiated_material_skipped(self, host):
        add_material(host, "Runtime", asset_path="")
        result = MaskMapPacker(host, RecordingBaker(host)).pack_all()
        assert result.skipped == [("Runtime", "Material is not an asset on disk (likely instantiated).")]


def test_other_shaders_ignored(host):
    add_material(host, "Glass", shader="Standard")
    interaction = HeadlessInteraction()
    assert MaskMapPacker(host, RecordingBaker(host), interaction).pack_all() is None
    assert "No Mochie/Standard materials found" in interaction.notifications[0][1]


def test_missing_baker_shader(host):
    add_material(host, "Stone")
    interaction = HeadlessInteraction()
    assert MaskMapPacker(host, RecordingBaker(host, available=False), interaction).pack_all() is None
    assert host.writes == []


def test_missing_importer_skips_material(host):
    add_material(host, "Stone")
    result = MaskMapPacker(host, RecordingBaker(host, create_importer=False)).pack_all()
    assert "Could not get TextureImporter" in result.skipped[0][1]
    assert host.get("Stone", "_PrimaryWorkflow") == 0.0


def test_rerun_reuses_output_path(host):
    """Test that re-running with the skip policy off bakes to the same file."""
    add_material(host, "Stone")
    baker = RecordingBaker(host)
    with config_override(skip_packed_materials=False):
        packer = MaskMapPacker(host, baker, output_size=2048, generate_mipmaps=False)
        packer.pack_all()
        packer.pack_all()

    assert [b[1] for b in baker.bakes] == ["Assets/Materials/Stone_Packed.png"] * 2
    assert baker.bakes[0][2:] == (2048, False)
