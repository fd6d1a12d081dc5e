"""Tests for PBR material synthesis and texture slot attachment."""

import copy

import pytest

from i3s.parsers.material import convert_color_format, make_pbr_material, set_material_texture
from i3s.tile import TextureImage

TEXTURE = b"texture-bytes"


@pytest.mark.unit
class TestMakePbrMaterial:
    """Defaults and color normalization."""

    def test_no_definition_no_texture(self):
        material = make_pbr_material(None, None)
        assert material["pbrMetallicRoughness"] == {"baseColorFactor": [1.0, 1.0, 1.0, 1.0]}
        assert material["alphaCutoff"] == 0.25

    def test_no_definition_with_texture(self):
        material = make_pbr_material(None, TEXTURE)
        pbr = material["pbrMetallicRoughness"]
        assert "baseColorFactor" not in pbr
        assert pbr["baseColorTexture"]["texCoord"] == 0
        assert pbr["baseColorTexture"]["texture"] == {"source": {"image": TEXTURE}}

    def test_definition_without_pbr_gets_white(self):
        material = make_pbr_material({"doubleSided": True}, None)
        assert material["doubleSided"] is True
        assert material["pbrMetallicRoughness"]["baseColorFactor"] == [1.0, 1.0, 1.0, 1.0]

    def test_alpha_cutoff_kept(self):
        material = make_pbr_material({"alphaCutoff": 0.6}, None)
        assert material["alphaCutoff"] == 0.6

    def test_alpha_cutoff_defaulted(self):
        material = make_pbr_material({"alphaMode": "mask"}, None)
        assert material["alphaCutoff"] == 0.25

    def test_alpha_mode_uppercased(self):
        assert make_pbr_material({"alphaMode": "blend"}, None)["alphaMode"] == "BLEND"

    def test_colors_scaled(self):
        definition = {
            "emissiveFactor": [255, 0, 51],
            "pbrMetallicRoughness": {"baseColorFactor": [255, 255, 0, 255], "metallicFactor": 0},
        }
        material = make_pbr_material(definition, None)
        assert material["emissiveFactor"] == pytest.approx([1.0, 0.0, 0.2])
        assert material["pbrMetallicRoughness"]["baseColorFactor"] == pytest.approx([1.0, 1.0, 0.0, 1.0])
        assert material["pbrMetallicRoughness"]["metallicFactor"] == 0

    def test_definition_not_mutated(self):
        definition = {
            "alphaMode": "opaque",
            "pbrMetallicRoughness": {"baseColorFactor": [255, 255, 255, 255], "baseColorTexture": {"texCoord": 0}},
        }
        snapshot = copy.deepcopy(definition)
        make_pbr_material(definition, TEXTURE)
        assert definition == snapshot


@pytest.mark.unit
class TestTextureSlots:
    """One decoded texture goes to the highest-priority existing slot."""

    def test_base_color_wins_over_emissive(self):
        definition = {
            "emissiveTexture": {"texCoord": 0},
            "pbrMetallicRoughness": {"baseColorTexture": {"texCoord": 0}},
        }
        material = make_pbr_material(definition, TEXTURE)
        assert "texture" in material["pbrMetallicRoughness"]["baseColorTexture"]
        assert "texture" not in material["emissiveTexture"]

    def test_emissive_before_metallic_roughness(self):
        definition = {
            "emissiveTexture": {"texCoord": 0},
            "pbrMetallicRoughness": {"metallicRoughnessTexture": {"texCoord": 0}},
        }
        material = make_pbr_material(definition, TEXTURE)
        assert material["emissiveTexture"]["texture"] == {"source": {"image": TEXTURE}}
        assert "texture" not in material["pbrMetallicRoughness"]["metallicRoughnessTexture"]

    @pytest.mark.parametrize("slot", ["normalTexture", "occlusionTexture"])
    def test_lower_priority_slots(self, slot):
        material = {"pbrMetallicRoughness": {}, slot: {"texCoord": 0}}
        assert set_material_texture(material, TEXTURE) is True
        assert material[slot]["texture"]["source"]["image"] == TEXTURE

    def test_no_slot_drops_texture(self):
        material = make_pbr_material({"pbrMetallicRoughness": {"baseColorFactor": [255] * 4}}, TEXTURE)
        assert "baseColorTexture" not in material["pbrMetallicRoughness"]
        assert set_material_texture({"pbrMetallicRoughness": {}}, TEXTURE) is False

    def test_decoded_image_attached(self):
        image = TextureImage(width=1, height=1, data=None)
        material = make_pbr_material(None, image)
        assert material["pbrMetallicRoughness"]["baseColorTexture"]["texture"]["source"]["image"] is image


@pytest.mark.unit
def test_convert_color_format():
    assert convert_color_format([0, 255]) == [0.0, 1.0]
