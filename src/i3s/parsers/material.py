"""Build a glTF-style PBR material from an I3S material definition.

I3S material definitions are glTF-like, but colors are given in the
0..255 range and ``alphaMode`` is lowercase.
"""

from __future__ import annotations

from typing import Any, Optional

from loguru import logger

from i3s.tile import Texture

DEFAULT_ALPHA_CUTOFF = 0.25
OPAQUE_WHITE = [255, 255, 255, 255]


def make_pbr_material(
    material_definition: Optional[dict[str, Any]], texture: Optional[Texture]
) -> dict[str, Any]:
    """Return a new material dict; ``material_definition`` is not modified."""
    if material_definition is not None:
        material = dict(material_definition)
        pbr = material_definition.get("pbrMetallicRoughness")
        material["pbrMetallicRoughness"] = (
            dict(pbr) if pbr is not None else {"baseColorFactor": list(OPAQUE_WHITE)}
        )
    else:
        material = {"pbrMetallicRoughness": {}}
        if texture is not None:
            material["pbrMetallicRoughness"]["baseColorTexture"] = {"texCoord": 0}
        else:
            material["pbrMetallicRoughness"]["baseColorFactor"] = list(OPAQUE_WHITE)

    if material.get("alphaCutoff") is None:
        material["alphaCutoff"] = DEFAULT_ALPHA_CUTOFF

    if material.get("alphaMode"):
        material["alphaMode"] = material["alphaMode"].upper()

    if material.get("emissiveFactor"):
        material["emissiveFactor"] = convert_color_format(material["emissiveFactor"])
    pbr = material["pbrMetallicRoughness"]
    if pbr.get("baseColorFactor"):
        pbr["baseColorFactor"] = convert_color_format(pbr["baseColorFactor"])

    if texture is not None:
        set_material_texture(material, texture)

    return material


def convert_color_format(color_factor) -> list[float]:
    """Map color components from 0..255 to 0..1."""
    return [component / 255 for component in color_factor]


def set_material_texture(material: dict[str, Any], image: Texture) -> bool:
    """Attach ``image`` to the first texture slot the material defines.

    Slot priority: base color, emissive, metallic-roughness, normal,
    occlusion. Only one texture per tile is supported, so a material
    without any of these slots drops the texture.

    Returns:
        True if the texture was attached.
    """
    texture = {"source": {"image": image}}
    pbr = material.get("pbrMetallicRoughness") or {}

    if pbr.get("baseColorTexture") is not None:
        pbr["baseColorTexture"] = {**pbr["baseColorTexture"], "texture": texture}
    elif material.get("emissiveTexture") is not None:
        material["emissiveTexture"] = {**material["emissiveTexture"], "texture": texture}
    elif pbr.get("metallicRoughnessTexture") is not None:
        pbr["metallicRoughnessTexture"] = {**pbr["metallicRoughnessTexture"], "texture": texture}
    elif material.get("normalTexture") is not None:
        material["normalTexture"] = {**material["normalTexture"], "texture": texture}
    elif material.get("occlusionTexture") is not None:
        material["occlusionTexture"] = {**material["occlusionTexture"], "texture": texture}
    else:
        # TODO: decide whether a base color slot should be created here
        logger.debug("Material defines no texture slot, texture dropped")
        return False
    return True
