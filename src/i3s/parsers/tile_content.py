"""Parse an I3S node payload into renderer-ready TileContent.

Sequence per tile:
    1. fetch and decode the texture (optional, never fatal)
    2. build the PBR material
    3. decode geometry (Draco or binary layout)
    4. expand feature ids
    5. transform positions
    6. assemble attributes
"""

from __future__ import annotations

import asyncio
from typing import Optional

import httpx
import numpy as np
from loguru import logger

from i3s.config import I3SSettings, settings
from i3s.constants import CoordinateSystem
from i3s.errors import TextureUnavailableError
from i3s.parsers.binary import normalize_attributes, parse_headers
from i3s.parsers.draco import MeshDecompressor, decode_draco, normalize_decoded_mesh
from i3s.parsers.feature_ids import (
    flatten_feature_ids_by_face_ranges,
    flatten_feature_ids_by_feature_indices,
    get_feature_ids_from_feature_index_metadata,
)
from i3s.parsers.material import make_pbr_material
from i3s.parsers.positions import get_model_matrix, parse_positions
from i3s.parsers.schema import construct_feature_data_layout
from i3s.parsers.texture import CompressedTextureDecoder, load_texture
from i3s.tile import NormalizedAttribute, Tile, TileContent, Tileset

# Canonical attribute name -> published TileContent.attributes key
_CONTENT_ATTRIBUTES = {
    "position": "positions",
    "normal": "normals",
    "color": "colors",
    "uv0": "tex_coords",
    "uvRegion": "uv_regions",
}


async def parse_i3s_tile_content(
    data: bytes,
    tile: Tile,
    tileset: Tileset,
    options: Optional[I3SSettings] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    mesh_decompressor: Optional[MeshDecompressor] = None,
    compressed_texture_decoder: Optional[CompressedTextureDecoder] = None,
) -> Tile:
    """Decode ``data`` into a fresh ``tile.content``.

    Args:
        data: Raw geometry payload of the node.
        tile: Node descriptor; its ``content`` is replaced.
        tileset: Owning layer, provides the geometry schema.
        options: Parse options, defaults to the module settings.
        client: HTTP client reused for the texture fetch.
        mesh_decompressor: Draco decoder, defaults to DracoPy.
        compressed_texture_decoder: Decoder for dds/ktx textures.

    Returns:
        ``tile``, with ``content`` filled in.

    Raises:
        MissingSchemaError: The tileset has no geometry schema.
    """
    options = options or settings
    content = TileContent()
    content.feature_data = construct_feature_data_layout(tileset)
    tile.content = content

    if tile.texture_url:
        try:
            content.texture = await load_texture(
                tile.texture_url,
                tile.texture_format,
                options,
                loader_options=tile.texture_loader_options,
                client=client,
                compressed_decoder=compressed_texture_decoder,
            )
        except TextureUnavailableError as e:
            logger.warning(f"Texture unavailable for tile, continuing without it: {e}")

    content.material = make_pbr_material(tile.material_definition, content.texture)
    if content.material is not None:
        content.texture = None

    return await parse_i3s_node_geometry(data, tile, options, mesh_decompressor=mesh_decompressor)


async def parse_i3s_node_geometry(
    data: bytes,
    tile: Tile,
    options: Optional[I3SSettings] = None,
    *,
    mesh_decompressor: Optional[MeshDecompressor] = None,
) -> Tile:
    if tile.content is None:
        return tile

    options = options or settings
    content = tile.content
    feature_ids_flattened = False

    if tile.is_draco_geometry:
        decompressor = mesh_decompressor or decode_draco
        mesh = await asyncio.to_thread(decompressor, data)
        attributes, vertex_count = normalize_decoded_mesh(mesh)

        feature_ids = get_feature_ids_from_feature_index_metadata(attributes.get("id"))
        if feature_ids is not None:
            flatten_feature_ids_by_feature_indices(attributes, feature_ids)
            feature_ids_flattened = True
    else:
        layout = content.feature_data
        vertex_count, feature_count, byte_offset = parse_headers(data, layout.header)

        vertex_attributes, byte_offset = normalize_attributes(
            data, byte_offset, layout.vertex_attributes, vertex_count, layout.attributes_order
        )
        feature_attributes, _ = normalize_attributes(
            data, byte_offset, layout.feature_attributes, feature_count, layout.feature_attribute_order
        )
        feature_ids_flattened = flatten_feature_ids_by_face_ranges(feature_attributes)

        # Feature names win on collision
        attributes = {**vertex_attributes, **feature_attributes}
        if "region" in attributes:
            attributes["uvRegion"] = attributes.pop("region")

    position = attributes.get("position")
    if options.coordinate_system == CoordinateSystem.METER_OFFSETS:
        if position is not None:
            enu_matrix = parse_positions(position, tile.mbs)
            content.model_matrix = np.linalg.inv(enu_matrix)
        content.coordinate_system = CoordinateSystem.METER_OFFSETS
    else:
        content.model_matrix = get_model_matrix(position)
        content.coordinate_system = CoordinateSystem.LNGLAT_OFFSETS

    for name in ("color", "uvRegion"):
        _normalize_attribute(attributes.get(name))

    content.attributes = {
        key: attributes[name]
        for name, key in _CONTENT_ATTRIBUTES.items()
        if attributes.get(name) is not None
    }

    indices = attributes.get("indices")
    content.indices = indices.value if indices is not None else None

    id_attribute = attributes.get("id")
    if feature_ids_flattened and id_attribute is not None:
        content.feature_ids = id_attribute.value

    content.vertex_count = vertex_count
    content.byte_length = len(data)

    logger.debug(
        f"Parsed tile: {vertex_count} vertices, "
        f"{0 if content.feature_ids is None else len(content.feature_ids)} feature ids, "
        f"{content.coordinate_system.name}"
    )
    return tile


def _normalize_attribute(attribute: Optional[NormalizedAttribute]) -> None:
    """Flag an integer attribute for 0..1 normalization; values are unchanged."""
    if attribute is not None:
        attribute.normalized = True
