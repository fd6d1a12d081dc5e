"""Tile, Tileset and decoded-content dataclasses.

Raw I3S JSON (the tileset store, material definitions) is kept as plain
dicts with their I3S camelCase keys. Everything produced by the
decoder is a dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

import numpy as np

from i3s.constants import CoordinateSystem
from i3s.errors import MissingSchemaError


class AttributeSource(str, Enum):
    """Which decode path produced a NormalizedAttribute."""

    LAYOUT = "layout"
    DRACO = "draco"


@dataclass
class NormalizedAttribute:
    """A decoded vertex or feature attribute.

    Both decode paths (binary layout reader and Draco decompressor)
    produce this shape, so everything downstream is path-agnostic.

    Attributes:
        value: Flat numeric array, ``size`` values per element.
        type: GL component type constant.
        size: Values per element.
        normalized: Consumer should map the integer range to 0..1.
        metadata: Side-channel entries keyed by name, e.g.
            ``{"i3s-scale_x": {"double": 0.5}}``.
        source: Decode path that produced the attribute.
    """

    value: np.ndarray
    type: int
    size: int
    normalized: bool = False
    metadata: Optional[dict[str, dict[str, Any]]] = None
    source: AttributeSource = AttributeSource.LAYOUT


@dataclass
class AttributeLayout:
    """Declared layout of one attribute in defaultGeometrySchema."""

    value_type: str
    values_per_element: int
    byte_offset: int = 0
    count: int = 0


@dataclass(frozen=True)
class HeaderProperty:
    property: str
    type: str


@dataclass
class FeatureDataLayout:
    """Per-tileset template describing the uncompressed geometry buffer."""

    vertex_attributes: dict[str, AttributeLayout] = field(default_factory=dict)
    feature_attributes: dict[str, AttributeLayout] = field(default_factory=dict)
    attributes_order: list[str] = field(default_factory=list)
    feature_attribute_order: list[str] = field(default_factory=list)
    header: list[HeaderProperty] = field(default_factory=list)


@dataclass
class TextureImage:
    """Decoded RGBA image, ``data`` has shape (height, width, 4)."""

    width: int
    height: int
    data: np.ndarray


@dataclass
class CompressedTexture:
    """Mipmap levels produced by a compressed-texture decoder."""

    width: int
    height: int
    data: list
    compressed: bool = True
    mipmaps: bool = False


Texture = Union[TextureImage, CompressedTexture, bytes]


@dataclass
class TileContent:
    """Renderer-ready result of parsing one tile payload."""

    attributes: dict[str, NormalizedAttribute] = field(default_factory=dict)
    indices: Optional[np.ndarray] = None
    feature_ids: Optional[np.ndarray] = None
    material: Optional[dict[str, Any]] = None
    texture: Optional[Texture] = None
    model_matrix: np.ndarray = field(default_factory=lambda: np.identity(4))
    coordinate_system: CoordinateSystem = CoordinateSystem.METER_OFFSETS
    vertex_count: int = 0
    byte_length: int = 0
    feature_data: Optional[FeatureDataLayout] = None


@dataclass
class Tile:
    """One node of an I3S scene layer.

    Attributes:
        mbs: Minimum bounding sphere ``[lng, lat, height, radius]``.
        texture_url: URL of the node texture, if any.
        texture_format: I3S texture format name (``jpeg``, ``png``,
            ``dds``, ``ktx-etc2``, ``ktx2``).
        texture_loader_options: Extra options forwarded to the decoders.
        material_definition: glTF-style material JSON of the node.
        is_draco_geometry: Geometry buffer is Draco-compressed.
        content: Filled in by the parser.
    """

    mbs: list[float]
    texture_url: Optional[str] = None
    texture_format: str = "jpeg"
    texture_loader_options: dict[str, Any] = field(default_factory=dict)
    material_definition: Optional[dict[str, Any]] = None
    is_draco_geometry: bool = False
    content: Optional[TileContent] = None


@dataclass
class Tileset:
    """The owning scene layer; ``store`` is the layer's ``store`` JSON."""

    store: dict[str, Any] = field(default_factory=dict)

    @property
    def default_geometry_schema(self) -> dict[str, Any]:
        schema = self.store.get("defaultGeometrySchema")
        if not schema:
            raise MissingSchemaError("Tileset store has no defaultGeometrySchema")
        return schema
