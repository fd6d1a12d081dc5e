"""Draco-compressed geometry: decode and remap to NormalizedAttribute.

The decompressor itself is a pluggable callable (``bytes -> DecodedMesh``).
I3S writers name their Draco attributes by convention and attach
metadata (position scale, feature id table) per attribute; this module
maps those names onto the canonical attribute names used by the rest of
the decoder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import DracoPy
import numpy as np

from i3s.constants import gl_type_for_dtype
from i3s.tile import AttributeSource, NormalizedAttribute


@dataclass
class DecodedAttribute:
    value: np.ndarray
    size: int
    normalized: bool = False


@dataclass
class DecodedMesh:
    """Output of a mesh decompressor.

    Attributes:
        attributes: Arrays keyed by Draco attribute name (``POSITION``,
            ``NORMAL``, ``COLOR_0``, ``TEXCOORD_0``, ``feature-index``,
            ``uv-region``).
        indices: Triangle vertex indices, if the mesh is indexed.
        vertex_count: Number of decoded vertices.
        attribute_metadata: Per-attribute metadata entries keyed by the
            same attribute names.
    """

    attributes: dict[str, DecodedAttribute]
    indices: Optional[np.ndarray]
    vertex_count: int
    attribute_metadata: dict[str, dict[str, Any]] = field(default_factory=dict)


MeshDecompressor = Callable[[bytes], DecodedMesh]

# Draco attribute name -> canonical attribute name
DRACO_ATTRIBUTE_NAMES = {
    "POSITION": "position",
    "NORMAL": "normal",
    "COLOR_0": "color",
    "TEXCOORD_0": "uv0",
    "feature-index": "id",
    "uv-region": "uvRegion",
}

# Draco attributes whose metadata is carried onto the normalized attribute
_METADATA_ATTRIBUTES = ("POSITION", "feature-index")


def decode_draco(data: bytes) -> DecodedMesh:
    """Decode a Draco mesh with DracoPy.

    DracoPy exposes the standard attributes only; custom I3S attributes
    (``feature-index``, ``uv-region``) and attribute metadata need an
    I3S-aware decompressor.
    """
    mesh = DracoPy.decode(bytes(data))

    points = np.asarray(mesh.points, dtype=np.float32)
    attributes = {"POSITION": DecodedAttribute(points.reshape(-1), 3)}

    normals = getattr(mesh, "normals", None)
    if normals is not None and len(normals):
        attributes["NORMAL"] = DecodedAttribute(np.asarray(normals, dtype=np.float32).reshape(-1), 3)

    colors = getattr(mesh, "colors", None)
    if colors is not None and len(colors):
        colors = np.asarray(colors, dtype=np.uint8)
        attributes["COLOR_0"] = DecodedAttribute(colors.reshape(-1), colors.shape[-1], normalized=True)

    tex_coord = getattr(mesh, "tex_coord", None)
    if tex_coord is not None and len(tex_coord):
        attributes["TEXCOORD_0"] = DecodedAttribute(np.asarray(tex_coord, dtype=np.float32).reshape(-1), 2)

    faces = getattr(mesh, "faces", None)
    indices = None
    if faces is not None and len(faces):
        indices = np.asarray(faces, dtype=np.uint32).reshape(-1)

    return DecodedMesh(attributes=attributes, indices=indices, vertex_count=len(points))


def normalize_decoded_mesh(mesh: DecodedMesh) -> tuple[dict[str, NormalizedAttribute], int]:
    """Remap decompressor output to canonical NormalizedAttributes.

    Returns:
        (attributes, vertex_count). ``attributes`` may hold ``indices``
        in addition to the canonical attribute names.
    """
    attributes: dict[str, NormalizedAttribute] = {}

    for draco_name, name in DRACO_ATTRIBUTE_NAMES.items():
        decoded = mesh.attributes.get(draco_name)
        if decoded is None:
            continue
        attributes[name] = NormalizedAttribute(
            value=decoded.value,
            type=gl_type_for_dtype(decoded.value.dtype),
            size=decoded.size,
            normalized=decoded.normalized,
            source=AttributeSource.DRACO,
        )

    if mesh.indices is not None:
        attributes["indices"] = NormalizedAttribute(
            value=mesh.indices,
            type=gl_type_for_dtype(mesh.indices.dtype),
            size=1,
            source=AttributeSource.DRACO,
        )

    for draco_name in _METADATA_ATTRIBUTES:
        metadata = mesh.attribute_metadata.get(draco_name)
        target = attributes.get(DRACO_ATTRIBUTE_NAMES[draco_name])
        if metadata is not None and target is not None:
            target.metadata = metadata

    return attributes, mesh.vertex_count
