"""Type tables and named attributes of the I3S geometry buffer.

Value types are the I3S names used by ``defaultGeometrySchema``
(``UInt8``, ``Float32``...). GL constants follow WebGL numbering so the
decoded attributes can be handed straight to a glTF-style renderer.
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np

# WebGL component type constants
GL_UNSIGNED_BYTE = 5121
GL_UNSIGNED_SHORT = 5123
GL_UNSIGNED_INT = 5125
GL_FLOAT = 5126
GL_DOUBLE = 5130

GL_TYPE_MAP: dict[str, int] = {
    "UInt8": GL_UNSIGNED_BYTE,
    "UInt16": GL_UNSIGNED_SHORT,
    "UInt32": GL_UNSIGNED_INT,
    "Float32": GL_FLOAT,
    "UInt64": GL_DOUBLE,
}

# Buffer content is little-endian regardless of host byte order.
# UInt64 decodes to float64 (see parsers.binary.parse_uint64_values).
TYPE_DTYPE_MAP: dict[str, np.dtype] = {
    "UInt8": np.dtype("<u1"),
    "UInt16": np.dtype("<u2"),
    "UInt32": np.dtype("<u4"),
    "Float32": np.dtype("<f4"),
    "UInt64": np.dtype("<f8"),
}

_TYPE_SIZES: dict[str, int] = {
    "UInt8": 1,
    "UInt16": 2,
    "UInt32": 4,
    "Float32": 4,
    "UInt64": 8,
}


class CoordinateSystem(IntEnum):
    """How decoded positions relate to the world."""

    METER_OFFSETS = 2
    LNGLAT_OFFSETS = 3


I3S_NAMED_VERTEX_ATTRIBUTES = ("position", "normal", "uv0", "color", "region")
I3S_NAMED_HEADER_ATTRIBUTES = {"vertexCount": "vertexCount", "featureCount": "featureCount"}

# Metadata keys written by I3S-aware Draco encoders
SCALE_X_METADATA = "i3s-scale_x"
SCALE_Y_METADATA = "i3s-scale_y"
FEATURE_IDS_METADATA = "i3s-feature-ids"

TEXTURE_FORMAT_IMAGE = "image"
TEXTURE_FORMAT_COMPRESSED = "compressed"
TEXTURE_FORMAT_BASIS = "basis"

TEXTURE_LOADERS: dict[str, str] = {
    "jpeg": TEXTURE_FORMAT_IMAGE,
    "png": TEXTURE_FORMAT_IMAGE,
    "ktx-etc2": TEXTURE_FORMAT_COMPRESSED,
    "dds": TEXTURE_FORMAT_COMPRESSED,
    "ktx2": TEXTURE_FORMAT_BASIS,
}


def size_of(value_type: str) -> int:
    """Byte size of one element of an I3S value type."""
    try:
        return _TYPE_SIZES[value_type]
    except KeyError:
        raise ValueError(f"Unsupported I3S value type: {value_type}") from None


def dtype_for(value_type: str) -> np.dtype:
    """numpy dtype used to view a buffer region of ``value_type``."""
    try:
        return TYPE_DTYPE_MAP[value_type]
    except KeyError:
        raise ValueError(f"Unsupported I3S value type: {value_type}") from None


def gl_type_for_dtype(dtype: np.dtype) -> int:
    """Map a decoded numpy dtype back to a GL component type."""
    kind = np.dtype(dtype)
    if kind == np.uint8:
        return GL_UNSIGNED_BYTE
    if kind == np.uint16:
        return GL_UNSIGNED_SHORT
    if kind in (np.uint32, np.int32):
        return GL_UNSIGNED_INT
    if kind == np.float64:
        return GL_DOUBLE
    return GL_FLOAT
