"""Binary layout reader for uncompressed I3S geometry buffers.

Buffer layout (I3S 1.6 ``PerAttributeArray`` topology):

    header            vertexCount, featureCount (declared types, 4 bytes each)
    vertex attributes one contiguous array per name in ``ordering``
    feature attributes one contiguous array per name in ``featureAttributeOrder``

Every array holds ``count * valuesPerElement`` little-endian values, where
count is the vertex count for vertex attributes and the feature count for
feature attributes.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np
from loguru import logger

from i3s.constants import GL_TYPE_MAP, I3S_NAMED_HEADER_ATTRIBUTES, dtype_for, size_of
from i3s.tile import AttributeLayout, AttributeSource, HeaderProperty, NormalizedAttribute

# Byte position of each header field
_HEADER_OFFSETS = {
    I3S_NAMED_HEADER_ATTRIBUTES["vertexCount"]: 0,
    I3S_NAMED_HEADER_ATTRIBUTES["featureCount"]: 4,
}


def parse_headers(data: bytes, header: Iterable[HeaderProperty]) -> tuple[int, int, int]:
    """Read the fixed header.

    Returns:
        (vertex_count, feature_count, byte_offset) where byte_offset is
        the sum of the recognised header field sizes.
    """
    counts = {"vertexCount": 0, "featureCount": 0}
    byte_offset = 0

    for entry in header:
        offset = _HEADER_OFFSETS.get(entry.property)
        if offset is None:
            continue
        dtype = dtype_for(entry.type)
        if offset + dtype.itemsize > len(data):
            logger.warning(
                f"Buffer truncated: header field {entry.property} needs "
                f"{offset + dtype.itemsize} bytes, buffer has {len(data)}"
            )
        else:
            counts[entry.property] = int(np.frombuffer(data, dtype=dtype, count=1, offset=offset)[0])
        byte_offset += size_of(entry.type)

    return counts["vertexCount"], counts["featureCount"], byte_offset


def normalize_attributes(
    data: bytes,
    byte_offset: int,
    layouts: dict[str, AttributeLayout],
    count: int,
    order: Iterable[str],
) -> tuple[dict[str, NormalizedAttribute], int]:
    """Decode the attributes named in ``order`` starting at ``byte_offset``.

    Names without a layout entry are skipped. Decoding stops at the first
    attribute whose span does not fit in ``data``: that attribute and all
    following ones are left out. Some tiles declare regions in the schema
    without carrying them, and rely on this.

    Returns:
        (attributes, byte_offset after the last decoded attribute)
    """
    attributes: dict[str, NormalizedAttribute] = {}

    for name in order:
        layout = layouts.get(name)
        if layout is None:
            continue

        values_count = count * layout.values_per_element
        byte_span = values_count * size_of(layout.value_type)
        if byte_offset + byte_span > len(data):
            logger.warning(
                f"Buffer truncated: attribute {name} needs {byte_span} bytes at offset "
                f"{byte_offset}, buffer has {len(data)}; skipping remaining attributes"
            )
            break

        if layout.value_type == "UInt64":
            value = parse_uint64_values(data, values_count, byte_offset)
        else:
            value = np.frombuffer(
                data, dtype=dtype_for(layout.value_type), count=values_count, offset=byte_offset
            )

        attributes[name] = NormalizedAttribute(
            value=value,
            type=GL_TYPE_MAP[layout.value_type],
            size=layout.values_per_element,
            source=AttributeSource.LAYOUT,
        )
        if name == "color":
            attributes[name].normalized = True

        byte_offset += byte_span

    return attributes, byte_offset


def parse_uint64_values(data: bytes, elements_count: int, byte_offset: int = 0) -> np.ndarray:
    """Decode little-endian UInt64 values as float64.

    Each value is assembled from its two 32-bit words as
    ``low + 2**32 * high``. Values above 2**53 lose precision.
    """
    words = np.frombuffer(data, dtype="<u4", count=elements_count * 2, offset=byte_offset)
    words = words.reshape(-1, 2).astype(np.float64)
    return words[:, 0] + 4294967296.0 * words[:, 1]
