"""Expand compact feature ids to one id per rendered vertex.

Two disjoint strategies:

- feature-index flattening (Draco path): each vertex carries an index into
  the ``i3s-feature-ids`` metadata table.
- face-range flattening (uncompressed path): each feature owns a
  ``[first_triangle, last_triangle]`` range of the triangle list.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from i3s.constants import FEATURE_IDS_METADATA, GL_UNSIGNED_INT
from i3s.tile import NormalizedAttribute


def get_feature_ids_from_feature_index_metadata(
    feature_index: Optional[NormalizedAttribute],
) -> Optional[np.ndarray]:
    """Feature id table attached to the ``id`` attribute by the decompressor."""
    if feature_index is None or not feature_index.metadata:
        return None
    entry = feature_index.metadata.get(FEATURE_IDS_METADATA)
    if not entry or entry.get("intArray") is None:
        return None
    return np.asarray(entry["intArray"])


def flatten_feature_ids_by_feature_indices(
    attributes: dict[str, NormalizedAttribute], feature_ids: np.ndarray
) -> None:
    """Replace per-vertex feature indices in ``attributes["id"]`` with ids."""
    feature_indices = np.asarray(attributes["id"].value, dtype=np.intp)
    attributes["id"].value = np.asarray(feature_ids)[feature_indices]


def flatten_feature_ids_by_face_ranges(attributes: dict[str, NormalizedAttribute]) -> bool:
    """Replace compact ids in ``attributes["id"]`` with per-vertex ids.

    The Nth face range is filled with the Nth compact id. Ranges are laid
    end to end starting at vertex 0, three vertices per triangle; the
    output length is ``(last_triangle + 1) * 3``.

    Returns:
        True if the ids were flattened, False when ``id`` or
        ``faceRange`` is missing.
    """
    id_attribute = attributes.get("id")
    face_range = attributes.get("faceRange")
    if id_attribute is None or face_range is None or not len(face_range.value):
        return False

    compact_ids = id_attribute.value
    ranges = np.asarray(face_range.value, dtype=np.int64)
    flattened = np.zeros((int(ranges[-1]) + 1) * 3, dtype=np.uint32)

    start = 0
    for feature_index, (first, last) in enumerate(ranges.reshape(-1, 2)):
        end = start + int(last - first + 1) * 3
        flattened[start:end] = compact_ids[feature_index]
        start = end

    id_attribute.value = flattened
    id_attribute.type = GL_UNSIGNED_INT
    id_attribute.size = 1
    return True
