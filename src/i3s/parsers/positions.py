"""Coordinate transformer for decoded positions.

I3S positions are offsets from the node's bounding-sphere center: x and y
in degrees of longitude/latitude (optionally scaled by Draco metadata),
z in meters.

METER_OFFSETS:  positions become absolute ECEF coordinates; the model
                matrix is the inverse of the ENU frame at the center.
LNGLAT_OFFSETS: positions stay untouched; the model matrix only applies
                the per-axis scale.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from i3s.constants import GL_DOUBLE, SCALE_X_METADATA, SCALE_Y_METADATA
from i3s.ellipsoid import Ellipsoid
from i3s.tile import NormalizedAttribute


def get_scale_factors(metadata: Optional[dict[str, Any]]) -> tuple[float, float]:
    """Per-axis position scale from Draco metadata, 1.0 when absent."""
    metadata = metadata or {}
    scale_x = (metadata.get(SCALE_X_METADATA) or {}).get("double") or 1.0
    scale_y = (metadata.get(SCALE_Y_METADATA) or {}).get("double") or 1.0
    return float(scale_x), float(scale_y)


def offsets_to_cartesians(
    vertices: np.ndarray,
    metadata: Optional[dict[str, Any]],
    cartographic_origin: np.ndarray,
    ellipsoid: Ellipsoid = Ellipsoid.WGS84,
) -> np.ndarray:
    """Convert position offsets to absolute ECEF coordinates.

    Returns a new flat float64 array of the same length as ``vertices``.
    """
    scale_x, scale_y = get_scale_factors(metadata)

    cartographic = np.array(vertices, dtype=np.float64).reshape(-1, 3)
    cartographic[:, 0] *= scale_x
    cartographic[:, 1] *= scale_y
    cartographic += cartographic_origin

    return ellipsoid.cartographic_to_cartesian(cartographic).reshape(-1)


def parse_positions(
    attribute: NormalizedAttribute, mbs, ellipsoid: Ellipsoid = Ellipsoid.WGS84
) -> np.ndarray:
    """Rewrite ``attribute`` to ECEF coordinates around ``mbs``.

    Returns:
        The ENU frame matrix at the bounding-sphere center.
    """
    cartographic_origin = np.array([mbs[0], mbs[1], mbs[2]], dtype=np.float64)
    enu_matrix = ellipsoid.east_north_up_to_fixed_frame(cartographic_origin)

    attribute.value = offsets_to_cartesians(
        attribute.value, attribute.metadata, cartographic_origin, ellipsoid
    )
    attribute.type = GL_DOUBLE
    return enu_matrix


def get_model_matrix(attribute: Optional[NormalizedAttribute]) -> np.ndarray:
    """Scale-only model matrix for positions kept as lng/lat offsets."""
    scale_x, scale_y = get_scale_factors(attribute.metadata if attribute else None)
    return np.diag([scale_x, scale_y, 1.0, 1.0])
