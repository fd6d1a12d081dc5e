"""Reference ellipsoid — cartographic/cartesian transforms and ENU frames.

Convention:
    - Cartographic coordinates are (longitude, latitude) in degrees and
      height in meters above the ellipsoid.
    - Cartesian coordinates are Earth-centered, Earth-fixed meters.
    - Matrices are 4x4 numpy arrays applied to column vectors
      (``m @ [x, y, z, 1]``); the translation lives in the last column.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import numpy as np


@dataclass(frozen=True)
class Ellipsoid:
    """An oblate ellipsoid of revolution."""

    semi_major_axis: float
    flattening: float

    WGS84: ClassVar["Ellipsoid"]

    @property
    def eccentricity_squared(self) -> float:
        return self.flattening * (2.0 - self.flattening)

    def cartographic_to_cartesian(self, cartographic: np.ndarray) -> np.ndarray:
        """Convert (lng, lat, height) rows to ECEF (x, y, z) rows.

        Accepts a single triple or an (N, 3) array; returns the same shape.
        """
        cartographic = np.asarray(cartographic, dtype=np.float64)
        lng = np.radians(cartographic[..., 0])
        lat = np.radians(cartographic[..., 1])
        height = cartographic[..., 2]

        sin_lat = np.sin(lat)
        cos_lat = np.cos(lat)
        e2 = self.eccentricity_squared
        n = self.semi_major_axis / np.sqrt(1.0 - e2 * sin_lat * sin_lat)

        out = np.empty(cartographic.shape, dtype=np.float64)
        out[..., 0] = (n + height) * cos_lat * np.cos(lng)
        out[..., 1] = (n + height) * cos_lat * np.sin(lng)
        out[..., 2] = ((1.0 - e2) * n + height) * sin_lat
        return out

    def east_north_up_to_fixed_frame(self, cartographic_origin) -> np.ndarray:
        """Local East-North-Up frame at ``cartographic_origin`` as a 4x4 matrix.

        Columns are the east, north and up unit vectors followed by the
        ECEF origin; the matrix maps ENU meters to ECEF meters.
        """
        lng_deg, lat_deg, _ = (float(v) for v in cartographic_origin)
        lng = np.radians(lng_deg)
        lat = np.radians(lat_deg)
        sin_lng, cos_lng = np.sin(lng), np.cos(lng)
        sin_lat, cos_lat = np.sin(lat), np.cos(lat)

        frame = np.identity(4)
        frame[:3, 0] = (-sin_lng, cos_lng, 0.0)
        frame[:3, 1] = (-sin_lat * cos_lng, -sin_lat * sin_lng, cos_lat)
        frame[:3, 2] = (cos_lat * cos_lng, cos_lat * sin_lng, sin_lat)
        frame[:3, 3] = self.cartographic_to_cartesian(np.asarray(cartographic_origin, dtype=np.float64))
        return frame


Ellipsoid.WGS84 = Ellipsoid(semi_major_axis=6378137.0, flattening=1 / 298.257223563)
