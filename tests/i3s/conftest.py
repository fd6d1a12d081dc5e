"""Shared fixtures for I3S decoder tests."""

from __future__ import annotations

import pytest

from i3s.tile import Tile, Tileset
from tests.lib.i3s_payloads import TEST_MBS, build_geometry_buffer, make_geometry_schema


@pytest.fixture
def geometry_schema() -> dict:
    return make_geometry_schema()


@pytest.fixture
def tileset(geometry_schema) -> Tileset:
    return Tileset(store={"defaultGeometrySchema": geometry_schema})


@pytest.fixture
def tile() -> Tile:
    return Tile(mbs=list(TEST_MBS))


@pytest.fixture
def triangle_buffer() -> bytes:
    """Two triangles at the bounding-sphere center, two features."""
    return build_geometry_buffer(
        positions=[0.0] * 18,
        normals=[0.0, 0.0, 1.0] * 6,
        uv0=[0.0, 0.0, 1.0, 0.0, 1.0, 1.0] * 2,
        colors=[0, 128, 255, 255] * 6,
        regions=[0, 0, 65535, 65535] * 6,
        ids=[7, 9],
        face_ranges=[0, 0, 1, 1],
    )
