"""Tests for the coordinate transformer — ECEF positions and model matrices."""

import numpy as np
import pytest

from i3s.constants import GL_FLOAT
from i3s.ellipsoid import Ellipsoid
from i3s.parsers.positions import (
    get_model_matrix,
    get_scale_factors,
    offsets_to_cartesians,
    parse_positions,
)
from i3s.tile import NormalizedAttribute
from tests.lib.i3s_payloads import TEST_MBS, transform_point

SCALE_METADATA = {"i3s-scale_x": {"double": 2.0}, "i3s-scale_y": {"double": 0.5}}


def _positions(values, metadata=None):
    return NormalizedAttribute(
        value=np.asarray(values, dtype=np.float32), type=GL_FLOAT, size=3, metadata=metadata
    )


@pytest.mark.unit
class TestScaleFactors:
    def test_defaults(self):
        assert get_scale_factors(None) == (1.0, 1.0)
        assert get_scale_factors({}) == (1.0, 1.0)

    def test_from_metadata(self):
        assert get_scale_factors(SCALE_METADATA) == (2.0, 0.5)

    def test_zero_scale_treated_as_absent(self):
        assert get_scale_factors({"i3s-scale_x": {"double": 0.0}}) == (1.0, 1.0)


@pytest.mark.unit
class TestMeterOffsets:
    """Offsets become absolute ECEF coordinates."""

    def test_center_maps_to_center(self):
        attribute = _positions([0.0, 0.0, 0.0])
        parse_positions(attribute, TEST_MBS)
        expected = Ellipsoid.WGS84.cartographic_to_cartesian(TEST_MBS[:3])
        np.testing.assert_allclose(attribute.value, expected, rtol=0, atol=1e-6)
        assert attribute.value.dtype == np.float64

    def test_inverse_frame_recovers_local_origin(self):
        attribute = _positions([0.0, 0.0, 0.0])
        enu = parse_positions(attribute, TEST_MBS)
        local = transform_point(np.linalg.inv(enu), attribute.value)
        np.testing.assert_allclose(local, [0.0, 0.0, 0.0], atol=1e-6)

    def test_height_offset_is_local_up(self):
        attribute = _positions([0.0, 0.0, 25.0])
        enu = parse_positions(attribute, TEST_MBS)
        local = transform_point(np.linalg.inv(enu), attribute.value)
        np.testing.assert_allclose(local, [0.0, 0.0, 25.0], atol=1e-6)

    def test_degree_offsets_scaled(self):
        origin = np.array(TEST_MBS[:3])
        out = offsets_to_cartesians(np.array([0.001, 0.002, 0.0]), SCALE_METADATA, origin)
        expected = Ellipsoid.WGS84.cartographic_to_cartesian(
            [TEST_MBS[0] + 0.002, TEST_MBS[1] + 0.001, TEST_MBS[2]]
        )
        np.testing.assert_allclose(out, expected, atol=1e-6)

    def test_input_not_modified(self):
        vertices = np.array([0.001, 0.002, 3.0])
        offsets_to_cartesians(vertices, None, np.array(TEST_MBS[:3]))
        assert list(vertices) == [0.001, 0.002, 3.0]

    def test_many_vertices(self):
        attribute = _positions([0.0, 0.0, 0.0] * 4)
        parse_positions(attribute, TEST_MBS)
        assert attribute.value.shape == (12,)


@pytest.mark.unit
class TestLngLatOffsets:
    """Scale-only model matrix."""

    def test_identity_without_metadata(self):
        np.testing.assert_array_equal(get_model_matrix(_positions([0.0] * 3)), np.identity(4))

    def test_scale_from_metadata(self):
        matrix = get_model_matrix(_positions([0.0] * 3, SCALE_METADATA))
        np.testing.assert_array_equal(matrix, np.diag([2.0, 0.5, 1.0, 1.0]))

    def test_missing_position(self):
        np.testing.assert_array_equal(get_model_matrix(None), np.identity(4))
