"""Tests for I3SSettings — defaults and environment overrides."""

import pytest
from pydantic import ValidationError

from i3s.config import I3SSettings
from i3s.constants import CoordinateSystem


@pytest.mark.unit
class TestI3SSettings:
    def test_defaults(self, monkeypatch):
        for name in ("I3S_COORDINATE_SYSTEM", "I3S_DECODE_TEXTURES", "I3S_TOKEN"):
            monkeypatch.delenv(name, raising=False)
        s = I3SSettings(_env_file=None)
        assert s.coordinate_system == CoordinateSystem.METER_OFFSETS
        assert s.decode_textures is True
        assert s.token is None
        assert s.texture_timeout == 15.0

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("I3S_COORDINATE_SYSTEM", "3")
        monkeypatch.setenv("I3S_DECODE_TEXTURES", "false")
        monkeypatch.setenv("I3S_TOKEN", "abc")
        s = I3SSettings(_env_file=None)
        assert s.coordinate_system == CoordinateSystem.LNGLAT_OFFSETS
        assert s.decode_textures is False
        assert s.token == "abc"

    def test_coordinate_system_by_name(self, monkeypatch):
        monkeypatch.setenv("I3S_COORDINATE_SYSTEM", "LNGLAT_OFFSETS")
        assert I3SSettings(_env_file=None).coordinate_system == CoordinateSystem.LNGLAT_OFFSETS
        monkeypatch.setenv("I3S_COORDINATE_SYSTEM", "meter_offsets")
        assert I3SSettings(_env_file=None).coordinate_system == CoordinateSystem.METER_OFFSETS

    def test_unknown_coordinate_system_rejected(self, monkeypatch):
        monkeypatch.setenv("I3S_COORDINATE_SYSTEM", "WEB_MERCATOR")
        with pytest.raises(ValidationError):
            I3SSettings(_env_file=None)

    def test_explicit_arguments(self):
        s = I3SSettings(_env_file=None, coordinate_system=CoordinateSystem.LNGLAT_OFFSETS, token="t")
        assert s.coordinate_system == CoordinateSystem.LNGLAT_OFFSETS
        assert s.token == "t"
