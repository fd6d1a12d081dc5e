"""Configuration management using Pydantic settings."""

from typing import Any, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from i3s.constants import CoordinateSystem


class I3SSettings(BaseSettings):
    """Tile parsing options, loaded from ``I3S_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="I3S_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Where decoded positions live (see parsers.positions)
    coordinate_system: CoordinateSystem = CoordinateSystem.METER_OFFSETS

    # Decode fetched textures; when off the raw bytes are kept
    decode_textures: bool = True

    # Access token appended to texture URLs
    token: Optional[str] = None

    # Texture HTTP fetch
    texture_timeout: float = 15.0  # seconds
    user_agent: str = "i3s-tile-content/0.1.0"

    @field_validator("coordinate_system", mode="before")
    @classmethod
    def _coordinate_system_by_name(cls, value: Any) -> Any:
        # Accept METER_OFFSETS / LNGLAT_OFFSETS as well as 2 / 3
        if isinstance(value, str) and not value.strip().isdigit():
            name = value.strip().upper()
            if name in CoordinateSystem.__members__:
                return CoordinateSystem[name]
        return value


settings = I3SSettings()
