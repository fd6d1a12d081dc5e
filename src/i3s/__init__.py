"""I3S tile content decoder.

Turns one I3S node payload into renderer-ready geometry, per-vertex
feature ids and a glTF-style PBR material.
"""

from i3s.constants import CoordinateSystem
from i3s.errors import I3SError, MissingSchemaError, TextureUnavailableError
from i3s.parsers.tile_content import parse_i3s_tile_content
from i3s.tile import NormalizedAttribute, Tile, TileContent, Tileset

__all__ = [
    "CoordinateSystem",
    "I3SError",
    "MissingSchemaError",
    "NormalizedAttribute",
    "TextureUnavailableError",
    "Tile",
    "TileContent",
    "Tileset",
    "parse_i3s_tile_content",
]
