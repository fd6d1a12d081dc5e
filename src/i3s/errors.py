"""Exceptions raised while decoding an I3S tile."""


class I3SError(RuntimeError):
    """Base class for tile decoding errors."""


class MissingSchemaError(I3SError):
    """Raised when the tileset carries no ``defaultGeometrySchema``."""


class TextureUnavailableError(I3SError):
    """Raised when a tile texture cannot be fetched or decoded.

    Never fatal for the tile: the orchestrator logs it and carries on
    without a texture.
    """
