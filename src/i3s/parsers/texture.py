"""Fetch and decode node textures.

Formats:
    jpeg, png        decoded with Pillow into an RGBA TextureImage
    dds, ktx-etc2    handed to a compressed-texture decoder
    ktx2             handed to a compressed-texture decoder (Basis)
Unknown formats are treated as images.

Any failure raises TextureUnavailableError; the caller decides whether
that is fatal (it never is for tile parsing).
"""

from __future__ import annotations

import asyncio
import io
from typing import Any, Callable, Optional

import httpx
import numpy as np
from loguru import logger
from PIL import Image, UnidentifiedImageError

from i3s.config import I3SSettings
from i3s.constants import TEXTURE_FORMAT_IMAGE, TEXTURE_LOADERS
from i3s.errors import TextureUnavailableError
from i3s.tile import CompressedTexture, Texture, TextureImage

CompressedTextureDecoder = Callable[[bytes, dict[str, Any]], list]


def get_url_with_token(url: str, token: Optional[str] = None) -> str:
    """Append the access token to ``url``, keeping its query string.

    Raises:
        httpx.InvalidURL: ``url`` cannot be parsed.
    """
    if not token:
        return url
    return str(httpx.URL(url).copy_merge_params({"token": token}))


async def fetch_texture(
    url: str, options: I3SSettings, client: Optional[httpx.AsyncClient] = None
) -> bytes:
    """Download the texture bytes at ``url``, adding ``options.token``."""
    headers = {"User-Agent": options.user_agent}
    try:
        full_url = get_url_with_token(url, options.token)
        if client is not None:
            resp = await client.get(full_url, headers=headers, timeout=options.texture_timeout)
            resp.raise_for_status()
        else:
            async with httpx.AsyncClient() as own_client:
                resp = await own_client.get(full_url, headers=headers, timeout=options.texture_timeout)
                resp.raise_for_status()
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise TextureUnavailableError(f"Texture fetch failed: {url}: {e}") from e
    return resp.content


def decode_image(data: bytes, loader_options: Optional[dict[str, Any]] = None) -> TextureImage:
    """Decode a jpeg/png texture to RGBA pixels."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            pixels = np.asarray(image.convert("RGBA"))
    except (UnidentifiedImageError, OSError) as e:
        raise TextureUnavailableError(f"Image decode failed: {e}") from e
    height, width = pixels.shape[:2]
    return TextureImage(width=width, height=height, data=pixels)


def decode_compressed(
    data: bytes,
    decoder: Optional[CompressedTextureDecoder],
    loader_options: Optional[dict[str, Any]] = None,
) -> CompressedTexture:
    """Decode a compressed texture into its mipmap levels."""
    if decoder is None:
        raise TextureUnavailableError("No compressed texture decoder configured")
    try:
        levels = decoder(data, loader_options or {})
    except Exception as e:  # noqa: BLE001 - decoder is third-party code
        raise TextureUnavailableError(f"Compressed texture decode failed: {e}") from e
    if not levels:
        raise TextureUnavailableError("Compressed texture decoder returned no levels")
    first = levels[0]
    return CompressedTexture(width=first.width, height=first.height, data=list(levels))


def decode_texture(
    data: bytes,
    texture_format: str,
    loader_options: Optional[dict[str, Any]] = None,
    compressed_decoder: Optional[CompressedTextureDecoder] = None,
) -> Texture:
    loader = TEXTURE_LOADERS.get(texture_format, TEXTURE_FORMAT_IMAGE)
    if loader == TEXTURE_FORMAT_IMAGE:
        return decode_image(data, loader_options)
    return decode_compressed(data, compressed_decoder, loader_options)


async def load_texture(
    url: str,
    texture_format: str,
    options: I3SSettings,
    *,
    loader_options: Optional[dict[str, Any]] = None,
    client: Optional[httpx.AsyncClient] = None,
    compressed_decoder: Optional[CompressedTextureDecoder] = None,
) -> Texture:
    """Fetch a texture and, if ``options.decode_textures``, decode it.

    Raises:
        TextureUnavailableError: Fetch or decode failed.
    """
    data = await fetch_texture(url, options, client)
    logger.debug(f"Fetched texture {url} ({len(data)} bytes, {texture_format})")

    if not options.decode_textures:
        return data

    return await asyncio.to_thread(
        decode_texture, data, texture_format, loader_options, compressed_decoder
    )
