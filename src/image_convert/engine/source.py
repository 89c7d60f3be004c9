"""Decode path or byte inputs into :class:`ImageHandle` instances."""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import cairosvg
from PIL import Image, UnidentifiedImageError

from src.datatypes import InterlaceType
from src.image_convert.engine.env import ensure_engine_initialized
from src.image_convert.engine.handle import ImageHandle
from src.image_convert.render.errors import EngineError, MarkupParseError
from src.image_convert.render.vector import first_element_name

logger = logging.getLogger(__name__)

__all__ = [
    "ImageProbe",
    "decode_markup",
    "looks_like_svg",
    "ping_image_bytes",
    "ping_image_path",
    "read_image_bytes",
    "read_image_path",
    "render_svg",
]


@dataclass(frozen=True)
class ImageProbe:
    """Header-level facts about an image."""

    width: int
    height: int
    format: str
    interlace: InterlaceType


def _source_interlace(image: Image.Image) -> InterlaceType:
    """Map Pillow's decoder info onto an :class:`InterlaceType`."""

    info = image.info
    fmt = (image.format or "").upper()
    if fmt == "JPEG" and (info.get("progressive") or info.get("progression")):
        return InterlaceType.JPEG
    if fmt == "PNG" and info.get("interlace"):
        return InterlaceType.PNG
    if fmt == "GIF" and info.get("interlace"):
        return InterlaceType.GIF
    return InterlaceType.NONE


def decode_markup(data: bytes) -> Optional[str]:
    """Return ``data`` as UTF-8 text (BOM tolerated), or ``None`` when it is not valid UTF-8."""

    if data.startswith(b"\xef\xbb\xbf"):
        data = data[3:]
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return None


def looks_like_svg(data: bytes) -> bool:
    """Return True when the first element of ``data`` is an ``svg`` element."""

    text = decode_markup(data)
    if text is None:
        return False
    name = first_element_name(text)
    return name is not None and name.rpartition(":")[2].lower() == "svg"


def render_svg(markup: str | bytes, *, base_url: Optional[str] = None) -> ImageHandle:
    """
    Rasterize SVG markup at its intrinsic size.

    Raises:
        MarkupParseError: If CairoSVG rejects the markup.
    """

    ensure_engine_initialized()
    payload = markup.encode("utf-8") if isinstance(markup, str) else markup
    try:
        png_bytes = cairosvg.svg2png(bytestring=payload, url=base_url)
    except Exception as exc:  # cairosvg surfaces XML, value, and cairo errors alike
        raise MarkupParseError(f"Failed to render SVG: {exc}") from exc
    if not png_bytes:
        raise MarkupParseError("SVG rendered to an empty image")
    image = Image.open(io.BytesIO(png_bytes))
    image.load()
    logger.debug("Rendered SVG markup at %dx%d", image.width, image.height)
    return ImageHandle(image, "SVG", interlace=InterlaceType.NONE)


def _open_raster(stream: io.BytesIO | Path) -> ImageHandle:
    image = Image.open(stream)
    image.load()
    return ImageHandle(image, image.format or "UNKNOWN", interlace=_source_interlace(image))


def _probe_raster(stream: io.BytesIO | Path) -> ImageProbe:
    with Image.open(stream) as image:
        width, height = image.size
        return ImageProbe(int(width), int(height), (image.format or "UNKNOWN").upper(), _source_interlace(image))


def read_image_bytes(data: bytes) -> ImageHandle:
    """
    Decode an in-memory image.

    Raises:
        EngineError: If the bytes are neither a Pillow-readable raster nor SVG markup.
    """

    ensure_engine_initialized()
    try:
        return _open_raster(io.BytesIO(data))
    except UnidentifiedImageError:
        if not looks_like_svg(data):
            raise EngineError("Unsupported or corrupt image data") from None
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise EngineError(f"Failed to decode image data: {exc}") from exc

    try:
        return render_svg(data)
    except MarkupParseError as exc:
        raise EngineError(str(exc)) from exc


def read_image_path(path: str | Path) -> ImageHandle:
    """
    Decode an image file.

    Raises:
        EngineError: If the file is missing, unreadable, or not a supported image.
    """

    ensure_engine_initialized()
    source = Path(path)
    try:
        return _open_raster(source)
    except FileNotFoundError as exc:
        raise EngineError(f"Image not found: {source}") from exc
    except UnidentifiedImageError:
        pass
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise EngineError(f"Failed to decode {source}: {exc}") from exc

    try:
        data = source.read_bytes()
    except OSError as exc:
        raise EngineError(f"Failed to read {source}: {exc}") from exc
    if not looks_like_svg(data):
        raise EngineError(f"Unsupported or corrupt image file: {source}")
    try:
        return render_svg(data, base_url=str(source))
    except MarkupParseError as exc:
        raise EngineError(str(exc)) from exc


def _probe_svg(data: bytes, *, base_url: Optional[str] = None) -> ImageProbe:
    handle = render_svg(data, base_url=base_url)
    return ImageProbe(handle.width, handle.height, handle.format, InterlaceType.NONE)


def ping_image_bytes(data: bytes) -> ImageProbe:
    """Report size, format and interlacing of in-memory image data without decoding pixels."""

    ensure_engine_initialized()
    try:
        return _probe_raster(io.BytesIO(data))
    except UnidentifiedImageError:
        if not looks_like_svg(data):
            raise EngineError("Unsupported or corrupt image data") from None
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise EngineError(f"Failed to identify image data: {exc}") from exc
    try:
        return _probe_svg(data)
    except MarkupParseError as exc:
        raise EngineError(str(exc)) from exc


def ping_image_path(path: str | Path) -> ImageProbe:
    """Report size, format and interlacing of an image file without decoding pixels."""

    ensure_engine_initialized()
    source = Path(path)
    try:
        return _probe_raster(source)
    except FileNotFoundError as exc:
        raise EngineError(f"Image not found: {source}") from exc
    except UnidentifiedImageError:
        pass
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise EngineError(f"Failed to identify {source}: {exc}") from exc
    try:
        data = source.read_bytes()
    except OSError as exc:
        raise EngineError(f"Failed to read {source}: {exc}") from exc
    if not looks_like_svg(data):
        raise EngineError(f"Unsupported or corrupt image file: {source}")
    try:
        return _probe_svg(data, base_url=str(source))
    except MarkupParseError as exc:
        raise EngineError(str(exc)) from exc
