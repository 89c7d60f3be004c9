"""Per-format conversion pipelines."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from src.datatypes import (
    BMPConfig,
    ColorName,
    ConversionConfig,
    GIFConfig,
    GrayRawConfig,
    ICOConfig,
    ImageConfig,
    InterlaceType,
    JPGConfig,
    OutputFormat,
    PGMConfig,
    PNGConfig,
    TIFFConfig,
    WEBPConfig,
)
from src.image_convert.engine.handle import ImageHandle, write_icon
from src.image_convert.pipeline import fetch_handle, resize_and_sharpen
from src.image_convert.render.encoders import map_jpeg_subsampling
from src.image_convert.render.errors import ImageConvertError, OutputPathError
from src.image_convert.render.vector import is_vector_format
from src.image_convert.resource import DataResource, HandleResource, ImageResource, PathResource

logger = logging.getLogger(__name__)

__all__ = [
    "FORMAT_EXTENSIONS",
    "convert",
    "infer_format",
    "to_bmp",
    "to_gif",
    "to_gray_raw",
    "to_ico",
    "to_jpg",
    "to_pgm",
    "to_png",
    "to_tiff",
    "to_webp",
    "validate_extension",
]


FORMAT_EXTENSIONS: Dict[OutputFormat, tuple[str, ...]] = {
    OutputFormat.BMP: (".bmp",),
    OutputFormat.JPEG: (".jpg", ".jpeg"),
    OutputFormat.PNG: (".png",),
    OutputFormat.GIF: (".gif",),
    OutputFormat.WEBP: (".webp",),
    OutputFormat.TIFF: (".tif", ".tiff"),
    OutputFormat.ICO: (".ico",),
    OutputFormat.PGM: (".pgm",),
    OutputFormat.GRAY_RAW: (".raw",),
}


def validate_extension(path: Path, fmt: OutputFormat) -> None:
    """Raise :class:`OutputPathError` unless ``path`` ends with one of ``fmt``'s extensions."""

    allowed = FORMAT_EXTENSIONS[fmt]
    if path.suffix.lower() not in allowed:
        names = " or ".join(ext.lstrip(".") for ext in allowed)
        raise OutputPathError(f"The file extension of {path.name} is not {names}")


def infer_format(path: str | Path) -> Optional[OutputFormat]:
    """Return the output format whose extension ``path`` carries, if any."""

    suffix = Path(path).suffix.lower()
    for fmt, extensions in FORMAT_EXTENSIONS.items():
        if suffix in extensions:
            return fmt
    return None


def _write_output(output: ImageResource, handle: ImageHandle, fmt: OutputFormat, engine_format: str) -> None:
    if isinstance(output, PathResource):
        validate_extension(output.path, fmt)
        handle.write_to_path(output.path, engine_format)
    elif isinstance(output, DataResource):
        output.data.extend(handle.write_to_bytes(engine_format))
    else:
        output.handle = handle


def _prepare(
    source: ImageResource,
    config: ImageConfig,
    *,
    background: Optional[ColorName] = None,
) -> ImageHandle:
    """Fetch, flatten onto ``background``, resize and apply the metadata policy."""

    fetched = fetch_handle(source, config)
    handle = fetched.handle
    if background is not None:
        handle.remove_alpha(background)
    if not fetched.final:
        resize_and_sharpen(handle, config)
    if not config.remain_profile:
        handle.strip_metadata()
    return handle


def _apply_resolution(handle: ImageHandle, ppi: Optional[float]) -> None:
    if ppi is not None and ppi >= 0:
        handle.set_resolution(ppi, ppi)


def to_bmp(output: ImageResource, source: ImageResource, config: Optional[BMPConfig] = None) -> None:
    config = config or BMPConfig()
    handle = _prepare(source, config, background=config.background_color)
    _apply_resolution(handle, config.ppi)
    _write_output(output, handle, OutputFormat.BMP, "BMP")


def to_jpg(output: ImageResource, source: ImageResource, config: Optional[JPGConfig] = None) -> None:
    config = config or JPGConfig()
    handle = _prepare(source, config, background=config.background_color)
    handle.set_chroma_subsampling(map_jpeg_subsampling(config.force_to_chroma_quartered))
    handle.set_compression_quality(min(config.quality, 100))
    handle.set_interlace(InterlaceType.LINE)
    _apply_resolution(handle, config.ppi)
    _write_output(output, handle, OutputFormat.JPEG, "JPEG")


def to_png(output: ImageResource, source: ImageResource, config: Optional[PNGConfig] = None) -> None:
    config = config or PNGConfig()
    handle = _prepare(source, config, background=config.background_color)
    handle.set_compression_level(config.compression_level)
    handle.set_interlace(InterlaceType.LINE)
    _apply_resolution(handle, config.ppi)
    _write_output(output, handle, OutputFormat.PNG, "PNG")


def to_gif(output: ImageResource, source: ImageResource, config: Optional[GIFConfig] = None) -> None:
    config = config or GIFConfig()
    handle = _prepare(source, config, background=config.background_color)
    handle.set_interlace(InterlaceType.LINE)
    _write_output(output, handle, OutputFormat.GIF, "GIF")


def to_webp(output: ImageResource, source: ImageResource, config: Optional[WEBPConfig] = None) -> None:
    config = config or WEBPConfig()
    handle = _prepare(source, config, background=config.background_color)
    handle.set_compression_quality(min(config.quality, 100))
    _write_output(output, handle, OutputFormat.WEBP, "WEBP")


def to_tiff(output: ImageResource, source: ImageResource, config: Optional[TIFFConfig] = None) -> None:
    config = config or TIFFConfig()
    handle = _prepare(source, config, background=config.background_color)
    _apply_resolution(handle, config.ppi)
    _write_output(output, handle, OutputFormat.TIFF, "TIFF")


def to_pgm(output: ImageResource, source: ImageResource, config: Optional[PGMConfig] = None) -> None:
    config = config or PGMConfig()
    handle = _prepare(source, config, background=config.background_color)
    handle.set_colorspace_gray()
    # Pillow's PPM writer emits a binary P5 graymap for mode L.
    _write_output(output, handle, OutputFormat.PGM, "PPM")


def to_gray_raw(output: ImageResource, source: ImageResource, config: Optional[GrayRawConfig] = None) -> None:
    config = config or GrayRawConfig()
    effective = dataclasses.replace(config, crop=None, shrink_only=True, sharpen=0.0)
    handle = _prepare(source, effective, background=config.background_color)
    handle.set_colorspace_gray()
    handle.set_depth(8)
    handle.set_interlace(InterlaceType.NONE)
    _write_output(output, handle, OutputFormat.GRAY_RAW, "GRAY")


def _icon_frames(source: ImageResource, configs: Sequence[ImageConfig]) -> List[ImageHandle]:
    first = fetch_handle(source, configs[0])
    frames: List[ImageHandle] = []

    if is_vector_format(first.handle.format):
        for index, size_config in enumerate(configs):
            fetched = first if index == 0 else fetch_handle(source, size_config)
            frame = fetched.handle
            if not fetched.final:
                logger.debug("Icon size %sx%s falls back to resizing the rasterization", size_config.width, size_config.height)
                resize_and_sharpen(frame, size_config)
            if not size_config.remain_profile:
                frame.strip_metadata()
            frames.append(frame)
        return frames

    base = first.handle
    if not configs[0].remain_profile:
        base.strip_metadata()
    for size_config in configs:
        frame = base.clone()
        resize_and_sharpen(frame, size_config)
        frames.append(frame)
    return frames


def to_ico(output: ImageResource, source: ImageResource, config: ICOConfig) -> None:
    """
    Write a multi-resolution icon, one frame per entry of ``config.sizes``.

    Raises:
        ImageConvertError: If no sizes are configured or ``output`` is a handle.
        EngineError: If a frame exceeds 256 pixels or encoding fails.
    """

    if isinstance(output, HandleResource):
        raise ImageConvertError("ICO output cannot be stored in an image handle")
    configs = config.size_configs()
    if not configs:
        raise ImageConvertError("ICO output needs at least one size")
    if isinstance(output, PathResource):
        validate_extension(output.path, OutputFormat.ICO)

    payload = write_icon(_icon_frames(source, configs))
    if isinstance(output, PathResource):
        try:
            output.path.write_bytes(payload)
        except OSError as exc:
            raise ImageConvertError(f"Cannot write the icon file {output.path}: {exc}") from exc
        logger.debug("Wrote ICO (%d bytes) to %s", len(payload), output.path)
    else:
        output.data.extend(payload)


_CONVERTERS: Dict[OutputFormat, Callable[..., None]] = {
    OutputFormat.BMP: to_bmp,
    OutputFormat.JPEG: to_jpg,
    OutputFormat.PNG: to_png,
    OutputFormat.GIF: to_gif,
    OutputFormat.WEBP: to_webp,
    OutputFormat.TIFF: to_tiff,
    OutputFormat.ICO: to_ico,
    OutputFormat.PGM: to_pgm,
    OutputFormat.GRAY_RAW: to_gray_raw,
}


def convert(output: ImageResource, source: ImageResource, config: Optional[ConversionConfig] = None) -> None:
    """Dispatch to the converter for ``config.format``."""

    config = config or ConversionConfig()
    converter = _CONVERTERS[config.format]
    logger.info("Converting %s -> %s as %s", source, output, config.format.value)
    converter(output, source, config.options)
