"""Public shim exposing the image_convert CLI and library surface."""

from __future__ import annotations

from typing import Callable, cast

import src.image_convert.cli_entry as _cli_entry
from src.config_loader import ConfigError, load_config, parse_config
from src.datatypes import (
    BMPConfig,
    CenterCrop,
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
from src.image_convert.engine import ImageHandle
from src.image_convert.formats import (
    convert,
    to_bmp,
    to_gif,
    to_gray_raw,
    to_ico,
    to_jpg,
    to_pgm,
    to_png,
    to_tiff,
    to_webp,
)
from src.image_convert.identify import ImageIdentify, Resolution, identify
from src.image_convert.render.errors import (
    EngineError,
    GeometryError,
    ImageConvertError,
    InvalidRatioError,
    MarkupParseError,
    MarkupReadError,
    OutputPathError,
)
from src.image_convert.resource import (
    DataResource,
    HandleResource,
    ImageResource,
    PathResource,
    from_bytes,
    from_handle,
    from_path,
    from_reader,
)

main = _cli_entry.main

__all__ = (
    "main",
    "convert",
    "identify",
    "load_config",
    "parse_config",
    "to_bmp",
    "to_gif",
    "to_gray_raw",
    "to_ico",
    "to_jpg",
    "to_pgm",
    "to_png",
    "to_tiff",
    "to_webp",
    "from_bytes",
    "from_handle",
    "from_path",
    "from_reader",
    "BMPConfig",
    "CenterCrop",
    "ColorName",
    "ConversionConfig",
    "DataResource",
    "GIFConfig",
    "GrayRawConfig",
    "HandleResource",
    "ICOConfig",
    "ImageConfig",
    "ImageHandle",
    "ImageIdentify",
    "ImageResource",
    "InterlaceType",
    "JPGConfig",
    "OutputFormat",
    "PathResource",
    "PGMConfig",
    "PNGConfig",
    "Resolution",
    "TIFFConfig",
    "WEBPConfig",
    "ConfigError",
    "EngineError",
    "GeometryError",
    "ImageConvertError",
    "InvalidRatioError",
    "MarkupParseError",
    "MarkupReadError",
    "OutputPathError",
)


if __name__ == "__main__":
    _entry_point = cast(Callable[[], None], main)
    _entry_point()
