"""Exception hierarchy shared by the geometry, engine, and pipeline layers."""

from __future__ import annotations

__all__ = [
    "EngineError",
    "GeometryError",
    "ImageConvertError",
    "InvalidRatioError",
    "MarkupParseError",
    "MarkupReadError",
    "OutputPathError",
]


class ImageConvertError(RuntimeError):
    """Base class for conversion failures."""


class GeometryError(ImageConvertError):
    """Raised when a geometry plan cannot be computed for the given dimensions."""


class InvalidRatioError(GeometryError, ValueError):
    """Raised when a center-crop ratio is NaN, infinite, or zero."""


class EngineError(ImageConvertError):
    """Raised when the image engine fails to decode, transform, or encode an image."""


class MarkupReadError(ImageConvertError):
    """Raised when vector markup cannot be read back for re-rendering."""


class MarkupParseError(ImageConvertError):
    """Raised when rewritten vector markup fails to parse."""


class OutputPathError(ImageConvertError, ValueError):
    """Raised when an output path does not carry an extension accepted by the target format."""
