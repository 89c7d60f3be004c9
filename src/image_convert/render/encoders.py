from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from src.datatypes import InterlaceType

__all__ = [
    "PROGRESSIVE_INTERLACES",
    "build_save_options",
    "map_jpeg_subsampling",
    "map_png_compression_level",
    "normalise_compression_level",
    "normalise_quality",
]


PROGRESSIVE_INTERLACES = frozenset(
    {
        InterlaceType.LINE,
        InterlaceType.PLANE,
        InterlaceType.PARTITION,
        InterlaceType.JPEG,
        InterlaceType.GIF,
        InterlaceType.PNG,
    }
)

_DPI_FORMATS = frozenset({"JPEG", "PNG", "BMP", "TIFF"})
_EXIF_FORMATS = frozenset({"JPEG", "PNG", "WEBP", "TIFF"})
_ICC_FORMATS = frozenset({"JPEG", "PNG", "WEBP", "TIFF"})


def normalise_compression_level(level: int) -> int:
    """Clamp arbitrary compression levels to the 0–2 range."""

    try:
        value = int(level)
    except (ValueError, TypeError):
        return 1
    return max(0, min(2, value))


def map_png_compression_level(level: int) -> int:
    """Translate the user configured level into a PNG compress level."""

    normalised = normalise_compression_level(level)
    mapping = {0: 0, 1: 6, 2: 9}
    return mapping.get(normalised, 6)


def normalise_quality(quality: int) -> int:
    """Clamp a quality value to the 0–100 range."""

    try:
        value = int(quality)
    except (ValueError, TypeError):
        return 85
    return max(0, min(100, value))


def map_jpeg_subsampling(force_to_chroma_quartered: bool) -> int:
    """Return Pillow's subsampling code: 2 is 4:2:0, 0 is 4:4:4."""

    return 2 if force_to_chroma_quartered else 0


def build_save_options(
    engine_format: str,
    *,
    quality: Optional[int] = None,
    compression_level: Optional[int] = None,
    interlace: InterlaceType = InterlaceType.UNDEFINED,
    ppi: Optional[Tuple[float, float]] = None,
    subsampling: Optional[int] = None,
    exif: Optional[bytes] = None,
    icc_profile: Optional[bytes] = None,
) -> Dict[str, Any]:
    """Collect Pillow ``save`` keyword arguments for ``engine_format``."""

    options: Dict[str, Any] = {}
    fmt = engine_format.upper()

    if quality is not None and fmt in {"JPEG", "WEBP"}:
        options["quality"] = normalise_quality(quality)
    if compression_level is not None and fmt == "PNG":
        options["compress_level"] = map_png_compression_level(compression_level)
    if subsampling is not None and fmt == "JPEG":
        options["subsampling"] = subsampling

    if interlace is not InterlaceType.UNDEFINED:
        progressive = interlace in PROGRESSIVE_INTERLACES
        if fmt == "JPEG":
            options["progressive"] = progressive
        elif fmt == "GIF":
            options["interlace"] = progressive

    if ppi is not None and fmt in _DPI_FORMATS:
        options["dpi"] = (max(0.0, float(ppi[0])), max(0.0, float(ppi[1])))
    if exif and fmt in _EXIF_FORMATS:
        options["exif"] = exif
    if icc_profile and fmt in _ICC_FORMATS:
        options["icc_profile"] = icc_profile
    return options
