"""Image handle wrapping a decoded Pillow image and its pending output settings."""
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from PIL import Image, ImageFilter

from src.datatypes import ColorName, InterlaceType
from src.image_convert.render.encoders import build_save_options
from src.image_convert.render.errors import EngineError
from src.image_convert.render.orientation import OrientationTag, Transform, parse_orientation

logger = logging.getLogger(__name__)

__all__ = ["DEFAULT_PPI", "ICO_MAX_DIMENSION", "ImageHandle", "write_icon"]


DEFAULT_PPI = 72.0

ICO_MAX_DIMENSION = 256

_EXIF_ORIENTATION = 0x0112

_TRANSPOSE_FOR: Dict[Transform, Image.Transpose] = {
    Transform.FLIP_HORIZONTAL: Image.Transpose.FLIP_LEFT_RIGHT,
    Transform.FLIP_VERTICAL: Image.Transpose.FLIP_TOP_BOTTOM,
    # Pillow rotates counter-clockwise.
    Transform.ROTATE_90: Image.Transpose.ROTATE_270,
    Transform.ROTATE_180: Image.Transpose.ROTATE_180,
    Transform.ROTATE_270: Image.Transpose.ROTATE_90,
}

_WORKING_MODES = frozenset({"L", "RGB", "RGBA"})

# Output containers that cannot store an alpha channel.
_OPAQUE_FORMATS = frozenset({"JPEG", "PPM"})


def _has_alpha(image: Image.Image) -> bool:
    return image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info)


def _working_image(image: Image.Image) -> Image.Image:
    """Return ``image`` in an 8-bit mode every filter and encoder accepts."""

    if image.mode in _WORKING_MODES:
        return image
    if image.mode == "1":
        return image.convert("L")
    if image.mode in ("I", "F") or image.mode.startswith("I;16"):
        return image.convert("I").point(lambda value: value * (1 / 256)).convert("L")
    return image.convert("RGBA" if _has_alpha(image) else "RGB")


class ImageHandle:
    """
    An exclusively owned decoded image plus the settings it will be written with.

    Transforms mutate this handle only; :meth:`clone` returns an independent
    copy whose later transforms are never observed by the original.
    """

    def __init__(self, image: Image.Image, format_tag: str, *, interlace: InterlaceType = InterlaceType.NONE) -> None:
        self.format = format_tag.upper()
        self.source_interlace = interlace
        exif = image.getexif()
        self._orientation = parse_orientation(exif.get(_EXIF_ORIENTATION))
        self._exif: Optional[Image.Exif] = exif if len(exif) else None
        self._icc_profile: Optional[bytes] = image.info.get("icc_profile")
        dpi = image.info.get("dpi")
        self._source_ppi: Optional[Tuple[float, float]] = (float(dpi[0]), float(dpi[1])) if dpi else None
        self._image = _working_image(image)
        self.compression_quality: Optional[int] = None
        self.compression_level: Optional[int] = None
        self.interlace = InterlaceType.UNDEFINED
        self.chroma_subsampling: Optional[int] = None
        self.ppi: Optional[Tuple[float, float]] = None

    def __repr__(self) -> str:
        return f"ImageHandle(format={self.format!r}, size={self.width}x{self.height}, mode={self._image.mode!r})"

    @property
    def image(self) -> Image.Image:
        return self._image

    @property
    def width(self) -> int:
        return int(self._image.width)

    @property
    def height(self) -> int:
        return int(self._image.height)

    @property
    def orientation(self) -> OrientationTag:
        return self._orientation

    @property
    def resolution(self) -> Tuple[float, float]:
        """Pixels per inch on each axis, defaulting to 72 when the source has none."""

        if self.ppi is not None:
            return self.ppi
        return self._source_ppi or (DEFAULT_PPI, DEFAULT_PPI)

    @property
    def has_metadata(self) -> bool:
        return self._exif is not None or self._icc_profile is not None

    def clone(self) -> "ImageHandle":
        twin = object.__new__(ImageHandle)
        twin.__dict__.update(self.__dict__)
        twin._image = self._image.copy()
        if self._exif is not None:
            exif_copy = Image.Exif()
            exif_copy.update(self._exif)
            twin._exif = exif_copy
        return twin

    def crop(self, width: int, height: int, x: int, y: int) -> None:
        if width <= 0 or height <= 0:
            raise EngineError("Crop size must be positive")
        self._image = self._image.crop((x, y, x + width, y + height))

    def resize(self, width: int, height: int, resample: Image.Resampling = Image.Resampling.LANCZOS) -> None:
        try:
            self._image = self._image.resize((int(width), int(height)), resample)
        except (ValueError, OSError) as exc:
            raise EngineError(f"Failed to resize to {width}x{height}: {exc}") from exc

    def sharpen(self, radius: float, amount: float) -> None:
        """Apply an unsharp mask; ``radius`` of 0 follows ``amount``."""

        if amount <= 0:
            return
        effective_radius = radius if radius > 0 else amount
        self._image = self._image.filter(
            ImageFilter.UnsharpMask(radius=effective_radius, percent=100, threshold=0)
        )

    def apply_transforms(self, transforms: Sequence[Transform]) -> None:
        """Apply flips/rotations in order and mark the pixels as upright."""

        for transform in transforms:
            self._image = self._image.transpose(_TRANSPOSE_FOR[transform])
        self._orientation = OrientationTag.TOP_LEFT
        if self._exif is not None and _EXIF_ORIENTATION in self._exif:
            self._exif[_EXIF_ORIENTATION] = int(OrientationTag.TOP_LEFT)

    def strip_metadata(self) -> None:
        self._exif = None
        self._icc_profile = None

    def remove_alpha(self, background: ColorName) -> None:
        """Flatten transparency onto ``background`` and drop the alpha channel."""

        if not _has_alpha(self._image):
            return
        rgba = self._image.convert("RGBA")
        flattened = Image.new("RGB", rgba.size, background.value)
        flattened.paste(rgba, mask=rgba.getchannel("A"))
        self._image = flattened

    def set_colorspace_gray(self) -> None:
        if self._image.mode != "L":
            self._image = self._image.convert("L")

    def set_depth(self, depth: int) -> None:
        if depth != 8:
            raise EngineError(f"Unsupported sample depth {depth}; only 8 bits are supported")
        self._image = _working_image(self._image)

    def set_compression_quality(self, quality: int) -> None:
        self.compression_quality = quality

    def set_compression_level(self, level: int) -> None:
        self.compression_level = level

    def set_interlace(self, interlace: InterlaceType) -> None:
        self.interlace = interlace

    def set_chroma_subsampling(self, subsampling: Optional[int]) -> None:
        self.chroma_subsampling = subsampling

    def set_resolution(self, x: float, y: float) -> None:
        self.ppi = (x, y)

    def _encoded_image(self, engine_format: str) -> Image.Image:
        image = self._image
        if engine_format in _OPAQUE_FORMATS and image.mode not in ("L", "RGB"):
            rgba = image.convert("RGBA")
            flattened = Image.new("RGB", rgba.size, ColorName.WHITE.value)
            flattened.paste(rgba, mask=rgba.getchannel("A"))
            return flattened
        return image

    def _save_options(self, engine_format: str) -> Dict[str, Any]:
        return build_save_options(
            engine_format,
            quality=self.compression_quality,
            compression_level=self.compression_level,
            interlace=self.interlace,
            ppi=self.ppi,
            subsampling=self.chroma_subsampling,
            exif=self._exif.tobytes() if self._exif is not None else None,
            icc_profile=self._icc_profile,
        )

    def write_to_bytes(self, engine_format: str) -> bytes:
        """Encode the image with Pillow's ``engine_format`` writer, or raw gray bytes for ``GRAY``."""

        fmt = engine_format.upper()
        if fmt == "GRAY":
            return self._image.convert("L").tobytes()
        buffer = io.BytesIO()
        try:
            self._encoded_image(fmt).save(buffer, format=fmt, **self._save_options(fmt))
        except (OSError, ValueError, KeyError) as exc:
            raise EngineError(f"Failed to encode {fmt}: {exc}") from exc
        return buffer.getvalue()

    def write_to_path(self, path: str | Path, engine_format: str) -> None:
        target = Path(path)
        payload = self.write_to_bytes(engine_format)
        try:
            target.write_bytes(payload)
        except OSError as exc:
            raise EngineError(f"Failed to write {target}: {exc}") from exc
        logger.debug("Wrote %s (%d bytes) to %s", engine_format.upper(), len(payload), target)


def write_icon(frames: Sequence[ImageHandle]) -> bytes:
    """Assemble ``frames`` into one ICO container, one entry per distinct size."""

    if not frames:
        raise EngineError("An icon needs at least one frame")
    images = []
    for frame in frames:
        if frame.width > ICO_MAX_DIMENSION or frame.height > ICO_MAX_DIMENSION:
            raise EngineError(
                f"Icon frames may not exceed {ICO_MAX_DIMENSION}px (got {frame.width}x{frame.height})"
            )
        images.append(frame.image.convert("RGBA"))
    images.sort(key=lambda image: image.width * image.height, reverse=True)
    largest, rest = images[0], images[1:]
    sizes = [image.size for image in images]
    buffer = io.BytesIO()
    try:
        largest.save(buffer, format="ICO", sizes=sizes, append_images=rest)
    except (OSError, ValueError) as exc:
        raise EngineError(f"Failed to encode ICO: {exc}") from exc
    return buffer.getvalue()
