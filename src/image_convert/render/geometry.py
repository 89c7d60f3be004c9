from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from src.image_convert.render.errors import GeometryError, InvalidRatioError

__all__ = [
    "MAX_DIMENSION",
    "CropRect",
    "format_dimensions",
    "plan_center_crop",
    "resolve_bounds",
    "resolve_output_size",
    "round_half_away",
]


MAX_DIMENSION = 65535


@dataclass(frozen=True)
class CropRect:
    """Crop window expressed as origin plus size, in source pixels."""

    x: int
    y: int
    width: int
    height: int

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def covers(self, width: int, height: int) -> bool:
        """Return True when the rectangle spans the whole ``width`` x ``height`` image."""

        return self.x == 0 and self.y == 0 and self.width == width and self.height == height


def format_dimensions(width: int, height: int) -> str:
    """Return width × height using integer values."""

    return f"{int(width)} × {int(height)}"


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""

    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def _require_positive(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise GeometryError("Image dimensions must be positive")


def resolve_bounds(
    original_w: int,
    original_h: int,
    requested_w: Optional[int],
    requested_h: Optional[int],
    shrink_only: bool,
) -> Tuple[int, int]:
    """Return the bounding box implied by a request.

    ``0`` and ``None`` both mean "keep the original value for this axis". With
    ``shrink_only`` an explicit request larger than the original is clamped
    down to it.
    """

    def _axis(requested: Optional[int], original: int) -> int:
        if not requested:
            return original
        if shrink_only and requested > original:
            return original
        return int(requested)

    return (_axis(requested_w, original_w), _axis(requested_h, original_h))


def resolve_output_size(
    original_w: int,
    original_h: int,
    requested_w: Optional[int],
    requested_h: Optional[int],
    shrink_only: bool,
) -> Optional[Tuple[int, int]]:
    """
    Fit the original size inside the requested bounding box.

    The axis with the larger original-to-bound ratio is authoritative and the
    other axis is derived from the original aspect ratio, so the result never
    overflows either bound.

    Returns:
        Optional[Tuple[int, int]]: The final ``(width, height)``, or ``None``
        when the bounds equal the original size. A fit that lands back on the
        original size is still returned; callers compare it before resizing.

    Raises:
        GeometryError: If the original dimensions are not positive.
    """

    _require_positive(original_w, original_h)
    bound_w, bound_h = resolve_bounds(original_w, original_h, requested_w, requested_h, shrink_only)

    if bound_w == original_w and bound_h == original_h:
        return None

    ratio = original_w / original_h
    width_ratio = original_w / bound_w
    height_ratio = original_h / bound_h

    if width_ratio >= height_ratio:
        final_w = bound_w
        final_h = max(1, round_half_away(bound_w / ratio))
    else:
        final_h = bound_h
        final_w = max(1, round_half_away(bound_h * ratio))

    return (final_w, final_h)


def plan_center_crop(
    original_w: int,
    original_h: int,
    ratio_w: float,
    ratio_h: float,
) -> CropRect:
    """
    Plan a centered crop that achieves ``ratio_w:ratio_h``.

    The crop keeps the full width when the target is at least as wide as the
    source and the full height otherwise; margins are split evenly with any odd
    pixel left on the far side.

    Raises:
        InvalidRatioError: If the ratio is NaN, infinite, zero, or negative.
        GeometryError: If the original dimensions are not positive.
    """

    try:
        target = float(ratio_w) / float(ratio_h)
    except ZeroDivisionError:
        target = math.inf if float(ratio_w) else math.nan
    if math.isnan(target) or math.isinf(target) or target <= 0:
        raise InvalidRatioError("The ratio of the center crop is incorrect.")

    _require_positive(original_w, original_h)
    original_ratio = original_w / original_h

    if target >= original_ratio:
        crop_w = original_w
        crop_h = min(original_h, max(1, round_half_away(original_w / target)))
    else:
        crop_h = original_h
        crop_w = min(original_w, max(1, round_half_away(original_h * target)))

    x = (original_w - crop_w) // 2
    y = (original_h - crop_h) // 2
    return CropRect(x=x, y=y, width=crop_w, height=crop_h)
