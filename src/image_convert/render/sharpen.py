from __future__ import annotations

import math
from typing import Optional

__all__ = [
    "AUTO_SHARPEN",
    "MAX_AUTO_SHARPEN",
    "REFERENCE_PIXELS",
    "compute_sharpen",
    "is_auto_sharpen",
]


AUTO_SHARPEN: Optional[float] = None

MAX_AUTO_SHARPEN = 3.0

# Output pixel count at which the resize level reaches 1.0.
REFERENCE_PIXELS = 5_000_000


def is_auto_sharpen(requested: Optional[float]) -> bool:
    """Return True when ``requested`` asks for an automatically derived amount."""

    return requested is None or requested < 0


def compute_sharpen(
    original_w: int,
    original_h: int,
    final_w: int,
    final_h: int,
    requested: Optional[float] = AUTO_SHARPEN,
) -> float:
    """
    Return the sharpen amount to apply after resizing.

    An explicit non-negative request is returned unchanged. Otherwise the amount
    grows with the output resolution and with how far the pixel count moved
    from the original, capped at ``MAX_AUTO_SHARPEN``. There is no lower floor:
    an unchanged pixel count yields ``0.0``.
    """

    if not is_auto_sharpen(requested):
        return float(requested)  # type: ignore[arg-type]

    origin_pixels = original_w * original_h
    resize_pixels = final_w * final_h
    largest = max(origin_pixels, resize_pixels)
    if largest <= 0:
        return 0.0
    smallest = min(origin_pixels, resize_pixels)

    resize_level = math.sqrt(resize_pixels / REFERENCE_PIXELS)
    raw = resize_level * ((largest - smallest) / largest)
    return min(raw, MAX_AUTO_SHARPEN)
