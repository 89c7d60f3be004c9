"""EXIF orientation handling expressed as flip/rotate transform sequences."""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Dict, Tuple

__all__ = [
    "ORIENTATION_TRANSFORMS",
    "OrientationTag",
    "Transform",
    "normalize_orientation",
    "parse_orientation",
]


class OrientationTag(IntEnum):
    """EXIF orientation values (tag 0x0112); 0 stands for a missing tag."""

    UNDEFINED = 0
    TOP_LEFT = 1
    TOP_RIGHT = 2
    BOTTOM_RIGHT = 3
    BOTTOM_LEFT = 4
    LEFT_TOP = 5
    RIGHT_TOP = 6
    RIGHT_BOTTOM = 7
    LEFT_BOTTOM = 8


class Transform(str, Enum):
    """Pixel transforms; rotations are clockwise."""

    FLIP_HORIZONTAL = "flip_horizontal"
    FLIP_VERTICAL = "flip_vertical"
    ROTATE_90 = "rotate_90"
    ROTATE_180 = "rotate_180"
    ROTATE_270 = "rotate_270"


ORIENTATION_TRANSFORMS: Dict[OrientationTag, Tuple[Transform, ...]] = {
    OrientationTag.UNDEFINED: (),
    OrientationTag.TOP_LEFT: (),
    OrientationTag.TOP_RIGHT: (Transform.FLIP_HORIZONTAL,),
    OrientationTag.BOTTOM_RIGHT: (Transform.ROTATE_180,),
    OrientationTag.BOTTOM_LEFT: (Transform.FLIP_VERTICAL,),
    OrientationTag.LEFT_TOP: (Transform.ROTATE_270, Transform.FLIP_VERTICAL),
    OrientationTag.RIGHT_TOP: (Transform.ROTATE_90,),
    OrientationTag.RIGHT_BOTTOM: (Transform.ROTATE_90, Transform.FLIP_VERTICAL),
    OrientationTag.LEFT_BOTTOM: (Transform.ROTATE_270,),
}


def parse_orientation(value: object) -> OrientationTag:
    """Return the orientation tag for a raw EXIF value, UNDEFINED when unknown."""

    try:
        return OrientationTag(int(value))  # type: ignore[call-overload]
    except (TypeError, ValueError):
        return OrientationTag.UNDEFINED


def normalize_orientation(tag: OrientationTag | int) -> Tuple[Transform, ...]:
    """Return the transforms that bring pixels tagged ``tag`` upright, in order."""

    return ORIENTATION_TRANSFORMS[parse_orientation(tag)]
