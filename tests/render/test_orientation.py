from __future__ import annotations

import pytest

from src.image_convert.render.orientation import (
    ORIENTATION_TRANSFORMS,
    OrientationTag,
    Transform,
    normalize_orientation,
    parse_orientation,
)


def test_right_top_rotates_clockwise_once() -> None:
    assert normalize_orientation(OrientationTag.RIGHT_TOP) == (Transform.ROTATE_90,)


@pytest.mark.parametrize(
    ("tag", "expected"),
    [
        (OrientationTag.UNDEFINED, ()),
        (OrientationTag.TOP_LEFT, ()),
        (OrientationTag.TOP_RIGHT, (Transform.FLIP_HORIZONTAL,)),
        (OrientationTag.BOTTOM_RIGHT, (Transform.ROTATE_180,)),
        (OrientationTag.BOTTOM_LEFT, (Transform.FLIP_VERTICAL,)),
        (OrientationTag.LEFT_TOP, (Transform.ROTATE_270, Transform.FLIP_VERTICAL)),
        (OrientationTag.RIGHT_BOTTOM, (Transform.ROTATE_90, Transform.FLIP_VERTICAL)),
        (OrientationTag.LEFT_BOTTOM, (Transform.ROTATE_270,)),
    ],
)
def test_orientation_table(tag: OrientationTag, expected: tuple) -> None:
    assert normalize_orientation(tag) == expected


def test_every_tag_has_an_entry() -> None:
    assert set(ORIENTATION_TRANSFORMS) == set(OrientationTag)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(6, OrientationTag.RIGHT_TOP), ("3", OrientationTag.BOTTOM_RIGHT), (None, OrientationTag.UNDEFINED), (42, OrientationTag.UNDEFINED)],
)
def test_parse_orientation(raw: object, expected: OrientationTag) -> None:
    assert parse_orientation(raw) is expected
