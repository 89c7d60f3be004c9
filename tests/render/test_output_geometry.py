from __future__ import annotations

import itertools
import math

import pytest

from src.image_convert.render import geometry
from src.image_convert.render.errors import GeometryError, InvalidRatioError

SIZES = [(4592, 2584), (1920, 1080), (1080, 1920), (640, 480), (333, 777), (1, 1), (7, 3)]


def test_resolve_output_size_width_only_request() -> None:
    assert geometry.resolve_output_size(4592, 2584, 1920, 0, True) == (1920, 1080)
    assert round(1920 * 2584 / 4592) == 1080


def test_resolve_output_size_none_request_matches_zero() -> None:
    assert geometry.resolve_output_size(4592, 2584, 1920, None, True) == (1920, 1080)


@pytest.mark.parametrize(("width", "height"), SIZES)
def test_resolve_output_size_zero_request_is_noop(width: int, height: int) -> None:
    assert geometry.resolve_output_size(width, height, 0, 0, True) is None
    assert geometry.resolve_output_size(width, height, 0, 0, False) is None


def test_resolve_output_size_height_dominates_for_portrait_box() -> None:
    assert geometry.resolve_output_size(1920, 1080, 1000, 500, True) == (889, 500)


def test_resolve_output_size_shrink_only_clamps_enlargement() -> None:
    assert geometry.resolve_output_size(640, 480, 1280, 0, True) is None
    assert geometry.resolve_output_size(640, 480, 1280, 1280, True) is None


def test_resolve_output_size_returns_fit_equal_to_original() -> None:
    # Bounds of 1280x480 differ from the original, so the fit is returned.
    assert geometry.resolve_output_size(640, 480, 1280, 0, False) == (640, 480)


def test_resolve_output_size_enlarges_when_allowed() -> None:
    assert geometry.resolve_output_size(640, 480, 1280, 1280, False) == (1280, 960)


def test_resolve_output_size_enlarges_inside_bounding_box() -> None:
    assert geometry.resolve_output_size(100, 50, 300, 300, False) == (300, 150)


def test_resolve_output_size_keeps_at_least_one_pixel() -> None:
    assert geometry.resolve_output_size(1000, 1, 10, 0, True) == (10, 1)


def test_resolve_output_size_rejects_degenerate_input() -> None:
    with pytest.raises(GeometryError):
        geometry.resolve_output_size(0, 1080, 100, 100, True)


@pytest.mark.parametrize("shrink_only", [True, False])
def test_resolve_output_size_fits_and_is_idempotent(shrink_only: bool) -> None:
    for (ow, oh), (rw, rh) in itertools.product(SIZES, [(100, 100), (1920, 0), (0, 720), (50, 400)]):
        first = geometry.resolve_output_size(ow, oh, rw, rh, shrink_only)
        if first is None:
            continue
        fw, fh = first
        bound_w, bound_h = geometry.resolve_bounds(ow, oh, rw, rh, shrink_only)
        assert fw <= bound_w and fh <= bound_h
        assert abs(fw * oh - fh * ow) <= max(ow, oh)
        again = geometry.resolve_output_size(fw, fh, rw, rh, shrink_only)
        assert again is None or again == first


def test_round_half_away_from_zero() -> None:
    assert geometry.round_half_away(2.5) == 3
    assert geometry.round_half_away(3.5) == 4
    assert geometry.round_half_away(-2.5) == -3
    assert geometry.round_half_away(2.49) == 2


@pytest.mark.parametrize(("width", "height"), SIZES)
def test_plan_center_crop_matching_ratio_covers_image(width: int, height: int) -> None:
    rect = geometry.plan_center_crop(width, height, width, height)
    assert rect == geometry.CropRect(0, 0, width, height)
    assert rect.covers(width, height)


def test_plan_center_crop_wider_target_keeps_width() -> None:
    rect = geometry.plan_center_crop(1920, 1920, 16, 9)
    assert rect.size == (1920, 1080)
    assert (rect.x, rect.y) == (0, 420)


def test_plan_center_crop_narrower_target_keeps_height() -> None:
    rect = geometry.plan_center_crop(400, 200, 1, 1)
    assert rect == geometry.CropRect(100, 0, 200, 200)


@pytest.mark.parametrize(
    ("ratio_w", "ratio_h"),
    [(1.0, 0.0), (0.0, 1.0), (0.0, 0.0), (-4.0, 3.0), (math.nan, 1.0), (math.inf, 1.0)],
)
def test_plan_center_crop_rejects_invalid_ratio(ratio_w: float, ratio_h: float) -> None:
    with pytest.raises(InvalidRatioError):
        geometry.plan_center_crop(1920, 1080, ratio_w, ratio_h)


def test_invalid_ratio_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        geometry.plan_center_crop(1920, 1080, 1.0, 0.0)
