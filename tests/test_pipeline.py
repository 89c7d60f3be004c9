from __future__ import annotations

from pathlib import Path

import pytest

import src.image_convert.pipeline as pipeline
from src.datatypes import CenterCrop, ImageConfig
from src.image_convert.render.errors import InvalidRatioError, MarkupParseError, MarkupReadError
from src.image_convert.render.orientation import OrientationTag
from src.image_convert.resource import from_bytes, from_handle, from_path


def test_fetch_raster_applies_crop(make_image) -> None:
    fetched = pipeline.fetch_handle(from_path(make_image()), ImageConfig(crop=CenterCrop(1, 1)))
    assert not fetched.final
    assert (fetched.handle.width, fetched.handle.height) == (200, 200)


def test_fetch_rejects_invalid_crop(make_image) -> None:
    with pytest.raises(InvalidRatioError):
        pipeline.fetch_handle(from_path(make_image()), ImageConfig(crop=CenterCrop(1.0, 0.0)))


def test_orientation_only_when_requested(make_image) -> None:
    path = make_image(size=(40, 20), orientation=6)
    untouched = pipeline.fetch_handle(from_path(path), ImageConfig()).handle
    assert (untouched.width, untouched.height) == (40, 20)
    assert untouched.orientation is OrientationTag.RIGHT_TOP

    upright = pipeline.fetch_handle(from_bytes(path.read_bytes()), ImageConfig(respect_orientation=True)).handle
    assert (upright.width, upright.height) == (20, 40)
    assert upright.orientation is OrientationTag.TOP_LEFT


def test_vector_enlarge_reloads_at_target(svg_path: Path) -> None:
    fetched = pipeline.fetch_handle(from_path(svg_path), ImageConfig(width=1024, height=1024, shrink_only=False))
    assert fetched.final
    assert (fetched.handle.width, fetched.handle.height) == (1024, 1024)


def test_vector_shrink_takes_raster_path(svg_path: Path) -> None:
    config = ImageConfig(width=128, height=128)
    fetched = pipeline.fetch_handle(from_path(svg_path), config)
    assert not fetched.final
    assert (fetched.handle.width, fetched.handle.height) == (512, 512)
    assert pipeline.resize_and_sharpen(fetched.handle, config) == (128, 128)
    assert (fetched.handle.width, fetched.handle.height) == (128, 128)


def test_vector_without_resize_is_final(svg_path: Path) -> None:
    fetched = pipeline.fetch_handle(from_path(svg_path), ImageConfig())
    assert fetched.final
    assert fetched.handle.width == 512


def test_cropped_vector_takes_raster_path(svg_path: Path) -> None:
    config = ImageConfig(width=1024, shrink_only=False, crop=CenterCrop(2, 1))
    fetched = pipeline.fetch_handle(from_path(svg_path), config)
    assert not fetched.final
    assert (fetched.handle.width, fetched.handle.height) == (512, 256)


def test_vector_bytes_reload(svg_text: str) -> None:
    fetched = pipeline.fetch_handle(
        from_bytes(svg_text.encode("utf-8")), ImageConfig(width=600, height=600, shrink_only=False)
    )
    assert fetched.final
    assert fetched.handle.width == 600


def test_unreadable_markup_falls_back_to_raster(svg_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(_source):
        raise MarkupReadError("gone")

    monkeypatch.setattr(pipeline, "read_markup", _fail)
    config = ImageConfig(width=1024, height=1024, shrink_only=False)
    fetched = pipeline.fetch_handle(from_path(svg_path), config)
    assert not fetched.final
    assert fetched.handle.width == 512
    pipeline.resize_and_sharpen(fetched.handle, config)
    assert fetched.handle.width == 1024


def test_failed_reload_falls_back_to_first_rasterization(svg_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(_markup, *, base_url=None):
        raise MarkupParseError("broken")

    monkeypatch.setattr(pipeline, "render_svg", _fail)
    fetched = pipeline.fetch_handle(from_path(svg_path), ImageConfig(width=1024, height=1024, shrink_only=False))
    assert not fetched.final
    assert fetched.handle.width == 512


def test_read_markup_rejects_non_utf8() -> None:
    with pytest.raises(MarkupReadError):
        pipeline.read_markup(from_bytes(b"\xff\xfe<svg/>"))
    with pytest.raises(MarkupReadError):
        pipeline.read_markup(from_handle(None))


def test_handle_input_is_cloned(make_image) -> None:
    source = from_handle(pipeline.read_resource(from_path(make_image())))
    fetched = pipeline.fetch_handle(source, ImageConfig(crop=CenterCrop(1, 1)))
    assert fetched.handle is not source.handle
    assert source.handle is not None and source.handle.width == 400
    assert fetched.handle.width == 200


def test_resize_and_sharpen_skips_noop(make_image) -> None:
    handle = pipeline.read_resource(from_path(make_image()))
    assert pipeline.resize_and_sharpen(handle, ImageConfig(width=800)) is None
    assert handle.width == 400


def test_resize_and_sharpen_uses_computed_amount(make_image, monkeypatch: pytest.MonkeyPatch) -> None:
    handle = pipeline.read_resource(from_path(make_image()))
    applied: list[float] = []
    monkeypatch.setattr(handle, "sharpen", lambda radius, amount: applied.append(amount))
    assert pipeline.resize_and_sharpen(handle, ImageConfig(width=100, sharpen=0.75)) == (100, 50)
    assert applied == [0.75]


def test_resize_and_sharpen_applies_explicit_amount_without_resize(make_image) -> None:
    handle = pipeline.read_resource(from_path(make_image(size=(64, 64))))
    before = handle.image.tobytes()
    assert pipeline.resize_and_sharpen(handle, ImageConfig(sharpen=2.0)) is None
    assert (handle.width, handle.height) == (64, 64)
    assert handle.image.tobytes() != before


def test_resize_and_sharpen_auto_amount_without_resize_is_untouched(make_image) -> None:
    handle = pipeline.read_resource(from_path(make_image(size=(64, 64))))
    before = handle.image.tobytes()
    assert pipeline.resize_and_sharpen(handle, ImageConfig()) is None
    assert handle.image.tobytes() == before


def test_resize_and_sharpen_skips_fit_equal_to_current_size(make_image, monkeypatch: pytest.MonkeyPatch) -> None:
    handle = pipeline.read_resource(from_path(make_image(size=(640, 480))))
    monkeypatch.setattr(handle, "resize", lambda *args, **kwargs: pytest.fail("resize must not run"))
    assert pipeline.resize_and_sharpen(handle, ImageConfig(width=1280, shrink_only=False)) is None
