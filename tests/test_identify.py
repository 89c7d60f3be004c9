from __future__ import annotations

from pathlib import Path

import pytest

from src.datatypes import InterlaceType
from src.image_convert.identify import Resolution, identify
from src.image_convert.render.errors import EngineError
from src.image_convert.resource import from_bytes, from_handle, from_path


def test_identify_png_header(make_image) -> None:
    result = identify(from_path(make_image()))
    assert result.resolution == Resolution(400, 200)
    assert result.format == "PNG"
    assert result.interlace is InterlaceType.NONE
    assert result.handle is None


def test_identify_can_keep_the_decoded_handle(make_image) -> None:
    result = identify(from_bytes(make_image("photo.jpg", progressive=True).read_bytes()), keep_handle=True)
    assert result.format == "JPEG"
    assert result.interlace is InterlaceType.JPEG
    assert result.handle is not None
    assert (result.handle.width, result.handle.height) == (400, 200)


def test_identify_svg(svg_path: Path) -> None:
    result = identify(from_path(svg_path))
    assert str(result.resolution) == "512x512"
    assert result.format == "SVG"


def test_identify_handle_resource(make_image) -> None:
    handle = identify(from_path(make_image(size=(9, 4))), keep_handle=True).handle
    result = identify(from_handle(handle))
    assert result.resolution == Resolution(9, 4)
    assert result.handle is None


def test_identify_unsupported_data() -> None:
    with pytest.raises(EngineError):
        identify(from_bytes(b"plain text"))
