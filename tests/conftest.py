from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Optional, Tuple

import pytest
from click.testing import CliRunner
from PIL import Image

SVG_DOCUMENT = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    "<!-- <svg width=\"1px\" height=\"1px\"> in a comment must be ignored -->\n"
    '<svg xmlns="http://www.w3.org/2000/svg" width="512px" height="512px" viewBox="0 0 512 512">\n'
    '  <rect x="0" y="0" width="512" height="512" fill="#3366cc"/>\n'
    '  <circle cx="256" cy="256" r="128" fill="#ffffff"/>\n'
    "</svg>\n"
)

ImageFactory = Callable[..., Path]


@pytest.fixture
def make_image(tmp_path: Path) -> ImageFactory:
    """Return a factory that writes a test image and returns its path."""

    def _make(
        name: str = "source.png",
        size: Tuple[int, int] = (400, 200),
        *,
        mode: str = "RGB",
        color: int | Tuple[int, ...] = (200, 80, 40),
        orientation: Optional[int] = None,
        **save_kwargs,
    ) -> Path:
        image = Image.new(mode, size, color)
        # A bright left edge so flips and rotations are observable.
        edge = 255 if isinstance(color, int) else (255,) * len(color)
        for y in range(size[1]):
            image.putpixel((0, y), edge)
        if orientation is not None:
            exif = Image.Exif()
            exif[0x0112] = orientation
            save_kwargs["exif"] = exif.tobytes()
        path = tmp_path / name
        image.save(path, **save_kwargs)
        return path

    return _make


@pytest.fixture
def svg_text() -> str:
    return SVG_DOCUMENT


@pytest.fixture
def svg_path(tmp_path: Path) -> Path:
    path = tmp_path / "logo.svg"
    path.write_text(SVG_DOCUMENT, encoding="utf-8")
    return path


@pytest.fixture
def runner() -> CliRunner:
    """Provide a Click runner configured for CLI smoke tests."""

    return CliRunner()
