from __future__ import annotations

from pathlib import Path

import pytest

from src.config_loader import ConfigError, load_config, parse_config
from src.datatypes import CenterCrop, ColorName, ICOConfig, JPGConfig, OutputFormat, PNGConfig
from src.image_convert.render.geometry import MAX_DIMENSION


def _write(tmp_path: Path, text: str, *, bom: bool = False) -> Path:
    path = tmp_path / "config.toml"
    payload = text.encode("utf-8")
    path.write_bytes((b"\xef\xbb\xbf" if bom else b"") + payload)
    return path


def test_load_config_jpeg_options(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
[output]
format = "JPEG"

[options]
width = 1920
height = 0
quality = 90
shrink_only = "false"
respect_orientation = 1
background_color = "White"
sharpen = -1
force_to_chroma_quartered = false

[options.crop]
ratio = [16, 9]
""",
        bom=True,
    )
    config = load_config(path)
    assert config.format is OutputFormat.JPEG
    options = config.options
    assert isinstance(options, JPGConfig)
    assert (options.width, options.height) == (1920, None)
    assert options.quality == 90
    assert options.shrink_only is False
    assert options.respect_orientation is True
    assert options.background_color is ColorName.WHITE
    assert options.sharpen is None
    assert options.force_to_chroma_quartered is False
    assert options.crop == CenterCrop(16.0, 9.0)


def test_defaults_to_png() -> None:
    config = parse_config({})
    assert config.format is OutputFormat.PNG
    assert config.options == PNGConfig()


def test_ico_sizes(tmp_path: Path) -> None:
    config = load_config(_write(tmp_path, '[output]\nformat = "ico"\n[options]\nsizes = [[16, 16], 32, [48, 48]]\n'))
    assert isinstance(config.options, ICOConfig)
    assert config.options.sizes == [(16, 16), (32, 32), (48, 48)]


@pytest.mark.parametrize(
    "raw",
    [
        {"output": {"format": "heic"}},
        {"output": {"format": "png", "extra": 1}},
        {"options": {"quality": 80}},
        {"output": {"format": "jpeg"}, "options": {"quality": 101}},
        {"options": {"width": 70000}},
        {"options": {"width": 12.5}},
        {"options": {"ppi": -1}},
        {"options": {"shrink_only": "sometimes"}},
        {"options": {"background_color": "mauve"}},
        {"options": {"compression_level": 3}},
        {"options": {"crop": {"ratio": [1, 0]}}},
        {"options": {"crop": {"ratio": [16]}}},
        {"output": {"format": "ico"}},
        {"output": {"format": "ico"}, "options": {"sizes": [[512, 512]]}},
        {"options": []},
    ],
)
def test_invalid_values_raise(raw: dict) -> None:
    with pytest.raises(ConfigError):
        parse_config(raw)


def test_crop_accepts_ratio_string() -> None:
    config = parse_config({"options": {"crop": "4:3"}})
    assert config.options.crop == CenterCrop(4.0, 3.0)  # type: ignore[union-attr]


def test_load_config_reports_bad_toml(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(_write(tmp_path, "[output\nformat = 1"))
    with pytest.raises(ConfigError):
        load_config(tmp_path / "missing.toml")


def test_dimension_limit_matches_geometry() -> None:
    config = parse_config({"options": {"width": MAX_DIMENSION, "height": MAX_DIMENSION}})
    assert config.options.width == MAX_DIMENSION  # type: ignore[union-attr]
    with pytest.raises(ConfigError):
        parse_config({"options": {"height": MAX_DIMENSION + 1}})
