"""Image engine adapters built on Pillow and CairoSVG."""

from .env import ensure_engine_initialized, engine_initialized
from .handle import ImageHandle, write_icon
from .source import (
    ImageProbe,
    ping_image_bytes,
    ping_image_path,
    read_image_bytes,
    read_image_path,
    render_svg,
)

__all__ = [
    "ImageHandle",
    "ImageProbe",
    "engine_initialized",
    "ensure_engine_initialized",
    "ping_image_bytes",
    "ping_image_path",
    "read_image_bytes",
    "read_image_path",
    "render_svg",
    "write_icon",
]
