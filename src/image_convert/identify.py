"""Report the size, format and interlacing of an image."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from src.datatypes import InterlaceType
from src.image_convert.engine.handle import ImageHandle
from src.image_convert.engine.source import ping_image_bytes, ping_image_path
from src.image_convert.pipeline import read_resource
from src.image_convert.resource import DataResource, HandleResource, ImageResource, PathResource

logger = logging.getLogger(__name__)

__all__ = ["ImageIdentify", "Resolution", "identify"]


@dataclass(frozen=True)
class Resolution:
    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass
class ImageIdentify:
    """Identification result; ``handle`` is populated only when requested."""

    resolution: Resolution
    format: str
    interlace: InterlaceType
    handle: Optional[ImageHandle] = None


def identify(source: ImageResource, *, keep_handle: bool = False) -> ImageIdentify:
    """
    Identify ``source``.

    Parameters:
        source: Image to inspect.
        keep_handle: Decode the pixels and return the handle alongside the
            facts, so the caller can feed it to a converter without decoding
            twice. Otherwise only the header is read.

    Raises:
        EngineError: If the image cannot be decoded.
    """

    if keep_handle or isinstance(source, HandleResource):
        handle = read_resource(source)
        result = ImageIdentify(
            resolution=Resolution(handle.width, handle.height),
            format=handle.format,
            interlace=handle.source_interlace,
            handle=handle if keep_handle else None,
        )
    else:
        if isinstance(source, PathResource):
            probe = ping_image_path(source.path)
        else:
            assert isinstance(source, DataResource)
            probe = ping_image_bytes(bytes(source.data))
        result = ImageIdentify(
            resolution=Resolution(probe.width, probe.height),
            format=probe.format,
            interlace=probe.interlace,
        )
    logger.debug("Identified %s as %s %s", source, result.format, result.resolution)
    return result
