"""Input/output image resources: a filesystem path, an in-memory buffer, or a decoded handle."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Optional, Union

from src.image_convert.engine.handle import ImageHandle
from src.image_convert.render.errors import ImageConvertError

__all__ = [
    "DataResource",
    "HandleResource",
    "ImageResource",
    "PathResource",
    "from_bytes",
    "from_handle",
    "from_path",
    "from_reader",
]


@dataclass(frozen=True)
class PathResource:
    """An image file on disk."""

    path: Path

    def __str__(self) -> str:
        return str(self.path)


@dataclass
class DataResource:
    """Image bytes in memory; as an output, encoded bytes are appended to ``data``."""

    data: bytearray = field(default_factory=bytearray)

    def __str__(self) -> str:
        return f"<{len(self.data)} bytes>"


@dataclass
class HandleResource:
    """A decoded image handle; as an output, ``handle`` receives the processed image."""

    handle: Optional[ImageHandle] = None

    def require_handle(self) -> ImageHandle:
        if self.handle is None:
            raise ImageConvertError("The image handle resource is empty")
        return self.handle

    def __str__(self) -> str:
        return repr(self.handle)


ImageResource = Union[PathResource, DataResource, HandleResource]


def from_path(path: str | Path) -> PathResource:
    return PathResource(Path(path))


def from_bytes(data: bytes | bytearray) -> DataResource:
    return DataResource(bytearray(data))


def from_reader(reader: BinaryIO) -> DataResource:
    """Read ``reader`` to the end into a data resource."""

    return DataResource(bytearray(reader.read()))


def from_handle(handle: Optional[ImageHandle] = None) -> HandleResource:
    return HandleResource(handle)
