"""Shared conversion steps: acquire, orient, crop, pick the vector or raster path, resize."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from src.datatypes import CenterCrop, ImageConfig
from src.image_convert.engine.handle import ImageHandle
from src.image_convert.engine.source import decode_markup, read_image_bytes, read_image_path, render_svg
from src.image_convert.render.errors import MarkupParseError, MarkupReadError
from src.image_convert.render.geometry import format_dimensions, plan_center_crop, resolve_output_size
from src.image_convert.render.orientation import normalize_orientation
from src.image_convert.render.sharpen import compute_sharpen, is_auto_sharpen
from src.image_convert.render.vector import VectorAction, is_vector_format, rescale_vector
from src.image_convert.resource import DataResource, HandleResource, ImageResource, PathResource

logger = logging.getLogger(__name__)

__all__ = [
    "FetchedImage",
    "apply_center_crop",
    "apply_orientation",
    "fetch_handle",
    "read_markup",
    "read_resource",
    "resize_and_sharpen",
]


@dataclass
class FetchedImage:
    """A decoded handle ready for the format stage.

    ``final`` is True when the vector path already produced the output size, in
    which case the raster resize pass must be skipped.
    """

    handle: ImageHandle
    final: bool = False


def read_resource(source: ImageResource) -> ImageHandle:
    """Decode ``source`` into a fresh, exclusively owned handle."""

    if isinstance(source, PathResource):
        return read_image_path(source.path)
    if isinstance(source, DataResource):
        return read_image_bytes(bytes(source.data))
    return source.require_handle().clone()


def read_markup(source: ImageResource) -> str:
    """
    Return the SVG text behind ``source``.

    Raises:
        MarkupReadError: If the file cannot be read, is not UTF-8, or the
            resource holds no markup at all.
    """

    if isinstance(source, PathResource):
        try:
            raw = source.path.read_bytes()
        except OSError as exc:
            raise MarkupReadError(f"Failed to read {source.path}: {exc}") from exc
    elif isinstance(source, DataResource):
        raw = bytes(source.data)
    else:
        raise MarkupReadError("Decoded image handles carry no markup")
    text = decode_markup(raw)
    if text is None:
        raise MarkupReadError(f"Vector source {source} is not valid UTF-8")
    return text


def apply_orientation(handle: ImageHandle) -> None:
    transforms = normalize_orientation(handle.orientation)
    if transforms:
        logger.debug(
            "Normalising orientation %s with %s",
            handle.orientation.name,
            ", ".join(transform.value for transform in transforms),
        )
    handle.apply_transforms(transforms)


def apply_center_crop(handle: ImageHandle, crop: CenterCrop) -> None:
    """Crop ``handle`` to ``crop``'s ratio; raises InvalidRatioError for a bad ratio."""

    rect = plan_center_crop(handle.width, handle.height, crop.ratio_w, crop.ratio_h)
    if rect.covers(handle.width, handle.height):
        return
    logger.debug(
        "Center crop %s -> %s at (%d, %d)",
        format_dimensions(handle.width, handle.height),
        format_dimensions(rect.width, rect.height),
        rect.x,
        rect.y,
    )
    handle.crop(rect.width, rect.height, rect.x, rect.y)


def _fetch_vector(source: ImageResource, handle: ImageHandle, config: ImageConfig) -> FetchedImage:
    target = resolve_output_size(handle.width, handle.height, config.width, config.height, config.shrink_only)
    if target is None or target == (handle.width, handle.height):
        return FetchedImage(handle, final=True)

    try:
        markup = read_markup(source)
    except MarkupReadError as exc:
        logger.debug("Vector re-render skipped: %s", exc)
        return FetchedImage(handle)

    decision = rescale_vector(
        markup,
        handle.width,
        handle.height,
        target[0],
        target[1],
        raster_shrink=config.vector_raster_shrink,
    )
    if decision.action is not VectorAction.RELOAD or decision.text is None:
        return FetchedImage(handle)

    base_url = str(source.path) if isinstance(source, PathResource) else None
    try:
        reloaded = render_svg(decision.text, base_url=base_url)
    except MarkupParseError as exc:
        logger.debug("Vector re-render failed, resizing the first rasterization: %s", exc)
        return FetchedImage(handle)
    logger.debug("Re-rendered vector source at %s", format_dimensions(reloaded.width, reloaded.height))
    return FetchedImage(reloaded, final=True)


def fetch_handle(source: ImageResource, config: ImageConfig) -> FetchedImage:
    """
    Acquire a handle for ``source`` and run the pre-resize stages.

    Orientation is normalised only when ``config.respect_orientation`` is set
    and the crop always runs before any size decision. Vector sources may be
    re-rendered at the requested size; a cropped vector always takes the raster
    path since re-rendering would bring the cropped margins back.
    """

    if isinstance(source, HandleResource):
        handle = source.require_handle().clone()
        if config.crop is not None:
            apply_center_crop(handle, config.crop)
        return FetchedImage(handle)

    handle = read_resource(source)
    if config.respect_orientation:
        apply_orientation(handle)
    if config.crop is not None:
        apply_center_crop(handle, config.crop)
        return FetchedImage(handle)

    if is_vector_format(handle.format):
        return _fetch_vector(source, handle, config)
    return FetchedImage(handle)


def resize_and_sharpen(handle: ImageHandle, config: ImageConfig) -> Optional[Tuple[int, int]]:
    """Resize ``handle`` to fit ``config`` and sharpen it; returns the new size or None when not resized.

    An explicit sharpen amount is applied even when the size stays the same.
    """

    target = resolve_output_size(handle.width, handle.height, config.width, config.height, config.shrink_only)
    if target == (handle.width, handle.height):
        target = None
    if target is None:
        if not is_auto_sharpen(config.sharpen):
            logger.debug("Sharpening at %s (amount %.3f)", format_dimensions(handle.width, handle.height), config.sharpen)
            handle.sharpen(0.0, float(config.sharpen))
        return None
    amount = compute_sharpen(handle.width, handle.height, target[0], target[1], config.sharpen)
    logger.debug(
        "Resizing %s -> %s (sharpen %.3f)",
        format_dimensions(handle.width, handle.height),
        format_dimensions(*target),
        amount,
    )
    handle.resize(*target)
    handle.sharpen(0.0, amount)
    return target
