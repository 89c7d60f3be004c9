"""Output geometry, sharpening, orientation and vector re-render decisions."""

from .errors import (
    EngineError,
    GeometryError,
    ImageConvertError,
    InvalidRatioError,
    MarkupParseError,
    MarkupReadError,
    OutputPathError,
)
from .geometry import CropRect, plan_center_crop, resolve_output_size
from .orientation import OrientationTag, Transform, normalize_orientation
from .sharpen import compute_sharpen
from .vector import VectorAction, VectorDecision, rescale_vector

__all__ = [
    "CropRect",
    "EngineError",
    "GeometryError",
    "ImageConvertError",
    "InvalidRatioError",
    "MarkupParseError",
    "MarkupReadError",
    "OrientationTag",
    "OutputPathError",
    "Transform",
    "VectorAction",
    "VectorDecision",
    "compute_sharpen",
    "normalize_orientation",
    "plan_center_crop",
    "rescale_vector",
    "resolve_output_size",
]
