"""Geometry model used by the clipping controller and renderer."""

from .constraints import (
    cap_scale,
    clamp_offset,
    clamp_scale,
    covers,
    effective_image_rect,
    transformed_image_rect,
)
from .layout import build_specs, clip_side_for_viewport, natural_size_for
from .rect import EPSILON, ZERO_OFFSET, Offset, Rect, Size
from .specs import ClipSpec, ImageSpec, TransformState

__all__ = [
    "EPSILON",
    "ZERO_OFFSET",
    "ClipSpec",
    "ImageSpec",
    "Offset",
    "Rect",
    "Size",
    "TransformState",
    "build_specs",
    "cap_scale",
    "clamp_offset",
    "clamp_scale",
    "clip_side_for_viewport",
    "covers",
    "effective_image_rect",
    "natural_size_for",
    "transformed_image_rect",
]
