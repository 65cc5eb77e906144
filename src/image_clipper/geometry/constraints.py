"""Coverage constraints between the transformed image and the clip window.

The view places the image's natural rectangle at the clip center, turns it by
the session rotation, shifts it by ``offset`` and finally scales everything
about the center by ``scale``. In rectangle terms that is::

    effective_image_rect(...).scaled_about_center(scale).offset_by(offset * scale)

Every accepted state must leave this rectangle containing the clip rectangle.
``clamp_scale`` rejects zoom steps that would break it; ``clamp_offset`` pulls a
proposed pan back edge by edge until it holds again.
"""

from __future__ import annotations

import logging
import math

from ..utils import clamp, quarter_turns
from .rect import EPSILON, Offset, Rect
from .specs import ClipSpec, ImageSpec, TransformState

logger = logging.getLogger(__name__)


def effective_image_rect(image_spec: ImageSpec, rotation: int) -> Rect:
    """Natural image rect, with width and height exchanged on odd quarter turns."""
    rect = image_spec.natural_rect
    if quarter_turns(rotation) in (1, 3):
        return rect.swapped()
    return rect


def transformed_image_rect(
    image_spec: ImageSpec, rotation: int, scale: float, offset: Offset
) -> Rect:
    """Where the image lands in the reference frame for a given transform."""
    scaled = effective_image_rect(image_spec, rotation).scaled_about_center(scale)
    return scaled.offset_by(offset.dx * scale, offset.dy * scale)


def covers(clip_spec: ClipSpec, image_spec: ImageSpec, state: TransformState) -> bool:
    """True if the live transform keeps the whole clip window covered."""
    if image_spec.is_degenerate:
        return True
    image_rect = transformed_image_rect(
        image_spec, state.rotation, state.scale, state.offset
    )
    return image_rect.contains(clip_spec.clip_rect)


def cap_scale(proposed: float, clip_spec: ClipSpec, min_scale: float) -> float:
    """Bound a raw zoom value before it is checked against coverage."""
    if clip_spec.scale_is_bounded:
        return clamp(proposed, min_scale, clip_spec.max_scale)
    return max(min_scale, proposed)


def clamp_scale(
    proposed: float, clip_spec: ClipSpec, image_spec: ImageSpec, state: TransformState
) -> float:
    """Accept ``proposed`` or fall back to the last accepted scale.

    The candidate rectangle uses the live offset, scaled by the candidate. A
    scale that would uncover any part of the clip window is rejected as a
    whole; there is no partial clamp.
    """
    if not math.isfinite(proposed):
        return state.scale
    if image_spec.is_degenerate:
        return proposed
    candidate = transformed_image_rect(
        image_spec, state.rotation, proposed, state.offset
    )
    if not candidate.contains(clip_spec.clip_rect):
        logger.debug("Rejected scale %.4f, keeping %.4f", proposed, state.scale)
        return state.scale
    return proposed


def clamp_offset(
    proposed: Offset,
    clip_spec: ClipSpec,
    image_spec: ImageSpec,
    state: TransformState,
) -> Offset:
    """Pull ``proposed`` back so the image covers the clip window at the live scale.

    Edges are checked left, right, top, bottom. Each receded edge substitutes
    the offset component that puts the image edge exactly on the clip edge.
    When both checks of one axis fire, the later one (right, bottom) wins; that
    only happens when the image is narrower than the clip, which the layout
    never produces. A non-finite component keeps the live offset's value.
    """
    scale = state.scale
    if image_spec.is_degenerate or scale <= 0.0:
        return proposed

    dx, dy = proposed
    if not math.isfinite(dx):
        dx = state.offset.dx
    if not math.isfinite(dy):
        dy = state.offset.dy

    clip = clip_spec.clip_rect
    # Measured from the unshifted rect so huge offsets keep their precision.
    base = effective_image_rect(image_spec, state.rotation).scaled_about_center(scale)
    image_rect = base.offset_by(dx * scale, dy * scale)

    if image_rect.min_x - clip.min_x > EPSILON:
        dx = (clip.min_x - base.min_x) / scale
    if clip.max_x - image_rect.max_x > EPSILON:
        dx = (clip.max_x - base.max_x) / scale
    if image_rect.min_y - clip.min_y > EPSILON:
        dy = (clip.min_y - base.min_y) / scale
    if clip.max_y - image_rect.max_y > EPSILON:
        dy = (clip.max_y - base.max_y) / scale

    result = Offset(dx, dy)
    if result != proposed:
        logger.debug("Clamped offset (%.2f, %.2f) -> (%.2f, %.2f)", *proposed, *result)
    return result


__all__ = [
    "cap_scale",
    "clamp_offset",
    "clamp_scale",
    "covers",
    "effective_image_rect",
    "transformed_image_rect",
]
