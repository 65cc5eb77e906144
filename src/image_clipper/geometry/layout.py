"""Session layout: size the clip window and fit the image to it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

from .rect import Rect, Size
from .specs import ClipSpec, ImageSpec

if TYPE_CHECKING:  # pragma: no cover - only for type checkers
    from ..models import ConstraintParams


def clip_side_for_viewport(width: float, height: float, inset: float) -> float:
    """Side of the square clip window: the shorter viewport side minus ``inset``."""
    return max(0.0, min(float(width), float(height)) - float(inset))


def natural_size_for(pixel_width: int, pixel_height: int, clip_side: float) -> Size:
    """Scale the image so its shorter side spans the clip window.

    Portrait images get ``width == clip_side``; landscape and square images get
    ``height == clip_side``. A zero-sized image (failed decode) yields
    ``Size(0, 0)``.
    """
    if pixel_width < 0 or pixel_height < 0:
        raise ValueError(f"Invalid pixel size {pixel_width}x{pixel_height}.")
    if pixel_width == 0 or pixel_height == 0:
        return Size(0.0, 0.0)
    if pixel_width < pixel_height:
        ratio = pixel_height / float(pixel_width)
        return Size(clip_side, clip_side * ratio)
    ratio = pixel_width / float(pixel_height)
    return Size(clip_side * ratio, clip_side)


def build_specs(
    viewport: Tuple[float, float],
    pixel_size: Tuple[int, int],
    params: "ConstraintParams",
) -> Tuple[ClipSpec, ImageSpec]:
    """Clip and image specs for a viewport, both centered on its midpoint."""
    vw, vh = float(viewport[0]), float(viewport[1])
    center = (vw / 2.0, vh / 2.0)
    side = clip_side_for_viewport(vw, vh, params.clip_inset_px)
    clip = ClipSpec(Rect.from_center(center, (side, side)), params.max_scale)
    image = ImageSpec.centered(center, natural_size_for(*pixel_size, side))
    return clip, image


__all__ = ["build_specs", "clip_side_for_viewport", "natural_size_for"]
