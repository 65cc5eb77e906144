"""Per-session value objects: the clip window, the image, and the view state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from ..utils import quarter_turns
from .rect import ZERO_OFFSET, Offset, Rect, Size


@dataclass(frozen=True)
class ClipSpec:
    """The fixed clip window.

    ``max_scale`` values of 1 or less mean the zoom is unbounded.
    """

    clip_rect: Rect
    max_scale: float = 3.0

    @property
    def scale_is_bounded(self) -> bool:
        return self.max_scale > 1.0


@dataclass(frozen=True)
class ImageSpec:
    """The loaded image laid out in the clip window's reference frame."""

    natural_size: Size
    natural_rect: Rect

    @staticmethod
    def centered(center: tuple[float, float], natural_size: Size) -> "ImageSpec":
        return ImageSpec(natural_size, Rect.from_center(center, natural_size))

    @property
    def is_degenerate(self) -> bool:
        # A failed load leaves a zero-sized image; nothing can be constrained.
        return self.natural_size.width <= 0.0 or self.natural_size.height <= 0.0


@dataclass
class TransformState:
    """Live and committed view transform of one clipping session."""

    scale: float = 1.0
    initial_scale: float = 1.0
    offset: Offset = field(default=ZERO_OFFSET)
    initial_offset: Offset = field(default=ZERO_OFFSET)
    rotation: int = 0  # degrees, multiple of 90, only ever grows

    @property
    def direction(self) -> int:
        return quarter_turns(self.rotation)

    def copy(self) -> "TransformState":
        return replace(self)

    def committed(self) -> "TransformState":
        """The state as of the last gesture end, live fields reset to it."""
        return TransformState(
            scale=self.initial_scale,
            initial_scale=self.initial_scale,
            offset=self.initial_offset,
            initial_offset=self.initial_offset,
            rotation=self.rotation,
        )


__all__ = ["ClipSpec", "ImageSpec", "TransformState"]
