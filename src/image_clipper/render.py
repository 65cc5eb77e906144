"""Render the committed view transform into a bitmap of the clip window."""

from __future__ import annotations

import logging

import cv2  # opencv-python
import numpy as np

from .geometry import ClipSpec, ImageSpec, TransformState, effective_image_rect
from .imaging import rotate_image
from .models import CLIP_SHAPES

logger = logging.getLogger(__name__)


def circle_mask(width: int, height: int) -> np.ndarray:
    """Boolean mask of the circle inscribed in a ``width`` x ``height`` bitmap."""
    cy = (height - 1) / 2.0
    cx = (width - 1) / 2.0
    r = min(width, height) / 2.0
    yy, xx = np.ogrid[:height, :width]
    return (xx - cx) ** 2 + (yy - cy) ** 2 <= r * r


def _to_bgra(image: np.ndarray) -> np.ndarray:
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2BGRA)
    if image.shape[2] == 4:
        return image
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2BGRA)
    raise ValueError("Expected a grayscale, BGR or BGRA image.")


class ClipRenderer:
    """Callable producing the clip window's content as a BGRA bitmap.

    The source is first turned by the committed rotation; one affine map then
    takes its pixels to the output, mirroring the view: fit the turned image
    into its effective rect, shift by ``offset``, scale by ``scale`` about the
    clip center and crop to the clip rect. Pixels outside a circular clip get
    zero alpha.
    """

    def __init__(
        self, source: np.ndarray, clip_shape: str = "circle", pixel_ratio: float = 1.0
    ) -> None:
        if clip_shape not in CLIP_SHAPES:
            raise ValueError(f"Unknown clip shape {clip_shape!r}.")
        self._source = source
        self.clip_shape = clip_shape
        self.pixel_ratio = float(pixel_ratio) if pixel_ratio > 0 else 1.0

    def output_size(self, clip_spec: ClipSpec) -> tuple[int, int]:
        clip = clip_spec.clip_rect
        w = max(1, int(round(clip.width * self.pixel_ratio)))
        h = max(1, int(round(clip.height * self.pixel_ratio)))
        return w, h

    def transform_matrix(
        self,
        state: TransformState,
        clip_spec: ClipSpec,
        image_spec: ImageSpec,
        source_size: tuple[int, int],
    ) -> np.ndarray:
        """2x3 map from turned-source pixel centers to output pixel centers."""
        src_w, src_h = source_size
        out_w, out_h = self.output_size(clip_spec)
        clip = clip_spec.clip_rect
        rect = effective_image_rect(image_spec, state.rotation)
        s = state.scale
        rx = out_w / clip.width if clip.width > 0 else self.pixel_ratio
        ry = out_h / clip.height if clip.height > 0 else self.pixel_ratio
        kx = rect.width / src_w
        ky = rect.height / src_h

        # Reference-frame position of the first pixel center.
        x0 = rect.cx + s * (state.offset.dx + 0.5 * kx - rect.width / 2.0)
        y0 = rect.cy + s * (state.offset.dy + 0.5 * ky - rect.height / 2.0)
        return np.array(
            [
                [rx * s * kx, 0.0, rx * (x0 - clip.min_x) - 0.5],
                [0.0, ry * s * ky, ry * (y0 - clip.min_y) - 0.5],
            ],
            dtype=np.float64,
        )

    def __call__(
        self, state: TransformState, clip_spec: ClipSpec, image_spec: ImageSpec
    ) -> np.ndarray:
        out_w, out_h = self.output_size(clip_spec)
        if self._source.size == 0 or image_spec.is_degenerate:
            logger.warning("Rendering an empty source; output is transparent")
            return np.zeros((out_h, out_w, 4), dtype=np.uint8)

        turned = _to_bgra(rotate_image(self._source, state.rotation))
        src_h, src_w = turned.shape[:2]
        M = self.transform_matrix(state, clip_spec, image_spec, (src_w, src_h))
        bitmap = cv2.warpAffine(
            turned,
            M,
            (out_w, out_h),
            flags=cv2.INTER_LINEAR,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(0, 0, 0, 0),
        )
        if self.clip_shape == "circle":
            bitmap[~circle_mask(out_w, out_h), 3] = 0
        return bitmap


__all__ = ["ClipRenderer", "circle_mask"]
