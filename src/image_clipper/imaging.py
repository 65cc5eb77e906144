"""Loading, saving and quarter-turn rotation of pixel arrays."""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path

import cv2  # opencv-python
import numpy as np

logger = logging.getLogger(__name__)


def empty_image() -> np.ndarray:
    """Placeholder returned when a source image cannot be decoded."""
    return np.zeros((0, 0, 3), dtype=np.uint8)


def load_image(path: str | PathLike[str]) -> np.ndarray:
    """Decode ``path`` into a BGR or BGRA array, or an empty image on failure."""
    p = Path(path)
    img = cv2.imread(str(p), cv2.IMREAD_UNCHANGED)
    if img is None:
        logger.error("Cannot read image %s", p)
        return empty_image()
    if img.ndim == 2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2BGR)
    if img.dtype != np.uint8:
        img = cv2.convertScaleAbs(img, alpha=255.0 / max(1.0, float(img.max())))
    return img


def save_image(path: str | PathLike[str], bitmap: np.ndarray) -> bool:
    """Encode ``bitmap`` using the format implied by the file suffix."""
    p = Path(path)
    if not cv2.imwrite(str(p), bitmap):
        logger.error("Cannot write image %s", p)
        return False
    logger.info("Wrote %dx%d bitmap to %s", bitmap.shape[1], bitmap.shape[0], p)
    return True


def rotate_image(image: np.ndarray, degrees: int) -> np.ndarray:
    """Rotate clockwise by a multiple of 90 degrees."""
    if int(degrees) % 90:
        raise ValueError(f"Only quarter turns are supported, got {degrees} degrees.")
    turns = (int(degrees) // 90) % 4
    if turns == 0:
        return image
    return np.ascontiguousarray(np.rot90(image, k=-turns))


__all__ = ["empty_image", "load_image", "rotate_image", "save_image"]
