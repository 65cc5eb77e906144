"""Qt helper utilities."""

from PySide6 import QtGui
import numpy as np


def bgr_to_qimage(arr: np.ndarray) -> QtGui.QImage:
    """Convert a BGR/BGRA/grayscale NumPy array into a detached :class:`QImage`."""
    if arr.size == 0:
        return QtGui.QImage()
    data = np.ascontiguousarray(arr, dtype=np.uint8)
    height, width = data.shape[:2]
    if data.ndim == 2:
        fmt = QtGui.QImage.Format.Format_Grayscale8
        channels = 1
    elif data.shape[2] == 4:
        data = np.ascontiguousarray(data[..., [2, 1, 0, 3]])
        fmt = QtGui.QImage.Format.Format_RGBA8888
        channels = 4
    elif data.shape[2] == 3:
        data = np.ascontiguousarray(data[..., ::-1])
        fmt = QtGui.QImage.Format.Format_RGB888
        channels = 3
    else:
        raise ValueError("Expected a grayscale, BGR or BGRA array.")
    img = QtGui.QImage(data.data, width, height, width * channels, fmt)
    # QImage only borrows the buffer; copy so it outlives ``data``.
    return img.copy()


def qimage_to_bgr(img: QtGui.QImage) -> np.ndarray:
    """Convert a :class:`~PySide6.QtGui.QImage` into a BGR NumPy array."""
    img = img.convertToFormat(QtGui.QImage.Format.Format_RGBA8888)
    width = img.width()
    height = img.height()
    if width == 0 or height == 0:
        return np.zeros((0, 0, 3), dtype=np.uint8)
    bytes_per_line = img.bytesPerLine()
    buf = img.constBits()  # memoryview in PySide6
    arr = np.frombuffer(buf, np.uint8)
    arr = arr.reshape((height, bytes_per_line))  # include stride
    arr = arr[:, : width * 4]  # crop padding
    arr = arr.reshape((height, width, 4))
    bgr = arr[..., 2::-1]
    return np.ascontiguousarray(bgr)


__all__ = ["bgr_to_qimage", "qimage_to_bgr"]
