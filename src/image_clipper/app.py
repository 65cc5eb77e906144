"""Qt application entry point for the image_clipper dialog."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import List, Optional, Tuple

import numpy as np
from PySide6 import QtCore, QtGui, QtWidgets

APP_VERSION: str

if __package__ in (None, ""):
    PACKAGE_ROOT = Path(__file__).resolve().parents[1]
    if str(PACKAGE_ROOT) not in sys.path:
        sys.path.insert(0, str(PACKAGE_ROOT))

    import image_clipper as _pkg

    from image_clipper.controller import InteractionController
    from image_clipper.geometry import TransformState, build_specs
    from image_clipper.imaging import load_image, save_image
    from image_clipper.models import CLIP_SHAPES, AppConfig
    from image_clipper.render import ClipRenderer
    from image_clipper.utils import clamp
    from image_clipper.utils.qt import bgr_to_qimage, qimage_to_bgr

    APP_VERSION = getattr(_pkg, "__version__", "0.0.0")
else:
    from . import __version__ as APP_VERSION
    from .controller import InteractionController
    from .geometry import TransformState, build_specs
    from .imaging import load_image, save_image
    from .models import CLIP_SHAPES, AppConfig
    from .render import ClipRenderer
    from .utils import clamp
    from .utils.qt import bgr_to_qimage, qimage_to_bgr

logger = logging.getLogger(__name__)

BAR_HEIGHT = 44
WHEEL_ZOOM_BASE = 1.0015  # scale factor per wheel angle unit (1/8 degree)


# -------------------------------- Clip View -----------------------------------


class ClipperView(QtWidgets.QWidget):
    """Paints the transformed image under a backdrop with a clip-shaped hole."""

    def __init__(
        self,
        controller: InteractionController,
        image: QtGui.QImage,
        cfg: AppConfig,
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._controller = controller
        self._image = image
        self._clip_shape = cfg.ui.clip_shape
        self._back_opacity = clamp(cfg.ui.back_opacity, 0.0, 1.0)
        self._state = controller.state
        self._press_pos: Optional[QtCore.QPointF] = None

        controller.set_on_change(self._on_state_changed)
        self.grabGesture(QtCore.Qt.GestureType.PinchGesture)
        self.setSizePolicy(
            QtWidgets.QSizePolicy.Policy.Expanding,
            QtWidgets.QSizePolicy.Policy.Expanding,
        )
        self.setCursor(QtCore.Qt.CursorShape.OpenHandCursor)

    def _on_state_changed(self, state: TransformState) -> None:
        self._state = state
        self.update()

    def sizeHint(self) -> QtCore.QSize:
        clip = self._controller.clip_spec.clip_rect
        return QtCore.QSize(int(clip.width) + 60, int(clip.height) + 60)

    # --------------------------- Geometry helpers ------------------------------

    def _frame_shift(self) -> Tuple[float, float]:
        """Translation from the reference frame to widget coordinates."""
        clip = self._controller.clip_spec.clip_rect
        return self.width() / 2.0 - clip.cx, self.height() / 2.0 - clip.cy

    def clip_rect_widget(self) -> QtCore.QRectF:
        clip = self._controller.clip_spec.clip_rect
        sx, sy = self._frame_shift()
        return QtCore.QRectF(clip.min_x + sx, clip.min_y + sy, clip.width, clip.height)

    # ----------------------------- Interaction --------------------------------

    def mousePressEvent(self, e: QtGui.QMouseEvent) -> None:
        if e.button() != QtCore.Qt.MouseButton.LeftButton:
            e.ignore()
            return
        if self._controller.begin_drag():
            self._press_pos = e.position()
            self.setCursor(QtCore.Qt.CursorShape.ClosedHandCursor)
        e.accept()

    def mouseMoveEvent(self, e: QtGui.QMouseEvent) -> None:
        if self._press_pos is None:
            return
        delta = e.position() - self._press_pos
        self._controller.update_drag(delta.x(), delta.y())
        e.accept()

    def mouseReleaseEvent(self, e: QtGui.QMouseEvent) -> None:
        if self._press_pos is None:
            return
        delta = e.position() - self._press_pos
        self._controller.update_drag(delta.x(), delta.y())
        self._controller.end_drag()
        self._press_pos = None
        self.setCursor(QtCore.Qt.CursorShape.OpenHandCursor)
        e.accept()

    def wheelEvent(self, e: QtGui.QWheelEvent) -> None:
        steps = e.angleDelta().y()
        if steps == 0 or not self._controller.begin_pinch():
            e.ignore()
            return
        self._controller.update_pinch(WHEEL_ZOOM_BASE**steps)
        self._controller.end_pinch()
        e.accept()

    def event(self, e: QtCore.QEvent) -> bool:
        if e.type() == QtCore.QEvent.Type.Gesture:
            return self._gesture_event(e)  # type: ignore[arg-type]
        return super().event(e)

    def _gesture_event(self, e: QtWidgets.QGestureEvent) -> bool:
        pinch = e.gesture(QtCore.Qt.GestureType.PinchGesture)
        if pinch is None:
            return False
        state = pinch.state()
        if state == QtCore.Qt.GestureState.GestureStarted:
            self._controller.begin_pinch()
        elif state == QtCore.Qt.GestureState.GestureUpdated:
            self._controller.update_pinch(pinch.totalScaleFactor())
        elif state in (
            QtCore.Qt.GestureState.GestureFinished,
            QtCore.Qt.GestureState.GestureCanceled,
        ):
            self._controller.update_pinch(pinch.totalScaleFactor())
            self._controller.end_pinch()
        e.accept(pinch)
        return True

    # ----------------------------- Painting -----------------------------------

    def paintEvent(self, e: QtGui.QPaintEvent) -> None:
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)
        painter.setRenderHint(QtGui.QPainter.RenderHint.SmoothPixmapTransform, True)
        painter.fillRect(self.rect(), QtGui.QColor(0, 0, 0))

        image_spec = self._controller.image_spec
        if not self._image.isNull() and not image_spec.is_degenerate:
            sx, sy = self._frame_shift()
            rect = image_spec.natural_rect
            st = self._state
            # Same order as the geometry model: turn, shift, then scale about center.
            painter.save()
            painter.translate(rect.cx + sx, rect.cy + sy)
            painter.scale(st.scale, st.scale)
            painter.translate(st.offset.dx, st.offset.dy)
            painter.rotate(float(st.rotation))
            target = QtCore.QRectF(
                -rect.width / 2.0, -rect.height / 2.0, rect.width, rect.height
            )
            painter.drawImage(target, self._image)
            painter.restore()

        clip = self.clip_rect_widget()
        backdrop = QtGui.QPainterPath()
        backdrop.addRect(QtCore.QRectF(self.rect()))
        if self._clip_shape == "circle":
            backdrop.addEllipse(clip)
        else:
            backdrop.addRect(clip)
        alpha = int(round(255 * self._back_opacity))
        painter.fillPath(backdrop, QtGui.QBrush(QtGui.QColor(0, 0, 0, alpha)))

        pen = QtGui.QPen(QtGui.QColor(255, 255, 255, 160))
        pen.setWidth(1)
        painter.setPen(pen)
        painter.setBrush(QtCore.Qt.BrushStyle.NoBrush)
        if self._clip_shape == "circle":
            painter.drawEllipse(clip)
        else:
            painter.drawRect(clip)


# ------------------------------ Clipper Dialog --------------------------------


class ClipperDialog(QtWidgets.QDialog):
    """Cancel / Apply on top, the clip view in the middle, Rotate below."""

    def __init__(
        self,
        controller: InteractionController,
        image: QtGui.QImage,
        cfg: AppConfig,
        app_version: str,
    ) -> None:
        super().__init__(None)
        self._controller = controller
        self.setWindowTitle(f"image_clipper {app_version or 'unknown'}")

        self.view = ClipperView(controller, image, cfg, self)

        self.cancel_btn = QtWidgets.QPushButton(cfg.ui.cancel_label)
        self.cancel_btn.setFlat(True)
        self.cancel_btn.setAutoDefault(False)
        self.cancel_btn.clicked.connect(self.reject)

        self.apply_btn = QtWidgets.QPushButton(cfg.ui.apply_label)
        self.apply_btn.setFlat(True)
        self.apply_btn.setDefault(True)
        font = self.apply_btn.font()
        font.setBold(True)
        self.apply_btn.setFont(font)
        self.apply_btn.clicked.connect(self._on_apply)

        self.rotate_btn = QtWidgets.QToolButton()
        self.rotate_btn.setIcon(
            self.style().standardIcon(QtWidgets.QStyle.StandardPixmap.SP_BrowserReload)
        )
        self.rotate_btn.setToolTip("Rotate right  (R)")
        self.rotate_btn.clicked.connect(self._on_rotate)

        rotate_shortcut = QtGui.QShortcut(QtGui.QKeySequence("R"), self)
        rotate_shortcut.activated.connect(self._on_rotate)

        top = QtWidgets.QHBoxLayout()
        top.addWidget(self.cancel_btn)
        top.addStretch(1)
        top.addWidget(self.apply_btn)

        bottom = QtWidgets.QHBoxLayout()
        bottom.addStretch(1)
        bottom.addWidget(self.rotate_btn)
        bottom.addStretch(1)

        v = QtWidgets.QVBoxLayout(self)
        v.setContentsMargins(0, 0, 0, 0)
        v.addLayout(top)
        v.addWidget(self.view, stretch=1)
        v.addLayout(bottom)

    def _on_rotate(self) -> None:
        self._controller.rotate()

    def _on_apply(self) -> None:
        self._controller.apply()
        self.accept()

    def reject(self) -> None:
        # Esc, the close button and Cancel all end up here.
        if self._controller.result is None:
            self._controller.cancel()
        super().reject()


# ---------------------------- Main Controller ---------------------------------


def config_path() -> Path:
    return Path.home() / ".image_clipper_config.json"


def load_config() -> AppConfig:
    p = config_path()
    if p.exists():
        try:
            return AppConfig.from_json(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable config %s: %s", p, exc)
    return AppConfig()


class MainController(QtCore.QObject):
    """Loads the source, builds the session and writes the result."""

    def __init__(
        self,
        app: QtWidgets.QApplication,
        source: np.ndarray,
        cfg: AppConfig,
        output: Optional[Path],
    ) -> None:
        super().__init__(None)
        self.app = app
        self.cfg = cfg
        self.output = output

        viewport = self._viewport_size()
        clip_spec, image_spec = build_specs(
            viewport, (source.shape[1], source.shape[0]), cfg.params
        )
        logger.debug("Clip %s, image %s", clip_spec, image_spec)
        renderer = ClipRenderer(source, cfg.ui.clip_shape, cfg.ui.pixel_ratio)
        self.controller = InteractionController(
            clip_spec, image_spec, renderer, cfg.params
        )

        self._app_version = app.applicationVersion() or APP_VERSION
        self.dialog = ClipperDialog(
            self.controller, bgr_to_qimage(source), cfg, self._app_version
        )
        self.dialog.resize(int(viewport[0]), int(viewport[1]) + 2 * BAR_HEIGHT)

    def _viewport_size(self) -> Tuple[float, float]:
        screen = QtGui.QGuiApplication.primaryScreen()
        if screen is None:
            return 480.0, 480.0
        avail = screen.availableGeometry()
        return float(avail.width()), float(max(1, avail.height() - 2 * BAR_HEIGHT))

    def run(self) -> int:
        self.dialog.show()
        self.app.exec()
        result = self.controller.result
        if result is None or not result.applied or result.bitmap is None:
            return 1
        if self.output is not None and not save_image(self.output, result.bitmap):
            return 2
        return 0


# ---------------------------------- Main --------------------------------------


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="image-clipper",
        description="Pan, zoom and rotate an image under a clip window and save the clip.",
    )
    parser.add_argument(
        "input", nargs="?", type=Path, help="image to clip (default: clipboard)"
    )
    parser.add_argument("-o", "--output", type=Path, help="where to write the clip")
    parser.add_argument("--max-scale", type=float, help="zoom limit, <= 1 for none")
    parser.add_argument("--shape", choices=CLIP_SHAPES, help="clip window shape")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=APP_VERSION)
    return parser.parse_args(argv)


def _default_output(input_path: Optional[Path]) -> Path:
    if input_path is None:
        return Path("clipped.png")
    return input_path.with_name(f"{input_path.stem}_clipped.png")


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QtWidgets.QApplication(sys.argv[:1])
    app.setApplicationName("image_clipper")
    app.setApplicationVersion(APP_VERSION)

    cfg = load_config()
    if args.max_scale is not None:
        cfg.params.max_scale = args.max_scale
    if args.shape is not None:
        cfg.ui.clip_shape = args.shape

    if args.input is not None:
        source = load_image(args.input)
    else:
        source = qimage_to_bgr(app.clipboard().image())
        if source.size == 0:
            logger.error("Clipboard holds no image")

    ctrl = MainController(app, source, cfg, args.output or _default_output(args.input))
    sys.exit(ctrl.run())


if __name__ == "__main__":
    main()
