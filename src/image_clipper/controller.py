"""Gesture-driven state machine owning the clipping session's view transform."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import math
from typing import Callable, Optional

import numpy as np

from .geometry import (
    ClipSpec,
    ImageSpec,
    Offset,
    TransformState,
    cap_scale,
    clamp_offset,
    clamp_scale,
)
from .models import ConstraintParams

logger = logging.getLogger(__name__)

Renderer = Callable[[TransformState, ClipSpec, ImageSpec], np.ndarray]
ChangeCallback = Callable[[TransformState], None]

UNIT_ROTATION_DEG = 90


class Phase(Enum):
    IDLE = "idle"
    SCALING = "scaling"
    PANNING = "panning"
    CANCELLED = "cancelled"
    APPLIED = "applied"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.CANCELLED, Phase.APPLIED)


@dataclass(frozen=True)
class SessionResult:
    """Outcome of a session: a bitmap on apply, nothing on cancel."""

    applied: bool
    bitmap: Optional[np.ndarray] = None
    transform: Optional[TransformState] = None


class InteractionController:
    """Feeds pinch/drag/rotate input through the geometry model.

    Gesture updates carry the cumulative magnification or translation since
    the gesture began, so every update is recomputed from the committed state
    and intermediate updates may be dropped freely. Only one gesture runs at a
    time; input for the other kind is ignored until the active one ends.
    """

    def __init__(
        self,
        clip_spec: ClipSpec,
        image_spec: ImageSpec,
        renderer: Renderer,
        params: Optional[ConstraintParams] = None,
        on_change: Optional[ChangeCallback] = None,
    ) -> None:
        self.clip_spec = clip_spec
        self.image_spec = image_spec
        self._renderer = renderer
        self._params = params or ConstraintParams(max_scale=clip_spec.max_scale)
        self._on_change = on_change
        self._state = TransformState()
        self._phase = Phase.IDLE
        self._result: Optional[SessionResult] = None

    # ----------------------------- Properties ---------------------------------

    @property
    def state(self) -> TransformState:
        return self._state.copy()

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def result(self) -> Optional[SessionResult]:
        return self._result

    def set_on_change(self, callback: Optional[ChangeCallback]) -> None:
        self._on_change = callback

    # ------------------------------- Pinch ------------------------------------

    def begin_pinch(self) -> bool:
        return self._begin(Phase.SCALING)

    def update_pinch(self, magnification: float) -> float:
        """Zoom by ``magnification`` relative to the committed scale."""
        if self._phase is Phase.IDLE:
            self.begin_pinch()
        if self._phase is not Phase.SCALING:
            self._ignored("pinch update")
            return self._state.scale

        if not math.isfinite(magnification):
            self._ignored("non-finite pinch update")
            return self._state.scale
        proposed = cap_scale(
            float(magnification) * self._state.initial_scale,
            self.clip_spec,
            self._params.min_scale,
        )
        new_scale = clamp_scale(proposed, self.clip_spec, self.image_spec, self._state)
        if new_scale != self._state.scale:
            self._state.scale = new_scale
            self._notify()
        return new_scale

    def end_pinch(self) -> None:
        if self._phase is not Phase.SCALING:
            self._ignored("pinch end")
            return
        self._state.initial_scale = self._state.scale
        self._phase = Phase.IDLE
        logger.debug("Committed scale %.4f", self._state.scale)

    # -------------------------------- Drag ------------------------------------

    def begin_drag(self) -> bool:
        return self._begin(Phase.PANNING)

    def update_drag(self, tx: float, ty: float) -> Offset:
        """Pan by the on-screen translation ``(tx, ty)`` since the drag began."""
        if self._phase is Phase.IDLE:
            self.begin_drag()
        if self._phase is not Phase.PANNING:
            self._ignored("drag update")
            return self._state.offset

        scale = self._state.scale
        start = self._state.initial_offset
        proposed = Offset(start.dx + float(tx) / scale, start.dy + float(ty) / scale)
        new_offset = clamp_offset(proposed, self.clip_spec, self.image_spec, self._state)
        if new_offset != self._state.offset:
            self._state.offset = new_offset
            self._notify()
        return new_offset

    def end_drag(self) -> None:
        if self._phase is not Phase.PANNING:
            self._ignored("drag end")
            return
        self._state.initial_offset = self._state.offset
        self._phase = Phase.IDLE
        logger.debug("Committed offset (%.2f, %.2f)", *self._state.offset)

    # ------------------------------ Actions -----------------------------------

    def rotate(self) -> bool:
        """Turn the image a quarter clockwise and re-fit the committed offset."""
        if self._phase is not Phase.IDLE:
            self._ignored("rotate")
            return False
        self._state.rotation += UNIT_ROTATION_DEG
        # Exchanging width and height can uncover the clip on the short axis.
        offset = clamp_offset(
            self._state.initial_offset, self.clip_spec, self.image_spec, self._state
        )
        self._state.offset = offset
        self._state.initial_offset = offset
        logger.debug("Rotated to %d degrees", self._state.rotation)
        self._notify()
        return True

    def cancel(self) -> SessionResult:
        if self._result is not None:
            self._ignored("cancel")
            return self._result
        self._phase = Phase.CANCELLED
        self._result = SessionResult(applied=False)
        logger.info("Clipping cancelled")
        return self._result

    def apply(self) -> SessionResult:
        """Render the committed transform and end the session."""
        if self._result is not None:
            self._ignored("apply")
            return self._result
        if self._phase is Phase.SCALING:
            self.end_pinch()
        elif self._phase is Phase.PANNING:
            self.end_drag()

        committed = self._state.committed()
        bitmap = self._renderer(committed, self.clip_spec, self.image_spec)
        self._phase = Phase.APPLIED
        self._result = SessionResult(applied=True, bitmap=bitmap, transform=committed)
        logger.info(
            "Clipping applied: scale=%.3f offset=(%.1f, %.1f) rotation=%d",
            committed.scale,
            committed.offset.dx,
            committed.offset.dy,
            committed.rotation,
        )
        return self._result

    # ------------------------------ Helpers -----------------------------------

    def _begin(self, phase: Phase) -> bool:
        if self._phase is not Phase.IDLE:
            self._ignored(f"{phase.value} begin")
            return False
        self._phase = phase
        return True

    def _ignored(self, what: str) -> None:
        logger.debug("Ignoring %s while %s", what, self._phase.value)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self._state.copy())


__all__ = [
    "ChangeCallback",
    "InteractionController",
    "Phase",
    "Renderer",
    "SessionResult",
    "UNIT_ROTATION_DEG",
]
