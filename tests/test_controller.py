"""Gesture and action handling of the interaction controller."""

from __future__ import annotations

import math
from typing import List, Tuple

from hypothesis import given, settings
from hypothesis import strategies as st
import numpy as np
import pytest

from image_clipper.controller import InteractionController, Phase
from image_clipper.geometry import (
    ClipSpec,
    ImageSpec,
    Offset,
    Rect,
    Size,
    TransformState,
    effective_image_rect,
    transformed_image_rect,
)
from image_clipper.models import ConstraintParams


class _RecordingRenderer:
    def __init__(self) -> None:
        self.calls: List[TransformState] = []

    def __call__(
        self, state: TransformState, clip_spec: ClipSpec, image_spec: ImageSpec
    ) -> np.ndarray:
        self.calls.append(state)
        return np.full((4, 4, 4), 7, dtype=np.uint8)


def _controller(
    max_scale: float = 3.0,
) -> Tuple[InteractionController, _RecordingRenderer]:
    clip = ClipSpec(Rect(100.0, 100.0, 200.0, 200.0), max_scale=max_scale)
    image = ImageSpec.centered((100.0, 100.0), Size(200.0, 300.0))
    renderer = _RecordingRenderer()
    ctrl = InteractionController(
        clip, image, renderer, ConstraintParams(max_scale=max_scale)
    )
    return ctrl, renderer


def _covers(ctrl: InteractionController, tol: float = 1e-6) -> bool:
    st_ = ctrl.state
    rect = transformed_image_rect(ctrl.image_spec, st_.rotation, st_.scale, st_.offset)
    return rect.contains(ctrl.clip_spec.clip_rect, tol=tol)


def _drag(ctrl: InteractionController, tx: float, ty: float) -> None:
    ctrl.begin_drag()
    ctrl.update_drag(tx, ty)
    ctrl.end_drag()


def _pinch(ctrl: InteractionController, magnification: float) -> None:
    ctrl.begin_pinch()
    ctrl.update_pinch(magnification)
    ctrl.end_pinch()


def test_initial_state_defaults() -> None:
    ctrl, _ = _controller()
    state = ctrl.state
    assert ctrl.phase is Phase.IDLE
    assert state.scale == state.initial_scale == 1.0
    assert state.offset == state.initial_offset == Offset(0.0, 0.0)
    assert state.rotation == 0


def test_pinch_updates_are_relative_to_committed_scale() -> None:
    ctrl, _ = _controller()
    _pinch(ctrl, 2.0)
    assert ctrl.state.initial_scale == 2.0

    ctrl.begin_pinch()
    # Cumulative magnification: repeated updates do not compound.
    ctrl.update_pinch(1.25)
    ctrl.update_pinch(1.25)
    assert ctrl.state.scale == pytest.approx(2.5)
    assert ctrl.state.initial_scale == 2.0
    ctrl.end_pinch()
    assert ctrl.state.initial_scale == pytest.approx(2.5)


def test_pinch_is_capped_at_max_scale() -> None:
    ctrl, _ = _controller(max_scale=3.0)
    _pinch(ctrl, 10.0)
    assert ctrl.state.scale == 3.0


def test_pinch_out_below_cover_is_rejected() -> None:
    ctrl, _ = _controller()
    _pinch(ctrl, 0.5)
    assert ctrl.state.scale == 1.0


def test_drag_divides_translation_by_scale() -> None:
    ctrl, _ = _controller()
    _pinch(ctrl, 2.0)
    _drag(ctrl, 40.0, 60.0)
    assert ctrl.state.offset == pytest.approx(Offset(20.0, 30.0))
    assert ctrl.state.initial_offset == ctrl.state.offset


def test_drag_updates_do_not_drift() -> None:
    ctrl, _ = _controller()
    ctrl.begin_drag()
    for ty in (10.0, 20.0, 30.0, 20.0):
        ctrl.update_drag(0.0, ty)
    ctrl.end_drag()
    assert ctrl.state.offset == Offset(0.0, 20.0)


def test_drag_is_clamped() -> None:
    ctrl, _ = _controller()
    _drag(ctrl, 30.0, 500.0)
    assert ctrl.state.offset == pytest.approx(Offset(0.0, 50.0))
    assert _covers(ctrl)


def test_huge_drag_stays_covered() -> None:
    ctrl, _ = _controller()
    _drag(ctrl, 0.0, 2e17)
    assert ctrl.state.offset == pytest.approx(Offset(0.0, 50.0))
    assert _covers(ctrl)


@pytest.mark.parametrize("bad", [float("inf"), float("-inf"), float("nan")])
def test_non_finite_drag_keeps_session_usable(bad: float) -> None:
    ctrl, renderer = _controller()
    _drag(ctrl, 0.0, 20.0)
    ctrl.begin_drag()
    assert ctrl.update_drag(bad, 0.0) == Offset(0.0, 20.0)
    ctrl.update_drag(0.0, 10.0)
    ctrl.end_drag()
    assert ctrl.state.offset == pytest.approx(Offset(0.0, 30.0))
    assert all(math.isfinite(v) for v in ctrl.state.initial_offset)
    ctrl.apply()
    assert all(math.isfinite(v) for v in renderer.calls[0].offset)


@pytest.mark.parametrize("max_scale", [1.0, 3.0])
@pytest.mark.parametrize("bad", [float("inf"), float("nan")])
def test_non_finite_pinch_is_ignored(bad: float, max_scale: float) -> None:
    ctrl, _ = _controller(max_scale=max_scale)
    _pinch(ctrl, 1.5)
    ctrl.begin_pinch()
    assert ctrl.update_pinch(bad) == 1.5
    ctrl.end_pinch()
    assert ctrl.state.scale == ctrl.state.initial_scale == 1.5


def test_gestures_are_mutually_exclusive() -> None:
    ctrl, _ = _controller()
    assert ctrl.begin_pinch()
    assert not ctrl.begin_drag()
    assert ctrl.update_drag(0.0, 40.0) == Offset(0.0, 0.0)
    ctrl.end_drag()
    assert ctrl.phase is Phase.SCALING
    ctrl.end_pinch()

    assert ctrl.begin_drag()
    assert ctrl.update_pinch(2.0) == 1.0
    assert ctrl.phase is Phase.PANNING
    ctrl.end_drag()
    assert ctrl.phase is Phase.IDLE


def test_update_without_begin_starts_gesture() -> None:
    ctrl, _ = _controller()
    ctrl.update_drag(0.0, 10.0)
    assert ctrl.phase is Phase.PANNING
    ctrl.end_drag()
    assert ctrl.state.initial_offset == Offset(0.0, 10.0)


def test_rotate_reclamps_committed_offset() -> None:
    ctrl, _ = _controller()
    _drag(ctrl, 0.0, 50.0)
    assert ctrl.state.offset == Offset(0.0, 50.0)

    assert ctrl.rotate()
    state = ctrl.state
    assert state.rotation == 90
    assert state.offset == pytest.approx(Offset(0.0, 0.0))
    assert state.initial_offset == state.offset
    assert _covers(ctrl)

    # Horizontal slack now exists instead.
    _drag(ctrl, 80.0, 0.0)
    assert ctrl.state.offset == pytest.approx(Offset(50.0, 0.0))


def test_rotate_is_ignored_during_gesture() -> None:
    ctrl, _ = _controller()
    ctrl.begin_drag()
    assert not ctrl.rotate()
    assert ctrl.state.rotation == 0


@pytest.mark.parametrize("count", range(1, 10))
def test_rotation_is_monotonic(count: int) -> None:
    ctrl, _ = _controller()
    for _ in range(count):
        ctrl.rotate()
    state = ctrl.state
    assert state.rotation == 90 * count
    assert state.direction == count % 4
    rect = effective_image_rect(ctrl.image_spec, state.rotation)
    assert (rect.width > rect.height) == (count % 2 == 1)
    assert _covers(ctrl)


def test_on_change_receives_copies() -> None:
    ctrl, _ = _controller()
    seen: List[TransformState] = []
    ctrl.set_on_change(seen.append)
    _pinch(ctrl, 2.0)
    _drag(ctrl, 10.0, 0.0)
    ctrl.rotate()
    assert [s.scale for s in seen] == [2.0, 2.0, 2.0]
    seen[0].scale = 99.0
    assert ctrl.state.scale == 2.0


@pytest.mark.parametrize("phase_setup", ["idle", "pinch", "drag", "after_rotate"])
def test_cancel_from_any_state_produces_no_result(phase_setup: str) -> None:
    ctrl, renderer = _controller()
    if phase_setup == "pinch":
        ctrl.begin_pinch()
        ctrl.update_pinch(2.0)
    elif phase_setup == "drag":
        ctrl.begin_drag()
        ctrl.update_drag(0.0, 20.0)
    elif phase_setup == "after_rotate":
        ctrl.rotate()

    result = ctrl.cancel()
    assert not result.applied
    assert result.bitmap is None
    assert ctrl.phase is Phase.CANCELLED
    assert renderer.calls == []

    # The session is over: later input changes nothing.
    assert ctrl.apply() is result
    assert not ctrl.rotate()
    assert renderer.calls == []


def test_apply_renders_committed_state_once() -> None:
    ctrl, renderer = _controller()
    _pinch(ctrl, 2.0)
    _drag(ctrl, 20.0, 40.0)
    ctrl.rotate()

    result = ctrl.apply()
    assert result.applied
    assert result.bitmap is not None and result.bitmap.shape == (4, 4, 4)
    assert ctrl.phase is Phase.APPLIED
    assert len(renderer.calls) == 1
    rendered = renderer.calls[0]
    assert rendered == result.transform
    assert rendered.rotation == 90
    assert rendered.scale == 2.0

    assert ctrl.apply() is result
    assert ctrl.cancel() is result
    assert len(renderer.calls) == 1


def test_apply_mid_gesture_commits_first() -> None:
    ctrl, renderer = _controller()
    ctrl.begin_pinch()
    ctrl.update_pinch(1.5)
    ctrl.apply()
    assert renderer.calls[0].scale == pytest.approx(1.5)


_ops = st.one_of(
    st.tuples(st.just("pinch"), st.floats(0.05, 5.0)),
    st.tuples(st.just("drag"), st.floats(-2000.0, 2000.0), st.floats(-2000.0, 2000.0)),
    st.tuples(st.just("rotate")),
)


@settings(max_examples=150, deadline=None)
@given(ops=st.lists(_ops, max_size=25), max_scale=st.sampled_from([1.0, 3.0, 6.0]))
def test_coverage_holds_for_any_gesture_sequence(ops: list, max_scale: float) -> None:
    ctrl, _ = _controller(max_scale=max_scale)
    for op in ops:
        if op[0] == "pinch":
            _pinch(ctrl, op[1])
        elif op[0] == "drag":
            _drag(ctrl, op[1], op[2])
        else:
            ctrl.rotate()
        assert ctrl.phase is Phase.IDLE
        assert _covers(ctrl)
        if max_scale > 1.0:
            assert ctrl.state.scale <= max_scale
