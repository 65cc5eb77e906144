"""Dataclasses describing configuration for image_clipper sessions."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import json
from typing import Dict

CLIP_SHAPES = ("circle", "rect")


@dataclass
class ConstraintParams:
    """Limits applied by the geometry model."""

    max_scale: float = 3.0  # <= 1 means unbounded
    min_scale: float = 0.01
    clip_inset_px: int = 60


@dataclass
class UIState:
    """Presentation preferences for the clipping dialog."""

    cancel_label: str = "Cancel"
    apply_label: str = "Apply"
    back_opacity: float = 0.5
    clip_shape: str = "circle"  # "circle" | "rect"
    pixel_ratio: float = 1.0  # output pixels per view unit


@dataclass
class AppConfig:
    """Persisted preferences for the application."""

    params: ConstraintParams = field(default_factory=ConstraintParams)
    ui: UIState = field(default_factory=UIState)

    def to_json(self) -> str:
        return json.dumps(asdict(self), indent=2)

    @staticmethod
    def from_json(text: str) -> "AppConfig":
        data: Dict = json.loads(text)
        p = data.get("params", {})
        u = data.get("ui", {})
        shape = str(u.get("clip_shape", "circle"))
        if shape not in CLIP_SHAPES:
            raise ValueError(f"Unknown clip shape {shape!r}.")
        return AppConfig(
            params=ConstraintParams(
                max_scale=float(p.get("max_scale", 3.0)),
                min_scale=float(p.get("min_scale", 0.01)),
                clip_inset_px=int(p.get("clip_inset_px", 60)),
            ),
            ui=UIState(
                cancel_label=str(u.get("cancel_label", "Cancel")),
                apply_label=str(u.get("apply_label", "Apply")),
                back_opacity=float(u.get("back_opacity", 0.5)),
                clip_shape=shape,
                pixel_ratio=float(u.get("pixel_ratio", 1.0)),
            ),
        )


__all__ = [
    "CLIP_SHAPES",
    "ConstraintParams",
    "UIState",
    "AppConfig",
]
