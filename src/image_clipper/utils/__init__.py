"""Utility helpers for image_clipper."""

from .geometry import clamp, quarter_turns

__all__ = ["clamp", "quarter_turns"]
