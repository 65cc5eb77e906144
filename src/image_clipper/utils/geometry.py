"""Scalar helpers shared by the geometry model and the UI."""


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` to the inclusive range ``[lo, hi]``."""
    return max(lo, min(hi, value))


def quarter_turns(degrees: int) -> int:
    """Number of clockwise quarter turns in ``degrees``, reduced modulo 4."""
    return (int(degrees) // 90) % 4


__all__ = ["clamp", "quarter_turns"]
