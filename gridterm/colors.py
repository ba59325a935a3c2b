"""Opacity adjustment and colour inversion."""

from __future__ import annotations


def clamp(value: float, lower: float, upper: float) -> float:
    """Limit value to the closed range [lower, upper]."""
    if value < lower:
        return lower
    if value > upper:
        return upper
    return value


def change_alpha(alpha: float, delta: float) -> float:
    """Return alpha moved by delta, kept within 0..1."""
    if (alpha > 0 and delta < 0) or (alpha < 1 and delta > 0):
        alpha += delta
    return clamp(alpha, 0.0, 1.0)


def invert_color(red: int, green: int, blue: int, alpha: int) -> tuple[int, int, int, int]:
    """Invert 16-bit RGB channels, leaving alpha untouched."""
    return (~red & 0xFFFF, ~green & 0xFFFF, ~blue & 0xFFFF, alpha)