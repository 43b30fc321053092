"""Small numeric helpers shared by the controllers and filters."""

from __future__ import annotations

import math

_TWO_PI = 2.0 * math.pi


def angular_minus(a: float, b: float) -> float:
    """Return the shortest signed angular difference ``a - b`` in radians."""
    a = math.fmod(a, _TWO_PI)
    b = math.fmod(b, _TWO_PI)
    direct = a - b
    wrapped = (a + _TWO_PI - b) if a < b else (a - _TWO_PI - b)
    return direct if abs(direct) < abs(wrapped) else wrapped


def min_abs(a: float, b: float) -> float:
    """Clamp the magnitude of ``a`` to ``b`` while keeping the sign of ``a``."""
    sign = -1.0 if a < 0.0 else 1.0
    return sign * min(abs(a), b)


def sgn(val: float) -> int:
    """Return -1, 0 or 1 according to the sign of ``val``."""
    return int(val > 0) - int(val < 0)


def square(val: float) -> float:
    """Return ``val`` squared."""
    return val * val


def alpha(cutoff: float, freq: float) -> float:
    """Smoothing factor of a first-order low-pass filter at the given rate."""
    tau = 1.0 / (_TWO_PI * cutoff)
    te = 1.0 / freq
    return 1.0 / (1.0 + tau / te)