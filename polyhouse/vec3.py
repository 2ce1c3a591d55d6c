"""Shared 3-component vector helpers (pure Python, no FreeCAD dependency).

All functions operate on ``Vector3 = Tuple[float, float, float]`` values.
Used by the layout engine, the feature composer and the camera controller.
"""

from __future__ import annotations

import math
from typing import Tuple

__all__ = [
    "Vector3",
    "ZERO",
    "norm",
    "normalize",
    "sub",
    "midpoint",
    "lerp",
    "quadratic_bezier",
    "non_negative",
    "bounded",
]

Vector3 = Tuple[float, float, float]

ZERO: Vector3 = (0.0, 0.0, 0.0)


def norm(v: Vector3) -> float:
    """Euclidean length of *v*."""
    return math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def normalize(v: Vector3) -> Vector3:
    """Unit vector in the direction of *v*, or (0,0,0) if degenerate."""
    n = norm(v)
    if n <= 1e-12:
        return ZERO
    return (v[0] / n, v[1] / n, v[2] / n)


def sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def midpoint(a: Vector3, b: Vector3) -> Vector3:
    return ((a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5, (a[2] + b[2]) * 0.5)


def lerp(a: Vector3, b: Vector3, t: float) -> Vector3:
    """Linear interpolation between *a* and *b* at parameter *t*."""
    return (
        a[0] + (b[0] - a[0]) * t,
        a[1] + (b[1] - a[1]) * t,
        a[2] + (b[2] - a[2]) * t,
    )


def quadratic_bezier(p0: Vector3, p1: Vector3, p2: Vector3, t: float) -> Vector3:
    """Point on the quadratic Bezier curve through control point *p1*."""
    u = 1.0 - t
    a = u * u
    b = 2.0 * u * t
    c = t * t
    return (
        a * p0[0] + b * p1[0] + c * p2[0],
        a * p0[1] + b * p1[1] + c * p2[1],
        a * p0[2] + b * p1[2] + c * p2[2],
    )


def non_negative(value: float) -> float:
    """Coerce *value* to a finite float >= 0; NaN, inf and negatives become 0."""
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v) or v < 0:
        return 0.0
    return v


def bounded(value: float, upper: float) -> float:
    """``non_negative(value)`` capped at *upper*."""
    return min(non_negative(value), upper)
