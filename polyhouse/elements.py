"""Small factories for renderable feature elements.

Sizes are passed through ``non_negative`` so a degenerate footprint yields
zero-sized (never negative or NaN) geometry.
"""

from __future__ import annotations

import math

from .model import FeatureElement
from .vec3 import ZERO, Vector3, non_negative

__all__ = ["box", "cylinder", "sphere", "ALONG_X", "ALONG_Z", "HALF_PI"]

HALF_PI = math.pi * 0.5

# Cylinders are authored along +y; these rotations lay them along x or z.
ALONG_X: Vector3 = (0.0, 0.0, HALF_PI)
ALONG_Z: Vector3 = (HALF_PI, 0.0, 0.0)


def _size(sx: float, sy: float, sz: float) -> Vector3:
    return (non_negative(sx), non_negative(sy), non_negative(sz))


def box(
    name: str,
    position: Vector3,
    size: Vector3,
    role: str = "frame",
    rotation: Vector3 = ZERO,
    animated: bool = False,
) -> FeatureElement:
    return FeatureElement(
        name=name,
        shape="box",
        position=position,
        size=_size(*size),
        rotation=rotation,
        role=role,
        animated=animated,
    )


def cylinder(
    name: str,
    position: Vector3,
    radius: float,
    height: float,
    role: str = "frame",
    rotation: Vector3 = ZERO,
    animated: bool = False,
) -> FeatureElement:
    return FeatureElement(
        name=name,
        shape="cylinder",
        position=position,
        size=_size(radius, height, radius),
        rotation=rotation,
        role=role,
        animated=animated,
    )


def sphere(name: str, position: Vector3, radius: float, role: str = "frame") -> FeatureElement:
    return FeatureElement(
        name=name,
        shape="sphere",
        position=position,
        size=_size(radius, radius, radius),
        role=role,
    )
