"""Entry door on the front end wall.

The door is centred on ``x = 0`` at ``z = +length / 2``.  Each variant has its
own nominal width and composition; width and height are capped so the door
never overhangs the end wall.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List

from .elements import ALONG_X, box, cylinder
from .model import FeatureElement, FeatureInstance
from .vec3 import non_negative

__all__ = ["DOOR_WIDTHS_M", "DOOR_HEIGHT_M", "curtain_fold_count", "door"]

DOOR_WIDTHS_M: Dict[str, float] = {
    "single-sliding": 1.2,
    "double-sliding": 2.4,
    "roll-up": 2.0,
    "curtain": 1.8,
}
DOOR_HEIGHT_M = 2.2
FRAME_MARGIN_M = 0.2
CURTAIN_FOLD_WIDTH_M = 0.2


def curtain_fold_count(door_width: float) -> int:
    """Pleats of a curtain entry; half-up rounding, at least two."""
    return max(2, int(math.floor(non_negative(door_width) / CURTAIN_FOLD_WIDTH_M + 0.5)))


def door(variant: str, width: float, length: float, eave_height: float) -> FeatureInstance:
    """Build the door feature for ``variant`` on a wall ``width`` wide."""
    if variant not in DOOR_WIDTHS_M:
        logging.warning("Unknown door entry '%s'; using single-sliding", variant)
        variant = "single-sliding"

    wall_width = non_negative(width)
    wall_height = non_negative(eave_height)
    door_w = min(DOOR_WIDTHS_M[variant], wall_width)
    door_h = min(DOOR_HEIGHT_M, wall_height)
    frame_w = min(door_w + FRAME_MARGIN_M, wall_width)
    frame_h = min(door_h + FRAME_MARGIN_M, wall_height)
    z = non_negative(length) * 0.5
    mid_y = door_h * 0.5

    elements: List[FeatureElement] = [
        box("frame", (0.0, frame_h * 0.5, z + 0.05), (frame_w, frame_h, 0.04)),
    ]
    params: Dict[str, object] = {"variant": variant, "width": door_w, "height": door_h}

    if variant == "single-sliding":
        elements.append(box("leaf", (0.0, mid_y, z + 0.1), (door_w, door_h, 0.08), role="door"))
        params["leaf_count"] = 1
    elif variant == "double-sliding":
        leaf_w = door_w * 0.5
        for side, sign in (("left", -1.0), ("right", 1.0)):
            x = sign * leaf_w * 0.5
            elements.append(box(f"leaf_{side}", (x, mid_y, z + 0.1), (leaf_w, door_h, 0.06), role="door"))
            elements.append(
                box(
                    f"glass_{side}",
                    (x, door_h * 0.65, z + 0.14),
                    (leaf_w * 0.7, door_h * 0.4, 0.02),
                    role="glass",
                )
            )
        params["leaf_count"] = 2
    elif variant == "roll-up":
        housing_r = 0.15
        elements.append(box("shutter", (0.0, mid_y, z + 0.1), (door_w, door_h, 0.04), role="door"))
        elements.append(
            cylinder(
                "roll_housing",
                (0.0, door_h + housing_r, z + 0.15),
                housing_r,
                frame_w,
                role="mechanism",
                rotation=ALONG_X,
            )
        )
    else:
        folds = curtain_fold_count(door_w)
        fold_w = door_w / folds
        for i in range(folds):
            x = -door_w * 0.5 + fold_w * (i + 0.5)
            # Alternate pleats step in and out of the wall plane.
            dz = 0.02 if i % 2 else -0.02
            elements.append(box(f"fold_{i:02d}", (x, mid_y, z + 0.1 + dz), (fold_w, door_h, 0.03), role="cover"))
        params["fold_count"] = folds

    return FeatureInstance(
        name="door",
        kind="door",
        position=(0.0, mid_y, z),
        parameters=params,
        elements=tuple(elements),
    )
