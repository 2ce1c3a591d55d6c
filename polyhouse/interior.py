"""Cosmetic interior: growing beds, drip lines and plants.

Plant height and foliage size are jittered through an injected
``random.Random`` so callers can pin a seed; nothing structural depends on it.
"""

from __future__ import annotations

import math
import random
from typing import List, Optional

from .elements import ALONG_Z, box, cylinder, sphere
from .model import FeatureInstance
from .parameters import MAX_SPAN_M
from .vec3 import bounded, non_negative

__all__ = ["BED_COUNT", "PLANT_SPACING_M", "bed_positions", "plants_per_row", "decorate_interior"]

BED_COUNT = 4
BED_HEIGHT_M = 0.3
BED_SPREAD_RATIO = 0.7  # beds span 70 % of the width
BED_LENGTH_RATIO = 0.85
PLANT_SPACING_M = 2.5
IRRIGATION_RADIUS_M = 0.015
IRRIGATION_Y_M = 0.35


def bed_positions(width: float) -> List[float]:
    """x centres of the growing beds."""
    width = non_negative(width)
    step = width * BED_SPREAD_RATIO / (BED_COUNT - 1)
    return [-width * 0.5 * BED_SPREAD_RATIO + i * step for i in range(BED_COUNT)]


def plants_per_row(length: float) -> int:
    return int(math.floor(bounded(length, MAX_SPAN_M) / PLANT_SPACING_M))


def decorate_interior(
    length: float,
    width: float,
    rng: Optional[random.Random] = None,
) -> List[FeatureInstance]:
    length = non_negative(length)
    width = non_negative(width)
    rng = rng or random.Random()
    bed_length = length * BED_LENGTH_RATIO
    xs = bed_positions(width)

    items: List[FeatureInstance] = []
    for i, x in enumerate(xs):
        items.append(
            FeatureInstance(
                name=f"bed_{i}",
                kind="bed",
                position=(x, BED_HEIGHT_M * 0.5, 0.0),
                parameters={"length": bed_length},
                elements=(
                    box("soil", (x, BED_HEIGHT_M * 0.5, 0.0), (width * 0.15, BED_HEIGHT_M, bed_length)),
                ),
            )
        )
        items.append(
            FeatureInstance(
                name=f"irrigation_line_{i}",
                kind="irrigation_line",
                position=(x, IRRIGATION_Y_M, 0.0),
                parameters={"length": bed_length},
                elements=(
                    cylinder(
                        "pipe",
                        (x, IRRIGATION_Y_M, 0.0),
                        IRRIGATION_RADIUS_M,
                        bed_length,
                        rotation=ALONG_Z,
                    ),
                ),
            )
        )

    for row, x in enumerate(xs):
        for col in range(plants_per_row(length)):
            z = -length * 0.5 * 0.8 + col * PLANT_SPACING_M
            height = 0.3 + rng.random() * 0.4
            foliage = 0.25 + rng.random() * 0.15
            base_y = BED_HEIGHT_M
            items.append(
                FeatureInstance(
                    name=f"plant_{row}_{col:02d}",
                    kind="plant",
                    position=(x, base_y, z),
                    parameters={"height": height, "foliage_radius": foliage},
                    elements=(
                        cylinder("stem", (x, base_y + height * 0.5, z), 0.03, height, role="foliage"),
                        sphere("foliage", (x, base_y + height, z), foliage, role="foliage"),
                    ),
                )
            )
    return items
