"""Ventilation and cooling features of the polyhouse.

Four independent pieces are placed here:

- **side vents**  opening bands on both long walls, finished as louvers or a
  roll-up curtain (manual or motorized);
- **top vent**    a ridge flap shown in its open position, only on roofs with
  a ridge line;
- **exhaust fans** a bank on the ``+x`` long wall, evenly spaced between
  insets from both end walls;
- **cooling pad** the wetted pad of a fan-and-pad house on the ``-x`` wall.

Every function takes sanitized metre dimensions and returns plain
``FeatureInstance`` records; nothing here touches a renderer.
"""

from __future__ import annotations

import math
from typing import List, Optional

from .elements import ALONG_X, ALONG_Z, box, cylinder
from .model import FeatureElement, FeatureInstance
from .parameters import MAX_HEIGHT_M, MAX_SPAN_M, RIDGE_ROOF_TYPES
from .vec3 import bounded, non_negative

__all__ = [
    "LOUVER_PITCH_M",
    "TOP_VENT_FLAP_ANGLE_DEG",
    "FAN_SPACING_M",
    "louver_slat_count",
    "side_vents",
    "top_vent",
    "exhaust_fan_count",
    "exhaust_fan_positions",
    "exhaust_fans",
    "cooling_pad",
]

SIDE_VENT_CENTRE_RATIO = 0.75  # of eave height
SIDE_VENT_HEIGHT_RATIO = 0.15  # of eave height
SIDE_VENT_LENGTH_RATIO = 0.7  # of house length
SIDE_VENT_OFFSET_M = 0.05
LOUVER_PITCH_M = 0.3
LOUVER_TILT_RAD = math.radians(45.0)
CURTAIN_DIAMETER_RATIO = 0.4  # of vent height

TOP_VENT_WIDTH_M = 0.8
TOP_VENT_LENGTH_RATIO = 0.6
TOP_VENT_RISE_M = 0.2
TOP_VENT_FLAP_ANGLE_DEG = 30.0

FAN_SPACING_M = 6.0
FAN_END_INSET_M = 2.0
FAN_BLADE_COUNT = 3

COOLING_PAD_HEIGHT_RATIO = 0.7
COOLING_PAD_LENGTH_RATIO = 0.8
COOLING_PAD_DEPTH_M = 0.1


# ---------------------------------------------------------------------------
# Side vents
# ---------------------------------------------------------------------------


def louver_slat_count(vent_height: float) -> int:
    """One slat per 0.3 m of opening, at least one."""
    return max(1, int(math.floor(bounded(vent_height, MAX_HEIGHT_M) / LOUVER_PITCH_M)))


def side_vents(
    mode: str,
    half_width: float,
    length: float,
    eave_height: float,
) -> List[FeatureInstance]:
    """Vent panels on both long sides, or nothing for ``none``."""
    if mode == "none":
        return []

    vent_height = eave_height * SIDE_VENT_HEIGHT_RATIO
    vent_length = length * SIDE_VENT_LENGTH_RATIO
    centre_y = eave_height * SIDE_VENT_CENTRE_RATIO

    vents: List[FeatureInstance] = []
    for side, sign in (("left", -1.0), ("right", 1.0)):
        x = sign * (half_width + SIDE_VENT_OFFSET_M)
        elements: List[FeatureElement] = [
            box(
                "opening",
                (x, centre_y, 0.0),
                (SIDE_VENT_OFFSET_M, vent_height, vent_length),
                role="opening",
            )
        ]
        params = {
            "mode": mode,
            "side": side,
            "height": vent_height,
            "length": vent_length,
        }

        if mode == "louver":
            count = louver_slat_count(vent_height)
            pitch = vent_height / count
            bottom = centre_y - vent_height * 0.5
            for i in range(count):
                elements.append(
                    box(
                        f"slat_{i:02d}",
                        (x, bottom + pitch * (i + 0.5), 0.0),
                        (0.02, pitch, vent_length),
                        rotation=(0.0, 0.0, sign * LOUVER_TILT_RAD),
                    )
                )
            params["slat_count"] = count
        else:
            # Roll-up variants, and anything unrecognized, get a curtain.
            radius = vent_height * CURTAIN_DIAMETER_RATIO * 0.5
            top = centre_y + vent_height * 0.5
            elements.append(
                cylinder(
                    "curtain_roll",
                    (x, top, 0.0),
                    radius,
                    vent_length,
                    role="cover",
                    rotation=ALONG_Z,
                )
            )
            params["curtain_diameter"] = radius * 2.0
            if mode == "motorized-rollup":
                elements.append(
                    box(
                        "motor",
                        (x, top, vent_length * 0.5 + 0.15),
                        (0.2, 0.2, 0.3),
                        role="mechanism",
                    )
                )
                params["motorized"] = True

        vents.append(
            FeatureInstance(
                name=f"side_vent_{side}",
                kind="side_vent",
                position=(x, centre_y, 0.0),
                parameters=params,
                elements=tuple(elements),
            )
        )
    return vents


# ---------------------------------------------------------------------------
# Ridge vent
# ---------------------------------------------------------------------------


def top_vent(roof_type: str, ridge_height: float, length: float) -> Optional[FeatureInstance]:
    """Open ridge flap; ``None`` for roofs without a ridge line."""
    if roof_type not in RIDGE_ROOF_TYPES:
        return None

    vent_length = length * TOP_VENT_LENGTH_RATIO
    y = ridge_height + TOP_VENT_RISE_M
    angle = math.radians(TOP_VENT_FLAP_ANGLE_DEG)
    elements = (
        box(
            "flap",
            (0.0, y, 0.0),
            (TOP_VENT_WIDTH_M, 0.05, vent_length),
            role="cover",
            rotation=(0.0, 0.0, angle),
        ),
        box(
            "air_gap",
            (0.0, ridge_height + TOP_VENT_RISE_M * 0.5, 0.0),
            (TOP_VENT_WIDTH_M, TOP_VENT_RISE_M, vent_length),
            role="opening",
        ),
    )
    return FeatureInstance(
        name="top_vent",
        kind="top_vent",
        position=(0.0, y, 0.0),
        parameters={
            "width": TOP_VENT_WIDTH_M,
            "length": vent_length,
            "open_angle_deg": TOP_VENT_FLAP_ANGLE_DEG,
        },
        elements=elements,
    )


# ---------------------------------------------------------------------------
# Fan-and-pad
# ---------------------------------------------------------------------------


def exhaust_fan_count(length: float) -> int:
    return max(2, int(math.floor(bounded(length, MAX_SPAN_M) / FAN_SPACING_M)))


def exhaust_fan_positions(length: float) -> List[float]:
    """z stations of the fan bank, evenly spaced between the end insets."""
    length = non_negative(length)
    count = exhaust_fan_count(length)
    inset = min(FAN_END_INSET_M, length / 4.0)
    start = -length * 0.5 + inset
    run = length - 2.0 * inset
    return [start + run * i / (count - 1) for i in range(count)]


def exhaust_fans(half_width: float, length: float, eave_height: float) -> List[FeatureInstance]:
    diameter = min(1.0, eave_height * 0.4)
    y = eave_height * 0.5
    x = half_width + 0.15
    fans: List[FeatureInstance] = []
    for i, z in enumerate(exhaust_fan_positions(length)):
        fans.append(
            FeatureInstance(
                name=f"exhaust_fan_{i:02d}",
                kind="exhaust_fan",
                position=(x, y, z),
                parameters={"diameter": diameter, "blade_count": FAN_BLADE_COUNT},
                elements=(
                    box("housing", (x, y, z), (0.3, diameter, diameter)),
                    cylinder(
                        "blades",
                        (x + 0.05, y, z),
                        diameter * 0.45,
                        0.05,
                        role="mechanism",
                        rotation=ALONG_X,
                        animated=True,
                    ),
                ),
            )
        )
    return fans


def cooling_pad(half_width: float, length: float, eave_height: float) -> FeatureInstance:
    height = eave_height * COOLING_PAD_HEIGHT_RATIO
    pad_length = length * COOLING_PAD_LENGTH_RATIO
    position = (-half_width - COOLING_PAD_DEPTH_M * 0.5, height * 0.5, 0.0)
    return FeatureInstance(
        name="cooling_pad",
        kind="cooling_pad",
        position=position,
        parameters={"height": height, "length": pad_length},
        elements=(box("pad", position, (COOLING_PAD_DEPTH_M, height, pad_length), role="cover"),),
    )
