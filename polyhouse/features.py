"""Feature composer: optional equipment placed on top of the frame layout.

Each rule below is independent; any combination may be active at once.
The composer is a pure function of the configuration and the layout it is
given and sanitizes dimensions itself so it can be called on its own.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from .doors import door
from .elements import box, cylinder, sphere
from .model import FeatureInstance, Profile, StructurePart
from .parameters import MAX_SPAN_M, PolyhouseConfig
from .vec3 import bounded, non_negative
from .ventilation import cooling_pad, exhaust_fans, side_vents, top_vent

__all__ = [
    "FOGGER_ROWS",
    "FOGGER_SPACING_M",
    "fogger_count",
    "insect_net",
    "foggers",
    "climate_units",
    "compose",
]

NET_OFFSET_M = 0.02
NET_THICKNESS_M = 0.01
FOGGER_ROWS = 3
FOGGER_SPACING_M = 4.0
FOGGER_DROP_M = 0.3
CLIMATE_UNIT_SIZE_M = (0.9, 0.6, 0.3)
CLIMATE_UNIT_INSET_M = 0.6


def fogger_count(length: float) -> int:
    """Total nozzles: three rows of one nozzle per 4 m, at least one per row."""
    return FOGGER_ROWS * max(1, int(math.floor(bounded(length, MAX_SPAN_M) / FOGGER_SPACING_M)))


def insect_net(
    half_width: float,
    length: float,
    eave_height: float,
    end_wall: bool = True,
) -> FeatureInstance:
    y = eave_height * 0.5
    x = half_width + NET_OFFSET_M
    elements = [
        box("net_left", (-x, y, 0.0), (NET_THICKNESS_M, eave_height, length), role="cover"),
        box("net_right", (x, y, 0.0), (NET_THICKNESS_M, eave_height, length), role="cover"),
    ]
    if end_wall:
        elements.append(
            box(
                "net_end_wall",
                (0.0, y, -length * 0.5 - NET_OFFSET_M),
                (half_width * 2.0, eave_height, NET_THICKNESS_M),
                role="cover",
            )
        )
    return FeatureInstance(
        name="insect_net",
        kind="insect_net",
        position=(0.0, y, 0.0),
        parameters={"end_wall": end_wall, "panel_count": len(elements)},
        elements=tuple(elements),
    )


def foggers(width: float, length: float, ridge_height: float) -> List[FeatureInstance]:
    """Fogger grid hanging just below the ridge."""
    per_row = fogger_count(length) // FOGGER_ROWS
    y = max(0.0, ridge_height - FOGGER_DROP_M)
    out: List[FeatureInstance] = []
    for row in range(FOGGER_ROWS):
        x = -width * 0.5 + width * (row + 1) / (FOGGER_ROWS + 1)
        for col in range(per_row):
            z = -length * 0.5 + length * (col + 0.5) / per_row
            out.append(
                FeatureInstance(
                    name=f"fogger_{row}_{col:02d}",
                    kind="fogger",
                    position=(x, y, z),
                    parameters={"row": row, "column": col},
                    elements=(
                        cylinder("feed", (x, y + FOGGER_DROP_M * 0.5, z), 0.01, FOGGER_DROP_M),
                        sphere("nozzle", (x, y, z), 0.05, role="mechanism"),
                    ),
                )
            )
    return out


def climate_units(half_width: float, length: float, eave_height: float) -> List[FeatureInstance]:
    """Two wall units at the interior corners of the far end wall."""
    sx, sy, sz = CLIMATE_UNIT_SIZE_M
    inset = min(CLIMATE_UNIT_INSET_M, half_width * 0.5)
    y = max(sy * 0.5, eave_height * 0.6)
    y = min(y, eave_height)
    z = -length * 0.5 + min(sz, length * 0.25)
    units: List[FeatureInstance] = []
    for side, sign in (("left", -1.0), ("right", 1.0)):
        position = (sign * (half_width - inset), y, z)
        units.append(
            FeatureInstance(
                name=f"climate_unit_{side}",
                kind="climate_unit",
                position=position,
                parameters={"side": side},
                elements=(box("cabinet", position, (sx, sy, sz), role="mechanism"),),
            )
        )
    return units


def compose(
    config: PolyhouseConfig,
    layout_parts: Sequence[StructurePart],
    roof_profile: Optional[Profile] = None,
) -> List[FeatureInstance]:
    """Instantiate every optional feature selected by ``config``."""
    length = non_negative(config.length)
    width = non_negative(config.width)
    eave = non_negative(config.eave_height)
    ridge = _ridge_height(config, eave, layout_parts, roof_profile)
    hw = width * 0.5

    features: List[FeatureInstance] = []
    features.extend(side_vents(config.side_ventilation, hw, length, eave))

    if config.top_ventilation:
        vent = top_vent(config.roof_type, ridge, length)
        if vent is None:
            logging.info("Top ventilation skipped: %s roof has no ridge line", config.roof_type)
        else:
            features.append(vent)

    if config.insect_net:
        features.append(insect_net(hw, length, eave, config.insect_net_end_wall))

    if config.fans:
        features.extend(exhaust_fans(hw, length, eave))

    if config.foggers:
        features.extend(foggers(width, length, ridge))

    if config.polyhouse_type == "fan-and-pad":
        features.append(cooling_pad(hw, length, eave))

    if config.polyhouse_type == "climate-controlled":
        features.extend(climate_units(hw, length, eave))

    features.append(door(config.door_entry, width, length, eave))
    return features


def _ridge_height(
    config: PolyhouseConfig,
    eave: float,
    layout_parts: Sequence[StructurePart],
    roof_profile: Optional[Profile],
) -> float:
    for part in layout_parts:
        if part.name == "ridge_beam":
            return non_negative(part.position[1])
    if roof_profile is not None:
        return eave + non_negative(roof_profile.max_y)
    return max(eave, non_negative(config.ridge_height))
