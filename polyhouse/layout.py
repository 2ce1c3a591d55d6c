"""Frame layout: posts, beams, rafters and gutters from the footprint.

Posts stand on stations spaced along both long sides.  The first and last
stations are the corner posts; intermediate stations carry lighter side posts.
Only gable roofs get explicit rafter members, one pair per station; curved
roofs carry their hoops implicitly in the roof surface.
"""

from __future__ import annotations

import math
from typing import List

from .model import StructurePart
from .parameters import MAX_SPAN_M, MIN_POST_SPACING_M, RIDGE_ROOF_TYPES
from .vec3 import Vector3, bounded, midpoint, non_negative, norm, normalize, sub

__all__ = [
    "DEFAULT_POST_SPACING_M",
    "CORNER_POST_RADIUS_M",
    "SIDE_POST_RADIUS_M",
    "side_post_count",
    "post_stations",
    "layout",
]

DEFAULT_POST_SPACING_M = 4.0
CORNER_POST_RADIUS_M = 0.08
SIDE_POST_RADIUS_M = 0.06
BEAM_RADIUS_M = 0.05
RIDGE_BEAM_RADIUS_M = 0.06
RAFTER_RADIUS_M = 0.04
GUTTER_RADIUS_M = 0.08
GUTTER_OFFSET_M = 0.15
GUTTER_DROP_M = 0.1

_VERTICAL: Vector3 = (0.0, 1.0, 0.0)
_LONGITUDINAL: Vector3 = (0.0, 0.0, 1.0)
_TRANSVERSE: Vector3 = (1.0, 0.0, 0.0)


def side_post_count(length: float, post_spacing: float = DEFAULT_POST_SPACING_M) -> int:
    """Posts per long side, corners included; at least two, bounded by ``MAX_SPAN_M``."""
    spacing = post_spacing
    if not math.isfinite(spacing) or spacing <= 0:
        spacing = DEFAULT_POST_SPACING_M
    if not math.isfinite(length) or length <= 0:
        return 2
    spacing = max(spacing, MIN_POST_SPACING_M)
    return max(2, int(math.floor(bounded(length, MAX_SPAN_M) / spacing)) + 1)


def post_stations(length: float, post_spacing: float = DEFAULT_POST_SPACING_M) -> List[float]:
    """z coordinates of every post station, from the far end to the door end."""
    count = side_post_count(length, post_spacing)
    half = length * 0.5 if math.isfinite(length) and length > 0 else 0.0
    span = half * 2.0
    return [-half + (i * span) / (count - 1) for i in range(count)]


def layout(
    length: float,
    width: float,
    eave_height: float,
    ridge_height: float,
    post_spacing: float = DEFAULT_POST_SPACING_M,
    roof_type: str = "gable",
) -> List[StructurePart]:
    """Place every frame member for the given footprint and heights."""
    length = non_negative(length)
    width = non_negative(width)
    eave = non_negative(eave_height)
    ridge = max(eave, non_negative(ridge_height))
    hw = width * 0.5
    hl = length * 0.5

    parts: List[StructurePart] = []
    stations = post_stations(length, post_spacing)

    # Corner posts, unconditionally.
    corners = [(-hw, -hl), (hw, -hl), (-hw, hl), (hw, hl)]
    for i, (x, z) in enumerate(corners):
        parts.append(_post(f"corner_post_{i}", x, z, eave, CORNER_POST_RADIUS_M))

    for i, z in enumerate(stations[1:-1], start=1):
        parts.append(_post(f"side_post_{i:02d}_left", -hw, z, eave, SIDE_POST_RADIUS_M))
        parts.append(_post(f"side_post_{i:02d}_right", hw, z, eave, SIDE_POST_RADIUS_M))

    # Eave beams along both long sides.
    for side, x in (("left", -hw), ("right", hw)):
        parts.append(
            _member(f"eave_beam_{side}", "beam", (x, eave, -hl), (x, eave, hl), BEAM_RADIUS_M)
        )

    if roof_type in RIDGE_ROOF_TYPES:
        parts.append(
            _member("ridge_beam", "beam", (0.0, ridge, -hl), (0.0, ridge, hl), RIDGE_BEAM_RADIUS_M)
        )

    # Cross beams tie the two sides together at each end wall.
    for end, z in (("back", -hl), ("front", hl)):
        parts.append(
            _member(f"cross_beam_{end}", "beam", (-hw, eave, z), (hw, eave, z), BEAM_RADIUS_M)
        )

    if roof_type == "gable":
        for i, z in enumerate(stations):
            for side, x in (("left", -hw), ("right", hw)):
                parts.append(
                    _member(
                        f"rafter_{i:02d}_{side}",
                        "rafter",
                        (x, eave, z),
                        (0.0, ridge, z),
                        RAFTER_RADIUS_M,
                    )
                )

    gutter_y = max(0.0, eave - GUTTER_DROP_M)
    for side, x in (("left", -hw - GUTTER_OFFSET_M), ("right", hw + GUTTER_OFFSET_M)):
        parts.append(
            _member(f"gutter_{side}", "gutter", (x, gutter_y, -hl), (x, gutter_y, hl), GUTTER_RADIUS_M)
        )

    return parts


def _post(name: str, x: float, z: float, height: float, radius: float) -> StructurePart:
    return StructurePart(
        name=name,
        kind="post",
        position=(x, height * 0.5, z),
        orientation=_VERTICAL,
        dimensions={"length": height, "radius": radius},
        start=(x, 0.0, z),
        end=(x, height, z),
    )


def _member(name: str, kind: str, start: Vector3, end: Vector3, radius: float) -> StructurePart:
    axis = sub(end, start)
    orientation = normalize(axis)
    if orientation == (0.0, 0.0, 0.0):
        # Zero-length member: keep a conventional axis for the renderer.
        orientation = _LONGITUDINAL if kind in {"beam", "gutter"} else _TRANSVERSE
    return StructurePart(
        name=name,
        kind=kind,
        position=midpoint(start, end),
        orientation=orientation,
        dimensions={"length": norm(axis), "radius": radius},
        start=start,
        end=end,
    )
