"""Roof and end-wall cross sections.

Each profile is a closed polygon in the (x, y) plane of an end wall, with
``x`` running across the width (centred on 0) and ``y`` measured from the
eave for roofs and from the ground for end walls.  The upper outline of every
roof starts at ``(-half_width, 0)`` and ends at ``(half_width, 0)``; the
polygon closes along the eave line.
"""

from __future__ import annotations

import logging
import math
from typing import List

from .model import Point2, Profile
from .vec3 import non_negative

__all__ = [
    "MIN_SEGMENTS",
    "MAX_SEGMENTS",
    "VENLO_BAY_WIDTH_M",
    "venlo_peak_count",
    "build_roof_profile",
    "build_end_wall_profile",
]

MIN_SEGMENTS = 12
MAX_SEGMENTS = 20
VENLO_BAY_WIDTH_M = 8.0
FLAT_DRAINAGE_RATIO = 0.1

_ROOF_BUILDERS = ("flat", "gable", "gothic", "quonset", "venlo")


def venlo_peak_count(width: float) -> int:
    """Number of sawtooth spans for a venlo roof; never fewer than two."""
    if not math.isfinite(width) or width <= 0:
        return 2
    return max(2, int(math.floor(width / VENLO_BAY_WIDTH_M)))


def build_roof_profile(
    roof_type: str,
    half_width: float,
    roof_height: float,
    width: float,
    segments: int = MAX_SEGMENTS,
) -> Profile:
    """Return the roof cross-section selected by ``roof_type``."""
    kind = _roof_kind(roof_type)
    outline, peaks = _roof_outline(kind, half_width, roof_height, width, segments)
    return Profile(roof_type=kind, vertices=tuple(outline), peak_count=peaks)


def build_end_wall_profile(
    roof_type: str,
    half_width: float,
    eave_height: float,
    ridge_height: float,
    width: float,
    segments: int = MAX_SEGMENTS,
) -> Profile:
    """Return the end-wall silhouette: wall rectangle with the roof on top."""
    kind = _roof_kind(roof_type)
    eave = non_negative(eave_height)
    roof_height = non_negative(ridge_height - eave_height)
    outline, peaks = _roof_outline(kind, half_width, roof_height, width, segments)
    hw = non_negative(half_width)

    vertices: List[Point2] = [(-hw, 0.0)]
    vertices.extend((x, y + eave) for x, y in outline)
    vertices.append((hw, 0.0))
    return Profile(roof_type=kind, vertices=tuple(_dedupe(vertices)), peak_count=peaks)


# ---------------------------------------------------------------------------
# Outline algorithms
# ---------------------------------------------------------------------------


def _roof_kind(roof_type: str) -> str:
    kind = str(roof_type or "").strip().lower()
    if kind not in _ROOF_BUILDERS:
        logging.warning("Unknown roof type '%s'; using flat profile", roof_type)
        return "flat"
    return kind


def _roof_outline(
    kind: str,
    half_width: float,
    roof_height: float,
    width: float,
    segments: int,
) -> tuple[List[Point2], int]:
    hw = non_negative(half_width)
    h = non_negative(roof_height)
    span = non_negative(width)
    n = _segment_count(segments)

    if kind == "gable":
        return [(-hw, 0.0), (0.0, h), (hw, 0.0)], 1

    if kind == "gothic":
        pts: List[Point2] = []
        for i in range(n + 1):
            t = i / n
            pts.append((_snap(-hw + span * t), _snap(h * math.sin(math.pi * t))))
        return _pin_ends(pts, hw), 1

    if kind == "quonset":
        pts = []
        for i in range(n + 1):
            theta = math.pi * (i / n)
            pts.append((_snap(-hw * math.cos(theta)), _snap(h * math.sin(theta))))
        return _pin_ends(pts, hw), 1

    if kind == "venlo":
        peaks = venlo_peak_count(span)
        bay = span / peaks
        pts = [(-hw, 0.0)]
        for i in range(peaks):
            start_x = -hw + i * bay
            pts.append((_snap(start_x + bay * 0.5), h))
            pts.append((_snap(start_x + bay), 0.0))
        pts[-1] = (hw, 0.0)
        return pts, peaks

    # flat: slab whose top falls toward +x for drainage
    return [(-hw, 0.0), (-hw, h), (hw, h * (1.0 - FLAT_DRAINAGE_RATIO)), (hw, 0.0)], 1


def _segment_count(segments: int) -> int:
    try:
        n = int(segments)
    except (TypeError, ValueError):
        n = MAX_SEGMENTS
    n = max(MIN_SEGMENTS, min(MAX_SEGMENTS, n))
    # An even count puts a sample exactly on the apex.
    if n % 2:
        n += 1
    return min(n, MAX_SEGMENTS)


def _pin_ends(pts: List[Point2], hw: float) -> List[Point2]:
    pts[0] = (-hw, 0.0)
    pts[-1] = (hw, 0.0)
    return pts


def _snap(value: float) -> float:
    return 0.0 if abs(value) < 1e-9 else value


def _dedupe(points: List[Point2]) -> List[Point2]:
    """Drop consecutive duplicates (a zero-height wall collapses corners)."""
    out: List[Point2] = []
    for p in points:
        if out and abs(out[-1][0] - p[0]) < 1e-12 and abs(out[-1][1] - p[1]) < 1e-12:
            continue
        out.append(p)
    return out
