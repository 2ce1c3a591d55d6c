"""Data structures for the procedural polyhouse model.

Everything here is plain data: the builder produces a fresh ``Model`` for every
configuration and nothing mutates it afterwards.  Coordinates are metres with
``x`` across the width, ``y`` up and ``z`` along the length; the footprint is
centred on the origin and the door end wall sits at ``z = +length / 2``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .parameters import PolyhouseConfig
from .vec3 import ZERO, Vector3

__all__ = [
    "Point2",
    "Profile",
    "StructurePart",
    "FeatureElement",
    "FeatureInstance",
    "DimensionLine",
    "FrameMaterial",
    "CoverMaterial",
    "MaterialSet",
    "Model",
]

Point2 = Tuple[float, float]


@dataclass(slots=True, frozen=True)
class Profile:
    """Closed 2D cross-section; ``vertices`` holds each corner exactly once."""

    roof_type: str
    vertices: Tuple[Point2, ...]
    peak_count: int = 1

    def closed(self) -> List[Point2]:
        """Vertices with the first point repeated at the end."""
        if not self.vertices:
            return []
        return list(self.vertices) + [self.vertices[0]]

    @property
    def max_y(self) -> float:
        return max((p[1] for p in self.vertices), default=0.0)

    @property
    def min_y(self) -> float:
        return min((p[1] for p in self.vertices), default=0.0)

    @property
    def span(self) -> float:
        if not self.vertices:
            return 0.0
        xs = [p[0] for p in self.vertices]
        return max(xs) - min(xs)

    def area(self) -> float:
        """Shoelace area of the polygon."""
        pts = self.vertices
        n = len(pts)
        if n < 3:
            return 0.0
        acc = 0.0
        for i in range(n):
            x1, y1 = pts[i]
            x2, y2 = pts[(i + 1) % n]
            acc += x1 * y2 - x2 * y1
        return abs(acc) * 0.5


@dataclass(slots=True, frozen=True)
class StructurePart:
    """A placed frame member (post, beam, rafter, truss or gutter)."""

    name: str
    kind: str
    position: Vector3  # centre of the member
    orientation: Vector3  # unit axis
    dimensions: Mapping[str, float] = field(default_factory=dict)
    start: Optional[Vector3] = None
    end: Optional[Vector3] = None

    @property
    def length(self) -> float:
        return float(self.dimensions.get("length", 0.0))


@dataclass(slots=True, frozen=True)
class FeatureElement:
    """Renderable sub-element of a feature.

    ``size`` is the box extent (x, y, z) for boxes and (radius, height,
    radius) for cylinders and spheres; cylinders are authored along ``y`` and
    turned by ``rotation`` (Euler XYZ, radians).
    """

    name: str
    shape: str
    position: Vector3
    size: Vector3
    rotation: Vector3 = ZERO
    role: str = "frame"
    animated: bool = False


@dataclass(slots=True, frozen=True)
class FeatureInstance:
    """A placed optional feature with its sub-elements."""

    name: str
    kind: str
    position: Vector3
    parameters: Mapping[str, Any] = field(default_factory=dict)
    elements: Tuple[FeatureElement, ...] = ()


@dataclass(slots=True, frozen=True)
class DimensionLine:
    label: str
    start: Vector3
    end: Vector3
    value: float


@dataclass(slots=True, frozen=True)
class FrameMaterial:
    key: str
    color: str
    reflectivity: float
    roughness: float


@dataclass(slots=True, frozen=True)
class CoverMaterial:
    key: str
    color: str
    opacity: float
    is_transparent: bool


@dataclass(slots=True, frozen=True)
class MaterialSet:
    frame: FrameMaterial
    cover: CoverMaterial


@dataclass(slots=True, frozen=True)
class Model:
    """Complete renderable description of one polyhouse configuration."""

    roof_profile: Profile
    end_wall_profile: Profile
    parts: Tuple[StructurePart, ...]
    features: Tuple[FeatureInstance, ...]
    materials: MaterialSet
    interior: Tuple[FeatureInstance, ...] = ()
    dimensions: Tuple[DimensionLine, ...] = ()
    length: float = 0.0
    width: float = 0.0
    eave_height: float = 0.0
    ridge_height: float = 0.0
    config: Optional[PolyhouseConfig] = None

    def parts_of_kind(self, kind: str) -> List[StructurePart]:
        return [p for p in self.parts if p.kind == kind]

    def features_of_kind(self, kind: str) -> List[FeatureInstance]:
        return [f for f in self.features if f.kind == kind]

    def structural_view(self) -> "Model":
        """Copy without the cosmetic interior (for determinism comparisons)."""
        return Model(
            roof_profile=self.roof_profile,
            end_wall_profile=self.end_wall_profile,
            parts=self.parts,
            features=self.features,
            materials=self.materials,
            interior=(),
            dimensions=self.dimensions,
            length=self.length,
            width=self.width,
            eave_height=self.eave_height,
            ridge_height=self.ridge_height,
            config=self.config,
        )

    def bounding_box(self) -> Tuple[Vector3, Vector3]:
        """Axis-aligned (min, max) corners of the structure shell."""
        hw = self.width * 0.5
        hl = self.length * 0.5
        top = max(self.ridge_height, self.eave_height)
        return ((-hw, 0.0, -hl), (hw, top, hl))

    def summary(self) -> str:
        counts: Dict[str, int] = {}
        for feature in self.features:
            counts[feature.kind] = counts.get(feature.kind, 0) + 1
        feature_text = ", ".join(f"{k}={v}" for k, v in sorted(counts.items())) or "none"
        return (
            f"{self.roof_profile.roof_type} roof, {len(self.parts)} frame parts, "
            f"features: {feature_text}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_dict() if self.config is not None else None,
            "dimensions_m": {
                "length": _r(self.length),
                "width": _r(self.width),
                "eave_height": _r(self.eave_height),
                "ridge_height": _r(self.ridge_height),
            },
            "roof_profile": _profile_dict(self.roof_profile),
            "end_wall_profile": _profile_dict(self.end_wall_profile),
            "materials": {
                "frame": {
                    "key": self.materials.frame.key,
                    "color": self.materials.frame.color,
                    "reflectivity": self.materials.frame.reflectivity,
                    "roughness": self.materials.frame.roughness,
                },
                "cover": {
                    "key": self.materials.cover.key,
                    "color": self.materials.cover.color,
                    "opacity": self.materials.cover.opacity,
                    "is_transparent": self.materials.cover.is_transparent,
                },
            },
            "parts": [
                {
                    "name": p.name,
                    "kind": p.kind,
                    "position": _rv(p.position),
                    "orientation": _rv(p.orientation),
                    "dimensions": {k: _r(v) for k, v in p.dimensions.items()},
                }
                for p in self.parts
            ],
            "features": [_feature_dict(f) for f in self.features],
            "interior": [_feature_dict(f) for f in self.interior],
            "annotations": [
                {
                    "label": d.label,
                    "start": _rv(d.start),
                    "end": _rv(d.end),
                    "value": _r(d.value),
                }
                for d in self.dimensions
            ],
        }


def _r(value: float) -> float:
    return round(float(value), 4)


def _rv(v: Sequence[float]) -> List[float]:
    return [_r(c) for c in v]


def _profile_dict(profile: Profile) -> Dict[str, Any]:
    return {
        "roof_type": profile.roof_type,
        "peak_count": profile.peak_count,
        "points": [[_r(x), _r(y)] for x, y in profile.closed()],
    }


def _feature_dict(feature: FeatureInstance) -> Dict[str, Any]:
    params = {}
    for key, value in feature.parameters.items():
        if isinstance(value, float) and math.isfinite(value):
            value = _r(value)
        params[key] = value
    return {
        "name": feature.name,
        "kind": feature.kind,
        "position": _rv(feature.position),
        "parameters": params,
        "elements": [
            {
                "name": e.name,
                "shape": e.shape,
                "role": e.role,
                "position": _rv(e.position),
                "size": _rv(e.size),
                "rotation": _rv(e.rotation),
                "animated": e.animated,
            }
            for e in feature.elements
        ],
    }
