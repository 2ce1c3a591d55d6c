"""Frame and cover material catalogues.

Maps the enumerated ``structure_material`` / ``cover_material`` selections to
visual and physical property records consumed by renderers.  Unknown keys fall
back to the first catalogue entry instead of failing, so a configurator that
ships a new material before the generator knows about it still renders.
"""

from __future__ import annotations

import logging
from typing import Dict

from .model import CoverMaterial, FrameMaterial, MaterialSet
from .parameters import (
    PolyhouseConfig,
    canonical_cover_material,
    canonical_structure_material,
)

__all__ = [
    "FRAME_MATERIALS",
    "COVER_MATERIALS",
    "DEFAULT_FRAME_KEY",
    "DEFAULT_COVER_KEY",
    "resolve_frame",
    "resolve_cover",
    "resolve_materials",
]


# ---------------------------------------------------------------------------
# Catalogues (insertion order matters: the first entry is the fallback)
# ---------------------------------------------------------------------------

FRAME_MATERIALS: Dict[str, FrameMaterial] = {
    "gi-steel": FrameMaterial(key="gi-steel", color="#4a4a4a", reflectivity=0.9, roughness=0.2),
    "ms-pipe": FrameMaterial(key="ms-pipe", color="#3b3b3b", reflectivity=0.75, roughness=0.4),
    "aluminium": FrameMaterial(key="aluminium", color="#b8bcc0", reflectivity=0.95, roughness=0.15),
    "bamboo": FrameMaterial(key="bamboo", color="#c2a15a", reflectivity=0.05, roughness=0.85),
}

COVER_MATERIALS: Dict[str, CoverMaterial] = {
    "uv-polyfilm": CoverMaterial(key="uv-polyfilm", color="#a8e6cf", opacity=0.35, is_transparent=True),
    "polycarbonate": CoverMaterial(key="polycarbonate", color="#e8f5e9", opacity=0.45, is_transparent=True),
    "shade-net": CoverMaterial(key="shade-net", color="#4a7c59", opacity=0.55, is_transparent=True),
    "insect-net": CoverMaterial(key="insect-net", color="#dfe8e1", opacity=0.3, is_transparent=True),
    "glass": CoverMaterial(key="glass", color="#e3f2fd", opacity=0.25, is_transparent=True),
}

DEFAULT_FRAME_KEY = next(iter(FRAME_MATERIALS))
DEFAULT_COVER_KEY = next(iter(COVER_MATERIALS))


def resolve_frame(structure_material: str) -> FrameMaterial:
    key = canonical_structure_material(structure_material)
    material = FRAME_MATERIALS.get(key)
    if material is None:
        logging.debug("Unknown structure material '%s'; using %s", structure_material, DEFAULT_FRAME_KEY)
        return FRAME_MATERIALS[DEFAULT_FRAME_KEY]
    return material


def resolve_cover(cover_material: str) -> CoverMaterial:
    key = canonical_cover_material(cover_material)
    material = COVER_MATERIALS.get(key)
    if material is None:
        logging.debug("Unknown cover material '%s'; using %s", cover_material, DEFAULT_COVER_KEY)
        return COVER_MATERIALS[DEFAULT_COVER_KEY]
    return material


def resolve_materials(config: PolyhouseConfig) -> MaterialSet:
    return MaterialSet(
        frame=resolve_frame(config.structure_material),
        cover=resolve_cover(config.cover_material),
    )
