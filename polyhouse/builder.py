"""Procedural model builder: one configuration in, one ``Model`` out.

The builder runs the generator stages in a fixed order::

    sanitize -> profiles -> materials -> layout -> features -> interior
             -> dimension lines -> Model

It performs no I/O.  Structural output depends only on the configuration;
the optional interior draws its cosmetic jitter from ``rng``.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from .features import compose
from .interior import decorate_interior
from .layout import layout
from .materials import resolve_materials
from .model import DimensionLine, Model
from .parameters import (
    MAX_HEIGHT_M,
    MAX_SPAN_M,
    MIN_POST_SPACING_M,
    PolyhouseConfig,
    canonical_cover_material,
    canonical_option,
    canonical_side_ventilation,
    canonical_structure_material,
)
from .profiles import build_end_wall_profile, build_roof_profile
from .vec3 import bounded

__all__ = ["sanitize", "dimension_lines", "build"]

DIMENSION_OFFSET_M = 0.5


def sanitize(config: PolyhouseConfig) -> PolyhouseConfig:
    """Copy of ``config`` with every dimension finite, non-negative and bounded.

    Spans are capped at ``MAX_SPAN_M`` and heights at ``MAX_HEIGHT_M``.  A
    ridge at or below the eave is lifted to the eave (zero roof height).  A
    positive post spacing below ``MIN_POST_SPACING_M`` is raised to it.  Option
    names are lower-cased so every stage sees the same value.
    """
    eave = bounded(config.eave_height, MAX_HEIGHT_M)
    spacing = bounded(config.post_spacing, MAX_SPAN_M)
    if 0.0 < spacing < MIN_POST_SPACING_M:
        spacing = MIN_POST_SPACING_M
    dims = config.replace(
        length=bounded(config.length, MAX_SPAN_M),
        width=bounded(config.width, MAX_SPAN_M),
        eave_height=eave,
        ridge_height=max(eave, bounded(config.ridge_height, MAX_HEIGHT_M)),
        post_spacing=spacing,
    )
    if dims != config:
        logging.warning("Degenerate dimensions sanitized: %s", _dims_text(dims))
    return dims.replace(
        polyhouse_type=canonical_option(config.polyhouse_type),
        roof_type=canonical_option(config.roof_type),
        door_entry=canonical_option(config.door_entry),
        side_ventilation=canonical_side_ventilation(config.side_ventilation),
        structure_material=canonical_structure_material(config.structure_material),
        cover_material=canonical_cover_material(config.cover_material),
    )


def dimension_lines(length: float, width: float, eave: float, ridge: float) -> List[DimensionLine]:
    """Annotation lines for the four headline dimensions."""
    hw = width * 0.5
    hl = length * 0.5
    off = DIMENSION_OFFSET_M
    return [
        DimensionLine("length", (hw + off, 0.0, -hl), (hw + off, 0.0, hl), length),
        DimensionLine("width", (-hw, 0.0, hl + off), (hw, 0.0, hl + off), width),
        DimensionLine("eave", (hw + off, 0.0, hl), (hw + off, eave, hl), eave),
        DimensionLine("ridge", (-hw - off, 0.0, hl), (-hw - off, ridge, hl), ridge),
    ]


def build(
    config: PolyhouseConfig,
    rng: Optional[random.Random] = None,
    include_interior: bool = True,
) -> Model:
    """Generate the complete structure description for ``config``."""
    cfg = sanitize(config)
    half_width = cfg.width * 0.5
    roof_height = cfg.ridge_height - cfg.eave_height

    roof = build_roof_profile(cfg.roof_type, half_width, roof_height, cfg.width)
    end_wall = build_end_wall_profile(
        cfg.roof_type, half_width, cfg.eave_height, cfg.ridge_height, cfg.width
    )
    materials = resolve_materials(cfg)
    parts = layout(
        cfg.length,
        cfg.width,
        cfg.eave_height,
        cfg.ridge_height,
        post_spacing=cfg.post_spacing,
        roof_type=roof.roof_type,
    )
    features = compose(cfg, parts, roof)
    interior = decorate_interior(cfg.length, cfg.width, rng) if include_interior else []

    model = Model(
        roof_profile=roof,
        end_wall_profile=end_wall,
        parts=tuple(parts),
        features=tuple(features),
        materials=materials,
        interior=tuple(interior),
        dimensions=tuple(dimension_lines(cfg.length, cfg.width, cfg.eave_height, cfg.ridge_height)),
        length=cfg.length,
        width=cfg.width,
        eave_height=cfg.eave_height,
        ridge_height=cfg.ridge_height,
        config=cfg,
    )
    logging.debug("Built polyhouse: %s", model.summary())
    return model


def _dims_text(cfg: PolyhouseConfig) -> str:
    return (
        f"L={cfg.length:.2f} W={cfg.width:.2f} "
        f"eave={cfg.eave_height:.2f} ridge={cfg.ridge_height:.2f}"
    )
