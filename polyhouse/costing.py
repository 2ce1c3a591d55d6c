"""Construction cost estimate for a polyhouse, in INR.

Covers:
- Rate card: per-m² structure and cover rates, type multipliers and the unit
  rates of ventilation, foundation, irrigation, electrical and labour work
- Climate adjustment via the regional climate table
- The calculation endpoint contract (``estimate_from_payload``)
- JSON and CSV export of the estimate

Every money figure is rounded half-up to whole rupees, line by line, before
it is summed.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .climate import ClimateReport, assess_climate
from .parameters import PolyhouseConfig, canonical_cover_material, canonical_structure_material

__all__ = [
    "RateCard",
    "DEFAULT_RATE_CARD",
    "CostBreakdown",
    "CalculationResult",
    "round_half_up",
    "load_rate_card",
    "estimate",
    "estimate_from_payload",
    "write_cost_report",
    "write_cost_csv",
]

CURRENCY = "INR"


# ---------------------------------------------------------------------------
# Rate card
# ---------------------------------------------------------------------------

@dataclass(slots=True, frozen=True)
class RateCard:
    """Unit rates used by the estimator (INR)."""
    structure_per_m2: Mapping[str, float]
    cover_per_m2: Mapping[str, float]
    type_multipliers: Mapping[str, float]
    default_structure_per_m2: float = 350.0
    default_cover_per_m2: float = 80.0
    default_type_multiplier: float = 1.0
    side_vent_per_m: float = 800.0          # of perimeter
    top_vent_per_m: float = 1200.0          # of length
    insect_net_per_m2: float = 35.0         # of wall + roof area
    foggers_per_m2: float = 150.0
    fan_unit_cost: float = 8000.0
    fan_coverage_m2: float = 50.0           # floor area served by one fan
    foundation_per_m: float = 1500.0        # of perimeter
    irrigation_per_m2: float = 120.0
    electrical_per_m2: float = 80.0
    fan_electrical_fixed: float = 15000.0
    labour_per_m2: float = 200.0
    misc_ratio: float = 0.05

    def structure_rate(self, material: str) -> float:
        return float(self.structure_per_m2.get(material, self.default_structure_per_m2))

    def cover_rate(self, material: str) -> float:
        return float(self.cover_per_m2.get(material, self.default_cover_per_m2))

    def type_multiplier(self, polyhouse_type: str) -> float:
        return float(self.type_multipliers.get(polyhouse_type, self.default_type_multiplier))


DEFAULT_RATE_CARD = RateCard(
    structure_per_m2={"gi-steel": 350.0, "ms-pipe": 280.0, "aluminium": 550.0},
    cover_per_m2={"uv-polyfilm": 80.0, "polycarbonate": 350.0, "shade-net": 45.0, "glass": 800.0},
    type_multipliers={"naturally-ventilated": 1.0, "fan-and-pad": 1.35, "climate-controlled": 1.8},
)

# Rate tables and the key normalizer applied to their entries.
_TABLE_KEYS = {
    "structure_per_m2": canonical_structure_material,
    "cover_per_m2": canonical_cover_material,
    "type_multipliers": str,
}


def load_rate_card(json_path: str | Path, base: RateCard | None = None) -> RateCard:
    """Load a JSON rate card and merge it onto *base*.

    JSON format::

        {
            "structure_per_m2": {"gi-steel": 380},
            "cover_per_m2": {"glass": 850},
            "labour_per_m2": 220
        }

    Table entries are merged key by key; scalar rates replace the base value.
    """
    card = base or DEFAULT_RATE_CARD
    p = Path(json_path)
    if not p.is_file():
        logging.warning("Rate card not found: %s; using defaults", p)
        return card
    try:
        with open(p, "r", encoding="utf-8") as fh:
            raw: Dict[str, Any] = json.load(fh)
        changes: Dict[str, Any] = {}
        for key, value in raw.items():
            if key in _TABLE_KEYS:
                merged = dict(getattr(card, key))
                canon = _TABLE_KEYS[key]
                for name, rate in value.items():
                    merged[canon(name)] = float(rate)
                changes[key] = merged
            elif hasattr(card, key):
                changes[key] = float(value)
            else:
                logging.warning("Ignoring unknown rate card entry '%s'", key)
        card = replace(card, **changes)
        logging.info("Loaded %d rate card entries from %s", len(raw), p)
    except (OSError, ValueError, TypeError, AttributeError) as exc:
        logging.warning("Failed to load rate card %s: %s", p, exc)
    return card


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class CostBreakdown:
    """Whole-rupee cost lines of one estimate."""
    structure_cost: int
    cover_cost: int
    ventilation_cost: int
    foundation_cost: int
    irrigation_cost: int
    electrical_cost: int
    labor_cost: int
    misc_cost: int
    total_cost: int
    cost_per_sqm: int
    climate_adjustment: float

    @property
    def subtotal(self) -> int:
        return (
            self.structure_cost
            + self.cover_cost
            + self.ventilation_cost
            + self.foundation_cost
            + self.irrigation_cost
            + self.electrical_cost
            + self.labor_cost
        )

    def line_items(self) -> List[Tuple[str, int]]:
        return [
            ("Structure", self.structure_cost),
            ("Cover Material", self.cover_cost),
            ("Ventilation & Climate Control", self.ventilation_cost),
            ("Foundation", self.foundation_cost),
            ("Irrigation System", self.irrigation_cost),
            ("Electrical", self.electrical_cost),
            ("Labor", self.labor_cost),
            ("Miscellaneous", self.misc_cost),
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "structureCost": self.structure_cost,
            "coverCost": self.cover_cost,
            "ventilationCost": self.ventilation_cost,
            "foundationCost": self.foundation_cost,
            "irrigationCost": self.irrigation_cost,
            "electricalCost": self.electrical_cost,
            "laborCost": self.labor_cost,
            "miscCost": self.misc_cost,
            "totalCost": self.total_cost,
            "costPerSqm": self.cost_per_sqm,
            "climateAdjustment": self.climate_adjustment,
        }


@dataclass(slots=True)
class CalculationResult:
    """Area, volume, climate and cost of one configuration."""
    area: float
    volume: float
    climate: ClimateReport
    cost: CostBreakdown
    crops: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "area": self.area,
            "volume": self.volume,
            "climate": self.climate.to_dict(),
            "cost": self.cost.to_dict(),
            "crops": list(self.crops),
        }


# ---------------------------------------------------------------------------
# Estimation
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward +infinity."""
    return int(math.floor(value + 0.5))


def estimate(config: PolyhouseConfig, rates: Optional[RateCard] = None) -> CalculationResult:
    """Price ``config`` with the climate adjustment of its state."""
    rates = rates or DEFAULT_RATE_CARD

    length = float(config.length)
    width = float(config.width)
    area = length * width
    avg_height = (config.eave_height + config.ridge_height) / 2.0
    volume = area * avg_height
    perimeter = 2.0 * (length + width)
    wall_area = perimeter * avg_height
    roof_factor = 1.2 if config.roof_type in ("gothic", "quonset") else 1.1
    roof_area = area * roof_factor
    skin_area = wall_area + roof_area

    climate = assess_climate(config.state)
    factor = climate.profile.cost_factor

    structure_cost = round_half_up(
        area
        * rates.structure_rate(canonical_structure_material(config.structure_material))
        * rates.type_multiplier(config.polyhouse_type)
    )
    cover_cost = round_half_up(skin_area * rates.cover_rate(canonical_cover_material(config.cover_material)))

    ventilation = 0.0
    if config.side_ventilation != "none":
        ventilation += perimeter * rates.side_vent_per_m
    if config.top_ventilation:
        ventilation += length * rates.top_vent_per_m
    if config.insect_net:
        ventilation += skin_area * rates.insect_net_per_m2
    if config.foggers:
        ventilation += area * rates.foggers_per_m2
    if config.fans:
        ventilation += math.ceil(area / rates.fan_coverage_m2) * rates.fan_unit_cost
    ventilation_cost = round_half_up(ventilation)

    foundation_cost = round_half_up(perimeter * rates.foundation_per_m)
    irrigation_cost = round_half_up(area * rates.irrigation_per_m2)
    electrical_cost = round_half_up(
        area * rates.electrical_per_m2 + (rates.fan_electrical_fixed if config.fans else 0.0)
    )
    labor_cost = round_half_up(area * rates.labour_per_m2)

    subtotal = (
        structure_cost
        + cover_cost
        + ventilation_cost
        + foundation_cost
        + irrigation_cost
        + electrical_cost
        + labor_cost
    )
    misc_cost = round_half_up(subtotal * rates.misc_ratio)
    total_cost = round_half_up((subtotal + misc_cost) * factor)
    cost_per_sqm = round_half_up(total_cost / area) if area > 0 else 0

    cost = CostBreakdown(
        structure_cost=structure_cost,
        cover_cost=cover_cost,
        ventilation_cost=ventilation_cost,
        foundation_cost=foundation_cost,
        irrigation_cost=irrigation_cost,
        electrical_cost=electrical_cost,
        labor_cost=labor_cost,
        misc_cost=misc_cost,
        total_cost=total_cost,
        cost_per_sqm=cost_per_sqm,
        climate_adjustment=factor - 1.0,
    )
    logging.info(
        "Cost estimate: %s m², total %s %d (%d/m²)",
        f"{area:.1f}",
        CURRENCY,
        total_cost,
        cost_per_sqm,
    )
    return CalculationResult(area=area, volume=volume, climate=climate, cost=cost)


def estimate_from_payload(payload: Mapping[str, Any], rates: Optional[RateCard] = None) -> Dict[str, Any]:
    """Endpoint contract: camelCase payload in, JSON-ready mapping out.

    Malformed payloads yield ``{"error": "Calculation failed"}``.
    """
    try:
        config = PolyhouseConfig.from_dict(payload)
        return estimate(config, rates).to_dict()
    except (ValueError, KeyError, TypeError) as exc:
        logging.warning("Calculation failed: %s", exc)
        return {"error": "Calculation failed"}


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def write_cost_report(result: CalculationResult, config: PolyhouseConfig, path: Path) -> None:
    """Write the estimate as JSON."""
    report = {
        "currency": CURRENCY,
        "config": config.to_payload(),
        "area_m2": round(result.area, 3),
        "volume_m3": round(result.volume, 3),
        "climate": result.climate.to_dict(),
        "cost": result.cost.to_dict(),
        "subtotal": result.cost.subtotal,
        "crops": list(result.crops),
    }

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2)
    logging.info("Cost report written to %s", path)


def write_cost_csv(result: CalculationResult, path: Path) -> None:
    """Write the cost lines as CSV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["Item", f"Cost ({CURRENCY})"])
        for label, amount in result.cost.line_items():
            writer.writerow([label, amount])
        writer.writerow([])
        writer.writerow(["Subtotal", result.cost.subtotal])
        writer.writerow(["Climate Adjustment %", f"{result.cost.climate_adjustment * 100:.1f}"])
        writer.writerow(["TOTAL", result.cost.total_cost])
        writer.writerow([f"Cost per m² ({CURRENCY})", result.cost.cost_per_sqm])
    logging.info("Cost CSV written to %s", path)
