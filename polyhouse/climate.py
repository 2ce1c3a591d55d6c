"""Regional climate table for Indian states.

Each entry carries the climate zone, long-term averages and the cost
adjustment factor applied by the estimator.  States missing from the table
fall back to ``DEFAULT_STATE``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

__all__ = [
    "ClimateProfile",
    "ClimateReport",
    "CLIMATE_TABLE",
    "DEFAULT_STATE",
    "climate_for_state",
    "advisories_for",
    "assess_climate",
]


@dataclass(slots=True, frozen=True)
class ClimateProfile:
    """Long-term climate averages for one state."""
    zone: str
    avg_temperature_c: float
    humidity_pct: float
    rainfall_mm: float       # annual
    cost_factor: float       # multiplier on the construction total


@dataclass(slots=True)
class ClimateReport:
    """Climate section of a calculation result."""
    state: str
    profile: ClimateProfile
    advisories: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "climateZone": self.profile.zone,
            "avgTemperature": self.profile.avg_temperature_c,
            "humidity": self.profile.humidity_pct,
            "rainfall": self.profile.rainfall_mm,
            "climateFactor": self.profile.cost_factor,
            "advisories": list(self.advisories),
        }


# ---------------------------------------------------------------------------
# Climate catalogue
# ---------------------------------------------------------------------------

DEFAULT_STATE = "Karnataka"

CLIMATE_TABLE: Dict[str, ClimateProfile] = {
    "Karnataka": ClimateProfile("Tropical Wet-Dry", 27, 65, 1200, 1.0),
    "Maharashtra": ClimateProfile("Tropical Wet-Dry", 28, 60, 1100, 1.05),
    "Tamil Nadu": ClimateProfile("Tropical", 30, 70, 950, 1.1),
    "Kerala": ClimateProfile("Tropical Wet", 28, 80, 3000, 1.15),
    "Gujarat": ClimateProfile("Semi-Arid", 29, 55, 600, 1.1),
    "Rajasthan": ClimateProfile("Arid", 32, 40, 400, 1.2),
    "Punjab": ClimateProfile("Semi-Arid", 25, 55, 650, 1.0),
    "Haryana": ClimateProfile("Semi-Arid", 26, 50, 550, 1.05),
    "Uttar Pradesh": ClimateProfile("Subtropical", 26, 60, 1000, 1.0),
    "Madhya Pradesh": ClimateProfile("Subtropical", 27, 55, 1100, 1.0),
    "West Bengal": ClimateProfile("Tropical Wet", 27, 75, 1800, 1.1),
    "Andhra Pradesh": ClimateProfile("Tropical", 29, 65, 900, 1.05),
    "Telangana": ClimateProfile("Tropical", 28, 60, 950, 1.05),
    "Bihar": ClimateProfile("Subtropical", 26, 70, 1200, 1.0),
    "Odisha": ClimateProfile("Tropical Wet-Dry", 28, 75, 1500, 1.1),
    "Jharkhand": ClimateProfile("Subtropical", 26, 65, 1300, 1.0),
    "Chhattisgarh": ClimateProfile("Tropical", 27, 65, 1400, 1.0),
    "Assam": ClimateProfile("Humid Subtropical", 25, 80, 2500, 1.15),
    "Himachal Pradesh": ClimateProfile("Subtropical Highland", 18, 60, 1500, 1.25),
    "Uttarakhand": ClimateProfile("Subtropical Highland", 20, 65, 1600, 1.2),
}

# Advisory thresholds
HOT_TEMPERATURE_C = 30
HUMID_PCT = 75
WET_RAINFALL_MM = 2000


def climate_for_state(state: str) -> ClimateProfile:
    profile = CLIMATE_TABLE.get(state)
    if profile is None:
        logging.info("No climate data for state '%s'; using %s", state, DEFAULT_STATE)
        return CLIMATE_TABLE[DEFAULT_STATE]
    return profile


def advisories_for(profile: ClimateProfile) -> List[str]:
    """Construction advisories triggered by the climate averages."""
    notes: List[str] = []
    if profile.avg_temperature_c > HOT_TEMPERATURE_C:
        notes.append("High temperature zone - consider enhanced cooling systems")
    if profile.humidity_pct > HUMID_PCT:
        notes.append("High humidity - ensure adequate ventilation to prevent fungal diseases")
    if profile.rainfall_mm > WET_RAINFALL_MM:
        notes.append("Heavy rainfall region - reinforce roof structure and drainage")
    if "Arid" in profile.zone:
        notes.append("Arid climate - fogging systems highly recommended")
    return notes


def assess_climate(state: str) -> ClimateReport:
    profile = climate_for_state(state)
    return ClimateReport(state=state, profile=profile, advisories=advisories_for(profile))
