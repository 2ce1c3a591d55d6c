"""Plain-text design report: configuration, climate and cost sections."""

from __future__ import annotations

import datetime as _dt
import logging
from pathlib import Path
from typing import List, Optional

from .costing import CalculationResult
from .parameters import PolyhouseConfig

__all__ = ["REPORT_TITLE", "report_lines", "write_text_report"]

REPORT_TITLE = "Polyhouse Design Report"


def _label(value: str) -> str:
    return str(value).replace("-", " ")


def _money(amount: int) -> str:
    return f"₹{amount:,}"


def report_lines(
    config: PolyhouseConfig,
    result: CalculationResult,
    generated_on: Optional[_dt.date] = None,
    crops: Optional[str] = None,
) -> List[str]:
    """Report content, one line per entry; blank strings separate sections."""
    day = generated_on or _dt.date.today()
    climate = result.climate.profile
    cost = result.cost
    location = ", ".join(part for part in (config.district, config.state) if part)
    sign = "+" if cost.climate_adjustment > 0 else ""

    lines = [
        REPORT_TITLE,
        f"Generated on {day.isoformat()}",
        "",
        "Configuration",
        f"Dimensions: {config.length:g}m × {config.width:g}m × {config.ridge_height:g}m",
        f"Total Area: {result.area:.0f} m²",
        f"Volume: {result.volume:.0f} m³",
        f"Type: {_label(config.polyhouse_type)}",
        f"Roof: {_label(config.roof_type)}",
        f"Structure: {_label(config.structure_material)}",
        f"Cover: {_label(config.cover_material)}",
        f"Location: {location}",
        "",
        "Climate Intelligence",
        f"Climate Zone: {climate.zone}",
        f"Avg Temperature: {climate.avg_temperature_c:g}°C",
        f"Humidity: {climate.humidity_pct:g}%",
        f"Annual Rainfall: {climate.rainfall_mm:g}mm",
    ]
    lines.extend(f"Advisory: {note}" for note in result.climate.advisories)
    lines += [
        "",
        "Cost Analysis",
        f"Structure Cost: {_money(cost.structure_cost)}",
        f"Cover Cost: {_money(cost.cover_cost)}",
        f"Ventilation Cost: {_money(cost.ventilation_cost)}",
        f"Foundation Cost: {_money(cost.foundation_cost)}",
        f"Irrigation Cost: {_money(cost.irrigation_cost)}",
        f"Electrical Cost: {_money(cost.electrical_cost)}",
        f"Labor Cost: {_money(cost.labor_cost)}",
        f"Miscellaneous: {_money(cost.misc_cost)}",
        f"Climate Adjustment: {sign}{cost.climate_adjustment * 100:.1f}%",
        "",
        f"Total Cost: {_money(cost.total_cost)}",
        f"Cost per m²: {_money(cost.cost_per_sqm)}",
    ]
    if crops:
        lines += ["", "Crop Suggestions", *crops.strip().splitlines()]
    return lines


def write_text_report(
    config: PolyhouseConfig,
    result: CalculationResult,
    path: Path,
    crops: Optional[str] = None,
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(report_lines(config, result, crops=crops)) + "\n", encoding="utf-8")
    logging.info("Design report written to %s", path)
