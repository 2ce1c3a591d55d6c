import csv
import json
import math

import pytest

from polyhouse import climate
from polyhouse.costing import (
    DEFAULT_RATE_CARD,
    estimate,
    estimate_from_payload,
    load_rate_card,
    round_half_up,
    write_cost_csv,
    write_cost_report,
)
from polyhouse.parameters import PolyhouseConfig


# ---------------------------------------------------------------------------
# Climate table
# ---------------------------------------------------------------------------


def test_unknown_state_uses_default_profile():
    assert climate.climate_for_state("Atlantis") is climate.CLIMATE_TABLE["Karnataka"]
    report = climate.assess_climate("Atlantis")
    assert report.state == "Atlantis"
    assert report.profile.zone == "Tropical Wet-Dry"
    assert report.profile.cost_factor == 1.0


def test_climate_table_covers_twenty_states():
    assert len(climate.CLIMATE_TABLE) == 20
    assert climate.DEFAULT_STATE in climate.CLIMATE_TABLE


@pytest.mark.parametrize(
    "state,expected",
    [
        ("Karnataka", []),
        (
            "Rajasthan",
            [
                "High temperature zone - consider enhanced cooling systems",
                "Arid climate - fogging systems highly recommended",
            ],
        ),
        (
            "Kerala",
            [
                "High humidity - ensure adequate ventilation to prevent fungal diseases",
                "Heavy rainfall region - reinforce roof structure and drainage",
            ],
        ),
    ],
)
def test_advisories(state, expected):
    assert climate.assess_climate(state).advisories == expected


def test_climate_report_dict_keys():
    data = climate.assess_climate("Assam").to_dict()
    assert data["climateZone"] == "Humid Subtropical"
    assert data["climateFactor"] == 1.15
    assert data["rainfall"] == 2500


# ---------------------------------------------------------------------------
# Estimator
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("value,expected", [(2.5, 3), (0.5, 1), (1.4999, 1), (-0.5, 0), (7.0, 7)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_reference_estimate(default_config):
    result = estimate(default_config.replace(state="Karnataka"))
    cost = result.cost
    assert result.area == 300.0
    assert result.volume == 1500.0
    assert cost.structure_cost == 105000
    assert cost.cover_cost == 58400
    assert cost.ventilation_cost == 64000
    assert cost.foundation_cost == 120000
    assert cost.irrigation_cost == 36000
    assert cost.electrical_cost == 24000
    assert cost.labor_cost == 60000
    assert cost.subtotal == 467400
    assert cost.misc_cost == 23370
    assert cost.total_cost == 490770
    assert cost.cost_per_sqm == 1636
    assert cost.climate_adjustment == 0.0


def test_totals_follow_formula(default_config):
    config = default_config.replace(
        state="Kerala",
        fans=True,
        foggers=True,
        insect_net=True,
        top_ventilation=True,
        roof_type="quonset",
    )
    cost = estimate(config).cost
    assert cost.misc_cost == round_half_up(cost.subtotal * 0.05)
    assert cost.total_cost == round_half_up((cost.subtotal + cost.misc_cost) * 1.15)
    assert cost.cost_per_sqm == round_half_up(cost.total_cost / 300.0)


def test_unknown_state_prices_like_default(default_config):
    atlantis = estimate(default_config.replace(state="Atlantis"))
    karnataka = estimate(default_config.replace(state="Karnataka"))
    assert atlantis.climate.profile.zone == karnataka.climate.profile.zone
    assert atlantis.cost.total_cost == karnataka.cost.total_cost


def test_climate_factor_scales_total(default_config):
    result = estimate(default_config.replace(state="Rajasthan"))
    assert result.cost.total_cost == 588924
    assert math.isclose(result.cost.climate_adjustment, 0.2)
    assert len(result.climate.advisories) == 2


def test_fans_add_units_and_electrical(default_config):
    base = estimate(default_config).cost
    with_fans = estimate(default_config.replace(fans=True)).cost
    # ceil(300 / 50) fans at 8000 each
    assert with_fans.ventilation_cost - base.ventilation_cost == 48000
    assert with_fans.electrical_cost - base.electrical_cost == 15000


def test_no_side_vent_cost_when_disabled(default_config):
    cost = estimate(default_config.replace(side_ventilation="none")).cost
    assert cost.ventilation_cost == 0


def test_unpriced_materials_use_default_rates(default_config):
    bamboo = estimate(default_config.replace(structure_material="bamboo")).cost
    assert bamboo.structure_cost == 105000
    netting = estimate(default_config.replace(cover_material="insect-net")).cost
    assert netting.cover_cost == 58400


def test_type_multiplier(default_config):
    cost = estimate(default_config.replace(polyhouse_type="climate-controlled")).cost
    assert cost.structure_cost == round_half_up(300 * 350 * 1.8)


def test_zero_area_has_zero_cost_per_sqm(default_config):
    assert estimate(default_config.replace(length=0.0)).cost.cost_per_sqm == 0


# ---------------------------------------------------------------------------
# Endpoint contract
# ---------------------------------------------------------------------------


def _payload(**changes):
    payload = PolyhouseConfig(state="Karnataka").to_payload()
    payload.update(changes)
    return payload


def test_payload_round_trip():
    data = estimate_from_payload(_payload())
    assert set(data) == {"area", "volume", "climate", "cost", "crops"}
    assert data["cost"]["totalCost"] == 490770
    assert data["climate"]["climateZone"] == "Tropical Wet-Dry"
    assert data["crops"] == []
    json.dumps(data)


def test_legacy_payload_shape():
    payload = _payload(sideVentilation=True)
    payload["gutterHeight"] = payload.pop("eaveHeight")
    data = estimate_from_payload(payload)
    assert data["cost"]["ventilationCost"] == 64000


@pytest.mark.parametrize(
    "payload",
    [
        {"length": "abc"},
        {"length": 30, "unknownKey": 1},
        {"eaveHeight": 6, "ridgeHeight": 4},
        {"width": -2},
        [1, 2, 3],
        42,
        "text",
    ],
)
def test_malformed_payload_returns_error(payload):
    assert estimate_from_payload(payload) == {"error": "Calculation failed"}


# ---------------------------------------------------------------------------
# Rate card and exports
# ---------------------------------------------------------------------------


def test_load_rate_card_merges(tmp_path):
    card_path = tmp_path / "rates.json"
    card_path.write_text(
        json.dumps({"structure_per_m2": {"gi-pipe": 400}, "labour_per_m2": 250, "bogus": 1}),
        encoding="utf-8",
    )
    card = load_rate_card(card_path)
    assert card.structure_rate("gi-steel") == 400.0
    assert card.structure_rate("aluminium") == 550.0
    assert card.labour_per_m2 == 250.0
    assert DEFAULT_RATE_CARD.structure_rate("gi-steel") == 350.0


def test_load_rate_card_missing_file(tmp_path):
    assert load_rate_card(tmp_path / "missing.json") is DEFAULT_RATE_CARD


def test_custom_rates_reach_estimate(tmp_path, default_config):
    card_path = tmp_path / "rates.json"
    card_path.write_text(json.dumps({"labour_per_m2": 300}), encoding="utf-8")
    cost = estimate(default_config, load_rate_card(card_path)).cost
    assert cost.labor_cost == 90000


def test_write_cost_report(tmp_path, default_config):
    result = estimate(default_config)
    path = tmp_path / "out" / "cost_report.json"
    write_cost_report(result, default_config, path)
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["currency"] == "INR"
    assert data["cost"]["totalCost"] == 490770
    assert data["subtotal"] == 467400
    assert data["config"]["eaveHeight"] == 4.0


def test_write_cost_csv(tmp_path, default_config):
    result = estimate(default_config)
    path = tmp_path / "cost_report.csv"
    write_cost_csv(result, path)
    with open(path, newline="", encoding="utf-8") as fh:
        rows = [row for row in csv.reader(fh) if row]
    assert rows[0] == ["Item", "Cost (INR)"]
    labels = [row[0] for row in rows]
    assert "Structure" in labels and "Miscellaneous" in labels
    total = next(row for row in rows if row[0] == "TOTAL")
    assert total[1] == "490770"
