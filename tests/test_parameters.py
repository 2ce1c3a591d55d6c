import json

import pytest

from polyhouse.parameters import (
    PolyhouseConfig,
    apply_overrides,
    load_json_config,
    load_parameters,
    parse_cli_overrides,
)


def test_defaults_are_valid(default_config):
    default_config.validate()
    assert default_config.roof_height == 2.0
    assert default_config.area_m2 == 300.0


def test_camel_case_payload():
    config = PolyhouseConfig.from_dict(
        {
            "length": 24,
            "width": 8,
            "eaveHeight": 3.5,
            "ridgeHeight": 5,
            "roofType": "Quonset",
            "doorEntry": "roll-up",
        }
    )
    assert config.length == 24.0
    assert config.eave_height == 3.5
    assert config.roof_type == "quonset"
    assert config.door_entry == "roll-up"


def test_gutter_height_migrates_to_eave():
    config = PolyhouseConfig.from_dict({"gutterHeight": 3.0, "ridgeHeight": 5.0})
    assert config.eave_height == 3.0


@pytest.mark.parametrize(
    "value,expected",
    [(True, "manual-rollup"), (False, "none"), ("louver", "louver"), ("yes", "manual-rollup")],
)
def test_side_ventilation_migration(value, expected):
    assert PolyhouseConfig.from_dict({"sideVentilation": value}).side_ventilation == expected


@pytest.mark.parametrize("value,expected", [("ridge", True), ("none", False), (1, True), ("", False)])
def test_top_ventilation_coercion(value, expected):
    assert PolyhouseConfig.from_dict({"topVentilation": value}).top_ventilation is expected


def test_material_aliases():
    config = PolyhouseConfig.from_dict({"structureMaterial": "GI-Pipe", "coverMaterial": "polyethylene"})
    assert config.structure_material == "gi-steel"
    assert config.cover_material == "uv-polyfilm"


def test_nested_sections_are_flattened():
    config = PolyhouseConfig.from_dict(
        {
            "dimensions": {"length": 40, "width": 12},
            "location": {"state": "Kerala", "district": "Wayanad"},
        }
    )
    assert config.length == 40.0
    assert config.state == "Kerala"
    assert config.district == "Wayanad"


def test_unknown_key_rejected():
    with pytest.raises(KeyError):
        PolyhouseConfig.from_dict({"domeRadius": 3})


@pytest.mark.parametrize(
    "data",
    [
        {"length": 0},
        {"width": -1},
        {"eaveHeight": 6, "ridgeHeight": 6},
        {"length": "long"},
        {"postSpacing": float("nan")},
    ],
)
def test_invalid_dimensions_rejected(data):
    with pytest.raises(ValueError):
        PolyhouseConfig.from_dict(data)


@pytest.mark.parametrize("data", [[1, 2], 7.5, "gable", None])
def test_non_object_payload_rejected(data):
    with pytest.raises(ValueError, match="must be an object"):
        PolyhouseConfig.from_dict(data)


def test_unknown_enum_is_tolerated(caplog):
    config = PolyhouseConfig.from_dict({"roofType": "geodesic"})
    assert config.roof_type == "geodesic"
    assert "Unrecognized roof_type" in caplog.text


def test_payload_round_trip(default_config):
    payload = default_config.to_payload()
    assert "eaveHeight" in payload and "insectNetEndWall" in payload
    assert PolyhouseConfig.from_dict(payload) == default_config


class TestForType:
    def test_climate_controlled_defaults(self):
        config = PolyhouseConfig.for_type("climate-controlled")
        assert config.fans and config.foggers and config.top_ventilation

    def test_shade_net_defaults(self):
        config = PolyhouseConfig.for_type("shade-net")
        assert config.cover_material == "shade-net"
        assert config.side_ventilation == "none"

    def test_overrides_win(self):
        config = PolyhouseConfig.for_type("fan-and-pad", fans=False, length=12)
        assert config.fans is False
        assert config.length == 12.0


# ---------------------------------------------------------------------------
# Config layering
# ---------------------------------------------------------------------------


def test_load_json_config(tmp_path):
    assert load_json_config(None) == {}
    with pytest.raises(FileNotFoundError):
        load_json_config(tmp_path / "missing.json")

    bad = tmp_path / "list.json"
    bad.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        load_json_config(bad)


def test_apply_overrides(default_config):
    updated = apply_overrides(default_config, {"length": 50, "roofType": "venlo"})
    assert updated.length == 50.0
    assert updated.roof_type == "venlo"
    with pytest.raises(KeyError):
        apply_overrides(default_config, {"radius": 2})


def test_parse_cli_overrides():
    overrides, parsed = parse_cli_overrides(
        [
            "--length",
            "36",
            "--roof",
            "venlo",
            "--fans",
            "--side-vent",
            "louver",
            "--no-end-wall-net",
            "--seed",
            "5",
            "--unexpected",
        ]
    )
    assert overrides == {
        "length": 36.0,
        "roof_type": "venlo",
        "side_ventilation": "louver",
        "fans": True,
        "insect_net_end_wall": False,
    }
    assert parsed.seed == 5
    assert parsed.out_dir == "exports"
    assert not parsed.crops


def test_load_parameters_layers_cli_over_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"dimensions": {"length": 20, "width": 8}, "doorEntry": "curtain"}),
        encoding="utf-8",
    )
    config = load_parameters(path, {"width": 9})
    assert config.length == 20.0
    assert config.width == 9.0
    assert config.door_entry == "curtain"


def test_shipped_base_config_loads():
    from pathlib import Path

    base = Path(__file__).resolve().parents[1] / "configs" / "base.json"
    config = load_parameters(base)
    assert config.state == "Karnataka"
    config.validate()
