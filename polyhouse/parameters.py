"""Configuration stack and parameter management for the polyhouse generator.

This module centralizes the canonical ``PolyhouseConfig`` schema, migration of
older payload shapes, and the layering rules used by the headless generator.
The loader operates in two layers ordered from lowest to highest precedence:

1. JSON file: the persistent project configuration.
2. CLI overrides: runtime tweaks for headless runs.

Several generations of the web configurator sent differently shaped payloads
(camelCase keys, ``gutterHeight`` instead of ``eaveHeight``, boolean instead of
enumerated side ventilation).  All of them are accepted by
``PolyhouseConfig.from_dict`` and migrated onto the single canonical schema.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

__all__ = [
    "POLYHOUSE_TYPES",
    "ROOF_TYPES",
    "STRUCTURE_MATERIALS",
    "COVER_MATERIALS",
    "SIDE_VENTILATION_OPTIONS",
    "DOOR_ENTRY_OPTIONS",
    "RIDGE_ROOF_TYPES",
    "PolyhouseConfig",
    "canonical_structure_material",
    "canonical_cover_material",
    "canonical_side_ventilation",
    "canonical_option",
    "MAX_SPAN_M",
    "MAX_HEIGHT_M",
    "MIN_POST_SPACING_M",
    "load_json_config",
    "apply_overrides",
    "parse_cli_overrides",
    "load_parameters",
]

POLYHOUSE_TYPES: Tuple[str, ...] = (
    "naturally-ventilated",
    "fan-and-pad",
    "climate-controlled",
    "shade-net",
)
ROOF_TYPES: Tuple[str, ...] = ("flat", "gable", "gothic", "quonset", "venlo")
STRUCTURE_MATERIALS: Tuple[str, ...] = ("gi-steel", "ms-pipe", "aluminium", "bamboo")
COVER_MATERIALS: Tuple[str, ...] = (
    "uv-polyfilm",
    "polycarbonate",
    "shade-net",
    "insect-net",
    "glass",
)
SIDE_VENTILATION_OPTIONS: Tuple[str, ...] = (
    "none",
    "manual-rollup",
    "motorized-rollup",
    "louver",
)
DOOR_ENTRY_OPTIONS: Tuple[str, ...] = (
    "single-sliding",
    "double-sliding",
    "roll-up",
    "curtain",
)

# Roofs with a distinct ridge line carry a ridge beam and a ridge vent.
RIDGE_ROOF_TYPES = frozenset({"gable", "gothic"})

# Upper bounds applied by the builder; member and feature counts scale with them.
MAX_SPAN_M = 1000.0
MAX_HEIGHT_M = 100.0
MIN_POST_SPACING_M = 0.5

_STRUCTURE_ALIASES = {"gi-pipe": "gi-steel", "aluminum": "aluminium"}
_COVER_ALIASES = {"polyethylene": "uv-polyfilm"}

# Payload key -> canonical field name.  Covers the camelCase web schema and the
# older ``gutterHeight`` naming.
_KEY_ALIASES: Dict[str, str] = {
    "eaveHeight": "eave_height",
    "gutterHeight": "eave_height",
    "gutter_height": "eave_height",
    "ridgeHeight": "ridge_height",
    "polyhouseType": "polyhouse_type",
    "roofType": "roof_type",
    "structureMaterial": "structure_material",
    "coverMaterial": "cover_material",
    "sideVentilation": "side_ventilation",
    "topVentilation": "top_ventilation",
    "doorEntry": "door_entry",
    "insectNet": "insect_net",
    "insectNetEndWall": "insect_net_end_wall",
    "postSpacing": "post_spacing",
}

_PAYLOAD_KEYS: Dict[str, str] = {
    "length": "length",
    "width": "width",
    "eave_height": "eaveHeight",
    "ridge_height": "ridgeHeight",
    "polyhouse_type": "polyhouseType",
    "roof_type": "roofType",
    "structure_material": "structureMaterial",
    "cover_material": "coverMaterial",
    "side_ventilation": "sideVentilation",
    "top_ventilation": "topVentilation",
    "door_entry": "doorEntry",
    "insect_net": "insectNet",
    "foggers": "foggers",
    "fans": "fans",
    "insect_net_end_wall": "insectNetEndWall",
    "post_spacing": "postSpacing",
    "state": "state",
    "district": "district",
}

# Feature defaults selected by the polyhouse type.
_TYPE_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "naturally-ventilated": {},
    "fan-and-pad": {"fans": True},
    "climate-controlled": {"fans": True, "foggers": True, "top_ventilation": True},
    "shade-net": {"cover_material": "shade-net", "side_ventilation": "none"},
}


def canonical_structure_material(value: Any) -> str:
    key = str(value or "").strip().lower()
    return _STRUCTURE_ALIASES.get(key, key)


def canonical_cover_material(value: Any) -> str:
    key = str(value or "").strip().lower()
    return _COVER_ALIASES.get(key, key)


def canonical_option(value: Any) -> str:
    """Lower-case form used for polyhouse, roof and door option names."""
    return str(value or "").strip().lower()


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in {"", "0", "false", "no", "off", "none"}
    return bool(value)


def canonical_side_ventilation(value: Any) -> str:
    # Older schemas stored a plain on/off flag.
    if isinstance(value, bool) or value is None:
        return "manual-rollup" if value else "none"
    text = str(value).strip().lower()
    if text in {"true", "yes", "on"}:
        return "manual-rollup"
    if text in {"", "false", "no", "off"}:
        return "none"
    return text


@dataclass(slots=True, frozen=True)
class PolyhouseConfig:
    """Canonical, immutable polyhouse configuration."""

    length: float = 30.0
    width: float = 10.0
    eave_height: float = 4.0
    ridge_height: float = 6.0
    polyhouse_type: str = "naturally-ventilated"
    roof_type: str = "gable"
    structure_material: str = "gi-steel"
    cover_material: str = "uv-polyfilm"
    side_ventilation: str = "manual-rollup"
    top_ventilation: bool = False
    door_entry: str = "single-sliding"
    insect_net: bool = False
    foggers: bool = False
    fans: bool = False
    insect_net_end_wall: bool = True
    post_spacing: float = 4.0  # m between side posts
    state: str = ""
    district: str = ""

    @property
    def roof_height(self) -> float:
        return self.ridge_height - self.eave_height

    @property
    def area_m2(self) -> float:
        return self.length * self.width

    def validate(self) -> None:
        for name in ("length", "width", "eave_height", "ridge_height", "post_spacing"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive number")
        if self.ridge_height <= self.eave_height:
            raise ValueError("Ridge height must exceed eave height")

        # Unknown enum values are tolerated; the generator and estimator fall
        # back to documented defaults.
        for name, allowed in (
            ("polyhouse_type", POLYHOUSE_TYPES),
            ("roof_type", ROOF_TYPES),
            ("structure_material", STRUCTURE_MATERIALS),
            ("cover_material", COVER_MATERIALS),
            ("side_ventilation", SIDE_VENTILATION_OPTIONS),
            ("door_entry", DOOR_ENTRY_OPTIONS),
        ):
            value = getattr(self, name)
            if value not in allowed:
                logging.warning("Unrecognized %s '%s'; defaults will be used", name, value)

    def replace(self, **changes: Any) -> "PolyhouseConfig":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_payload(self) -> Dict[str, Any]:
        """Return the camelCase mapping used by the web configurator."""
        data = self.to_dict()
        return {_PAYLOAD_KEYS[key]: value for key, value in data.items()}

    @classmethod
    def for_type(cls, polyhouse_type: str, **overrides: Any) -> "PolyhouseConfig":
        """Build a config with the feature defaults of ``polyhouse_type``."""
        values: Dict[str, Any] = {"polyhouse_type": polyhouse_type}
        values.update(_TYPE_DEFAULTS.get(polyhouse_type, {}))
        values.update(overrides)
        return cls.from_dict(values)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PolyhouseConfig":
        if not isinstance(data, Mapping):
            raise ValueError(f"Config payload must be an object, got {type(data).__name__}")
        fields = {f.name for f in dataclasses.fields(cls)}
        merged = asdict(cls())
        for key, value in _flatten_sections(data, fields).items():
            name = _KEY_ALIASES.get(key, key)
            if name not in fields:
                raise KeyError(f"Unknown parameter '{key}'")
            merged[name] = value
        config = cls(**_migrate_values(merged))
        config.validate()
        return config


def _flatten_sections(data: Mapping[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """Merge nested sections such as ``{"dimensions": {...}}`` into one level."""
    known = set(fields) | set(_KEY_ALIASES)
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known and isinstance(value, Mapping):
            flat.update(_flatten_sections(value, fields))
        else:
            flat[key] = value
    return flat


def _migrate_values(values: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(values)
    for name in ("length", "width", "eave_height", "ridge_height", "post_spacing"):
        try:
            out[name] = float(out[name])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name} must be numeric, got {out[name]!r}") from exc
    for name in ("top_ventilation", "insect_net", "foggers", "fans", "insect_net_end_wall"):
        out[name] = _coerce_bool(out[name])
    out["side_ventilation"] = canonical_side_ventilation(out["side_ventilation"])
    out["structure_material"] = canonical_structure_material(out["structure_material"])
    out["cover_material"] = canonical_cover_material(out["cover_material"])
    for name in ("polyhouse_type", "roof_type", "door_entry"):
        out[name] = canonical_option(out[name])
    out["state"] = str(out["state"] or "")
    out["district"] = str(out["district"] or "")
    return out


def load_json_config(path: Path | str | None) -> Dict[str, Any]:
    """Load the JSON config file or return an empty dict if missing."""

    if path is None:
        return {}
    json_path = Path(path)
    if not json_path.exists():
        raise FileNotFoundError(f"Config file not found: {json_path}")
    data = json.loads(json_path.read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise ValueError("Top-level JSON config must be an object")
    return dict(data)


def apply_overrides(base: PolyhouseConfig, overrides: Mapping[str, Any]) -> PolyhouseConfig:
    """Return a copy of ``base`` with overrides applied."""

    merged = base.to_dict()
    for key, value in overrides.items():
        name = _KEY_ALIASES.get(key, key)
        if name not in merged:
            raise KeyError(f"Unknown parameter '{key}'")
        merged[name] = value
    return PolyhouseConfig.from_dict(merged)


def parse_cli_overrides(
    args: Optional[Iterable[str]] = None,
) -> Tuple[Dict[str, Any], Any]:
    """Parse CLI-style overrides using argparse conventions."""

    import argparse

    parser = argparse.ArgumentParser(description="Polyhouse generator")
    parser.add_argument("--config", type=str, help="Path to JSON config", default=None)
    parser.add_argument("--out-dir", type=str, default="exports", help="Export folder")
    parser.add_argument("--manifest-name", type=str, default="polyhouse_manifest.json")
    parser.add_argument("--length", type=float, help="Footprint length in meters")
    parser.add_argument("--width", type=float, help="Footprint width in meters")
    parser.add_argument("--eave-height", type=float, help="Eave/gutter height in meters")
    parser.add_argument("--ridge-height", type=float, help="Ridge height in meters")
    parser.add_argument("--post-spacing", type=float, help="Side post spacing in meters")
    parser.add_argument("--type", dest="polyhouse_type", choices=POLYHOUSE_TYPES)
    parser.add_argument("--roof", choices=ROOF_TYPES, help="Roof cross-section")
    parser.add_argument("--structure", type=str, help="Structure material")
    parser.add_argument("--cover", type=str, help="Cover material")
    parser.add_argument("--side-vent", choices=SIDE_VENTILATION_OPTIONS)
    parser.add_argument("--door", choices=DOOR_ENTRY_OPTIONS)
    parser.add_argument("--top-vent", action="store_true", help="Add a ridge vent")
    parser.add_argument("--insect-net", action="store_true", help="Add insect netting")
    parser.add_argument(
        "--no-end-wall-net",
        action="store_true",
        help="Leave the far end wall without insect netting",
    )
    parser.add_argument("--foggers", action="store_true", help="Add fogger grid")
    parser.add_argument("--fans", action="store_true", help="Add exhaust fans")
    parser.add_argument("--state", type=str, help="Indian state for climate lookup")
    parser.add_argument("--district", type=str, help="District (informational)")
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for cosmetic interior jitter (omit for random)",
    )
    parser.add_argument("--no-interior", action="store_true", help="Skip beds and plants")
    parser.add_argument("--crops", action="store_true", help="Request AI crop suggestions")
    parser.add_argument("--freecad", action="store_true", help="Build a FreeCAD document")
    parser.add_argument("--skip-csv", action="store_true", help="Disable CSV cost export")

    parsed, unknown = parser.parse_known_args(args=args)
    if unknown:
        logging.info("Ignoring unknown CLI args: %s", " ".join(unknown))
    overrides: Dict[str, Any] = {}
    for attr, key in (
        ("length", "length"),
        ("width", "width"),
        ("eave_height", "eave_height"),
        ("ridge_height", "ridge_height"),
        ("post_spacing", "post_spacing"),
        ("polyhouse_type", "polyhouse_type"),
        ("roof", "roof_type"),
        ("structure", "structure_material"),
        ("cover", "cover_material"),
        ("side_vent", "side_ventilation"),
        ("door", "door_entry"),
        ("state", "state"),
        ("district", "district"),
    ):
        value = getattr(parsed, attr)
        if value is not None:
            overrides[key] = value
    if parsed.top_vent:
        overrides["top_ventilation"] = True
    if parsed.insect_net:
        overrides["insect_net"] = True
    if parsed.no_end_wall_net:
        overrides["insect_net_end_wall"] = False
    if parsed.foggers:
        overrides["foggers"] = True
    if parsed.fans:
        overrides["fans"] = True

    return overrides, parsed


def load_parameters(
    config_path: Path | str | None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> PolyhouseConfig:
    """Load parameters using the JSON → CLI precedence chain."""

    data = load_json_config(config_path)
    params = PolyhouseConfig.from_dict(data)
    if cli_overrides:
        params = apply_overrides(params, cli_overrides)
    return params
