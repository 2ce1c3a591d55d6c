#!/usr/bin/env python3
"""Headless entry point for the polyhouse generator."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from polyhouse.parameters import load_parameters, parse_cli_overrides
from polyhouse.pipeline import PipelineContext, PolyhousePipeline


def configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def main() -> int:
    configure_logging()
    overrides, cli = parse_cli_overrides(_sanitized_args())
    config_path = _resolve_config_path(cli.config)
    try:
        config = load_parameters(config_path, overrides)
    except (FileNotFoundError, ValueError, KeyError) as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2
    logging.info(
        "Parameters: %gm x %gm eave=%.2fm ridge=%.2fm type=%s roof=%s",
        config.length,
        config.width,
        config.eave_height,
        config.ridge_height,
        config.polyhouse_type,
        config.roof_type,
    )

    ctx = PipelineContext(
        config=config,
        out_dir=Path(cli.out_dir),
        include_interior=not cli.no_interior,
        seed=cli.seed,
        request_crops=cli.crops,
        build_freecad=cli.freecad,
        skip_csv=cli.skip_csv,
        manifest_name=cli.manifest_name,
    )
    PolyhousePipeline().run(ctx)

    for path in ctx.outputs:
        logging.info("Output: %s", path)
    if ctx.result is not None:
        logging.info(
            "Total cost: ₹%s (₹%s per m²)",
            f"{ctx.result.cost.total_cost:,}",
            f"{ctx.result.cost.cost_per_sqm:,}",
        )
    return 0


def _sanitized_args() -> List[str]:
    raw = sys.argv[1:]
    filtered: List[str] = []
    for arg in raw:
        if arg in {"--single-instance", "--", "-"}:
            continue
        filtered.append(arg)
    return filtered


def _default_config_path() -> str | None:
    candidate = REPO_ROOT / "configs" / "base.json"
    if candidate.exists():
        return str(candidate)
    return None


def _resolve_config_path(cli_config: str | None) -> str | None:
    if cli_config:
        path = Path(cli_config)
        if path.exists():
            return str(path)
        logging.warning("Config file %s not found; trying project default", path)
    default = _default_config_path()
    if default is None:
        logging.info("No configuration file available; using built-in defaults")
    return default


if __name__ == "__main__":
    sys.exit(main())
