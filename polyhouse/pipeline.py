"""Pipeline architecture for the polyhouse generator.

Breaks the generation flow into composable, testable steps.  Each step
receives a shared ``PipelineContext`` and can read/write its fields.  Steps
declare their own ``should_run`` predicate so the pipeline runner
automatically skips irrelevant stages.

Usage::

    from polyhouse.pipeline import PipelineContext, PolyhousePipeline

    ctx = PipelineContext(config=my_config, out_dir=Path("exports"))
    pipeline = PolyhousePipeline()     # default steps
    pipeline.run(ctx)
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

from .costing import CalculationResult, RateCard
from .model import Model
from .parameters import PolyhouseConfig

__all__ = [
    "PipelineContext",
    "PipelineStep",
    "PolyhousePipeline",
    "ModelBuildStep",
    "CostEstimationStep",
    "CropSuggestionStep",
    "ManifestExportStep",
    "CostReportStep",
    "DesignReportStep",
    "FreeCADDocumentStep",
    "default_steps",
]


# ---------------------------------------------------------------------------
# Pipeline context: shared state between steps
# ---------------------------------------------------------------------------


@dataclass
class PipelineContext:
    """Mutable state bag passed through every pipeline step."""

    config: PolyhouseConfig
    out_dir: Path = field(default_factory=lambda: Path("exports"))

    # Run control flags (typically populated from CLI).
    include_interior: bool = True
    seed: Optional[int] = None
    request_crops: bool = False
    build_freecad: bool = False
    skip_csv: bool = False
    skip_stl: bool = False
    rate_card: Optional[RateCard] = None
    crop_client: Any = None  # injected Gemini client (tests, custom auth)
    manifest_name: str = "polyhouse_manifest.json"
    cost_report_name: str = "cost_report.json"
    cost_csv_name: str = "cost_report.csv"
    design_report_name: str = "design_report.txt"
    freecad_name: str = "polyhouse.FCStd"
    stl_name: str = "polyhouse.stl"

    # Populated by ModelBuildStep.
    model: Model | None = None

    # Populated by CostEstimationStep / CropSuggestionStep.
    result: CalculationResult | None = None
    crops: Optional[str] = None
    crop_error: Optional[str] = None

    # Populated by FreeCADDocumentStep.
    document: Any = None

    # Files written by export steps, in order.
    outputs: List[Path] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Step base class
# ---------------------------------------------------------------------------


class PipelineStep(ABC):
    """A single composable stage of the generation pipeline."""

    name: str = "unnamed"

    def should_run(self, ctx: PipelineContext) -> bool:
        """Return ``False`` to skip this step for the current context."""
        return True

    @abstractmethod
    def execute(self, ctx: PipelineContext) -> None:
        """Perform the step's work, mutating *ctx* as needed."""
        ...


# ---------------------------------------------------------------------------
# Concrete steps
# ---------------------------------------------------------------------------


class ModelBuildStep(PipelineStep):
    """Generate the structure description from the configuration."""

    name = "model_build"

    def execute(self, ctx: PipelineContext) -> None:
        from .builder import build

        rng = random.Random(ctx.seed) if ctx.seed is not None else None
        ctx.model = build(ctx.config, rng=rng, include_interior=ctx.include_interior)
        logging.info("Model summary: %s", ctx.model.summary())


class CostEstimationStep(PipelineStep):
    """Climate lookup and construction cost estimate."""

    name = "cost_estimation"

    def execute(self, ctx: PipelineContext) -> None:
        from .costing import estimate

        try:
            ctx.result = estimate(ctx.config, ctx.rate_card)
            for note in ctx.result.climate.advisories:
                logging.info("Climate advisory: %s", note)
        except (ValueError, TypeError, ZeroDivisionError) as exc:
            logging.warning("Cost estimation failed: %s", exc)


class CropSuggestionStep(PipelineStep):
    """Ask the AI service for crops suited to the house and climate."""

    name = "crop_suggestions"

    def should_run(self, ctx: PipelineContext) -> bool:
        return ctx.request_crops and ctx.result is not None

    def execute(self, ctx: PipelineContext) -> None:
        from .crops import CropSuggestionError, suggest_crops

        try:
            ctx.crops = suggest_crops(ctx.config, ctx.result.climate, client=ctx.crop_client)
            ctx.result.crops = [ctx.crops]
        except CropSuggestionError as exc:
            ctx.crop_error = str(exc)
            logging.warning("Crop suggestions unavailable: %s", exc)


class ManifestExportStep(PipelineStep):
    """Write the model manifest JSON."""

    name = "manifest_export"

    def should_run(self, ctx: PipelineContext) -> bool:
        return ctx.model is not None

    def execute(self, ctx: PipelineContext) -> None:
        from .export import export_manifest

        manifest_path = ctx.out_dir / ctx.manifest_name
        export_manifest(ctx.model, manifest_path)
        ctx.outputs.append(manifest_path)


class CostReportStep(PipelineStep):
    """Write the cost estimate as JSON (and CSV unless disabled)."""

    name = "cost_report"

    def should_run(self, ctx: PipelineContext) -> bool:
        return ctx.result is not None

    def execute(self, ctx: PipelineContext) -> None:
        from .costing import write_cost_csv, write_cost_report

        report_path = ctx.out_dir / ctx.cost_report_name
        write_cost_report(ctx.result, ctx.config, report_path)
        ctx.outputs.append(report_path)
        if not ctx.skip_csv:
            csv_path = ctx.out_dir / ctx.cost_csv_name
            write_cost_csv(ctx.result, csv_path)
            ctx.outputs.append(csv_path)


class DesignReportStep(PipelineStep):
    """Write the plain-text design report."""

    name = "design_report"

    def should_run(self, ctx: PipelineContext) -> bool:
        return ctx.result is not None

    def execute(self, ctx: PipelineContext) -> None:
        from .report import write_text_report

        report_path = ctx.out_dir / ctx.design_report_name
        write_text_report(ctx.config, ctx.result, report_path, crops=ctx.crops)
        ctx.outputs.append(report_path)


class FreeCADDocumentStep(PipelineStep):
    """Materialize the model in FreeCAD and export the document."""

    name = "freecad_document"

    def should_run(self, ctx: PipelineContext) -> bool:
        return ctx.build_freecad and ctx.model is not None

    def execute(self, ctx: PipelineContext) -> None:
        from .export import collect_shape_objects, export_stl
        from .freecad_export import ModelDocumentBuilder

        try:
            builder = ModelDocumentBuilder(ctx.model, ctx.result)
            ctx.document = builder.build()
        except Exception as exc:
            logging.warning("FreeCAD document build failed: %s", exc)
            return
        if ctx.document is None:
            logging.info("No FreeCAD document detected; skipping FCStd/STL exports")
            return

        saved = builder.save(ctx.out_dir / ctx.freecad_name)
        if saved is not None:
            ctx.outputs.append(saved)
        if not ctx.skip_stl:
            export_stl(collect_shape_objects(ctx.document), ctx.out_dir / ctx.stl_name)


# ---------------------------------------------------------------------------
# Pipeline orchestrator
# ---------------------------------------------------------------------------


def default_steps() -> List[PipelineStep]:
    """Return the standard ordered list of pipeline steps."""
    return [
        ModelBuildStep(),
        CostEstimationStep(),
        CropSuggestionStep(),
        ManifestExportStep(),
        CostReportStep(),
        DesignReportStep(),
        FreeCADDocumentStep(),
    ]


class PolyhousePipeline:
    """Orchestrates the full polyhouse generation flow.

    Users can supply a custom step list to re-order, insert, or remove stages.
    """

    def __init__(self, steps: List[PipelineStep] | None = None) -> None:
        self.steps = steps if steps is not None else default_steps()

    @property
    def step_names(self) -> List[str]:
        return [s.name for s in self.steps]

    def run(self, ctx: PipelineContext) -> PipelineContext:
        """Execute all enabled steps in order."""
        ctx.out_dir.mkdir(parents=True, exist_ok=True)
        for step in self.steps:
            if step.should_run(ctx):
                logging.info("[pipeline] %s", step.name)
                step.execute(ctx)
        return ctx

    def insert_before(self, reference_name: str, step: PipelineStep) -> None:
        """Insert *step* immediately before the step named *reference_name*."""
        for i, existing in enumerate(self.steps):
            if existing.name == reference_name:
                self.steps.insert(i, step)
                return
        self.steps.append(step)

    def insert_after(self, reference_name: str, step: PipelineStep) -> None:
        """Insert *step* immediately after the step named *reference_name*."""
        for i, existing in enumerate(self.steps):
            if existing.name == reference_name:
                self.steps.insert(i + 1, step)
                return
        self.steps.append(step)

    def remove(self, step_name: str) -> None:
        """Remove the step with the given name, if present."""
        self.steps = [s for s in self.steps if s.name != step_name]

    def replace(self, step_name: str, new_step: PipelineStep) -> None:
        """Replace an existing step with *new_step*."""
        for i, existing in enumerate(self.steps):
            if existing.name == step_name:
                self.steps[i] = new_step
                return
        self.steps.append(new_step)
