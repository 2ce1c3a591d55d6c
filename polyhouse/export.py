"""Export utilities for the polyhouse generator.

Handles the JSON model manifest and, inside FreeCAD, STL export of the built
document.  FreeCAD-dependent imports are lazy so the module can be imported
in headless/test environments.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Sequence

from .model import Model

__all__ = [
    "export_manifest",
    "collect_shape_objects",
    "export_stl",
]


# ---------------------------------------------------------------------------
# Manifest export
# ---------------------------------------------------------------------------

def export_manifest(model: Model, destination: Path) -> None:
    """Write the renderer-agnostic model description as JSON."""
    manifest = model.to_dict()
    manifest["summary"] = model.summary()
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(manifest, indent=2, ensure_ascii=False), encoding="utf-8")
    logging.info("Wrote manifest %s", destination)


# ---------------------------------------------------------------------------
# FreeCAD document export
# ---------------------------------------------------------------------------

def collect_shape_objects(doc: Any) -> List[Any]:
    """Return every Part::Feature object of a document."""
    if doc is None:
        return []
    return [
        obj
        for obj in getattr(doc, "Objects", [])
        if str(getattr(obj, "TypeId", "")) == "Part::Feature"
    ]


def export_stl(objects: Sequence[Any], destination: Path) -> None:
    """Export shape objects to STL format."""
    if not objects:
        logging.warning("No shape objects to export to STL")
        return
    try:
        import Mesh  # type: ignore
    except ImportError:
        logging.warning("Mesh not available; skipping STL export")
        return
    try:
        Mesh.export(list(objects), str(destination))
        logging.info("Wrote STL %s", destination)
    except Exception as exc:
        logging.warning("STL export failed (%s); skipping", exc)
