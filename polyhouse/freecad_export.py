"""Materialize a polyhouse ``Model`` as a FreeCAD document.

All FreeCAD imports are lazy; outside FreeCAD every entry point returns
``None`` so the module stays importable in headless/test environments.

The model is y-up in metres.  FreeCAD is z-up and works in millimetres, so
points are mapped ``(x, y, z) -> (x, -z, y)`` and scaled by 1000.
"""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import TYPE_CHECKING, Any, List, Optional, Sequence, Tuple

from .costing import CalculationResult
from .model import FeatureElement, FeatureInstance, Model, Profile, StructurePart
from .vec3 import Vector3

if TYPE_CHECKING:  # pragma: no cover - type hints only
    import FreeCAD  # type: ignore

__all__ = ["ModelDocumentBuilder", "to_freecad_point", "hex_to_rgb", "transparency_percent"]

FC_UNIT_SCALE = 1000.0
DOCUMENT_NAME = "Polyhouse"
_MIN_SIZE_M = 1e-6


def to_freecad_point(p: Vector3, scale: float = FC_UNIT_SCALE) -> Tuple[float, float, float]:
    """Model point (y-up, metres) to FreeCAD point (z-up, mm)."""
    return (float(p[0]) * scale, -float(p[2]) * scale, float(p[1]) * scale)


def hex_to_rgb(color: str) -> Tuple[float, float, float]:
    """``#rrggbb`` to a 0..1 RGB tuple for ``ViewObject.ShapeColor``."""
    text = color.lstrip("#")
    if len(text) != 6:
        return (0.5, 0.5, 0.5)
    try:
        return tuple(int(text[i:i + 2], 16) / 255.0 for i in (0, 2, 4))  # type: ignore[return-value]
    except ValueError:
        return (0.5, 0.5, 0.5)


def transparency_percent(opacity: float) -> int:
    """FreeCAD transparency (0 opaque .. 100 invisible) for a 0..1 opacity."""
    return int(round((1.0 - max(0.0, min(1.0, float(opacity)))) * 100))


class ModelDocumentBuilder:
    """Create FreeCAD Part objects for frame, envelope, features and interior."""

    def __init__(self, model: Model, result: Optional[CalculationResult] = None):
        self.model = model
        self.result = result
        self._doc: Optional[Any] = None
        self.object_names: List[str] = []

    @property
    def document(self) -> Optional[Any]:
        return self._doc

    def ensure_document(self) -> Optional[Any]:
        try:
            import FreeCAD  # type: ignore
        except ImportError:  # pragma: no cover - outside FreeCAD
            return None

        doc = FreeCAD.ActiveDocument
        if doc is None:
            doc = FreeCAD.newDocument(DOCUMENT_NAME)
        return doc

    def build(self) -> Optional[Any]:
        """Populate the document; returns it, or ``None`` without FreeCAD."""
        doc = self.ensure_document()
        self._doc = doc
        if doc is None:
            logging.info("FreeCAD not available; skipping document build")
            return None

        frame_rgb = hex_to_rgb(self.model.materials.frame.color)
        for part in self.model.parts:
            self._add_member(doc, part, frame_rgb)

        self._add_envelope(doc)

        for feature in self.model.features:
            self._add_feature(doc, feature, "Features")
        for item in self.model.interior:
            self._add_feature(doc, item, "Interior")

        self._write_params_sheet(doc)

        try:
            doc.recompute()
        except Exception as exc:
            logging.warning("Document recompute failed: %s", exc)
        logging.info("FreeCAD document built with %d objects", len(self.object_names))
        return doc

    def save(self, path: Path) -> Optional[Path]:
        if self._doc is None:
            return None
        path.parent.mkdir(parents=True, exist_ok=True)
        self._doc.saveAs(str(path))
        logging.info("FreeCAD document written to %s", path)
        return path

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def _vec(self, p: Vector3) -> Any:
        from FreeCAD import Vector  # type: ignore

        return Vector(*to_freecad_point(p))

    def _add_member(self, doc: Any, part: StructurePart, rgb: Tuple[float, float, float]) -> None:
        import Part  # type: ignore

        radius = float(part.dimensions.get("radius", 0.0))
        if part.start is None or part.end is None or part.length <= _MIN_SIZE_M or radius <= _MIN_SIZE_M:
            return
        base = self._vec(part.start)
        axis = self._vec(part.end).sub(base)
        shape = Part.makeCylinder(radius * FC_UNIT_SCALE, axis.Length, base, axis.normalize())
        self._add_shape(doc, _object_name(part.name), shape, "Frame", rgb)

    def _add_envelope(self, doc: Any) -> None:
        from FreeCAD import Vector  # type: ignore

        m = self.model
        if m.length <= _MIN_SIZE_M or m.width <= _MIN_SIZE_M:
            return
        cover = m.materials.cover
        rgb = hex_to_rgb(cover.color)
        transparency = transparency_percent(cover.opacity)
        half_length = m.length * 0.5
        run = Vector(0.0, -m.length * FC_UNIT_SCALE, 0.0)

        roof_face = self._profile_face(m.roof_profile, -half_length, lift=m.eave_height)
        if roof_face is not None:
            self._add_shape(doc, "Roof", roof_face.extrude(run), "Envelope", rgb, transparency)

        for name, z in (("EndWall_Back", -half_length), ("EndWall_Front", half_length)):
            face = self._profile_face(m.end_wall_profile, z)
            if face is not None:
                self._add_shape(doc, name, face, "Envelope", rgb, transparency)

    def _profile_face(self, profile: Profile, z: float, lift: float = 0.0) -> Optional[Any]:
        import Part  # type: ignore

        if len(profile.vertices) < 3 or profile.area() <= _MIN_SIZE_M:
            return None
        points = [self._vec((x, y + lift, z)) for x, y in profile.closed()]
        try:
            return Part.Face(Part.makePolygon(points))
        except Exception as exc:
            logging.warning("Profile face for %s roof failed: %s", profile.roof_type, exc)
            return None

    def _add_feature(self, doc: Any, feature: FeatureInstance, group: str) -> None:
        shapes = []
        for element in feature.elements:
            shape = self._element_shape(element)
            if shape is not None:
                shapes.append(shape)
        if not shapes:
            return

        import Part  # type: ignore

        obj = self._add_shape(doc, _object_name(feature.name), Part.makeCompound(shapes), group)
        if obj is None:
            return
        try:
            if hasattr(obj, "addProperty") and not hasattr(obj, "FeatureKind"):
                obj.addProperty("App::PropertyString", "FeatureKind", "Polyhouse", "Feature kind")
            if hasattr(obj, "FeatureKind"):
                obj.FeatureKind = feature.kind
        except Exception:
            pass

    def _element_shape(self, element: FeatureElement) -> Optional[Any]:
        import Part  # type: ignore
        from FreeCAD import Vector  # type: ignore

        sx, sy, sz = element.size
        s = FC_UNIT_SCALE
        cx, cy, cz = to_freecad_point(element.position)
        centre = Vector(cx, cy, cz)

        if element.shape == "sphere":
            if sx <= _MIN_SIZE_M:
                return None
            return Part.makeSphere(sx * s, centre)

        if element.shape == "cylinder":
            if sx <= _MIN_SIZE_M or sy <= _MIN_SIZE_M:
                return None
            # Authored along model y, which is FreeCAD z.
            shape = Part.makeCylinder(sx * s, sy * s, Vector(cx, cy, cz - sy * s * 0.5), Vector(0, 0, 1))
        else:
            if min(sx, sy, sz) <= _MIN_SIZE_M:
                return None
            # Model (x, y, z) extents become FreeCAD (x, z, y) extents.
            shape = Part.makeBox(sx * s, sz * s, sy * s, Vector(cx - sx * s * 0.5, cy - sz * s * 0.5, cz - sy * s * 0.5))

        rx, ry, rz = element.rotation
        # Euler XYZ: rotate about z first, then y, then x (model axes).
        if rz:
            shape.rotate(centre, Vector(0, -1, 0), math.degrees(rz))
        if ry:
            shape.rotate(centre, Vector(0, 0, 1), math.degrees(ry))
        if rx:
            shape.rotate(centre, Vector(1, 0, 0), math.degrees(rx))
        return shape

    def _add_shape(
        self,
        doc: Any,
        name: str,
        shape: Any,
        group_name: str,
        rgb: Optional[Tuple[float, float, float]] = None,
        transparency: int = 0,
    ) -> Optional[Any]:
        try:
            obj = doc.addObject("Part::Feature", name)
            obj.Label = name
            obj.Shape = shape
        except Exception as exc:
            logging.warning("Could not add %s: %s", name, exc)
            return None
        self.object_names.append(str(getattr(obj, "Name", name)))

        view = getattr(obj, "ViewObject", None)
        if view is not None:
            try:
                if rgb is not None:
                    view.ShapeColor = rgb
                view.Transparency = int(transparency)
            except Exception:
                pass

        group = self._group(doc, group_name)
        if group is not None:
            try:
                group.addObject(obj)
            except Exception:
                pass
        return obj

    def _group(self, doc: Any, name: str) -> Optional[Any]:
        try:
            objs = list(getattr(doc, "Objects", []) or [])
        except Exception:
            objs = []
        by_name = {str(getattr(o, "Name", "")): o for o in objs}
        group = by_name.get(name)
        if group is None:
            try:
                group = doc.addObject("App::DocumentObjectGroup", name)
                group.Label = name
            except Exception:
                return None
        return group

    # ------------------------------------------------------------------
    # Spreadsheet
    # ------------------------------------------------------------------

    def _write_params_sheet(self, doc: Any) -> None:
        rows: List[Sequence[Any]] = []
        if self.model.config is not None:
            rows.extend((key, value) for key, value in sorted(self.model.config.to_dict().items()))
        if self.result is not None:
            rows.append(("area_m2", self.result.area))
            rows.append(("volume_m3", self.result.volume))
            rows.extend(self.result.cost.line_items())
            rows.append(("Total Cost", self.result.cost.total_cost))
        if not rows:
            return
        try:
            sheet = doc.addObject("Spreadsheet::Sheet", "Polyhouse_Params")
            sheet.set("A1", "Parameter")
            sheet.set("B1", "Value")
            for r, (key, value) in enumerate(rows, start=2):
                sheet.set(f"A{r}", str(key))
                sheet.set(f"B{r}", _format_cell(value))
        except Exception as exc:
            logging.warning("Parameter sheet failed: %s", exc)


def _object_name(name: str) -> str:
    # FreeCAD object names must be identifiers.
    safe = "".join(ch if ch.isalnum() or ch == "_" else "_" for ch in name)
    return safe[:1].upper() + safe[1:] if safe else "Object"


def _format_cell(val: Any) -> str:
    if isinstance(val, bool):
        return "TRUE" if val else "FALSE"
    if isinstance(val, float):
        return f"{val:.6g}" if math.isfinite(val) else ""
    return str(val)

