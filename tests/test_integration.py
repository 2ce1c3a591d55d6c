"""FreeCAD document export.

The coordinate and colour helpers run everywhere.  Tests that build a real
document are skipped when FreeCAD is not importable.

Run with FreeCAD available::

    freecadcmd -c "import pytest; pytest.main(['tests/test_integration.py', '-v'])"
"""

from __future__ import annotations

import math

import pytest

from polyhouse.builder import build
from polyhouse.costing import estimate
from polyhouse.freecad_export import (
    ModelDocumentBuilder,
    hex_to_rgb,
    to_freecad_point,
    transparency_percent,
)

# ---------------------------------------------------------------------------
# Skip markers
# ---------------------------------------------------------------------------

_FREECAD_AVAILABLE = False
try:
    import FreeCAD  # type: ignore  # noqa: F401

    _FREECAD_AVAILABLE = True
except ImportError:
    _FREECAD_AVAILABLE = False

requires_freecad = pytest.mark.skipif(not _FREECAD_AVAILABLE, reason="FreeCAD not available")


# ---------------------------------------------------------------------------
# Helpers (no FreeCAD needed)
# ---------------------------------------------------------------------------


def test_point_mapping_is_z_up_millimetres():
    assert to_freecad_point((1.0, 2.0, 3.0)) == (1000.0, -3000.0, 2000.0)
    assert to_freecad_point((0.5, 0.0, 0.0), scale=1.0) == (0.5, -0.0, 0.0)


@pytest.mark.parametrize(
    "color,expected",
    [("#ff0000", (1.0, 0.0, 0.0)), ("#000000", (0.0, 0.0, 0.0)), ("bogus", (0.5, 0.5, 0.5)), ("#zzzzzz", (0.5, 0.5, 0.5))],
)
def test_hex_to_rgb(color, expected):
    assert hex_to_rgb(color) == expected


@pytest.mark.parametrize("opacity,expected", [(1.0, 0), (0.0, 100), (0.35, 65), (2.0, 0), (-1.0, 100)])
def test_transparency_percent(opacity, expected):
    assert transparency_percent(opacity) == expected


@pytest.mark.skipif(_FREECAD_AVAILABLE, reason="FreeCAD is installed")
def test_builder_is_inert_without_freecad(tmp_path, default_config):
    builder = ModelDocumentBuilder(build(default_config, include_interior=False))
    assert builder.build() is None
    assert builder.document is None
    assert builder.save(tmp_path / "polyhouse.FCStd") is None
    assert not (tmp_path / "polyhouse.FCStd").exists()


# ---------------------------------------------------------------------------
# FreeCAD document
# ---------------------------------------------------------------------------


@requires_freecad
class TestFreeCADDocument:
    def _build(self, config):
        doc = FreeCAD.newDocument("PolyhouseTest")
        try:
            FreeCAD.setActiveDocument(doc.Name)
            model = build(config, include_interior=False)
            builder = ModelDocumentBuilder(model, estimate(config))
            built = builder.build()
            return doc, built, builder
        except Exception:
            FreeCAD.closeDocument(doc.Name)
            raise

    def test_frame_and_envelope_objects(self, default_config):
        doc, built, builder = self._build(default_config)
        try:
            assert built is doc
            names = {o.Name for o in doc.Objects}
            assert "Ridge_beam" in names
            assert {"Roof", "EndWall_Back", "EndWall_Front"} <= names
            roof = doc.getObject("Roof")
            assert roof.Shape.isValid()
            # 30 m run along FreeCAD -y
            assert math.isclose(roof.Shape.BoundBox.YLength, 30000.0, rel_tol=1e-6)
        finally:
            FreeCAD.closeDocument(doc.Name)

    def test_features_are_tagged(self, default_config):
        doc, _, _ = self._build(default_config.replace(fans=True))
        try:
            fans = [o for o in doc.Objects if getattr(o, "FeatureKind", "") == "exhaust_fan"]
            assert len(fans) == 5
            assert doc.getObject("Polyhouse_Params") is not None
        finally:
            FreeCAD.closeDocument(doc.Name)

    def test_save(self, tmp_path, default_config):
        doc, _, builder = self._build(default_config)
        try:
            saved = builder.save(tmp_path / "polyhouse.FCStd")
            assert saved is not None and saved.exists()
        finally:
            FreeCAD.closeDocument(doc.Name)
