import math

import pytest

from polyhouse import layout, materials, profiles, vec3
from polyhouse.parameters import PolyhouseConfig, ROOF_TYPES


# ---------------------------------------------------------------------------
# Roof and end-wall profiles
# ---------------------------------------------------------------------------


def test_gable_profile_is_triangle():
    profile = profiles.build_roof_profile("gable", 5.0, 2.0, 10.0)
    assert profile.vertices == ((-5.0, 0.0), (0.0, 2.0), (5.0, 0.0))
    ring = profile.closed()
    assert ring[0] == ring[-1]
    assert len(ring) == 4


@pytest.mark.parametrize("roof_type", ROOF_TYPES)
def test_roof_profile_spans_zero_to_roof_height(roof_type):
    profile = profiles.build_roof_profile(roof_type, 6.0, 2.5, 12.0)
    assert math.isclose(profile.max_y, 2.5, abs_tol=1e-9)
    assert profile.min_y == 0.0
    assert profile.vertices[0] == (-6.0, 0.0)
    assert profile.vertices[-1] == (6.0, 0.0)
    assert math.isclose(profile.span, 12.0)


def test_flat_profile_falls_for_drainage():
    profile = profiles.build_roof_profile("flat", 5.0, 2.0, 10.0)
    assert profile.vertices == ((-5.0, 0.0), (-5.0, 2.0), (5.0, 1.8), (5.0, 0.0))


@pytest.mark.parametrize("width,expected", [(4.0, 2), (10.0, 2), (16.0, 2), (24.0, 3), (40.0, 5)])
def test_venlo_peak_count(width, expected):
    assert profiles.venlo_peak_count(width) == expected
    profile = profiles.build_roof_profile("venlo", width / 2, 1.5, width)
    assert profile.peak_count == expected
    peaks = [p for p in profile.vertices if math.isclose(p[1], 1.5)]
    assert len(peaks) == expected


def test_venlo_peaks_sit_at_span_midpoints():
    profile = profiles.build_roof_profile("venlo", 5.0, 1.0, 10.0)
    assert profile.vertices == (
        (-5.0, 0.0),
        (-2.5, 1.0),
        (0.0, 0.0),
        (2.5, 1.0),
        (5.0, 0.0),
    )


@pytest.mark.parametrize("segments,expected_points", [(5, 13), (12, 13), (13, 15), (16, 17), (50, 21)])
def test_arch_segments_are_clamped_and_even(segments, expected_points):
    profile = profiles.build_roof_profile("gothic", 5.0, 2.0, 10.0, segments=segments)
    assert len(profile.vertices) == expected_points


def test_quonset_apex_is_sampled():
    profile = profiles.build_roof_profile("quonset", 5.0, 5.0, 10.0)
    assert (0.0, 5.0) in profile.vertices


def test_unknown_roof_type_falls_back_to_flat():
    profile = profiles.build_roof_profile("geodesic", 5.0, 2.0, 10.0)
    assert profile.roof_type == "flat"
    assert len(profile.vertices) == 4


def test_end_wall_stacks_roof_on_wall():
    profile = profiles.build_end_wall_profile("gable", 5.0, 4.0, 6.0, 10.0)
    assert profile.vertices == ((-5.0, 0.0), (-5.0, 4.0), (0.0, 6.0), (5.0, 4.0), (5.0, 0.0))
    assert profile.min_y == 0.0
    assert profile.max_y == 6.0
    # wall rectangle plus gable triangle
    assert math.isclose(profile.area(), 10.0 * 4.0 + 0.5 * 10.0 * 2.0)


@pytest.mark.parametrize("roof_type", ROOF_TYPES)
def test_end_wall_reaches_ridge(roof_type):
    profile = profiles.build_end_wall_profile(roof_type, 5.0, 3.0, 5.5, 10.0)
    assert profile.min_y == 0.0
    assert math.isclose(profile.max_y, 5.5, abs_tol=1e-9)


def test_negative_roof_height_degrades_to_flat_outline():
    roof = profiles.build_roof_profile("gothic", 5.0, -1.0, 10.0)
    assert all(y == 0.0 for _, y in roof.vertices)

    wall = profiles.build_end_wall_profile("gable", 5.0, 4.0, 3.0, 10.0)
    assert wall.max_y == 4.0
    assert all(y >= 0.0 for _, y in wall.vertices)


def test_nan_inputs_give_finite_profile():
    profile = profiles.build_roof_profile("quonset", float("nan"), float("inf"), float("nan"))
    for x, y in profile.vertices:
        assert math.isfinite(x) and math.isfinite(y)
        assert y >= 0.0


# ---------------------------------------------------------------------------
# Materials
# ---------------------------------------------------------------------------


def test_frame_materials_resolve():
    steel = materials.resolve_frame("gi-steel")
    assert steel.color == "#4a4a4a"
    assert materials.resolve_frame("aluminum").key == "aluminium"
    assert materials.resolve_frame("gi-pipe").key == "gi-steel"


def test_unknown_materials_fall_back_to_first_entry():
    assert materials.resolve_frame("titanium") is materials.FRAME_MATERIALS[materials.DEFAULT_FRAME_KEY]
    assert materials.resolve_cover("aerogel").key == "uv-polyfilm"
    assert materials.DEFAULT_FRAME_KEY == "gi-steel"


def test_cover_materials_resolve():
    glass = materials.resolve_cover("glass")
    assert glass.is_transparent
    assert 0.0 < glass.opacity < 1.0
    assert materials.resolve_cover("polyethylene").key == "uv-polyfilm"


def test_resolve_materials_for_config():
    config = PolyhouseConfig(structure_material="bamboo", cover_material="shade-net")
    result = materials.resolve_materials(config)
    assert result.frame.key == "bamboo"
    assert result.cover.key == "shade-net"


# ---------------------------------------------------------------------------
# Frame layout
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "length,spacing,expected",
    [
        (36.0, 4.0, 10),
        (30.0, 4.0, 8),
        (1.0, 4.0, 2),
        (0.0, 4.0, 2),
        (36.0, 0.0, 10),
        (36.0, float("nan"), 10),
        (30.0, 1e-9, 61),
        (1e300, 4.0, 251),
    ],
)
def test_side_post_count(length, spacing, expected):
    assert layout.side_post_count(length, spacing) == expected


def test_side_post_count_monotonic_in_length():
    counts = [layout.side_post_count(i * 0.5, 4.0) for i in range(0, 121)]
    assert all(c >= 2 for c in counts)
    assert all(b >= a for a, b in zip(counts, counts[1:]))


def _by_kind(parts, kind):
    return [p for p in parts if p.kind == kind]


def test_gable_layout_members():
    parts = layout.layout(30.0, 10.0, 4.0, 6.0, post_spacing=4.0, roof_type="gable")
    posts = _by_kind(parts, "post")
    corners = [p for p in posts if p.name.startswith("corner_post")]
    side = [p for p in posts if p.name.startswith("side_post")]
    assert len(corners) == 4
    assert all(p.dimensions["radius"] == layout.CORNER_POST_RADIUS_M for p in corners)
    # 8 stations per side, minus the 2 corner stations, on both sides.
    assert len(side) == 12
    assert all(p.dimensions["radius"] == layout.SIDE_POST_RADIUS_M for p in side)

    names = {p.name for p in parts}
    assert {"eave_beam_left", "eave_beam_right", "ridge_beam", "cross_beam_back", "cross_beam_front"} <= names

    rafters = _by_kind(parts, "rafter")
    assert len(rafters) == 16
    for r in rafters:
        assert r.start[1] == 4.0
        assert r.end == (0.0, 6.0, r.start[2])

    gutters = _by_kind(parts, "gutter")
    assert len(gutters) == 2
    assert all(math.isclose(g.position[1], 3.9) for g in gutters)
    assert sorted(round(g.position[0], 6) for g in gutters) == [-5.15, 5.15]


def test_side_posts_are_evenly_spaced():
    parts = layout.layout(30.0, 10.0, 4.0, 6.0)
    zs = sorted({round(p.position[2], 9) for p in parts if p.name.endswith("_left") and p.kind == "post"})
    step = 30.0 / 7
    expected = [round(-15.0 + i * step, 9) for i in range(1, 7)]
    assert zs == expected


@pytest.mark.parametrize("roof_type", ["quonset", "venlo", "flat"])
def test_curved_and_flat_roofs_have_no_rafters_or_ridge(roof_type):
    parts = layout.layout(30.0, 10.0, 4.0, 6.0, roof_type=roof_type)
    assert not _by_kind(parts, "rafter")
    assert "ridge_beam" not in {p.name for p in parts}


def test_gothic_keeps_ridge_beam_without_rafters():
    parts = layout.layout(30.0, 10.0, 4.0, 6.0, roof_type="gothic")
    assert "ridge_beam" in {p.name for p in parts}
    assert not _by_kind(parts, "rafter")


def test_member_orientation_is_unit_and_length_matches():
    for part in layout.layout(24.0, 8.0, 3.5, 5.0):
        ox, oy, oz = part.orientation
        assert math.isclose(ox * ox + oy * oy + oz * oz, 1.0, rel_tol=1e-9)
        if part.start is not None and part.end is not None:
            dx = part.end[0] - part.start[0]
            dy = part.end[1] - part.start[1]
            dz = part.end[2] - part.start[2]
            assert math.isclose(math.sqrt(dx * dx + dy * dy + dz * dz), part.length, abs_tol=1e-9)


def test_degenerate_layout_is_finite():
    parts = layout.layout(float("nan"), -3.0, 0.0, float("inf"))
    assert len([p for p in parts if p.kind == "post"]) == 4
    for part in parts:
        assert all(math.isfinite(c) for c in part.position)
        assert all(v >= 0.0 and math.isfinite(v) for v in part.dimensions.values())


# ---------------------------------------------------------------------------
# Vector helpers
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "value,expected",
    [(2.5, 2.5), (0, 0.0), (-1.0, 0.0), (float("nan"), 0.0), (float("inf"), 0.0), ("3", 3.0), (None, 0.0)],
)
def test_non_negative(value, expected):
    assert vec3.non_negative(value) == expected


def test_normalize_zero_vector():
    assert vec3.normalize((0.0, 0.0, 0.0)) == (0.0, 0.0, 0.0)
    assert vec3.normalize((0.0, 3.0, 4.0)) == pytest.approx((0.0, 0.6, 0.8))


def test_quadratic_bezier_endpoints_and_midpoint():
    p0, p1, p2 = (0.0, 0.0, 0.0), (1.0, 4.0, 0.0), (2.0, 0.0, 0.0)
    assert vec3.quadratic_bezier(p0, p1, p2, 0.0) == p0
    assert vec3.quadratic_bezier(p0, p1, p2, 1.0) == p2
    assert vec3.quadratic_bezier(p0, p1, p2, 0.5) == pytest.approx((1.0, 2.0, 0.0))
