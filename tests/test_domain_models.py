"""Tests for domain models to verify they work correctly."""

import math

import pytest

from svgsolid.domain import (
    BoundingBox,
    CompoundPath,
    FillRule,
    GenerationResult,
    Group,
    Orientation,
    Path,
    PreflightIssue,
    PreflightResult,
    PreflightStats,
    Segment,
    Severity,
)


def square(x: float = 0.0, y: float = 0.0, size: float = 10.0, ccw: bool = True) -> Path:
    points = [(x, y), (x + size, y), (x + size, y + size), (x, y + size)]
    return Path.from_points(points if ccw else points[::-1])


class TestSegment:
    """Tests for Segment class."""

    def test_segment_creation(self) -> None:
        """Test basic segment creation."""
        s = Segment(1.0, 2.0)
        assert s.x == 1.0
        assert s.y == 2.0
        assert s.handle_in is None
        assert s.handle_out is None

    def test_segment_to_tuple(self) -> None:
        assert Segment(3.0, 4.0).to_tuple() == (3.0, 4.0)

    def test_numbers_include_handles(self) -> None:
        """Test that numbers() yields anchor and present handle values."""
        s = Segment(1.0, 2.0, handle_in=(3.0, 4.0), handle_out=(5.0, 6.0))
        assert list(s.numbers()) == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]
        assert list(Segment(1.0, 2.0).numbers()) == [1.0, 2.0]

    def test_segment_immutable(self) -> None:
        """Test that segment is immutable."""
        s = Segment(1.0, 2.0)
        with pytest.raises(AttributeError):
            s.x = 5.0  # type: ignore


class TestBoundingBox:
    """Tests for BoundingBox class."""

    def test_dimensions(self) -> None:
        box = BoundingBox(1.0, 2.0, 11.0, 7.0)
        assert box.width == 10.0
        assert box.height == 5.0

    def test_union(self) -> None:
        a = BoundingBox(0, 0, 10, 10)
        b = BoundingBox(5, -5, 20, 8)
        assert a.union(b) == BoundingBox(0, -5, 20, 10)

    def test_from_points(self) -> None:
        box = BoundingBox.from_points([(3, 1), (-2, 4), (0, 0)])
        assert box == BoundingBox(-2, 0, 3, 4)

    def test_from_no_points_is_nan(self) -> None:
        box = BoundingBox.from_points([])
        assert math.isnan(box.width)


class TestPath:
    """Tests for Path class."""

    def test_from_points(self) -> None:
        path = square()
        assert len(path.segments) == 4
        assert path.closed
        assert path.segments[1].to_tuple() == (10.0, 0.0)

    def test_segments_coerced_to_tuple(self) -> None:
        path = Path([Segment(0, 0), Segment(1, 1)])
        assert isinstance(path.segments, tuple)

    def test_area_and_orientation(self) -> None:
        """Test shoelace area sign for both windings."""
        ccw = square()
        cw = square(ccw=False)
        assert ccw.signed_area == pytest.approx(100.0)
        assert cw.signed_area == pytest.approx(-100.0)
        assert ccw.area == cw.area == pytest.approx(100.0)
        assert ccw.orientation is Orientation.COUNTER_CLOCKWISE
        assert cw.orientation is Orientation.CLOCKWISE
        assert cw.is_clockwise

    def test_length_includes_closing_edge(self) -> None:
        assert square().length == pytest.approx(40.0)
        open_path = Path.from_points([(0, 0), (10, 0), (10, 10), (0, 10)], closed=False)
        assert open_path.length == pytest.approx(30.0)

    def test_bounds(self) -> None:
        assert square(5, 5, 10).bounds == BoundingBox(5, 5, 15, 15)

    def test_flatten_straight_path(self) -> None:
        """Test that a closed polygon does not repeat its first point."""
        assert square().flatten() == [(0, 0), (10, 0), (10, 10), (0, 10)]

    def test_flatten_curve_stays_near_circle(self) -> None:
        """Test that a circle drawn with four cubic arcs flattens within tolerance."""
        k = 0.5522847498 * 10
        path = Path(
            (
                Segment(10, 0, handle_in=(0, -k), handle_out=(0, k)),
                Segment(0, 10, handle_in=(k, 0), handle_out=(-k, 0)),
                Segment(-10, 0, handle_in=(0, k), handle_out=(0, -k)),
                Segment(0, -10, handle_in=(-k, 0), handle_out=(k, 0)),
            ),
            closed=True,
        )
        points = path.flatten(0.01)
        assert len(points) > 16
        for x, y in points:
            assert math.hypot(x, y) == pytest.approx(10.0, abs=0.05)
        assert path.area == pytest.approx(math.pi * 100, rel=0.01)

    def test_flatten_skips_null_segments(self) -> None:
        path = Path((Segment(0, 0), None, Segment(10, 0)), closed=False)
        assert path.flatten() == [(0, 0), (10, 0)]

    def test_reversed_swaps_handles(self) -> None:
        path = Path(
            (Segment(0, 0, handle_out=(1, 0)), Segment(10, 0, handle_in=(-1, 0))),
            closed=False,
        )
        flipped = path.reversed()
        assert flipped.segments[0] == Segment(10, 0, handle_in=None, handle_out=(-1, 0))
        assert flipped.segments[1] == Segment(0, 0, handle_in=(1, 0), handle_out=None)

    def test_reversed_flips_orientation(self) -> None:
        assert square().reversed().is_clockwise

    def test_clone_is_equal_but_distinct(self) -> None:
        path = square()
        copy = path.clone()
        assert copy == path
        assert copy is not path


class TestCompoundPath:
    """Tests for CompoundPath class."""

    def test_bounds_union(self) -> None:
        compound = CompoundPath((square(0, 0, 10), square(20, 5, 10)))
        assert compound.bounds == BoundingBox(0, 0, 30, 15)

    def test_area_subtracts_holes(self) -> None:
        outer = square(0, 0, 10)
        hole = square(2, 2, 6, ccw=False)
        assert CompoundPath((outer, hole)).area == pytest.approx(64.0)

    def test_default_fill_rule(self) -> None:
        assert CompoundPath((square(),)).fill_rule is FillRule.NONZERO

    def test_clone_keeps_fill_rule(self) -> None:
        compound = CompoundPath((square(),), FillRule.EVENODD)
        copy = compound.clone()
        assert copy.fill_rule is FillRule.EVENODD
        assert copy.children[0] is not compound.children[0]


class TestGroup:
    """Tests for Group class."""

    def test_nesting(self) -> None:
        inner = Group((square(),), name="inner")
        outer = Group([inner])
        assert isinstance(outer.children, tuple)
        assert outer.children[0].name == "inner"


class TestReports:
    """Tests for preflight and generation result serialization."""

    def test_issue_to_dict_uses_camel_case(self) -> None:
        issue = PreflightIssue(Severity.WARNING, "Open path", suggested_fix="Close it")
        assert issue.to_dict() == {
            "severity": "warning",
            "message": "Open path",
            "suggestedFix": "Close it",
        }

    def test_result_passes_without_errors(self) -> None:
        issues = [PreflightIssue(Severity.WARNING, "w"), PreflightIssue(Severity.INFO, "i")]
        result = PreflightResult.from_issues(issues, PreflightStats())
        assert result.passed
        assert len(result.warnings) == 1
        assert result.errors == []

    def test_result_fails_with_error(self) -> None:
        result = PreflightResult.from_issues(
            [PreflightIssue(Severity.ERROR, "bad")], PreflightStats()
        )
        assert not result.passed

    def test_preflight_to_dict_shape(self) -> None:
        stats = PreflightStats(path_count=2, closed_paths=1, open_paths=1, width=5, height=6)
        data = PreflightResult.from_issues([], stats).to_dict()
        assert data["passed"] is True
        assert data["issues"] == []
        assert data["stats"]["pathCount"] == 2
        assert data["stats"]["boundingBox"] == {"width": 5, "height": 6}
        assert set(data["stats"]) == {
            "pathCount",
            "closedPaths",
            "openPaths",
            "totalPoints",
            "boundingBox",
            "hasIntersections",
            "tinyIslandsCount",
        }

    def test_generation_result_omits_missing_blob(self) -> None:
        failed = GenerationResult(success=False, processing_time=1.5, error="boom")
        assert failed.to_dict() == {"success": False, "error": "boom", "processingTime": 1.5}

        ok = GenerationResult(success=True, processing_time=2.0, blob=b"x")
        assert ok.to_dict() == {"success": True, "blob": b"x", "processingTime": 2.0}
