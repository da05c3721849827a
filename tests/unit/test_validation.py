"""Tests for path and compound path validity checks."""

import pytest

from svgsolid.core.validation import is_valid_compound, is_valid_item, is_valid_path
from svgsolid.domain import CompoundPath, Group, Path, Segment

NAN = float("nan")
INF = float("inf")


@pytest.fixture
def triangle() -> Path:
    return Path.from_points([(0, 0), (10, 0), (5, 8)])


class TestIsValidPath:
    """Tests for is_valid_path."""

    def test_triangle_is_valid(self, triangle: Path) -> None:
        assert is_valid_path(triangle)

    def test_open_line_is_valid(self) -> None:
        """A two-point open path has length, so it is valid."""
        assert is_valid_path(Path.from_points([(0, 0), (10, 0)], closed=False))

    def test_curved_path_is_valid(self) -> None:
        path = Path(
            (Segment(0, 0, handle_out=(5, 10)), Segment(10, 0, handle_in=(-5, 10))),
            closed=False,
        )
        assert is_valid_path(path)

    @pytest.mark.parametrize("segments", [(), (Segment(1, 1),)])
    def test_fewer_than_two_segments(self, segments: tuple) -> None:
        assert not is_valid_path(Path(segments, closed=True))

    def test_null_segment(self) -> None:
        assert not is_valid_path(Path((Segment(0, 0), None, Segment(10, 0)), closed=False))

    @pytest.mark.parametrize("value", [NAN, INF, -INF])
    def test_non_finite_anchor(self, value: float) -> None:
        path = Path((Segment(0, 0), Segment(value, 5), Segment(10, 0)), closed=True)
        assert not is_valid_path(path)

    def test_non_finite_handle(self) -> None:
        path = Path((Segment(0, 0, handle_out=(NAN, 0)), Segment(10, 0)), closed=False)
        assert not is_valid_path(path)

    def test_zero_size_bounds(self) -> None:
        """All segments on one point give a 0x0 box."""
        path = Path.from_points([(3, 3), (3, 3), (3, 3)])
        assert not is_valid_path(path)

    def test_zero_length_curve(self) -> None:
        path = Path(
            (Segment(2, 2, handle_out=(0, 0)), Segment(2, 2, handle_in=(0, 0))),
            closed=False,
        )
        assert not is_valid_path(path)

    def test_flat_closed_path_is_still_valid(self) -> None:
        """A collinear closed path has no area but has length."""
        assert is_valid_path(Path.from_points([(0, 0), (5, 0), (10, 0)]))

    @pytest.mark.parametrize("value", [None, "path", 42, [(0, 0), (1, 1)]])
    def test_wrong_type(self, value: object) -> None:
        assert not is_valid_path(value)


class TestIsValidCompound:
    """Tests for is_valid_compound and is_valid_item."""

    def test_valid_compound(self, triangle: Path) -> None:
        assert is_valid_compound(CompoundPath((triangle, triangle.reversed())))

    def test_empty_compound(self) -> None:
        assert not is_valid_compound(CompoundPath(()))

    def test_compound_with_invalid_child(self, triangle: Path) -> None:
        bad = Path((Segment(NAN, 0), Segment(1, 1)), closed=False)
        assert not is_valid_compound(CompoundPath((triangle, bad)))

    def test_path_is_not_compound(self, triangle: Path) -> None:
        assert not is_valid_compound(triangle)

    def test_item_dispatch(self, triangle: Path) -> None:
        assert is_valid_item(triangle)
        assert is_valid_item(CompoundPath((triangle,)))
        assert not is_valid_item(CompoundPath(()))
        assert not is_valid_item(Group((triangle,)))
        assert not is_valid_item(None)
