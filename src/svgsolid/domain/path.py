"""Core geometric types for outline representation.

This module defines the path types shared by every stage of svgsolid:
- Segment: An anchor point with optional Bezier handles
- Path: An ordered run of segments, open or closed
- CompoundPath: Several paths combined under a fill rule
- Group: A named container of nodes, mirroring SVG <g> elements
- BoundingBox: Axis-aligned bounds with union
- Orientation / FillRule: Enums for winding and hole membership

Paths are immutable. Every operation that "changes" a path returns a new one,
so stages can hand geometry around without defensive copying. Construction
does not validate: degenerate data (NaN coordinates, missing segments) must be
representable so that PathValidator can reject it.
"""

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum, auto
from functools import cached_property

from svgsolid.domain._bezier import flatten_cubic

XY = tuple[float, float]

# Maximum deviation used when flattening curves for derived measurements
DEFAULT_FLATTEN_TOLERANCE = 0.05


class Orientation(Enum):
    """Path winding direction in the document frame.

    Counter-clockwise means positive shoelace area with the raw coordinates.
    Geometry coming out of the kernel winds solids counter-clockwise and
    holes clockwise.
    """

    CLOCKWISE = auto()
    COUNTER_CLOCKWISE = auto()


class FillRule(str, Enum):
    """Rule deciding which regions of a compound path are solid."""

    NONZERO = "nonzero"
    EVENODD = "evenodd"


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned bounding box.

    Attributes:
        min_x: Left edge
        min_y: Top edge (document frame is y-down)
        max_x: Right edge
        max_y: Bottom edge
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Smallest box containing both boxes."""
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    @classmethod
    def from_points(cls, points: Iterable[XY]) -> "BoundingBox":
        """Bounds of a point cloud. An empty cloud gives a NaN box."""
        xs: list[float] = []
        ys: list[float] = []
        for x, y in points:
            xs.append(x)
            ys.append(y)
        if not xs:
            nan = float("nan")
            return cls(nan, nan, nan, nan)
        return cls(min(xs), min(ys), max(xs), max(ys))


@dataclass(frozen=True, slots=True)
class Segment:
    """An anchor point with optional Bezier handles.

    Handles are stored relative to the anchor, the way most vector editors
    expose them. A missing handle and a zero handle both mean "no curvature
    on this side".

    Attributes:
        x: Anchor X coordinate
        y: Anchor Y coordinate
        handle_in: Incoming handle (dx, dy) or None
        handle_out: Outgoing handle (dx, dy) or None
    """

    x: float
    y: float
    handle_in: XY | None = None
    handle_out: XY | None = None

    def to_tuple(self) -> XY:
        return (self.x, self.y)

    def numbers(self) -> Iterator[float]:
        """Yield every numeric field that is present."""
        yield self.x
        yield self.y
        if self.handle_in is not None:
            yield from self.handle_in
        if self.handle_out is not None:
            yield from self.handle_out


def _has_handle(handle: XY | None) -> bool:
    return handle is not None and (handle[0] != 0 or handle[1] != 0)


@dataclass(frozen=True)
class Path:
    """An ordered sequence of segments.

    A ``None`` entry in ``segments`` models a null segment coming from
    broken input; such a path is never valid.

    Attributes:
        segments: The path's segments in drawing order
        closed: Whether the last segment connects back to the first
    """

    segments: tuple[Segment | None, ...]
    closed: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.segments, tuple):
            object.__setattr__(self, "segments", tuple(self.segments))

    @classmethod
    def from_points(cls, points: Iterable[XY], closed: bool = True) -> "Path":
        """Build a straight-edged path from (x, y) pairs."""
        return cls(tuple(Segment(float(x), float(y)) for x, y in points), closed)

    def flatten(self, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> list[XY]:
        """Approximate the path with a polyline.

        Curved edges are subdivided until they deviate less than
        ``tolerance`` from the true curve. Null segments are skipped. The
        closing edge of a closed path is flattened too, but the first point
        is not repeated at the end.

        Args:
            tolerance: Maximum distance from the true curve

        Returns:
            List of (x, y) points
        """
        segments = [s for s in self.segments if s is not None]
        if not segments:
            return []

        points: list[XY] = [segments[0].to_tuple()]
        pairs = list(zip(segments, segments[1:]))
        if self.closed and len(segments) > 1:
            pairs.append((segments[-1], segments[0]))

        for current, following in pairs:
            if _has_handle(current.handle_out) or _has_handle(following.handle_in):
                out_dx, out_dy = current.handle_out or (0.0, 0.0)
                in_dx, in_dy = following.handle_in or (0.0, 0.0)
                curve = flatten_cubic(
                    (
                        current.to_tuple(),
                        (current.x + out_dx, current.y + out_dy),
                        (following.x + in_dx, following.y + in_dy),
                        following.to_tuple(),
                    ),
                    tolerance,
                )
                points.extend(curve[1:])
            else:
                points.append(following.to_tuple())

        if self.closed and len(points) > 1:
            # The closing edge ends where the path started
            points.pop()
        return points

    @cached_property
    def points(self) -> list[XY]:
        """Flattened outline at the default tolerance."""
        return self.flatten()

    @cached_property
    def bounds(self) -> BoundingBox:
        return BoundingBox.from_points(self.points)

    @cached_property
    def length(self) -> float:
        """Perimeter of the flattened outline, closing edge included when closed."""
        pts = self.points
        if len(pts) < 2:
            return 0.0
        total = sum(math.dist(a, b) for a, b in zip(pts, pts[1:]))
        if self.closed:
            total += math.dist(pts[-1], pts[0])
        return total

    @cached_property
    def signed_area(self) -> float:
        """Shoelace area of the flattened outline.

        The outline is treated as closed. Positive area means
        counter-clockwise winding with the raw coordinates.
        """
        pts = self.points
        n = len(pts)
        if n < 3:
            return 0.0

        area = 0.0
        for i in range(n):
            j = (i + 1) % n
            area += pts[i][0] * pts[j][1]
            area -= pts[j][0] * pts[i][1]
        return area / 2.0

    @property
    def area(self) -> float:
        return abs(self.signed_area)

    @property
    def orientation(self) -> Orientation:
        if self.signed_area < 0:
            return Orientation.CLOCKWISE
        return Orientation.COUNTER_CLOCKWISE

    @property
    def is_clockwise(self) -> bool:
        return self.orientation is Orientation.CLOCKWISE

    def clone(self) -> "Path":
        """Independent copy of the path."""
        return Path(tuple(self.segments), self.closed)

    def reversed(self) -> "Path":
        """Same outline drawn in the opposite direction.

        Handles swap sides so curves are preserved.
        """
        flipped = tuple(
            None if s is None else Segment(s.x, s.y, s.handle_out, s.handle_in)
            for s in reversed(self.segments)
        )
        return Path(flipped, self.closed)


@dataclass(frozen=True)
class CompoundPath:
    """Several paths combined into one region.

    The fill rule decides which areas enclosed by the children are solid
    and which are holes.

    Attributes:
        children: Member paths
        fill_rule: Hole membership rule
    """

    children: tuple[Path, ...]
    fill_rule: FillRule = FillRule.NONZERO

    def __post_init__(self) -> None:
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    @property
    def bounds(self) -> BoundingBox:
        boxes = [child.bounds for child in self.children]
        if not boxes:
            return BoundingBox.from_points([])
        result = boxes[0]
        for box in boxes[1:]:
            result = result.union(box)
        return result

    @property
    def area(self) -> float:
        """Net area assuming holes wind against their solids."""
        return abs(sum(child.signed_area for child in self.children))

    def clone(self) -> "CompoundPath":
        return CompoundPath(tuple(c.clone() for c in self.children), self.fill_rule)


@dataclass(frozen=True)
class Group:
    """Container of nodes, as produced by SVG <g> elements.

    Attributes:
        children: Nested nodes in document order
        name: Element id, if any
    """

    children: tuple["Node", ...] = field(default_factory=tuple)
    name: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))


Node = Path | CompoundPath | Group
