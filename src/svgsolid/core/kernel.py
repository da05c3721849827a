"""Geometry kernel adapter.

This is the only module that talks to shapely. It converts domain paths into
shapely geometry, runs the 2D operations the pipeline needs, and converts
the results back into domain paths:

- region: Fill-rule aware region covered by a compound path
- unite: Boolean union of two paths or compounds
- simplify: Douglas-Peucker point reduction
- offset: Outline expansion or contraction
- offset_consumes: Whether an offset leaves no area
- self_intersects: Self-intersection test
- triangulate: Constrained Delaunay triangulation of a polygon with holes

Functions here assume valid input and raise on kernel faults. Callers go
through :mod:`svgsolid.core.safety`, which contains those faults.
"""

import numpy as np
import shapely
from shapely.geometry import LinearRing, LineString, MultiPolygon, Polygon
from shapely.geometry.polygon import orient
from shapely.ops import unary_union

from svgsolid.config import JoinStyle
from svgsolid.domain import CompoundPath, FillRule, Path
from svgsolid.domain.path import DEFAULT_FLATTEN_TOLERANCE, XY

Geometry = Path | CompoundPath


def path_coords(path: Path, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> list[XY]:
    """Flatten a path and drop consecutive duplicate points."""
    coords: list[XY] = []
    for point in path.flatten(tolerance):
        if not coords or point != coords[-1]:
            coords.append(point)
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords.pop()
    return coords


def winding_number(x: float, y: float, ring: np.ndarray) -> int:
    """Winding number of a point with respect to a closed ring.

    Args:
        x: Point X coordinate
        y: Point Y coordinate
        ring: (N, 2) array of ring vertices without the closing repeat

    Returns:
        Signed number of times the ring winds around the point
    """
    a = ring
    b = np.roll(ring, -1, axis=0)
    is_left = (b[:, 0] - a[:, 0]) * (y - a[:, 1]) - (x - a[:, 0]) * (b[:, 1] - a[:, 1])
    upward = (a[:, 1] <= y) & (b[:, 1] > y) & (is_left > 0)
    downward = (a[:, 1] > y) & (b[:, 1] <= y) & (is_left < 0)
    return int(np.count_nonzero(upward) - np.count_nonzero(downward))


def _children(geometry: Geometry) -> tuple[tuple[Path, ...], FillRule]:
    if isinstance(geometry, CompoundPath):
        return geometry.children, geometry.fill_rule
    return (geometry,), FillRule.NONZERO


def region(geometry: Geometry, tolerance: float = DEFAULT_FLATTEN_TOLERANCE):
    """Area covered by a path or compound path under its fill rule.

    The rings are noded against each other and polygonized into faces. Each
    face is kept when the winding number at an interior point is non-zero
    (nonzero rule) or odd (evenodd rule). Open paths are treated as closed.

    Args:
        geometry: Path or compound path
        tolerance: Curve flattening tolerance

    Returns:
        shapely Polygon, MultiPolygon or empty geometry
    """
    children, fill_rule = _children(geometry)

    rings: list[np.ndarray] = []
    lines: list[LineString] = []
    for child in children:
        coords = path_coords(child, tolerance)
        if len(coords) < 3:
            continue
        rings.append(np.asarray(coords, dtype=float))
        lines.append(LineString([*coords, coords[0]]))

    if not rings:
        return Polygon()

    noded = unary_union(lines)
    faces = shapely.get_parts(shapely.polygonize(shapely.get_parts(noded)))

    kept = []
    for face in faces:
        if face.is_empty or face.area == 0:
            continue
        point = face.representative_point()
        winding = sum(winding_number(point.x, point.y, ring) for ring in rings)
        if fill_rule is FillRule.EVENODD:
            inside = winding % 2 == 1
        else:
            inside = winding != 0
        if inside:
            kept.append(face)

    if not kept:
        return Polygon()
    return unary_union(kept)


def _polygons(geometry) -> list[Polygon]:
    if isinstance(geometry, Polygon):
        return [] if geometry.is_empty else [geometry]
    if isinstance(geometry, MultiPolygon):
        return [g for g in geometry.geoms if not g.is_empty]
    # Collections from repairs may carry stray lines or points
    return [g for g in shapely.get_parts(geometry) if isinstance(g, Polygon) and not g.is_empty]


def to_compound(geometry, fill_rule: FillRule = FillRule.NONZERO) -> CompoundPath:
    """Convert shapely polygons into a compound path.

    Exteriors wind counter-clockwise and holes clockwise. Each exterior is
    followed by its holes; polygons are ordered by their bounds so equal
    input always yields the same child order.
    """
    polygons = sorted(_polygons(geometry), key=lambda p: (p.bounds, p.area))
    children: list[Path] = []
    for polygon in polygons:
        oriented = orient(polygon, sign=1.0)
        children.append(Path.from_points(oriented.exterior.coords[:-1]))
        for interior in oriented.interiors:
            children.append(Path.from_points(interior.coords[:-1]))
    return CompoundPath(tuple(children), fill_rule)


def unite(a: Geometry, b: Geometry, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> CompoundPath:
    """Boolean union of two paths or compound paths."""
    merged = unary_union([region(a, tolerance), region(b, tolerance)])
    return to_compound(merged)


def simplify(path: Path, tolerance: float, flatten_tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> Path:
    """Reduce the point count of a path while staying within ``tolerance``.

    Curves are flattened first, so the result is straight-edged.
    """
    coords = path_coords(path, flatten_tolerance)
    if path.closed and len(coords) >= 3:
        simplified = LinearRing(coords).simplify(tolerance, preserve_topology=True)
        result = list(simplified.coords)[:-1]
    elif len(coords) >= 2:
        simplified = LineString(coords).simplify(tolerance, preserve_topology=True)
        result = list(simplified.coords)
    else:
        return path
    return Path.from_points(result, closed=path.closed)


def polygon(path: Path, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> Polygon | MultiPolygon:
    """Polygon enclosed by a path.

    Self-intersecting outlines are rebuilt from their nonzero region, so
    every lobe survives.
    """
    coords = path_coords(path, tolerance)
    if len(coords) < 3:
        return Polygon()
    result = Polygon(coords)
    if not result.is_valid:
        return region(path, tolerance)
    return result


def _buffer(path: Path, distance: float, join_style: JoinStyle, mitre_limit: float, tolerance: float):
    return polygon(path, tolerance).buffer(
        distance,
        join_style=JoinStyle(join_style).value,
        mitre_limit=mitre_limit,
    )


def offset(
    path: Path,
    distance: float,
    join_style: JoinStyle = JoinStyle.MITRE,
    mitre_limit: float = 10.0,
    tolerance: float = DEFAULT_FLATTEN_TOLERANCE,
) -> Geometry:
    """Expand (positive) or contract (negative) the area a path encloses.

    Returns a Path when the result is a single outline, otherwise a
    CompoundPath. A contraction that consumes the whole shape gives an
    empty compound.
    """
    compound = to_compound(_buffer(path, distance, join_style, mitre_limit, tolerance))
    if len(compound.children) == 1:
        return compound.children[0]
    return compound


def offset_consumes(
    path: Path,
    distance: float,
    join_style: JoinStyle = JoinStyle.MITRE,
    mitre_limit: float = 10.0,
    tolerance: float = DEFAULT_FLATTEN_TOLERANCE,
) -> bool:
    """Whether offsetting leaves no area at all."""
    return _buffer(path, distance, join_style, mitre_limit, tolerance).is_empty


def self_intersects(path: Path, tolerance: float = DEFAULT_FLATTEN_TOLERANCE) -> bool:
    """Whether the path's outline crosses itself."""
    coords = path_coords(path, tolerance)
    if path.closed:
        if len(coords) < 3:
            return False
        return not LinearRing(coords).is_simple
    if len(coords) < 2:
        return False
    return not LineString(coords).is_simple


def is_valid_polygon(exterior: list[XY], holes: list[list[XY]]) -> bool:
    if len(exterior) < 3:
        return False
    return Polygon(exterior, [h for h in holes if len(h) >= 3]).is_valid


def triangulate(exterior: list[XY], holes: list[list[XY]]) -> tuple[np.ndarray, np.ndarray]:
    """Constrained Delaunay triangulation of a polygon with holes.

    Vertices shared between triangles are indexed once so the result can be
    extruded as a watertight prism. All triangles wind counter-clockwise.

    Args:
        exterior: Outer boundary points
        holes: Hole boundary point lists

    Returns:
        (vertices (N, 2) float array, faces (M, 3) int array)
    """
    shape = Polygon(exterior, [h for h in holes if len(h) >= 3])
    if not shape.is_valid:
        shape = shape.buffer(0)

    index: dict[tuple[float, float], int] = {}
    vertices: list[tuple[float, float]] = []
    faces: list[tuple[int, int, int]] = []

    for triangle in shapely.get_parts(shapely.constrained_delaunay_triangles(shape)):
        corners = list(triangle.exterior.coords)[:3]
        ids = []
        for x, y in corners:
            key = (float(x), float(y))
            if key not in index:
                index[key] = len(vertices)
                vertices.append(key)
            ids.append(index[key])
        (ax, ay), (bx, by), (cx, cy) = corners
        cross = (bx - ax) * (cy - ay) - (by - ay) * (cx - ax)
        if cross == 0:
            continue
        if cross < 0:
            ids[1], ids[2] = ids[2], ids[1]
        faces.append((ids[0], ids[1], ids[2]))

    return (
        np.asarray(vertices, dtype=np.float64).reshape(-1, 2),
        np.asarray(faces, dtype=np.int64).reshape(-1, 3),
    )
