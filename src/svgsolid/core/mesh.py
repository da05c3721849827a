"""Extrusion of a compound region into a triangle mesh.

The MeshBuilder turns the pipeline's compound path into planar shapes
(solids with holes), triangulates each one and extrudes it. Optional pieces:

- Bevel: a 45 degree chamfer around the top edge of the body
- Base: a flat slab under the body with the same outline

Pieces are merged by concatenating vertex arrays and offsetting face
indices; vertices are not welded across pieces. The merged mesh is
centered on its bounding box.

The document frame is y-down, the model frame y-up, so Y is mirrored.
"""

import logging
import math
from dataclasses import dataclass, field

import numpy as np
import trimesh
from trimesh.creation import extrude_triangulation
from trimesh.transformations import translation_matrix

from svgsolid.config import MeshConfig, ProfileSettings
from svgsolid.core import kernel
from svgsolid.core.deadline import Deadline
from svgsolid.core.safety import guarded
from svgsolid.core.validation import is_valid_compound
from svgsolid.domain import CompoundPath, Path
from svgsolid.domain._bezier import sample_cubic
from svgsolid.exceptions import GeometryOperationFailure, ValidationError

logger = logging.getLogger(__name__)

XY = tuple[float, float]

# Longest allowed mitre vector, in multiples of the bevel inset
MAX_MITRE_RATIO = 4.0


def _ring_area(points: list[XY]) -> float:
    area = 0.0
    n = len(points)
    for i in range(n):
        j = (i + 1) % n
        area += points[i][0] * points[j][1] - points[j][0] * points[i][1]
    return area / 2.0


def _oriented(points: list[XY], ccw: bool) -> list[XY]:
    if (_ring_area(points) > 0) != ccw:
        return points[::-1]
    return points


@dataclass
class PlanarShape:
    """A solid outline with holes in the model frame.

    The exterior winds counter-clockwise and holes clockwise.
    """

    exterior: list[XY]
    holes: list[list[XY]] = field(default_factory=list)

    @property
    def rings(self) -> list[list[XY]]:
        return [self.exterior, *self.holes]


@dataclass
class MeshBuildResult:
    """Output of a mesh build.

    Attributes:
        mesh: Merged, centered mesh with vertex normals computed
        body_triangles: Triangles in the extruded outline
        base_triangles: Triangles in the base slab
        base_dropped: True when the base failed and was left out
        warnings: Recovered problems
    """

    mesh: trimesh.Trimesh
    body_triangles: int = 0
    base_triangles: int = 0
    base_dropped: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def triangle_count(self) -> int:
        return len(self.mesh.faces)


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def _inset_ring(ring: list[XY], distance: float) -> list[XY]:
    """Move every vertex of a ring ``distance`` to its left.

    Left of travel is toward the material for both counter-clockwise
    exteriors and clockwise holes. Corners use mitre joins.
    """
    n = len(ring)
    result: list[XY] = []
    for i in range(n):
        px, py = ring[i - 1]
        cx, cy = ring[i]
        nx, ny = ring[(i + 1) % n]

        d1x, d1y = cx - px, cy - py
        d2x, d2y = nx - cx, ny - cy
        l1 = math.hypot(d1x, d1y) or 1.0
        l2 = math.hypot(d2x, d2y) or 1.0
        n1 = (-d1y / l1, d1x / l1)
        n2 = (-d2y / l2, d2x / l2)

        denom = 1.0 + n1[0] * n2[0] + n1[1] * n2[1]
        if denom < 1e-9:
            mx, my = n1
        else:
            mx, my = (n1[0] + n2[0]) / denom, (n1[1] + n2[1]) / denom
        length = math.hypot(mx, my)
        if length > MAX_MITRE_RATIO:
            mx, my = mx / length * MAX_MITRE_RATIO, my / length * MAX_MITRE_RATIO

        result.append((cx + mx * distance, cy + my * distance))
    return result


def _keeps_direction(ring: list[XY], inset: list[XY]) -> bool:
    """Whether every inset edge runs the same way as its source edge."""
    n = len(ring)
    for i in range(n):
        j = (i + 1) % n
        dx, dy = ring[j][0] - ring[i][0], ring[j][1] - ring[i][1]
        ix, iy = inset[j][0] - inset[i][0], inset[j][1] - inset[i][1]
        if dx * ix + dy * iy <= 0:
            return False
    return True


def _quads(lower: list[XY], upper: list[XY], z_low: float, z_high: float) -> list[list[list[float]]]:
    """Triangles joining two rings with matching vertex counts."""
    triangles = []
    n = len(lower)
    for i in range(n):
        j = (i + 1) % n
        a0 = [lower[i][0], lower[i][1], z_low]
        b0 = [lower[j][0], lower[j][1], z_low]
        a1 = [upper[i][0], upper[i][1], z_high]
        b1 = [upper[j][0], upper[j][1], z_high]
        triangles.append([a0, b0, b1])
        triangles.append([a0, b1, a1])
    return triangles


def _cap(vertices: np.ndarray, faces: np.ndarray, z: float, upward: bool) -> list[list[list[float]]]:
    triangles = []
    for face in faces:
        corners = [[vertices[k][0], vertices[k][1], z] for k in face]
        triangles.append(corners if upward else corners[::-1])
    return triangles


class MeshBuilder:
    """Builds printable meshes from compound paths.

    Example:
        builder = MeshBuilder()
        result = builder.build(compound, profile)
        result.mesh.export("model.stl")
    """

    def __init__(self, config: MeshConfig | None = None) -> None:
        """Initialize the builder.

        Args:
            config: Mesh configuration (defaults if None)
        """
        self.config = config or MeshConfig()

    def build(
        self,
        compound: CompoundPath,
        profile: ProfileSettings,
        deadline: Deadline | None = None,
    ) -> MeshBuildResult:
        """Extrude a compound region into a merged mesh.

        Args:
            compound: Region to extrude (document frame)
            profile: Thickness, base and bevel settings
            deadline: Optional deadline checked before each extrusion

        Returns:
            MeshBuildResult with the centered mesh

        Raises:
            ValidationError: If the compound is invalid
            GeometryOperationFailure: If the body cannot be extruded
            ProcessingTimeoutError: If the deadline passes
        """
        if not is_valid_compound(compound):
            raise ValidationError("Cannot build a mesh from an invalid compound path")
        if profile.thickness <= 0:
            raise GeometryOperationFailure("extrude", "thickness must be positive")

        deadline = deadline or Deadline.never()
        warnings: list[str] = []

        shapes = self.build_shapes(compound)
        if not shapes:
            raise GeometryOperationFailure("extrude", "no shape encloses any area")

        base_height = profile.base_thickness if profile.base_thickness > 0 else 0.0

        body: list[trimesh.Trimesh] = []
        for index, shape in enumerate(shapes):
            deadline.check("extrude")
            piece = guarded(
                lambda shape=shape: self._extrude_body(
                    shape, profile.thickness, base_height, profile.bevel, warnings
                ),
                "extrude",
            )
            if not piece.ok:
                logger.debug("Body extrusion failed for shape %d", index)
            body.append(piece.unwrap())

        base: list[trimesh.Trimesh] = []
        base_dropped = False
        if base_height > 0:
            for shape in shapes:
                deadline.check("extrude_base")
                piece = guarded(lambda shape=shape: self._extrude(shape, 0.0, base_height), "extrude_base")
                if not piece.ok:
                    warnings.append(f"Base could not be built and was left out: {piece.error}")
                    base_dropped = True
                    base = []
                    break
                base.append(piece.value)

        mesh = self._merge(body + base)
        mesh.apply_translation(-mesh.bounds.mean(axis=0))
        # Computed after centering so they describe the final geometry
        _ = mesh.vertex_normals

        return MeshBuildResult(
            mesh=mesh,
            body_triangles=sum(len(p.faces) for p in body),
            base_triangles=sum(len(p.faces) for p in base),
            base_dropped=base_dropped,
            warnings=warnings,
        )

    def build_shapes(self, compound: CompoundPath) -> list[PlanarShape]:
        """Group the compound's paths into solids with holes.

        A clockwise path becomes a hole of the most recent solid; a
        clockwise path with no solid before it starts a new solid.

        Args:
            compound: Region in the document frame

        Returns:
            Planar shapes in the model frame (Y mirrored)
        """
        shapes: list[PlanarShape] = []
        for path in compound.children:
            outline = self._outline(path)
            if len(outline) < 3 or _ring_area(outline) == 0:
                continue
            if path.is_clockwise and shapes:
                shapes[-1].holes.append(_oriented(outline, ccw=False))
            else:
                shapes.append(PlanarShape(_oriented(outline, ccw=True)))
        return shapes

    def _outline(self, path: Path) -> list[XY]:
        """Sample a path into model-frame points.

        An edge is sampled as a cubic curve only when the previous segment
        has an outgoing handle and the current one an incoming handle, both
        finite. Anything else is a straight edge; a non-finite anchor is
        skipped.
        """
        segments = [
            s for s in path.segments if s is not None and _finite(s.x, s.y)
        ]
        if not segments:
            return []

        steps = self.config.curve_segments
        points: list[XY] = [segments[0].to_tuple()]
        pairs = list(zip(segments, segments[1:]))
        if path.closed and len(segments) > 1:
            pairs.append((segments[-1], segments[0]))

        for prev, cur in pairs:
            handle_out, handle_in = prev.handle_out, cur.handle_in
            curved = (
                handle_out is not None
                and handle_in is not None
                and _finite(*handle_out, *handle_in)
                and any(handle_out + handle_in)
            )
            if curved:
                samples = sample_cubic(
                    (
                        prev.to_tuple(),
                        (prev.x + handle_out[0], prev.y + handle_out[1]),
                        (cur.x + handle_in[0], cur.y + handle_in[1]),
                        cur.to_tuple(),
                    ),
                    steps,
                )
                points.extend(samples[1:])
            else:
                points.append(cur.to_tuple())

        if path.closed and len(points) > 1:
            points.pop()

        mirrored: list[XY] = []
        for x, y in points:
            point = (x, -y)
            if not mirrored or point != mirrored[-1]:
                mirrored.append(point)
        if len(mirrored) > 1 and mirrored[0] == mirrored[-1]:
            mirrored.pop()
        return mirrored

    def _triangulate(self, exterior: list[XY], holes: list[list[XY]]) -> tuple[np.ndarray, np.ndarray]:
        vertices, faces = kernel.triangulate(exterior, holes)
        if len(faces) == 0:
            raise GeometryOperationFailure("triangulate", "shape produced no triangles")
        return vertices, faces

    def _extrude(self, shape: PlanarShape, z0: float, height: float) -> trimesh.Trimesh:
        """Straight prism of a shape between z0 and z0 + height."""
        vertices, faces = self._triangulate(shape.exterior, shape.holes)
        return extrude_triangulation(
            vertices, faces, height, transform=translation_matrix([0.0, 0.0, z0])
        )

    def _extrude_body(
        self,
        shape: PlanarShape,
        thickness: float,
        z0: float,
        bevel: float,
        warnings: list[str],
    ) -> trimesh.Trimesh:
        if bevel <= 0:
            return self._extrude(shape, z0, thickness)

        chamfer = min(bevel, thickness)
        inset = PlanarShape(
            _inset_ring(shape.exterior, chamfer),
            [_inset_ring(hole, chamfer) for hole in shape.holes],
        )
        if not self._inset_usable(shape, inset):
            warnings.append("Bevel is too large for a shape; extruded without bevel")
            return self._extrude(shape, z0, thickness)
        return self._chamfered(shape, inset, z0, thickness, chamfer)

    @staticmethod
    def _inset_usable(shape: PlanarShape, inset: PlanarShape) -> bool:
        """Inset rings must keep winding and edge directions, shrink and stay simple."""
        if _ring_area(inset.exterior) <= 0:
            return False
        if _ring_area(inset.exterior) >= _ring_area(shape.exterior):
            return False
        if any(_ring_area(hole) >= 0 for hole in inset.holes):
            return False
        if not all(_keeps_direction(r, i) for r, i in zip(shape.rings, inset.rings)):
            return False
        return kernel.is_valid_polygon(inset.exterior, inset.holes)

    def _chamfered(
        self,
        shape: PlanarShape,
        inset: PlanarShape,
        z0: float,
        thickness: float,
        chamfer: float,
    ) -> trimesh.Trimesh:
        """Prism whose top edge is cut at 45 degrees.

        Walls rise from z0 to the chamfer start, the chamfer band slopes
        inward to the top, and the top cap is the inset outline.
        """
        top = z0 + thickness
        shoulder = top - chamfer

        bottom_vertices, bottom_faces = self._triangulate(shape.exterior, shape.holes)
        top_vertices, top_faces = self._triangulate(inset.exterior, inset.holes)

        triangles = _cap(bottom_vertices, bottom_faces, z0, upward=False)
        for ring, inset_ring in zip(shape.rings, inset.rings):
            if shoulder - z0 > 1e-9:
                triangles.extend(_quads(ring, ring, z0, shoulder))
            triangles.extend(_quads(ring, inset_ring, shoulder, top))
        triangles.extend(_cap(top_vertices, top_faces, top, upward=True))

        soup = np.asarray(triangles, dtype=np.float64)
        return trimesh.Trimesh(
            vertices=soup.reshape(-1, 3),
            faces=np.arange(len(soup) * 3).reshape(-1, 3),
            process=True,
        )

    @staticmethod
    def _merge(pieces: list[trimesh.Trimesh]) -> trimesh.Trimesh:
        """Concatenate pieces without welding vertices."""
        return trimesh.util.concatenate(pieces)
