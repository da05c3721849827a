"""Domain models for svgsolid.

This module contains the core domain models representing outlines, the
intermediate geometry passed between pipeline stages, and the reports handed
back to callers. All models are designed to be:

- Immutable where possible (using frozen dataclasses)
- Independent of shapely and trimesh implementation details
- Able to represent degenerate data so validation can reject it

Key classes:
- Segment: An anchor with optional Bezier handles
- Path / CompoundPath / Group: The closed node variant (``Node``)
- ParsedGeometry / ProcessedGeometry: Stage outputs
- PreflightResult / GenerationResult: Caller-facing reports
"""

from svgsolid.domain.geometry import (
    ParsedGeometry,
    PathGroup,
    ProcessedGeometry,
    SkippedFeature,
)
from svgsolid.domain.path import (
    BoundingBox,
    CompoundPath,
    FillRule,
    Group,
    Node,
    Orientation,
    Path,
    Segment,
)
from svgsolid.domain.report import (
    GenerationResult,
    PreflightIssue,
    PreflightResult,
    PreflightStats,
    Severity,
)

__all__: list[str] = [
    # Enums
    "FillRule",
    "Orientation",
    "Severity",
    # Core types
    "BoundingBox",
    "Segment",
    "Path",
    "CompoundPath",
    "Group",
    "Node",
    # Stage outputs
    "SkippedFeature",
    "PathGroup",
    "ParsedGeometry",
    "ProcessedGeometry",
    # Reports
    "PreflightIssue",
    "PreflightStats",
    "PreflightResult",
    "GenerationResult",
]
