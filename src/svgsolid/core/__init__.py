"""Core processing for svgsolid.

This module contains the conversion machinery:

- Validation predicates for paths and compound paths
- Fault-contained wrappers around geometry kernel calls
- The 2D pipeline (parse, preflight, process)
- Extrusion of the processed region into a mesh
- Request orchestration, single and batch

All services are designed to be:
- Per-request (no state survives between conversions)
- Safe for use in worker processes
- Tolerant of degenerate input

Key functions:
- is_valid_path / is_valid_compound: Structural validity checks
- guarded: Run a kernel operation and contain its faults

Key classes:
- GeometryPipeline: Parse, preflight and process outlines
- MeshBuilder: Extrude compound regions into meshes
- ModelGenerator: Full conversion of one document
- BatchProcessor: Parallel conversion of many files
- Deadline: Per-request time limit
"""

from svgsolid.core.deadline import Deadline
from svgsolid.core.mesh import MeshBuilder, MeshBuildResult, PlanarShape
from svgsolid.core.pipeline import GeometryPipeline
from svgsolid.core.processor import BatchProcessor, ModelGenerator, process_file
from svgsolid.core.safety import (
    GuardedResult,
    guarded,
    safe_clone,
    safe_close,
    safe_create_and_unite,
    safe_offset,
    safe_offset_consumes,
    safe_self_intersects,
    safe_simplify,
    safe_unite,
)
from svgsolid.core.validation import is_valid_compound, is_valid_item, is_valid_path

__all__ = [
    # Orchestration
    "BatchProcessor",
    "Deadline",
    "GeometryPipeline",
    "GuardedResult",
    "MeshBuildResult",
    "MeshBuilder",
    "ModelGenerator",
    "PlanarShape",
    # Safe operations
    "guarded",
    # Validation
    "is_valid_compound",
    "is_valid_item",
    "is_valid_path",
    "process_file",
    "safe_clone",
    "safe_close",
    "safe_create_and_unite",
    "safe_offset",
    "safe_offset_consumes",
    "safe_self_intersects",
    "safe_simplify",
    "safe_unite",
]
