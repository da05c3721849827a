"""Structural validity checks for paths and compound paths.

These predicates are the single definition of "usable geometry". They never
raise: anything unexpected, including objects of the wrong type, is simply
invalid. Invalid geometry is excluded by callers, never repaired here.
"""

import math
from typing import Any

from svgsolid.domain import CompoundPath, Path


def is_valid_path(path: Any) -> bool:
    """Check whether a path is usable by the geometry kernel.

    A valid path has at least two segments, no null segments, finite anchor
    and handle coordinates, a bounding box that is finite and not 0x0, and a
    positive finite length.

    Args:
        path: Object to check

    Returns:
        True if the path is valid
    """
    if not isinstance(path, Path):
        return False
    try:
        segments = path.segments
        if len(segments) < 2:
            return False
        for segment in segments:
            if segment is None:
                return False
            for value in segment.numbers():
                if not isinstance(value, (int, float)) or not math.isfinite(value):
                    return False

        bounds = path.bounds
        if not (math.isfinite(bounds.width) and math.isfinite(bounds.height)):
            return False
        if bounds.width == 0 and bounds.height == 0:
            return False

        length = path.length
        return math.isfinite(length) and length > 0
    except (TypeError, ValueError, AttributeError, ArithmeticError):
        return False


def is_valid_compound(compound: Any) -> bool:
    """Check whether a compound path has at least one child and all children are valid."""
    if not isinstance(compound, CompoundPath):
        return False
    if not compound.children:
        return False
    return all(is_valid_path(child) for child in compound.children)


def is_valid_item(item: Any) -> bool:
    """Dispatch to the path or compound check; any other object is invalid."""
    match item:
        case Path():
            return is_valid_path(item)
        case CompoundPath():
            return is_valid_compound(item)
        case _:
            return False
