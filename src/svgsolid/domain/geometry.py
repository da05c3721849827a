"""Intermediate geometry handed between pipeline stages."""

from dataclasses import dataclass, field

from svgsolid.domain.path import BoundingBox, CompoundPath, FillRule, Path


@dataclass(frozen=True)
class SkippedFeature:
    """An input feature that was recognised but not converted.

    Attributes:
        kind: Short feature name ("stroke-only", "image", "text", ...)
        element: Tag or id of the element carrying the feature
    """

    kind: str
    element: str


@dataclass(frozen=True)
class PathGroup:
    """Paths that came from one source shape and share a fill rule.

    Attributes:
        indices: Positions of the member paths in ParsedGeometry.paths
        fill_rule: Fill rule of the source shape
    """

    indices: tuple[int, ...]
    fill_rule: FillRule = FillRule.NONZERO


@dataclass(frozen=True)
class ParsedGeometry:
    """Output of the parse stage.

    Attributes:
        paths: Clones of every valid path found in the document
        bounds: Union of the paths' bounding boxes
        compound: Initial compound holding all paths
        discarded_count: Degenerate paths dropped while collecting
        skipped_features: Unsupported features seen in the markup
        groups: Source shapes the paths came from; empty means every path
            stands alone
    """

    paths: tuple[Path, ...]
    bounds: BoundingBox
    compound: CompoundPath
    discarded_count: int = 0
    skipped_features: tuple[SkippedFeature, ...] = ()
    groups: tuple[PathGroup, ...] = ()


@dataclass
class ProcessedGeometry:
    """Output of the process stage.

    Attributes:
        compound: Final united region, ready for extrusion
        warnings: Per-path problems that were recovered from
        dropped_invalid: Paths removed because they failed revalidation
        dropped_islands: Paths removed by the island threshold
        offset_fallbacks: Paths that kept their pre-offset shape
        closed_holes: Holes the offset closed completely
    """

    compound: CompoundPath
    warnings: list[str] = field(default_factory=list)
    dropped_invalid: int = 0
    dropped_islands: int = 0
    offset_fallbacks: int = 0
    closed_holes: int = 0
