"""Geometry pipeline: parse, preflight and process outlines.

The pipeline turns SVG markup into a single validated compound region:

1. parse: build the node tree and collect every valid path as a clone
2. preflight: pure diagnostics about the parsed geometry
3. process: close, simplify, resolve, offset, drop islands and unite

Every kernel call goes through :mod:`svgsolid.core.safety`, so per-path
problems are recovered from with a warning. Only a stage that ends up with
nothing to work with raises.
"""

from collections import Counter

import structlog

from svgsolid.config import GeometryConfig, ProfileSettings
from svgsolid.core.deadline import Deadline
from svgsolid.core.safety import (
    safe_clone,
    safe_close,
    safe_create_and_unite,
    safe_offset,
    safe_offset_consumes,
    safe_self_intersects,
    safe_simplify,
    safe_unite,
)
from svgsolid.core.validation import is_valid_path
from svgsolid.domain import (
    BoundingBox,
    CompoundPath,
    FillRule,
    Group,
    Node,
    ParsedGeometry,
    Path,
    PathGroup,
    PreflightIssue,
    PreflightResult,
    PreflightStats,
    ProcessedGeometry,
    Severity,
)
from svgsolid.exceptions import ParseError, ProcessingError
from svgsolid.io import SvgReader

logger = structlog.get_logger(__name__)

# Human-readable descriptions of skipped markup features
_FEATURE_MESSAGES = {
    "stroke-only": "stroke-only shape(s) have no fill and were not extruded",
    "image": "raster image(s) were ignored",
    "text": "text element(s) were ignored",
    "use": "<use> reference(s) were ignored",
    "foreign-object": "embedded foreign object(s) were ignored",
    "hidden": "hidden element(s) were ignored",
}

_FEATURE_FIXES = {
    "stroke-only": "Convert strokes to filled outlines (Object to Path / Outline Stroke)",
    "text": "Convert text to outlines in your vector editor",
    "use": "Expand or unlink cloned symbols in your vector editor",
}


def _can_enclose(path: Path) -> bool:
    """Whether closing an open path would produce a region with area."""
    anchors = {(s.x, s.y) for s in path.segments if s is not None}
    return len(anchors) >= 3 and path.area > 0


class GeometryPipeline:
    """Runs the 2D stages of a single conversion.

    One instance serves one request; it holds configuration only.

    Example:
        pipeline = GeometryPipeline()
        parsed = pipeline.parse(markup)
        report = pipeline.preflight(parsed, profile)
        processed = pipeline.process(parsed, profile)
    """

    def __init__(self, config: GeometryConfig | None = None) -> None:
        """Initialize the pipeline.

        Args:
            config: Geometry configuration (defaults if None)
        """
        self.config = config or GeometryConfig()

    def parse(self, markup: str) -> ParsedGeometry:
        """Parse markup and collect every valid path.

        Args:
            markup: SVG document text

        Returns:
            ParsedGeometry with cloned paths, bounds and initial compound

        Raises:
            ParseError: If the markup is unparseable or has no valid paths
        """
        document = SvgReader().read(markup)

        paths: list[Path] = []
        groups: list[PathGroup] = []
        discarded = document.malformed_count

        def collect(candidates: tuple[Path, ...], fill_rule: FillRule) -> None:
            nonlocal discarded
            indices = []
            for candidate in candidates:
                clone = safe_clone(candidate)
                if clone is None:
                    discarded += 1
                    continue
                indices.append(len(paths))
                paths.append(clone)
            if indices:
                groups.append(PathGroup(tuple(indices), fill_rule))

        def visit(node: Node) -> None:
            match node:
                case Group(children=children):
                    for child in children:
                        visit(child)
                case CompoundPath(children=children, fill_rule=fill_rule):
                    collect(children, fill_rule)
                case Path():
                    collect((node,), self.config.fill_rule)

        visit(document.root)

        if not paths:
            raise ParseError("no valid paths found in the document")

        bounds = paths[0].bounds
        for path in paths[1:]:
            bounds = bounds.union(path.bounds)

        logger.debug(
            "parse",
            paths=len(paths),
            discarded=discarded,
            skipped=len(document.skipped_features),
        )
        return ParsedGeometry(
            paths=tuple(paths),
            bounds=bounds,
            compound=CompoundPath(tuple(paths), self.config.fill_rule),
            discarded_count=discarded,
            skipped_features=tuple(document.skipped_features),
            groups=tuple(groups),
        )

    def preflight(self, parsed: ParsedGeometry, profile: ProfileSettings) -> PreflightResult:
        """Diagnose parsed geometry without changing it.

        Args:
            parsed: Output of :meth:`parse`
            profile: Settings the conversion will use

        Returns:
            PreflightResult; ``passed`` is False when any error was found
        """
        cfg = self.config
        issues: list[PreflightIssue] = []

        invalid = [p for p in parsed.paths if not is_valid_path(p)]
        if invalid:
            issues.append(
                PreflightIssue(
                    Severity.ERROR,
                    f"{len(invalid)} invalid path(s) found",
                    detail="Paths with missing segments or non-finite coordinates cannot be processed",
                    suggested_fix="Clean up the file in a vector editor and export again",
                )
            )

        if parsed.discarded_count > 0:
            issues.append(
                PreflightIssue(
                    Severity.WARNING,
                    f"Ignored {parsed.discarded_count} degenerate path(s)",
                    detail="Empty, zero-length or malformed shapes were left out",
                )
            )

        valid = [p for p in parsed.paths if is_valid_path(p)]
        closed = [p for p in valid if p.closed]
        open_paths = [p for p in valid if not p.closed]

        if open_paths:
            issues.append(
                PreflightIssue(
                    Severity.WARNING,
                    f"{len(open_paths)} open path(s) will be closed automatically",
                    suggested_fix="Close the paths in your vector editor for predictable results",
                )
            )
        if not closed and not any(_can_enclose(p) for p in open_paths):
            issues.append(
                PreflightIssue(
                    Severity.ERROR,
                    "No closed shapes found",
                    detail="Open lines cannot enclose an area to extrude",
                    suggested_fix="Use filled shapes, or convert strokes to outlines",
                )
            )

        total_points = sum(len(p.segments) for p in valid)
        if valid:
            average = total_points / len(valid)
            if average > cfg.high_node_threshold:
                suggested = profile.simplify_tolerance * 2 if profile.simplify_tolerance > 0 else 0.1
                issues.append(
                    PreflightIssue(
                        Severity.WARNING,
                        f"High node count (average {average:.0f} points per path)",
                        detail="Dense outlines slow down processing and enlarge the model",
                        suggested_fix=f"Increase simplify tolerance to {suggested:.2f}mm",
                    )
                )

        has_intersections = any(
            safe_self_intersects(p, cfg) for p in valid[: cfg.intersection_check_limit]
        )
        if has_intersections:
            issues.append(
                PreflightIssue(
                    Severity.INFO,
                    "Self-intersecting paths detected",
                    detail="Overlapping regions are merged during the union step",
                )
            )

        tiny_islands = 0
        if profile.remove_islands_threshold > 0:
            tiny_islands = sum(1 for p in valid if p.area < profile.remove_islands_threshold)
            if tiny_islands:
                issues.append(
                    PreflightIssue(
                        Severity.INFO,
                        f"{tiny_islands} tiny island(s) will be removed",
                        detail=f"Shapes smaller than {profile.remove_islands_threshold:g} square units",
                    )
                )

        width, height = self._dimensions(parsed.bounds)
        largest = max(width, height)
        if largest > cfg.max_dimension:
            issues.append(
                PreflightIssue(
                    Severity.WARNING,
                    "Design is very large",
                    detail=f"{width:.1f} x {height:.1f} units",
                    suggested_fix="Scale the design down to fit your print bed",
                )
            )
        elif largest < cfg.min_dimension:
            issues.append(
                PreflightIssue(
                    Severity.WARNING,
                    "Design is very small",
                    detail=f"{width:.1f} x {height:.1f} units",
                    suggested_fix="Scale the design up so details survive printing",
                )
            )

        features = Counter(f.kind for f in parsed.skipped_features)
        for kind in sorted(features):
            message = _FEATURE_MESSAGES.get(kind, f"unsupported {kind} feature(s) were ignored")
            issues.append(
                PreflightIssue(
                    Severity.WARNING if kind == "stroke-only" else Severity.INFO,
                    f"{features[kind]} {message}",
                    suggested_fix=_FEATURE_FIXES.get(kind),
                )
            )

        stats = PreflightStats(
            path_count=len(parsed.paths),
            closed_paths=len(closed),
            open_paths=len(open_paths),
            total_points=total_points,
            width=width,
            height=height,
            has_intersections=has_intersections,
            tiny_islands_count=tiny_islands,
        )
        return PreflightResult.from_issues(issues, stats)

    @staticmethod
    def _dimensions(bounds: BoundingBox) -> tuple[float, float]:
        width, height = bounds.width, bounds.height
        if width != width or height != height:
            return 0.0, 0.0
        return width, height

    def process(
        self,
        parsed: ParsedGeometry,
        profile: ProfileSettings,
        deadline: Deadline | None = None,
    ) -> ProcessedGeometry:
        """Clean and combine parsed paths into one region.

        Args:
            parsed: Output of :meth:`parse`
            profile: Simplify, offset and island settings
            deadline: Optional deadline checked before each kernel call

        Returns:
            ProcessedGeometry with the united compound

        Raises:
            ProcessingError: If a stage leaves no geometry
            ProcessingTimeoutError: If the deadline passes
        """
        cfg = self.config
        deadline = deadline or Deadline.never()
        result = ProcessedGeometry(compound=CompoundPath(()))

        cleaned: dict[int, Path] = {}
        for index, path in enumerate(parsed.paths):
            deadline.check("close")
            candidate = safe_close(path)
            if not is_valid_path(candidate):
                result.warnings.append(f"Path {index} is invalid after closing and was dropped")
                result.dropped_invalid += 1
                continue

            if profile.simplify_tolerance > 0:
                deadline.check("simplify")
                candidate = safe_simplify(candidate, profile.simplify_tolerance, cfg)
                if not is_valid_path(candidate):
                    result.warnings.append(
                        f"Path {index} is invalid after simplifying and was dropped"
                    )
                    result.dropped_invalid += 1
                    continue
            cleaned[index] = candidate

        if not cleaned:
            raise ProcessingError(
                "clean",
                "No valid paths remain after cleaning. "
                "Check the source file or lower the simplify tolerance.",
            )

        paths = self._resolve(parsed, cleaned, deadline)

        if abs(profile.offset) > cfg.offset_epsilon:
            paths = self._offset(paths, profile.offset, result, deadline)

        if profile.remove_islands_threshold > 0:
            kept = [p for p in paths if p.area >= profile.remove_islands_threshold]
            result.dropped_islands = len(paths) - len(kept)
            if not kept:
                raise ProcessingError(
                    "islands",
                    "Every shape is smaller than the island threshold. "
                    "Reduce the remove-islands threshold.",
                )
            paths = kept

        deadline.check("unite")
        compound = safe_create_and_unite(paths, cfg.fill_rule, cfg)
        if compound is None:
            raise ProcessingError(
                "unite",
                "Could not combine the shapes into one region. "
                "Simplify or clean the source shape.",
            )

        result.compound = compound
        logger.debug(
            "process",
            paths_in=len(parsed.paths),
            children_out=len(compound.children),
            dropped_invalid=result.dropped_invalid,
            dropped_islands=result.dropped_islands,
            offset_fallbacks=result.offset_fallbacks,
            closed_holes=result.closed_holes,
        )
        return result

    def _resolve(
        self, parsed: ParsedGeometry, cleaned: dict[int, Path], deadline: Deadline
    ) -> list[Path]:
        """Orient paths so solids wind counter-clockwise and holes clockwise.

        Members of a multi-path source shape are resolved with the shape's
        own fill rule; a lone path just becomes counter-clockwise. If
        resolving fails, the members are kept as they are.
        """
        groups = parsed.groups or tuple(
            PathGroup((i,), self.config.fill_rule) for i in range(len(parsed.paths))
        )

        resolved: list[Path] = []
        for group in groups:
            members = [cleaned[i] for i in group.indices if i in cleaned]
            if len(members) == 1:
                lone = members[0]
                resolved.append(lone.reversed() if lone.is_clockwise else lone)
            elif members:
                deadline.check("resolve")
                source = CompoundPath(tuple(members), group.fill_rule)
                united = safe_unite(source, source, self.config)
                resolved.extend(united.children if united is not None else members)
        return resolved

    def _offset(
        self,
        paths: list[Path],
        distance: float,
        result: ProcessedGeometry,
        deadline: Deadline,
    ) -> list[Path]:
        """Offset every path, keeping holes as holes.

        Growing the material shrinks a hole, so clockwise paths are offset
        by the opposite distance and their outputs are wound clockwise again.
        A hole the offset closes completely is dropped.
        """
        offset_paths: list[Path] = []
        for index, path in enumerate(paths):
            deadline.check("offset")
            hole = path.is_clockwise
            outcome = safe_offset(path, -distance if hole else distance, self.config)

            if outcome is path and hole and safe_offset_consumes(path, -distance, self.config):
                logger.debug("offset", path=index, hole_closed=True)
                result.closed_holes += 1
                continue

            if outcome is None or outcome is path:
                result.warnings.append(f"Offset failed for path {index}; kept original shape")
                result.offset_fallbacks += 1
                offset_paths.append(path)
                continue

            children = outcome.children if isinstance(outcome, CompoundPath) else (outcome,)
            if hole:
                children = tuple(child.reversed() for child in children)
            offset_paths.extend(children)
        return offset_paths
