"""Converters between fonttools pen recordings and domain models.

SVG path data is parsed by fontTools' svgLib into pen calls (moveTo,
lineTo, curveTo, qCurveTo, closePath, endPath). This module records those
calls and turns them into domain Paths with relative Bezier handles. It
also parses SVG ``transform`` attributes into fontTools Transforms.
"""

import math
import re
from dataclasses import replace
from typing import Any

from fontTools.misc.transform import Identity, Transform
from fontTools.pens.basePen import decomposeQuadraticSegment, decomposeSuperBezierSegment
from fontTools.pens.recordingPen import RecordingPen
from fontTools.pens.transformPen import TransformPen
from fontTools.svgLib.path import parse_path

from svgsolid.domain import Path, Segment

_TRANSFORM_RE = re.compile(r"(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)")
_NUMBER_SPLIT_RE = re.compile(r"[\s,]+")

# Number of arguments each transform function accepts
_TRANSFORM_ARITY = {
    "matrix": (6,),
    "translate": (1, 2),
    "scale": (1, 2),
    "rotate": (1, 3),
    "skewX": (1,),
    "skewY": (1,),
}


def parse_transform(value: str) -> Transform:
    """Parse an SVG transform attribute.

    Transform functions apply right to left, as in SVG: in
    ``translate(10) scale(2)`` points are scaled first.

    Args:
        value: Attribute text

    Returns:
        Combined transform

    Raises:
        ValueError: If the attribute is malformed
    """
    result: Transform = Identity
    consumed = 0
    for match in _TRANSFORM_RE.finditer(value):
        if value[consumed:match.start()].strip(" \t\r\n,"):
            raise ValueError(f"Unsupported transform: {value!r}")
        consumed = match.end()

        name = match.group(1)
        args = [float(a) for a in _NUMBER_SPLIT_RE.split(match.group(2).strip()) if a]
        if len(args) not in _TRANSFORM_ARITY[name]:
            raise ValueError(f"Wrong number of arguments for {name}: {value!r}")

        if name == "matrix":
            step = Transform(*args)
        elif name == "translate":
            step = Identity.translate(args[0], args[1] if len(args) > 1 else 0.0)
        elif name == "scale":
            step = Identity.scale(args[0], args[1] if len(args) > 1 else None)
        elif name == "rotate":
            angle = math.radians(args[0])
            if len(args) == 3:
                cx, cy = args[1], args[2]
                step = Identity.translate(cx, cy).rotate(angle).translate(-cx, -cy)
            else:
                step = Identity.rotate(angle)
        elif name == "skewX":
            step = Identity.skew(math.radians(args[0]), 0)
        else:
            step = Identity.skew(0, math.radians(args[0]))
        result = result.transform(step)

    if value[consumed:].strip(" \t\r\n,"):
        raise ValueError(f"Unsupported transform: {value!r}")
    return result


def _close(segments: list[Segment]) -> list[Segment]:
    """Fold a trailing anchor that repeats the start into the first segment."""
    if len(segments) > 1:
        first, last = segments[0], segments[-1]
        if (first.x, first.y) == (last.x, last.y):
            segments[0] = replace(first, handle_in=last.handle_in)
            segments.pop()
    return segments


def _set_handle_out(segments: list[Segment], control: tuple[float, float]) -> None:
    prev = segments[-1]
    segments[-1] = replace(prev, handle_out=(control[0] - prev.x, control[1] - prev.y))


def recording_to_paths(
    recording: list[tuple[str, tuple[Any, ...]]], force_closed: bool = False
) -> list[Path]:
    """Convert recorded pen calls into domain paths.

    Quadratic curves are raised to cubics. Each subpath becomes one Path.

    Args:
        recording: ``RecordingPen.value``
        force_closed: Close every subpath even without closePath (used for
            shapes that are closed by definition, such as circles)

    Returns:
        List of paths, in drawing order
    """
    paths: list[Path] = []
    segments: list[Segment] = []

    def finish(closed: bool) -> None:
        nonlocal segments
        if segments:
            if closed:
                segments = _close(segments)
            paths.append(Path(tuple(segments), closed=closed))
        segments = []

    for command, args in recording:
        if command == "moveTo":
            finish(force_closed)
            (x, y), = args
            segments = [Segment(float(x), float(y))]
        elif command == "lineTo":
            (x, y), = args
            segments.append(Segment(float(x), float(y)))
        elif command == "curveTo":
            for c1, c2, end in decomposeSuperBezierSegment(list(args)):
                _set_handle_out(segments, c1)
                segments.append(
                    Segment(float(end[0]), float(end[1]), handle_in=(c2[0] - end[0], c2[1] - end[1]))
                )
        elif command == "qCurveTo":
            for control, end in decomposeQuadraticSegment(list(args)):
                start = segments[-1]
                c1 = (
                    start.x + 2.0 / 3.0 * (control[0] - start.x),
                    start.y + 2.0 / 3.0 * (control[1] - start.y),
                )
                c2 = (
                    end[0] + 2.0 / 3.0 * (control[0] - end[0]),
                    end[1] + 2.0 / 3.0 * (control[1] - end[1]),
                )
                _set_handle_out(segments, c1)
                segments.append(
                    Segment(float(end[0]), float(end[1]), handle_in=(c2[0] - end[0], c2[1] - end[1]))
                )
        elif command == "closePath":
            finish(True)
        elif command == "endPath":
            finish(force_closed)

    finish(force_closed)
    return paths


def path_data_to_paths(
    d: str, transform: Transform | None = None, force_closed: bool = False
) -> list[Path]:
    """Parse SVG path data into domain paths.

    Args:
        d: Path data (the ``d`` attribute)
        transform: Optional transform applied to every point
        force_closed: Close every subpath

    Returns:
        List of paths

    Raises:
        ValueError: If the path data is malformed
    """
    recorder = RecordingPen()
    pen = TransformPen(recorder, transform) if transform else recorder
    parse_path(d, pen)
    return recording_to_paths(recorder.value, force_closed=force_closed)
