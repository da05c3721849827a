"""Internal Bezier curve flattening algorithms.

This is an internal module containing helper functions for Path flattening.
Not intended for public use.
"""

import math

XY = tuple[float, float]

# Subdivision stops here even if the curve is not yet flat enough
MAX_DEPTH = 16


def _mid(a: XY, b: XY) -> XY:
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def flatten_cubic(
    points: tuple[XY, XY, XY, XY], tolerance: float, depth: int = 0
) -> list[XY]:
    """Flatten a cubic Bezier curve using recursive subdivision.

    Uses De Casteljau's algorithm for subdivision.

    Args:
        points: The 4 control points (p0, p1, p2, p3)
        tolerance: Maximum distance from true curve
        depth: Current recursion depth

    Returns:
        List of points approximating the curve, including both endpoints
    """
    p0, p1, p2, p3 = points

    # Calculate curve midpoint (at t=0.5)
    curve_mid_x = 0.125 * (p0[0] + 3 * p1[0] + 3 * p2[0] + p3[0])
    curve_mid_y = 0.125 * (p0[1] + 3 * p1[1] + 3 * p2[1] + p3[1])

    # Approximate with line segment midpoint
    line_mid_x = (p0[0] + p3[0]) / 2
    line_mid_y = (p0[1] + p3[1]) / 2

    distance = math.hypot(curve_mid_x - line_mid_x, curve_mid_y - line_mid_y)

    # Also subdivide when the control points stray far from the chord, which
    # catches symmetric loops whose midpoint sits on the chord.
    spread = max(
        math.hypot(p1[0] - line_mid_x, p1[1] - line_mid_y),
        math.hypot(p2[0] - line_mid_x, p2[1] - line_mid_y),
    ) - math.hypot(p3[0] - p0[0], p3[1] - p0[1]) / 2

    if not math.isfinite(distance) or depth >= MAX_DEPTH:
        return [p0, p3]
    if distance <= tolerance and spread <= tolerance:
        return [p0, p3]

    # First level
    q1 = _mid(p0, p1)
    q2 = _mid(p1, p2)
    q3 = _mid(p2, p3)

    # Second level
    r1 = _mid(q1, q2)
    r2 = _mid(q2, q3)

    # Third level (midpoint)
    mid = _mid(r1, r2)

    left = flatten_cubic((p0, q1, r1, mid), tolerance, depth + 1)
    right = flatten_cubic((mid, r2, q3, p3), tolerance, depth + 1)

    # Combine, avoiding duplicate midpoint
    return left[:-1] + right


def sample_cubic(points: tuple[XY, XY, XY, XY], steps: int) -> list[XY]:
    """Sample a cubic Bezier curve at evenly spaced parameter values.

    Args:
        points: The 4 control points (p0, p1, p2, p3)
        steps: Number of straight pieces

    Returns:
        steps + 1 points from p0 to p3
    """
    p0, p1, p2, p3 = points
    samples: list[XY] = []
    for i in range(steps + 1):
        t = i / steps
        mt = 1 - t
        a = mt * mt * mt
        b = 3 * mt * mt * t
        c = 3 * mt * t * t
        d = t * t * t
        samples.append(
            (
                a * p0[0] + b * p1[0] + c * p2[0] + d * p3[0],
                a * p0[1] + b * p1[1] + c * p2[1] + d * p3[1],
            )
        )
    return samples
