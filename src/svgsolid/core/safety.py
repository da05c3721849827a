"""Fault containment around geometry kernel calls.

Every kernel operation used by the pipeline runs through :func:`guarded`,
which turns exceptions and invalid outputs into a failed
:class:`GuardedResult` instead of letting them escape. The ``safe_*``
functions build on it and fall back to a documented value on failure, so a
single degenerate path never aborts a whole conversion.

Deadline expiry is the one exception that is never contained.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog

from svgsolid.config import GeometryConfig
from svgsolid.core import kernel
from svgsolid.core.validation import is_valid_item, is_valid_path
from svgsolid.domain import CompoundPath, FillRule, Path, Segment
from svgsolid.exceptions import GeometryOperationFailure, ProcessingTimeoutError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

_DEFAULT_CONFIG = GeometryConfig()


@dataclass(frozen=True)
class GuardedResult(Generic[T]):
    """Outcome of a guarded operation.

    Exactly one of ``value`` and ``error`` is meaningful: ``error`` is None
    on success.
    """

    value: T | None = None
    error: GeometryOperationFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: Any) -> Any:
        """Return the value on success, ``default`` otherwise."""
        return self.value if self.ok else default

    def unwrap(self) -> T:
        """Return the value on success.

        Raises:
            GeometryOperationFailure: The contained failure
        """
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def guarded(op: Callable[[], T], name: str) -> GuardedResult[T]:
    """Run a kernel operation, containing any fault.

    Path and CompoundPath results are validated; an invalid result counts
    as a failure.

    Args:
        op: Zero-argument callable performing the operation
        name: Operation name used in logs and failures

    Returns:
        GuardedResult holding the value or the failure

    Raises:
        ProcessingTimeoutError: Always propagated
    """
    try:
        value = op()
    except ProcessingTimeoutError:
        raise
    except Exception as exc:
        logger.warning(name, error=str(exc), error_type=type(exc).__name__)
        return GuardedResult(error=GeometryOperationFailure(name, str(exc) or type(exc).__name__))

    if isinstance(value, (Path, CompoundPath)) and not is_valid_item(value):
        logger.warning(name, error="invalid result")
        return GuardedResult(error=GeometryOperationFailure(name, "produced invalid geometry"))
    return GuardedResult(value=value)


def _closed_copy(path: Path) -> Path:
    segments = list(path.segments)
    first, last = segments[0], segments[-1]
    if len(segments) > 2 and first is not None and last is not None and (
        (first.x, first.y) == (last.x, last.y)
    ):
        # The trailing anchor duplicates the start: fold it into the first segment
        segments[0] = Segment(first.x, first.y, last.handle_in, first.handle_out)
        segments.pop()
    return Path(tuple(segments), closed=True)


def safe_close(path: Path) -> Path:
    """Return a closed version of ``path``; the input itself if invalid or already closed."""
    if not is_valid_path(path) or path.closed:
        return path
    return guarded(lambda: _closed_copy(path), "close").unwrap_or(path)


def safe_simplify(path: Path, tolerance: float, config: GeometryConfig | None = None) -> Path:
    """Simplify ``path``; the input itself when tolerance <= 0, invalid or on failure."""
    if tolerance <= 0 or not is_valid_path(path):
        return path
    cfg = config or _DEFAULT_CONFIG
    return guarded(
        lambda: kernel.simplify(path, tolerance, cfg.curve_tolerance), "simplify"
    ).unwrap_or(path)


def safe_offset(
    path: Path, distance: float, config: GeometryConfig | None = None
) -> Path | CompoundPath | None:
    """Offset ``path`` by ``distance``.

    Returns:
        The input unchanged for near-zero distances, None for invalid input,
        the input on failure, otherwise the offset Path or CompoundPath
    """
    cfg = config or _DEFAULT_CONFIG
    if abs(distance) < cfg.offset_epsilon:
        return path
    if not is_valid_path(path):
        return None
    return guarded(
        lambda: kernel.offset(
            path,
            distance,
            join_style=cfg.offset_join_style,
            mitre_limit=cfg.offset_mitre_limit,
            tolerance=cfg.curve_tolerance,
        ),
        "offset",
    ).unwrap_or(path)


def safe_offset_consumes(path: Path, distance: float, config: GeometryConfig | None = None) -> bool:
    """Whether offsetting ``path`` by ``distance`` leaves no area.

    False for invalid input or when the kernel fails.
    """
    cfg = config or _DEFAULT_CONFIG
    if not is_valid_path(path):
        return False
    return guarded(
        lambda: kernel.offset_consumes(
            path,
            distance,
            join_style=cfg.offset_join_style,
            mitre_limit=cfg.offset_mitre_limit,
            tolerance=cfg.curve_tolerance,
        ),
        "offset",
    ).unwrap_or(False)


def safe_unite(
    a: Path | CompoundPath,
    b: Path | CompoundPath,
    config: GeometryConfig | None = None,
) -> CompoundPath | None:
    """Union of two items; None if either is invalid or the union fails."""
    if not is_valid_item(a) or not is_valid_item(b):
        return None
    cfg = config or _DEFAULT_CONFIG
    return guarded(lambda: kernel.unite(a, b, cfg.curve_tolerance), "unite").value


def safe_create_and_unite(
    paths: Iterable[Path],
    fill_rule: FillRule = FillRule.NONZERO,
    config: GeometryConfig | None = None,
) -> CompoundPath | None:
    """Combine paths into one united compound.

    Invalid paths are skipped. When the union fails the un-united compound
    of clones is returned instead.

    Returns:
        The united compound, the plain compound, or None when no path is valid
    """
    valid = [p for p in paths if is_valid_path(p)]
    if not valid:
        return None

    compound = guarded(
        lambda: CompoundPath(tuple(p.clone() for p in valid), fill_rule), "create_compound"
    ).value
    if compound is None:
        return None

    united = safe_unite(compound, compound, config)
    if united is None:
        logger.warning("unite fallback", children=len(compound.children))
        return compound
    return united


def safe_clone(path: Path) -> Path | None:
    """Independent copy of a valid path, None otherwise."""
    if not is_valid_path(path):
        return None
    return guarded(path.clone, "clone").value


def safe_self_intersects(path: Path, config: GeometryConfig | None = None) -> bool:
    """Whether a valid path crosses itself; False when invalid or on failure."""
    if not is_valid_path(path):
        return False
    cfg = config or _DEFAULT_CONFIG
    return guarded(
        lambda: kernel.self_intersects(path, cfg.curve_tolerance), "self_intersects"
    ).unwrap_or(False)
