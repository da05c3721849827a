"""Diagnostics and results handed back to callers.

Every report type offers ``to_dict()`` producing the camelCase shape expected
by JSON consumers such as web front-ends.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    """Preflight issue severity."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True, slots=True)
class PreflightIssue:
    """A single preflight finding.

    Attributes:
        severity: How serious the finding is
        message: Short human-readable description
        detail: Optional longer explanation
        suggested_fix: Optional actionable advice
    """

    severity: Severity
    message: str
    detail: str | None = None
    suggested_fix: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"severity": self.severity.value, "message": self.message}
        if self.detail is not None:
            data["detail"] = self.detail
        if self.suggested_fix is not None:
            data["suggestedFix"] = self.suggested_fix
        return data


@dataclass(frozen=True, slots=True)
class PreflightStats:
    """Aggregate numbers gathered while checking a parsed document."""

    path_count: int = 0
    closed_paths: int = 0
    open_paths: int = 0
    total_points: int = 0
    width: float = 0.0
    height: float = 0.0
    has_intersections: bool = False
    tiny_islands_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "pathCount": self.path_count,
            "closedPaths": self.closed_paths,
            "openPaths": self.open_paths,
            "totalPoints": self.total_points,
            "boundingBox": {"width": self.width, "height": self.height},
            "hasIntersections": self.has_intersections,
            "tinyIslandsCount": self.tiny_islands_count,
        }


@dataclass(frozen=True)
class PreflightResult:
    """Outcome of the preflight checks.

    Attributes:
        passed: True when no issue has error severity
        issues: Findings in the order they were detected
        stats: Aggregate numbers
    """

    passed: bool
    issues: tuple[PreflightIssue, ...]
    stats: PreflightStats

    @classmethod
    def from_issues(
        cls, issues: list[PreflightIssue], stats: PreflightStats
    ) -> "PreflightResult":
        passed = not any(issue.severity is Severity.ERROR for issue in issues)
        return cls(passed=passed, issues=tuple(issues), stats=stats)

    @property
    def errors(self) -> list[PreflightIssue]:
        return [i for i in self.issues if i.severity is Severity.ERROR]

    @property
    def warnings(self) -> list[PreflightIssue]:
        return [i for i in self.issues if i.severity is Severity.WARNING]

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "issues": [issue.to_dict() for issue in self.issues],
            "stats": self.stats.to_dict(),
        }


@dataclass
class GenerationResult:
    """Outcome of a full outline-to-model conversion.

    Attributes:
        success: Whether a model was produced
        blob: Exported model bytes (success only)
        error: Failure message (failure only)
        processing_time: Wall time in milliseconds
        file_format: Export format of ``blob``
        triangle_count: Triangles in the exported mesh
        preflight: Preflight outcome, when preflight ran
        warnings: Non-fatal problems recovered from along the way
    """

    success: bool
    processing_time: float
    blob: bytes | None = None
    error: str | None = None
    file_format: str = "stl"
    triangle_count: int = 0
    preflight: PreflightResult | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.blob is not None:
            data["blob"] = self.blob
        if self.error is not None:
            data["error"] = self.error
        data["processingTime"] = self.processing_time
        return data
