"""Configuration settings for svgsolid."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from svgsolid.domain.path import FillRule


class JoinStyle(str, Enum):
    """Corner treatment used when offsetting outlines."""

    ROUND = "round"
    MITRE = "mitre"
    BEVEL = "bevel"


class GeometryConfig(BaseModel):
    """Configuration for 2D geometry operations and preflight diagnostics.

    Distances are in document units (the units of the SVG user space,
    usually millimetres for print-oriented artwork).
    """

    curve_tolerance: float = Field(
        default=0.05,
        gt=0.0,
        le=5.0,
        description="Maximum deviation when flattening Bezier curves",
    )
    offset_epsilon: float = Field(
        default=0.001,
        ge=0.0,
        description="Offsets with a smaller magnitude are treated as no-ops",
    )
    offset_join_style: JoinStyle = Field(
        default=JoinStyle.MITRE,
        description="Corner treatment when offsetting paths",
    )
    offset_mitre_limit: float = Field(
        default=10.0,
        ge=1.0,
        description="Mitre ratio limit for mitred offset corners",
    )
    fill_rule: FillRule = Field(
        default=FillRule.NONZERO,
        description="Fill rule applied when uniting the collected paths",
    )
    high_node_threshold: int = Field(
        default=500,
        ge=1,
        description="Average segments per path above which preflight warns",
    )
    intersection_check_limit: int = Field(
        default=3,
        ge=0,
        description="Number of paths checked for self-intersection in preflight",
    )
    max_dimension: float = Field(
        default=300.0,
        gt=0.0,
        description="Largest bounding dimension before preflight warns",
    )
    min_dimension: float = Field(
        default=10.0,
        ge=0.0,
        description="Smallest bounding dimension before preflight warns",
    )


class MeshConfig(BaseModel):
    """Configuration for extrusion and export."""

    curve_segments: int = Field(
        default=12,
        ge=1,
        le=256,
        description="Straight pieces used to sample each cubic edge",
    )
    binary_stl: bool = Field(
        default=True,
        description="Write binary STL (ASCII when False)",
    )


class ProcessingConfig(BaseModel):
    """Configuration for request processing."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes for batch conversion (None = auto)",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0.0,
        description="Deadline for a single conversion (None = no deadline)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class SvgSolidSettings(BaseModel):
    """Main application settings."""

    geometry: GeometryConfig = Field(default_factory=GeometryConfig)
    mesh: MeshConfig = Field(default_factory=MeshConfig)
    processing: ProcessingConfig = Field(default_factory=ProcessingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> SvgSolidSettings:
    """Get default application settings."""
    return SvgSolidSettings()
