"""Configuration management for svgsolid.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments, profile presets or defaults.

Key classes:
- GeometryConfig: 2D geometry and preflight settings
- MeshConfig: Extrusion and export settings
- ProcessingConfig: Worker and deadline settings
- LoggingConfig: Logging settings
- SvgSolidSettings: Main application settings
- ProfileSettings: Per-conversion extrusion settings
- Profile: Named preset with recommended ranges
"""

from svgsolid.config.profiles import (
    DEFAULT_PROFILE_ID,
    PROFILES,
    Profile,
    ProfileConstraints,
    ProfileSettings,
    get_profile,
)
from svgsolid.config.settings import (
    GeometryConfig,
    JoinStyle,
    LoggingConfig,
    MeshConfig,
    ProcessingConfig,
    SvgSolidSettings,
    get_default_settings,
)

__all__ = [
    "DEFAULT_PROFILE_ID",
    "PROFILES",
    "GeometryConfig",
    "JoinStyle",
    "LoggingConfig",
    "MeshConfig",
    "ProcessingConfig",
    "Profile",
    "ProfileConstraints",
    "ProfileSettings",
    "SvgSolidSettings",
    "get_default_settings",
    "get_profile",
]
