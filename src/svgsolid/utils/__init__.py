"""Utility functions for svgsolid.

This module provides utility functions including:

- Logging setup and configuration
- Conversion statistics and progress logging
"""

from svgsolid.utils.logging import (
    ConversionLogger,
    ConversionStats,
    configure_logging,
)

__all__ = [
    "ConversionLogger",
    "ConversionStats",
    "configure_logging",
]
