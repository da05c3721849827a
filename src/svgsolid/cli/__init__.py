"""Command-line interface for svgsolid.

This module provides the CLI using Typer with rich output for
user-friendly feedback and progress reporting.

Key features:
- Preset profiles with per-setting overrides
- Preflight-only checking
- Progress bars for batch conversion
- Verbose/quiet output modes
- Detailed error reporting
"""

from svgsolid.cli.app import cli, main

__all__ = ["cli", "main"]
