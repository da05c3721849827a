"""Outline and model I/O layer for svgsolid.

This module handles reading SVG documents and writing STL models. It
provides a clean abstraction layer between fonttools' svgLib, trimesh and
the domain models.

Key responsibilities:
- Load SVG markup from disk
- Convert SVG elements to domain node trees
- Serialize meshes to binary or ASCII STL

Key classes:
- SvgReader: Load SVG documents and build node trees
- MeshExporter: Serialize meshes
"""

from svgsolid.io.reader import SvgDocument, SvgReader
from svgsolid.io.writer import MeshExporter

__all__ = [
    "MeshExporter",
    "SvgDocument",
    "SvgReader",
]
