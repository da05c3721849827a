"""svgsolid - Turn 2D vector outlines into printable 3D solids.

svgsolid is a library and CLI tool that reads SVG outline markup, validates and
cleans the geometry (close, simplify, offset, island removal, boolean union),
extrudes the resulting region into a triangulated solid and exports it as STL.

Example:
    $ svgsolid logo.svg --profile logo-sign

This will create logo.stl with the outline extruded on top of a base slab.
"""

__version__ = "0.1.0"
__author__ = "svgsolid contributors"

__all__ = ["__author__", "__version__"]
