"""Mesh exporter for writing printable models.

This module provides the MeshExporter class, which serializes triangle
meshes to STL using trimesh's exchange functions.
"""

from pathlib import Path

import trimesh
from trimesh.exchange.stl import export_stl, export_stl_ascii

from svgsolid.exceptions import ExportError

STL_HEADER_SIZE = 80


class MeshExporter:
    """Serializes meshes to binary or ASCII STL.

    Stateless: one exporter can serve any number of meshes.

    Example:
        exporter = MeshExporter()
        blob = exporter.export(mesh)
        exporter.write(mesh, Path("logo.stl"))
    """

    def __init__(self, binary: bool = True) -> None:
        """Initialize the exporter.

        Args:
            binary: Write binary STL (ASCII when False)
        """
        self.binary = binary

    @property
    def file_format(self) -> str:
        return "stl" if self.binary else "stl-ascii"

    def export(self, mesh: trimesh.Trimesh) -> bytes:
        """Serialize a mesh.

        Binary output is an 80-byte header, a little-endian uint32
        triangle count and one 50-byte record per triangle.

        Args:
            mesh: Mesh to serialize

        Returns:
            STL bytes

        Raises:
            ExportError: If the mesh is empty or serialization fails
        """
        if mesh is None or len(mesh.faces) == 0:
            raise ExportError("mesh has no triangles")

        try:
            if self.binary:
                return export_stl(mesh)
            return export_stl_ascii(mesh).encode("ascii")
        except (ValueError, TypeError, AttributeError) as e:
            raise ExportError(str(e)) from e

    def write(self, mesh: trimesh.Trimesh, output_path: Path) -> Path:
        """Serialize a mesh to a file.

        Args:
            mesh: Mesh to serialize
            output_path: Destination file

        Returns:
            The path written

        Raises:
            ExportError: If serialization or writing fails
        """
        return self.save(self.export(mesh), output_path)

    @staticmethod
    def save(blob: bytes, output_path: Path) -> Path:
        """Write already-serialized model bytes, creating parent directories.

        Raises:
            ExportError: If the file cannot be written
        """
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(blob)
        except OSError as e:
            raise ExportError(f"cannot write {output_path}: {e}") from e
        return output_path

    @staticmethod
    def get_output_path(input_path: Path, output_dir: Path | None = None) -> Path:
        """Generate the model path for an input file.

        Args:
            input_path: Source SVG path
            output_dir: Directory for the model (defaults to the input's)

        Returns:
            Path with the .stl suffix (e.g., "logo.svg" -> "logo.stl")
        """
        directory = output_dir if output_dir is not None else input_path.parent
        return directory / f"{input_path.stem}.stl"
