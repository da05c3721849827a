"""Tests for SVG reading, path conversion and STL export."""

import math
import struct
from pathlib import Path as FilePath

import pytest
import trimesh

from svgsolid.domain import CompoundPath, FillRule, Group, Path
from svgsolid.exceptions import ExportError, InputLoadError, ParseError
from svgsolid.io import MeshExporter, SvgReader
from svgsolid.io.converter import parse_transform, path_data_to_paths, recording_to_paths
from svgsolid.io.writer import STL_HEADER_SIZE


def svg(body: str) -> str:
    return f'<svg xmlns="http://www.w3.org/2000/svg">{body}</svg>'


def leaves(node) -> list:
    """Flatten a node tree into its Path and CompoundPath leaves."""
    if isinstance(node, Group):
        return [leaf for child in node.children for leaf in leaves(child)]
    return [node]


class TestParseTransform:
    """Tests for SVG transform attribute parsing."""

    def test_translate(self) -> None:
        assert parse_transform("translate(10, 20)").transformPoint((1, 1)) == (11, 21)
        assert parse_transform("translate(5)").transformPoint((1, 1)) == (6, 1)

    def test_scale(self) -> None:
        assert parse_transform("scale(2)").transformPoint((3, 4)) == (6, 8)
        assert parse_transform("scale(2 -1)").transformPoint((3, 4)) == (6, -4)

    def test_rotate_about_center(self) -> None:
        x, y = parse_transform("rotate(90 10 10)").transformPoint((20, 10))
        assert x == pytest.approx(10)
        assert y == pytest.approx(20)

    def test_skew(self) -> None:
        x, y = parse_transform("skewX(45)").transformPoint((0, 1))
        assert (x, y) == (pytest.approx(1), pytest.approx(1))

    def test_matrix(self) -> None:
        assert parse_transform("matrix(1 0 0 1 3 4)").transformPoint((0, 0)) == (3, 4)

    def test_list_applies_right_to_left(self) -> None:
        """In 'translate(10) scale(2)' the point is scaled first."""
        assert parse_transform("translate(10) scale(2)").transformPoint((1, 1)) == (12, 2)

    @pytest.mark.parametrize("value", ["translate(1 2 3)", "wobble(3)", "scale(2) junk"])
    def test_malformed(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_transform(value)


class TestPathConversion:
    """Tests for pen recordings to domain paths."""

    def test_closed_polygon(self) -> None:
        (path,) = path_data_to_paths("M0,0 L10,0 L10,10 Z")
        assert path.closed
        assert [s.to_tuple() for s in path.segments] == [(0, 0), (10, 0), (10, 10)]

    def test_open_polyline(self) -> None:
        (path,) = path_data_to_paths("M0,0 L10,0 L10,10")
        assert not path.closed
        assert len(path.segments) == 3

    def test_subpaths(self) -> None:
        paths = path_data_to_paths("M0,0 H10 V10 Z M20,0 H30 V10 Z")
        assert len(paths) == 2
        assert paths[1].segments[0].to_tuple() == (20, 0)

    def test_cubic_handles_are_relative(self) -> None:
        (path,) = path_data_to_paths("M0,0 C0,5 10,5 10,0")
        start, end = path.segments
        assert start.handle_out == (0, 5)
        assert end.handle_in == (0, 5)

    def test_quadratic_raised_to_cubic(self) -> None:
        (path,) = path_data_to_paths("M0,0 Q5,10 10,0")
        start, end = path.segments
        assert start.handle_out == (pytest.approx(10 / 3), pytest.approx(20 / 3))
        assert end.handle_in == (pytest.approx(-10 / 3), pytest.approx(20 / 3))

    def test_force_closed(self) -> None:
        (path,) = path_data_to_paths("M0,0 L10,0 L5,5 L0,0", force_closed=True)
        assert path.closed
        assert len(path.segments) == 3

    def test_transform_applied(self) -> None:
        (path,) = path_data_to_paths("M0,0 L10,0 L10,10 Z", transform=parse_transform("scale(2)"))
        assert path.segments[2].to_tuple() == (20, 20)

    def test_malformed_path_data(self) -> None:
        with pytest.raises(ValueError):
            path_data_to_paths("L 10 10")

    def test_recording_without_close(self) -> None:
        recording = [("moveTo", ((0, 0),)), ("lineTo", ((5, 0),)), ("endPath", ())]
        (path,) = recording_to_paths(recording)
        assert not path.closed


class TestSvgReader:
    """Tests for SvgReader."""

    def test_basic_shapes(self) -> None:
        markup = svg(
            '<rect width="10" height="5"/>'
            '<circle cx="20" cy="20" r="5"/>'
            '<ellipse cx="40" cy="20" rx="5" ry="3"/>'
            '<polygon points="0,0 5,0 5,5"/>'
            '<polyline points="0,0 5,0 5,5"/>'
            '<line x1="0" y1="0" x2="5" y2="5"/>'
        )
        nodes = leaves(SvgReader().read(markup).root)
        assert len(nodes) == 6
        rect, circle, ellipse, polygon, polyline, line = nodes
        assert rect.closed and polygon.closed
        assert circle.closed and ellipse.closed
        assert not polyline.closed and not line.closed
        assert circle.area == pytest.approx(math.pi * 25, rel=0.01)

    def test_groups_preserve_structure(self) -> None:
        markup = svg('<g id="logo"><g><rect width="1" height="1"/></g></g>')
        root = SvgReader().read(markup).root
        (logo,) = root.children
        assert isinstance(logo, Group)
        assert logo.name == "logo"
        assert isinstance(logo.children[0], Group)

    def test_transforms_compose_through_groups(self) -> None:
        markup = svg(
            '<g transform="translate(100, 0)">'
            '<rect transform="scale(2)" width="10" height="10"/>'
            "</g>"
        )
        (rect,) = leaves(SvgReader().read(markup).root)
        assert rect.bounds.min_x == 100
        assert rect.bounds.max_x == 120

    def test_multi_subpath_element_is_compound(self) -> None:
        markup = svg('<g fill-rule="evenodd"><path d="M0,0 H10 V10 H0 Z M2,2 H8 V8 H2 Z"/></g>')
        (node,) = leaves(SvgReader().read(markup).root)
        assert isinstance(node, CompoundPath)
        assert node.fill_rule is FillRule.EVENODD
        assert len(node.children) == 2

    def test_fill_rule_from_style(self) -> None:
        markup = svg('<path style="fill-rule: evenodd" d="M0,0 H10 V10 Z M2,2 H8 V8 Z"/>')
        (node,) = leaves(SvgReader().read(markup).root)
        assert node.fill_rule is FillRule.EVENODD

    def test_ignored_subtrees(self) -> None:
        markup = svg(
            "<defs><rect width='5' height='5'/></defs>"
            "<clipPath><rect width='5' height='5'/></clipPath>"
            "<linearGradient id='g'/>"
            "<style>.a { fill: red; }</style>"
            "<metadata>info</metadata>"
            '<rect width="10" height="10" fill="url(#g)"/>'
        )
        document = SvgReader().read(markup)
        assert len(leaves(document.root)) == 1
        assert document.skipped_features == []

    def test_skipped_features(self) -> None:
        markup = svg(
            '<rect width="10" height="10" fill="none" stroke="black"/>'
            '<g style="fill:none"><circle r="3"/></g>'
            '<rect width="10" height="10" style="display:none"/>'
            '<rect width="10" height="10" visibility="hidden"/>'
            '<image href="a.png"/><text>hi</text><use href="#x"/>'
        )
        document = SvgReader().read(markup)
        assert leaves(document.root) == []
        kinds = sorted(f.kind for f in document.skipped_features)
        assert kinds == ["hidden", "hidden", "image", "stroke-only", "stroke-only", "text", "use"]

    def test_malformed_elements_are_counted(self) -> None:
        markup = svg(
            '<path d="L 1 2"/>'
            '<rect width="abc" height="1"/>'
            "<circle/>"
            '<rect transform="wobble(1)" width="1" height="1"/>'
            '<rect width="10" height="10"/>'
        )
        document = SvgReader().read(markup)
        assert document.malformed_count == 4
        assert len(leaves(document.root)) == 1

    def test_not_svg(self) -> None:
        with pytest.raises(ParseError, match="expected <svg>"):
            SvgReader().read("<html></html>")

    def test_invalid_xml(self) -> None:
        with pytest.raises(ParseError, match="invalid XML"):
            SvgReader().read("<svg>")

    def test_deep_nesting_is_rejected(self) -> None:
        markup = svg("<g>" * 3000 + '<rect width="1" height="1"/>' + "</g>" * 3000)
        with pytest.raises(ParseError, match="too deep"):
            SvgReader().read(markup)

    def test_moderate_nesting_is_read(self) -> None:
        markup = svg("<g>" * 150 + '<rect width="1" height="1"/>' + "</g>" * 150)
        (rect,) = leaves(SvgReader().read(markup).root)
        assert isinstance(rect, Path)

    def test_namespace_free_document(self) -> None:
        (rect,) = leaves(SvgReader().read('<svg><rect width="2" height="2"/></svg>').root)
        assert isinstance(rect, Path)

    def test_load(self, tmp_path: FilePath) -> None:
        path = tmp_path / "logo.svg"
        path.write_text(svg('<rect width="1" height="1"/>'), encoding="utf-8")
        assert "<rect" in SvgReader.load(path)

    def test_load_missing_file(self, tmp_path: FilePath) -> None:
        with pytest.raises(InputLoadError, match="file not found"):
            SvgReader.load(tmp_path / "missing.svg")


class TestMeshExporter:
    """Tests for MeshExporter."""

    @pytest.fixture
    def box(self) -> trimesh.Trimesh:
        return trimesh.creation.box(extents=(1, 2, 3))

    def test_binary_layout(self, box: trimesh.Trimesh) -> None:
        blob = MeshExporter().export(box)
        (count,) = struct.unpack("<I", blob[STL_HEADER_SIZE:STL_HEADER_SIZE + 4])
        assert count == len(box.faces) == 12
        assert len(blob) == STL_HEADER_SIZE + 4 + 50 * count

    def test_ascii(self, box: trimesh.Trimesh) -> None:
        exporter = MeshExporter(binary=False)
        text = exporter.export(box).decode("ascii")
        assert text.startswith("solid")
        assert text.count("facet normal") == 12
        assert exporter.file_format == "stl-ascii"

    def test_empty_mesh(self) -> None:
        with pytest.raises(ExportError, match="no triangles"):
            MeshExporter().export(trimesh.Trimesh())

    def test_write_creates_directories(self, box: trimesh.Trimesh, tmp_path: FilePath) -> None:
        target = tmp_path / "nested" / "dir" / "box.stl"
        written = MeshExporter().write(box, target)
        assert written == target
        assert target.stat().st_size == STL_HEADER_SIZE + 4 + 50 * 12

    def test_get_output_path(self) -> None:
        assert MeshExporter.get_output_path(FilePath("art/logo.svg")) == FilePath("art/logo.stl")
        assert MeshExporter.get_output_path(
            FilePath("art/logo.svg"), FilePath("out")
        ) == FilePath("out/logo.stl")
