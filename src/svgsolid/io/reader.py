"""SVG reader for loading outline documents.

This module provides the SvgReader class, which walks an SVG element tree
and builds the domain node tree (Group, CompoundPath, Path). Shape elements
are turned into path data by fontTools' svgLib PathBuilder and converted
through pen recordings (see :mod:`svgsolid.io.converter`).
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path as FilePath

from fontTools.misc.transform import Identity, Transform
from fontTools.svgLib.path.shapes import PathBuilder

from svgsolid.domain import CompoundPath, FillRule, Group, Node, Path, SkippedFeature
from svgsolid.exceptions import InputLoadError, ParseError
from svgsolid.io.converter import parse_transform, path_data_to_paths

logger = logging.getLogger(__name__)

# Elements converted to geometry
SHAPE_TAGS = frozenset({"path", "rect", "circle", "ellipse", "polygon", "polyline", "line"})

# Shapes that are closed by definition even without a closing command
CLOSED_SHAPE_TAGS = frozenset({"circle", "ellipse"})

# Containers whose children are walked
CONTAINER_TAGS = frozenset({"svg", "g", "a", "switch"})

# Subtrees that never render directly and are ignored silently
IGNORED_TAGS = frozenset(
    {
        "defs",
        "clippath",
        "mask",
        "pattern",
        "lineargradient",
        "radialgradient",
        "style",
        "metadata",
        "symbol",
        "title",
        "desc",
        "marker",
        "filter",
        "script",
    }
)

# Rendered features that have no outline to extract
UNSUPPORTED_TAGS = {
    "image": "image",
    "text": "text",
    "use": "use",
    "foreignobject": "foreign-object",
}

# Deepest container nesting walked; the tree is walked recursively
MAX_NESTING_DEPTH = 200

_STYLE_SPLIT_RE = re.compile(r"\s*;\s*")


def _local_tag(tag: object) -> str | None:
    if not isinstance(tag, str):
        return None
    return (tag.split("}", 1)[1] if "}" in tag else tag).lower()


def _style(element: ET.Element) -> dict[str, str]:
    """Merge presentation attributes with the inline style (style wins)."""
    props = {
        key: element.attrib[key].strip()
        for key in ("fill", "fill-rule", "display", "visibility")
        if key in element.attrib
    }
    for declaration in _STYLE_SPLIT_RE.split(element.attrib.get("style", "")):
        if ":" in declaration:
            key, value = declaration.split(":", 1)
            props[key.strip().lower()] = value.strip()
    return props


def _describe(element: ET.Element, tag: str) -> str:
    element_id = element.attrib.get("id")
    return f"<{tag} id={element_id!r}>" if element_id else f"<{tag}>"


@dataclass(frozen=True)
class _Context:
    """Inherited state while walking the element tree."""

    transform: Transform = Identity
    fill: str = "black"
    fill_rule: FillRule = FillRule.NONZERO
    depth: int = 0


@dataclass
class SvgDocument:
    """Result of reading an SVG document.

    Attributes:
        root: Node tree mirroring the document structure
        skipped_features: Unsupported features that were not converted
        malformed_count: Shape elements whose data could not be parsed
    """

    root: Group
    skipped_features: list[SkippedFeature] = field(default_factory=list)
    malformed_count: int = 0


class SvgReader:
    """Builds domain node trees from SVG markup.

    Example:
        document = SvgReader().read(markup)
        for node in document.root.children:
            ...
    """

    def __init__(self) -> None:
        self._skipped: list[SkippedFeature] = []
        self._malformed = 0

    @staticmethod
    def load(svg_path: FilePath) -> str:
        """Read SVG markup from disk.

        Raises:
            InputLoadError: If the file is missing or unreadable
        """
        if not svg_path.exists():
            raise InputLoadError(str(svg_path), "file not found")
        try:
            return svg_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise InputLoadError(str(svg_path), str(e)) from e

    def read(self, markup: str) -> SvgDocument:
        """Parse markup into a node tree.

        Args:
            markup: SVG document text

        Returns:
            SvgDocument with the node tree and skipped features

        Raises:
            ParseError: If the markup is not well-formed SVG or nests too deeply
        """
        self._skipped = []
        self._malformed = 0

        try:
            root = ET.fromstring(markup)
        except ET.ParseError as e:
            raise ParseError(f"invalid XML: {e}") from e

        if _local_tag(root.tag) != "svg":
            raise ParseError(f"root element is <{_local_tag(root.tag)}>, expected <svg>")

        node = self._walk(root, _Context())
        tree = node if isinstance(node, Group) else Group(())
        return SvgDocument(root=tree, skipped_features=self._skipped, malformed_count=self._malformed)

    def _skip(self, kind: str, element: ET.Element, tag: str) -> None:
        feature = SkippedFeature(kind=kind, element=_describe(element, tag))
        logger.debug("Skipping %s element %s", kind, feature.element)
        self._skipped.append(feature)

    def _walk(self, element: ET.Element, context: _Context) -> Node | None:
        tag = _local_tag(element.tag)
        if tag is None or tag in IGNORED_TAGS:
            return None

        style = _style(element)
        if style.get("display") == "none" or style.get("visibility") == "hidden":
            self._skip("hidden", element, tag)
            return None

        if tag in UNSUPPORTED_TAGS:
            self._skip(UNSUPPORTED_TAGS[tag], element, tag)
            return None

        if tag not in CONTAINER_TAGS and tag not in SHAPE_TAGS:
            return None

        transform = context.transform
        if "transform" in element.attrib:
            try:
                transform = transform.transform(parse_transform(element.attrib["transform"]))
            except ValueError as e:
                logger.debug("Bad transform on %s: %s", _describe(element, tag), e)
                self._malformed += 1
                return None

        fill_rule = context.fill_rule
        if style.get("fill-rule") in ("nonzero", "evenodd"):
            fill_rule = FillRule(style["fill-rule"])
        context = _Context(
            transform=transform,
            fill=style.get("fill", context.fill),
            fill_rule=fill_rule,
            depth=context.depth + 1,
        )

        if tag in CONTAINER_TAGS:
            if context.depth > MAX_NESTING_DEPTH:
                raise ParseError(f"document nesting too deep (over {MAX_NESTING_DEPTH} levels)")
            children = []
            for child in element:
                node = self._walk(child, context)
                if node is not None:
                    children.append(node)
            return Group(tuple(children), name=element.attrib.get("id"))

        return self._shape(element, tag, context)

    def _shape(self, element: ET.Element, tag: str, context: _Context) -> Node | None:
        if context.fill == "none":
            self._skip("stroke-only", element, tag)
            return None

        # PathBuilder only understands matrix() transforms; ours are already composed
        attrib = {k: v for k, v in element.attrib.items() if k != "transform"}
        builder = PathBuilder()
        try:
            builder.add_path_from_element(ET.Element(tag, attrib))
            if not builder.paths:
                return None
            paths: list[Path] = []
            for d in builder.paths:
                paths.extend(
                    path_data_to_paths(
                        d,
                        transform=context.transform if context.transform != Identity else None,
                        force_closed=tag in CLOSED_SHAPE_TAGS,
                    )
                )
        except (ValueError, TypeError, IndexError) as e:
            logger.debug("Malformed %s: %s", _describe(element, tag), e)
            self._malformed += 1
            return None

        if not paths:
            return None
        if len(paths) == 1:
            return paths[0]
        return CompoundPath(tuple(paths), context.fill_rule)
