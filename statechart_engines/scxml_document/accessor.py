"""SCXML document accessor.

Parses document text into a mutable lxml tree, serializes it back and offers the
lookups and attribute codecs shared by the mutation commands. State elements
are matched on their local name so documents with or without the SCXML default
namespace behave the same.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

from lxml import etree

logger = logging.getLogger(__name__)

SCXML_NS = "http://www.w3.org/2005/07/scxml"
VIZ_NS = "http://visual-scxml-editor/metadata"
VIZ_PREFIX = "viz"

STATE_TAGS = frozenset({"state", "parallel", "final"})

DEFAULT_WIDTH = 160
DEFAULT_HEIGHT = 80

_DECLARATION_RE = re.compile(r"^\s*<\?xml[\s\S]*?\?>\s*")
_GEOMETRY_SPLIT_RE = re.compile(r"[,\s]+")


class ScxmlParseError(ValueError):
    """Raised when document text is not well-formed XML."""


@dataclass
class ScxmlDocument:
    tree: etree._ElementTree
    declaration: str = ""
    trailer: str = ""

    @property
    def root(self) -> etree._Element:
        return self.tree.getroot()


class Geometry(NamedTuple):
    x: float
    y: float
    width: float
    height: float


def _parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)


def parse_document(text: str) -> ScxmlDocument:
    """Parse document text. Raises ScxmlParseError for malformed input."""
    if text is None or not text.strip():
        raise ScxmlParseError("XML parsing error: document is empty")

    match = _DECLARATION_RE.match(text)
    declaration = match.group(0) if match else ""
    body = text[len(declaration):]
    stripped = body.rstrip()
    trailer = body[len(stripped):]

    try:
        root = etree.fromstring(stripped.encode("utf-8"), _parser())
    except etree.XMLSyntaxError as exc:
        raise ScxmlParseError(f"XML parsing error: {exc}") from exc
    return ScxmlDocument(tree=root.getroottree(), declaration=declaration, trailer=trailer)


def serialize_document(doc: ScxmlDocument) -> str:
    body = etree.tostring(doc.tree, encoding="unicode")
    return f"{doc.declaration}{body}{doc.trailer}"


def local_name(element: etree._Element) -> str:
    # comments and processing instructions carry a factory, not a string tag
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname


def viz_attr(name: str) -> str:
    return f"{{{VIZ_NS}}}{name}"


def is_state_element(element: etree._Element) -> bool:
    return local_name(element) in STATE_TAGS


def iter_state_elements(root: etree._Element) -> Iterator[etree._Element]:
    for element in root.iter():
        if is_state_element(element):
            yield element


def find_state_element(doc: ScxmlDocument, state_id: str) -> Optional[etree._Element]:
    """First <state>, <parallel> or <final> whose id equals state_id."""
    for element in iter_state_elements(doc.root):
        if element.get("id") == state_id:
            return element
    return None


def child_elements(element: etree._Element, name: str) -> List[etree._Element]:
    """Direct children with the given local name."""
    return [child for child in element if local_name(child) == name]


def child_states(element: etree._Element) -> List[etree._Element]:
    return [child for child in element if is_state_element(child)]


def transitions_of(element: etree._Element) -> List[etree._Element]:
    return child_elements(element, "transition")


def iter_transitions(root: etree._Element) -> Iterator[etree._Element]:
    for element in root.iter():
        if local_name(element) == "transition":
            yield element


def detach_element(element: etree._Element) -> None:
    """Remove element from its parent, keeping the following sibling's indentation."""
    parent = element.getparent()
    if parent is None:
        return
    tail = element.tail
    previous = element.getprevious()
    if tail is not None and not tail.strip():
        if previous is not None:
            if previous.tail is None or not previous.tail.strip():
                previous.tail = tail
        elif parent.text is None or not parent.text.strip():
            parent.text = tail
    parent.remove(element)


def insert_element(parent: etree._Element, element: etree._Element, position: Optional[int] = None) -> None:
    """Insert element at a child position (append when None), matching sibling indentation."""
    children = list(parent)
    if position is None or position >= len(children):
        parent.append(element)
        element.tail = None
        if children:
            last = children[-1]
            element.tail = _blank(last.tail)
            if _blank(parent.text) is not None:
                last.tail = parent.text
        return
    position = max(position, 0)
    tail = _blank(children[position - 1].tail if position > 0 else parent.text)
    parent.insert(position, element)
    element.tail = tail


def _blank(text: Optional[str]) -> Optional[str]:
    return text if text is not None and not text.strip() else None


def append_element(parent: etree._Element, name: str) -> etree._Element:
    """Append a child element in the parent's namespace (if any)."""
    namespace = etree.QName(parent).namespace
    tag = f"{{{namespace}}}{name}" if namespace else name
    children = list(parent)
    element = etree.SubElement(parent, tag)
    if children:
        last = children[-1]
        element.tail = _blank(last.tail)
        if _blank(parent.text) is not None:
            last.tail = parent.text
    return element


def _declared_prefixes(root: etree._Element) -> set:
    """Every named prefix in scope anywhere below (and on) root."""
    return {prefix for element in root.iter(tag=etree.Element) for prefix in element.nsmap if prefix}


def uses_viz_namespace(root: etree._Element) -> bool:
    viz_prefix = f"{{{VIZ_NS}}}"
    for element in root.iter(tag=etree.Element):
        if element.tag.startswith(viz_prefix):
            return True
        if any(name.startswith(viz_prefix) for name in element.attrib):
            return True
    return False


def ensure_viz_namespace(doc: ScxmlDocument) -> bool:
    """Declare xmlns:viz on the root. Returns True when the declaration was added."""
    root = doc.root
    if VIZ_NS in root.nsmap.values():
        return False
    if VIZ_PREFIX in root.nsmap:
        logger.warning(
            "Prefix %r is bound to %s; visual metadata will use a generated prefix",
            VIZ_PREFIX,
            root.nsmap[VIZ_PREFIX],
        )
        return False
    keep = sorted(_declared_prefixes(root) | {VIZ_PREFIX})
    etree.cleanup_namespaces(doc.tree, top_nsmap={VIZ_PREFIX: VIZ_NS}, keep_ns_prefixes=keep)
    return True


def release_viz_namespace(doc: ScxmlDocument) -> bool:
    """Drop the root xmlns:viz declaration once nothing in the document uses it."""
    root = doc.root
    if root.nsmap.get(VIZ_PREFIX) != VIZ_NS or uses_viz_namespace(root):
        return False
    keep = sorted(_declared_prefixes(root) - {VIZ_PREFIX})
    etree.cleanup_namespaces(doc.tree, keep_ns_prefixes=keep)
    return True


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_geometry(raw: Optional[str]) -> Optional[Geometry]:
    """Decode "x,y,width,height" (legacy whitespace form accepted)."""
    if not raw or not raw.strip():
        return None
    parts = [part for part in _GEOMETRY_SPLIT_RE.split(raw.strip()) if part]
    try:
        values = [float(part) for part in parts]
    except ValueError:
        logger.debug("Unreadable geometry %r", raw)
        return None
    if len(values) < 2:
        return None
    width = values[2] if len(values) > 2 else DEFAULT_WIDTH
    height = values[3] if len(values) > 3 else DEFAULT_HEIGHT
    return Geometry(values[0], values[1], width, height)


def format_geometry(x: float, y: float, width: float, height: float) -> str:
    return ",".join(str(round_half_up(v)) for v in (x, y, width, height))


def read_geometry(element: etree._Element) -> Optional[Geometry]:
    return parse_geometry(element.get(viz_attr("xywh")))


def write_geometry(element: etree._Element, x: float, y: float, width: float, height: float) -> None:
    element.set(viz_attr("xywh"), format_geometry(x, y, width, height))


def parse_waypoints(raw: Optional[str]) -> List[Tuple[float, float]]:
    """Decode "x1,y1;x2,y2;..." skipping unreadable points."""
    points: List[Tuple[float, float]] = []
    if not raw:
        return points
    for part in raw.split(";"):
        coords = part.split(",")
        if len(coords) < 2:
            continue
        try:
            x, y = float(coords[0].strip()), float(coords[1].strip())
        except ValueError:
            continue
        if math.isnan(x) or math.isnan(y):
            continue
        points.append((x, y))
    return points


def format_waypoints(points: Sequence[Tuple[float, float]]) -> str:
    return ";".join(f"{round_half_up(x)},{round_half_up(y)}" for x, y in points)
