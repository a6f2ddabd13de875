"""SCXML document accessor package."""

from statechart_engines.scxml_document.accessor import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    SCXML_NS,
    VIZ_NS,
    Geometry,
    ScxmlDocument,
    ScxmlParseError,
    find_state_element,
    parse_document,
    serialize_document,
)

__all__ = [
    "DEFAULT_HEIGHT",
    "DEFAULT_WIDTH",
    "SCXML_NS",
    "VIZ_NS",
    "Geometry",
    "ScxmlDocument",
    "ScxmlParseError",
    "find_state_element",
    "parse_document",
    "serialize_document",
]
