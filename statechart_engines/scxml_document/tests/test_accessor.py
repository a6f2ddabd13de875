from __future__ import annotations

import pytest

from statechart_engines.scxml_document.accessor import (
    VIZ_NS,
    Geometry,
    ScxmlParseError,
    ensure_viz_namespace,
    release_viz_namespace,
    find_state_element,
    format_geometry,
    format_waypoints,
    parse_document,
    parse_geometry,
    parse_waypoints,
    round_half_up,
    serialize_document,
)

NAMESPACED = """<?xml version="1.0" encoding="UTF-8"?>
<scxml xmlns="http://www.w3.org/2005/07/scxml" xmlns:viz="http://visual-scxml-editor/metadata" version="1.0" initial="a">
  <state id="a" viz:xywh="10,20,160,80">
    <transition event="go" target="b"/>
  </state>
  <parallel id="p">
    <state id="b"/>
  </parallel>
  <final id="f"/>
</scxml>
"""

PLAIN = """<scxml version="1.0" initial="a"><state id="a"/><state id="b"/></scxml>"""


def test_round_trip_keeps_declaration_and_trailing_newline():
    doc = parse_document(NAMESPACED)
    assert serialize_document(doc) == NAMESPACED


def test_find_state_matches_local_name_with_and_without_namespace():
    doc = parse_document(NAMESPACED)
    assert find_state_element(doc, "p").get("id") == "p"
    assert find_state_element(doc, "b") is not None
    assert find_state_element(doc, "f") is not None
    assert find_state_element(doc, "missing") is None

    plain = parse_document(PLAIN)
    assert find_state_element(plain, "b") is not None


def test_malformed_and_empty_input_raise_parse_error():
    with pytest.raises(ScxmlParseError) as exc:
        parse_document("<scxml><state id='a'></scxml>")
    assert "XML parsing error" in str(exc.value)
    with pytest.raises(ScxmlParseError):
        parse_document("   ")


def test_ensure_viz_namespace_declares_prefix_once():
    doc = parse_document(PLAIN)
    assert ensure_viz_namespace(doc) is True
    assert ensure_viz_namespace(doc) is False
    text = serialize_document(doc)
    assert text.count(f'xmlns:viz="{VIZ_NS}"') == 1


def test_geometry_codec_accepts_legacy_whitespace_and_defaults():
    assert parse_geometry("10,20,300,150") == Geometry(10, 20, 300, 150)
    assert parse_geometry("10 20 300 150") == Geometry(10, 20, 300, 150)
    assert parse_geometry("5,6") == Geometry(5, 6, 160, 80)
    assert parse_geometry("5") is None
    assert parse_geometry("") is None
    assert parse_geometry("a,b") is None
    assert format_geometry(10.5, 20.4, 159.5, 80) == "11,20,160,80"


def test_round_half_up_matches_editor_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(0.49) == 0


def test_waypoint_codec_skips_bad_points():
    assert parse_waypoints("1,2;3.5,4;bad;7") == [(1.0, 2.0), (3.5, 4.0)]
    assert parse_waypoints("") == []
    assert format_waypoints([(1.4, 2.6), (3, 4)]) == "1,3;3,4"


def test_viz_declaration_leaves_nested_declarations_alone():
    text = (
        '<scxml xmlns="http://www.w3.org/2005/07/scxml" version="1.0">'
        '<state id="a"><datamodel xmlns:ext="urn:example:ext"/></state></scxml>'
    )
    doc = parse_document(text)
    ensure_viz_namespace(doc)
    assert 'xmlns:ext="urn:example:ext"' in serialize_document(doc)

    assert release_viz_namespace(doc) is True
    assert serialize_document(doc) == text


def test_release_viz_namespace_keeps_declaration_in_use():
    doc = parse_document(NAMESPACED)
    assert release_viz_namespace(doc) is False
    assert serialize_document(doc) == NAMESPACED
