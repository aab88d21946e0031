"""Tests for the MCP tool handlers."""

import asyncio
import json

from cardgrid_mcp.server import call_tool, list_tools

ROW = """
cards:
  - id: n0
    width: 900
  - id: n1
  - id: n2
  - id: n3
"""


def _call(name, arguments):
    result = asyncio.run(call_tool(name, arguments))
    assert len(result) == 1
    return result[0].text


def _call_json(name, arguments):
    payload = json.loads(_call(name, arguments))
    assert payload["status"] == "success"
    return payload


def test_lists_every_layout_tool():
    names = {tool.name for tool in asyncio.run(list_tools())}
    assert names == {
        "next_position",
        "arrange_cards",
        "rearrange_after_resize",
        "smart_placement",
        "branch_placement",
        "resolve_collision",
    }


def test_next_position():
    payload = _call_json("next_position", {"cards_yaml": ROW})
    assert payload["position"] == {"x": 32, "y": 292}


def test_arrange_cards():
    payload = _call_json("arrange_cards", {"cards_yaml": ROW})
    xs = {card["id"]: card["x"] for card in payload["cards"]}
    assert payload["count"] == 4
    assert xs == {"n0": 32, "n1": 972, "n2": 1292, "n3": 1612}


def test_rearrange_after_resize_with_unknown_id():
    payload = _call_json("rearrange_after_resize", {"cards_yaml": ROW, "resized_id": "nope"})
    assert [card["id"] for card in payload["cards"]] == ["n0", "n1", "n2", "n3"]


def test_smart_placement_with_anchor():
    payload = _call_json("smart_placement", {"cards_yaml": ROW, "anchor_id": "n1"})
    # n1 is still at its unarranged (0, 0) spot in the snapshot
    assert payload["position"]["x"] == 280 + 40


def test_branch_placement():
    snapshot = """
cards:
  - id: src
    x: 100
    y: 100
  - id: sib
    x: 420
    y: 100
"""
    payload = _call_json("branch_placement", {"cards_yaml": snapshot, "source_id": "src"})
    assert payload["position"] == {"x": 420, "y": 360}


def test_branch_placement_unknown_source():
    assert _call("branch_placement", {"cards_yaml": ROW, "source_id": "ghost"}) == (
        "Source card not found: ghost"
    )


def test_resolve_collision():
    snapshot = "cards:\n  - id: a\n    x: 0\n    y: 0\n"
    payload = _call_json("resolve_collision", {"cards_yaml": snapshot, "x": 10, "start_y": 0})
    assert payload["position"] == {"x": 10, "y": 260}


def test_parse_failure_is_reported_as_text():
    text = _call("arrange_cards", {"cards_yaml": ""})
    assert text.startswith("Failed to parse cards snapshot:")


def test_unknown_tool():
    assert _call("render_png", {}) == "Unknown tool: render_png"


def test_smart_placement_with_empty_anchor_uses_latest_card():
    payload = _call_json("smart_placement", {"cards_yaml": ROW, "anchor_id": ""})
    assert payload["position"]["x"] == 280 + 40
