"""Cardgrid-MCP server — MCP tools exposing the card layout engine."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .freeflow import branch_placement, resolve_collision, smart_placement
from .masonry import arrange_all, next_position, rearrange_after_resize
from .models import Card, CardPosition
from .parser import card_to_dict, parse_yaml

logger = logging.getLogger(__name__)

# --- Constants ---
LOG_LEVEL = os.environ.get("CARDGRID_LOG_LEVEL", "INFO").upper()

server = Server("cardgrid-mcp")


_CARDS_YAML_PROPERTY = {
    "type": "string",
    "description": (
        "YAML snapshot of the cards on the canvas. Example:\n"
        "cards:\n"
        "  - id: intro\n"
        "    x: 32\n"
        "    y: 32\n"
        "    width: 472\n"
        "    created_at: 2024-01-01T09:00:00Z\n"
        "  - id: notes\n"
        "    height: 400\n"
        "\n"
        "width/height default to 280x220. Cards without created_at keep list order. "
        "Set pinned: true to keep a card out of the masonry grid."
    ),
}


# --- Tool definitions ---

@server.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="next_position",
            description=(
                "Preview where a new default-size card would land in the masonry grid "
                "(shortest column, lowest index on ties). Returns {x, y}."
            ),
            inputSchema={
                "type": "object",
                "properties": {"cards_yaml": _CARDS_YAML_PROPERTY},
                "required": ["cards_yaml"],
            },
        ),
        Tool(
            name="arrange_cards",
            description=(
                "Run a full masonry pass over every unpinned card. Wide cards push only "
                "vertically-overlapping neighbors in the next column. Returns the "
                "repositioned cards in input order."
            ),
            inputSchema={
                "type": "object",
                "properties": {"cards_yaml": _CARDS_YAML_PROPERTY},
                "required": ["cards_yaml"],
            },
        ),
        Tool(
            name="rearrange_after_resize",
            description=(
                "Re-derive the masonry layout after one card was resized. The snapshot "
                "must already carry the new dimensions."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "cards_yaml": _CARDS_YAML_PROPERTY,
                    "resized_id": {
                        "type": "string",
                        "description": "Id of the card whose size changed.",
                    },
                },
                "required": ["cards_yaml", "resized_id"],
            },
        ),
        Tool(
            name="smart_placement",
            description=(
                "Free-flow mode: propose a spot to the right of an anchor card, pushed "
                "down past any collisions. The anchor defaults to the newest card."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "cards_yaml": _CARDS_YAML_PROPERTY,
                    "anchor_id": {
                        "type": "string",
                        "description": "Optional anchor card id.",
                    },
                },
                "required": ["cards_yaml"],
            },
        ),
        Tool(
            name="branch_placement",
            description=(
                "Propose a spot for a card branched from a source card: to its right, "
                "stacked below any siblings already there."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "cards_yaml": _CARDS_YAML_PROPERTY,
                    "source_id": {
                        "type": "string",
                        "description": "Id of the card being branched from.",
                    },
                },
                "required": ["cards_yaml", "source_id"],
            },
        ),
        Tool(
            name="resolve_collision",
            description=(
                "Slide a default-size card down from (x, start_y) until it clears every "
                "card in the snapshot. Gives up after 200 steps and returns the last spot."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "cards_yaml": _CARDS_YAML_PROPERTY,
                    "x": {"type": "number"},
                    "start_y": {"type": "number"},
                },
                "required": ["cards_yaml", "x", "start_y"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict) -> list[TextContent]:
    if name == "next_position":
        return await _next_position(arguments)
    elif name == "arrange_cards":
        return await _arrange_cards(arguments)
    elif name == "rearrange_after_resize":
        return await _rearrange_after_resize(arguments)
    elif name == "smart_placement":
        return await _smart_placement(arguments)
    elif name == "branch_placement":
        return await _branch_placement(arguments)
    elif name == "resolve_collision":
        return await _resolve_collision(arguments)
    else:
        return [TextContent(type="text", text=f"Unknown tool: {name}")]


# --- Result helpers ---

def _error(message: str) -> list[TextContent]:
    return [TextContent(type="text", text=message)]


def _success(payload: dict[str, Any]) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps({"status": "success", **payload}))]


def _position_result(position: CardPosition) -> list[TextContent]:
    return _success({"position": {"x": position.x, "y": position.y}})


def _cards_result(cards: list[Card]) -> list[TextContent]:
    return _success({
        "count": len(cards),
        "cards": [card_to_dict(card) for card in cards],
    })


def _load_cards(args: dict) -> list[Card]:
    return parse_yaml(args["cards_yaml"]).cards


# --- Tool handlers ---

async def _next_position(args: dict) -> list[TextContent]:
    try:
        cards = _load_cards(args)
    except Exception as e:
        return _error(f"Failed to parse cards snapshot: {e}")
    return _position_result(next_position(cards))


async def _arrange_cards(args: dict) -> list[TextContent]:
    try:
        cards = _load_cards(args)
    except Exception as e:
        return _error(f"Failed to parse cards snapshot: {e}")
    logger.info("Arranging %d cards", len(cards))
    return _cards_result(arrange_all(cards))


async def _rearrange_after_resize(args: dict) -> list[TextContent]:
    try:
        cards = _load_cards(args)
    except Exception as e:
        return _error(f"Failed to parse cards snapshot: {e}")
    resized_id = args["resized_id"]
    logger.info("Rearranging %d cards after resize of %s", len(cards), resized_id)
    return _cards_result(rearrange_after_resize(cards, resized_id))


async def _smart_placement(args: dict) -> list[TextContent]:
    try:
        cards = _load_cards(args)
    except Exception as e:
        return _error(f"Failed to parse cards snapshot: {e}")
    return _position_result(smart_placement(cards, args.get("anchor_id")))


async def _branch_placement(args: dict) -> list[TextContent]:
    try:
        cards = _load_cards(args)
    except Exception as e:
        return _error(f"Failed to parse cards snapshot: {e}")

    source_id = args["source_id"]
    source = next((card for card in cards if card.id == source_id), None)
    if source is None:
        return _error(f"Source card not found: {source_id}")
    return _position_result(branch_placement(source, cards))


async def _resolve_collision(args: dict) -> list[TextContent]:
    try:
        cards = _load_cards(args)
    except Exception as e:
        return _error(f"Failed to parse cards snapshot: {e}")
    return _position_result(
        resolve_collision(float(args["x"]), float(args["start_y"]), cards)
    )


def main():
    """Entry point for the MCP server."""
    import asyncio

    # stdout carries the MCP protocol; logs go to stderr
    logging.basicConfig(
        level=LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    asyncio.run(_run())


async def _run():
    logger.info("Starting cardgrid-mcp server")
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    main()
