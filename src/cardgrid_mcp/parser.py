"""YAML snapshot parser for Cardgrid-MCP.

A snapshot is the caller's card collection in a flat, hand-editable form:

    free_flow: false
    cards:
      - id: intro
        x: 32
        y: 32
        width: 472
        created_at: 2024-01-01T09:00:00Z
      - id: notes
        height: 400
        pinned: true
        data:
          heading: "Meeting notes"

Cards without ``created_at`` are ordered by their position in the list.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import yaml

from .board import CardBoard
from .models import Card, CardPosition

# Base timestamp for cards that don't declare one; list order is kept by
# adding one second per index.
SNAPSHOT_EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)

_CARD_KEYS = {"id", "x", "y", "position", "width", "height", "created_at", "updated_at", "pinned", "data"}


def parse_yaml(yaml_str: str) -> CardBoard:
    """Parse a YAML snapshot string into a CardBoard."""
    data = yaml.safe_load(yaml_str)
    if not data:
        raise ValueError("Empty YAML input")
    if not isinstance(data, dict):
        raise ValueError("Snapshot must be a mapping with a 'cards' list")

    cards = [_parse_card(card_data, index) for index, card_data in enumerate(data.get("cards") or [])]
    return CardBoard(cards=cards, free_flow=bool(data.get("free_flow", False)))


def parse_file(path: str) -> CardBoard:
    """Parse a YAML snapshot file into a CardBoard."""
    content = Path(path).read_text()
    return parse_yaml(content)


def _parse_card(data: dict, index: int) -> Card:
    """Parse a single card entry."""
    if not isinstance(data, dict) or "id" not in data:
        raise ValueError(f"Card #{index} must be a mapping with an 'id'")

    # Nested ``position: {x, y}`` is accepted too; flat x/y win when both are given
    position = data.get("position") or {}
    if not isinstance(position, dict):
        raise ValueError(f"Card #{index} position must be a mapping with 'x' and 'y'")

    created_at = data.get("created_at", SNAPSHOT_EPOCH + timedelta(seconds=index))
    extras = {k: v for k, v in data.items() if k not in _CARD_KEYS}

    return Card(
        id=str(data["id"]),
        position=CardPosition(
            x=float(data.get("x", position.get("x", 0))),
            y=float(data.get("y", position.get("y", 0))),
        ),
        width=data.get("width"),
        height=data.get("height"),
        created_at=created_at,
        updated_at=data.get("updated_at", created_at),
        pinned=bool(data.get("pinned", False)),
        data=data.get("data") or {},
        **extras,
    )


def card_to_dict(card: Card) -> dict:
    """Flatten a Card into the snapshot's per-card mapping."""
    card_data = {
        "id": card.id,
        "x": card.position.x,
        "y": card.position.y,
    }
    if card.width is not None:
        card_data["width"] = card.width
    if card.height is not None:
        card_data["height"] = card.height
    card_data["created_at"] = card.created_at.isoformat()
    card_data["updated_at"] = card.updated_at.isoformat()
    if card.pinned:
        card_data["pinned"] = True
    if card.data:
        card_data["data"] = card.data
    if card.model_extra:
        card_data.update(card.model_extra)
    return card_data


def board_to_yaml(board: CardBoard) -> str:
    """Serialize a CardBoard back to YAML."""
    data = {
        "free_flow": board.free_flow,
        "cards": [card_to_dict(card) for card in board.cards],
    }
    return yaml.dump(data, default_flow_style=False, sort_keys=False)
