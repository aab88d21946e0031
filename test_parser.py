"""Tests for the YAML snapshot parser."""

from datetime import datetime, timezone

import pytest

from cardgrid_mcp.masonry import arrange_all
from cardgrid_mcp.parser import board_to_yaml, parse_file, parse_yaml

SNAPSHOT = """
free_flow: true
cards:
  - id: intro
    x: 32
    y: 32
    width: 472
    created_at: 2024-03-01T09:00:00Z
  - id: notes
    height: 400
    pinned: true
    created_at: 2024-03-02T09:00:00Z
    data:
      heading: Meeting notes
      tags: [work]
    color: amber
"""


def test_parses_cards_and_mode():
    board = parse_yaml(SNAPSHOT)

    assert board.free_flow is True
    intro, notes = board.cards
    assert (intro.position.x, intro.position.y) == (32, 32)
    assert intro.width == 472
    assert intro.height is None
    assert intro.created_at == datetime(2024, 3, 1, 9, tzinfo=timezone.utc)
    assert notes.pinned is True
    assert notes.data == {"heading": "Meeting notes", "tags": ["work"]}
    assert notes.model_extra == {"color": "amber"}


def test_updated_at_defaults_to_created_at():
    board = parse_yaml(SNAPSHOT)
    assert all(card.updated_at == card.created_at for card in board.cards)


def test_cards_without_created_at_keep_list_order():
    board = parse_yaml("""
cards:
  - id: zeta
  - id: alpha
  - id: mid
""")
    arranged = {card.id: card.position.x for card in arrange_all(board.cards)}
    assert arranged == {"zeta": 32, "alpha": 352, "mid": 672}


def test_empty_input_raises():
    with pytest.raises(ValueError, match="Empty YAML input"):
        parse_yaml("")


def test_non_mapping_input_raises():
    with pytest.raises(ValueError):
        parse_yaml("- just\n- a list\n")


def test_card_without_id_raises():
    with pytest.raises(ValueError, match="Card #0"):
        parse_yaml("cards:\n  - x: 10\n")


def test_invalid_dimension_type_raises():
    with pytest.raises(ValueError):
        parse_yaml("cards:\n  - id: a\n    width: wide\n")


def test_nested_position_mapping():
    board = parse_yaml("""
cards:
  - id: nested
    position: {x: 120, y: 340}
  - id: flat_wins
    x: 5
    position: {x: 999, y: 60}
""")
    nested, flat_wins = board.cards
    assert (nested.position.x, nested.position.y) == (120, 340)
    assert (flat_wins.position.x, flat_wins.position.y) == (5, 60)
    assert nested.model_extra == {}


def test_non_mapping_position_raises():
    with pytest.raises(ValueError, match="position must be a mapping"):
        parse_yaml("cards:\n  - id: a\n    position: [1, 2]\n")


def test_yaml_round_trip_keeps_geometry():
    board = parse_yaml(SNAPSHOT)
    reparsed = parse_yaml(board_to_yaml(board))

    assert reparsed.free_flow == board.free_flow
    for before, after in zip(board.cards, reparsed.cards):
        assert after.id == before.id
        assert after.position == before.position
        assert (after.width, after.height) == (before.width, before.height)
        assert after.created_at == before.created_at
        assert after.pinned == before.pinned
        assert after.data == before.data


def test_parse_file(tmp_path):
    path = tmp_path / "board.yaml"
    path.write_text(SNAPSHOT)
    assert [card.id for card in parse_file(str(path)).cards] == ["intro", "notes"]
