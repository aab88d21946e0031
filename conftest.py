"""Shared fixtures for the Cardgrid-MCP tests."""

from datetime import datetime, timedelta, timezone

import pytest

from cardgrid_mcp.models import Card, CardPosition, DEFAULT_HEIGHT, DEFAULT_WIDTH

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_card():
    """Factory for cards created ``day`` days after 2024-01-01."""

    def _make(card_id, x=0.0, y=0.0, width=DEFAULT_WIDTH, height=DEFAULT_HEIGHT, day=0, **overrides):
        created = BASE_TIME + timedelta(days=day)
        return Card(
            id=card_id,
            position=CardPosition(x=x, y=y),
            width=width,
            height=height,
            created_at=created,
            updated_at=created,
            **overrides,
        )

    return _make


@pytest.fixture
def row_of_four(make_card):
    """n0..n3 created on consecutive days, one full default row."""
    return [make_card(f"n{i}", day=i) for i in range(4)]
