"""
Masonry packer for Cardgrid-MCP.

Shortest-column layout with neighbor-aware X positioning.

Every call replays the full card set from scratch:

  1. Sort unpinned cards by ``(created_at, id)``.
  2. Drop each card into the column with the lowest watermark (ties go to
     the lowest column index) and advance that watermark by the card's
     height plus ``GRID_GAP``.
  3. Resolve X positions left to right with the neighbor shift rule from
     ``overlap.py``.

The watermark table is a local list rebuilt on each call.

Pinned cards never enter the columns.  They come back from the arrange
functions at their own position, in their original slot of the output.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .models import Card, CardPosition, DEFAULT_HEIGHT, GRID_COLUMNS, GRID_GAP, GRID_PADDING, utcnow
from .overlap import (
    ColumnStack,
    NodePlacement,
    apply_neighbor_shifts,
    default_column_x,
    neighbor_shifted_x,
)

logger = logging.getLogger(__name__)


@dataclass
class MasonryLayout:
    """Result of one packing pass. Built per call and thrown away."""
    columns: list[ColumnStack]
    watermarks: list[float]
    # Input index -> placement, for unpinned cards only
    placements: dict[int, NodePlacement] = field(default_factory=dict)

    def shortest_column(self) -> int:
        return shortest_column(self.watermarks)


def shortest_column(watermarks: Sequence[float]) -> int:
    """Index of the lowest watermark; the first one wins a tie."""
    best = 0
    for index in range(1, len(watermarks)):
        if watermarks[index] < watermarks[best]:
            best = index
    return best


def packing_order(cards: Iterable[Card]) -> list[tuple[int, Card]]:
    """Unpinned cards with their input index, in replay order.

    The input index is the last tiebreak so even duplicate ids sort the
    same way on every call.
    """
    return sorted(
        ((index, card) for index, card in enumerate(cards) if not card.pinned),
        key=lambda item: (item[1].created_at, item[1].id, item[0]),
    )


def build_layout(cards: Sequence[Card]) -> MasonryLayout:
    """Replay ``cards`` into columns and resolve every placement's X."""
    columns = [ColumnStack(column_index=i) for i in range(GRID_COLUMNS)]
    watermarks = [float(GRID_PADDING)] * GRID_COLUMNS
    layout = MasonryLayout(columns=columns, watermarks=watermarks)

    for index, card in packing_order(cards):
        column = shortest_column(watermarks)
        height = card.effective_height()
        placement = NodePlacement(
            card=card,
            column=column,
            x=default_column_x(column),
            y=watermarks[column],
            width=card.effective_width(),
            height=height,
        )
        columns[column].placements.append(placement)
        layout.placements[index] = placement
        watermarks[column] += height + GRID_GAP

    shifted = apply_neighbor_shifts(columns)
    if shifted:
        logger.debug("Neighbor shift moved %d of %d placements", shifted, len(layout.placements))
    return layout


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def next_position(cards: Sequence[Card]) -> CardPosition:
    """Where a new default-size card would land after replaying ``cards``."""
    layout = build_layout(cards)
    column = layout.shortest_column()
    y = layout.watermarks[column]

    if column == 0:
        x = default_column_x(0)
    else:
        x = neighbor_shifted_x(layout.columns[column - 1], column, y, DEFAULT_HEIGHT)
    return CardPosition(x=x, y=y)


def arrange_all(cards: Sequence[Card]) -> list[Card]:
    """Return a freshly positioned copy of every card, in input order.

    Unpinned cards get their masonry slot; pinned cards keep their
    position.  Every returned card carries the same new ``updated_at``.
    """
    if not cards:
        return []

    layout = build_layout(cards)
    stamp = utcnow()

    arranged = []
    for index, card in enumerate(cards):
        placement = layout.placements.get(index)
        if placement is None:
            arranged.append(card.moved_to(card.position.x, card.position.y, stamp))
        else:
            arranged.append(card.moved_to(placement.x, placement.y, stamp))
    return arranged


def rearrange_after_resize(cards: Sequence[Card], resized_id: str) -> list[Card]:
    """Re-derive the layout after one card's dimensions changed.

    A height change can alter which column is shortest for every card
    created after the resized one, so this is a full repack; locality comes
    from the neighbor shift rule.  An unknown ``resized_id`` still repacks.
    """
    if not any(card.id == resized_id for card in cards):
        logger.debug("Resized card %r not in snapshot; repacking %d cards", resized_id, len(cards))
    return arrange_all(cards)
