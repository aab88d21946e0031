"""
Free-flow placement for Cardgrid-MCP.

Outside the masonry mode, new cards are proposed directly to the right of
an anchor card and pushed straight down until they stop colliding.  The
push is downward only; candidates are never moved sideways.

The collision loop is capped at ``MAX_COLLISION_ITERATIONS``.  When the cap
is hit the last candidate is returned as-is, even if it still overlaps
something.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from .models import Card, CardPosition, DEFAULT_HEIGHT, DEFAULT_WIDTH, GRID_GAP, GRID_PADDING
from .overlap import rects_collide

logger = logging.getLogger(__name__)

MAX_COLLISION_ITERATIONS = 200


def collides_with_any(
    x: float,
    y: float,
    width: float,
    height: float,
    obstacles: Iterable[Card],
) -> bool:
    """True if the box at ``(x, y)`` overlaps any obstacle's actual footprint."""
    for card in obstacles:
        if rects_collide(
            x, y, width, height,
            card.position.x, card.position.y,
            card.effective_width(), card.effective_height(),
        ):
            return True
    return False


def resolve_collision(x: float, start_y: float, obstacles: Iterable[Card]) -> CardPosition:
    """Slide a default-size candidate down from ``start_y`` until it is clear."""
    obstacles = list(obstacles)
    y = start_y
    iterations = 0
    while collides_with_any(x, y, DEFAULT_WIDTH, DEFAULT_HEIGHT, obstacles):
        if iterations >= MAX_COLLISION_ITERATIONS:
            logger.warning(
                "Collision cap of %d reached at (%s, %s); returning best effort",
                MAX_COLLISION_ITERATIONS, x, y,
            )
            break
        y += DEFAULT_HEIGHT + GRID_GAP
        iterations += 1
    return CardPosition(x=x, y=y)


def latest_card(cards: Iterable[Card]) -> Optional[Card]:
    """Most recently created card, ``id`` breaking timestamp ties."""
    return max(cards, key=lambda card: card.sort_key(), default=None)


def smart_placement(cards: Sequence[Card], anchor_id: Optional[str] = None) -> CardPosition:
    """Propose a spot for a new card beside the anchor.

    The anchor is ``anchor_id`` when non-empty, otherwise the latest card.  An
    empty canvas, or an ``anchor_id`` that matches nothing, places the card
    at the padding origin.
    """
    if not cards:
        return CardPosition(x=GRID_PADDING, y=GRID_PADDING)

    if anchor_id:
        anchor = next((card for card in cards if card.id == anchor_id), None)
    else:
        anchor = latest_card(cards)

    if anchor is None:
        logger.debug("Anchor %r not found; placing at origin", anchor_id)
        return CardPosition(x=GRID_PADDING, y=GRID_PADDING)

    target_x = anchor.position.x + anchor.effective_width() + GRID_GAP
    return resolve_collision(target_x, anchor.position.y, cards)


def branch_placement(source: Card, all_cards: Iterable[Card]) -> CardPosition:
    """Propose a spot for a card branched off ``source``.

    Siblings already sitting in the branch slot push the new card down;
    the source itself is not an obstacle.
    """
    target_x = source.position.x + source.effective_width() + GRID_GAP
    others = [card for card in all_cards if card.id != source.id]
    return resolve_collision(target_x, source.position.y, others)
