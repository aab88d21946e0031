"""
Card board for Cardgrid-MCP — layout-affecting edits over a card snapshot.

A ``CardBoard`` is the caller-side collection the layout engine serves:
a list of cards plus the free-flow mode flag.  Each edit returns a new
board and leaves the original untouched, so a caller can commit the result
with a single swap.

Mode switch
-----------
``free_flow=False`` (masonry):
    new cards go to ``next_position``; a resize repacks the grid.
``free_flow=True``:
    new cards go beside an anchor via ``smart_placement``; a resize only
    changes the card's own size and leaves every other card where it is.

Branching and duplication use the free-flow rules in both modes.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .freeflow import branch_placement, smart_placement
from .masonry import arrange_all, next_position, rearrange_after_resize
from .models import (
    Card,
    CardPosition,
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    GRID_GAP,
    RESIZE_INCREMENT,
    clamp_dimensions,
    utcnow,
)

logger = logging.getLogger(__name__)


def new_card_id() -> str:
    return f"card-{uuid.uuid4()}"


class CardBoard(BaseModel):
    """The set of cards on one canvas surface."""
    cards: list[Card] = Field(default_factory=list)
    free_flow: bool = False

    def get_card(self, card_id: str) -> Optional[Card]:
        """Look up a card by id."""
        return next((card for card in self.cards if card.id == card_id), None)

    def _with_cards(self, cards: list[Card]) -> "CardBoard":
        return self.model_copy(update={"cards": cards})

    def _replace(self, card_id: str, **changes) -> list[Card]:
        changes.setdefault("updated_at", utcnow())
        return [
            card.model_copy(update=changes) if card.id == card_id else card
            for card in self.cards
        ]

    # --- Creation ---

    def add_card(
        self,
        card_id: Optional[str] = None,
        anchor_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "CardBoard":
        """Add a default-size card at the slot the current mode picks."""
        if self.free_flow:
            position = smart_placement(self.cards, anchor_id)
        else:
            position = next_position(self.cards)

        stamp = now or utcnow()
        card = Card(
            id=card_id or new_card_id(),
            position=position,
            width=DEFAULT_WIDTH,
            height=DEFAULT_HEIGHT,
            created_at=stamp,
            updated_at=stamp,
        )
        logger.debug("Added card %s at (%s, %s)", card.id, position.x, position.y)
        return self._with_cards([*self.cards, card])

    def branch_from(self, source_id: str, card_id: Optional[str] = None) -> "CardBoard":
        """Add a default-size card to the right of ``source_id``, below any siblings."""
        source = self.get_card(source_id)
        if source is None:
            logger.debug("Branch source %r not found", source_id)
            return self

        stamp = utcnow()
        card = Card(
            id=card_id or new_card_id(),
            position=branch_placement(source, self.cards),
            width=DEFAULT_WIDTH,
            height=DEFAULT_HEIGHT,
            created_at=stamp,
            updated_at=stamp,
        )
        return self._with_cards([*self.cards, card])

    def duplicate_card(self, source_id: str, card_id: Optional[str] = None) -> "CardBoard":
        """Copy ``source_id`` (size and payload included) into the slot to its right."""
        source = self.get_card(source_id)
        if source is None:
            logger.debug("Duplicate source %r not found", source_id)
            return self

        stamp = utcnow()
        duplicate = source.model_copy(deep=True, update={
            "id": card_id or new_card_id(),
            "position": CardPosition(
                x=source.position.x + source.effective_width() + GRID_GAP,
                y=source.position.y,
            ),
            "pinned": False,
            "created_at": stamp,
            "updated_at": stamp,
        })
        return self._with_cards([*self.cards, duplicate])

    # --- Geometry edits ---

    def move_card(self, card_id: str, x: float, y: float) -> "CardBoard":
        if self.get_card(card_id) is None:
            return self
        return self._with_cards(self._replace(card_id, position=CardPosition(x=x, y=y)))

    def resize_card(self, card_id: str, width: float, height: float) -> "CardBoard":
        """Resize one card (clamped) and, in masonry mode, reflow the grid."""
        if self.get_card(card_id) is None:
            logger.debug("Resize target %r not found", card_id)
            return self

        width, height = clamp_dimensions(width, height)
        cards = self._replace(card_id, width=width, height=height)
        if not self.free_flow:
            cards = rearrange_after_resize(cards, card_id)
        return self._with_cards(cards)

    def expand_width(self, card_id: str) -> "CardBoard":
        card = self.get_card(card_id)
        if card is None:
            return self
        return self.resize_card(
            card_id, card.effective_width() + RESIZE_INCREMENT, card.effective_height()
        )

    def expand_height(self, card_id: str) -> "CardBoard":
        card = self.get_card(card_id)
        if card is None:
            return self
        return self.resize_card(
            card_id, card.effective_width(), card.effective_height() + RESIZE_INCREMENT
        )

    def toggle_pinned(self, card_id: str) -> "CardBoard":
        card = self.get_card(card_id)
        if card is None:
            return self
        return self._with_cards(self._replace(card_id, pinned=not card.pinned))

    def remove_card(self, card_id: str) -> "CardBoard":
        return self._with_cards([card for card in self.cards if card.id != card_id])

    def arrange(self) -> "CardBoard":
        """Full masonry pass over every unpinned card."""
        return self._with_cards(arrange_all(self.cards))
