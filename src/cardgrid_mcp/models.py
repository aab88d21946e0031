"""
Data models for Cardgrid-MCP — the card geometry snapshot.

The layout engine works on a deliberately narrow view of a card:

    Card
    ├── id          — unique identifier
    ├── position    — top-left corner on the infinite surface
    ├── width       — optional, falls back to DEFAULT_WIDTH
    ├── height      — optional, falls back to DEFAULT_HEIGHT
    ├── created_at  — the packing order key
    ├── updated_at  — stamped fresh whenever the engine moves the card
    └── pinned      — excluded from masonry packing when true

Anything else the caller attaches (rich-text content, link previews, tags)
rides along in ``data`` or as extra fields and is never read by the engine.

Dimension handling is centralized here: ``effective_width()`` and
``effective_height()`` return the card's own size when it is a usable
number, otherwise the module default.  Layout code never looks at the raw
``width`` / ``height`` fields, so ``None``, ``NaN`` or a non-positive size
can't leak into coordinate arithmetic.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Layout constants
# ---------------------------------------------------------------------------

GRID_COLUMNS = 4
GRID_GAP = 40
GRID_PADDING = 32

DEFAULT_WIDTH = 280
DEFAULT_HEIGHT = 220

# Resize bounds for a single card
MIN_WIDTH = 180
MAX_WIDTH = 900
MIN_HEIGHT = 100
MAX_HEIGHT = 800

# Step applied by the expand-width / expand-height actions
RESIZE_INCREMENT = 96


def utcnow() -> datetime:
    """Timezone-aware current time, used for every timestamp the engine stamps."""
    return datetime.now(timezone.utc)


def _usable_dimension(value: Optional[float], default: float) -> float:
    if value is None or not math.isfinite(value) or value <= 0:
        return default
    return value


def clamp_dimensions(width: Optional[float], height: Optional[float]) -> tuple[float, float]:
    """Clamp a requested card size into the allowed resize bounds.

    Unusable values (missing, non-finite, non-positive) become the defaults
    before clamping.
    """
    w = _usable_dimension(width, DEFAULT_WIDTH)
    h = _usable_dimension(height, DEFAULT_HEIGHT)
    return (
        min(max(w, MIN_WIDTH), MAX_WIDTH),
        min(max(h, MIN_HEIGHT), MAX_HEIGHT),
    )


# ---------------------------------------------------------------------------
# Card
# ---------------------------------------------------------------------------

class CardPosition(BaseModel):
    """Top-left corner of a card on the canvas surface."""
    x: float = 0.0
    y: float = 0.0


class Card(BaseModel):
    """A rectangular content card: the unit the layout engine places.

    Ordering
    --------
    ``created_at`` is the only ordering key used for packing.  Cards that
    share a timestamp are ordered by ``id`` so a replay never depends on the
    order of the caller's collection.

    Timestamps
    ----------
    Naive datetimes are read as UTC so snapshots that mix aware and naive
    values still sort.

    Payload
    -------
    ``data`` and any extra fields are carried through untouched.  Copies
    made by the engine keep them.
    """
    model_config = ConfigDict(extra="allow")

    id: str
    position: CardPosition = Field(default_factory=CardPosition)
    width: Optional[float] = None
    height: Optional[float] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    pinned: bool = False
    data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def effective_width(self) -> float:
        """Width used by the layout engine (own width or DEFAULT_WIDTH)."""
        return _usable_dimension(self.width, DEFAULT_WIDTH)

    def effective_height(self) -> float:
        """Height used by the layout engine (own height or DEFAULT_HEIGHT)."""
        return _usable_dimension(self.height, DEFAULT_HEIGHT)

    def sort_key(self) -> tuple[datetime, str]:
        return (self.created_at, self.id)

    def moved_to(self, x: float, y: float, stamp: Optional[datetime] = None) -> "Card":
        """Return a copy at ``(x, y)`` with a fresh ``updated_at``."""
        return self.model_copy(update={
            "position": CardPosition(x=x, y=y),
            "updated_at": stamp or utcnow(),
        })

    def can_expand_width(self) -> bool:
        return self.effective_width() < MAX_WIDTH

    def can_expand_height(self) -> bool:
        return self.effective_height() < MAX_HEIGHT
