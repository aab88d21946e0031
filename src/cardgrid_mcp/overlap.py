"""
Neighbor overlap geometry for Cardgrid-MCP.

Pure primitives shared by the masonry packer and the free-flow resolver.
Nothing here mutates its inputs or keeps state between calls.

Intervals are half-open: a card spanning ``[y, y + height)`` does not
overlap a card that starts exactly at ``y + height``.  The same rule holds
for the 2-D collision test, so cards whose edges touch never count as
colliding.

The neighbor shift rule
-----------------------
A placement in column ``c`` normally sits at ``default_column_x(c)``.  When
one or more placements in column ``c - 1`` overlap it vertically, it moves
right to clear the widest of them::

    x = max(default_column_x(c), max(n.x + n.width + GRID_GAP for n in neighbors))

Columns are resolved left to right, so a shifted placement can in turn push
its own overlapping neighbors in ``c + 1``.  The cascade follows only the
chain of vertically-overlapping placements; a placement with no overlapping
neighbor stays at its column default no matter how wide a card further left
or further down is.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import Card, DEFAULT_WIDTH, GRID_GAP, GRID_PADDING


@dataclass
class OverlapResult:
    """Outcome of a vertical interval test."""
    overlaps: bool
    amount: float


@dataclass
class NodePlacement:
    """A card's computed slot during a single layout pass."""
    card: Card
    column: int
    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y + self.height


@dataclass
class ColumnStack:
    """Placements assigned to one column, ordered top to bottom."""
    column_index: int
    placements: list[NodePlacement] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Interval and rectangle tests
# ---------------------------------------------------------------------------

def vertical_overlap(start_a: float, end_a: float, start_b: float, end_b: float) -> OverlapResult:
    """Intersect ``[start_a, end_a)`` with ``[start_b, end_b)``."""
    amount = max(0.0, min(end_a, end_b) - max(start_a, start_b))
    return OverlapResult(overlaps=amount > 0, amount=amount)


def rects_collide(
    ax: float, ay: float, aw: float, ah: float,
    bx: float, by: float, bw: float, bh: float,
) -> bool:
    """Strict AABB test; shared edges are not a collision."""
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


# ---------------------------------------------------------------------------
# Column helpers
# ---------------------------------------------------------------------------

def default_column_x(column_index: int) -> float:
    """X a column occupies when nothing to its left is wider than default."""
    return GRID_PADDING + column_index * (DEFAULT_WIDTH + GRID_GAP)


def overlapping_neighbors(
    stack: ColumnStack,
    query_start: float,
    query_height: float,
) -> list[NodePlacement]:
    """Placements in ``stack`` that strictly overlap the query span, in column order."""
    query_end = query_start + query_height
    return [
        placement
        for placement in stack.placements
        if vertical_overlap(query_start, query_end, placement.y, placement.bottom).overlaps
    ]


def neighbor_shifted_x(
    previous: ColumnStack,
    column_index: int,
    y: float,
    height: float,
) -> float:
    """X for a span in ``column_index`` after clearing overlapping neighbors in ``previous``."""
    x = default_column_x(column_index)
    for neighbor in overlapping_neighbors(previous, y, height):
        x = max(x, neighbor.x + neighbor.width + GRID_GAP)
    return x


def apply_neighbor_shifts(columns: list[ColumnStack]) -> int:
    """Resolve every placement's X left to right, in place on the pass-local stacks.

    Returns the number of placements that ended up right of their column
    default.
    """
    shifted = 0
    for previous, current in zip(columns, columns[1:]):
        for placement in current.placements:
            placement.x = neighbor_shifted_x(
                previous, current.column_index, placement.y, placement.height
            )
            if placement.x != default_column_x(current.column_index):
                shifted += 1
    return shifted
