"""
Move Model - Ring rotations and column shifts as cell permutations.

Two move families:
1. Ring(r, k): rotate ring r by k steps (positive = clockwise)
2. Column(c, k): shift column c by k steps along its 8-cell loop
   (positive = outward on column c)

A column is paired with its opposite column c+6: the loop runs
ring 1..4 of column c, then ring 4..1 of column c+6. A piece pushed
past the outer ring re-enters from the outer ring on the other side.

Every move is a total function over arenas and a pure permutation of
the 48 cells: it never creates or destroys enemies.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Sequence, TypeVar

from ..errors import InvalidPosition
from .state import CELLS, COLUMNS, RINGS

Permutation = tuple[int, ...]
"""perm[source_cell] = destination_cell, for all 48 cells."""

T = TypeVar("T")

HALF = COLUMNS // 2  # Column pairs: c and c + 6
LOOP = 2 * RINGS  # Cells on one column loop


class MoveKind(Enum):
    """The two move families. Rings sort before columns."""
    RING = "ring"
    COLUMN = "column"

    @property
    def symbol(self) -> str:
        return "r" if self is MoveKind.RING else "c"


@dataclass(frozen=True)
class Move:
    """
    A single arena move.

    ``index`` is the 1-based ring (RING) or column (COLUMN).
    ``amount`` accepts any integer; normalized() gives the canonical form.
    """
    kind: MoveKind
    index: int
    amount: int

    def __post_init__(self):
        limit = RINGS if self.kind is MoveKind.RING else COLUMNS
        if not 1 <= self.index <= limit:
            raise InvalidPosition(
                f"{self.kind.value.capitalize()} {self.index} is outside 1..{limit}",
                context={self.kind.value: self.index},
            )

    @classmethod
    def ring(cls, ring: int, amount: int) -> Move:
        """Factory for a ring rotation."""
        return cls(kind=MoveKind.RING, index=ring, amount=amount)

    @classmethod
    def column(cls, column: int, amount: int) -> Move:
        """Factory for a column shift."""
        return cls(kind=MoveKind.COLUMN, index=column, amount=amount)

    @property
    def is_ring(self) -> bool:
        return self.kind is MoveKind.RING

    def normalized(self) -> Move:
        """
        Canonical form of the move.

        Rings: amount in (-6, 6].
        Columns: column in 1..6 (c+6 by k is c by -k), amount in (-4, 4].
        """
        if self.is_ring:
            return Move(self.kind, self.index, _centered(self.amount, COLUMNS))

        index, amount = self.index, self.amount
        if index > HALF:
            index, amount = index - HALF, -amount
        return Move(self.kind, index, _centered(amount, LOOP))

    @property
    def is_identity(self) -> bool:
        return self.normalized().amount == 0

    @property
    def track(self) -> tuple[int, int]:
        """
        The set of cells this move permutes, as (kind order, track index).

        Ring tracks are 1..4, column tracks are the pairs 1..6.
        """
        if self.is_ring:
            return (0, self.index)
        return (1, (self.index - 1) % HALF + 1)

    def sort_key(self) -> tuple[int, int, int, int]:
        """
        Canonical ordering over all moves.

        Rings before columns, then by track, then smallest magnitude,
        positive before negative.
        """
        move = self.normalized()
        kind_order, track = move.track
        return (kind_order, track, abs(move.amount), 1 if move.amount < 0 else 0)

    def inverse(self) -> Move:
        return Move(self.kind, self.index, -self.amount)

    def permutation(self) -> Permutation:
        """Destination cell for every source cell."""
        move = self.normalized()
        return _permutation(move.kind, move.index, move.amount)

    def track_cells(self) -> tuple[int, ...]:
        """Cell indexes the move can relocate (12 for rings, 8 for columns)."""
        move = self.normalized()
        if move.is_ring:
            return _ring_cells(move.index)
        return _column_loop(move.index)

    def __str__(self) -> str:
        move = self.normalized()
        return f"{move.kind.symbol}{move.index} {move.amount}"


def _centered(amount: int, size: int) -> int:
    """Reduce ``amount`` modulo ``size`` into (-size/2, size/2]."""
    amount %= size
    if amount > size // 2:
        amount -= size
    return amount


def _cell(ring: int, column: int) -> int:
    return (ring - 1) * COLUMNS + (column - 1)


@lru_cache(maxsize=None)
def _ring_cells(ring: int) -> tuple[int, ...]:
    return tuple(_cell(ring, column) for column in range(1, COLUMNS + 1))


@lru_cache(maxsize=None)
def _column_loop(column: int) -> tuple[int, ...]:
    """Rings 1..4 of column c, then rings 4..1 of column c + 6."""
    opposite = (column - 1 + HALF) % COLUMNS + 1
    outward = [_cell(ring, column) for ring in range(1, RINGS + 1)]
    inward = [_cell(ring, opposite) for ring in range(RINGS, 0, -1)]
    return tuple(outward + inward)


@lru_cache(maxsize=None)
def _permutation(kind: MoveKind, index: int, amount: int) -> Permutation:
    perm = list(range(CELLS))
    cells = _ring_cells(index) if kind is MoveKind.RING else _column_loop(index)
    size = len(cells)
    for i, cell in enumerate(cells):
        perm[cell] = cells[(i + amount) % size]
    return tuple(perm)


# =============================================================================
# Permutation algebra
# =============================================================================


def inverse(move: Move) -> Move:
    """The move that undoes ``move``."""
    return move.inverse()


def compose(first: Move | Permutation, second: Move | Permutation) -> Permutation:
    """Permutation equal to applying ``first`` and then ``second``."""
    a = first.permutation() if isinstance(first, Move) else first
    b = second.permutation() if isinstance(second, Move) else second
    return tuple(b[a[i]] for i in range(CELLS))


def merge(first: Move, second: Move) -> Move | None:
    """
    Collapse two moves on the same track into one.

    Returns None when the pair cancels out.
    Raises ValueError for moves on different tracks.
    """
    if first.track != second.track:
        raise ValueError(f"Cannot merge {first} and {second}: different tracks")
    a, b = first.normalized(), second.normalized()
    merged = Move(a.kind, a.index, a.amount + b.amount).normalized()
    return None if merged.amount == 0 else merged


def apply_permutation(cells: Sequence[T], perm: Permutation) -> list[T]:
    """Relocate every cell's contents to perm[cell]."""
    result = list(cells)
    for source, target in enumerate(perm):
        result[target] = cells[source]
    return result


def permute_mask(mask: int, perm: Permutation, track_mask: int) -> int:
    """
    Apply a permutation to a bitmask of occupied cells.

    Only bits inside ``track_mask`` can move; the rest are kept as-is.
    """
    moving = mask & track_mask
    result = mask ^ moving
    while moving:
        low = moving & -moving
        result |= 1 << perm[low.bit_length() - 1]
        moving ^= low
    return result


def cells_to_mask(cells: Sequence[int]) -> int:
    mask = 0
    for cell in cells:
        mask |= 1 << cell
    return mask
