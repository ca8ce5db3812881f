"""
Move Generator - Enumerates the distinct moves available on the arena.

The generator is used by:
1. The search engine to expand nodes
2. The API to list what can be executed
3. Tests (every generated move must be canonical and non-trivial)

Design: Generates Move objects in canonical order, so that the first
solution the search meets among equal-length ones is deterministic.

Distinct non-trivial moves:
- 4 rings x 11 rotations (-5..6, excluding 0)
- 6 column pairs x 7 shifts (-3..4, excluding 0)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache

from .move import HALF, LOOP, Move, Permutation, cells_to_mask
from .state import COLUMNS, RINGS


@dataclass(frozen=True)
class CompiledMove:
    """A move with its permutation and track precomputed for the search loop."""
    move: Move
    perm: Permutation
    track_mask: int
    track: tuple[int, int]


@dataclass
class MoveGenerator:
    """
    Generates moves and the follow-up moves worth trying after each one.

    Follow-up pruning (both preserve shortest solutions):
    - never two moves on one track in a row (they merge into one)
    - commuting moves (same family, different track) only in
      ascending track order
    """
    moves: list[CompiledMove] = field(default_factory=list)
    _follow_ups: dict[tuple[int, int] | None, list[CompiledMove]] = field(
        default_factory=dict
    )

    def __post_init__(self):
        if not self.moves:
            self.moves = [_compile(move) for move in all_moves()]
        tracks = {compiled.track for compiled in self.moves}
        self._follow_ups[None] = list(self.moves)
        for track in tracks:
            self._follow_ups[track] = [
                compiled for compiled in self.moves
                if _may_follow(track, compiled.track)
            ]

    def generate(self, last: Move | None = None) -> list[Move]:
        """Moves worth applying after ``last`` (all moves for the first step)."""
        return [compiled.move for compiled in self.follow_ups(last.track if last else None)]

    def follow_ups(self, last_track: tuple[int, int] | None) -> list[CompiledMove]:
        """Compiled follow-up moves for the track of the previous move."""
        return self._follow_ups[last_track]


def _may_follow(previous: tuple[int, int], track: tuple[int, int]) -> bool:
    if previous == track:
        return False
    if previous[0] == track[0]:
        # Same family on different tracks commutes: keep one order only
        return track[1] > previous[1]
    return True


def _compile(move: Move) -> CompiledMove:
    return CompiledMove(
        move=move,
        perm=move.permutation(),
        track_mask=cells_to_mask(move.track_cells()),
        track=move.track,
    )


@lru_cache(maxsize=1)
def all_moves() -> tuple[Move, ...]:
    """Every distinct non-trivial move in canonical order."""
    moves = []
    for ring in range(1, RINGS + 1):
        for amount in range(-(COLUMNS // 2) + 1, COLUMNS // 2 + 1):
            if amount:
                moves.append(Move.ring(ring, amount))
    for column in range(1, HALF + 1):
        for amount in range(-(LOOP // 2) + 1, LOOP // 2 + 1):
            if amount:
                moves.append(Move.column(column, amount))
    return tuple(sorted(moves, key=Move.sort_key))


def legal_moves(last: Move | None = None) -> list[Move]:
    """
    Convenience function to get the moves to try after ``last``.

    Creates a MoveGenerator and generates moves.
    """
    return MoveGenerator().generate(last)
