"""
Reducer - Applies moves to arena state.

The reducer is the single point where moves touch an ArenaState.

Design principles:
- Pure function: (state, move) -> new_state
- Moves are total, so there is nothing to validate
- The input state is never mutated
"""

from __future__ import annotations
from typing import Iterable

from .move import Move, apply_permutation
from .state import ArenaState


def apply_move(state: ArenaState, move: Move) -> ArenaState:
    """Return a new state with ``move`` applied."""
    new_state = state.clone()
    new_state.cells = apply_permutation(state.cells, move.permutation())
    return new_state


def apply_moves(state: ArenaState, moves: Iterable[Move]) -> ArenaState:
    """Replay a move sequence from ``state``."""
    for move in moves:
        state = apply_move(state, move)
    return state
