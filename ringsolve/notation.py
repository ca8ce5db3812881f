"""
Notation - Text forms of moves, placements and solve requests.

Used at the boundary only (CLI, HTTP API); the core works on Move,
Position and SolveMode objects.

    r1 3            rotate ring 1 clockwise by 3
    c4 -2           shift column 4 inward by 2
    c2 124          enemies on column 2, rings 1, 2 and 4
    c3 3 H          hammer-only enemy on column 3, ring 3
    solve fast in 3

Malformed text raises NotationError; well-formed text naming a ring or
column off the arena raises InvalidPosition.
"""

from __future__ import annotations
from dataclasses import dataclass
import re
from typing import Iterable

from .engine_core.move import Move
from .engine_core.state import Position, Requirement
from .errors import NotationError
from .search.modes import Solution, SolveMode

_MOVE_RE = re.compile(r"^\s*([rc])\s*(\d+)\s+([+-]?\d+)\s*$", re.IGNORECASE)
_PLACEMENT_RE = re.compile(r"^\s*c\s*(\d+)\s+(\d+)\s*([A-Za-z])?\s*$", re.IGNORECASE)
_SOLVE_RE = re.compile(r"^\s*solve(\s+fast)?(?:\s+in\s+(\S+))?\s*$", re.IGNORECASE)

ALREADY_SOLVED = "Arena is already solved!"


@dataclass(frozen=True)
class EnemyPlacement:
    """A parsed placement: one column, some rings, one requirement."""
    column: int
    rows: tuple[int, ...]
    requirement: Requirement = Requirement.NONE

    def positions(self) -> list[Position]:
        return [Position(ring=row, column=self.column) for row in self.rows]


def parse_move(text: str) -> Move:
    match = _MOVE_RE.match(text)
    if not match:
        raise NotationError(text, "expected 'r<ring> <amount>' or 'c<column> <amount>'")
    family, index, amount = match.groups()
    if family.lower() == "r":
        return Move.ring(int(index), int(amount))
    return Move.column(int(index), int(amount))


def format_move(move: Move) -> str:
    """Normalized text form, e.g. ``r3 -1``."""
    return str(move)


def parse_placement(text: str) -> EnemyPlacement:
    match = _PLACEMENT_RE.match(text)
    if not match:
        raise NotationError(text, "expected 'c<column> <rows> [H|J|P]'")
    column, rows, marker = match.groups()
    try:
        requirement = Requirement.from_symbol(marker)
    except ValueError:
        raise NotationError(text, f"unknown requirement '{marker}', expected H, J or P")
    placement = EnemyPlacement(
        column=int(column),
        rows=tuple(sorted({int(digit) for digit in rows})),
        requirement=requirement,
    )
    # Range check up front
    placement.positions()
    return placement


def parse_solve_request(text: str) -> SolveMode:
    match = _SOLVE_RE.match(text)
    if not match:
        raise NotationError(text, "expected 'solve [fast] [in <n>]'")
    fast, bound = match.groups()
    if bound is None:
        return SolveMode.fast() if fast else SolveMode.optimal()
    if not re.fullmatch(r"[0-9]+", bound):
        raise NotationError(text, f"'{bound}' is not a move count")
    if fast:
        return SolveMode.fast_bounded(int(bound))
    return SolveMode.optimal_bounded(int(bound))


def format_solution(solution: Solution | Iterable[Move]) -> str:
    moves = list(solution)
    if not moves:
        return ALREADY_SOLVED
    return ", ".join(format_move(move) for move in moves)
