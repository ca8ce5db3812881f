"""
Solve Modes - What kind of search to run, and what it returns.

A SolveMode is a closed variant:
- optimal():            iterative deepening until a solution is found
- optimal_bounded(n):   iterative deepening up to n moves
- fast():               best-first search, first goal wins
- fast_bounded(n):      best-first search, never deeper than n moves
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from ..engine_core.move import Move


class SearchKind(Enum):
    OPTIMAL = "optimal"
    FAST = "fast"


@dataclass(frozen=True)
class SolveMode:
    """A search strategy plus an optional move bound."""
    kind: SearchKind = SearchKind.OPTIMAL
    bound: int | None = None

    def __post_init__(self):
        if self.bound is not None and self.bound < 0:
            raise ValueError(f"Move bound must be non-negative, got {self.bound}")

    @classmethod
    def optimal(cls) -> SolveMode:
        return cls(SearchKind.OPTIMAL)

    @classmethod
    def optimal_bounded(cls, bound: int) -> SolveMode:
        return cls(SearchKind.OPTIMAL, bound)

    @classmethod
    def fast(cls) -> SolveMode:
        return cls(SearchKind.FAST)

    @classmethod
    def fast_bounded(cls, bound: int) -> SolveMode:
        return cls(SearchKind.FAST, bound)

    @property
    def is_optimal(self) -> bool:
        return self.kind is SearchKind.OPTIMAL

    @property
    def is_bounded(self) -> bool:
        return self.bound is not None

    def __str__(self) -> str:
        text = "solve" if self.is_optimal else "solve fast"
        if self.is_bounded:
            text += f" in {self.bound}"
        return text


@dataclass(frozen=True)
class SearchStats:
    """Counters collected during one solve call (for logging and the API)."""
    mode: str = ""
    nodes: int = 0  # Nodes expanded
    depth: int = 0  # Deepest bound/level reached
    elapsed: float = 0.0  # Seconds
    table_hits: int = 0
    table_evictions: int = 0
    workers: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "nodes": self.nodes,
            "depth": self.depth,
            "elapsed": round(self.elapsed, 6),
            "table_hits": self.table_hits,
            "table_evictions": self.table_evictions,
            "workers": self.workers,
        }


@dataclass(frozen=True)
class Solution:
    """
    An immutable, ordered move sequence that turns one arena snapshot
    into a goal arrangement.
    """
    moves: tuple[Move, ...] = ()
    stats: SearchStats = field(default_factory=SearchStats, compare=False)

    @property
    def is_empty(self) -> bool:
        return not self.moves

    def __len__(self) -> int:
        return len(self.moves)

    def __iter__(self) -> Iterator[Move]:
        return iter(self.moves)

    def __str__(self) -> str:
        return ", ".join(str(move) for move in self.moves)

    def to_dict(self) -> dict[str, Any]:
        return {
            "moves": [str(move) for move in self.moves],
            "length": len(self.moves),
            "stats": self.stats.to_dict(),
        }
