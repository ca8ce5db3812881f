"""Bounded transposition table with LRU eviction for memory-limited search."""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Hashable
from typing import Any


class TranspositionTable:
    """
    LRU-evicting table of visited search nodes.

    Keys are (per-class masks, last move track); values are the depth
    budget the node was explored with (optimal search) or the depth it
    was reached at (best-first search).
    """

    def __init__(self, max_entries: int = 200_000) -> None:
        self._table: OrderedDict[Hashable, Any] = OrderedDict()
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def get(self, key: Hashable) -> Any | None:
        """Get value, moving to end if found (LRU)."""
        if key in self._table:
            self._table.move_to_end(key)
            self.hits += 1
            return self._table[key]
        self.misses += 1
        return None

    def put(self, key: Hashable, value: Any) -> None:
        """Add entry, evicting oldest if at capacity."""
        if key in self._table:
            self._table.move_to_end(key)
        else:
            if len(self._table) >= self.max_entries:
                self._table.popitem(last=False)
                self.evictions += 1
        self._table[key] = value

    def __contains__(self, key: Hashable) -> bool:
        return key in self._table

    def __len__(self) -> int:
        return len(self._table)

    def clear(self) -> None:
        """Drop all entries. Counters are kept for the whole solve."""
        self._table.clear()

    def stats(self) -> dict:
        total_lookups = self.hits + self.misses
        hit_rate = self.hits / total_lookups if total_lookups > 0 else 0.0
        return {
            "entries": len(self._table),
            "max_entries": self.max_entries,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
            "hit_rate": hit_rate,
        }
