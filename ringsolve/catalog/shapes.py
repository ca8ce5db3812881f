"""
Attack Shapes - Catalog entries describing what one attack can clear.

A shape is a cluster of relative cell offsets plus the weapon it is
performed with, the tool it needs (if any), and how many enemies it
must clear at least. Shapes are placed on the arena by rotating them
around it (column translation) and, unless ring-anchored, by sliding
them between rings.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Iterable

from ..engine_core.state import COLUMNS, RINGS, Tool, Weapon

Offset = tuple[int, int]  # (ring offset, column offset)


@dataclass(frozen=True)
class Placement:
    """One shape positioned on the arena."""
    shape: AttackShape
    cells: frozenset[int]
    mask: int

    @property
    def anchor(self) -> int:
        """Lowest cell index covered; used for stable ordering."""
        return min(self.cells)


@dataclass(frozen=True)
class AttackShape:
    """
    An immutable catalog entry.

    ``weapon`` None means any weapon; ``min_count`` None means the
    group must fill the shape exactly.
    """
    name: str
    cells: frozenset[Offset]
    weapon: Weapon | None = None
    tool: Tool | None = None
    min_count: int | None = None
    ring_anchored: bool = False
    description: str = field(default="", compare=False)

    @property
    def size(self) -> int:
        return len(self.cells)

    @property
    def minimum(self) -> int:
        """Fewest enemies this attack may clear."""
        return self.size if self.min_count is None else self.min_count

    def usable_with(self, tools: Iterable[Tool]) -> bool:
        return self.tool is None or self.tool in set(tools)

    def placements(self) -> tuple[Placement, ...]:
        """Every distinct position of the shape on the arena."""
        return _placements(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "cells": [list(offset) for offset in sorted(self.cells)],
            "weapon": self.weapon.value if self.weapon else None,
            "tool": self.tool.value if self.tool else None,
            "min_count": self.min_count,
            "ring_anchored": self.ring_anchored,
            "description": self.description,
        }


@lru_cache(maxsize=None)
def _placements(shape: AttackShape) -> tuple[Placement, ...]:
    if not shape.cells:
        return ()

    min_ring = min(dr for dr, _ in shape.cells)
    if shape.ring_anchored:
        ring_bases = [1]
        offsets = shape.cells
    else:
        offsets = frozenset((dr - min_ring, dc) for dr, dc in shape.cells)
        span = max(dr for dr, _ in offsets)
        ring_bases = list(range(1, RINGS - span + 1))

    seen: set[int] = set()
    placements = []
    for ring_base in ring_bases:
        for column_base in range(COLUMNS):
            cells = []
            for dr, dc in offsets:
                ring = ring_base + dr
                if not 1 <= ring <= RINGS:
                    break
                column = (column_base + dc) % COLUMNS
                cells.append((ring - 1) * COLUMNS + column)
            else:
                cell_set = frozenset(cells)
                if len(cell_set) != len(offsets):
                    continue
                mask = 0
                for cell in cell_set:
                    mask |= 1 << cell
                if mask in seen:
                    continue
                seen.add(mask)
                placements.append(Placement(shape=shape, cells=cell_set, mask=mask))

    placements.sort(key=lambda p: (p.anchor, p.mask))
    return tuple(placements)


@dataclass(frozen=True)
class Catalog:
    """An ordered, immutable collection of attack shapes."""
    shapes: tuple[AttackShape, ...]
    name: str = "custom"

    @property
    def max_size(self) -> int:
        """Largest number of cells any shape covers (0 for an empty catalog)."""
        return max((shape.size for shape in self.shapes), default=0)

    def get(self, name: str) -> AttackShape | None:
        for shape in self.shapes:
            if shape.name == name:
                return shape
        return None

    def available(self, tools: Iterable[Tool]) -> tuple[AttackShape, ...]:
        """Shapes whose tool requirement is met."""
        tools = set(tools)
        return tuple(shape for shape in self.shapes if shape.usable_with(tools))

    def __iter__(self):
        return iter(self.shapes)

    def __len__(self) -> int:
        return len(self.shapes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "shapes": [shape.to_dict() for shape in self.shapes],
        }
