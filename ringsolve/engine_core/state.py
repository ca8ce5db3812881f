"""
Arena State - The 4x12 ring arena and the enemies standing on it.

Design principles:
- Value type: a fixed array of 48 cells, cloned per search branch
- Canonical cell index: (ring - 1) * 12 + (column - 1)
- Serializable: can be turned into plain dicts for the API
- No game behaviour beyond accessors; moves live in move.py
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, TYPE_CHECKING

from ..errors import InvalidGroupCount, InvalidPosition, OccupiedCell, UnknownTool

if TYPE_CHECKING:
    from .goal import GoalModel


RINGS = 4
COLUMNS = 12
CELLS = RINGS * COLUMNS


class Weapon(Enum):
    """Attacks an attack shape can be performed with."""
    JUMP = "jump"
    HAMMER = "hammer"
    IRON_BOOTS = "iron_boots"


class Requirement(Enum):
    """What an enemy has to be hit with."""
    NONE = "none"  # Unconstrained
    HAMMER = "hammer"
    JUMP = "jump"
    SPIKED = "spiked"  # Iron boots or hammer

    @property
    def symbol(self) -> str:
        return _REQUIREMENT_SYMBOLS[self]

    @property
    def defeated_by(self) -> frozenset[Weapon]:
        """Weapons that can defeat an enemy with this requirement."""
        return _DEFEATED_BY[self]

    def allows(self, weapon: Weapon | None) -> bool:
        """Check if an attack with ``weapon`` (None = any weapon) defeats this enemy."""
        return weapon is None or weapon in self.defeated_by

    @classmethod
    def from_symbol(cls, symbol: str | None) -> Requirement:
        """Parse a placement marker ('', 'H', 'J', 'P')."""
        if not symbol:
            return cls.NONE
        for requirement, sym in _REQUIREMENT_SYMBOLS.items():
            if sym and sym == symbol.upper():
                return requirement
        raise ValueError(f"Unknown requirement marker: {symbol}")


_REQUIREMENT_SYMBOLS = {
    Requirement.NONE: "",
    Requirement.HAMMER: "H",
    Requirement.JUMP: "J",
    Requirement.SPIKED: "P",
}

_DEFEATED_BY = {
    Requirement.NONE: frozenset(Weapon),
    Requirement.HAMMER: frozenset({Weapon.HAMMER}),
    Requirement.JUMP: frozenset({Weapon.JUMP, Weapon.IRON_BOOTS}),
    Requirement.SPIKED: frozenset({Weapon.IRON_BOOTS, Weapon.HAMMER}),
}


class Tool(Enum):
    """Equipment that unlocks extra attack shapes."""
    THROWING_HAMMER = "hammer"
    IRON_BOOTS = "iron_boots"

    @classmethod
    def from_name(cls, name: str) -> Tool:
        """Look up a tool by name ('hammer', 'throwing_hammer', 'iron_boots')."""
        normalized = name.strip().lower().replace("-", "_")
        if normalized == "throwing_hammer":
            return cls.THROWING_HAMMER
        try:
            return cls(normalized)
        except ValueError:
            known = ", ".join(t.value for t in cls)
            raise UnknownTool(f"Unknown tool '{name}' (known: {known})")


DEFAULT_TOOLS = frozenset(Tool)


@dataclass(frozen=True, order=True)
class Position:
    """A cell on the arena. Ring 1 is innermost; columns count clockwise."""
    ring: int
    column: int

    def __post_init__(self):
        if not 1 <= self.ring <= RINGS:
            raise InvalidPosition(
                f"Ring {self.ring} is outside 1..{RINGS}",
                context={"ring": self.ring},
            )
        if not 1 <= self.column <= COLUMNS:
            raise InvalidPosition(
                f"Column {self.column} is outside 1..{COLUMNS}",
                context={"column": self.column},
            )

    @property
    def index(self) -> int:
        """Canonical cell index in 0..47."""
        return (self.ring - 1) * COLUMNS + (self.column - 1)

    @classmethod
    def from_index(cls, index: int) -> Position:
        if not 0 <= index < CELLS:
            raise InvalidPosition(f"Cell index {index} is outside 0..{CELLS - 1}")
        return cls(ring=index // COLUMNS + 1, column=index % COLUMNS + 1)

    def __str__(self) -> str:
        return f"r{self.ring} c{self.column}"


@dataclass(frozen=True)
class Enemy:
    """
    An enemy standing on one cell.

    ``group`` is the declared group id; None means the goal model
    decides which attack clears it.
    """
    requirement: Requirement = Requirement.NONE
    group: int | None = None

    @property
    def symbol(self) -> str:
        """Single character for compact displays."""
        return self.requirement.symbol or "E"


@dataclass
class ArenaState:
    """
    Complete arena at a point in time.

    Holds up to 48 enemies keyed by canonical cell index, the set of
    available tools, and an optional declared group count.
    """
    cells: list[Enemy | None] = field(default_factory=lambda: [None] * CELLS)
    tools: set[Tool] = field(default_factory=lambda: set(DEFAULT_TOOLS))
    group_count: int | None = None  # None = derived from the enemies

    def __post_init__(self):
        if len(self.cells) != CELLS:
            raise ValueError(f"Arena needs exactly {CELLS} cells, got {len(self.cells)}")

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    def enemy_at(self, position: Position) -> Enemy | None:
        """Get the enemy on a cell, if any."""
        return self.cells[position.index]

    def enemies(self) -> Iterator[tuple[Position, Enemy]]:
        """Iterate (position, enemy) pairs in canonical cell order."""
        for index, enemy in enumerate(self.cells):
            if enemy is not None:
                yield Position.from_index(index), enemy

    @property
    def enemy_count(self) -> int:
        return sum(1 for enemy in self.cells if enemy is not None)

    @property
    def is_empty(self) -> bool:
        return self.enemy_count == 0

    def groups(self) -> dict[int, list[Position]]:
        """Declared groups and the positions of their live members."""
        groups: dict[int, list[Position]] = {}
        for position, enemy in self.enemies():
            if enemy.group is not None:
                groups.setdefault(enemy.group, []).append(position)
        return groups

    def undeclared(self) -> list[Position]:
        """Positions of enemies without a declared group."""
        return [pos for pos, enemy in self.enemies() if enemy.group is None]

    def has_tool(self, tool: Tool) -> bool:
        return tool in self.tools

    def key(self) -> tuple:
        """Canonical hashable encoding of the arena contents."""
        return (
            tuple(self.cells),
            frozenset(self.tools),
            self.group_count,
        )

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def place(self, position: Position, enemy: Enemy, overwrite: bool = False):
        """
        Put an enemy on a cell.

        Raises OccupiedCell if the cell already holds an enemy, unless
        ``overwrite`` is set, and InvalidGroupCount if a new group id
        would exceed the declared group count.
        """
        if not overwrite and self.cells[position.index] is not None:
            raise OccupiedCell(position.ring, position.column)
        self.check_group_room(enemy.group, [position])
        self.cells[position.index] = enemy

    def check_group_room(self, group: int | None, replacing: Iterable[Position] = ()):
        """
        Raise InvalidGroupCount if placing a member of ``group`` on the
        ``replacing`` cells would declare more groups than group_count.
        """
        if group is None or self.group_count is None:
            return
        replaced = {position.index for position in replacing}
        declared = {
            enemy.group for index, enemy in enumerate(self.cells)
            if enemy is not None and enemy.group is not None and index not in replaced
        }
        declared.add(group)
        if len(declared) > self.group_count:
            raise InvalidGroupCount(self.group_count, len(declared))

    def remove(self, position: Position):
        """Remove the enemy on a cell. No-op on an empty cell."""
        self.cells[position.index] = None

    def set_group_count(self, count: int | None):
        """
        Declare how many groups the enemies form.

        None restores the automatic count. The count may not be
        negative or lower than the number of declared group ids.
        """
        if count is not None:
            minimum = len(self.groups())
            if count < 0 or count < minimum:
                raise InvalidGroupCount(count, minimum)
        self.group_count = count

    def set_tool(self, tool: Tool, available: bool):
        """Mark a tool as available or not."""
        if available:
            self.tools.add(tool)
        else:
            self.tools.discard(tool)

    def clear(self):
        """Remove every enemy and restore default settings."""
        self.cells = [None] * CELLS
        self.tools = set(DEFAULT_TOOLS)
        self.group_count = None

    def clone(self) -> ArenaState:
        """Deep copy. Enemies are immutable, so a shallow list copy suffices."""
        return ArenaState(
            cells=list(self.cells),
            tools=set(self.tools),
            group_count=self.group_count,
        )

    def is_goal(self, goal_model: GoalModel) -> bool:
        """Check if every enemy group can be cleared in one attack."""
        return goal_model.is_goal(self)

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "enemies": [
                {
                    "ring": pos.ring,
                    "column": pos.column,
                    "requirement": enemy.requirement.value,
                    "group": enemy.group,
                }
                for pos, enemy in self.enemies()
            ],
            "tools": sorted(tool.value for tool in self.tools),
            "group_count": self.group_count,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ArenaState:
        arena = cls()
        for item in data.get("enemies", []):
            position = Position(ring=item["ring"], column=item["column"])
            enemy = Enemy(
                requirement=Requirement(item.get("requirement", "none")),
                group=item.get("group"),
            )
            arena.place(position, enemy)
        if "tools" in data:
            arena.tools = {Tool.from_name(name) for name in data["tools"]}
        arena.set_group_count(data.get("group_count"))
        return arena
