"""
Goal Model - Decides whether every enemy can be cleared in one attack per group.

Two kinds of enemies:
1. Declared groups (group id set): each non-empty group must match one
   catalog shape on its own.
2. Undeclared enemies (group None): partitioned by the model itself.
   They must be covered by at most ``budget`` placements, where the
   budget is the group count left over after the declared groups.

Evaluation works on bitmasks of the 48 cells, one mask per enemy class
(requirement, group id). Moves only relocate enemies, so the classes and
the budget are fixed for a whole search and can be compiled once.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Sequence, TYPE_CHECKING

from .state import ArenaState, Position, Requirement, Tool, Weapon

if TYPE_CHECKING:
    from ..catalog.shapes import AttackShape, Catalog, Placement

EnemyClass = tuple[Requirement, "int | None"]


@dataclass(frozen=True)
class Group:
    """Live members of one declared group."""
    id: int
    positions: tuple[Position, ...]
    requirements: frozenset[Requirement]

    @property
    def mask(self) -> int:
        mask = 0
        for position in self.positions:
            mask |= 1 << position.index
        return mask

    def __len__(self) -> int:
        return len(self.positions)


def _shape_fits(shape: AttackShape, mask: int, requirements: Iterable[Requirement]) -> bool:
    """Check if one placement of ``shape`` clears exactly the enemies in ``mask``."""
    count = mask.bit_count()
    if not shape.minimum <= count <= shape.size:
        return False
    if not all(req.allows(shape.weapon) for req in requirements):
        return False
    return any(placement.mask & mask == mask for placement in shape.placements())


class GoalModel:
    """
    Goal test over a catalog of attack shapes.

    Usage:
        model = GoalModel(default_catalog())
        if model.is_goal(arena):
            ...
        check = model.compile(arena)  # for repeated tests during search
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def matches(self, group: Group, shape: AttackShape, tools: Iterable[Tool]) -> bool:
        """True iff ``shape`` can clear ``group`` under the given tools."""
        if not shape.usable_with(tools):
            return False
        if len(group) == 0:
            return True
        return _shape_fits(shape, group.mask, group.requirements)

    def groups(self, arena: ArenaState) -> list[Group]:
        """Declared groups of the arena, in ascending id order."""
        groups = []
        for group_id, positions in sorted(arena.groups().items()):
            requirements = frozenset(arena.enemy_at(p).requirement for p in positions)
            groups.append(Group(group_id, tuple(positions), requirements))
        return groups

    def is_goal(self, arena: ArenaState) -> bool:
        check = self.compile(arena)
        return check.is_goal(check.masks_of(arena))

    def compile(self, arena: ArenaState) -> GoalCheck:
        """Precompute the goal test for every rearrangement of ``arena``."""
        classes = sorted(
            {(enemy.requirement, enemy.group) for _, enemy in arena.enemies()},
            key=_class_order,
        )
        undeclared = len(arena.undeclared())
        declared = len(arena.groups())
        if arena.group_count is None:
            max_size = self.catalog.max_size
            budget = -(-undeclared // max_size) if max_size else int(undeclared > 0)
            excess = 0
        else:
            budget = max(0, arena.group_count - declared)
            excess = max(0, declared - arena.group_count)
        return GoalCheck(
            classes=tuple(classes),
            shapes=self.catalog.available(arena.tools),
            budget=budget,
            excess_groups=excess,
        )


def _class_order(enemy_class: EnemyClass) -> tuple:
    requirement, group = enemy_class
    return (group is None, group if group is not None else 0, requirement.value)


class GoalCheck:
    """
    Compiled goal test for one set of enemy classes, tools and group budget.

    States are tuples of bitmasks aligned with ``classes``.
    """

    def __init__(
        self,
        classes: Sequence[EnemyClass],
        shapes: Sequence[AttackShape],
        budget: int,
        excess_groups: int = 0,
    ):
        self.classes = tuple(classes)
        self.shapes = tuple(shapes)
        self.budget = budget
        # Declared groups beyond the group count; such arenas never clear
        self.excess_groups = excess_groups
        self.max_size = max((shape.size for shape in self.shapes), default=0)

        # Declared groups: group id -> class indexes
        self._declared: dict[int, list[int]] = {}
        self._undeclared: list[int] = []
        for i, (_, group) in enumerate(self.classes):
            if group is None:
                self._undeclared.append(i)
            else:
                self._declared.setdefault(group, []).append(i)

        # Undeclared classes a weapon cannot defeat
        self._weapons: list[Weapon | None] = []
        for shape in self.shapes:
            if shape.weapon not in self._weapons:
                self._weapons.append(shape.weapon)
        self._blocked: dict[Weapon | None, list[int]] = {
            weapon: [
                i for i in self._undeclared
                if not self.classes[i][0].allows(weapon)
            ]
            for weapon in self._weapons
        }

        self._placements: list[tuple[Placement, Weapon | None, int]] = [
            (placement, shape.weapon, shape.minimum)
            for shape in self.shapes
            for placement in shape.placements()
        ]
        self._by_cell: dict[int, list[tuple[Placement, Weapon | None, int]]] = {}
        for entry in self._placements:
            for cell in entry[0].cells:
                self._by_cell.setdefault(cell, []).append(entry)

    @property
    def has_declared_groups(self) -> bool:
        return bool(self._declared)

    def masks_of(self, arena: ArenaState) -> tuple[int, ...]:
        """Per-class occupancy masks of ``arena``."""
        index = {enemy_class: i for i, enemy_class in enumerate(self.classes)}
        masks = [0] * len(self.classes)
        for position, enemy in arena.enemies():
            masks[index[(enemy.requirement, enemy.group)]] |= 1 << position.index
        return tuple(masks)

    def is_goal(self, masks: Sequence[int]) -> bool:
        if self.excess_groups:
            return False
        return self.unmatched_groups(masks) == 0 and self._undeclared_coverable(masks)

    def uncovered(self, masks: Sequence[int]) -> int:
        """
        Undeclared enemies left after greedily spending the budget on the
        largest compatible placements. Zero does not imply a goal.
        """
        remaining = self._remaining(masks)
        if remaining:
            blocked = self._blocked_masks(masks)
            for _ in range(self.budget):
                best = 0
                for placement, weapon, minimum in self._placements:
                    covered = placement.mask & remaining
                    if covered & blocked[weapon]:
                        continue
                    if covered.bit_count() >= max(minimum, best.bit_count() + 1):
                        best = covered
                if not best:
                    break
                remaining ^= best
        return remaining.bit_count()

    # -------------------------------------------------------------------------
    # Declared groups
    # -------------------------------------------------------------------------

    def unmatched_groups(self, masks: Sequence[int]) -> int:
        """Non-empty declared groups that no available shape matches."""
        unmatched = 0
        for indexes in self._declared.values():
            mask = 0
            requirements = set()
            for i in indexes:
                if masks[i]:
                    mask |= masks[i]
                    requirements.add(self.classes[i][0])
            if not mask:
                continue
            if not any(_shape_fits(shape, mask, requirements) for shape in self.shapes):
                unmatched += 1
        return unmatched

    # -------------------------------------------------------------------------
    # Undeclared enemies
    # -------------------------------------------------------------------------

    def _remaining(self, masks: Sequence[int]) -> int:
        remaining = 0
        for i in self._undeclared:
            remaining |= masks[i]
        return remaining

    def _blocked_masks(self, masks: Sequence[int]) -> dict[Weapon | None, int]:
        blocked = {}
        for weapon, indexes in self._blocked.items():
            mask = 0
            for i in indexes:
                mask |= masks[i]
            blocked[weapon] = mask
        return blocked

    def _undeclared_coverable(self, masks: Sequence[int]) -> bool:
        remaining = self._remaining(masks)
        if not remaining:
            return True
        return self._cover(remaining, self.budget, self._blocked_masks(masks))

    def _cover(self, remaining: int, budget: int, blocked: dict[Weapon | None, int]) -> bool:
        """Cover ``remaining`` with at most ``budget`` placements."""
        if not remaining:
            return True
        if budget <= 0 or remaining.bit_count() > budget * self.max_size:
            return False

        # The lowest remaining enemy must be cleared by some placement
        cell = (remaining & -remaining).bit_length() - 1
        tried = set()
        for placement, weapon, minimum in self._by_cell.get(cell, ()):
            covered = placement.mask & remaining
            if covered in tried or covered & blocked[weapon]:
                continue
            if covered.bit_count() < minimum:
                continue
            tried.add(covered)
            if self._cover(remaining ^ covered, budget - 1, blocked):
                return True
        return False
