"""
Engine Core - The arena, its moves and the goal test.

The engine core:
1. Holds the ArenaState (48 cells, tools, group count)
2. Models moves as permutations of the cells
3. Generates the distinct moves in canonical order
4. Applies moves via the reducer
5. Decides whether an arrangement is a goal
"""

from .state import (
    ArenaState,
    Enemy,
    Position,
    Requirement,
    Tool,
    Weapon,
    DEFAULT_TOOLS,
)
from .move import Move, MoveKind, compose, inverse, merge
from .reducer import apply_move, apply_moves
from .move_generator import CompiledMove, MoveGenerator, all_moves, legal_moves
from .goal import GoalCheck, GoalModel, Group

__all__ = [
    "ArenaState",
    "Enemy",
    "Position",
    "Requirement",
    "Tool",
    "Weapon",
    "DEFAULT_TOOLS",
    "Move",
    "MoveKind",
    "compose",
    "inverse",
    "merge",
    "apply_move",
    "apply_moves",
    "CompiledMove",
    "MoveGenerator",
    "all_moves",
    "legal_moves",
    "GoalCheck",
    "GoalModel",
    "Group",
]
