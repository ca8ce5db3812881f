"""
Pytest fixtures for ringsolve tests.
"""

import pytest
from typing import Callable

from ..catalog import Catalog, catalog_from_dict, default_catalog
from ..engine_core.goal import GoalModel
from ..engine_core.state import ArenaState, Enemy, Position, Tool
from ..notation import parse_placement
from ..search.engine import SearchEngine


@pytest.fixture
def catalog() -> Catalog:
    """The built-in attack catalog."""
    return default_catalog()


@pytest.fixture
def goal_model(catalog: Catalog) -> GoalModel:
    return GoalModel(catalog)


@pytest.fixture
def engine(goal_model: GoalModel) -> SearchEngine:
    """Single-threaded engine on the built-in catalog."""
    return SearchEngine(goal_model)


@pytest.fixture
def pair_catalog() -> Catalog:
    """One exact-size shape: two side-by-side cells on any ring, any weapon."""
    return catalog_from_dict({
        "name": "pairs",
        "shapes": [{"name": "pair", "cells": [[0, 0], [0, 1]]}],
    })


@pytest.fixture
def make_arena() -> Callable[..., ArenaState]:
    """
    Build an arena from placement notation.

    Usage:
        arena = make_arena("c2 124", "c3 3 H", hammer=False)
    """
    def build(*placements: str, hammer: bool = True, boots: bool = True,
              groups: int | None = None, group: int | None = None) -> ArenaState:
        arena = ArenaState()
        for text in placements:
            placement = parse_placement(text)
            for position in placement.positions():
                arena.place(position, Enemy(placement.requirement, group))
        arena.set_tool(Tool.THROWING_HAMMER, hammer)
        arena.set_tool(Tool.IRON_BOOTS, boots)
        arena.set_group_count(groups)
        return arena

    return build


@pytest.fixture
def single_enemy_arena() -> ArenaState:
    """One unconstrained enemy at ring 1, column 1."""
    arena = ArenaState()
    arena.place(Position(1, 1), Enemy())
    return arena
