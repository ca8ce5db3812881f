"""
Tests for the goal model.

Tests:
- Coverage of undeclared enemies within the group budget
- Weapon requirements and tool availability
- Declared groups and explicit group counts
- Exact-size shapes and the greedy heuristic features
"""

import pytest

from ..catalog import Catalog, catalog_from_dict
from ..engine_core.goal import GoalModel, Group
from ..engine_core.state import ArenaState, Enemy, Position, Requirement, Tool
from ..search.heuristic import HeuristicEvaluator


def _single_cell_model():
    return GoalModel(catalog_from_dict({
        "name": "single",
        "shapes": [{"name": "single", "cells": [[0, 0]], "ring_anchored": True}],
    }))


class TestCoverage:
    """Undeclared enemies cleared by the built-in attacks."""

    def test_empty_arena(self, goal_model):
        assert goal_model.is_goal(ArenaState())

    @pytest.mark.parametrize("placements", [
        ("c2 1234",),
        ("c2 1234", "c4 12", "c5 12"),
        ("c2 124", "c4 12", "c5 1"),
        ("c2 1234 J",),
    ])
    def test_goal(self, goal_model, make_arena, placements):
        assert goal_model.is_goal(make_arena(*placements))

    @pytest.mark.parametrize("placements", [
        ("c2 124", "c3 3", "c4 12", "c5 12"),
        ("c2 124", "c3 3"),
        ("c2 12 J", "c3 12 J"),
    ])
    def test_not_goal(self, goal_model, make_arena, placements):
        assert not goal_model.is_goal(make_arena(*placements))

    def test_outer_hammer_enemy_needs_throwing_hammer(self, goal_model, make_arena):
        """A hammer enemy on the line can only be hit by a thrown hammer."""
        assert goal_model.is_goal(make_arena("c4 1 H", "c4 23"))
        assert not goal_model.is_goal(make_arena("c4 1 H", "c4 23", hammer=False))

    def test_iron_boots(self, goal_model, make_arena):
        """Iron boots clear a column holding both jump and spiked enemies."""
        placements = ("c2 12", "c3 12", "c5 12", "c5 3 P", "c5 4 J", "c8 12", "c9 12")
        assert goal_model.is_goal(make_arena(*placements))
        assert not goal_model.is_goal(make_arena(*placements, boots=False))

    def test_single_cell_shape(self, single_enemy_arena):
        assert _single_cell_model().is_goal(single_enemy_arena)

    def test_single_cell_shape_is_ring_anchored(self):
        arena = ArenaState()
        arena.place(Position(2, 1), Enemy())
        assert not _single_cell_model().is_goal(arena)


class TestGroupCount:
    def test_automatic_budget(self, goal_model, make_arena):
        """Four enemies fit one attack, so two far-apart pairs fail."""
        assert not goal_model.is_goal(make_arena("c2 12", "c5 12"))

    def test_explicit_budget(self, goal_model, make_arena):
        assert goal_model.is_goal(make_arena("c2 12", "c5 12", groups=2))

    def test_budget_from_compile(self, goal_model, make_arena):
        assert goal_model.compile(make_arena("c2 1234", "c4 12", "c5 12")).budget == 2
        assert goal_model.compile(make_arena("c2 1", groups=3)).budget == 3

    def test_more_groups_than_count(self, goal_model):
        """Declared groups beyond the count can never all be cleared."""
        cells = [None] * 48
        cells[Position(1, 1).index] = Enemy(group=1)
        cells[Position(1, 5).index] = Enemy(group=2)
        arena = ArenaState(cells=cells, group_count=1)
        check = goal_model.compile(arena)
        assert check.excess_groups == 1
        assert not goal_model.is_goal(arena)
        arena.group_count = 2
        assert goal_model.is_goal(arena)


class TestDeclaredGroups:
    """Declared groups must be cleared by one attack each."""

    def test_each_group_matches(self, goal_model):
        arena = ArenaState()
        arena.place(Position(1, 2), Enemy(group=1))
        arena.place(Position(2, 2), Enemy(group=1))
        arena.place(Position(1, 5), Enemy(group=2))
        assert goal_model.is_goal(arena)

    def test_scattered_group(self, goal_model):
        arena = ArenaState()
        arena.place(Position(1, 1), Enemy(group=1))
        arena.place(Position(1, 5), Enemy(group=1))
        assert not goal_model.is_goal(arena)

    def test_declared_and_undeclared(self, goal_model):
        arena = ArenaState()
        arena.place(Position(1, 2), Enemy(group=1))
        arena.place(Position(1, 7), Enemy())
        arena.place(Position(2, 7), Enemy())
        assert goal_model.is_goal(arena)
        arena.place(Position(3, 10), Enemy())
        assert not goal_model.is_goal(arena)

    def test_matches(self, goal_model, catalog):
        group = Group(1, (Position(1, 2), Position(2, 2)), frozenset({Requirement.JUMP}))
        tools = {Tool.THROWING_HAMMER, Tool.IRON_BOOTS}
        assert goal_model.matches(group, catalog.get("jump_line"), tools)
        assert not goal_model.matches(group, catalog.get("hammer_block"), tools)

    def test_matches_needs_tool(self, goal_model, catalog):
        group = Group(1, (Position(1, 2),), frozenset({Requirement.HAMMER}))
        shape = catalog.get("hammer_throw_line")
        assert goal_model.matches(group, shape, {Tool.THROWING_HAMMER})
        assert not goal_model.matches(group, shape, set())

    def test_groups(self, goal_model):
        arena = ArenaState()
        arena.place(Position(1, 3), Enemy(Requirement.JUMP, group=2))
        arena.place(Position(1, 1), Enemy(group=1))
        groups = goal_model.groups(arena)
        assert [group.id for group in groups] == [1, 2]
        assert groups[1].requirements == {Requirement.JUMP}
        assert groups[0].mask == 1


class TestExactShapes:
    """Shapes without min_count must be filled exactly."""

    def test_adjacent_pair(self, pair_catalog):
        arena = ArenaState()
        arena.place(Position(1, 1), Enemy())
        arena.place(Position(1, 2), Enemy())
        assert GoalModel(pair_catalog).is_goal(arena)

    def test_separated_pair(self, pair_catalog):
        arena = ArenaState()
        arena.place(Position(1, 1), Enemy())
        arena.place(Position(1, 3), Enemy())
        assert not GoalModel(pair_catalog).is_goal(arena)

    def test_group_too_small(self, pair_catalog):
        arena = ArenaState()
        arena.place(Position(1, 1), Enemy(group=1))
        assert not GoalModel(pair_catalog).is_goal(arena)

    def test_empty_catalog(self, single_enemy_arena):
        model = GoalModel(Catalog(shapes=()))
        assert model.is_goal(ArenaState())
        assert not model.is_goal(single_enemy_arena)


class TestHeuristicFeatures:
    def test_goal_has_nothing_uncovered(self, goal_model, make_arena):
        arena = make_arena("c2 1234")
        check = goal_model.compile(arena)
        evaluation = HeuristicEvaluator().evaluate(check, check.masks_of(arena))
        assert evaluation.total == 0
        assert evaluation.feature_breakdown["uncovered_enemies"] == 0

    def test_counts_leftover_enemies(self, goal_model, make_arena):
        """One attack covers the full column; the lone enemy is left over."""
        arena = make_arena("c2 1234", "c8 3", groups=1)
        check = goal_model.compile(arena)
        assert check.uncovered(check.masks_of(arena)) == 1
        assert HeuristicEvaluator().score(check, check.masks_of(arena)) == 1.0

    def test_unmatched_groups(self, goal_model):
        arena = ArenaState()
        arena.place(Position(1, 1), Enemy(group=1))
        arena.place(Position(1, 5), Enemy(group=1))
        check = goal_model.compile(arena)
        assert check.unmatched_groups(check.masks_of(arena)) == 1
        assert HeuristicEvaluator().score(check, check.masks_of(arena)) == 2.0
