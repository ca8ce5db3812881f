"""
Tests for moves, the permutation algebra and move generation.

Tests:
- Ring rotations and column shifts on concrete cells
- Normalization and text form
- Identity, inverse and composition laws
- Canonical move list and follow-up pruning
"""

from collections import Counter

import pytest

from ..engine_core.move import Move, MoveKind, compose, inverse, merge
from ..engine_core.move_generator import MoveGenerator, all_moves, legal_moves
from ..engine_core.reducer import apply_move, apply_moves
from ..engine_core.state import CELLS, ArenaState, Enemy, Position, Requirement
from ..errors import InvalidPosition

IDENTITY = tuple(range(CELLS))


def _arena(*cells):
    arena = ArenaState()
    for ring, column, requirement in cells:
        arena.place(Position(ring, column), Enemy(requirement))
    return arena


@pytest.fixture
def mixed_arena():
    return _arena(
        (1, 1, Requirement.NONE),
        (2, 4, Requirement.HAMMER),
        (3, 7, Requirement.JUMP),
        (4, 10, Requirement.SPIKED),
        (4, 4, Requirement.NONE),
    )


class TestRingRotation:
    def test_clockwise(self):
        arena = apply_move(_arena((1, 1, Requirement.NONE)), Move.ring(1, 3))
        assert arena.enemy_at(Position(1, 4)) is not None
        assert arena.enemy_count == 1

    def test_wraps_around(self):
        arena = apply_move(_arena((1, 1, Requirement.NONE)), Move.ring(1, -1))
        assert arena.enemy_at(Position(1, 12)) is not None

    def test_other_rings_untouched(self):
        arena = apply_move(_arena((2, 1, Requirement.NONE)), Move.ring(1, 5))
        assert arena.enemy_at(Position(2, 1)) is not None


class TestColumnShift:
    def test_outward(self):
        arena = apply_move(_arena((1, 4, Requirement.NONE)), Move.column(4, 2))
        assert arena.enemy_at(Position(3, 4)) is not None

    def test_crosses_to_opposite_column(self):
        """Past the outer ring an enemy continues inward on column c + 6."""
        arena = apply_move(_arena((4, 4, Requirement.NONE)), Move.column(4, 1))
        assert arena.enemy_at(Position(4, 10)) is not None
        arena = apply_move(_arena((4, 4, Requirement.NONE)), Move.column(4, 2))
        assert arena.enemy_at(Position(3, 10)) is not None

    def test_inward_from_inner_ring(self):
        arena = apply_move(_arena((1, 4, Requirement.NONE)), Move.column(4, -1))
        assert arena.enemy_at(Position(1, 10)) is not None

    @pytest.mark.parametrize("amount", [1, 2, 3, 4, 5])
    def test_opposite_column_is_reversed(self, amount):
        """Shifting column c + 6 by -k is the same as shifting column c by k."""
        assert Move.column(10, -amount).permutation() == Move.column(4, amount).permutation()


class TestMoveValues:
    def test_index_range(self):
        with pytest.raises(InvalidPosition):
            Move.ring(5, 1)
        with pytest.raises(InvalidPosition):
            Move.column(13, 1)

    @pytest.mark.parametrize("move,expected", [
        (Move.ring(1, 7), Move.ring(1, -5)),
        (Move.ring(1, -6), Move.ring(1, 6)),
        (Move.ring(2, 13), Move.ring(2, 1)),
        (Move.column(8, 1), Move.column(2, -1)),
        (Move.column(2, 12), Move.column(2, 4)),
        (Move.column(3, -5), Move.column(3, 3)),
    ])
    def test_normalized(self, move, expected):
        assert move.normalized() == expected

    def test_str_is_normalized(self):
        assert str(Move.ring(3, -1)) == "r3 -1"
        assert str(Move.column(8, 1)) == "c2 -1"

    def test_track(self):
        assert Move.ring(3, 1).track == (0, 3)
        assert Move.column(9, 1).track == Move.column(3, 2).track == (1, 3)

    def test_kind(self):
        assert Move.ring(1, 1).kind is MoveKind.RING
        assert Move.column(1, 1).kind is MoveKind.COLUMN


class TestPermutationAlgebra:
    """Laws that make moves a group of permutations."""

    def test_full_turns_are_identity(self):
        assert Move.ring(2, 12).permutation() == IDENTITY
        assert Move.column(5, 8).permutation() == IDENTITY
        assert Move.ring(2, 12).is_identity

    @pytest.mark.parametrize("amount", range(1, 12))
    def test_ring_complement(self, amount):
        """Rotating by k and then 12 - k returns every cell."""
        assert compose(Move.ring(4, amount), Move.ring(4, 12 - amount)) == IDENTITY

    def test_every_move_is_reversible(self, mixed_arena):
        for move in all_moves():
            moved = apply_move(mixed_arena, move)
            assert apply_move(moved, inverse(move)).key() == mixed_arena.key()

    def test_enemies_are_preserved(self, mixed_arena):
        """Moves only relocate enemies; the multiset of enemies is unchanged."""
        before = Counter(enemy for _, enemy in mixed_arena.enemies())
        for move in all_moves():
            after = Counter(enemy for _, enemy in apply_move(mixed_arena, move).enemies())
            assert after == before

    def test_compose_matches_sequential_application(self, mixed_arena):
        first, second = Move.ring(2, 3), Move.column(4, -2)
        perm = compose(first, second)
        sequential = apply_moves(mixed_arena, [first, second])
        for position, enemy in mixed_arena.enemies():
            assert sequential.enemy_at(Position.from_index(perm[position.index])) == enemy

    def test_merge(self):
        assert merge(Move.ring(1, 3), Move.ring(1, -3)) is None
        assert merge(Move.ring(1, 5), Move.ring(1, 4)) == Move.ring(1, -3)
        assert merge(Move.column(2, 3), Move.column(8, 1)) == Move.column(2, 2)

    def test_merge_different_tracks(self):
        with pytest.raises(ValueError):
            merge(Move.ring(1, 1), Move.ring(2, 1))

    def test_apply_does_not_mutate(self, mixed_arena):
        key = mixed_arena.key()
        apply_move(mixed_arena, Move.ring(1, 1))
        assert mixed_arena.key() == key


class TestMoveGeneration:
    def test_all_moves(self):
        """44 ring rotations plus 42 column shifts, no identities, all distinct."""
        moves = all_moves()
        assert len(moves) == 86
        assert not any(move.is_identity for move in moves)
        assert len({move.permutation() for move in moves}) == 86

    def test_canonical_order(self):
        moves = all_moves()
        assert moves[:3] == (Move.ring(1, 1), Move.ring(1, -1), Move.ring(1, 2))
        assert list(moves) == sorted(moves, key=Move.sort_key)
        assert moves[-1] == Move.column(6, 4)

    def test_first_step_has_every_move(self):
        assert legal_moves() == list(all_moves())

    def test_no_repeated_track(self):
        follow_ups = MoveGenerator().generate(Move.ring(2, 1))
        assert all(move.track != (0, 2) for move in follow_ups)

    def test_commuting_moves_in_ascending_order(self):
        """After ring 2 only rings 3 and 4 follow; every column may follow."""
        follow_ups = MoveGenerator().generate(Move.ring(2, 1))
        rings = {move.index for move in follow_ups if move.is_ring}
        columns = {move.index for move in follow_ups if not move.is_ring}
        assert rings == {3, 4}
        assert columns == {1, 2, 3, 4, 5, 6}

        follow_ups = MoveGenerator().generate(Move.column(9, 1))
        rings = {move.index for move in follow_ups if move.is_ring}
        columns = {move.index for move in follow_ups if not move.is_ring}
        assert rings == {1, 2, 3, 4}
        assert columns == {4, 5, 6}

    def test_pruned_orders_commute(self):
        """A pair allowed in only one order gives the same result both ways."""
        generator = MoveGenerator()
        for first in all_moves():
            for second in generator.generate(first):
                if first in generator.generate(second):
                    continue
                assert first.is_ring == second.is_ring
                assert not set(first.track_cells()) & set(second.track_cells())
                assert compose(first, second) == compose(second, first)
