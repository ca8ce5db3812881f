"""
Tests for arena sessions.

Tests:
- Atomic edits and their error codes
- Settings changes
- Executing moves and solving
- Session manager lifecycle
"""

import threading
import time

from ..catalog import Catalog
from ..engine_core.goal import GoalModel
from ..engine_core.move import Move
from ..engine_core.state import Position, Requirement, Tool
from ..search import CancelToken, SearchEngine, SolveMode
from ..session import ArenaSession, SessionManager


def _enemies(result):
    return {(e["ring"], e["column"]) for e in result.arena["enemies"]}


class TestEdits:
    def test_place(self):
        session = ArenaSession()
        result = session.apply_edit(2, [1, 2, 4])
        assert result.success
        assert _enemies(result) == {(1, 2), (2, 2), (4, 2)}
        assert len(result.changes) == 3

    def test_occupied_cell_is_atomic(self):
        """A failing edit leaves every cell as it was."""
        session = ArenaSession()
        session.apply_edit(2, [1, 2])
        result = session.apply_edit(2, [2, 3])
        assert not result.success
        assert result.error_code == "OCCUPIED_CELL"
        assert session.arena.enemy_at(Position(3, 2)) is None
        assert session.arena.enemy_count == 2

    def test_overwrite(self):
        session = ArenaSession()
        session.apply_edit(2, [1])
        result = session.apply_edit(2, [1], "H", overwrite=True)
        assert result.success
        assert session.arena.enemy_at(Position(1, 2)).requirement is Requirement.HAMMER

    def test_off_the_arena_is_atomic(self):
        session = ArenaSession()
        result = session.apply_edit(3, [1, 5])
        assert result.error_code == "INVALID_POSITION"
        assert session.arena.is_empty

    def test_requirement_forms(self):
        session = ArenaSession()
        assert session.apply_edit(1, [1], "J").success
        assert session.apply_edit(2, [1], "spiked").success
        assert session.apply_edit(3, [1], Requirement.HAMMER).success
        assert session.arena.enemy_at(Position(1, 2)).requirement is Requirement.SPIKED

    def test_unknown_requirement(self):
        session = ArenaSession()
        result = session.apply_edit(1, [1], "X")
        assert result.error_code == "INVALID_EDIT"
        assert session.arena.is_empty

    def test_clear_cells(self):
        session = ArenaSession()
        session.apply_edit(4, [1, 2, 3])
        result = session.apply_edit(4, [2, 3], clear=True)
        assert result.success
        assert _enemies(result) == {(1, 4)}

    def test_group(self):
        session = ArenaSession()
        session.apply_edit(4, [1, 2], group=1)
        assert session.arena.groups() == {1: [Position(1, 4), Position(2, 4)]}

    def test_group_beyond_count_is_atomic(self):
        session = ArenaSession()
        session.set_group_count(1)
        session.apply_edit(4, [1], group=1)
        result = session.apply_edit(6, [1, 2], group=2)
        assert result.error_code == "INVALID_GROUP_COUNT"
        assert session.arena.groups() == {1: [Position(1, 4)]}
        assert session.apply_edit(4, [1], group=2, overwrite=True).success


class TestSettings:
    def test_group_count(self):
        session = ArenaSession()
        session.apply_edit(1, [1], group=1)
        session.apply_edit(5, [1], group=2)
        result = session.set_group_count(1)
        assert result.error_code == "INVALID_GROUP_COUNT"
        assert session.set_group_count(3).arena["group_count"] == 3
        assert session.set_group_count(None).success

    def test_tools(self):
        session = ArenaSession()
        assert session.set_tool("hammer", False).arena["tools"] == ["iron_boots"]
        assert session.set_tool(Tool.THROWING_HAMMER, True).success
        assert session.set_tool("shield", True).error_code == "UNKNOWN_TOOL"

    def test_clear(self):
        session = ArenaSession()
        session.apply_edit(1, [1, 2])
        session.execute(Move.ring(1, 1))
        result = session.clear()
        assert result.success
        assert session.arena.is_empty
        assert session.executed == []


class TestSolving:
    def test_solve_then_execute(self):
        session = ArenaSession()
        session.apply_edit(2, [1, 2, 4])
        session.apply_edit(3, [3])
        result = session.solve(SolveMode.optimal_bounded(2))
        assert result.success
        assert [str(move) for move in result.solution] == ["r3 -1"]
        # Solving does not touch the live arena
        assert session.arena.enemy_at(Position(3, 3)) is not None

        for move in result.solution:
            session.execute(move)
        assert session.engine.goal_model.is_goal(session.arena)
        assert session.executed == [Move.ring(3, -1)]

    def test_no_solution_within_bound(self):
        session = ArenaSession()
        session.apply_edit(2, [1, 2, 4])
        session.apply_edit(3, [3])
        result = session.solve(SolveMode.optimal_bounded(0))
        assert not result.success
        assert result.error_code == "NO_SOLUTION_WITHIN_BOUND"
        assert result.solution is None

    def test_cancelled(self):
        session = ArenaSession()
        session.apply_edit(2, [1, 2, 4])
        session.apply_edit(3, [3])
        token = CancelToken()
        token.cancel()
        result = session.solve(SolveMode.optimal(), token)
        assert result.error_code == "CANCELLED"

    def test_cancel_without_solve(self):
        assert not ArenaSession().cancel()

    def test_cancel_reaches_every_solve(self):
        """Two solves on one session are both cancelled."""
        engine = SearchEngine(GoalModel(Catalog(shapes=())), timeout=30)
        session = ArenaSession(engine=engine)
        for column in range(1, 7):
            session.apply_edit(column, [1, 3])
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(session.solve()))
            for _ in range(2)
        ]
        for thread in threads:
            thread.start()
        deadline = time.monotonic() + 10
        while len(session._solve_tokens) < 2 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert session.cancel()
        for thread in threads:
            thread.join(timeout=10)
        assert [result.error_code for result in results] == ["CANCELLED", "CANCELLED"]
        assert not session.cancel()


class TestSessionManager:
    def test_lifecycle(self):
        manager = SessionManager()
        session = manager.create_session()
        assert manager.get_session(session.session_id) is session
        assert manager.list_sessions() == [session.session_id]
        assert session.engine is manager.engine

        assert manager.end_session(session.session_id)
        assert manager.get_session(session.session_id) is None
        assert not manager.end_session(session.session_id)

    def test_cleanup_stale_sessions(self):
        manager = SessionManager()
        stale = manager.create_session()
        fresh = manager.create_session()
        stale.last_used = time.time() - 7200
        assert manager.cleanup_stale_sessions(max_age_seconds=3600) == 1
        assert manager.list_sessions() == [fresh.session_id]
