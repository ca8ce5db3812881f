"""
Session Manager - Creates and manages arena sessions.

LIFECYCLE:
1. Caller creates a session → empty arena, default tools
2. Caller edits the arena (place/clear enemies, group count, tools)
3. Caller asks for a solution → the engine searches a snapshot
4. Caller executes moves (manually, or the accepted solution)
5. Session ends → arena discarded

PERSISTENCE RULES:
- No database; the arena lives only as long as its session
- Solutions are returned, never stored

Every ArenaSession call returns a SessionResult the caller branches on;
domain errors become failures carrying the error's code.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import threading
import time
from typing import Any, Iterable
import uuid

from ..engine_core.move import Move
from ..engine_core.reducer import apply_move
from ..engine_core.state import ArenaState, Enemy, Position, Requirement, Tool
from ..errors import OccupiedCell, RingSolveError
from ..search.cancellation import CancelToken
from ..search.engine import SearchEngine
from ..search.modes import Solution, SolveMode

logger = logging.getLogger(__name__)


@dataclass
class SessionResult:
    """
    Result of a session call.

    Contains:
    - Whether the call succeeded
    - Arena snapshot after the call
    - Solution (solve only)
    - Error message and code (if failed)
    """
    success: bool
    arena: dict[str, Any] | None = None
    solution: Solution | None = None
    error: str | None = None
    error_code: str | None = None
    changes: list[str] = field(default_factory=list)  # Human-readable changes

    @classmethod
    def failure(cls, error: RingSolveError, arena: ArenaState | None = None) -> SessionResult:
        """Create a failure result from a domain error."""
        return cls(
            success=False,
            arena=arena.to_dict() if arena is not None else None,
            error=error.message,
            error_code=error.code,
        )

    @classmethod
    def success_with_arena(
        cls,
        arena: ArenaState,
        changes: list[str] | None = None,
        solution: Solution | None = None,
    ) -> SessionResult:
        return cls(
            success=True,
            arena=arena.to_dict(),
            solution=solution,
            changes=changes or [],
        )


class ArenaSession:
    """
    One live arena plus the engine that solves it.

    The arena is mutated only through these methods; solve works on a
    snapshot, so a long search never sees later edits.
    """

    def __init__(self, engine: SearchEngine | None = None, session_id: str | None = None):
        self.session_id = session_id or str(uuid.uuid4())
        self.engine = engine or SearchEngine()
        self.arena = ArenaState()
        self.created_at = time.time()
        self.last_used = self.created_at
        self.executed: list[Move] = []
        self._solve_tokens: set[CancelToken] = set()
        self._lock = threading.Lock()

    def _touch(self):
        self.last_used = time.time()

    # -------------------------------------------------------------------------
    # Edits
    # -------------------------------------------------------------------------

    def apply_edit(
        self,
        column: int,
        rows: Iterable[int],
        requirement: Requirement | str | None = None,
        *,
        group: int | None = None,
        clear: bool = False,
        overwrite: bool = False,
    ) -> SessionResult:
        """
        Place enemies on (or clear) the given rings of one column.

        The edit is all-or-nothing: if any cell is off the arena or
        already occupied, nothing changes.
        """
        self._touch()
        try:
            positions = [Position(ring=row, column=column) for row in sorted(set(rows))]
            if isinstance(requirement, str):
                try:
                    requirement = Requirement.from_symbol(requirement)
                except ValueError:
                    requirement = Requirement(requirement.lower())
            enemy = Enemy(requirement=requirement or Requirement.NONE, group=group)
        except ValueError as e:
            return SessionResult.failure(RingSolveError(str(e), code="INVALID_EDIT"), self.arena)
        except RingSolveError as e:
            return SessionResult.failure(e, self.arena)

        with self._lock:
            if clear:
                for position in positions:
                    self.arena.remove(position)
                changes = [f"Cleared {position}" for position in positions]
            else:
                if not overwrite:
                    for position in positions:
                        if self.arena.enemy_at(position) is not None:
                            return SessionResult.failure(
                                OccupiedCell(position.ring, position.column), self.arena
                            )
                try:
                    self.arena.check_group_room(group, positions)
                except RingSolveError as e:
                    return SessionResult.failure(e, self.arena)
                for position in positions:
                    self.arena.place(position, enemy, overwrite=overwrite)
                changes = [f"Placed {enemy.symbol} at {position}" for position in positions]

        logger.debug(f"Session {self.session_id}: {'; '.join(changes)}")
        return SessionResult.success_with_arena(self.arena, changes)

    def set_group_count(self, count: int | None) -> SessionResult:
        self._touch()
        try:
            self.arena.set_group_count(count)
        except RingSolveError as e:
            return SessionResult.failure(e, self.arena)
        label = "automatic" if count is None else str(count)
        return SessionResult.success_with_arena(self.arena, [f"Group count set to {label}"])

    def set_tool(self, name: str | Tool, present: bool) -> SessionResult:
        self._touch()
        try:
            tool = name if isinstance(name, Tool) else Tool.from_name(name)
        except RingSolveError as e:
            return SessionResult.failure(e, self.arena)
        self.arena.set_tool(tool, present)
        state = "available" if present else "unavailable"
        return SessionResult.success_with_arena(self.arena, [f"Tool {tool.value} {state}"])

    def clear(self) -> SessionResult:
        """Reset to an empty arena with default settings."""
        self._touch()
        with self._lock:
            self.arena.clear()
            self.executed.clear()
        return SessionResult.success_with_arena(self.arena, ["Arena cleared"])

    # -------------------------------------------------------------------------
    # Moves and solving
    # -------------------------------------------------------------------------

    def execute(self, move: Move) -> SessionResult:
        """Apply one move to the live arena."""
        self._touch()
        with self._lock:
            self.arena = apply_move(self.arena, move)
            self.executed.append(move)
        return SessionResult.success_with_arena(self.arena, [f"Executed {move}"])

    def solve(
        self,
        mode: SolveMode | None = None,
        cancel_token: CancelToken | None = None,
    ) -> SessionResult:
        """
        Search for a solution from the current arena.

        Failures (NoSolutionWithinBound, Cancelled) come back as results.
        """
        self._touch()
        with self._lock:
            snapshot = self.arena.clone()
        token = cancel_token or CancelToken(self.engine.timeout)
        with self._lock:
            self._solve_tokens.add(token)
        try:
            solution = self.engine.solve(snapshot, mode, token)
        except RingSolveError as e:
            return SessionResult.failure(e, snapshot)
        finally:
            with self._lock:
                self._solve_tokens.discard(token)
        return SessionResult.success_with_arena(snapshot, solution=solution)

    def cancel(self) -> bool:
        """Cancel every running solve. False if none was running."""
        with self._lock:
            tokens = list(self._solve_tokens)
        for token in tokens:
            token.cancel()
        return bool(tokens)


class SessionManager:
    """
    Manages arena sessions.

    Responsibilities:
    - Create sessions sharing one search engine
    - Track active sessions
    - Clean up stale sessions

    No persistence - sessions are in-memory only.
    """

    def __init__(self, engine: SearchEngine | None = None):
        self.engine = engine or SearchEngine()
        self._sessions: dict[str, ArenaSession] = {}

    def create_session(self) -> ArenaSession:
        session = ArenaSession(engine=self.engine)
        self._sessions[session.session_id] = session
        logger.info(f"Created session {session.session_id}")
        return session

    def get_session(self, session_id: str) -> ArenaSession | None:
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """Remove a session, cancelling any solve it is running."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.cancel()
        logger.info(f"Ended session {session_id}")
        return True

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        End sessions unused for longer than max_age.

        Called periodically to free memory.
        """
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.last_used > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id)
        return len(stale)
