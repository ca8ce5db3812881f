"""
Ringsolve Error Hierarchy

Every error the core raises inherits from RingSolveError, so callers can
branch on one base class and read a machine-readable ``code``.

Usage:
    from ringsolve.errors import NoSolutionWithinBound

    try:
        solution = engine.solve(arena, SolveMode.optimal_bounded(3))
    except NoSolutionWithinBound as e:
        logger.info(f"Nothing within {e.bound} moves")
"""

from __future__ import annotations
from typing import Any

__all__ = [
    "RingSolveError",
    # Arena edits
    "OccupiedCell",
    "InvalidPosition",
    "InvalidGroupCount",
    "UnknownTool",
    # Search
    "SolveError",
    "NoSolutionWithinBound",
    "Cancelled",
    # Boundary
    "NotationError",
]


class RingSolveError(Exception):
    """Base exception for all ringsolve errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "RINGSOLVE_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Arena Edit Errors
# =============================================================================


class OccupiedCell(RingSolveError):
    """An enemy was placed on a cell that already holds one.

    Recoverable: the caller decides whether to overwrite.
    """
    code: str = "OCCUPIED_CELL"

    def __init__(self, ring: int, column: int):
        super().__init__(
            f"Cell r{ring} c{column} is already occupied",
            context={"ring": ring, "column": column},
        )
        self.ring = ring
        self.column = column


class InvalidPosition(RingSolveError):
    """Ring or column outside the arena (rings 1-4, columns 1-12)."""
    code: str = "INVALID_POSITION"


class InvalidGroupCount(RingSolveError):
    """Declared group count is smaller than the arena's groups imply."""
    code: str = "INVALID_GROUP_COUNT"

    def __init__(self, requested: int, minimum: int):
        super().__init__(
            f"Group count {requested} is below the required minimum of {minimum}",
            context={"requested": requested, "minimum": minimum},
        )
        self.requested = requested
        self.minimum = minimum


class UnknownTool(RingSolveError):
    """Tool name that the arena does not know about."""
    code: str = "UNKNOWN_TOOL"


# =============================================================================
# Search Errors
# =============================================================================


class SolveError(RingSolveError):
    """Base class for errors surfaced by a solve call."""
    code: str = "SOLVE_ERROR"


class NoSolutionWithinBound(SolveError):
    """The search finished without reaching a goal state.

    Attributes:
        bound: Depth cap that was exhausted (None for unbounded searches)
        exhausted: True when every reachable arrangement was visited, so a
            larger bound cannot help
    """
    code: str = "NO_SOLUTION_WITHIN_BOUND"

    def __init__(self, bound: int | None, exhausted: bool = False):
        if exhausted:
            message = "No reachable arrangement can be cleared"
        else:
            message = f"No solution within {bound} move(s)"
        super().__init__(message, context={"bound": bound, "exhausted": exhausted})
        self.bound = bound
        self.exhausted = exhausted


class Cancelled(SolveError):
    """The caller aborted the search before it finished."""
    code: str = "CANCELLED"

    def __init__(self, message: str = "Search was cancelled", nodes: int = 0):
        super().__init__(message, context={"nodes": nodes})
        self.nodes = nodes


# =============================================================================
# Boundary Errors
# =============================================================================


class NotationError(RingSolveError):
    """Text that does not follow the move, placement or solve notation."""
    code: str = "INVALID_NOTATION"

    def __init__(self, text: str, reason: str):
        super().__init__(f"Cannot parse '{text}': {reason}", context={"text": text})
        self.text = text
        self.reason = reason
