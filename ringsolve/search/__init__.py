"""
Search module - Finds move sequences that clear the arena.

Provides:
- SearchEngine: Optimal (iterative deepening) and fast (best-first) solving
- SolveMode: Which search to run and its move bound
- Solution: The resulting move sequence with search statistics
- CancelToken: Aborts a running search
- HeuristicEvaluator: Scores nodes for best-first search
"""

from .modes import SearchKind, SearchStats, Solution, SolveMode
from .cancellation import CancelToken
from .heuristic import HeuristicEvaluator, HeuristicWeights, NodeEvaluation
from .transposition import TranspositionTable
from .engine import SearchEngine

__all__ = [
    "SearchKind",
    "SearchStats",
    "Solution",
    "SolveMode",
    "CancelToken",
    "HeuristicEvaluator",
    "HeuristicWeights",
    "NodeEvaluation",
    "TranspositionTable",
    "SearchEngine",
]
