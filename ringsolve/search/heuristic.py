"""
Heuristic Evaluator - Scores search nodes for best-first search.

The evaluator assigns a priority (lower is better) based on:
- Enemies a greedy use of the group budget leaves uncovered
- Declared groups that no available shape matches
- Optionally, the number of moves already made

Weights can be adjusted to trade solution length for speed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..engine_core.goal import GoalCheck


@dataclass
class HeuristicWeights:
    """
    Weights for the heuristic evaluator.

    Higher values = more importance. A depth weight of 0 gives pure
    greedy best-first; raising it moves the search towards A*.
    """
    uncovered_enemy: float = 1.0
    unmatched_group: float = 2.0
    depth: float = 0.0


@dataclass
class NodeEvaluation:
    """Result of evaluating one search node."""
    total: float
    feature_breakdown: dict[str, float] = field(default_factory=dict)


class HeuristicEvaluator:
    """Evaluates per-class masks using weighted goal-distance features."""

    def __init__(self, weights: HeuristicWeights | None = None):
        self.weights = weights or HeuristicWeights()

    def score(self, check: GoalCheck, masks: Sequence[int], depth: int = 0) -> float:
        """Priority of a node; used on the hot path."""
        w = self.weights
        total = w.uncovered_enemy * check.uncovered(masks)
        if check.has_declared_groups:
            total += w.unmatched_group * check.unmatched_groups(masks)
        return total + w.depth * depth

    def evaluate(self, check: GoalCheck, masks: Sequence[int], depth: int = 0) -> NodeEvaluation:
        """Score a node and report how each feature contributed."""
        w = self.weights
        breakdown = {
            "uncovered_enemies": w.uncovered_enemy * check.uncovered(masks),
            "unmatched_groups": w.unmatched_group * check.unmatched_groups(masks),
            "depth": w.depth * depth,
        }
        return NodeEvaluation(total=sum(breakdown.values()), feature_breakdown=breakdown)
