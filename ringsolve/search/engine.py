"""
Search Engine - Finds move sequences that bring the arena to a goal.

Two strategies:
1. Optimal: iterative deepening over an explicit stack. Goals are only
   tested at the current depth bound, so the first solution is the
   shortest one, and the first in canonical move order among those.
2. Fast: greedy best-first search on the heuristic evaluator. Goals are
   tested when a node is generated; the result is not always minimal.

Both strategies work on per-class bitmasks (see GoalCheck) instead of
ArenaState objects and share the same pruning:
- a transposition table keyed by (masks, last move track)
- MoveGenerator follow-ups (no repeated track, commuting moves ordered)

The engine never mutates the arena it is given: every solve works on
its own snapshot, so concurrent solves on different arenas are
independent.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import heapq
import itertools
import logging
import threading
import time
from typing import Sequence, TYPE_CHECKING

from ..catalog.defaults import default_catalog
from ..engine_core.goal import GoalCheck, GoalModel
from ..engine_core.move import Move, permute_mask
from ..engine_core.move_generator import CompiledMove, MoveGenerator
from ..engine_core.state import ArenaState
from ..errors import Cancelled, NoSolutionWithinBound
from .cancellation import CancelToken
from .heuristic import HeuristicEvaluator
from .modes import SearchStats, Solution, SolveMode
from .transposition import TranspositionTable

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

Masks = tuple[int, ...]

DEFAULT_TABLE_ENTRIES = 200_000


def _apply(masks: Masks, compiled: CompiledMove) -> Masks:
    perm, track_mask = compiled.perm, compiled.track_mask
    return tuple(
        permute_mask(mask, perm, track_mask) if mask & track_mask else mask
        for mask in masks
    )


def _split(moves: Sequence[CompiledMove], parts: int) -> list[Sequence[CompiledMove]]:
    """Contiguous chunks, so chunk order follows canonical move order."""
    size = -(-len(moves) // parts)
    return [moves[i:i + size] for i in range(0, len(moves), size)]


@dataclass
class _SearchRun:
    """Mutable bookkeeping for one solve call, shared by its workers."""
    check: GoalCheck
    token: CancelToken
    discover_limit: int
    discovered: set[Masks] | None = field(default_factory=set)
    new_leaves: bool = False
    nodes: int = 0
    table_hits: int = 0
    table_evictions: int = 0
    found_chunk: int | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)

    def record_leaf(self, masks: Masks):
        """Remember an arrangement; flags the iteration if it was never seen."""
        with self.lock:
            if self.discovered is None:
                self.new_leaves = True
            elif masks not in self.discovered:
                self.new_leaves = True
                if len(self.discovered) >= self.discover_limit:
                    # Too many to track: exhaustion can no longer be proven
                    self.discovered = None
                else:
                    self.discovered.add(masks)

    def add(self, nodes: int, table: TranspositionTable):
        with self.lock:
            self.nodes += nodes
            self.table_hits += table.hits
            self.table_evictions += table.evictions

    def found(self, chunk: int):
        with self.lock:
            if self.found_chunk is None or chunk < self.found_chunk:
                self.found_chunk = chunk

    def halt(self):
        with self.lock:
            self.found_chunk = -1

    def stopped_before(self, chunk: int) -> bool:
        """True once an earlier chunk has a solution (or the run was halted)."""
        found = self.found_chunk
        return found is not None and found < chunk


class SearchEngine:
    """
    Solves arenas against a goal model.

    Usage:
        engine = SearchEngine(GoalModel(default_catalog()))
        solution = engine.solve(arena, SolveMode.optimal_bounded(3))
    """

    def __init__(
        self,
        goal_model: GoalModel | None = None,
        *,
        workers: int = 1,
        table_entries: int = DEFAULT_TABLE_ENTRIES,
        max_depth: int | None = None,
        timeout: float | None = None,
        evaluator: HeuristicEvaluator | None = None,
    ):
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self.goal_model = goal_model or GoalModel(default_catalog())
        self.workers = workers
        self.table_entries = table_entries
        self.max_depth = max_depth
        self.timeout = timeout
        self.evaluator = evaluator or HeuristicEvaluator()
        self.generator = MoveGenerator()

    @classmethod
    def from_settings(cls, settings: Settings, goal_model: GoalModel | None = None) -> SearchEngine:
        return cls(
            goal_model,
            workers=settings.search_workers,
            table_entries=settings.table_entries,
            max_depth=settings.max_depth,
            timeout=settings.solve_timeout,
        )

    def solve(
        self,
        arena: ArenaState,
        mode: SolveMode | None = None,
        cancel_token: CancelToken | None = None,
    ) -> Solution:
        """
        Find a move sequence after which ``arena`` is a goal.

        Raises NoSolutionWithinBound when the bound (or the reachable
        space) is exhausted, and Cancelled when ``cancel_token`` fires.
        """
        mode = mode or SolveMode.optimal()
        token = cancel_token or CancelToken(self.timeout)
        snapshot = arena.clone()
        check = self.goal_model.compile(snapshot)
        masks = check.masks_of(snapshot)

        run = _SearchRun(check=check, token=token, discover_limit=self.table_entries)
        run.record_leaf(masks)
        start = time.perf_counter()
        logger.info(
            f"Solving ({mode}): {snapshot.enemy_count} enemies, "
            f"{len(check.classes)} classes, group budget {check.budget}"
        )

        try:
            if check.excess_groups:
                # Moves never change group ids
                raise NoSolutionWithinBound(mode.bound, exhausted=True)
            if check.is_goal(masks):
                moves, depth = [], 0
            elif mode.is_optimal:
                moves, depth = self._iterative_deepening(run, masks, mode)
            else:
                moves, depth = self._best_first(run, masks, mode)
        except Cancelled:
            logger.info(f"Search cancelled after {run.nodes} nodes: {token.reason}")
            raise
        except NoSolutionWithinBound as e:
            logger.info(f"No solution ({mode}) after {run.nodes} nodes: {e.message}")
            raise

        stats = SearchStats(
            mode=str(mode),
            nodes=run.nodes,
            depth=depth,
            elapsed=time.perf_counter() - start,
            table_hits=run.table_hits,
            table_evictions=run.table_evictions,
            workers=self.workers,
        )
        solution = Solution(tuple(moves), stats)
        logger.info(
            f"Solved ({mode}) in {len(solution)} move(s) [{solution}] "
            f"after {stats.nodes} nodes, {stats.elapsed:.3f}s"
        )
        return solution

    # -------------------------------------------------------------------------
    # Optimal: iterative deepening
    # -------------------------------------------------------------------------

    def _iterative_deepening(
        self, run: _SearchRun, masks: Masks, mode: SolveMode
    ) -> tuple[list[Move], int]:
        limit = mode.bound if mode.is_bounded else self.max_depth
        bound = 0
        while True:
            bound += 1
            if limit is not None and bound > limit:
                raise NoSolutionWithinBound(limit)

            run.new_leaves = False
            path = self._iteration(run, masks, bound)
            logger.debug(f"Depth {bound} done: {run.nodes} nodes so far")
            if path is not None:
                return path, bound
            if not run.new_leaves:
                # Every arrangement at this depth was already seen closer
                # to the root, so no deeper arrangement exists either
                raise NoSolutionWithinBound(mode.bound, exhausted=True)

    def _iteration(self, run: _SearchRun, masks: Masks, bound: int) -> list[Move] | None:
        roots = self.generator.follow_ups(None)
        if self.workers <= 1 or bound < 2:
            table = TranspositionTable(self.table_entries)
            return self._depth_limited(run, masks, bound, roots, table)

        chunks = _split(roots, self.workers)
        run.found_chunk = None
        with ThreadPoolExecutor(max_workers=len(chunks)) as pool:
            futures = [
                pool.submit(
                    self._depth_limited,
                    run, masks, bound, chunk,
                    TranspositionTable(self.table_entries),
                    index,
                )
                for index, chunk in enumerate(chunks)
            ]
            try:
                results = [future.result() for future in futures]
            except BaseException:
                run.halt()
                raise

        for path in results:
            if path is not None:
                return path
        return None

    def _depth_limited(
        self,
        run: _SearchRun,
        masks: Masks,
        bound: int,
        roots: Sequence[CompiledMove],
        table: TranspositionTable,
        chunk: int = 0,
    ) -> list[Move] | None:
        """Goal-test every pruned sequence of exactly ``bound`` moves."""
        check = run.check
        token = run.token
        path: list[Move] = []
        stack: list[tuple[int, Masks, CompiledMove | None]] = [(0, masks, None)]
        nodes = 0

        try:
            while stack:
                token.raise_if_cancelled(run.nodes + nodes)
                if run.stopped_before(chunk):
                    return None

                depth, parent_masks, compiled = stack.pop()
                if compiled is None:
                    node_masks, last_track = parent_masks, None
                else:
                    node_masks = _apply(parent_masks, compiled)
                    last_track = compiled.track
                    del path[depth - 1:]
                    path.append(compiled.move)

                remaining = bound - depth
                if remaining == 0:
                    # Leaves are keyed without a track: the goal test ignores it
                    key = (node_masks, None)
                    if table.get(key) is not None:
                        continue
                    table.put(key, 0)
                    run.record_leaf(node_masks)
                    if check.is_goal(node_masks):
                        run.found(chunk)
                        return list(path)
                    continue

                key = (node_masks, last_track)
                seen = table.get(key)
                if seen is not None and seen >= remaining:
                    continue
                table.put(key, remaining)
                nodes += 1

                children = roots if depth == 0 else self.generator.follow_ups(last_track)
                for child in reversed(children):
                    stack.append((depth + 1, node_masks, child))
            return None
        finally:
            run.add(nodes, table)

    # -------------------------------------------------------------------------
    # Fast: best-first
    # -------------------------------------------------------------------------

    def _best_first(
        self, run: _SearchRun, masks: Masks, mode: SolveMode
    ) -> tuple[list[Move], int]:
        check = run.check
        token = run.token
        evaluator = self.evaluator
        cap = mode.bound if mode.is_bounded else self.max_depth
        table = TranspositionTable(self.table_entries)
        counter = itertools.count()

        heap = [(evaluator.score(check, masks, 0), 0, next(counter), masks, None, ())]
        table.put((masks, None), 0)
        cut = False
        nodes = 0

        try:
            while heap:
                token.raise_if_cancelled(nodes)
                _, depth, _, node_masks, last_track, path = heapq.heappop(heap)
                if cap is not None and depth >= cap:
                    cut = True
                    continue
                nodes += 1

                for child in self.generator.follow_ups(last_track):
                    child_masks = _apply(node_masks, child)
                    key = (child_masks, child.track)
                    seen = table.get(key)
                    if seen is not None and seen <= depth + 1:
                        continue
                    table.put(key, depth + 1)

                    child_path = path + (child.move,)
                    if check.is_goal(child_masks):
                        return list(child_path), depth + 1
                    priority = evaluator.score(check, child_masks, depth + 1)
                    heapq.heappush(
                        heap,
                        (priority, depth + 1, next(counter), child_masks, child.track, child_path),
                    )

                if nodes % 10_000 == 0:
                    logger.debug(f"Best-first: {nodes} nodes, frontier {len(heap)}")
        finally:
            run.add(nodes, table)

        raise NoSolutionWithinBound(cap, exhausted=not cut)
