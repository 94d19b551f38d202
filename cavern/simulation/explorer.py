"""
Greedy Backtracking Explorer
============================

Finds the orb under partial observability. At every step the agent only
knows its current node id, the ids of the open neighbours and a heuristic
distance to the orb for each of them (not the true graph distance).

Strategy (greedy best-first depth-first search):
1. Stop as soon as the heuristic distance at the current node is 0
2. Order unvisited neighbours by ascending heuristic distance
3. Move into the most promising one and continue from there
4. On a dead end, walk back to the node we came from and try the next
   candidate

Each node is moved into at most once per search, so the traversal ends
after at most |reachable nodes| expansions. The heuristic only affects how
many steps are taken; every unvisited neighbour is eventually tried.

Two traversals with identical move sequences are provided:
- iterative (default): explicit stack of frames, no recursion limit
- recursive: direct formulation with a return point passed down
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set

from cavern.core.definitions import NO_RETURN_POINT, status_order_key
from cavern.core.state import ExplorationState

logger = logging.getLogger(__name__)


@dataclass
class ExploreResult:
    """Outcome and statistics of one orb search."""
    success: bool
    exhausted: bool = False  # Top-level candidates ran out (orb unreachable)
    moves: int = 0
    backtracks: int = 0
    nodes_visited: int = 0
    max_depth: int = 0
    trace: List[int] = field(default_factory=list)

    def summary(self) -> str:
        status = "FOUND" if self.success else "NOT FOUND"
        return (
            f"Explore: {status} | moves={self.moves} "
            f"backtracks={self.backtracks} visited={self.nodes_visited} "
            f"max_depth={self.max_depth}"
        )


@dataclass
class _Frame:
    """One level of the iterative traversal."""
    node_id: int
    candidates: Iterator[int]


class GreedyExplorer:
    """
    Greedy depth-first orb search over an ExplorationState.

    The handle is the only shared state: position and distances are always
    re-read from it. The visited set lives for one call to explore().
    """

    def __init__(self, state: ExplorationState, iterative: bool = True):
        """
        Args:
            state: Exploration handle positioned at the start node
            iterative: Use the explicit-stack traversal instead of recursion
        """
        self.state = state
        self.iterative = iterative
        self._visited: Set[int] = set()
        self._result = ExploreResult(success=False)

    def explore(self) -> ExploreResult:
        """Search until the handle stands on the orb or the search is exhausted."""
        start = self.state.current_location()
        self._visited = {start}
        self._result = ExploreResult(success=False)

        if self.iterative:
            success = self._explore_iterative()
        else:
            success = self._explore_recursive(NO_RETURN_POINT, depth=0)

        result = self._result
        result.success = success
        result.exhausted = not success
        result.nodes_visited = len(self._visited)

        if success:
            logger.info(f"Orb found at node {self.state.current_location()}: {result.summary()}")
        else:
            logger.warning(
                f"Search exhausted from node {start} without reaching the orb "
                f"({result.nodes_visited} nodes visited)"
            )
        return result

    # ------------------------------------------------------------------
    # Traversals
    # ------------------------------------------------------------------

    def _explore_iterative(self) -> bool:
        if self.state.distance_to_target() == 0:
            return True

        stack = [_Frame(self.state.current_location(), self._candidates())]

        while stack:
            frame = stack[-1]
            next_id = self._next_unvisited(frame.candidates)

            if next_id is None:
                # Dead end: return to the parent frame's node
                stack.pop()
                if not stack:
                    return False
                self._move_back(stack[-1].node_id)
                continue

            self._advance(next_id, depth=len(stack))
            if self.state.distance_to_target() == 0:
                return True
            stack.append(_Frame(next_id, self._candidates()))

        return False

    def _explore_recursive(self, return_point: int, depth: int) -> bool:
        if self.state.distance_to_target() == 0:
            return True

        candidates = self._candidates()
        current = self.state.current_location()

        while True:
            next_id = self._next_unvisited(candidates)
            if next_id is None:
                break
            self._advance(next_id, depth=depth + 1)
            if self._explore_recursive(current, depth + 1):
                return True

        if return_point != NO_RETURN_POINT:
            self._move_back(return_point)
        return False

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _candidates(self) -> Iterator[int]:
        """Unvisited neighbours of the current node, most promising first."""
        statuses = [
            (index, status)
            for index, status in enumerate(self.state.neighbor_statuses())
            if status.node_id not in self._visited
        ]
        statuses.sort(key=lambda item: status_order_key(item[1], item[0]))
        return iter([status.node_id for _, status in statuses])

    def _next_unvisited(self, candidates: Iterator[int]) -> Optional[int]:
        # Siblings explored earlier may have visited a queued candidate
        for node_id in candidates:
            if node_id not in self._visited:
                return node_id
        return None

    def _advance(self, node_id: int, depth: int):
        self.state.move_to(node_id)
        self._visited.add(node_id)
        self._result.moves += 1
        self._result.trace.append(node_id)
        self._result.max_depth = max(self._result.max_depth, depth)
        logger.debug(f"Explore: moved to {node_id} (depth {depth})")

    def _move_back(self, node_id: int):
        self.state.move_to(node_id)
        self._result.moves += 1
        self._result.backtracks += 1
        self._result.trace.append(node_id)
        logger.debug(f"Explore: dead end, backtracked to {node_id}")


def explore(state: ExplorationState, iterative: bool = True) -> ExploreResult:
    """
    Convenience wrapper around GreedyExplorer.

    Example:
        >>> result = explore(CavernExplorationState(cavern))
        >>> result.success
        True
    """
    return GreedyExplorer(state, iterative=iterative).explore()
