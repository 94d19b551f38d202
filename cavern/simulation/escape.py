"""
Escape Planner
==============

Walks from the orb to the exit along a shortest path, picking up any gold
lying on it. The whole cavern is known in this phase.

Pipeline:
1. escape_search: single-source Dijkstra from the current node
   - quadratic selection over numpy reached/visited masks (default)
   - heapq priority queue (same selection order, for large caverns)
2. determine_escape_path: follow predecessors back from the exit
3. EscapePlanner.escape: move node by node, collecting gold on the way

The planner does not check the remaining time per step. The environment
guarantees the shortest path fits the budget; a warning is logged when the
planned length exceeds it.

Tie-breaking: among unvisited nodes with equal tentative distance the one
listed first by all_nodes() is selected, so plans are reproducible.
"""

import heapq
import logging
import math
from dataclasses import dataclass, field
from typing import Collection, Dict, List, Optional, Tuple

import numpy as np

from cavern.core.definitions import Node
from cavern.core.state import EscapeState

logger = logging.getLogger(__name__)

# Above this many nodes EscapeOptions.for_graph_size switches to the heap
HEAP_THRESHOLD: int = 2000


@dataclass
class EscapeOptions:
    """Configuration for the escape planner."""
    use_heap: bool = False  # heapq selection instead of the O(V^2) scan
    collect_gold: bool = True

    @classmethod
    def for_graph_size(cls, num_nodes: int) -> 'EscapeOptions':
        """Pick the selection strategy by cavern size."""
        return cls(use_heap=num_nodes > HEAP_THRESHOLD)


@dataclass
class EscapePlan:
    """A shortest path from the current node to the exit."""
    source: Node
    exit: Node
    path: List[Node]            # Source excluded, exit included
    length: int
    gold_on_path: int
    distances: Dict[Node, float] = field(default_factory=dict, repr=False)


@dataclass
class EscapeResult:
    """Outcome of executing an escape plan."""
    success: bool
    path: List[int]
    path_length: int
    gold_collected: int
    time_remaining: int

    def summary(self) -> str:
        status = "ESCAPED" if self.success else "FAILED"
        return (
            f"Escape: {status} | steps={len(self.path)} "
            f"length={self.path_length} gold={self.gold_collected} "
            f"time_left={self.time_remaining}"
        )


# ==========================================
# SHORTEST PATH
# ==========================================

def escape_search(
    vertices: Collection[Node],
    source: Node,
    use_heap: bool = False,
) -> Tuple[Dict[Node, float], Dict[Node, Node]]:
    """
    Single-source Dijkstra over the whole cavern.

    Args:
        vertices: Every node of the graph
        source: Start node
        use_heap: Use a priority queue instead of the linear minimum scan

    Returns:
        (dist, prev) where dist maps each node to its shortest distance
        from source (math.inf if unreachable) and prev maps each reached
        node other than source to its predecessor on a shortest path.
    """
    nodes = list(vertices)
    index = {node: i for i, node in enumerate(nodes)}
    if source not in index:
        raise ValueError(f"Source node {source.id} is not part of the graph")

    if use_heap:
        dist_list, reached, prev = _dijkstra_heap(nodes, index, index[source])
    else:
        dist_list, reached, prev = _dijkstra_linear(nodes, index, index[source])

    dist = {
        node: dist_list[i] if reached[i] else math.inf
        for i, node in enumerate(nodes)
    }
    return dist, prev


def _dijkstra_linear(
    nodes: List[Node], index: Dict[Node, int], source_idx: int
) -> Tuple[List[int], np.ndarray, Dict[Node, Node]]:
    # Distances stay Python ints so large weights are summed exactly;
    # 'reached' marks the entries that hold a finite distance
    dist = [0] * len(nodes)
    reached = np.zeros(len(nodes), dtype=bool)
    visited = np.zeros(len(nodes), dtype=bool)
    prev: Dict[Node, Node] = {}
    reached[source_idx] = True

    for _ in range(len(nodes)):
        open_idx = np.flatnonzero(reached & ~visited)
        if open_idx.size == 0:
            break  # Only unreachable nodes remain
        # open_idx is ascending, so min keeps the first index on ties
        current_idx = int(min(open_idx, key=lambda i: dist[i]))
        visited[current_idx] = True

        current = nodes[current_idx]
        for neighbour in current.neighbours:
            j = index[neighbour]
            candidate = dist[current_idx] + current.edge_length(neighbour)
            if not reached[j] or candidate < dist[j]:
                dist[j] = candidate
                reached[j] = True
                prev[neighbour] = current

    return dist, reached, prev


def _dijkstra_heap(
    nodes: List[Node], index: Dict[Node, int], source_idx: int
) -> Tuple[List[int], np.ndarray, Dict[Node, Node]]:
    dist = [0] * len(nodes)
    reached = np.zeros(len(nodes), dtype=bool)
    visited = np.zeros(len(nodes), dtype=bool)
    prev: Dict[Node, Node] = {}
    reached[source_idx] = True
    open_set: List[Tuple[int, int]] = [(0, source_idx)]

    while open_set:
        d, current_idx = heapq.heappop(open_set)
        if visited[current_idx] or d > dist[current_idx]:
            continue  # Stale entry
        visited[current_idx] = True

        current = nodes[current_idx]
        for neighbour in current.neighbours:
            j = index[neighbour]
            candidate = dist[current_idx] + current.edge_length(neighbour)
            if not reached[j] or candidate < dist[j]:
                dist[j] = candidate
                reached[j] = True
                prev[neighbour] = current
                heapq.heappush(open_set, (candidate, j))

    return dist, reached, prev


def determine_escape_path(
    prev: Dict[Node, Node], source: Node, exit_node: Node
) -> List[Node]:
    """
    Rebuild the path from the predecessor map.

    Args:
        prev: Predecessor map from escape_search
        source: Start node of the search
        exit_node: Destination

    Returns:
        Nodes from the first step to the exit (source excluded)

    Raises:
        RuntimeError: If the exit was never reached from source
    """
    path: List[Node] = []
    node = exit_node
    while node != source:
        path.append(node)
        if node not in prev:
            raise RuntimeError(
                f"Exit node {exit_node.id} is unreachable from node {source.id}"
            )
        node = prev[node]
        if len(path) > len(prev):
            raise RuntimeError("Predecessor map contains a cycle")
    path.reverse()
    return path


# ==========================================
# PLANNER
# ==========================================

class EscapePlanner:
    """
    Plans and walks the shortest escape route.

    Example:
        >>> planner = EscapePlanner(CavernEscapeState(cavern, time_budget=20))
        >>> result = planner.escape()
        >>> result.success
        True
    """

    def __init__(self, state: EscapeState, options: Optional[EscapeOptions] = None):
        self.state = state
        self.options = options or EscapeOptions()

    def plan(self) -> EscapePlan:
        """Compute a shortest path from the current node to the exit."""
        source = self.state.current_node()
        exit_node = self.state.exit_node()

        dist, prev = escape_search(
            self.state.all_nodes(), source, use_heap=self.options.use_heap
        )
        path = determine_escape_path(prev, source, exit_node)

        plan = EscapePlan(
            source=source,
            exit=exit_node,
            path=path,
            length=dist[exit_node],
            gold_on_path=sum(node.gold for node in path),
            distances=dist,
        )
        logger.info(
            f"Escape plan {source.id} -> {exit_node.id}: {len(path)} steps, "
            f"length {plan.length}, {plan.gold_on_path} gold on path"
        )
        return plan

    def escape(self) -> EscapeResult:
        """Plan, then walk the path to the exit picking up gold."""
        plan = self.plan()

        time_left = self.state.time_remaining()
        if plan.length > time_left:
            logger.warning(
                f"Escape path length {plan.length} exceeds remaining time {time_left}"
            )

        gold_collected = 0
        for node in plan.path:
            self.state.move_to(node)
            gold = node.gold
            if self.options.collect_gold and gold != 0:
                self.state.collect_reward()
                gold_collected += gold
                logger.debug(f"Escape: picked up {gold} gold at node {node.id}")

        final = self.state.current_node()
        result = EscapeResult(
            success=final == plan.exit,
            path=[node.id for node in plan.path],
            path_length=plan.length,
            gold_collected=gold_collected,
            time_remaining=self.state.time_remaining(),
        )
        logger.info(result.summary())
        return result


def escape(state: EscapeState, options: Optional[EscapeOptions] = None) -> EscapeResult:
    """Convenience wrapper around EscapePlanner."""
    return EscapePlanner(state, options).escape()
