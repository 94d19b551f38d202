"""
Cavern Environment
==================

In-memory cavern used to drive the explorer and the escape planner.

The cavern is an undirected networkx graph:
- node attributes: 'row', 'col' (optional grid coordinates), 'gold'
- edge attribute: 'weight' (non-negative integer traversal cost)

The Cavern object builds the Node/Tile/Edge records once and hands out
the two phase handles:
- CavernExplorationState: ids + heuristic distance to the orb only
- CavernEscapeState: full graph, time budget, gold pickup

Heuristic distance is the Manhattan distance between tile coordinates
(ignoring walls) when every node has coordinates, otherwise the
unweighted hop distance to the orb.
"""

import logging
from typing import Dict, List, Optional

import networkx as nx

from cavern.core.definitions import Node, NodeStatus, Tile, TileType
from cavern.core.state import EscapeState, ExplorationState

logger = logging.getLogger(__name__)


class Cavern:
    """
    Static cavern graph with an entrance, an orb and an exit.

    Args:
        graph: Undirected networkx graph (see module docstring for attributes)
        entrance: Node id where exploration starts
        orb: Node id of the search target
        exit: Node id of the escape destination
    """

    def __init__(self, graph: nx.Graph, entrance: int, orb: int, exit: int):
        if graph.is_directed():
            raise ValueError("Cavern graph must be undirected")
        for node_id in (entrance, orb, exit):
            if node_id not in graph:
                raise ValueError(f"Node {node_id} is not in the cavern graph")

        self.graph = graph
        self.entrance = entrance
        self.orb = orb
        self.exit = exit

        self.nodes: Dict[int, Node] = {}
        for node_id, data in graph.nodes(data=True):
            tile = Tile(
                row=data.get('row'),
                col=data.get('col'),
                gold=int(data.get('gold', 0)),
                tile_type=self._tile_type(node_id),
            )
            self.nodes[node_id] = Node(node_id, tile)

        for u, v, data in graph.edges(data=True):
            self.nodes[u].connect(self.nodes[v], int(data.get('weight', 1)))

        self._use_coordinates = all(
            node.tile.has_position for node in self.nodes.values()
        )
        self._hops_to_orb: Dict[int, int] = {}
        if not self._use_coordinates:
            self._hops_to_orb = nx.single_source_shortest_path_length(graph, orb)

        logger.debug(
            f"Cavern: {graph.number_of_nodes()} nodes, {graph.number_of_edges()} edges, "
            f"heuristic={'manhattan' if self._use_coordinates else 'hops'}"
        )

    def _tile_type(self, node_id: int) -> TileType:
        if node_id == self.orb:
            return TileType.ORB
        if node_id == self.exit:
            return TileType.EXIT
        if node_id == self.entrance:
            return TileType.ENTRANCE
        return TileType.FLOOR

    def node(self, node_id: int) -> Node:
        return self.nodes[node_id]

    def distance_to_orb(self, node_id: int) -> float:
        """Heuristic distance from ``node_id`` to the orb."""
        if self._use_coordinates:
            a = self.nodes[node_id].tile
            b = self.nodes[self.orb].tile
            return abs(a.row - b.row) + abs(a.col - b.col)
        return self._hops_to_orb.get(node_id, float('inf'))

    @property
    def total_gold(self) -> int:
        return sum(node.gold for node in self.nodes.values())

    def exploration_state(self, start: Optional[int] = None) -> 'CavernExplorationState':
        return CavernExplorationState(self, start)

    def escape_state(
        self, start: Optional[int] = None, time_budget: Optional[int] = None
    ) -> 'CavernEscapeState':
        return CavernEscapeState(self, start, time_budget)


class CavernExplorationState(ExplorationState):
    """Exploration handle over a Cavern. Starts at the entrance by default."""

    def __init__(self, cavern: Cavern, start: Optional[int] = None):
        self.cavern = cavern
        self._position = cavern.entrance if start is None else start
        if self._position not in cavern.nodes:
            raise ValueError(f"Start node {self._position} is not in the cavern")
        self.steps = 0
        self.history: List[int] = [self._position]

    def current_location(self) -> int:
        return self._position

    def neighbor_statuses(self) -> List[NodeStatus]:
        current = self.cavern.node(self._position)
        return [
            NodeStatus(n.id, self.cavern.distance_to_orb(n.id))
            for n in current.neighbours
        ]

    def distance_to_target(self) -> float:
        return self.cavern.distance_to_orb(self._position)

    def move_to(self, node_id: int) -> None:
        current = self.cavern.node(self._position)
        target = self.cavern.nodes.get(node_id)
        if target is None or not current.is_adjacent(target):
            raise ValueError(
                f"Cannot move from {self._position} to {node_id}: not an open neighbour"
            )
        self._position = node_id
        self.steps += 1
        self.history.append(node_id)

    @property
    def on_orb(self) -> bool:
        return self._position == self.cavern.orb


class CavernEscapeState(EscapeState):
    """
    Escape handle over a Cavern.

    Starts on the orb by default. Without an explicit budget the time
    available is the weighted shortest distance to the exit, i.e. the
    tightest budget the environment guarantees.
    """

    def __init__(
        self,
        cavern: Cavern,
        start: Optional[int] = None,
        time_budget: Optional[int] = None,
    ):
        self.cavern = cavern
        self._position = cavern.orb if start is None else start
        if self._position not in cavern.nodes:
            raise ValueError(f"Start node {self._position} is not in the cavern")
        if time_budget is None:
            time_budget = nx.shortest_path_length(
                cavern.graph, self._position, cavern.exit, weight='weight'
            )
        self._time_remaining = int(time_budget)
        self.gold_collected = 0
        self.history: List[int] = [self._position]

    def current_node(self) -> Node:
        return self.cavern.node(self._position)

    def exit_node(self) -> Node:
        return self.cavern.node(self.cavern.exit)

    def all_nodes(self) -> List[Node]:
        return list(self.cavern.nodes.values())

    def time_remaining(self) -> int:
        return self._time_remaining

    def move_to(self, node: Node) -> None:
        current = self.current_node()
        if not current.is_adjacent(node):
            raise ValueError(
                f"Cannot move from {current.id} to {node.id}: not adjacent"
            )
        self._time_remaining -= current.edge_length(node)
        self._position = node.id
        self.history.append(node.id)
        if self._time_remaining < 0:
            logger.warning(f"Time ran out at node {node.id} ({self._time_remaining})")

    def collect_reward(self) -> None:
        tile = self.current_node().tile
        if tile.gold <= 0:
            raise ValueError(f"No gold on node {self._position}")
        self.gold_collected += tile.take_gold()

    @property
    def timed_out(self) -> bool:
        return self._time_remaining < 0

    @property
    def escaped(self) -> bool:
        return self._position == self.cavern.exit and not self.timed_out
