"""
CAVERN DEFINITIONS
==================
Central constants and type definitions shared by the explorer and the
escape planner.

This file is the SINGLE SOURCE OF TRUTH for:
- Tile types
- Tile / Edge / Node graph records
- Neighbour status records and their ordering

Import from here instead of duplicating definitions across modules.

"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

# ==========================================
# CONSTANTS
# ==========================================

# Return point of the top-level search call (there is no node to go back to)
NO_RETURN_POINT: int = -1


class TileType(IntEnum):
    """Semantic tile types for cavern nodes."""
    FLOOR = 1           # Plain walkable tile
    ENTRANCE = 21       # Where the exploration phase starts
    ORB = 22            # Search target
    EXIT = 24           # Escape destination


# ==========================================
# GRAPH RECORDS
# ==========================================

@dataclass
class Tile:
    """Payload attached to a node: grid coordinates and gold."""
    row: Optional[int] = None
    col: Optional[int] = None
    gold: int = 0
    tile_type: TileType = TileType.FLOOR

    @property
    def has_position(self) -> bool:
        return self.row is not None and self.col is not None

    def take_gold(self) -> int:
        """Remove all gold from this tile and return the amount taken."""
        amount = self.gold
        self.gold = 0
        return amount


@dataclass(frozen=True)
class Edge:
    """Undirected, weighted connection between two nodes."""
    source: 'Node'
    dest: 'Node'
    length: int

    def other(self, node: 'Node') -> 'Node':
        """Return the endpoint opposite to ``node``."""
        if node == self.source:
            return self.dest
        if node == self.dest:
            return self.source
        raise ValueError(f"Node {node.id} is not an endpoint of this edge")


class Node:
    """
    A cavern node: unique id, tile payload and incident edges.

    Neighbours are kept in insertion order so iteration over them is
    deterministic. Equality and hashing use the id only.
    """

    def __init__(self, node_id: int, tile: Optional[Tile] = None):
        self.id = node_id
        self.tile = tile if tile is not None else Tile()
        self._edges: Dict['Node', Edge] = {}

    def connect(self, other: 'Node', length: int) -> Edge:
        """Create the edge between this node and ``other`` on both sides."""
        if length < 0:
            raise ValueError(
                f"Edge {self.id}-{other.id} has negative length {length}"
            )
        edge = Edge(self, other, length)
        self._edges[other] = edge
        other._edges[self] = edge
        return edge

    @property
    def neighbours(self) -> List['Node']:
        return list(self._edges)

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    @property
    def gold(self) -> int:
        return self.tile.gold

    def get_edge(self, other: 'Node') -> Edge:
        try:
            return self._edges[other]
        except KeyError:
            raise ValueError(
                f"Node {other.id} is not adjacent to node {self.id}"
            ) from None

    def edge_length(self, other: 'Node') -> int:
        return self.get_edge(other).length

    def is_adjacent(self, other: 'Node') -> bool:
        return other in self._edges

    def __eq__(self, other) -> bool:
        return isinstance(other, Node) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Node({self.id})"


# ==========================================
# SEARCH-PHASE RECORDS
# ==========================================

@dataclass(frozen=True)
class NodeStatus:
    """What the explorer sees of one open neighbour at a single step."""
    node_id: int
    distance_to_target: float


def status_order_key(status: NodeStatus, arrival_index: int) -> Tuple[float, int]:
    """
    Ordering key for greedy neighbour selection.

    Lower heuristic distance first; ties go to the neighbour the handle
    reported first.
    """
    return (status.distance_to_target, arrival_index)
