"""
Cavern Core Module
==================

Definitions and agent handles shared by the simulation components.

- definitions: Tile types, graph records (Tile, Edge, Node), NodeStatus
- state: Abstract ExplorationState / EscapeState handles

Usage:
    from cavern.core import Node, NodeStatus, ExplorationState
"""

from cavern.core.definitions import (
    NO_RETURN_POINT,
    TileType,
    Tile,
    Edge,
    Node,
    NodeStatus,
    status_order_key,
)
from cavern.core.state import ExplorationState, EscapeState

__all__ = [
    # Definitions
    'NO_RETURN_POINT',
    'TileType',
    'Tile',
    'Edge',
    'Node',
    'NodeStatus',
    'status_order_key',
    # Handles
    'ExplorationState',
    'EscapeState',
]
