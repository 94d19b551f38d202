"""
Agent Handles
=============

Abstract views of the environment handed to the two agent phases.

- ExplorationState: partial observability (current id, open neighbours
  with their heuristic distance to the orb, move by id)
- EscapeState: full observability (every node, exit, time budget, move
  by node, pick up gold)

Handles own all mutable run state (position, remaining time, gold). The
agents always re-query them instead of caching position or gold.
"""

from abc import ABC, abstractmethod
from typing import Collection

from .definitions import Node, NodeStatus


class ExplorationState(ABC):
    """Handle for the orb search."""

    @abstractmethod
    def current_location(self) -> int:
        """Id of the node the agent stands on."""

    @abstractmethod
    def neighbor_statuses(self) -> Collection[NodeStatus]:
        """Open neighbours of the current node with their heuristic distance."""

    @abstractmethod
    def distance_to_target(self) -> float:
        """Heuristic distance from the current node to the orb (0 on the orb)."""

    @abstractmethod
    def move_to(self, node_id: int) -> None:
        """Move to an adjacent node. Fails for a non-adjacent id."""


class EscapeState(ABC):
    """Handle for the escape phase."""

    @abstractmethod
    def current_node(self) -> Node:
        pass

    @abstractmethod
    def exit_node(self) -> Node:
        pass

    @abstractmethod
    def all_nodes(self) -> Collection[Node]:
        """Every node of the cavern. Static for the whole phase."""

    @abstractmethod
    def time_remaining(self) -> int:
        pass

    @abstractmethod
    def move_to(self, node: Node) -> None:
        """Move to an adjacent node, spending the edge length from the budget."""

    @abstractmethod
    def collect_reward(self) -> None:
        """Pick up the gold on the current node. Fails if there is none."""
