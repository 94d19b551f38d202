"""
Cavern Simulation Module
========================
Agent phases and the environment that drives them.

This module contains:
- explorer: Greedy backtracking orb search (GreedyExplorer)
- escape: Dijkstra-based escape planner (EscapePlanner)
- environment: networkx-backed Cavern with exploration / escape handles
"""

from .explorer import (
    GreedyExplorer,
    ExploreResult,
    explore,
)

from .escape import (
    EscapePlanner,
    EscapeOptions,
    EscapePlan,
    EscapeResult,
    escape_search,
    determine_escape_path,
    escape,
)

from .environment import (
    Cavern,
    CavernExplorationState,
    CavernEscapeState,
)

__all__ = [
    # Exploration
    'GreedyExplorer',
    'ExploreResult',
    'explore',
    # Escape
    'EscapePlanner',
    'EscapeOptions',
    'EscapePlan',
    'EscapeResult',
    'escape_search',
    'determine_escape_path',
    'escape',
    # Environment
    'Cavern',
    'CavernExplorationState',
    'CavernEscapeState',
]
