"""
Cavern Explorer
===============

Two-phase cavern agent:
- Exploration: find the orb with only local sensing (greedy backtracking DFS)
- Escape: walk a shortest path to the exit, picking up gold on the way

Submodules:
- core: Graph records, tile types and abstract agent handles
- simulation: Explorer, escape planner and the in-memory cavern environment
- utils: Graph construction, loading and validation helpers
"""

__version__ = "1.0.0"

__all__ = ['core', 'simulation', 'utils']
