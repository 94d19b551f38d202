"""
Cavern Graph Utilities
======================

Helpers for building, loading and checking cavern graphs.

This module provides:
- Graph construction from edge lists / dict descriptions / JSON files
- Validation of the environment guarantees (reachability, time budget)
- Path weight helpers

All functions work with undirected NetworkX graphs whose edges carry an
integer 'weight' and whose nodes may carry 'row', 'col' and 'gold'.

JSON format:
    {
        "nodes": [{"id": 1, "row": 0, "col": 0, "gold": 0}, ...],
        "edges": [[1, 2, 3], ...],          # [u, v, weight]
        "entrance": 1, "orb": 4, "exit": 5,
        "time_budget": 20                   # optional
    }

Usage:
    from cavern.utils.graph_utils import load_cavern_json, validate_cavern_graph

    G, entrance, orb, exit_id, budget = load_cavern_json("examples/line_cavern.json")
    is_valid, errors = validate_cavern_graph(G, entrance, orb, exit_id, budget)
    if not is_valid:
        print(f"Validation failed: {errors}")
"""

import json
import logging
import numbers
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

import networkx as nx

logger = logging.getLogger(__name__)


# ==========================================
# CONSTRUCTION
# ==========================================

def build_cavern_graph(
    edges: Iterable[Sequence[int]],
    positions: Optional[Dict[int, Tuple[int, int]]] = None,
    gold: Optional[Dict[int, int]] = None,
) -> nx.Graph:
    """
    Build an undirected cavern graph.

    Args:
        edges: (u, v) or (u, v, weight) tuples; weight defaults to 1
        positions: Optional node -> (row, col)
        gold: Optional node -> gold amount

    Returns:
        nx.Graph with 'weight' on edges and 'row'/'col'/'gold' on nodes

    Example:
        >>> G = build_cavern_graph([(1, 2, 1), (2, 3, 2)], gold={3: 10})
        >>> G.nodes[3]['gold']
        10
    """
    G = nx.Graph()
    for edge in edges:
        if len(edge) == 2:
            u, v = edge
            weight = 1
        else:
            u, v, weight = edge
        G.add_edge(u, v, weight=int(weight))

    for node in G.nodes():
        G.nodes[node]['gold'] = 0
    for node, (row, col) in (positions or {}).items():
        G.add_node(node, row=row, col=col)
    for node, amount in (gold or {}).items():
        G.add_node(node, gold=int(amount))
    return G


def cavern_graph_from_dict(
    data: Dict[str, Any]
) -> Tuple[nx.Graph, int, int, int, Optional[int]]:
    """
    Parse a cavern description (see module docstring).

    Returns:
        (G, entrance, orb, exit, time_budget); time_budget may be None

    Raises:
        ValueError: If a required key is missing, a node has no id or an
            edge is malformed
    """
    for key in ('edges', 'entrance', 'orb', 'exit'):
        if key not in data:
            raise ValueError(f"Cavern description is missing '{key}'")

    G = nx.Graph()
    for node in data.get('nodes', []):
        if 'id' not in node:
            raise ValueError(f"Node entry has no 'id': {node}")
        node_id = int(node['id'])
        attrs = {'gold': int(node.get('gold', 0))}
        if 'row' in node and 'col' in node:
            attrs['row'] = int(node['row'])
            attrs['col'] = int(node['col'])
        G.add_node(node_id, **attrs)

    for edge in data['edges']:
        if len(edge) != 3:
            raise ValueError(f"Edge must be [u, v, weight], got {edge}")
        u, v, weight = (int(x) for x in edge)
        G.add_edge(u, v, weight=weight)

    for node in G.nodes():
        G.nodes[node].setdefault('gold', 0)

    time_budget = data.get('time_budget')
    return (
        G,
        int(data['entrance']),
        int(data['orb']),
        int(data['exit']),
        int(time_budget) if time_budget is not None else None,
    )


def load_cavern_json(
    path: Union[str, Path]
) -> Tuple[nx.Graph, int, int, int, Optional[int]]:
    """Load a cavern description from a JSON file."""
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    logger.info(f"Loaded cavern description from {path}")
    return cavern_graph_from_dict(data)


# ==========================================
# PATH HELPERS
# ==========================================

def path_weight(G: nx.Graph, path: Sequence[int]) -> int:
    """Total edge weight along consecutive nodes of ``path``."""
    return sum(G.edges[u, v]['weight'] for u, v in zip(path, path[1:]))


def shortest_escape_length(G: nx.Graph, source: int, exit_id: int) -> int:
    """Weighted shortest distance from ``source`` to ``exit_id``."""
    return nx.shortest_path_length(G, source, exit_id, weight='weight')


# ==========================================
# VALIDATION
# ==========================================

def validate_cavern_graph(
    G: nx.Graph,
    entrance: int,
    orb: int,
    exit_id: int,
    time_budget: Optional[int] = None,
) -> Tuple[bool, List[str]]:
    """
    Check the guarantees both agent phases rely on.

    Validation rules:
    1. Entrance, orb and exit are nodes of the graph
    2. Every edge weight is a non-negative integer
    3. The orb is reachable from the entrance
    4. The exit is reachable from the orb
    5. The shortest orb -> exit distance fits in time_budget (if given)
    6. No two nodes share the same (row, col) position

    Returns:
        Tuple of (is_valid, error_messages)
    """
    errors = []

    for name, node in (('entrance', entrance), ('orb', orb), ('exit', exit_id)):
        if node not in G:
            errors.append(f"{name} node {node} is not in the graph")
    if errors:
        return False, errors

    for u, v, data in G.edges(data=True):
        weight = data.get('weight')
        if not isinstance(weight, numbers.Integral) or weight < 0:
            errors.append(f"Edge {u}-{v} has invalid weight {weight!r}")

    seen: Dict[Tuple[int, int], int] = {}
    for node, data in G.nodes(data=True):
        if 'row' not in data or 'col' not in data:
            continue
        position = (data['row'], data['col'])
        if position in seen:
            errors.append(
                f"Nodes {seen[position]} and {node} share position {position}"
            )
        else:
            seen[position] = node

    if not nx.has_path(G, entrance, orb):
        errors.append(f"Orb {orb} is unreachable from entrance {entrance}")

    if not nx.has_path(G, orb, exit_id):
        errors.append(f"Exit {exit_id} is unreachable from orb {orb}")
    elif time_budget is not None and not errors:
        needed = shortest_escape_length(G, orb, exit_id)
        if needed > time_budget:
            errors.append(
                f"Shortest escape needs {needed} time but budget is {time_budget}"
            )

    if errors:
        for error in errors:
            logger.warning(f"Cavern validation: {error}")
    return len(errors) == 0, errors
