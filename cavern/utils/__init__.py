"""
Utility Module for Cavern Explorer
==================================

Graph helpers for building, loading and validating caverns.
"""

from .graph_utils import (
    build_cavern_graph,
    cavern_graph_from_dict,
    load_cavern_json,
    path_weight,
    shortest_escape_length,
    validate_cavern_graph,
)

__all__ = [
    'build_cavern_graph',
    'cavern_graph_from_dict',
    'load_cavern_json',
    'path_weight',
    'shortest_escape_length',
    'validate_cavern_graph',
]
