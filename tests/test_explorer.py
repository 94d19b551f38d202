"""
Tests for the greedy backtracking explorer.

Run with: pytest tests/test_explorer.py -v
"""

import random
import sys
from pathlib import Path

import networkx as nx
import pytest

# Ensure the project root is in path
sys.path.insert(0, str(Path(__file__).parent.parent))

from cavern.core.definitions import NodeStatus
from cavern.simulation.environment import Cavern, CavernExplorationState
from cavern.simulation.explorer import GreedyExplorer, explore
from cavern.utils.graph_utils import build_cavern_graph


# ==============================================================================
# HELPERS
# ==============================================================================

def make_cavern(edges, entrance, orb, positions=None, exit_id=None):
    G = build_cavern_graph(edges, positions=positions)
    return Cavern(G, entrance, orb, exit_id if exit_id is not None else orb)


def random_cavern(seed, n=12):
    rng = random.Random(seed)
    G = nx.connected_watts_strogatz_graph(n, 4, 0.4, seed=seed)
    for u, v in G.edges():
        G.edges[u, v]['weight'] = rng.randint(1, 5)
    for node in G.nodes():
        G.nodes[node]['gold'] = 0
    entrance, orb = rng.sample(list(G.nodes()), 2)
    return Cavern(G, entrance, orb, orb)


class MisleadingState(CavernExplorationState):
    """Reports neighbours closer to the orb as further away."""

    def neighbor_statuses(self):
        return [
            NodeStatus(s.node_id, 100 - s.distance_to_target)
            for s in super().neighbor_statuses()
        ]


@pytest.fixture
def square_cavern():
    """4-node cycle 1-2-3-4-1 laid out on a unit square, orb on 3."""
    positions = {1: (0, 0), 2: (0, 1), 3: (1, 1), 4: (1, 0)}
    return make_cavern([(1, 2), (2, 3), (3, 4), (4, 1)], 1, 3, positions)


@pytest.fixture
def dead_end_cavern():
    """Node 2 looks closest to the orb but is a dead end."""
    positions = {1: (0, 0), 2: (0, 2), 3: (1, 0), 4: (0, 3)}
    return make_cavern([(1, 2), (1, 3), (3, 4)], 1, 4, positions)


# ==============================================================================
# SCENARIOS
# ==============================================================================

@pytest.mark.parametrize("iterative", [True, False])
def test_cycle_reaches_orb_via_short_arc(square_cavern, iterative):
    state = square_cavern.exploration_state()
    result = explore(state, iterative=iterative)

    assert result.success
    assert state.current_location() == 3
    assert state.distance_to_target() == 0
    assert state.steps <= 2
    assert result.backtracks == 0


@pytest.mark.parametrize("iterative", [True, False])
def test_start_on_orb_makes_no_moves(iterative):
    cavern = make_cavern([(1, 2), (2, 3)], 2, 2, {1: (0, 0), 2: (0, 1), 3: (0, 2)})
    state = cavern.exploration_state()
    result = explore(state, iterative=iterative)

    assert result.success
    assert result.moves == 0
    assert result.trace == []
    assert state.steps == 0
    assert state.current_location() == 2


def test_greedy_prefers_lowest_heuristic():
    positions = {1: (0, 0), 2: (1, 0), 3: (0, 1), 4: (0, 2)}
    cavern = make_cavern([(1, 2), (1, 3), (3, 4)], 1, 4, positions)
    result = explore(cavern.exploration_state())

    assert result.trace == [3, 4]


def test_equal_heuristic_tie_goes_to_first_reported():
    positions = {1: (0, 0), 2: (0, 1), 3: (1, 0), 4: (1, 1)}
    cavern = make_cavern([(1, 2), (1, 3), (2, 4), (3, 4)], 1, 4, positions)
    state = cavern.exploration_state()
    first_reported = state.neighbor_statuses()[0].node_id

    result = explore(state)

    assert result.trace[0] == first_reported


@pytest.mark.parametrize("iterative", [True, False])
def test_dead_end_backtracks_to_return_point(dead_end_cavern, iterative):
    state = dead_end_cavern.exploration_state()
    result = explore(state, iterative=iterative)

    assert result.success
    assert result.trace == [2, 1, 3, 4]
    assert result.backtracks == 1
    assert state.history == [1, 2, 1, 3, 4]


# ==============================================================================
# PROPERTIES
# ==============================================================================

@pytest.mark.parametrize("seed", range(10))
def test_random_caverns_find_orb_visiting_each_node_once(seed):
    cavern = random_cavern(seed)
    state = cavern.exploration_state()
    result = explore(state)

    assert result.success
    assert state.current_location() == cavern.orb
    # Every forward move enters a node never entered before
    assert result.moves - result.backtracks == result.nodes_visited - 1
    assert result.nodes_visited <= cavern.graph.number_of_nodes()


@pytest.mark.parametrize("seed", range(10))
def test_iterative_and_recursive_traces_match(seed):
    iterative = explore(random_cavern(seed).exploration_state(), iterative=True)
    recursive = explore(random_cavern(seed).exploration_state(), iterative=False)

    assert iterative.trace == recursive.trace
    assert iterative.backtracks == recursive.backtracks
    assert iterative.max_depth == recursive.max_depth


@pytest.mark.parametrize("seed", range(5))
def test_misleading_heuristic_still_finds_orb(seed):
    cavern = random_cavern(seed)
    state = MisleadingState(cavern)
    result = GreedyExplorer(state).explore()

    assert result.success
    assert state.current_location() == cavern.orb


@pytest.mark.parametrize("iterative", [True, False])
def test_unreachable_orb_reports_exhausted_without_invalid_move(iterative):
    # Two components: {1, 2, 3} and {4, 5}, orb on 5
    cavern = make_cavern([(1, 2), (2, 3), (4, 5)], 1, 5)
    state = cavern.exploration_state()
    result = explore(state, iterative=iterative)

    assert not result.success
    assert result.exhausted
    assert state.current_location() == 1
    assert result.nodes_visited == 3


def test_unreachable_orb_logs_warning(caplog):
    cavern = make_cavern([(1, 2), (3, 4)], 1, 4)
    with caplog.at_level("WARNING", logger="cavern.simulation.explorer"):
        explore(cavern.exploration_state())

    assert "Search exhausted" in caplog.text


def test_iterative_handles_paths_deeper_than_recursion_limit():
    n = sys.getrecursionlimit() + 500
    G = nx.path_graph(n)
    nx.set_edge_attributes(G, 1, 'weight')
    nx.set_node_attributes(G, 0, 'gold')
    cavern = Cavern(G, 0, n - 1, n - 1)

    result = explore(cavern.exploration_state(), iterative=True)

    assert result.success
    assert result.moves == n - 1
    assert result.max_depth == n - 1
