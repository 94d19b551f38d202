"""
CAVERN EXPLORER - Main Entry Point
==================================
The two-phase run: Load -> Validate -> Explore -> Escape

Usage:
    # Run both phases on a cavern description
    python main.py examples/line_cavern.json

    # Use the recursive explorer and heap-based Dijkstra
    python main.py examples/grid_cavern.json --recursive --use-heap

    # Override the escape time budget
    python main.py examples/line_cavern.json --time-budget 12

"""

import argparse
import logging
import sys
from typing import Optional

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from cavern.simulation import Cavern, EscapeOptions, explore, escape
from cavern.utils.graph_utils import load_cavern_json, validate_cavern_graph


def run_cavern(path: str, recursive: bool = False, use_heap: bool = False,
               time_budget: Optional[int] = None, verbose: bool = True) -> dict:
    """
    Run exploration then escape on one cavern file.

    Args:
        path: Cavern JSON description
        recursive: Use the recursive explorer
        use_heap: Use the heap-based Dijkstra
        time_budget: Escape budget (overrides the file's value)
        verbose: Print progress

    Returns:
        Result dict with 'valid', 'explore', 'escape_start', 'escape'
        and 'escaped'
    """
    logger.info("[STEP 1] Loading cavern...")
    G, entrance, orb, exit_id, file_budget = load_cavern_json(path)
    budget = time_budget if time_budget is not None else file_budget

    if verbose:
        print(f"\n{'='*60}")
        print(f"CAVERN: {path}")
        print(f"{'='*60}")
        print(f"  Graph: {G.number_of_nodes()} nodes, {G.number_of_edges()} edges")
        print(f"  Entrance: {entrance}  Orb: {orb}  Exit: {exit_id}")

    logger.info("[STEP 2] Validating cavern...")
    is_valid, errors = validate_cavern_graph(G, entrance, orb, exit_id, budget)
    if not is_valid:
        if verbose:
            print("  ✗ INVALID CAVERN")
            for error in errors:
                print(f"  ✗ {error}")
        return {'valid': False, 'errors': errors, 'escaped': False}

    cavern = Cavern(G, entrance, orb, exit_id)

    logger.info("[STEP 3] Exploring for the orb...")
    explore_state = cavern.exploration_state()
    explore_result = explore(explore_state, iterative=not recursive)
    if verbose:
        print(f"\n[EXPLORE] {explore_result.summary()}")
    if not explore_result.success:
        return {'valid': True, 'explore': explore_result, 'escaped': False}

    location = explore_state.current_location()
    if not explore_state.on_orb:
        logger.error(
            f"Explorer stopped at node {location}, which reports zero distance "
            f"but is not the orb {orb}"
        )
        if verbose:
            print(f"  ✗ Explorer stopped at node {location}, not on the orb")
        return {'valid': True, 'explore': explore_result, 'escaped': False}

    logger.info("[STEP 4] Escaping...")
    state = cavern.escape_state(start=location, time_budget=budget)
    options = EscapeOptions.for_graph_size(G.number_of_nodes())
    if use_heap:
        options.use_heap = True
    escape_result = escape(state, options)
    if verbose:
        print(f"[ESCAPE]  {escape_result.summary()}")
        print(f"  Path: {' -> '.join(str(n) for n in [location] + escape_result.path)}")

    return {
        'valid': True,
        'explore': explore_result,
        'escape_start': location,
        'escape': escape_result,
        'escaped': state.escaped,
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description='Cavern Explorer - find the orb, then escape with the gold'
    )

    parser.add_argument(
        'cavern', type=str,
        help='Path to a cavern JSON description'
    )
    parser.add_argument(
        '--recursive', '-r', action='store_true',
        help='Use the recursive explorer instead of the explicit stack'
    )
    parser.add_argument(
        '--use-heap', action='store_true',
        help='Use the priority-queue Dijkstra instead of the linear scan'
    )
    parser.add_argument(
        '--time-budget', '-t', type=int,
        help='Escape time budget (default: value in file, else shortest path length)'
    )
    parser.add_argument(
        '--quiet', '-q', action='store_true',
        help='Suppress output'
    )

    args = parser.parse_args(argv)

    try:
        result = run_cavern(
            args.cavern,
            recursive=args.recursive,
            use_heap=args.use_heap,
            time_budget=args.time_budget,
            verbose=not args.quiet,
        )
    except FileNotFoundError as e:
        logger.error(f"Cavern file not found: {e}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid cavern description: {e}")
        return 1

    return 0 if result['escaped'] else 1


if __name__ == "__main__":
    sys.exit(main())
