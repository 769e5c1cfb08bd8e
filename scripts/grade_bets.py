#!/usr/bin/env python3
"""
Grade Bets Script

Replays a game from a local game-data file and grades a wager slip against it.

Usage:
    # Print a graded table
    python scripts/grade_bets.py --game gamedata.json --bets bets.json

    # Machine-readable output
    python scripts/grade_bets.py --game gamedata.json --bets bets.json --json

    # See every grading decision
    python scripts/grade_bets.py --game gamedata.json --bets bets.json --log-level DEBUG
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pbp_grader.core.logging import clear_game_id, configure_logging, set_game_id
from pbp_grader.services.betting.parlay_grader import grade_parlay
from pbp_grader.services.betting.settlement_service import grade_bets, summarize_results
from pbp_grader.services.nfl.game_loader import load_game

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Grade wagers against a game's play-by-play"
    )
    parser.add_argument(
        '--game',
        type=Path,
        required=True,
        help='Path to the game-data JSON document'
    )
    parser.add_argument(
        '--bets',
        type=Path,
        required=True,
        help='Path to a JSON list of wagers (or {"bets": [...]})'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print graded wagers as JSON instead of a table'
    )
    parser.add_argument(
        '--log-level',
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging verbosity (default: INFO)'
    )
    return parser.parse_args(argv)


def load_json(path: Path):
    """Read a JSON file, logging and returning None when it is unusable."""
    try:
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(f"File not found: {path}")
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {path}: {e}")
    return None


def wager_list(document):
    """Accept a list, a {"bets": [...]} wrapper, or a dict of wagers keyed by id."""
    if isinstance(document, list):
        return document
    if isinstance(document, dict):
        if isinstance(document.get('bets'), list):
            return document['bets']
        return [value for value in document.values() if isinstance(value, dict)]
    return []


def print_table(graded, parlay):
    """Print a plain-text summary of the graded slip."""
    print(f"{'RESULT':<8} {'MARKET':<18} {'SELECTION':<24} {'THRESHOLD':<10} REASON")
    print("-" * 90)
    for g in graded:
        bet = g.to_dict()
        market = f"{bet.get('market', '')}/{bet.get('type', '')}"
        print(
            f"{g.result.value:<8} {market:<18} {str(bet.get('selection', '')):<24} "
            f"{str(bet.get('threshold', '')):<10} {g.reason}"
        )
    print("-" * 90)
    price = f" @ {parlay.american}" if parlay.american else ""
    print(f"Parlay ({parlay.legs} legs): {parlay.result.value}{price}")


def main(argv=None) -> int:
    args = parse_args(argv)
    configure_logging(level=args.log_level, json_output=False)

    game = load_json(args.game)
    bets_doc = load_json(args.bets)
    if game is None or bets_doc is None:
        return 1

    context = load_game(game)
    token = set_game_id(context.game_id)
    try:
        graded = grade_bets(wager_list(bets_doc), context)
        parlay = grade_parlay(graded)
    finally:
        clear_game_id(token)

    if args.json:
        print(json.dumps({
            'game_id': context.game_id,
            'bets': [g.to_dict() for g in graded],
            'summary': summarize_results(graded),
            'parlay': {
                'result': parlay.result.value,
                'legs': parlay.legs,
                'probability': parlay.probability,
                'american': parlay.american,
            },
        }, indent=2, default=str))
    else:
        print_table(graded, parlay)

    return 0


if __name__ == "__main__":
    sys.exit(main())
