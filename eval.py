#!/usr/bin/env python3
"""
Evaluate a trained MENACE table.

Usage:
    python eval.py --table runs/menace_run/menace.json
    python eval.py --table menace.json --games 1000 --symmetry
"""

import sys
import argparse
import logging
from pathlib import Path

import numpy as np

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from menace import (
    Menace,
    PersistenceError,
    eval_vs_random,
    eval_vs_minimax,
    table_stats,
)


def main():
    parser = argparse.ArgumentParser(description="Evaluate a MENACE table")
    parser.add_argument("--table", type=str, required=True, help="Path to matchbox table")
    parser.add_argument("--games", type=int, default=500, help="Number of eval games")
    parser.add_argument("--symmetry", action="store_true", help="Table was trained with symmetry folding")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--show", action="store_true", help="Print every matchbox")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    args = parser.parse_args()
    if args.games < 1:
        parser.error(f"--games must be at least 1, got {args.games}")
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    print(f"Loading table: {args.table}")
    try:
        menace = Menace.load(args.table)
    except PersistenceError as e:
        print(e)
        sys.exit(1)

    if args.show:
        print(menace)

    stats = table_stats(menace)
    print("\n=== Table ===")
    print(f"  Matchboxes: {stats['states']:,}")
    print(f"  Actions:    {stats['actions']:,}")
    print(f"  Beads:      {stats['beads']:,}")
    print(f"  Starved:    {stats['starved_states']:,}")
    print(f"  Mean beads: {stats['mean_count']:.2f} (max {stats['max_count']})")

    rng = np.random.default_rng(args.seed)

    print("\n=== Evaluation ===")
    print(f"\nvs Random ({args.games} games)...")
    w, d, l = eval_vs_random(menace, games=args.games, rng=rng, use_symmetry=args.symmetry)
    print(f"  Wins:   {w:.2%}")
    print(f"  Draws:  {d:.2%}")
    print(f"  Losses: {l:.2%}")

    print(f"\nvs Minimax ({args.games} games)...")
    results = eval_vs_minimax(menace, games=args.games, rng=rng, use_symmetry=args.symmetry)
    print(f"  Wins:   {results['menace_w']:.2%}")
    print(f"  Draws:  {results['menace_d']:.2%}")
    print(f"  Losses: {results['menace_l']:.2%}")


if __name__ == "__main__":
    main()
