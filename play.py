#!/usr/bin/env python3
"""
Play TicTacToe against MENACE. MENACE learns from every finished game.

Usage:
    python play.py
    python play.py --table menace.json --show
"""

import sys
import argparse
import logging
from pathlib import Path

import torch

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from menace import Menace, PersistenceError, play_session


def main():
    parser = argparse.ArgumentParser(description="Play TicTacToe against MENACE")
    parser.add_argument("--table", type=str, default="menace.json", help="Matchbox table file")
    parser.add_argument("--show", action="store_true", help="Print the matchboxes before playing")
    parser.add_argument("--symmetry", action="store_true", help="Fold symmetric positions together")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    generator = None
    if args.seed is not None:
        generator = torch.Generator().manual_seed(args.seed)

    try:
        menace = Menace.load(args.table, generator=generator)
    except PersistenceError as e:
        print(f"{e}\n")
        menace = Menace(generator=generator)

    print(f"MENACE knows {len(menace)} matchboxes")
    if args.show:
        print(menace)

    print("Enter moves as row,col (0-2) or a cell 0-8; 'q' quits.")
    print(" 0 | 1 | 2 ")
    print("---+---+---")
    print(" 3 | 4 | 5 ")
    print("---+---+---")
    print(" 6 | 7 | 8 ")

    try:
        tally = play_session(menace, use_symmetry=args.symmetry)
        print(f"\nMENACE {tally['menace']} / Player {tally['human']} / Draws {tally['draw']}")
    except (KeyboardInterrupt, EOFError):
        print("\nGame aborted")
        menace.discard_episode()

    try:
        menace.save(args.table)
    except PersistenceError as e:
        print(e)
        sys.exit(1)
    print(f"✓ Saved {len(menace)} matchboxes to {args.table}")


if __name__ == "__main__":
    main()
