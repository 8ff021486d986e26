#!/usr/bin/env python3
"""
Train MENACE by playing it against a scripted opponent.

Writes the matchbox table, a metrics history, learning-curve plots and a
markdown report into the run directory.

Usage:
    python train.py                              # 20,000 games vs random
    python train.py --games 2000                 # Quick demo
    python train.py --opponent minimax --symmetry
    python train.py --resume --run-name menace_run  # Continue a previous run
"""

import sys
import time
import json
import argparse
import logging
from dataclasses import asdict
from pathlib import Path

import numpy as np
import torch
from tqdm.auto import trange, tqdm

# Add src to path
sys.path.insert(0, str(Path(__file__).parent / "src"))

from menace import (
    Menace,
    Outcome,
    PersistenceError,
    TrainConfig,
    make_opponent,
    play_game,
    eval_vs_random,
    eval_vs_minimax,
    table_stats,
)

logger = logging.getLogger("train")

OUTCOME_COLUMNS = {
    Outcome.WON_BY_AGENT: "win",
    Outcome.DRAW: "draw",
    Outcome.WON_BY_OPPONENT: "loss",
}


def set_seed(seed: int) -> torch.Generator:
    """Set random seeds for reproducibility; returns the engine's generator."""
    import random
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    return torch.Generator().manual_seed(seed)


def load_or_create(config: TrainConfig, table_path: Path, resume: bool,
                   generator: torch.Generator) -> Menace:
    """Resume from table_path when asked, otherwise start fresh."""
    if resume:
        try:
            menace = Menace.load(table_path, config=config.menace_config(), generator=generator)
            tqdm.write(f"Resumed {len(menace)} matchboxes from {table_path}")
            return menace
        except PersistenceError as e:
            logger.warning("%s; starting with a fresh table", e)
    return Menace(config=config.menace_config(), generator=generator)


def run_evaluation(menace: Menace, config: TrainConfig, rng: np.random.Generator) -> dict:
    w, d, l = eval_vs_random(menace, games=config.eval_games, rng=rng,
                             use_symmetry=config.use_symmetry)
    mm = eval_vs_minimax(menace, games=config.eval_games, rng=rng,
                         use_symmetry=config.use_symmetry)
    return {
        "eval_w": w, "eval_d": d, "eval_l": l,
        "minimax_w": mm["menace_w"], "minimax_d": mm["menace_d"], "minimax_l": mm["menace_l"],
    }


def create_plots(history: list, output_dir: Path, window: int):
    """Learning curves: rolling outcome rates, table growth, evaluation."""
    import matplotlib
    matplotlib.use('Agg')
    import matplotlib.pyplot as plt
    import pandas as pd

    df = pd.DataFrame(history)

    # 1. Rolling outcome rates during training
    plt.figure(figsize=(10, 6))
    for col in ("win", "draw", "loss"):
        plt.plot(df['game'], df[col].rolling(window, min_periods=1).mean(), label=col.title(), linewidth=2)
    plt.title(f'Training Outcomes (rolling {window} games)', fontsize=14, fontweight='bold')
    plt.xlabel('Game', fontsize=12)
    plt.ylabel('Rate', fontsize=12)
    plt.legend()
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_dir / 'plot_1_outcomes.png', dpi=150, bbox_inches='tight')
    plt.close()

    # 2. Matchboxes discovered
    plt.figure(figsize=(10, 6))
    plt.plot(df['game'], df['states'], linewidth=2)
    plt.title('Matchboxes', fontsize=14, fontweight='bold')
    plt.xlabel('Game', fontsize=12)
    plt.ylabel('States', fontsize=12)
    plt.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(output_dir / 'plot_2_matchboxes.png', dpi=150, bbox_inches='tight')
    plt.close()

    # 3. Greedy evaluation
    if 'eval_w' in df:
        ev = df.dropna(subset=['eval_w'])
        plt.figure(figsize=(10, 6))
        plt.plot(ev['game'], ev['eval_w'], label='vs Random: win', linewidth=2)
        plt.plot(ev['game'], ev['eval_l'], label='vs Random: loss', linewidth=2)
        plt.plot(ev['game'], ev['minimax_d'], label='vs Minimax: draw', linewidth=2)
        plt.plot(ev['game'], ev['minimax_l'], label='vs Minimax: loss', linewidth=2)
        plt.title('Greedy Evaluation', fontsize=14, fontweight='bold')
        plt.xlabel('Game', fontsize=12)
        plt.ylabel('Rate', fontsize=12)
        plt.legend()
        plt.grid(True, alpha=0.3)
        plt.tight_layout()
        plt.savefig(output_dir / 'plot_3_evaluation.png', dpi=150, bbox_inches='tight')
        plt.close()


def generate_markdown_report(history: list, stats: dict, final_eval: dict,
                             config: TrainConfig, run_dir: Path, elapsed: float):
    """Generate markdown report."""
    import pandas as pd
    df = pd.DataFrame(history)
    tail = df.tail(min(len(df), 1000))

    md = []
    md.append("# MENACE Training Report\n")
    md.append(f"**Generated:** {time.strftime('%Y-%m-%d %H:%M:%S')}\n")
    md.append(f"**Wall time:** {elapsed:.1f}s\n")

    md.append("\n## Training Configuration\n")
    md.append("| Parameter | Value |")
    md.append("|-----------|-------|")
    md.append(f"| Games | {config.games:,} |")
    md.append(f"| Opponent | {config.opponent} |")
    md.append(f"| MENACE side | {config.menace_side} |")
    md.append(f"| Symmetry folding | {config.use_symmetry} |")
    md.append(f"| Initial beads | {config.initial_count} |")
    md.append(f"| Bead floor | {config.min_count} |")
    md.append(f"| Win / Draw / Lose | {config.win:+d} / {config.draw:+d} / {config.lose:+d} |")
    md.append(f"| Seed | {config.seed} |")

    md.append("\n## Matchbox Table\n")
    md.append("| Metric | Value |")
    md.append("|--------|-------|")
    md.append(f"| Matchboxes | {stats['states']:,} |")
    md.append(f"| Actions | {stats['actions']:,} |")
    md.append(f"| Beads | {stats['beads']:,} |")
    md.append(f"| Starved matchboxes | {stats['starved_states']:,} |")
    md.append(f"| Mean beads per action | {stats['mean_count']:.2f} |")
    md.append(f"| Max beads per action | {stats['max_count']:,} |")

    md.append(f"\n## Last {len(tail):,} Training Games\n")
    md.append("| Outcome | Rate |")
    md.append("|---------|------|")
    md.append(f"| Win | {tail['win'].mean():.2%} |")
    md.append(f"| Draw | {tail['draw'].mean():.2%} |")
    md.append(f"| Loss | {tail['loss'].mean():.2%} |")

    if final_eval:
        md.append("\n## Greedy Evaluation\n")
        md.append("| Opponent | Win | Draw | Loss |")
        md.append("|----------|-----|------|------|")
        md.append(f"| Random | {final_eval['eval_w']:.2%} | {final_eval['eval_d']:.2%} | {final_eval['eval_l']:.2%} |")
        md.append(f"| Minimax | {final_eval['minimax_w']:.2%} | {final_eval['minimax_d']:.2%} | {final_eval['minimax_l']:.2%} |")

    md.append("\n## Output Files\n")
    md.append("- `menace.json` - Matchbox table\n")
    md.append("- `config.json` - Training configuration\n")
    md.append("- `history.csv` - Per-game metrics\n")
    md.append("- `plots/` - Learning curves\n")
    md.append("- `REPORT.md` - This report\n")

    report_path = run_dir / "REPORT.md"
    with open(report_path, 'w') as f:
        f.write('\n'.join(md))

    print(f"✓ Markdown report saved to {report_path}")


def main():
    parser = argparse.ArgumentParser(description="Train MENACE")
    parser.add_argument("--games", type=int, default=20_000, help="Training games")
    parser.add_argument("--opponent", type=str, default="random", choices=["random", "minimax", "mixed"],
                        help="Scripted opponent")
    parser.add_argument("--menace-side", type=str, default="alternate", choices=["x", "o", "alternate"],
                        help="Side MENACE plays")
    parser.add_argument("--symmetry", action="store_true", help="Fold symmetric positions together")
    parser.add_argument("--initial-count", type=int, default=2, help="Beads per action in a new matchbox")
    parser.add_argument("--min-count", type=int, default=0, help="Bead floor")
    parser.add_argument("--win", type=int, default=3, help="Beads added per move on a win")
    parser.add_argument("--draw", type=int, default=1, help="Beads added per move on a draw")
    parser.add_argument("--lose", type=int, default=-1, help="Beads added per move on a loss")
    parser.add_argument("--eval-every", type=int, default=2000, help="Evaluation frequency")
    parser.add_argument("--eval-games", type=int, default=500, help="Games per evaluation")
    parser.add_argument("--print-every", type=int, default=1000, help="Print frequency")
    parser.add_argument("--run-name", type=str, default="menace_run", help="Run name for saving")
    parser.add_argument("--save-dir", type=str, default="runs", help="Save directory")
    parser.add_argument("--resume", action="store_true", help="Continue from the run's saved table")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    generator = set_seed(args.seed)
    rng = np.random.default_rng(args.seed)

    run_dir = Path(args.save_dir) / args.run_name
    table_path = run_dir / "menace.json"

    # Config
    try:
        config = TrainConfig(
            seed=args.seed,
            games=args.games,
            opponent=args.opponent,
            menace_side=args.menace_side,
            use_symmetry=args.symmetry,
            initial_count=args.initial_count,
            min_count=args.min_count,
            win=args.win,
            draw=args.draw,
            lose=args.lose,
            print_every=args.print_every,
            eval_every=args.eval_every,
            eval_games=args.eval_games,
            save_dir=args.save_dir,
            table_path=str(table_path),
        )
        menace_config = config.menace_config()
    except ValueError as e:
        parser.error(str(e))

    run_dir.mkdir(parents=True, exist_ok=True)
    with open(run_dir / "config.json", "w") as f:
        json.dump(asdict(config), f, indent=2)

    menace = load_or_create(config, table_path, args.resume, generator)
    opponent = make_opponent(config.opponent)
    print(f"Bead deltas: win {menace_config.win:+d} / draw {menace_config.draw:+d} / lose {menace_config.lose:+d}")

    # Training loop
    history = []
    last_eval = None
    t0 = time.perf_counter()

    print("\n=== Training ===")
    iterator = trange(1, config.games + 1, desc="Training")

    for game in iterator:
        menace_player = config.menace_player(game - 1)
        outcome, plies = play_game(menace, opponent, menace_player, rng,
                                   use_symmetry=config.use_symmetry)

        metrics = {"game": game, "side": "X" if menace_player == +1 else "O",
                   "plies": plies, "states": len(menace), "win": 0, "draw": 0, "loss": 0}
        metrics[OUTCOME_COLUMNS[outcome]] = 1

        if game % config.print_every == 0:
            recent = history[max(0, len(history) - config.print_every + 1):] + [metrics]
            n = len(recent)
            tqdm.write(
                f"[{game:6d}] W {sum(m['win'] for m in recent) / n:.2%} | "
                f"D {sum(m['draw'] for m in recent) / n:.2%} | "
                f"L {sum(m['loss'] for m in recent) / n:.2%} | "
                f"matchboxes {len(menace):,}"
            )

        if game % config.eval_every == 0 or game == config.games:
            last_eval = run_evaluation(menace, config, rng)
            metrics.update(last_eval)
            tqdm.write(f"  vs Random:  {last_eval['eval_w']:.2%} W / {last_eval['eval_d']:.2%} D / {last_eval['eval_l']:.2%} L")
            tqdm.write(f"  vs Minimax: {last_eval['minimax_w']:.2%} W / {last_eval['minimax_d']:.2%} D / {last_eval['minimax_l']:.2%} L")

        history.append(metrics)

    elapsed = time.perf_counter() - t0

    # Save table
    print("\n=== Saving ===")
    try:
        menace.save(table_path)
    except PersistenceError as e:
        print(e)
        sys.exit(1)
    print(f"✓ Table saved to {table_path}")

    import pandas as pd
    pd.DataFrame(history).to_csv(run_dir / "history.csv", index=False)
    print(f"✓ History saved to {run_dir / 'history.csv'}")

    print("\n=== Generating Plots ===")
    plots_dir = run_dir / "plots"
    plots_dir.mkdir(exist_ok=True)
    create_plots(history, plots_dir, window=max(1, config.print_every))
    print(f"✓ Plots saved to {plots_dir}")

    stats = table_stats(menace)
    print("\n=== Generating Report ===")
    generate_markdown_report(history, stats, last_eval, config, run_dir, elapsed)

    print("\n=== Final Results ===")
    if last_eval:
        print(f"vs Random:  {last_eval['eval_w']:.1%} W / {last_eval['eval_d']:.1%} D / {last_eval['eval_l']:.1%} L")
        print(f"vs Minimax: {last_eval['minimax_w']:.1%} W / {last_eval['minimax_d']:.1%} D / {last_eval['minimax_l']:.1%} L")
    print(f"Matchboxes: {stats['states']:,}")

    print(f"\n✅ All outputs saved to: {run_dir}")


if __name__ == "__main__":
    main()
