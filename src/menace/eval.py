"""
Evaluation functions.

MENACE plays greedily (most beads wins) against random and minimax
opponents. Evaluation only reads the table: nothing is created, recorded
or adjusted.
"""

from typing import Dict, Tuple

import numpy as np

from .engine import Menace
from .game import Outcome, TicTacToe
from .train import Opponent, minimax_opponent, random_opponent


def _greedy_move(menace: Menace, game: TicTacToe, rng: np.random.Generator) -> int:
    actions = game.legal_actions()
    action = menace.best_action(game.current_state(), actions)
    if action is None:
        # Unseen position: no beads to go by
        action = int(rng.choice(actions))
    return game.to_cell(action)


def _eval_games(
    menace: Menace,
    opponent: Opponent,
    games: int,
    rng: np.random.Generator,
    use_symmetry: bool,
) -> Tuple[float, float, float]:
    if games < 1:
        raise ValueError(f"games must be at least 1, got {games}")
    wins = draws = losses = 0

    for g in range(games):
        game = TicTacToe(use_symmetry=use_symmetry)
        menace_side = +1 if (g % 2 == 0) else -1

        while True:
            outcome = game.outcome(menace_side)
            if outcome == Outcome.WON_BY_AGENT:
                wins += 1
                break
            if outcome == Outcome.WON_BY_OPPONENT:
                losses += 1
                break
            if outcome == Outcome.DRAW:
                draws += 1
                break

            if game.player == menace_side:
                cell = _greedy_move(menace, game, rng)
            else:
                cell = opponent(game.board, game.player, rng)
            game.play(cell)

    total = wins + draws + losses
    return wins / total, draws / total, losses / total


def eval_vs_random(
    menace: Menace,
    games: int = 500,
    rng: np.random.Generator = None,
    use_symmetry: bool = False,
) -> Tuple[float, float, float]:
    """
    Evaluate MENACE vs random opponent.

    Returns:
        (win_rate, draw_rate, loss_rate)
    """
    rng = rng if rng is not None else np.random.default_rng()
    return _eval_games(menace, random_opponent, games, rng, use_symmetry)


def eval_vs_minimax(
    menace: Menace,
    games: int = 500,
    rng: np.random.Generator = None,
    use_symmetry: bool = False,
) -> Dict[str, float]:
    """
    Evaluate MENACE vs perfect play.

    Returns:
        Dict with 'games', 'menace_w', 'menace_d', 'menace_l'
    """
    rng = rng if rng is not None else np.random.default_rng()
    w, d, l = _eval_games(menace, minimax_opponent, games, rng, use_symmetry)
    return {
        "games": games,
        "menace_w": w,
        "menace_d": d,
        "menace_l": l,
    }


def table_stats(menace: Menace) -> Dict[str, float]:
    """Summary of the matchbox table."""
    counts = np.array([b.count for beads in menace.matchboxes.values() for b in beads], dtype=np.int64)
    starved = sum(
        1 for beads in menace.matchboxes.values()
        if beads and all(b.count == 0 for b in beads)
    )
    return {
        "states": len(menace),
        "actions": int(counts.size),
        "beads": int(counts.sum()) if counts.size else 0,
        "starved_states": starved,
        "mean_count": float(counts.mean()) if counts.size else 0.0,
        "max_count": int(counts.max()) if counts.size else 0,
    }
