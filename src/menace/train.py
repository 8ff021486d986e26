"""
Training utilities: configuration, scripted opponents, one learning game.
"""

from dataclasses import dataclass
from typing import Callable, List, Tuple

import numpy as np

from .engine import Menace, MenaceConfig
from .game import Outcome, TicTacToe, legal_moves
from .minimax import minimax_value_and_moves

Opponent = Callable[[List[int], int, np.random.Generator], int]


@dataclass
class TrainConfig:
    """Training configuration."""

    # Random seed
    seed: int = 0

    # Number of training games
    games: int = 20_000

    # Opponent: "random", "minimax" or "mixed"
    opponent: str = "random"

    # Side MENACE plays: "x", "o" or "alternate"
    menace_side: str = "alternate"

    # Fold symmetric positions into one matchbox
    use_symmetry: bool = False

    # Engine hyperparameters
    initial_count: int = 2
    min_count: int = 0
    win: int = 3
    draw: int = 1
    lose: int = -1

    # Logging
    print_every: int = 1000
    eval_every: int = 2000
    eval_games: int = 500

    # Paths
    save_dir: str = "runs"
    table_path: str = "menace.json"

    def __post_init__(self):
        for name in ("games", "print_every", "eval_every", "eval_games"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")
        if self.menace_side not in ("x", "o", "alternate"):
            raise ValueError(f"Unknown menace_side: {self.menace_side!r}")
        if self.opponent not in OPPONENTS:
            raise ValueError(f"Unknown opponent: {self.opponent!r}")

    def menace_config(self) -> MenaceConfig:
        return MenaceConfig(
            initial_count=self.initial_count,
            min_count=self.min_count,
            win=self.win,
            draw=self.draw,
            lose=self.lose,
        )

    def menace_player(self, game_index: int) -> int:
        """Side (+1 X, -1 O) MENACE takes in the given game."""
        if self.menace_side == "x":
            return +1
        if self.menace_side == "o":
            return -1
        if self.menace_side == "alternate":
            return +1 if game_index % 2 == 0 else -1
        raise ValueError(f"Unknown menace_side: {self.menace_side!r}")


def random_opponent(board: List[int], player: int, rng: np.random.Generator) -> int:
    """Uniformly random legal move."""
    return int(rng.choice(legal_moves(board)))


def minimax_opponent(board: List[int], player: int, rng: np.random.Generator) -> int:
    """Perfect play, sampling uniformly among optimal moves."""
    _, best_moves = minimax_value_and_moves(board, player)
    return int(rng.choice(best_moves))


def mixed_opponent(board: List[int], player: int, rng: np.random.Generator) -> int:
    """Random or perfect play, decided per move with equal odds."""
    if rng.random() < 0.5:
        return random_opponent(board, player, rng)
    return minimax_opponent(board, player, rng)


OPPONENTS = {
    "random": random_opponent,
    "minimax": minimax_opponent,
    "mixed": mixed_opponent,
}


def make_opponent(name: str) -> Opponent:
    try:
        return OPPONENTS[name]
    except KeyError:
        raise ValueError(f"Unknown opponent {name!r}; choose from {sorted(OPPONENTS)}") from None


def play_game(
    menace: Menace,
    opponent: Opponent,
    menace_player: int,
    rng: np.random.Generator,
    use_symmetry: bool = False,
) -> Tuple[Outcome, int]:
    """
    Play one full game and teach MENACE the result.

    MENACE draws its moves from its matchboxes; the opponent moves on the raw
    board. The engine is rewarded exactly once, when the game ends.

    Returns:
        (outcome from MENACE's perspective, number of moves played)
    """
    game = TicTacToe(use_symmetry=use_symmetry)
    plies = 0

    while True:
        outcome = game.outcome(menace_player)
        if outcome != Outcome.ONGOING:
            break

        if game.player == menace_player:
            action = menace.choose(game.current_state(), game.legal_actions())
            cell = game.to_cell(action)
        else:
            cell = opponent(game.board, game.player, rng)

        game.play(cell)
        plies += 1

    menace.reward(outcome)
    return outcome, plies
