"""
MENACE - Machine Educable Noughts And Crosses Engine.

A matchbox-and-beads learner for TicTacToe: moves are drawn in proportion
to bead counts, and bead counts grow or shrink with every finished game.
"""

from .errors import (
    MenaceError,
    InvariantViolation,
    NoLegalActions,
    InconsistentState,
    PersistenceError,
    TableNotFound,
    MalformedTable,
    IllegalMove,
)
from .game import Outcome, TicTacToe, is_terminal, legal_moves, state_key, canonical_key
from .engine import Adjust, Bead, MenaceConfig, Menace, sample_index
from .persistence import save_table, load_table, table_to_document, document_to_table
from .minimax import minimax_value_and_moves
from .train import (
    TrainConfig,
    play_game,
    make_opponent,
    random_opponent,
    minimax_opponent,
    mixed_opponent,
)
from .eval import eval_vs_random, eval_vs_minimax, table_stats
from .play import play_session, parse_move, render_board

__version__ = "0.1.0"
__all__ = [
    "MenaceError",
    "InvariantViolation",
    "NoLegalActions",
    "InconsistentState",
    "PersistenceError",
    "TableNotFound",
    "MalformedTable",
    "IllegalMove",
    "Outcome",
    "TicTacToe",
    "is_terminal",
    "legal_moves",
    "state_key",
    "canonical_key",
    "Adjust",
    "Bead",
    "MenaceConfig",
    "Menace",
    "sample_index",
    "save_table",
    "load_table",
    "table_to_document",
    "document_to_table",
    "minimax_value_and_moves",
    "TrainConfig",
    "play_game",
    "make_opponent",
    "random_opponent",
    "minimax_opponent",
    "mixed_opponent",
    "eval_vs_random",
    "eval_vs_minimax",
    "table_stats",
    "play_session",
    "parse_move",
    "render_board",
]
