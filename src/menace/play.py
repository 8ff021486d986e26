"""
Interactive human vs MENACE session.

The human moves first as X, MENACE answers as O. Every finished game is fed
back into the table, so MENACE keeps learning while you play.
"""

import logging
from typing import Callable, Dict, List, Optional

from .engine import Menace
from .game import Outcome, TicTacToe

logger = logging.getLogger(__name__)

QUIT_COMMANDS = {"q", "quit", "exit"}


def render_board(board: List[int]) -> str:
    """Pretty print board."""
    symbols = {0: " ", 1: "X", -1: "O"}
    rows = []
    for r in range(3):
        rows.append(" " + " | ".join(symbols[board[r * 3 + c]] for c in range(3)))
    return "\n-----------\n".join(rows)


def parse_move(text: str) -> Optional[int]:
    """
    Parse "row,col" (0-based) or a single cell index 0-8.

    Returns the cell index, or None if the text is not a move on the board.
    """
    parts = text.split(",")
    try:
        if len(parts) == 2:
            row, col = int(parts[0].strip()), int(parts[1].strip())
            if 0 <= row < 3 and 0 <= col < 3:
                return row * 3 + col
            return None
        if len(parts) == 1:
            cell = int(parts[0].strip())
            return cell if 0 <= cell < 9 else None
    except ValueError:
        return None
    return None


def prompt_continue(input_fn: Callable[[str], str]) -> bool:
    """True if the player answered "y" or "yes"."""
    return input_fn("Play again? (Y/N): ").strip().lower() in ("y", "yes")


def get_player_move(
    game: TicTacToe,
    input_fn: Callable[[str], str],
    output_fn: Callable[[str], None],
) -> Optional[int]:
    """Prompt until a free cell is entered. None means the player quit."""
    while True:
        text = input_fn("Your move (row,col): ").strip()
        if text.lower() in QUIT_COMMANDS:
            return None

        cell = parse_move(text)
        if cell is None:
            output_fn("Invalid input")
        elif game.board[cell] != 0:
            output_fn("That cell is taken")
        else:
            return cell


def play_session(
    menace: Menace,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
    use_symmetry: bool = False,
) -> Dict[str, int]:
    """
    Run games until the player declines to continue or quits.

    A game abandoned with a quit command teaches MENACE nothing.

    Returns:
        Tally with 'menace', 'human' and 'draw' keys
    """
    tally = {"menace": 0, "human": 0, "draw": 0}
    menace_player = -1
    game = TicTacToe(use_symmetry=use_symmetry)

    output_fn("\n" + render_board(game.board) + "\n")

    while True:
        outcome = game.outcome(menace_player)
        if outcome != Outcome.ONGOING:
            menace.reward(outcome)
            if outcome == Outcome.WON_BY_AGENT:
                tally["menace"] += 1
                output_fn("\nMENACE wins!\n")
            elif outcome == Outcome.WON_BY_OPPONENT:
                tally["human"] += 1
                output_fn("\nPlayer wins!\n")
            else:
                tally["draw"] += 1
                output_fn("\nDraw!\n")

            if not prompt_continue(input_fn):
                break
            game.reset()
            output_fn("\n" + render_board(game.board) + "\n")
            continue

        if game.player == menace_player:
            action = menace.choose(game.current_state(), game.legal_actions())
            cell = game.to_cell(action)
            output_fn(f"MENACE plays {cell // 3},{cell % 3}")
        else:
            cell = get_player_move(game, input_fn, output_fn)
            if cell is None:
                menace.discard_episode()
                break

        game.play(cell)
        output_fn("\n" + render_board(game.board) + "\n")

    logger.info("Session over: %s", tally)
    return tally
