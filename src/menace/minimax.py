"""
Perfect-play solver behind the "minimax" and "mixed" opponents.

MENACE never consults it; it only decides what a flawless opponent would do.
Positions are solved once and memoised for the life of the process.
"""

from functools import lru_cache
from typing import List, Tuple

from .game import apply_move, is_terminal, legal_moves


def _final_score(winner: int, player: int) -> int:
    if winner == 0:
        return 0
    return 1 if winner == player else -1


@lru_cache(maxsize=None)
def _solve(board: Tuple[int, ...], player: int) -> Tuple[int, Tuple[int, ...]]:
    done, winner = is_terminal(list(board))
    if done:
        return _final_score(winner, player), ()

    scored = []
    for cell in legal_moves(list(board)):
        reply_score, _ = _solve(tuple(apply_move(list(board), player, cell)), -player)
        scored.append((-reply_score, cell))

    top = max(score for score, _ in scored)
    return top, tuple(cell for score, cell in scored if score == top)


def minimax_value_and_moves(board: List[int], player: int) -> Tuple[int, List[int]]:
    """
    Game-theoretic value of board for the side to move, and every cell that keeps it.

    The value is +1 for a forced win, 0 for a draw and -1 for a forced loss.
    A finished board has no moves.
    """
    value, cells = _solve(tuple(board), player)
    return value, list(cells)


def clear_cache():
    _solve.cache_clear()


def cache_size() -> int:
    """Number of solved positions held in memory."""
    return _solve.cache_info().currsize
