"""
TicTacToe game rules and state management.

Board representation: list[int] of length 9
  - 0: empty
  - +1: X
  - -1: O

Player: +1 (X) or -1 (O) - side to move
"""

from enum import Enum
from typing import List, Tuple

from .errors import IllegalMove
from .symmetries import apply_symmetry_board, apply_symmetry_cell

# Winning lines (rows, columns, diagonals)
WIN_LINES = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),              # diagonals
]


class Outcome(Enum):
    """Game status from one agent's perspective."""
    ONGOING = "ongoing"
    WON_BY_AGENT = "won_by_agent"
    WON_BY_OPPONENT = "won_by_opponent"
    DRAW = "draw"


def winners_set(board: List[int]) -> set:
    """Return set of winners (+1, -1, or both if illegal)."""
    wins = set()
    for a, b, c in WIN_LINES:
        s = board[a] + board[b] + board[c]
        if s == 3:
            wins.add(+1)
        elif s == -3:
            wins.add(-1)
    return wins


def is_terminal(board: List[int]) -> Tuple[bool, int]:
    """
    Check if board is terminal.

    Returns:
        (is_terminal, winner) where winner is +1/-1/0
    """
    wset = winners_set(board)
    if len(wset) >= 2:
        # Illegal board state (both win) - treat as draw
        return True, 0
    if len(wset) == 1:
        return True, next(iter(wset))
    if all(v != 0 for v in board):
        return True, 0
    return False, 0


def legal_moves(board: List[int]) -> List[int]:
    """Return list of legal move indices (empty squares)."""
    return [i for i, v in enumerate(board) if v == 0]


def apply_move(board: List[int], player: int, action: int) -> List[int]:
    """Apply move and return new board."""
    new_board = board[:]
    new_board[action] = player
    return new_board


def state_key(board: List[int], player: int) -> str:
    """
    Serialize board from player's perspective.

    One character per cell, row-major: '0' empty, '1' own piece,
    '2' opponent piece.
    """
    chars = []
    for v in board:
        pv = v * player  # Perspective transform
        if pv == 0:
            chars.append("0")
        elif pv == 1:
            chars.append("1")
        else:
            chars.append("2")
    return "".join(chars)


def canonical_key(board: List[int], player: int) -> Tuple[str, int]:
    """Smallest state key over the 8 symmetries, with the transform producing it."""
    best_key, best_sym = None, 0
    for k in range(8):
        key = state_key(apply_symmetry_board(board, k), player)
        if best_key is None or key < best_key:
            best_key, best_sym = key, k
    return best_key, best_sym


class TicTacToe:
    """
    Mutable game presented to the learning engine as state keys and actions.

    Actions returned by legal_actions() live in the frame of current_state();
    use to_cell() to turn one into a board cell. Without symmetry folding the
    two frames coincide.
    """

    def __init__(self, use_symmetry: bool = False):
        self.use_symmetry = use_symmetry
        self.board: List[int] = [0] * 9
        self.player = +1

    def reset(self):
        self.board = [0] * 9
        self.player = +1

    def play(self, cell: int):
        """Place the side to move's piece on cell and pass the turn."""
        if not 0 <= cell < 9 or self.board[cell] != 0:
            raise IllegalMove(f"Cell {cell} is not playable")
        if is_terminal(self.board)[0]:
            raise IllegalMove("Game is already over")
        self.board[cell] = self.player
        self.player = -self.player

    def _frame(self) -> Tuple[str, int]:
        if self.use_symmetry:
            return canonical_key(self.board, self.player)
        return state_key(self.board, self.player), 0

    def current_state(self) -> str:
        return self._frame()[0]

    def legal_actions(self) -> List[int]:
        _, sym_id = self._frame()
        return legal_moves(apply_symmetry_board(self.board, sym_id))

    def to_cell(self, action: int) -> int:
        _, sym_id = self._frame()
        return apply_symmetry_cell(action, sym_id)

    def outcome(self, agent: int) -> Outcome:
        """Game status for the agent playing as +1 or -1."""
        done, winner = is_terminal(self.board)
        if not done:
            return Outcome.ONGOING
        if winner == 0:
            return Outcome.DRAW
        if winner == agent:
            return Outcome.WON_BY_AGENT
        return Outcome.WON_BY_OPPONENT
