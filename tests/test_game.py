"""
Tests for the TicTacToe rules, state keys and symmetry folding.
"""

import pytest

from menace import IllegalMove, Outcome, TicTacToe, canonical_key, is_terminal, legal_moves, state_key
from menace.minimax import cache_size, clear_cache, minimax_value_and_moves
from menace.symmetries import apply_symmetry_board, get_all_symmetries


class TestRules:
    def test_terminal(self):
        assert is_terminal([0] * 9) == (False, 0)
        assert is_terminal([1, 1, 1, -1, -1, 0, 0, 0, 0]) == (True, 1)
        assert is_terminal([1, -1, 1, 1, -1, -1, -1, 1, 1]) == (True, 0)

    def test_legal_moves(self):
        assert legal_moves([1, 0, -1, 0, 0, 0, 0, 0, 1]) == [1, 3, 4, 5, 6, 7]

    def test_state_key_perspective(self):
        board = [1, 0, 0, 0, -1, 0, 0, 0, 0]
        assert state_key(board, +1) == "100020000"
        assert state_key(board, -1) == "200010000"


class TestTicTacToe:
    def test_play_alternates(self):
        game = TicTacToe()
        game.play(4)
        assert game.board[4] == 1
        assert game.player == -1
        assert game.current_state() == "000020000"
        assert game.legal_actions() == [0, 1, 2, 3, 5, 6, 7, 8]

    def test_illegal_moves(self):
        game = TicTacToe()
        game.play(0)
        with pytest.raises(IllegalMove):
            game.play(0)
        with pytest.raises(IllegalMove):
            game.play(9)

    def test_no_moves_after_game_over(self):
        game = TicTacToe()
        for cell in (0, 3, 1, 4, 2):
            game.play(cell)
        with pytest.raises(IllegalMove):
            game.play(8)

    def test_outcome(self):
        game = TicTacToe()
        assert game.outcome(+1) == Outcome.ONGOING
        for cell in (0, 3, 1, 4, 2):
            game.play(cell)
        assert game.outcome(+1) == Outcome.WON_BY_AGENT
        assert game.outcome(-1) == Outcome.WON_BY_OPPONENT

    def test_draw(self):
        game = TicTacToe()
        for cell in (0, 1, 2, 4, 3, 5, 7, 6, 8):
            game.play(cell)
        assert game.outcome(+1) == Outcome.DRAW
        assert game.legal_actions() == []

    def test_reset(self):
        game = TicTacToe()
        game.play(0)
        game.reset()
        assert game.board == [0] * 9
        assert game.player == +1


class TestSymmetry:
    def test_symmetric_boards_share_key(self):
        board = [1, 0, 0, 0, 0, 0, 0, -1, 0]
        keys = {canonical_key(b, -1)[0] for b in get_all_symmetries(board)}
        assert len(keys) == 1

    def test_corner_openings_fold(self):
        keys = set()
        for corner in (0, 2, 6, 8):
            game = TicTacToe(use_symmetry=True)
            game.play(corner)
            keys.add(game.current_state())
        assert len(keys) == 1

    def test_actions_map_to_free_cells(self):
        game = TicTacToe(use_symmetry=True)
        for cell in (2, 4, 7):
            game.play(cell)
        key, sym_id = canonical_key(game.board, game.player)
        assert game.current_state() == key
        assert state_key(apply_symmetry_board(game.board, sym_id), game.player) == key

        cells = sorted(game.to_cell(a) for a in game.legal_actions())
        assert cells == legal_moves(game.board)

    def test_without_symmetry_frames_coincide(self):
        game = TicTacToe()
        game.play(2)
        assert [game.to_cell(a) for a in game.legal_actions()] == game.legal_actions()


class TestMinimax:
    def test_empty_board_is_draw(self):
        value, moves = minimax_value_and_moves([0] * 9, +1)
        assert value == 0
        assert len(moves) == 9

    def test_finds_winning_move(self):
        board = [1, 1, 0, -1, -1, 0, 0, 0, 0]
        value, moves = minimax_value_and_moves(board, +1)
        assert value == 1
        assert moves == [2]

    def test_cache(self):
        clear_cache()
        minimax_value_and_moves([1, 0, 0, 0, -1, 0, 0, 0, 0], +1)
        assert cache_size() > 0
        clear_cache()
        assert cache_size() == 0
