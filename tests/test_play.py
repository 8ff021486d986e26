"""
Tests for the interactive session: move parsing and scripted games.
"""

import itertools

import pytest
import torch

from menace import Menace, parse_move, play_session, render_board


def scripted_input(moves, answers):
    """input() stand-in: cycles through moves, answers the replay prompt in order."""
    moves = iter(moves)
    answers = iter(answers)
    prompts = []

    def input_fn(prompt):
        prompts.append(prompt)
        if prompt.startswith("Play again"):
            return next(answers)
        return next(moves)

    input_fn.prompts = prompts
    return input_fn


class TestParseMove:
    @pytest.mark.parametrize("text,cell", [
        ("0,0", 0),
        ("1,2", 5),
        (" 2 , 2 ", 8),
        ("4", 4),
        ("0", 0),
    ])
    def test_valid(self, text, cell):
        assert parse_move(text) == cell

    @pytest.mark.parametrize("text", ["", "a,b", "3,0", "0,-1", "9", "-1", "1,2,3", "x"])
    def test_invalid(self, text):
        assert parse_move(text) is None


def test_render_board():
    text = render_board([1, 0, -1, 0, 0, 0, 0, 0, 0])
    assert text.splitlines()[0] == " X |   | O"
    assert text.count("-----------") == 2


class TestPlaySession:
    def test_quit_before_menace_moves(self):
        menace = Menace(generator=torch.Generator().manual_seed(0))
        out = []
        tally = play_session(menace, scripted_input(["q"], []), out.append)
        assert tally == {"menace": 0, "human": 0, "draw": 0}
        assert len(menace) == 0

    def test_quit_mid_game_discards_episode(self):
        menace = Menace(generator=torch.Generator().manual_seed(0))
        play_session(menace, scripted_input(["4", "quit"], []), lambda s: None)
        assert menace.record == []
        assert len(menace) == 1
        beads = next(iter(menace.snapshot().values()))
        assert all(c == 2 for _, c in beads)

    def test_full_games_are_learned(self):
        menace = Menace(generator=torch.Generator().manual_seed(1))
        cells = itertools.cycle([str(i) for i in range(9)])
        input_fn = scripted_input(cells, ["y", "n"])
        out = []

        tally = play_session(menace, input_fn, out.append)

        assert sum(tally.values()) == 2
        assert menace.record == []
        assert len(menace) > 0
        assert sum(1 for p in input_fn.prompts if p.startswith("Play again")) == 2
        counts = [c for beads in menace.snapshot().values() for _, c in beads]
        assert any(c != 2 for c in counts)

    def test_invalid_input_reprompts(self):
        menace = Menace(generator=torch.Generator().manual_seed(2))
        out = []
        play_session(menace, scripted_input(["nonsense", "q"], []), out.append)
        assert "Invalid input" in out
