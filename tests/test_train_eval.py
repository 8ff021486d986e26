"""
Tests for training games, scripted opponents and greedy evaluation.
"""

import numpy as np
import pytest
import torch

from menace import (
    Menace,
    MenaceConfig,
    Outcome,
    TrainConfig,
    eval_vs_minimax,
    eval_vs_random,
    make_opponent,
    minimax_opponent,
    play_game,
    random_opponent,
    table_stats,
)
from menace.game import legal_moves


def make_menace(seed=0):
    return Menace(MenaceConfig(), generator=torch.Generator().manual_seed(seed))


class TestTrainConfig:
    def test_menace_player(self):
        config = TrainConfig(menace_side="alternate")
        assert [config.menace_player(i) for i in range(4)] == [1, -1, 1, -1]
        assert TrainConfig(menace_side="x").menace_player(1) == 1
        assert TrainConfig(menace_side="o").menace_player(0) == -1
        with pytest.raises(ValueError):
            TrainConfig(menace_side="both")

    @pytest.mark.parametrize("field", ["games", "print_every", "eval_every", "eval_games"])
    def test_rejects_non_positive_counts(self, field):
        with pytest.raises(ValueError, match=field):
            TrainConfig(**{field: 0})
        with pytest.raises(ValueError, match=field):
            TrainConfig(**{field: -5})

    def test_rejects_unknown_opponent(self):
        with pytest.raises(ValueError):
            TrainConfig(opponent="perfect")

    def test_menace_config(self):
        config = TrainConfig(initial_count=4, min_count=1, win=2, draw=0, lose=-2)
        mc = config.menace_config()
        assert (mc.initial_count, mc.min_count, mc.win, mc.draw, mc.lose) == (4, 1, 2, 0, -2)


class TestOpponents:
    def test_random_plays_legal(self):
        rng = np.random.default_rng(0)
        board = [1, -1, 0, 0, 1, 0, -1, 0, 0]
        for _ in range(50):
            assert random_opponent(board, 1, rng) in legal_moves(board)

    def test_minimax_blocks(self):
        rng = np.random.default_rng(0)
        board = [1, 1, 0, 0, -1, 0, 0, 0, 0]
        assert minimax_opponent(board, -1, rng) == 2

    def test_make_opponent(self):
        assert make_opponent("random") is random_opponent
        with pytest.raises(ValueError):
            make_opponent("alphazero")


class TestPlayGame:
    @pytest.mark.parametrize("menace_player", [1, -1])
    @pytest.mark.parametrize("use_symmetry", [False, True])
    def test_single_game_teaches_once(self, menace_player, use_symmetry):
        menace = make_menace()
        rng = np.random.default_rng(1)
        outcome, plies = play_game(menace, random_opponent, menace_player, rng, use_symmetry)

        assert outcome != Outcome.ONGOING
        assert 5 <= plies <= 9
        assert menace.record == []
        assert len(menace) >= 2

        # The first matchbox visited changed by exactly one delta
        delta = menace.config.delta_for(outcome)
        counts = [c for beads in menace.snapshot().values() for _, c in beads]
        assert any(c == max(2 + delta, 0) for c in counts)

    def test_never_loses_more_beads_than_floor(self):
        menace = Menace(MenaceConfig(min_count=1), generator=torch.Generator().manual_seed(2))
        rng = np.random.default_rng(2)
        for g in range(200):
            play_game(menace, minimax_opponent, 1 if g % 2 == 0 else -1, rng)
        assert table_stats(menace)["starved_states"] == 0
        counts = [c for beads in menace.snapshot().values() for _, c in beads]
        assert min(counts) >= 1

    def test_learning_beats_random(self):
        rng = np.random.default_rng(3)
        untrained = eval_vs_random(make_menace(), games=400, rng=np.random.default_rng(4))

        menace = make_menace(seed=3)
        for g in range(4000):
            play_game(menace, random_opponent, 1 if g % 2 == 0 else -1, rng)
        trained = eval_vs_random(menace, games=400, rng=np.random.default_rng(4))

        assert trained[0] > untrained[0] + 0.1
        assert trained[2] < untrained[2]


class TestEvaluation:
    def test_does_not_touch_table(self):
        menace = make_menace()
        rng = np.random.default_rng(5)
        for g in range(50):
            play_game(menace, random_opponent, 1 if g % 2 == 0 else -1, rng)
        before = menace.snapshot()

        w, d, l = eval_vs_random(menace, games=50, rng=rng)
        mm = eval_vs_minimax(menace, games=20, rng=rng)

        assert menace.snapshot() == before
        assert menace.record == []
        assert w + d + l == pytest.approx(1.0)
        assert mm["games"] == 20
        assert mm["menace_w"] == 0.0

    def test_zero_games_rejected(self):
        menace = make_menace()
        rng = np.random.default_rng(6)
        with pytest.raises(ValueError, match="games"):
            eval_vs_random(menace, games=0, rng=rng)
        with pytest.raises(ValueError, match="games"):
            eval_vs_minimax(menace, games=0, rng=rng)
        assert len(menace) == 0

    def test_table_stats(self):
        menace = make_menace()
        menace.ensure_state("a", [0, 1])
        menace.ensure_state("b", [2])
        menace.matchboxes["b"][0].count = 0
        menace.matchboxes["a"][1].count = 6

        stats = table_stats(menace)
        assert stats["states"] == 2
        assert stats["actions"] == 3
        assert stats["beads"] == 8
        assert stats["starved_states"] == 1
        assert stats["max_count"] == 6
        assert stats["mean_count"] == pytest.approx(8 / 3)

    def test_table_stats_empty(self):
        stats = table_stats(make_menace())
        assert stats["states"] == 0
        assert stats["beads"] == 0
        assert stats["mean_count"] == 0.0
