"""
Unit Tests for Ranking and the Selection Policy

Tests for:
    - Perspective-correct ordering for both colors
    - Stable ordering of equal scores
    - Pool sizing and weighted sampling of the low-level policy
    - Top-choice behaviour of the high-level policy
"""

import itertools
import random

import chess
import pytest

from magnus_engine.board.conversion import board_from_chess, legal_moves, move_from_chess
from magnus_engine.board.types import Color, Coord, Move, empty_board
from magnus_engine.evaluation import Evaluator, HeuristicEvaluator
from magnus_engine.selection import EvaluatedMove, SelectionPolicy, rank_moves
from magnus_engine.selection.policy import pool_size

QUEEN_HANGS = "4k3/8/8/3q4/4P3/8/8/4K3 {} - - 0 1"


class StubRandom:
    """Random source replaying fixed values."""

    def __init__(self, *values):
        self._values = itertools.cycle(values)

    def random(self):
        return next(self._values)


class ConstantEvaluator(Evaluator):

    def __init__(self):
        self.seen = []

    def evaluate(self, board, side_to_move):
        self.seen.append(side_to_move)
        return 0.0


def ranked_list(count):
    return [
        EvaluatedMove(Move(Coord(6, col), Coord(5, col)), float(count - col))
        for col in range(count)
    ]


class TestRankMoves:
    """Tests for rank_moves()."""

    @pytest.mark.asyncio
    async def test_white_prefers_winning_the_queen(self):
        board = board_from_chess(chess.Board(QUEEN_HANGS.format("w")))
        moves = legal_moves(board, Color.WHITE)

        ranked = await rank_moves(HeuristicEvaluator(), board, moves, Color.WHITE)

        assert ranked[0].move == move_from_chess(chess.Move.from_uci("e4d5"))
        assert ranked[0].score == pytest.approx(1.3)
        assert [r.score for r in ranked] == sorted((r.score for r in ranked), reverse=True)

    @pytest.mark.asyncio
    async def test_black_prefers_winning_the_pawn(self):
        board = board_from_chess(chess.Board(QUEEN_HANGS.format("b")))
        moves = legal_moves(board, Color.BLACK)

        ranked = await rank_moves(HeuristicEvaluator(), board, moves, Color.BLACK)

        assert ranked[0].move == move_from_chess(chess.Move.from_uci("d5e4"))
        # Stored score is White's perspective; Black sees it negated
        assert ranked[0].score == pytest.approx(-9.3)
        assert ranked[0].score_for(Color.BLACK) == pytest.approx(9.3)
        assert [r.score for r in ranked] == sorted(r.score for r in ranked)

    @pytest.mark.asyncio
    async def test_evaluates_with_opponent_to_move(self):
        evaluator = ConstantEvaluator()
        moves = [Move(Coord(6, 0), Coord(5, 0)), Move(Coord(6, 1), Coord(5, 1))]

        await rank_moves(evaluator, empty_board(), moves, Color.WHITE)

        assert evaluator.seen == [Color.BLACK, Color.BLACK]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("side", [Color.WHITE, Color.BLACK])
    async def test_ties_keep_input_order(self, side):
        moves = [Move(Coord(6, col), Coord(5, col)) for col in range(8)]

        ranked = await rank_moves(ConstantEvaluator(), empty_board(), moves, side)

        assert [r.move for r in ranked] == moves

    @pytest.mark.asyncio
    async def test_concurrent_matches_sequential(self):
        board = board_from_chess(chess.Board())
        moves = legal_moves(board, Color.WHITE)

        sequential = await rank_moves(HeuristicEvaluator(), board, moves, Color.WHITE)
        concurrent = await rank_moves(HeuristicEvaluator(), board, moves, Color.WHITE, concurrent=True)

        assert concurrent == sequential

    @pytest.mark.asyncio
    async def test_jitter_is_reproducible_with_seed(self):
        board = board_from_chess(chess.Board())
        moves = legal_moves(board, Color.WHITE)

        first = await rank_moves(HeuristicEvaluator(), board, moves, Color.WHITE,
                                 jitter=1.0, rng=random.Random(7))
        second = await rank_moves(HeuristicEvaluator(), board, moves, Color.WHITE,
                                  jitter=1.0, rng=random.Random(7))
        plain = await rank_moves(HeuristicEvaluator(), board, moves, Color.WHITE)

        assert first == second
        assert [r.score for r in first] != [r.score for r in plain]
        assert all(-1.0 <= a.score - b.score <= 1.0
                   for a in first for b in plain if a.move == b.move)

    @pytest.mark.asyncio
    async def test_does_not_mutate_board(self):
        board = board_from_chess(chess.Board())
        snapshot = [list(row) for row in board]

        await rank_moves(HeuristicEvaluator(), board, legal_moves(board, Color.WHITE), Color.WHITE)

        assert board == snapshot


class TestPoolSize:

    @pytest.mark.parametrize("level, expected", [(0, 7), (2, 6), (5, 4), (9, 2), (10, 2)])
    def test_pool_shrinks_with_level(self, level, expected):
        assert pool_size(level, 20) == expected

    def test_clamped_to_available(self):
        assert pool_size(0, 3) == 3
        assert pool_size(10, 1) == 1


class TestSelectionPolicy:
    """Tests for SelectionPolicy."""

    def test_empty_list_is_rejected(self):
        with pytest.raises(ValueError):
            SelectionPolicy().select([], 5)

    @pytest.mark.parametrize("level", range(11))
    def test_single_move_always_returned(self, level):
        ranked = ranked_list(1)

        assert SelectionPolicy(rng=StubRandom(0.99)).select(ranked, level) is ranked[0].move

    def test_high_level_takes_top_move(self):
        ranked = ranked_list(5)

        assert SelectionPolicy(rng=StubRandom(0.5)).select(ranked, 10) is ranked[0].move

    def test_high_level_sometimes_takes_second_move(self):
        ranked = ranked_list(5)

        assert SelectionPolicy(rng=StubRandom(0.95)).select(ranked, 10) is ranked[1].move

    def test_threshold_boundary(self):
        """Level 8 uses the top-choice policy, level 7 samples the pool."""
        ranked = ranked_list(5)

        assert SelectionPolicy(rng=StubRandom(0.95)).select(ranked, 8) is ranked[1].move
        # Level 7: pool of 3, 0.95 * 2.19 lands on the last pool entry
        assert SelectionPolicy(rng=StubRandom(0.95)).select(ranked, 7) is ranked[2].move

    @pytest.mark.parametrize("draw, expected_index", [(0.0, 0), (0.3, 0), (0.5, 1), (0.99, 3)])
    def test_weighted_walk(self, draw, expected_index):
        """Level 5: pool of 4 with weights 1, 0.7, 0.49, 0.343."""
        ranked = ranked_list(10)

        move = SelectionPolicy(rng=StubRandom(draw)).select(ranked, 5)

        assert move is ranked[expected_index].move

    def test_low_level_never_leaves_pool(self):
        ranked = ranked_list(20)
        policy = SelectionPolicy(rng=random.Random(1234))
        pool = {r.move for r in ranked[:pool_size(0, 20)]}

        picks = [policy.select(ranked, 0) for _ in range(500)]

        assert set(picks) <= pool
        assert len(set(picks)) > 1

    def test_weights_favour_better_moves(self):
        ranked = ranked_list(20)
        policy = SelectionPolicy(rng=random.Random(99))

        picks = [policy.select(ranked, 3) for _ in range(2000)]

        assert picks.count(ranked[0].move) > picks.count(ranked[3].move)

    def test_seeded_policy_is_deterministic(self):
        ranked = ranked_list(10)

        first = [SelectionPolicy(rng=random.Random(5)).select(ranked, 4) for _ in range(3)]
        second = [SelectionPolicy(rng=random.Random(5)).select(ranked, 4) for _ in range(3)]

        assert first == second
