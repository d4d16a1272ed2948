"""
Move Ranking

Scores every candidate move with the active evaluator and orders the list
from the mover's point of view.

Sign Convention:
    Each resulting position is evaluated with the opponent to move, so the
    evaluator answers from the opponent's perspective. orient() with the
    same side converts that answer back to White's perspective, which is
    what EvaluatedMove.score stores. Sorting then puts White's maximum or
    Black's minimum first. No other sign flip happens.
"""

import asyncio
import inspect
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

from magnus_engine.board.representation import apply_move
from magnus_engine.board.types import Board, Color, Move
from magnus_engine.evaluation.base import Evaluator, orient


@dataclass
class EvaluatedMove:
    """A candidate move and its White-perspective score."""

    move: Move
    score: float

    def score_for(self, side: Color) -> float:
        """Score as seen by ``side`` (positive = good for ``side``)."""
        return orient(self.score, side)


async def evaluate_move(
    evaluator: Evaluator,
    board: Board,
    move: Move,
    side_to_move: Color,
) -> EvaluatedMove:
    """Score one candidate move from White's perspective."""
    opponent = side_to_move.opponent
    result = evaluator.evaluate(apply_move(board, move), opponent)
    if inspect.isawaitable(result):
        result = await result
    return EvaluatedMove(move, orient(float(result), opponent))


async def rank_moves(
    evaluator: Evaluator,
    board: Board,
    legal_moves: Sequence[Move],
    side_to_move: Color,
    jitter: float = 0.0,
    rng: Optional[random.Random] = None,
    concurrent: bool = False,
) -> List[EvaluatedMove]:
    """
    Evaluate and order all candidate moves.

    Args:
        evaluator: Active evaluator tier
        board: Position before the move (not mutated)
        legal_moves: Candidates, in legal-move-source order
        side_to_move: Color making the move
        jitter: Half-width of uniform noise added to each score; 0 disables it
        rng: Random source for the jitter
        concurrent: Evaluate all candidates with asyncio.gather instead of
            one after another; scores and ordering are identical

    Returns:
        List of EvaluatedMove, best for ``side_to_move`` first. Ties keep
        the input order.
    """
    if concurrent:
        evaluated = list(await asyncio.gather(*(
            evaluate_move(evaluator, board, move, side_to_move) for move in legal_moves
        )))
    else:
        evaluated = [
            await evaluate_move(evaluator, board, move, side_to_move)
            for move in legal_moves
        ]

    if jitter:
        rng = rng or random.Random()
        for item in evaluated:
            item.score += (rng.random() * 2 - 1) * jitter

    # White wants the maximum, Black the minimum; sorted() is stable either way
    return sorted(evaluated, key=lambda item: item.score, reverse=side_to_move is Color.WHITE)
