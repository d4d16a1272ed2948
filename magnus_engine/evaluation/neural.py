"""
Neural network-based position evaluator.

Wraps an external inference session. The session takes the encoded board
under the ``"input"`` key and returns a raw score under ``"output"``; this
adapter scales it to pawns and orients it to the side to move.
"""

import inspect
import logging

import numpy as np

from magnus_engine.board.representation import encode_board
from magnus_engine.board.types import Board, Color
from magnus_engine.evaluation.base import Evaluator, orient

logger = logging.getLogger(__name__)

INPUT_NAME = "input"
OUTPUT_NAME = "output"

# Raw network output is roughly in [-1, 1]
DEFAULT_SCORE_MULTIPLIER = 100.0


class NeuralEvaluator(Evaluator):
    """Neural network position evaluator.

    evaluate() never raises: any failure while encoding, running the
    session or decoding its output yields a neutral 0.0 and is counted in
    ``failures``. A 0.0 therefore does not always mean a balanced position.
    """

    def __init__(self, session, score_multiplier: float = DEFAULT_SCORE_MULTIPLIER):
        """Initialize neural evaluator.

        Args:
            session: Object with ``run(feeds) -> outputs`` (sync or async)
            score_multiplier: Scale applied to the raw network output
        """
        self.session = session
        self.score_multiplier = score_multiplier
        self.calls = 0
        self.failures = 0

    async def score_white(self, board: Board) -> float:
        """Run the session and return the scaled White-perspective score.

        Raises:
            Whatever the session raises, or KeyError/ValueError/IndexError
            on malformed output
        """
        feeds = {INPUT_NAME: encode_board(board)}

        results = self.session.run(feeds)
        if inspect.isawaitable(results):
            results = await results

        output = np.asarray(results[OUTPUT_NAME], dtype=np.float32).reshape(-1)
        raw = float(output[0])
        if not np.isfinite(raw):
            raise ValueError(f"Non-finite network output: {raw}")

        return raw * self.score_multiplier

    async def evaluate(self, board: Board, side_to_move: Color) -> float:
        """Evaluate position using the session.

        Args:
            board: Position to evaluate
            side_to_move: Color about to play

        Returns:
            Score from ``side_to_move``'s perspective, 0.0 on failure
        """
        self.calls += 1
        try:
            score = await self.score_white(board)
        except Exception as e:
            self.failures += 1
            logger.warning(f"Neural network evaluation error: {e}")
            return 0.0

        return orient(score, side_to_move)

    @property
    def all_failed(self) -> bool:
        """True when every evaluation so far fell back to the neutral score."""
        return self.calls > 0 and self.failures == self.calls

    def __repr__(self) -> str:
        return f"NeuralEvaluator(multiplier={self.score_multiplier})"
