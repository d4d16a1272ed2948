"""
Abstract Evaluator Interface

This module defines the abstract base class for all position evaluators.

Key Principles:
    1. Evaluators are stateless apart from diagnostics
    2. score_white() returns a score from White's perspective
    3. evaluate() orients that score to the side passed in, through orient()
    4. Nothing downstream of an evaluator flips signs except by calling orient()

Convention:
    - Scores are in pawns (pawn = 1.0, queen = 9.0)
    - Return 0 for balanced positions
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Union

from magnus_engine.board.types import Board, Color

Score = Union[float, Awaitable[float]]


class EvaluatorUnavailable(RuntimeError):
    """Raised when an evaluator tier cannot be used for this request."""


def orient(score: float, side: Color) -> float:
    """
    Convert between White's perspective and ``side``'s perspective.

    The conversion is its own inverse: orient(orient(s, side), side) == s.
    """
    return score if side is Color.WHITE else -score


class Evaluator(ABC):
    """
    Abstract base class for position evaluation.

    Subclasses implement evaluate(). It may be a coroutine; the ranker
    awaits the result when needed.
    """

    @abstractmethod
    def evaluate(self, board: Board, side_to_move: Color) -> Score:
        """
        Evaluate a position from ``side_to_move``'s perspective.

        Args:
            board: 8x8 grid to evaluate
            side_to_move: Color about to play

        Returns:
            Score (or awaitable score); positive favours ``side_to_move``
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
