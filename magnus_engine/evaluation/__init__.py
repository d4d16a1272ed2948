"""
Evaluation Module

Position evaluators for the move ranker. Evaluators are SWAPPABLE: the
ranker works with any object implementing the base interface, so the
orchestrator can fall from the neural tier to the heuristic tier without
changing anything downstream.

Key Components:
    - Evaluator (ABC): Interface and the single sign-flip point (orient)
    - HeuristicEvaluator: Material and simple positional features
    - NeuralEvaluator: Adapter over an external inference session

Data Flow:
    Board → evaluator.evaluate(board, side) → float
                                              Positive = good for `side`
"""

from magnus_engine.evaluation.base import Evaluator, orient
from magnus_engine.evaluation.heuristic import HeuristicEvaluator
from magnus_engine.evaluation.neural import NeuralEvaluator

__all__ = ['Evaluator', 'orient', 'HeuristicEvaluator', 'NeuralEvaluator']
