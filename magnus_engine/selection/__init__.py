"""
Selection Module

Turns evaluator scores into a single move.

Key Components:
    - rank_moves: Single-ply scoring of every candidate, best first
    - SelectionPolicy: Difficulty-dependent randomized pick from the ranking

No search tree is built: each candidate is scored by evaluating the
position immediately after it.
"""

from magnus_engine.selection.policy import SelectionPolicy
from magnus_engine.selection.ranking import EvaluatedMove, rank_moves

__all__ = ['EvaluatedMove', 'rank_moves', 'SelectionPolicy']
