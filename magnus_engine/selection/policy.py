"""
Difficulty-Dependent Move Selection

Picks one move from a ranked list. The level (0-10) controls how greedy
the pick is:

    - level >= high_level_threshold: the best move with probability 0.9,
      otherwise the second best
    - lower levels: weighted sampling over the top-K pool, where
      K = clamp(floor(2 + (10 - level) / 10 * 5), 1, len) and the i-th
      move weighs weight_decay ** i

The random source is injected, so a seeded random.Random (or any object
with a ``random()`` method) makes the choice reproducible.
"""

import math
import random
from typing import List, Optional, Sequence

from magnus_engine.board.types import Move
from magnus_engine.selection.ranking import EvaluatedMove

MAX_LEVEL = 10
HIGH_LEVEL_THRESHOLD = 8
TOP_CHOICE_PROBABILITY = 0.9
WEIGHT_DECAY = 0.7


def pool_size(ai_level: int, available: int) -> int:
    """Number of top-ranked moves the low-level policy samples from."""
    randomness_factor = (MAX_LEVEL - ai_level) / MAX_LEVEL
    return min(available, max(1, math.floor(2 + randomness_factor * 5)))


class SelectionPolicy:
    """
    Randomized move picker.

    Attributes:
        high_level_threshold: First level that uses the top-choice policy
        top_choice_probability: Chance of the best move at high levels
        weight_decay: Geometric weight base for the low-level pool
        rng: Random source exposing ``random() -> float in [0, 1)``
    """

    def __init__(
        self,
        high_level_threshold: int = HIGH_LEVEL_THRESHOLD,
        top_choice_probability: float = TOP_CHOICE_PROBABILITY,
        weight_decay: float = WEIGHT_DECAY,
        rng: Optional[random.Random] = None,
    ):
        self.high_level_threshold = high_level_threshold
        self.top_choice_probability = top_choice_probability
        self.weight_decay = weight_decay
        self.rng = rng or random.Random()

    def weights(self, count: int) -> List[float]:
        return [self.weight_decay ** i for i in range(count)]

    def select(self, ranked: Sequence[EvaluatedMove], ai_level: int) -> Move:
        """
        Choose a move from a ranked list.

        Args:
            ranked: Moves ordered best first (see rank_moves)
            ai_level: Difficulty level, 0-10

        Returns:
            One of the moves in ``ranked``

        Raises:
            ValueError: If ``ranked`` is empty
        """
        if not ranked:
            raise ValueError("Cannot select from an empty move list")

        if len(ranked) == 1:
            return ranked[0].move

        if ai_level >= self.high_level_threshold:
            if self.rng.random() < self.top_choice_probability:
                return ranked[0].move
            return ranked[min(1, len(ranked) - 1)].move

        pool = ranked[:pool_size(ai_level, len(ranked))]
        weights = self.weights(len(pool))

        remaining = self.rng.random() * sum(weights)
        selected = len(pool) - 1
        for index, weight in enumerate(weights):
            remaining -= weight
            if remaining <= 0:
                selected = index
                break

        return pool[selected].move
