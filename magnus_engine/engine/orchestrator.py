"""
Move Engine

Coordinates evaluators, ranking and the selection policy behind one
asynchronous entry point.

Fallback Chain:
    1. Neural tier (level >= neural_min_level and a session is available)
    2. Heuristic tier (always available)
    3. Move service (when configured; before the local tiers if the client
       side is not preferred)
    4. Uniformly random legal move

Guarantees:
    - Empty legal-move list → None
    - Otherwise always a move taken from the supplied list; tier failures
      only lower move quality and are logged, never raised
    - get_move() calls that overlap share one computation
"""

import asyncio
import functools
import logging
import random
from typing import Any, Dict, List, Optional, Sequence

from magnus_engine.board.types import Board, Color, Move
from magnus_engine.engine.config import EngineConfig
from magnus_engine.engine.remote import RateLimiter, RemoteMoveClient, RemoteMoveError
from magnus_engine.engine.session import SessionProvider, load_torch_session
from magnus_engine.evaluation.base import EvaluatorUnavailable
from magnus_engine.evaluation.heuristic import HeuristicEvaluator
from magnus_engine.evaluation.neural import NeuralEvaluator
from magnus_engine.selection.policy import MAX_LEVEL, SelectionPolicy
from magnus_engine.selection.ranking import EvaluatedMove, rank_moves

logger = logging.getLogger(__name__)


class MoveEngine:
    """
    Move selection with cascading fallbacks.

    One instance holds the state that must outlive a single request: the
    memoized inference session, the server throttle and the in-flight
    get_move() request. Create it once per process or game session.

    Attributes:
        config: EngineConfig in effect
        session_provider: Lazy session loader (None disables the neural tier)
        remote: Move-service client (None disables the server tier)
        heuristic: Heuristic evaluator
        policy: Selection policy sharing the engine's random source
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        session_provider: Optional[SessionProvider] = None,
        remote: Optional[RemoteMoveClient] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or EngineConfig()
        self.rng = rng or random.Random()

        if session_provider is None and self.config.model_path is not None:
            session_provider = SessionProvider(functools.partial(
                load_torch_session, self.config.model_path, self.config.device
            ))
        self.session_provider = session_provider

        if remote is None and self.config.server_url:
            remote = RemoteMoveClient(
                self.config.server_url,
                timeout=self.config.request_timeout,
                rate_limiter=RateLimiter(self.config.min_request_interval),
            )
        self.remote = remote

        self.heuristic = HeuristicEvaluator()
        self.policy = SelectionPolicy(
            high_level_threshold=self.config.high_level_threshold,
            top_choice_probability=self.config.top_choice_probability,
            weight_decay=self.config.weight_decay,
            rng=self.rng,
        )

        self._pending: Optional[asyncio.Future] = None

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    async def get_move(
        self,
        board: Board,
        legal_moves: Sequence[Move],
        side_to_move: Color,
        ai_level: int,
        personality: Optional[Dict[str, Any]] = None,
        prefer_client_side: Optional[bool] = None,
    ) -> Optional[Move]:
        """
        Get a move, trying every available tier.

        While a call is in flight, further calls receive its result
        instead of starting a second computation.

        Args:
            board: Current position (not mutated)
            legal_moves: Moves supplied by the legal-move source
            side_to_move: Color to play
            ai_level: Difficulty, 0-10
            personality: Opaque style hints forwarded to the move service
            prefer_client_side: Override of config.prefer_client_side

        Returns:
            A move from ``legal_moves``, or None if it is empty

        Raises:
            ValueError: If ai_level is outside 0-10
        """
        check_level(ai_level)

        if self._pending is not None:
            logger.debug("Move request already in flight, sharing its result")
            return await asyncio.shield(self._pending)

        prefer = self.config.prefer_client_side if prefer_client_side is None else prefer_client_side

        async def run() -> Optional[Move]:
            try:
                return await self._dispatch(
                    board, list(legal_moves), side_to_move, ai_level, personality, prefer
                )
            finally:
                self._pending = None

        self._pending = asyncio.ensure_future(run())
        return await asyncio.shield(self._pending)

    async def select_move(
        self,
        board: Board,
        legal_moves: Sequence[Move],
        side_to_move: Color,
        ai_level: int,
    ) -> Optional[Move]:
        """
        Pick a move locally (neural → heuristic → random).

        Returns:
            A move from ``legal_moves``, or None if it is empty

        Raises:
            ValueError: If ai_level is outside 0-10
        """
        check_level(ai_level)
        legal_moves = list(legal_moves)
        if not legal_moves:
            return None

        move = await self._client_side_move(board, legal_moves, side_to_move, ai_level)
        if move is None:
            move = self.random_move(legal_moves)
        return move

    def random_move(self, legal_moves: Sequence[Move]) -> Move:
        """Last-resort uniform choice."""
        return legal_moves[int(self.rng.random() * len(legal_moves))]

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def _dispatch(
        self,
        board: Board,
        legal_moves: List[Move],
        side_to_move: Color,
        ai_level: int,
        personality: Optional[Dict[str, Any]],
        prefer_client_side: bool,
    ) -> Optional[Move]:
        if not legal_moves:
            return None

        if prefer_client_side:
            move = await self._client_side_move(board, legal_moves, side_to_move, ai_level)
            if move is not None:
                return move

        move = await self._server_move(board, legal_moves, side_to_move, ai_level, personality)
        if move is not None:
            return move

        if not prefer_client_side:
            move = await self._client_side_move(board, legal_moves, side_to_move, ai_level)
            if move is not None:
                return move

        logger.warning("All move selection methods failed, selecting random move")
        return self.random_move(legal_moves)

    async def _client_side_move(
        self,
        board: Board,
        legal_moves: List[Move],
        side_to_move: Color,
        ai_level: int,
    ) -> Optional[Move]:
        try:
            ranked = await self.rank(board, legal_moves, side_to_move, ai_level)
            return self.policy.select(ranked, ai_level)
        except Exception:
            logger.exception("Error in client-side move selection")
            return None

    async def _server_move(
        self,
        board: Board,
        legal_moves: List[Move],
        side_to_move: Color,
        ai_level: int,
        personality: Optional[Dict[str, Any]],
    ) -> Optional[Move]:
        if self.remote is None:
            return None

        try:
            move = await self.remote.request_move(board, side_to_move, ai_level, personality)
        except RemoteMoveError as e:
            logger.warning(f"Error getting move from server: {e}")
            return None

        for legal in legal_moves:
            if legal == move:
                logger.info(f"Move service chose {move}")
                return legal

        logger.warning(f"Move service returned a move outside the legal list: {move}")
        return None

    # ------------------------------------------------------------------
    # Ranking tiers
    # ------------------------------------------------------------------

    async def rank(
        self,
        board: Board,
        legal_moves: List[Move],
        side_to_move: Color,
        ai_level: int,
    ) -> List[EvaluatedMove]:
        """Rank moves with the best tier that works for this level."""
        if ai_level >= self.config.neural_min_level:
            try:
                ranked = await self._rank_neural(board, legal_moves, side_to_move)
                logger.info("Neural network used for move selection")
                return ranked
            except Exception as e:
                logger.warning(f"Neural network failed, falling back to heuristic evaluation: {e}")

        logger.info("Using heuristic evaluation")
        jitter = self.config.score_jitter * (MAX_LEVEL - ai_level) / MAX_LEVEL
        return await rank_moves(
            self.heuristic, board, legal_moves, side_to_move, jitter=jitter, rng=self.rng
        )

    async def _rank_neural(
        self,
        board: Board,
        legal_moves: List[Move],
        side_to_move: Color,
    ) -> List[EvaluatedMove]:
        if self.session_provider is None:
            raise EvaluatorUnavailable("No model configured")

        session = await self.session_provider.get()
        if session is None:
            raise EvaluatorUnavailable("Model not available")

        evaluator = NeuralEvaluator(session, self.config.score_multiplier)
        ranked = await rank_moves(evaluator, board, legal_moves, side_to_move)

        if evaluator.all_failed:
            raise EvaluatorUnavailable(f"All {evaluator.calls} neural evaluations failed")

        return ranked


def check_level(ai_level: int) -> None:
    """
    Raises:
        ValueError: If ai_level is not an integer in 0-10
    """
    if isinstance(ai_level, bool) or not isinstance(ai_level, int) or not 0 <= ai_level <= MAX_LEVEL:
        raise ValueError(f"ai_level must be an integer between 0 and {MAX_LEVEL}, got {ai_level!r}")
