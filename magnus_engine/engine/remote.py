"""
Server Fallback Client

Asks the move service for a move when local evaluation is not preferred
or has failed.

HTTP Contract:
    POST <server_url>
    {"board": [[...]], "turn": "w", "aiLevel": 8, "personality": {...}}

    200 {"move": {"from": {...}, "to": {...}}}       success
    any {"error": "..."}                            failure
    non-2xx                                          failure

Calls are throttled: two requests are at least ``min_interval`` seconds
apart. A request that comes too early waits out the remainder instead of
being dropped.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional

import aiohttp

from magnus_engine.board.types import Board, Color, Move, board_to_json

logger = logging.getLogger(__name__)


class RemoteMoveError(RuntimeError):
    """The move service did not produce a usable move."""


class RateLimiter:
    """Keeps consecutive calls at least ``min_interval`` seconds apart."""

    def __init__(
        self,
        min_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = asyncio.sleep,
    ):
        self.min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None
        self._lock = asyncio.Lock()

    async def wait(self) -> float:
        """Wait until a call is allowed and record it.

        Returns:
            Seconds spent waiting
        """
        async with self._lock:
            delay = 0.0
            if self._last_call is not None:
                delay = self.min_interval - (self._clock() - self._last_call)
            if delay > 0:
                logger.debug(f"Throttling move service call for {delay:.3f}s")
                await self._sleep(delay)
            else:
                delay = 0.0
            self._last_call = self._clock()
            return delay


class RemoteMoveClient:
    """
    Client for the move service.

    Attributes:
        url: Endpoint receiving the POST
        timeout: aiohttp timeout applied to each request
        rate_limiter: Throttle shared by every call of this client
    """

    def __init__(
        self,
        url: str,
        timeout: Optional[float] = None,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.rate_limiter = rate_limiter or RateLimiter()
        self._session = session

    def build_payload(
        self,
        board: Board,
        side_to_move: Color,
        ai_level: int,
        personality: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "board": board_to_json(board),
            "turn": side_to_move.value,
            "aiLevel": ai_level,
        }
        if personality:
            payload["personality"] = personality
        return payload

    async def request_move(
        self,
        board: Board,
        side_to_move: Color,
        ai_level: int,
        personality: Optional[Dict[str, Any]] = None,
    ) -> Move:
        """
        Ask the service for a move.

        Raises:
            RemoteMoveError: On transport errors, non-2xx responses, an
                ``error`` field, or a missing/malformed move
        """
        await self.rate_limiter.wait()
        payload = self.build_payload(board, side_to_move, ai_level, personality)

        try:
            if self._session is not None:
                data = await self._post(self._session, payload)
            else:
                async with aiohttp.ClientSession() as session:
                    data = await self._post(session, payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise RemoteMoveError(f"Move service unreachable: {e}") from e

        if data.get("error"):
            raise RemoteMoveError(f"API error: {data['error']}")

        if not data.get("move"):
            raise RemoteMoveError("No move returned from API")

        try:
            return Move.from_dict(data["move"])
        except (KeyError, TypeError, ValueError) as e:
            raise RemoteMoveError(f"Malformed move from API: {data['move']!r}") from e

    async def _post(self, session: aiohttp.ClientSession, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with session.post(self.url, json=payload, timeout=self.timeout) as response:
            try:
                data = await response.json(content_type=None)
            except ValueError:
                data = None

            if not 200 <= response.status < 300:
                detail = data.get("error") if isinstance(data, dict) else None
                raise RemoteMoveError(
                    f"Server returned {response.status}: {detail or response.reason}"
                )

            if not isinstance(data, dict):
                raise RemoteMoveError("Move service returned a non-JSON body")

            return data
