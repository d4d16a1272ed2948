"""
Unit Tests for the Move-Service Client

Tests for the server fallback, focusing on:
    - Rate limiting (waits out the remainder of the interval)
    - Payload format
    - Mapping every failure mode to RemoteMoveError
"""

import aiohttp
import pytest

from magnus_engine.board.types import Color, Coord, Move, Piece, PieceType, empty_board
from magnus_engine.engine.remote import RateLimiter, RemoteMoveClient, RemoteMoveError


class FakeClock:

    def __init__(self, now=100.0):
        self.now = now
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeResponse:

    def __init__(self, status=200, data=None, reason="OK"):
        self.status = status
        self.reason = reason
        self._data = data

    async def json(self, content_type="application/json"):
        if isinstance(self._data, Exception):
            raise self._data
        return self._data

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class FakeSession:
    """Stands in for aiohttp.ClientSession.post()."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.posts = []

    def post(self, url, json=None, timeout=None):
        self.posts.append((url, json))
        if self.error is not None:
            raise self.error
        return self.response


MOVE_JSON = {"from": {"row": 6, "col": 4}, "to": {"row": 4, "col": 4}}


def kings_only():
    board = empty_board()
    board[7][4] = Piece(PieceType.KING, Color.WHITE)
    board[0][4] = Piece(PieceType.KING, Color.BLACK)
    return board


def client_for(session):
    clock = FakeClock()
    limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)
    return RemoteMoveClient("http://service/api/chess-ai/move", rate_limiter=limiter, session=session)


class TestRateLimiter:
    """Tests for RateLimiter."""

    @pytest.mark.asyncio
    async def test_first_call_is_immediate(self):
        clock = FakeClock()
        limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)

        assert await limiter.wait() == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_early_call_waits_remaining_interval(self):
        clock = FakeClock()
        limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)

        await limiter.wait()
        clock.now += 0.2
        delay = await limiter.wait()

        assert delay == pytest.approx(0.3)
        assert clock.sleeps == [pytest.approx(0.3)]

    @pytest.mark.asyncio
    async def test_late_call_does_not_wait(self):
        clock = FakeClock()
        limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)

        await limiter.wait()
        clock.now += 2.0

        assert await limiter.wait() == 0.0
        assert clock.sleeps == []

    @pytest.mark.asyncio
    async def test_calls_are_spaced(self):
        clock = FakeClock()
        limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)
        started = []

        for _ in range(4):
            await limiter.wait()
            started.append(clock.now)

        gaps = [b - a for a, b in zip(started, started[1:])]
        assert all(gap >= 0.5 - 1e-9 for gap in gaps)


class TestRemoteMoveClient:
    """Tests for RemoteMoveClient."""

    def test_payload(self):
        client = RemoteMoveClient("http://service/move")

        payload = client.build_payload(kings_only(), Color.BLACK, 7, {"aggressiveness": 3})

        assert payload["turn"] == "b"
        assert payload["aiLevel"] == 7
        assert payload["personality"] == {"aggressiveness": 3}
        assert payload["board"][7][4] == {"type": "k", "color": "w"}
        assert payload["board"][3][3] is None

    def test_payload_omits_empty_personality(self):
        payload = RemoteMoveClient("http://service/move").build_payload(kings_only(), Color.WHITE, 5)

        assert "personality" not in payload

    @pytest.mark.asyncio
    async def test_success(self):
        session = FakeSession(FakeResponse(data={"move": MOVE_JSON, "status": "success"}))
        client = client_for(session)

        move = await client.request_move(kings_only(), Color.WHITE, 8)

        assert move == Move(Coord(6, 4), Coord(4, 4))
        url, body = session.posts[0]
        assert url == "http://service/api/chess-ai/move"
        assert body["turn"] == "w"

    @pytest.mark.asyncio
    async def test_error_field(self):
        client = client_for(FakeSession(FakeResponse(data={"error": "No legal moves available"})))

        with pytest.raises(RemoteMoveError, match="No legal moves"):
            await client.request_move(kings_only(), Color.WHITE, 8)

    @pytest.mark.asyncio
    async def test_non_2xx_status(self):
        response = FakeResponse(status=500, data={"error": "boom"}, reason="Internal Server Error")
        client = client_for(FakeSession(response))

        with pytest.raises(RemoteMoveError, match="500"):
            await client.request_move(kings_only(), Color.WHITE, 8)

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        client = client_for(FakeSession(FakeResponse(data=ValueError("not json"))))

        with pytest.raises(RemoteMoveError):
            await client.request_move(kings_only(), Color.WHITE, 8)

    @pytest.mark.asyncio
    async def test_missing_move(self):
        client = client_for(FakeSession(FakeResponse(data={"status": "success"})))

        with pytest.raises(RemoteMoveError, match="No move"):
            await client.request_move(kings_only(), Color.WHITE, 8)

    @pytest.mark.asyncio
    async def test_malformed_move(self):
        client = client_for(FakeSession(FakeResponse(data={"move": {"from": {"row": 1}}})))

        with pytest.raises(RemoteMoveError, match="Malformed"):
            await client.request_move(kings_only(), Color.WHITE, 8)

    @pytest.mark.asyncio
    async def test_transport_error(self):
        client = client_for(FakeSession(error=aiohttp.ClientConnectionError("refused")))

        with pytest.raises(RemoteMoveError, match="unreachable"):
            await client.request_move(kings_only(), Color.WHITE, 8)
