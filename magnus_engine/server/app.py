"""
FastAPI move service.

Exposes POST /api/chess-ai/move: the client sends the grid board, the side
to move and the difficulty level; the service derives the legal moves with
python-chess, ranks them with the heuristic evaluator and returns one
chosen by the selection policy. This is the server tier that
RemoteMoveClient talks to.

Architecture notes:
- Heuristic only: the neural tier runs next to the client.
- Stateless per request: the full board is sent every time.
- Errors are returned as {"error": "..."} so clients can treat any
  error body as a failed tier.
"""

import logging
import random
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from magnus_engine import __version__
from magnus_engine.board.conversion import legal_moves
from magnus_engine.board.types import Color, board_from_json
from magnus_engine.engine.config import EngineConfig
from magnus_engine.engine.session import load_torch_session
from magnus_engine.evaluation.heuristic import HeuristicEvaluator
from magnus_engine.selection.policy import MAX_LEVEL, SelectionPolicy
from magnus_engine.selection.ranking import rank_moves

_log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class CoordModel(BaseModel):
    row: int = Field(ge=0, le=7)
    col: int = Field(ge=0, le=7)


class SideCastling(BaseModel):
    kingside: bool = False
    queenside: bool = False


class CastlingRightsModel(BaseModel):
    w: SideCastling = SideCastling()
    b: SideCastling = SideCastling()


class MoveRequest(BaseModel):
    """
    Client request to the move service.

    Fields:
        board: 8x8 grid; each square is null or {"type", "color"}.
        turn: "w" or "b".
        aiLevel: Difficulty 0-10 (clamped).
        personality: Style hints; accepted and logged, not used in scoring.
        castlingRights: Per-side castling rights; inferred from placement
                        when omitted.
        enPassantTargetSquare: En passant target, if any.
    """

    model_config = ConfigDict(populate_by_name=True)

    board: List[List[Optional[Dict[str, str]]]]
    turn: Color
    ai_level: int = Field(default=8, alias="aiLevel")
    personality: Optional[Dict[str, Any]] = None
    castling_rights: Optional[CastlingRightsModel] = Field(default=None, alias="castlingRights")
    en_passant: Optional[CoordModel] = Field(default=None, alias="enPassantTargetSquare")

    @field_validator("ai_level")
    @classmethod
    def clamp_level(cls, v: int) -> int:
        """Clamp aiLevel to the supported range."""
        return max(0, min(v, MAX_LEVEL))


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


def create_app(config: Optional[EngineConfig] = None, rng: Optional[random.Random] = None) -> FastAPI:
    """Build the service.

    Args:
        config: Engine configuration (default: read from the environment)
        rng: Random source for the selection policy
    """
    config = config or EngineConfig.from_env()
    evaluator = HeuristicEvaluator()
    policy = SelectionPolicy(
        high_level_threshold=config.high_level_threshold,
        top_choice_probability=config.top_choice_probability,
        weight_decay=config.weight_decay,
        rng=rng,
    )

    app = FastAPI(title="Magnus Move Service", version=__version__)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": "Invalid request", "details": str(exc)})

    @app.post("/api/chess-ai/move")
    async def api_move(request: MoveRequest) -> JSONResponse:
        """
        Compute a move for the given position.

        Returns:
            200 {"move": ..., "status": "success"}
            200 {"error": "No legal moves available"}
            400 {"error": ...} on a malformed board or position
        """
        try:
            board = board_from_json(request.board)
            en_passant = (request.en_passant.row, request.en_passant.col) if request.en_passant else None
            castling = request.castling_rights.model_dump() if request.castling_rights else None
            moves = legal_moves(board, request.turn, castling, en_passant)
        except ValueError as exc:
            return JSONResponse(status_code=400, content={"error": f"Invalid position: {exc}"})

        if not moves:
            return JSONResponse(status_code=200, content={"error": "No legal moves available"})

        _log.info(
            "Thinking as %s at level %d over %d moves (personality=%s)",
            request.turn.value,
            request.ai_level,
            len(moves),
            request.personality,
        )

        try:
            ranked = await rank_moves(evaluator, board, moves, request.turn)
            move = policy.select(ranked, request.ai_level)
        except Exception:
            _log.exception("Error in move selection")
            return JSONResponse(status_code=500, content={"error": "Error in move selection"})

        return JSONResponse(status_code=200, content={"move": move.to_dict(), "status": "success"})

    @app.get("/api/chess-ai/diagnostic")
    def api_diagnostic() -> Dict[str, Any]:
        """Report whether the configured model can be loaded."""
        status: Dict[str, Any] = {
            "apiStatus": "ok",
            "version": __version__,
            "modelConfigured": config.model_path is not None,
            "modelLoadable": False,
        }
        if config.model_path is not None:
            try:
                load_torch_session(config.model_path, config.device)
                status["modelLoadable"] = True
            except Exception as exc:
                status["apiStatus"] = "degraded"
                status["modelError"] = str(exc)
        return status

    return app
