"""
Magnus Move Engine

The move-selection engine behind the "Chess AI Magnus" demo. Given a board,
the side to move and a difficulty level, it scores every legal move with a
neural or heuristic evaluator and picks one through a level-dependent
randomized policy.

## Architecture

1. **board**: Grid board model, tensor codec and python-chess bridge
   - 8x8 grid of pieces, moves as (row, col) pairs
   - Encode positions to a 1x12x8x8 tensor for the value network

2. **evaluation**: Position evaluators (white-perspective scores)
   - HeuristicEvaluator: material + simple positional terms
   - NeuralEvaluator: adapter over an opaque inference session

3. **selection**: Single-ply move ranking and the difficulty policy

4. **engine**: Orchestration
   - Neural -> heuristic -> server -> random fallback chain
   - Duplicate-request suppression, lazy session loading, throttling

5. **server** / **uci**: HTTP move service and UCI front end

## Quick Start

```python
import asyncio
import chess
from magnus_engine.board.conversion import board_from_chess, legal_moves
from magnus_engine.board.types import Color
from magnus_engine.engine import MoveEngine

board = board_from_chess(chess.Board())
moves = legal_moves(board, Color.WHITE)
move = asyncio.run(MoveEngine().select_move(board, moves, Color.WHITE, ai_level=5))
```
"""

__version__ = "0.1.0"
__license__ = "MIT"

from magnus_engine.board.types import Color, Move, Piece, PieceType
from magnus_engine.engine.orchestrator import MoveEngine
from magnus_engine.engine.config import EngineConfig

__all__ = [
    'Color',
    'Move',
    'Piece',
    'PieceType',
    'MoveEngine',
    'EngineConfig',
]
