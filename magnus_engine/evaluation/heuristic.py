"""
Heuristic Position Evaluation

This module implements the evaluator used whenever the neural tier is
unavailable or the difficulty level is too low to ask for it:
    1. Material counting (piece values)
    2. Center control, minor-piece development and connected pawns

It needs no model and always returns a finite score, which is what makes
it the safe second tier of the fallback chain.

Evaluation Components:
    - Material: P=1, N=3, B=3.25, R=5, Q=9, K=0
    - Center control: ±0.3 for any piece on the central 4x4 squares
    - Development: ±0.1 for knights and bishops off their home ranks
    - Connected pawns: ±0.15 per same-colored pawn directly left or right
"""

from magnus_engine.board.types import BOARD_SIZE, Board, Color, PieceType
from magnus_engine.evaluation.base import Evaluator, orient

# ============================================================================
# Material Values (pawns)
# ============================================================================

PIECE_VALUES = {
    PieceType.PAWN: 1.0,
    PieceType.KNIGHT: 3.0,
    PieceType.BISHOP: 3.25,
    PieceType.ROOK: 5.0,
    PieceType.QUEEN: 9.0,
    PieceType.KING: 0.0,
}

CENTER_CONTROL_BONUS = 0.3
DEVELOPMENT_BONUS = 0.1
CONNECTED_PAWN_BONUS = 0.15

MINOR_PIECES = (PieceType.KNIGHT, PieceType.BISHOP)


def is_center(row: int, col: int) -> bool:
    """True for the central 4x4 block (rows and columns 2-5)."""
    return 1 < row < 6 and 1 < col < 6


def is_developed(row: int, color: Color) -> bool:
    """True once a piece has left its own two home ranks."""
    return row < 6 if color is Color.WHITE else row > 1


class HeuristicEvaluator(Evaluator):
    """
    Material plus simple positional features.

    Attributes:
        piece_values: Mapping from piece type to material value
    """

    def __init__(self, piece_values=None):
        self.piece_values = dict(piece_values or PIECE_VALUES)

    def connected_neighbours(self, board: Board, row: int, col: int) -> int:
        """Count same-colored pawns immediately left and right of (row, col)."""
        pawn = board[row][col]
        count = 0
        for neighbour_col in (col - 1, col + 1):
            if 0 <= neighbour_col < BOARD_SIZE:
                neighbour = board[row][neighbour_col]
                if neighbour is not None and neighbour == pawn:
                    count += 1
        return count

    def score_white(self, board: Board) -> float:
        """
        Evaluate the position from White's perspective.

        Args:
            board: 8x8 grid to evaluate

        Returns:
            float: Positive = White advantage
        """
        score = 0.0

        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                piece = board[row][col]
                if piece is None:
                    continue

                value = self.piece_values.get(piece.type, 0.0)

                if is_center(row, col):
                    value += CENTER_CONTROL_BONUS

                if piece.type in MINOR_PIECES and is_developed(row, piece.color):
                    value += DEVELOPMENT_BONUS

                if piece.type is PieceType.PAWN:
                    value += CONNECTED_PAWN_BONUS * self.connected_neighbours(board, row, col)

                score += value if piece.color is Color.WHITE else -value

        return score

    def evaluate(self, board: Board, side_to_move: Color) -> float:
        return orient(self.score_white(board), side_to_move)
