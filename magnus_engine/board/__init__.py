"""
Board Module

Grid board model plus the codec used by the evaluators.

Key Components:
    - types: Piece, Move, Color, PieceType and the JSON wire format
    - representation: encode_board (1x12x8x8 tensor) and apply_move
    - conversion: bridge to python-chess, used as the legal-move source

Data Flow:
    Board (8x8 grid) → encode_board() → (1, 12, 8, 8) float32 array → session
"""

from magnus_engine.board.representation import apply_move, encode_board

__all__ = ['encode_board', 'apply_move']
