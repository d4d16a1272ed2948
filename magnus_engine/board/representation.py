"""
Board Codec

This module converts grid boards into the tensor layout expected by the
value network, and applies moves to boards without touching the original.

12-Channel Representation (piece positions only):
    0: White Pawns      6: Black Pawns
    1: White Knights    7: Black Knights
    2: White Bishops    8: Black Bishops
    3: White Rooks      9: Black Rooks
    4: White Queens    10: Black Queens
    5: White Kings     11: Black Kings

Memory Layout:
    The buffer is filled square-major: flat index = row*8*12 + col*12 + channel.
    It is then reported with shape (1, 12, 8, 8), which is how the deployed
    model was exported. The reshape is a reinterpretation of the same 768
    floats, not a transpose.
"""

from typing import Optional

import numpy as np

from magnus_engine.board.types import (
    BOARD_SIZE,
    Board,
    Color,
    Move,
    Piece,
    PieceType,
    empty_board,
)

NUM_CHANNELS = 12
TENSOR_SHAPE = (1, NUM_CHANNELS, BOARD_SIZE, BOARD_SIZE)

# Piece type to channel index mapping
# White pieces: channels 0-5
# Black pieces: channels 6-11
PIECE_TO_CHANNEL = {
    Piece(piece_type, color): piece_type.index + (6 if color is Color.BLACK else 0)
    for color in Color
    for piece_type in PieceType
}


def flat_index(row: int, col: int, channel: int) -> int:
    """Offset of (row, col, channel) in the flattened input buffer."""
    return row * BOARD_SIZE * NUM_CHANNELS + col * NUM_CHANNELS + channel


def encode_board(board: Board, side_to_move: Optional[Color] = None) -> np.ndarray:
    """
    Convert a board to the network input tensor.

    Args:
        board: 8x8 grid of pieces
        side_to_move: Accepted for interface symmetry; the encoding is
            board-only and does not depend on it

    Returns:
        numpy array of shape (1, 12, 8, 8) with dtype float32
        - Binary values: 1.0 piece exists, 0.0 no piece
    """
    data = np.zeros(BOARD_SIZE * BOARD_SIZE * NUM_CHANNELS, dtype=np.float32)

    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            piece = board[row][col]
            if piece is not None:
                data[flat_index(row, col, PIECE_TO_CHANNEL[piece])] = 1.0

    return data.reshape(TENSOR_SHAPE)


def tensor_to_board(tensor: np.ndarray) -> Board:
    """
    Convert an encoded tensor back to a board.

    This is the inverse of encode_board().

    Raises:
        ValueError: If tensor has the wrong size or two pieces share a square
    """
    data = np.asarray(tensor, dtype=np.float32).reshape(-1)
    if data.size != BOARD_SIZE * BOARD_SIZE * NUM_CHANNELS:
        raise ValueError(f"Invalid tensor size: {data.size}. Expected 768")

    channel_to_piece = {v: k for k, v in PIECE_TO_CHANNEL.items()}
    board = empty_board()

    for index in np.flatnonzero(data > 0.5):
        row, rest = divmod(int(index), BOARD_SIZE * NUM_CHANNELS)
        col, channel = divmod(rest, NUM_CHANNELS)
        if board[row][col] is not None:
            raise ValueError(f"Multiple pieces on square ({row}, {col})")
        board[row][col] = channel_to_piece[channel]

    return board


def apply_move(board: Board, move: Move) -> Board:
    """
    Return a copy of ``board`` with ``move`` played.

    Relocates a single piece and applies promotion. Castling rook moves,
    en passant captures and legality are not handled; the result is only
    meant for static evaluation. The input board is never mutated.
    """
    new_board = [list(row) for row in board]

    src = move.from_square
    dst = move.to_square
    piece = new_board[src.row][src.col]
    if piece is None:
        return new_board

    new_board[dst.row][dst.col] = piece
    new_board[src.row][src.col] = None

    if move.promotion is not None:
        new_board[dst.row][dst.col] = Piece(move.promotion, piece.color)

    return new_board
