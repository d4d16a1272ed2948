"""
python-chess Bridge

The engine consumes legal moves but never generates them. Front ends (the
HTTP service and the UCI loop) get them from python-chess through the
helpers in this module.

Coordinate mapping follows the grid orientation: row 0 = rank 8,
column 0 = A-file.
"""

from typing import Dict, List, Optional, Tuple

import chess

from magnus_engine.board.types import (
    BOARD_SIZE,
    Board,
    Color,
    Coord,
    Move,
    Piece,
    PieceType,
    empty_board,
)

CastlingRights = Dict[str, Dict[str, bool]]


def square_to_coord(square: int) -> Coord:
    """
    Convert python-chess square index to grid coordinates.

    Args:
        square: Square index (0-63) where 0=A1, 63=H8

    Returns:
        Coord where row 0 = rank 8 and col 0 = A-file
    """
    return Coord(7 - chess.square_rank(square), chess.square_file(square))


def coord_to_square(coord: Tuple[int, int]) -> int:
    """Convert grid coordinates to a python-chess square index."""
    row, col = coord
    return chess.square(col, 7 - row)


def board_from_chess(chess_board: chess.Board) -> Board:
    """Copy the piece placement of a python-chess board into a grid."""
    board = empty_board()
    for square, piece in chess_board.piece_map().items():
        coord = square_to_coord(square)
        board[coord.row][coord.col] = Piece(
            PieceType(chess.piece_symbol(piece.piece_type)),
            Color.WHITE if piece.color == chess.WHITE else Color.BLACK,
        )
    return board


def _castling_fen(rights: Optional[CastlingRights]) -> str:
    if rights is None:
        return "KQkq"
    fen = ""
    for color, kingside, queenside in (("w", "K", "Q"), ("b", "k", "q")):
        side = rights.get(color, {})
        if side.get("kingside"):
            fen += kingside
        if side.get("queenside"):
            fen += queenside
    return fen or "-"


def board_to_chess(
    board: Board,
    side_to_move: Color,
    castling_rights: Optional[CastlingRights] = None,
    en_passant: Optional[Tuple[int, int]] = None,
) -> chess.Board:
    """
    Build a python-chess board from a grid.

    Args:
        board: 8x8 grid of pieces
        side_to_move: Color about to play
        castling_rights: ``{"w": {"kingside": bool, "queenside": bool}, "b": ...}``;
            when omitted every right is granted and then pruned to what the
            piece placement still allows
        en_passant: Grid coordinates of the en passant target square

    Returns:
        python-chess Board with the given placement and state
    """
    chess_board = chess.Board(fen=None)

    for row in range(BOARD_SIZE):
        for col in range(BOARD_SIZE):
            piece = board[row][col]
            if piece is None:
                continue
            chess_board.set_piece_at(
                coord_to_square((row, col)),
                chess.Piece(
                    chess.PIECE_SYMBOLS.index(piece.type.value),
                    piece.color is Color.WHITE,
                ),
            )

    chess_board.turn = side_to_move is Color.WHITE
    chess_board.set_castling_fen(_castling_fen(castling_rights))
    chess_board.castling_rights = chess_board.clean_castling_rights()
    if en_passant is not None:
        chess_board.ep_square = coord_to_square(en_passant)

    return chess_board


def move_from_chess(move: chess.Move) -> Move:
    promotion = None
    if move.promotion:
        promotion = PieceType(chess.piece_symbol(move.promotion))
    return Move(square_to_coord(move.from_square), square_to_coord(move.to_square), promotion)


def move_to_chess(move: Move) -> chess.Move:
    promotion = None
    if move.promotion is not None:
        promotion = chess.PIECE_SYMBOLS.index(move.promotion.value)
    return chess.Move(
        coord_to_square(move.from_square),
        coord_to_square(move.to_square),
        promotion=promotion,
    )


def legal_moves(
    board: Board,
    side_to_move: Color,
    castling_rights: Optional[CastlingRights] = None,
    en_passant: Optional[Tuple[int, int]] = None,
) -> List[Move]:
    """List the legal moves of a grid position, in python-chess order."""
    chess_board = board_to_chess(board, side_to_move, castling_rights, en_passant)
    return [move_from_chess(move) for move in chess_board.legal_moves]
