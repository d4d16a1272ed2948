"""
Board Data Model

Plain value types shared by every engine component, plus the JSON wire
format used by the move service and its clients.

Board Orientation:
    - Row 0 = Rank 8 (Black's back rank)
    - Row 7 = Rank 1 (White's back rank)
    - Column 0 = A-file
    - Column 7 = H-file

Wire Format:
    Square: null | {"type": "p", "color": "w"}
    Move:   {"from": {"row": 6, "col": 4}, "to": {"row": 4, "col": 4},
             "promotion": "q"}   (promotion optional)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

BOARD_SIZE = 8


class Color(str, Enum):
    """Side colors. White moves first."""

    WHITE = "w"
    BLACK = "b"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PieceType(str, Enum):
    """The six piece kinds, in channel order."""

    PAWN = "p"
    KNIGHT = "n"
    BISHOP = "b"
    ROOK = "r"
    QUEEN = "q"
    KING = "k"

    @property
    def index(self) -> int:
        """Position of this kind in the channel layout (0-5)."""
        return _PIECE_ORDER.index(self)


_PIECE_ORDER = list(PieceType)


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color

    def to_dict(self) -> Dict[str, str]:
        return {"type": self.type.value, "color": self.color.value}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Piece":
        return cls(PieceType(data["type"]), Color(data["color"]))


class Coord(NamedTuple):
    """Zero-based (row, col) pair."""

    row: int
    col: int

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "col": self.col}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Coord":
        return cls(int(data["row"]), int(data["col"]))


@dataclass(frozen=True)
class Move:
    """
    A move supplied by the legal-move source.

    The engine never checks legality. ``promotion`` is only set when a pawn
    reaches the far rank.
    """

    from_square: Coord
    to_square: Coord
    promotion: Optional[PieceType] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "from": self.from_square.to_dict(),
            "to": self.to_square.to_dict(),
        }
        if self.promotion is not None:
            data["promotion"] = self.promotion.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Move":
        promotion = data.get("promotion")
        return cls(
            Coord.from_dict(data["from"]),
            Coord.from_dict(data["to"]),
            PieceType(promotion) if promotion else None,
        )

    def __str__(self) -> str:
        files = "abcdefgh"
        text = (
            f"{files[self.from_square.col]}{BOARD_SIZE - self.from_square.row}"
            f"{files[self.to_square.col]}{BOARD_SIZE - self.to_square.row}"
        )
        if self.promotion is not None:
            text += self.promotion.value
        return text


Square = Optional[Piece]
Board = List[List[Square]]


def empty_board() -> Board:
    """Create an 8x8 board with no pieces."""
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


def validate_board(board: Board) -> None:
    """
    Check the 8x8 shape invariant.

    Raises:
        ValueError: If the board is not exactly 8 rows of 8 squares
    """
    if len(board) != BOARD_SIZE:
        raise ValueError(f"Board must have {BOARD_SIZE} rows, got {len(board)}")
    for row_index, row in enumerate(board):
        if len(row) != BOARD_SIZE:
            raise ValueError(
                f"Row {row_index} must have {BOARD_SIZE} squares, got {len(row)}"
            )


def board_to_json(board: Board) -> List[List[Optional[Dict[str, str]]]]:
    return [[piece.to_dict() if piece else None for piece in row] for row in board]


def board_from_json(data: List[List[Optional[Dict[str, Any]]]]) -> Board:
    """
    Parse the wire representation of a board.

    Raises:
        ValueError: On a malformed grid or unknown piece codes
    """
    try:
        board = [[Piece.from_dict(sq) if sq else None for sq in row] for row in data]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed board: {e}") from e
    validate_board(board)
    return board
