"""Rule engine adapter over python-chess.

The turn synchronizer, the move selector and the renderer only use the
narrow interface below and never query a chess.Board themselves. Moves
are passed around as UCI strings ("e2e4", "e7e8q").

Wire squares are (file, rank index) with rank index 0 being the eighth
rank, i.e. the board as drawn top-down from White's side.
"""

from __future__ import annotations

from enum import Enum, IntEnum

import chess

from src.networking.protocol import Color, MoveRecord, PromotionPiece, Square

PROMOTION_CODES = "nbrq"


class MoveApplicationError(Exception):
    """The rule engine rejected a move that reached the board.

    Only legal moves are ever sent or applied, so this means the two
    peers no longer agree on the position.
    """


class GameStatus(Enum):
    IN_PROGRESS = "in_progress"
    CHECKMATE = "checkmate"
    DRAW = "draw"


class PieceKind(IntEnum):
    """Values match python-chess piece types."""
    PAWN = 1
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5
    KING = 6


def to_chess_color(color: Color) -> chess.Color:
    return chess.WHITE if color is Color.WHITE else chess.BLACK


def from_chess_color(color: chess.Color) -> Color:
    return Color.WHITE if color == chess.WHITE else Color.BLACK


class RuleEngine:
    """Legal moves, move application, and game status for one board."""

    def new_game(self, fen: str | None = None) -> chess.Board:
        """Create a board at the standard start or at the given FEN.

        Raises ValueError for an invalid FEN.
        """
        if fen is None:
            return chess.Board()
        return chess.Board(fen)

    def legal_moves(self, board: chess.Board) -> set[str]:
        return {move.uci() for move in board.legal_moves}

    def apply(self, board: chess.Board, move_str: str) -> None:
        """Play a move. Raises MoveApplicationError if it is not legal here."""
        try:
            move = chess.Move.from_uci(move_str)
        except ValueError as e:
            raise MoveApplicationError(f"Unparseable move {move_str!r}") from e
        if move not in board.legal_moves:
            raise MoveApplicationError(f"Illegal move {move_str!r} in {board.fen()}")
        board.push(move)

    def status(self, board: chess.Board) -> GameStatus:
        if board.is_checkmate():
            return GameStatus.CHECKMATE
        # Stalemate, insufficient material, 75-move rule, fivefold repetition.
        if board.is_game_over():
            return GameStatus.DRAW
        return GameStatus.IN_PROGRESS

    def piece_at(self, board: chess.Board, square: int) -> tuple[PieceKind, Color] | None:
        piece = board.piece_at(square)
        if piece is None:
            return None
        return PieceKind(piece.piece_type), from_chess_color(piece.color)

    def side_to_move(self, board: chess.Board) -> Color:
        return from_chess_color(board.turn)


# --- Notation helpers ---

def is_promotion(move_str: str) -> bool:
    """True if the move string carries a promotion piece as its fifth character."""
    return len(move_str) > 4 and move_str[4] in PROMOTION_CODES


def move_squares(move_str: str) -> tuple[int, int]:
    """(from, to) python-chess squares of a UCI move string."""
    return chess.parse_square(move_str[0:2]), chess.parse_square(move_str[2:4])


def square_to_coords(square: int) -> Square:
    return chess.square_file(square), 7 - chess.square_rank(square)


def coords_to_square(coords: Square) -> int:
    file, rank_index = coords
    if not (0 <= file <= 7 and 0 <= rank_index <= 7):
        raise ValueError(f"Square out of range: {coords}")
    return chess.square(file, 7 - rank_index)


def record_from_move(move_str: str) -> MoveRecord:
    """MoveRecord for a finalized UCI move string."""
    from_sq, to_sq = move_squares(move_str)
    promotion = PromotionPiece.from_code(move_str[4]) if is_promotion(move_str) else None
    return MoveRecord(
        from_square=square_to_coords(from_sq),
        to_square=square_to_coords(to_sq),
        promotion=promotion,
    )


def move_from_record(record: MoveRecord) -> str:
    """UCI move string for a received MoveRecord."""
    move_str = (
        chess.square_name(coords_to_square(record.from_square))
        + chess.square_name(coords_to_square(record.to_square))
    )
    if record.promotion is not None:
        move_str += record.promotion.code
    return move_str
