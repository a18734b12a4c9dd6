"""Tests for the rule engine adapter and move notation helpers."""

import chess
import pytest

from src.networking.protocol import Color, MoveRecord, PromotionPiece
from src.simulation.rules import (
    GameStatus,
    MoveApplicationError,
    PieceKind,
    coords_to_square,
    is_promotion,
    move_from_record,
    move_squares,
    record_from_move,
    square_to_coords,
)

PROMOTION_FEN = "8/4P3/8/8/8/8/k7/7K w - - 0 1"
STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"


class TestRuleEngine:
    def test_new_game_has_twenty_moves(self, rules):
        board = rules.new_game()
        moves = rules.legal_moves(board)
        assert len(moves) == 20
        assert "e2e4" in moves

    def test_new_game_from_fen(self, rules):
        board = rules.new_game(PROMOTION_FEN)
        assert {"e7e8q", "e7e8r", "e7e8b", "e7e8n"} <= rules.legal_moves(board)

    def test_invalid_fen_raises(self, rules):
        with pytest.raises(ValueError):
            rules.new_game("not a fen")

    def test_apply_legal_move(self, rules):
        board = rules.new_game()
        rules.apply(board, "e2e4")
        assert rules.piece_at(board, chess.E4) == (PieceKind.PAWN, Color.WHITE)
        assert rules.piece_at(board, chess.E2) is None
        assert rules.side_to_move(board) is Color.BLACK

    def test_apply_illegal_move_raises(self, rules):
        board = rules.new_game()
        with pytest.raises(MoveApplicationError):
            rules.apply(board, "e2e5")
        assert rules.side_to_move(board) is Color.WHITE

    def test_apply_garbage_raises(self, rules):
        board = rules.new_game()
        with pytest.raises(MoveApplicationError):
            rules.apply(board, "zz")

    def test_status_in_progress(self, rules):
        assert rules.status(rules.new_game()) is GameStatus.IN_PROGRESS

    def test_status_checkmate(self, rules):
        board = rules.new_game()
        for m in ("f2f3", "e7e5", "g2g4", "d8h4"):
            rules.apply(board, m)
        assert rules.status(board) is GameStatus.CHECKMATE

    def test_status_stalemate_is_draw(self, rules):
        assert rules.status(rules.new_game(STALEMATE_FEN)) is GameStatus.DRAW


class TestNotation:
    def test_is_promotion(self):
        assert is_promotion("e7e8q")
        assert is_promotion("a2a1n")
        assert not is_promotion("e2e4")

    def test_move_squares(self):
        assert move_squares("e2e4") == (chess.E2, chess.E4)
        assert move_squares("e7e8q") == (chess.E7, chess.E8)

    def test_coords_count_ranks_from_the_top(self):
        assert square_to_coords(chess.A8) == (0, 0)
        assert square_to_coords(chess.H1) == (7, 7)
        assert square_to_coords(chess.E2) == (4, 6)

    def test_coords_inverse(self):
        for square in chess.SQUARES:
            assert coords_to_square(square_to_coords(square)) == square

    def test_coords_out_of_range(self):
        with pytest.raises(ValueError):
            coords_to_square((8, 0))

    def test_record_from_plain_move(self):
        assert record_from_move("e2e4") == MoveRecord(from_square=(4, 6), to_square=(4, 4))

    def test_record_from_promotion(self):
        record = record_from_move("e7e8q")
        assert record.promotion is PromotionPiece.QUEEN
        assert record.to_square == (4, 0)

    def test_move_from_record(self):
        assert move_from_record(MoveRecord((4, 6), (4, 4))) == "e2e4"
        record = MoveRecord((0, 6), (0, 7), promotion=PromotionPiece.ROOK)
        assert move_from_record(record) == "a2a1r"

    def test_record_and_move_agree(self):
        for move_str in ("g1f3", "e7e8n", "h2h1b", "e1g1"):
            assert move_from_record(record_from_move(move_str)) == move_str

    def test_promotion_codes(self):
        assert [p.code for p in PromotionPiece] == ["n", "b", "r", "q"]
        assert PromotionPiece.from_code("q") is PromotionPiece.QUEEN
        with pytest.raises(ValueError):
            PromotionPiece.from_code("k")
