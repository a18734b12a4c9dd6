"""Tests for BoardView, PromotionPrompt, and GameOverMenu geometry."""

import chess

from src.networking.protocol import PromotionPiece
from src.rendering.board_view import BoardView, GameOverMenu, PromotionPrompt


# --- Helpers ---

def make_view(**kwargs) -> BoardView:
    """Create a view with small squares for easy arithmetic."""
    defaults = dict(flipped=False, square_size=10)
    defaults.update(kwargs)
    return BoardView(**defaults)


class TestWhiteOrientation:
    def test_top_left_is_a8(self):
        assert make_view().screen_to_square(0, 0) == chess.A8

    def test_bottom_right_is_h1(self):
        assert make_view().screen_to_square(79, 79) == chess.H1

    def test_e2(self):
        assert make_view().screen_to_square(45, 65) == chess.E2

    def test_square_to_screen(self):
        assert make_view().square_to_screen(chess.E2) == (40, 60)

    def test_center(self):
        assert make_view().square_center(chess.A1) == (5, 75)


class TestBlackOrientation:
    def test_top_left_is_h1(self):
        assert make_view(flipped=True).screen_to_square(0, 0) == chess.H1

    def test_bottom_right_is_a8(self):
        assert make_view(flipped=True).screen_to_square(79, 79) == chess.A8

    def test_roundtrip_every_square(self):
        for flipped in (False, True):
            view = make_view(flipped=flipped)
            for square in chess.SQUARES:
                x, y = view.square_to_screen(square)
                assert view.screen_to_square(x + 3, y + 7) == square


class TestOffBoard:
    def test_outside_returns_none(self):
        view = make_view()
        assert view.screen_to_square(-1, 0) is None
        assert view.screen_to_square(80, 0) is None
        assert view.screen_to_square(0, 80) is None


class TestPromotionPrompt:
    def test_choices_left_to_right(self):
        prompt = PromotionPrompt((0, 0), square_size=10, window_size=200)
        picks = [prompt.choice_at(r.centerx, r.centery) for r in prompt.choice_rects]
        assert picks == [
            PromotionPiece.KNIGHT,
            PromotionPiece.BISHOP,
            PromotionPiece.ROOK,
            PromotionPiece.QUEEN,
        ]

    def test_outside_choices_is_none(self):
        prompt = PromotionPrompt((50, 50), square_size=10, window_size=200)
        assert prompt.choice_at(0, 0) is None
        # Inside the panel padding but not on a choice.
        assert prompt.choice_at(prompt.rect.x + 1, prompt.rect.y + 1) is None

    def test_clamped_inside_window(self):
        prompt = PromotionPrompt((195, 195), square_size=10, window_size=200)
        assert prompt.rect.right <= 200
        assert prompt.rect.bottom <= 200


class TestGameOverMenu:
    def test_buttons(self):
        menu = GameOverMenu(window_size=768)
        assert menu.decision_at(*menu.restart_rect.center) is True
        assert menu.decision_at(*menu.quit_rect.center) is False
        assert menu.decision_at(0, 0) is None

    def test_buttons_do_not_overlap(self):
        menu = GameOverMenu(window_size=768)
        assert not menu.restart_rect.colliderect(menu.quit_rect)
