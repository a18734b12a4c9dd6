"""Board view geometry: screen pixels to squares and back.

The board is drawn from the local player's side: White at the bottom
for the White player, flipped for Black. Also holds the layout of the
promotion prompt and the game-over menu so that drawing and hit-testing
use the same rectangles. Local only, never synced.
"""

from __future__ import annotations

import chess
import pygame

from src.config import (
    BOARD_SIZE_PX,
    MENU_BUTTON_GAP,
    MENU_BUTTON_HEIGHT,
    MENU_BUTTON_WIDTH,
    PROMOTION_EDGE_PAD,
    PROMOTION_HEIGHT_PAD,
    SQUARE_SIZE_PX,
)
from src.networking.protocol import PromotionPiece


class BoardView:
    """Maps between screen pixels and python-chess squares."""

    def __init__(self, flipped: bool = False, square_size: int = SQUARE_SIZE_PX) -> None:
        self.flipped = flipped
        self.square_size = square_size

    @property
    def size(self) -> int:
        return self.square_size * 8

    def screen_to_square(self, screen_x: int, screen_y: int) -> int | None:
        """Square under a screen position, or None if off the board."""
        if not (0 <= screen_x < self.size and 0 <= screen_y < self.size):
            return None
        col = screen_x // self.square_size
        row = screen_y // self.square_size
        if self.flipped:
            return chess.square(7 - col, row)
        return chess.square(col, 7 - row)

    def square_to_screen(self, square: int) -> tuple[int, int]:
        """Top-left pixel of a square."""
        file = chess.square_file(square)
        rank = chess.square_rank(square)
        if self.flipped:
            col, row = 7 - file, rank
        else:
            col, row = file, 7 - rank
        return (col * self.square_size, row * self.square_size)

    def square_center(self, square: int) -> tuple[int, int]:
        x, y = self.square_to_screen(square)
        half = self.square_size // 2
        return (x + half, y + half)


PROMOTION_ORDER = (
    PromotionPiece.KNIGHT,
    PromotionPiece.BISHOP,
    PromotionPiece.ROOK,
    PromotionPiece.QUEEN,
)


class PromotionPrompt:
    """Four promotion choices in a row, opened at the click position.

    The panel is shifted back inside the window if it would overflow.
    """

    def __init__(
        self,
        anchor: tuple[int, int],
        square_size: int = SQUARE_SIZE_PX,
        window_size: int = BOARD_SIZE_PX,
    ) -> None:
        width = square_size * 4 + 2 * PROMOTION_EDGE_PAD
        height = square_size + 2 * PROMOTION_HEIGHT_PAD
        x = min(anchor[0], window_size - width)
        y = min(anchor[1], window_size - height)
        self.rect = pygame.Rect(max(0, x), max(0, y), width, height)
        self.choice_rects = [
            pygame.Rect(
                self.rect.x + PROMOTION_EDGE_PAD + idx * square_size,
                self.rect.y + PROMOTION_HEIGHT_PAD,
                square_size,
                square_size,
            )
            for idx in range(len(PROMOTION_ORDER))
        ]

    def choice_at(self, screen_x: int, screen_y: int) -> PromotionPiece | None:
        """The piece whose box contains the point, or None outside all boxes."""
        for piece, rect in zip(PROMOTION_ORDER, self.choice_rects):
            if rect.collidepoint(screen_x, screen_y):
                return piece
        return None


class GameOverMenu:
    """Restart button above center, Quit button below."""

    def __init__(self, window_size: int = BOARD_SIZE_PX) -> None:
        x = window_size // 2 - MENU_BUTTON_WIDTH // 2
        y = window_size // 2
        diff = MENU_BUTTON_HEIGHT - MENU_BUTTON_GAP // 2
        self.restart_rect = pygame.Rect(x, y - diff, MENU_BUTTON_WIDTH, MENU_BUTTON_HEIGHT)
        self.quit_rect = pygame.Rect(x, y + diff, MENU_BUTTON_WIDTH, MENU_BUTTON_HEIGHT)

    def decision_at(self, screen_x: int, screen_y: int) -> bool | None:
        """True for restart, False for quit, None if no button was hit."""
        if self.restart_rect.collidepoint(screen_x, screen_y):
            return True
        if self.quit_rect.collidepoint(screen_x, screen_y):
            return False
        return None
