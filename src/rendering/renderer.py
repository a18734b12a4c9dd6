"""Board renderer: draws squares, highlights, pieces, and the promotion prompt.

Pieces are drawn as placeholder discs with their letter. Fonts are loaded
once into a Resources bundle and shared with the HUD.
"""

from __future__ import annotations

from dataclasses import dataclass

import chess
import pygame

from src.config import (
    COLOR_BLACK_PIECE,
    COLOR_BLACK_SELECTED,
    COLOR_BUTTON,
    COLOR_DARK_SQUARE,
    COLOR_LAST_MOVE,
    COLOR_LIGHT_SQUARE,
    COLOR_MOVABLE,
    COLOR_WHITE_PIECE,
    COLOR_WHITE_SELECTED,
    PIECE_RADIUS,
    TARGET_DOT_RADIUS,
)
from src.input.selection import SelectionPhase
from src.networking.protocol import Color
from src.rendering.board_view import PROMOTION_ORDER, BoardView, PromotionPrompt
from src.rendering.hud import HUD
from src.simulation.rules import PieceKind, RuleEngine, move_squares
from src.simulation.turns import TurnSynchronizer

PIECE_LETTERS = {
    PieceKind.PAWN: "P",
    PieceKind.KNIGHT: "N",
    PieceKind.BISHOP: "B",
    PieceKind.ROOK: "R",
    PieceKind.QUEEN: "Q",
    PieceKind.KING: "K",
}


@dataclass(frozen=True)
class Resources:
    """Process-wide presentation resources, loaded once after pygame.init()."""
    piece_font: pygame.font.Font
    text_font: pygame.font.Font
    large_font: pygame.font.Font
    title_font: pygame.font.Font


def load_resources() -> Resources:
    return Resources(
        piece_font=pygame.font.SysFont("monospace", PIECE_RADIUS, bold=True),
        text_font=pygame.font.SysFont("monospace", 20),
        large_font=pygame.font.SysFont("monospace", 40, bold=True),
        title_font=pygame.font.SysFont("monospace", 64, bold=True),
    )


class Renderer:
    """Draws the current game state to the screen."""

    def __init__(
        self,
        screen: pygame.Surface,
        view: BoardView,
        resources: Resources,
        rules: RuleEngine,
    ) -> None:
        self._screen = screen
        self._rules = rules
        self._view = view
        self._res = resources
        self._hud = HUD(screen, resources)

    @property
    def hud(self) -> HUD:
        return self._hud

    def draw(self, sync: TurnSynchronizer) -> None:
        """Draw one frame and flip the display."""
        self._draw_squares()
        if sync.last_move is not None:
            self._draw_last_move(sync.last_move)
        selector = sync.selector
        if selector.selected_square is not None:
            self._draw_selected(selector.selected_square, sync.board)
        self._draw_pieces(sync.board)
        if selector.phase is SelectionPhase.SQUARE_SELECTED:
            self._draw_targets(selector.targets(sync.legal_moves))
        if selector.phase is SelectionPhase.AWAITING_PROMOTION:
            self._draw_promotion_prompt(
                selector.promotion_anchor or (0, 0), self._rules.side_to_move(sync.board),
            )
        self._hud.draw(sync)
        pygame.display.flip()

    def _draw_squares(self) -> None:
        size = self._view.square_size
        for row in range(8):
            for col in range(8):
                color = COLOR_LIGHT_SQUARE if (row + col) % 2 == 0 else COLOR_DARK_SQUARE
                pygame.draw.rect(self._screen, color, (col * size, row * size, size, size))

    def _draw_last_move(self, move_str: str) -> None:
        size = self._view.square_size
        for square in move_squares(move_str):
            x, y = self._view.square_to_screen(square)
            pygame.draw.rect(self._screen, COLOR_LAST_MOVE, (x, y, size, size))

    def _draw_selected(self, square: int, board: chess.Board) -> None:
        if self._rules.side_to_move(board) is Color.WHITE:
            color = COLOR_WHITE_SELECTED
        else:
            color = COLOR_BLACK_SELECTED
        size = self._view.square_size
        x, y = self._view.square_to_screen(square)
        pygame.draw.rect(self._screen, color, (x, y, size, size))

    def _draw_pieces(self, board: chess.Board) -> None:
        for square in chess.SQUARES:
            piece = self._rules.piece_at(board, square)
            if piece is not None:
                kind, side = piece
                self._draw_piece(self._view.square_center(square), kind, side)

    def _draw_piece(self, center: tuple[int, int], kind: PieceKind, side: Color) -> None:
        if side is Color.WHITE:
            fill, ink = COLOR_WHITE_PIECE, COLOR_BLACK_PIECE
        else:
            fill, ink = COLOR_BLACK_PIECE, COLOR_WHITE_PIECE
        pygame.draw.circle(self._screen, fill, center, PIECE_RADIUS)
        pygame.draw.circle(self._screen, ink, center, PIECE_RADIUS, 2)
        text = self._res.piece_font.render(PIECE_LETTERS[kind], True, ink)
        self._screen.blit(text, text.get_rect(center=center))

    def _draw_targets(self, targets: set[int]) -> None:
        for square in targets:
            center = self._view.square_center(square)
            pygame.draw.circle(self._screen, COLOR_MOVABLE, center, TARGET_DOT_RADIUS)

    def _draw_promotion_prompt(self, anchor: tuple[int, int], side: Color) -> None:
        prompt = PromotionPrompt(anchor, self._view.square_size, self._view.size)
        pygame.draw.rect(self._screen, COLOR_BUTTON, prompt.rect, border_radius=15)
        for piece, rect in zip(PROMOTION_ORDER, prompt.choice_rects):
            self._draw_piece(rect.center, PieceKind(int(piece)), side)
