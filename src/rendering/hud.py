"""HUD rendering.

Draws player names (peer top-left, local bottom-left), the status line
(whose turn, draw offers), and the game-over overlay with Restart / Quit
buttons.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pygame

from src.config import (
    COLOR_BUTTON,
    COLOR_NAME_TEXT,
    COLOR_OVERLAY,
    COLOR_RESULT_TEXT,
    COLOR_STATUS_TEXT,
)
from src.rendering.board_view import GameOverMenu
from src.simulation.turns import GameOverReason, TurnState, TurnSynchronizer

if TYPE_CHECKING:
    from src.rendering.renderer import Resources

_MARGIN = 10


def status_text(sync: TurnSynchronizer) -> str:
    """One-line description of the game for the status bar."""
    if sync.state is TurnState.GAME_OVER:
        if sync.awaiting_restart:
            return f"Waiting for {sync.agreement.peer_name} to restart..."
        if sync.peer_restarted:
            return f"{sync.agreement.peer_name} wants a rematch"
        return result_text(sync)
    if sync.pending_draw_offer:
        return "Draw offered: Y to accept, N to decline"
    if sync.awaiting_draw_answer:
        return "Draw offered, waiting for answer..."
    if sync.state is TurnState.LOCAL_TURN:
        return "Your move"
    return f"Waiting for {sync.agreement.peer_name}..."


def result_text(sync: TurnSynchronizer) -> str:
    if sync.reason is None:
        return ""
    if sync.winner is None:
        return sync.reason.value
    if sync.reason is GameOverReason.FORFEIT:
        loser = sync.winner.opposite
        return f"{loser.value.capitalize()} forfeits"
    return f"{sync.reason.value}: {sync.winner.value.capitalize()} wins"


class HUD:
    """Draws names, status line, and the game-over menu."""

    def __init__(self, screen: pygame.Surface, resources: Resources) -> None:
        self._screen = screen
        self._res = resources
        self._menu = GameOverMenu(screen.get_width())
        self._overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        self._overlay.fill(COLOR_OVERLAY)

    @property
    def menu(self) -> GameOverMenu:
        return self._menu

    def draw(self, sync: TurnSynchronizer) -> None:
        if sync.state is TurnState.GAME_OVER:
            self._draw_game_over(sync)
        self._draw_names(sync)
        self._draw_status(sync)

    def _draw_names(self, sync: TurnSynchronizer) -> None:
        agreement = sync.agreement
        font = self._res.large_font
        peer = font.render(agreement.peer_name, True, COLOR_NAME_TEXT)
        self._screen.blit(peer, (_MARGIN, _MARGIN))
        local = font.render(agreement.local_name, True, COLOR_NAME_TEXT)
        self._screen.blit(local, (_MARGIN, self._screen.get_height() - _MARGIN - local.get_height()))

    def _draw_status(self, sync: TurnSynchronizer) -> None:
        text = self._res.text_font.render(status_text(sync), True, COLOR_STATUS_TEXT)
        rect = text.get_rect(topright=(self._screen.get_width() - _MARGIN, _MARGIN))
        self._screen.blit(text, rect)

    def _draw_game_over(self, sync: TurnSynchronizer) -> None:
        self._screen.blit(self._overlay, (0, 0))
        for label, rect in (("Restart", self._menu.restart_rect), ("Quit", self._menu.quit_rect)):
            pygame.draw.rect(self._screen, COLOR_BUTTON, rect, border_radius=30)
            text = self._res.large_font.render(label, True, (0, 0, 0))
            self._screen.blit(text, text.get_rect(center=rect.center))

        title = self._res.title_font.render(result_text(sync), True, COLOR_RESULT_TEXT)
        sw = self._screen.get_width()
        self._screen.blit(title, title.get_rect(center=(sw // 2, self._menu.restart_rect.top - 100)))
