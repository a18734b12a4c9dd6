"""Input handler: converts PyGame events into turn synchronizer calls.

Left click: select a square, pick a move target, choose a promotion
piece, or press a game-over menu button, depending on the current state.
Keys: D offers a draw, F forfeits, Y / N answer the peer's draw offer.
"""

from __future__ import annotations

import pygame

from src.input.selection import SelectionPhase
from src.rendering.board_view import BoardView, GameOverMenu, PromotionPrompt
from src.simulation.turns import TurnState, TurnSynchronizer


class InputHandler:
    """Routes mouse and keyboard events to the turn synchronizer."""

    def __init__(self, view: BoardView, menu: GameOverMenu | None = None) -> None:
        self._view = view
        self._menu = menu if menu is not None else GameOverMenu(view.size)

    def process_events(self, events: list[pygame.event.Event], sync: TurnSynchronizer) -> bool:
        """Handle this frame's events. Returns False if the player chose Quit."""
        for event in events:
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                if not self._handle_click(event.pos, sync):
                    return False

            elif event.type == pygame.KEYDOWN and event.key == pygame.K_d:
                sync.offer_draw()

            elif event.type == pygame.KEYDOWN and event.key == pygame.K_f:
                sync.forfeit()

            elif event.type == pygame.KEYDOWN and event.key == pygame.K_y:
                sync.answer_draw_offer(True)

            elif event.type == pygame.KEYDOWN and event.key == pygame.K_n:
                sync.answer_draw_offer(False)

        return True

    def _handle_click(self, pos: tuple[int, int], sync: TurnSynchronizer) -> bool:
        x, y = pos
        if sync.state is TurnState.GAME_OVER:
            decision = self._menu.decision_at(x, y)
            if decision is False:
                return False
            if decision:
                sync.restart()
            return True

        selector = sync.selector
        if selector.phase is SelectionPhase.AWAITING_PROMOTION:
            # Clicks outside the four choices leave the prompt open.
            prompt = PromotionPrompt(selector.promotion_anchor or (0, 0), self._view.square_size,
                                     self._view.size)
            piece = prompt.choice_at(x, y)
            if piece is not None:
                sync.choose_promotion(piece)
            return True

        square = self._view.screen_to_square(x, y)
        if square is not None:
            sync.click_square(square, anchor=pos)
        return True
