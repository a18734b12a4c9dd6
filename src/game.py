"""Game controller and cooperative polling loop.

One loop iteration: handle window events, feed input to the turn
synchronizer during the local turn, poll the peer during the remote
turn, draw. Nothing in the loop blocks.
"""

from __future__ import annotations

import logging

import pygame

from src.config import FPS
from src.input.handler import InputHandler
from src.networking.peer import MovePeer
from src.networking.protocol import Agreement, Color
from src.rendering.board_view import BoardView
from src.rendering.renderer import Renderer, Resources
from src.simulation.rules import RuleEngine
from src.simulation.turns import TurnSynchronizer

logger = logging.getLogger(__name__)


class Game:
    """Main game controller. Owns the synchronizer, input, and rendering."""

    def __init__(
        self,
        screen: pygame.Surface,
        peer: MovePeer,
        agreement: Agreement,
        resources: Resources,
    ) -> None:
        self._screen = screen
        self._peer = peer
        self._clock = pygame.time.Clock()

        rules = RuleEngine()
        self._sync = TurnSynchronizer(peer, rules, agreement)

        view = BoardView(flipped=agreement.local_color is Color.BLACK)
        self._renderer = Renderer(screen, view, resources, rules)
        self._input = InputHandler(view, self._renderer.hud.menu)

    @property
    def sync(self) -> TurnSynchronizer:
        return self._sync

    def run(self) -> None:
        """Main game loop. Returns when the window closes or the player quits.

        I/O, protocol, and desync errors propagate to the caller; the
        connection is closed and not re-established.
        """
        running = True
        try:
            while running:
                events = pygame.event.get()
                for event in events:
                    if event.type == pygame.QUIT:
                        running = False
                    elif event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                        running = False

                if not running:
                    break

                if not self._input.process_events(events, self._sync):
                    logger.info("Player quit")
                    break

                self._sync.update()
                self._renderer.draw(self._sync)
                self._clock.tick(FPS)
        finally:
            self._peer.close()
