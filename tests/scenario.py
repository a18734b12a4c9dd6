"""Scenario test harness for two-peer match flow testing.

Wires two TurnSynchronizers together through a loopback peer pair and
provides a small declarative API for playing moves by clicks, letting
messages cross, and asserting that both boards agree.

Usage:
    m = Match()
    m.play("white", "e2e4")
    m.play("black", "e7e5")
    m.assert_turn("white")
    m.assert_in_sync()
"""

from __future__ import annotations

import chess

from src.networking.peer import MockMovePeer
from src.networking.protocol import Agreement, Color, PromotionPiece
from src.simulation.rules import RuleEngine, is_promotion, move_squares
from src.simulation.turns import GameOverReason, TurnState, TurnSynchronizer


class Match:
    """Two synchronizers, one per color, joined by MockMovePeer.pair()."""

    def __init__(self, fen: str | None = None) -> None:
        white_peer, black_peer = MockMovePeer.pair()
        rules = RuleEngine()
        self.sides: dict[str, TurnSynchronizer] = {
            "white": TurnSynchronizer(
                white_peer, rules,
                Agreement(Color.WHITE, "alice", "bob", fen=fen),
            ),
            "black": TurnSynchronizer(
                black_peer, rules,
                Agreement(Color.BLACK, "bob", "alice", fen=fen),
            ),
        }
        self.history: list[str] = []

    def __getitem__(self, side: str) -> TurnSynchronizer:
        return self.sides[side]

    def step(self) -> None:
        """One loop iteration on both ends."""
        for sync in self.sides.values():
            sync.update()

    def play(self, side: str, move_str: str) -> None:
        """Enter a move by clicks on ``side`` and let it reach the other end."""
        sync = self.sides[side]
        from_sq, to_sq = move_squares(move_str)
        sync.click_square(from_sq)
        sync.click_square(to_sq)
        if is_promotion(move_str):
            sync.choose_promotion(PromotionPiece.from_code(move_str[4]))
        self.history.append(move_str)
        self.step()
        assert sync.last_move == move_str, self._describe(
            f"{side} tried {move_str} but last move is {sync.last_move}",
        )

    def assert_turn(self, side: str) -> None:
        other = "black" if side == "white" else "white"
        assert self.sides[side].state is TurnState.LOCAL_TURN, self._describe(
            f"expected {side} to move",
        )
        assert self.sides[other].state is TurnState.REMOTE_TURN, self._describe(
            f"expected {other} to wait",
        )

    def assert_game_over(self, reason: GameOverReason, winner: Color | None) -> None:
        for name, sync in self.sides.items():
            assert sync.state is TurnState.GAME_OVER, self._describe(f"{name} still playing")
            assert sync.reason is reason, self._describe(f"{name} ended with {sync.reason}")
            assert sync.winner is winner, self._describe(f"{name} thinks {sync.winner} won")

    def assert_in_sync(self) -> None:
        white_fen = self.sides["white"].board.fen()
        black_fen = self.sides["black"].board.fen()
        assert white_fen == black_fen, self._describe("boards diverged")

    def _describe(self, problem: str) -> str:
        lines = [problem, f"  moves: {' '.join(self.history) or '(none)'}"]
        for name, sync in self.sides.items():
            lines.append(f"  {name}: {sync.state.name} {sync.board.fen()}")
        lines.append(str(chess.Board(self.sides["white"].board.fen())))
        return "\n".join(lines)
