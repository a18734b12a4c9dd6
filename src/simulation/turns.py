"""Turn synchronizer: keeps the local board in lockstep with the peer.

Owns the turn state. Exactly one side may originate the next move at any
instant: during the local turn, clicks are forwarded to the move
selector and a finalized move is sent to the peer and applied locally;
during the remote turn, the peer is polled for its move. Each
successfully applied move flips ownership unless the rule engine reports
a finished game.

Call update() once per frame. It never blocks.
"""

from __future__ import annotations

import logging
from enum import Enum, auto

import chess

from src.input.selection import MoveSelector
from src.networking.peer import MovePeer
from src.networking.protocol import AckRecord, Agreement, Color, MoveRecord, PromotionPiece
from src.simulation.rules import (
    GameStatus,
    MoveApplicationError,
    RuleEngine,
    move_from_record,
    record_from_move,
)

logger = logging.getLogger(__name__)


class TurnState(Enum):
    LOCAL_TURN = auto()
    REMOTE_TURN = auto()
    GAME_OVER = auto()


class GameOverReason(Enum):
    CHECKMATE = "Checkmate"
    DRAW = "Draw"
    FORFEIT = "Forfeit"


class TurnSynchronizer:
    """Turn-ownership state machine for one session.

    Attributes:
        agreement: The handshake outcome this game was set up from.
        selector: Local move entry; only fed while it is our turn.
        reason: Why the game ended, while in GAME_OVER.
        winner: Winning color, or None for a draw or a game in progress.
        last_move: The most recently applied move string, for highlighting.
        pending_draw_offer: The peer offered a draw we have not answered.
        awaiting_draw_answer: We offered a draw the peer has not answered.
        peer_restarted: The peer asked for a new game after game over.

    Restart is agreed over the wire: each side sends a restart record
    once its player picks Restart, and the new game starts only when both
    records have crossed. Anything the peer sent before its restart
    record belongs to the finished game and is discarded.
    """

    def __init__(
        self,
        peer: MovePeer,
        rules: RuleEngine,
        agreement: Agreement,
        selector: MoveSelector | None = None,
    ) -> None:
        self._peer = peer
        self._rules = rules
        self.agreement = agreement
        self.selector = selector if selector is not None else MoveSelector()
        self._start_game()

    def _start_game(self) -> None:
        self._board = self._rules.new_game(self.agreement.fen)
        self._legal_moves = self._rules.legal_moves(self._board)
        self.selector.reset()
        self.reason: GameOverReason | None = None
        self.winner: Color | None = None
        self.last_move: str | None = None
        self.pending_draw_offer = False
        self.awaiting_draw_answer = False
        self.peer_restarted = False
        self._restart_sent = False
        if self._rules.side_to_move(self._board) is self.agreement.local_color:
            self._state = TurnState.LOCAL_TURN
        else:
            self._state = TurnState.REMOTE_TURN
        logger.info("New game, %s to move: %s",
                    self._rules.side_to_move(self._board).value, self._state.name)
        # A custom start position may already be finished.
        self._check_status(self._state)

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def board(self) -> chess.Board:
        return self._board

    @property
    def legal_moves(self) -> set[str]:
        return self._legal_moves

    @property
    def awaiting_restart(self) -> bool:
        """We picked Restart and are waiting for the peer to do the same."""
        return self._restart_sent

    # --- Per-frame update ---

    def update(self) -> None:
        """Poll the peer for pending messages.

        During play, at most one move record is consumed per call. After
        game over, leftovers from the finished game are drained until the
        peer's restart record arrives.
        """
        if self._state is TurnState.GAME_OVER:
            self._drain_finished_game()
            return

        ack = self._peer.receive_ack()
        if ack is not None:
            self._on_draw_answer(ack)
            if self._state is TurnState.GAME_OVER:
                return

        record = self._peer.receive_move()
        if record is None:
            return
        if record.is_forfeit:
            logger.info("%s forfeited", self.agreement.peer_name)
            self._end_game(GameOverReason.FORFEIT, self.agreement.local_color)
        elif record.is_draw_offer:
            logger.info("%s offers a draw", self.agreement.peer_name)
            self.pending_draw_offer = True
        elif record.is_restart:
            raise MoveApplicationError("Peer restarted while the game is still in progress")
        elif self._state is TurnState.REMOTE_TURN:
            self._apply_remote(record)
        else:
            raise MoveApplicationError(f"Peer moved out of turn: {record}")

    def _drain_finished_game(self) -> None:
        while self._peer.receive_ack() is not None:
            logger.debug("Discarding ack from the finished game")
        while True:
            record = self._peer.receive_move()
            if record is None:
                return
            if record.is_restart:
                break
            logger.debug("Discarding %s from the finished game", record)

        logger.info("%s wants a new game", self.agreement.peer_name)
        self.peer_restarted = True
        if self._restart_sent:
            self._start_game()

    def _apply_remote(self, record: MoveRecord) -> None:
        try:
            move_str = move_from_record(record)
        except ValueError as e:
            raise MoveApplicationError(f"Bad move record {record}: {e}") from e
        # Moving on implicitly withdraws any draw offer still on the table.
        self.pending_draw_offer = False
        logger.debug("Applying remote move %s", move_str)
        self._apply(move_str, next_state=TurnState.LOCAL_TURN)

    # --- Local input ---

    def click_square(self, square: int, anchor: tuple[int, int] | None = None) -> None:
        """Forward a board click to the selector. Ignored unless it is our turn."""
        if self._state is not TurnState.LOCAL_TURN:
            return
        move_str = self.selector.click_square(square, self._legal_moves, anchor)
        if move_str is not None:
            self._commit_local(move_str)

    def choose_promotion(self, piece: PromotionPiece) -> None:
        """Resolve an open promotion prompt. Ignored unless it is our turn."""
        if self._state is not TurnState.LOCAL_TURN:
            return
        move_str = self.selector.choose_promotion(piece)
        if move_str is not None:
            self._commit_local(move_str)

    def _commit_local(self, move_str: str) -> None:
        if move_str not in self._legal_moves:
            raise MoveApplicationError(f"Selector produced illegal move {move_str!r}")
        if self.awaiting_draw_answer:
            # Moving withdraws our own offer.
            logger.info("Draw offer withdrawn by moving")
            self.awaiting_draw_answer = False
        self._peer.send_move(record_from_move(move_str))
        logger.debug("Sent local move %s", move_str)
        self._apply(move_str, next_state=TurnState.REMOTE_TURN)

    def _apply(self, move_str: str, next_state: TurnState) -> None:
        try:
            self._rules.apply(self._board, move_str)
        except MoveApplicationError:
            logger.error("Desync: could not apply %s at %s", move_str, self._board.fen())
            raise
        self._legal_moves = self._rules.legal_moves(self._board)
        self.last_move = move_str
        self.selector.reset()
        self._check_status(next_state)

    def _check_status(self, next_state: TurnState) -> None:
        status = self._rules.status(self._board)
        if status is GameStatus.CHECKMATE:
            self._end_game(GameOverReason.CHECKMATE, self._rules.side_to_move(self._board).opposite)
        elif status is GameStatus.DRAW:
            self._end_game(GameOverReason.DRAW, None)
        else:
            self._state = next_state

    # --- Signals ---

    def offer_draw(self) -> None:
        """Offer a draw to the peer. Only during our own turn, one at a time."""
        if self._state is not TurnState.LOCAL_TURN or self.awaiting_draw_answer:
            return
        self._peer.send_move(MoveRecord(is_draw_offer=True))
        self.awaiting_draw_answer = True
        logger.info("Offered a draw")

    def answer_draw_offer(self, accept: bool) -> None:
        if self._state is TurnState.GAME_OVER or not self.pending_draw_offer:
            return
        self._peer.send_ack(AckRecord(accepted=accept))
        self.pending_draw_offer = False
        logger.info("%s the draw offer", "Accepted" if accept else "Declined")
        if accept:
            self._end_game(GameOverReason.DRAW, None)

    def _on_draw_answer(self, ack: AckRecord) -> None:
        if not self.awaiting_draw_answer:
            # The answer crossed our move. An acceptance has already ended
            # the game on the peer's side, so it ends here too.
            if ack.accepted:
                logger.info("%s accepted a withdrawn draw offer", self.agreement.peer_name)
                self._end_game(GameOverReason.DRAW, None)
            else:
                logger.debug("Dropping late draw decline")
            return
        self.awaiting_draw_answer = False
        if ack.accepted:
            logger.info("%s accepted the draw", self.agreement.peer_name)
            self._end_game(GameOverReason.DRAW, None)
        else:
            logger.info("%s declined the draw", self.agreement.peer_name)

    def forfeit(self) -> None:
        if self._state is TurnState.GAME_OVER:
            return
        self._peer.send_move(MoveRecord(is_forfeit=True))
        logger.info("Forfeited")
        self._end_game(GameOverReason.FORFEIT, self.agreement.peer_color)

    def _end_game(self, reason: GameOverReason, winner: Color | None) -> None:
        self._state = TurnState.GAME_OVER
        self.reason = reason
        self.winner = winner
        self.selector.reset()
        self.pending_draw_offer = False
        self.awaiting_draw_answer = False
        logger.info("Game over: %s, winner %s", reason.value, winner.value if winner else "none")

    # --- Game over ---

    def restart(self) -> None:
        """Ask for a fresh game with the same agreement. Only after game over.

        The board is reset once the peer's restart record has arrived,
        which may already be the case.
        """
        if self._state is not TurnState.GAME_OVER or self._restart_sent:
            return
        self._peer.send_move(MoveRecord(is_restart=True))
        self._restart_sent = True
        if self.peer_restarted:
            self._start_game()
        else:
            logger.info("Waiting for %s to restart", self.agreement.peer_name)
