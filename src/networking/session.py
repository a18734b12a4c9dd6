"""Session protocol over a TCP transport.

Performs the one-time blocking handshake, then exchanges framed move and
ack messages in non-blocking poll mode. Frames are reassembled from the
stream, so one logical message never depends on one read call.
"""

from __future__ import annotations

import logging
from collections import deque

from src.networking.peer import MovePeer
from src.networking.protocol import (
    AckRecord,
    Agreement,
    Color,
    Handshake,
    MessageType,
    MoveRecord,
    ProtocolError,
    Role,
)
from src.networking.serialization import (
    FrameDecoder,
    decode_ack,
    decode_handshake,
    decode_move,
    encode_ack,
    encode_handshake,
    encode_message,
    encode_move,
)
from src.networking.transport import Transport

logger = logging.getLogger(__name__)


def reconcile(host_request: Handshake, joiner_request: Handshake) -> Handshake:
    """Build the agreement the host sends back to the joiner.

    The host's color preference is authoritative; the joiner gets the
    opposite color. Every other field comes from the host's request.
    """
    if joiner_request.wants_white == host_request.wants_white:
        logger.info(
            "Peer %r also asked for %s; host preference wins",
            joiner_request.name, "White" if joiner_request.wants_white else "Black",
        )
    return Handshake(
        wants_white=not host_request.wants_white,
        name=host_request.name,
        fen=host_request.fen,
        time=host_request.time,
        inc=host_request.inc,
    )


class Session(MovePeer):
    """One direct game session with a single peer."""

    def __init__(self, transport: Transport) -> None:
        self._transport = transport
        self._decoder = FrameDecoder()
        self._moves: deque[MoveRecord] = deque()
        self._acks: deque[AckRecord] = deque()
        self._agreement: Agreement | None = None
        self._poll_mode_set = False
        self._blocking = True

    @property
    def role(self) -> Role:
        return self._transport.role

    @property
    def agreement(self) -> Agreement | None:
        return self._agreement

    # --- Handshake ---

    def establish(self, request: Handshake) -> Agreement:
        """Open the connection and agree on colors and game parameters.

        Host: accept a peer, read its request, send back the agreement,
        and keep its own request. Joiner: connect, send its request, and
        take the host's agreement verbatim.

        Raises ConnectionError if the connection cannot be made and
        ProtocolError if the peer's handshake is empty or malformed.
        """
        if self._agreement is not None:
            raise RuntimeError("Session is already established")

        self._transport.open()
        self._transport.set_blocking(True)

        if self.role is Role.HOST:
            peer_request = self._read_handshake()
            reply = reconcile(request, peer_request)
            self._transport.write(encode_message(MessageType.START, encode_handshake(reply)))
            agreement = Agreement(
                local_color=Color.WHITE if request.wants_white else Color.BLACK,
                local_name=request.name,
                peer_name=peer_request.name,
                fen=request.fen,
                time=request.time,
                inc=request.inc,
            )
        else:
            self._transport.write(encode_message(MessageType.START, encode_handshake(request)))
            reply = self._read_handshake()
            agreement = Agreement(
                local_color=Color.WHITE if reply.wants_white else Color.BLACK,
                local_name=request.name,
                peer_name=reply.name,
                fen=reply.fen,
                time=reply.time,
                inc=reply.inc,
            )

        self._agreement = agreement
        logger.info(
            "Session established: %s plays %s against %s",
            agreement.local_name, agreement.local_color.value, agreement.peer_name,
        )
        return agreement

    def _read_handshake(self) -> Handshake:
        """Blocking-read exactly one START frame."""
        while True:
            frame = self._next_frame()
            if frame is not None:
                break
            data = self._transport.read_blocking()
            if not data:
                raise ProtocolError("Connection closed during handshake")
            self._decoder.feed(data)

        msg_type, payload = frame
        if msg_type != MessageType.START:
            raise ProtocolError(f"Expected a handshake, got {msg_type.name}")
        try:
            return decode_handshake(payload)
        except ValueError as e:
            raise ProtocolError(str(e)) from e

    def _next_frame(self) -> tuple[MessageType, bytes] | None:
        try:
            return next(self._decoder.frames(), None)
        except ValueError as e:
            raise ProtocolError(f"Malformed frame: {e}") from e

    def set_poll_mode(self, blocking: bool) -> None:
        """Switch from the blocking handshake into gameplay polling.

        Called exactly once, right after establish().
        """
        if self._agreement is None:
            raise RuntimeError("set_poll_mode() before establish()")
        if self._poll_mode_set:
            raise RuntimeError("Poll mode can only be set once per session")
        self._transport.set_blocking(blocking)
        self._blocking = blocking
        self._poll_mode_set = True

    # --- Gameplay ---

    def send_move(self, record: MoveRecord) -> None:
        self._require_established()
        self._transport.write(encode_message(MessageType.MOVE, encode_move(record)))
        logger.debug("Sent %s", record)

    def receive_move(self) -> MoveRecord | None:
        self._require_established()
        if not self._moves:
            self._pump()
        record = self._moves.popleft() if self._moves else None
        if record is not None:
            logger.debug("Received %s", record)
        return record

    def send_ack(self, ack: AckRecord) -> None:
        self._require_established()
        self._transport.write(encode_message(MessageType.ACK, encode_ack(ack)))
        logger.debug("Sent %s", ack)

    def receive_ack(self) -> AckRecord | None:
        self._require_established()
        if not self._acks:
            self._pump()
        ack = self._acks.popleft() if self._acks else None
        if ack is not None:
            logger.debug("Received %s", ack)
        return ack

    def close(self) -> None:
        self._transport.close()

    def _pump(self) -> None:
        """Read what the transport has and sort complete frames into inboxes.

        Would-block is not an error and leaves the inboxes unchanged.
        """
        if self._blocking:
            data = self._transport.read_blocking()
            if not data:
                raise ConnectionError("Peer closed the connection")
        else:
            data = self._transport.read_available()
        self._decoder.feed(data)

        while True:
            frame = self._next_frame()
            if frame is None:
                break
            msg_type, payload = frame
            try:
                if msg_type == MessageType.MOVE:
                    self._moves.append(decode_move(payload))
                elif msg_type == MessageType.ACK:
                    self._acks.append(decode_ack(payload))
                else:
                    raise ProtocolError(f"Unexpected {msg_type.name} message during play")
            except ValueError as e:
                raise ProtocolError(f"Malformed {msg_type.name} message: {e}") from e

    def _require_established(self) -> None:
        if self._agreement is None:
            raise RuntimeError("Session is not established")
