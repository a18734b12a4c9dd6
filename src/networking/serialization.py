"""Binary serialization for handshake, move, and ack messages.

All encoding uses struct for a compact, deterministic binary format.
Network byte order (big-endian) throughout.

Wire format for a full message:
    [msg_type:u8][payload_len:u16][payload:bytes]

START payload:
    [wants_white:u8][flags:u8][name_len:u16][name:utf-8]
    [fen_len:u16][fen:ascii]   if flags & HAS_FEN
    [time:u32]                 if flags & HAS_TIME
    [inc:u32]                  if flags & HAS_INC

MOVE payload:
    [from_file:u8][from_rank:u8][to_file:u8][to_rank:u8][promotion:u8][flags:u8]

ACK payload:
    [accepted:u8]
"""

from __future__ import annotations

import struct
from collections.abc import Iterator

from src.config import MAX_PAYLOAD_SIZE
from src.networking.protocol import (
    AckRecord,
    Handshake,
    MessageType,
    MoveRecord,
    PromotionPiece,
)


# --- Message framing ---

MSG_HEADER = struct.Struct("!BH")  # msg_type (u8), payload_len (u16)


def encode_message(msg_type: MessageType, payload: bytes) -> bytes:
    """Wrap a payload in a message frame."""
    if len(payload) > MAX_PAYLOAD_SIZE:
        raise ValueError(f"Payload too large: {len(payload)} bytes")
    return MSG_HEADER.pack(msg_type, len(payload)) + payload


def decode_message(data: bytes) -> tuple[MessageType, bytes]:
    """Unwrap a single message frame into (type, payload).

    Raises ValueError if the data is too short, malformed, or carries
    trailing bytes past the declared payload.
    """
    if len(data) < MSG_HEADER.size:
        raise ValueError("Message too short")
    msg_type_raw, payload_len = MSG_HEADER.unpack_from(data)
    msg_type = MessageType(msg_type_raw)
    payload = data[MSG_HEADER.size:MSG_HEADER.size + payload_len]
    if len(payload) < payload_len:
        raise ValueError("Payload truncated")
    if len(data) > MSG_HEADER.size + payload_len:
        raise ValueError("Trailing bytes after payload")
    return msg_type, payload


class FrameDecoder:
    """Reassembles frames from a byte stream.

    A stream may split one frame across several reads or deliver several
    frames in one read; feed() accepts whatever arrived and frames()
    yields every frame that is now complete, in order.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, data: bytes) -> None:
        self._buffer.extend(data)

    @property
    def pending_bytes(self) -> int:
        return len(self._buffer)

    def frames(self) -> Iterator[tuple[MessageType, bytes]]:
        """Yield complete (type, payload) frames.

        Raises ValueError on an unknown message type. The offending frame
        is consumed so the error is raised only once.
        """
        while len(self._buffer) >= MSG_HEADER.size:
            msg_type_raw, payload_len = MSG_HEADER.unpack_from(self._buffer)
            end = MSG_HEADER.size + payload_len
            if len(self._buffer) < end:
                return
            payload = bytes(self._buffer[MSG_HEADER.size:end])
            del self._buffer[:end]
            yield MessageType(msg_type_raw), payload


# --- Handshake ---

START_HEADER = struct.Struct("!BB")  # wants_white (u8), presence flags (u8)
STR_LEN = struct.Struct("!H")
CLOCK_FIELD = struct.Struct("!I")

HAS_FEN = 0x01
HAS_TIME = 0x02
HAS_INC = 0x04


def _pack_str(value: str, encoding: str) -> bytes:
    raw = value.encode(encoding)
    return STR_LEN.pack(len(raw)) + raw


def _unpack_str(data: bytes, offset: int, encoding: str) -> tuple[str, int]:
    (length,) = STR_LEN.unpack_from(data, offset)
    offset += STR_LEN.size
    raw = data[offset:offset + length]
    if len(raw) < length:
        raise ValueError("String truncated")
    return raw.decode(encoding), offset + length


def encode_handshake(start: Handshake) -> bytes:
    """Encode a START payload.

    Raises ValueError if a field does not fit its wire width (a name or
    FEN longer than 65535 bytes, a clock value outside u32).
    """
    flags = 0
    if start.fen is not None:
        flags |= HAS_FEN
    if start.time is not None:
        flags |= HAS_TIME
    if start.inc is not None:
        flags |= HAS_INC

    try:
        parts = [
            START_HEADER.pack(int(start.wants_white), flags),
            _pack_str(start.name, "utf-8"),
        ]
        if start.fen is not None:
            parts.append(_pack_str(start.fen, "ascii"))
        if start.time is not None:
            parts.append(CLOCK_FIELD.pack(start.time))
        if start.inc is not None:
            parts.append(CLOCK_FIELD.pack(start.inc))
    except (struct.error, UnicodeEncodeError) as e:
        raise ValueError(f"Handshake field out of range: {e}") from e
    return b"".join(parts)


def decode_handshake(data: bytes) -> Handshake:
    """Decode a START payload. Raises ValueError on malformed data."""
    try:
        wants_white, flags = START_HEADER.unpack_from(data)
        offset = START_HEADER.size
        name, offset = _unpack_str(data, offset, "utf-8")
        fen = time = inc = None
        if flags & HAS_FEN:
            fen, offset = _unpack_str(data, offset, "ascii")
        if flags & HAS_TIME:
            (time,) = CLOCK_FIELD.unpack_from(data, offset)
            offset += CLOCK_FIELD.size
        if flags & HAS_INC:
            (inc,) = CLOCK_FIELD.unpack_from(data, offset)
            offset += CLOCK_FIELD.size
    except (struct.error, UnicodeDecodeError) as e:
        raise ValueError(f"Malformed handshake: {e}") from e
    if wants_white > 1:
        raise ValueError(f"Invalid color byte: {wants_white}")
    if offset != len(data):
        raise ValueError("Trailing bytes in handshake")
    return Handshake(wants_white=bool(wants_white), name=name, fen=fen, time=time, inc=inc)


# --- Move ---

MOVE_FMT = struct.Struct("!BBBBBB")  # from(2 x u8), to(2 x u8), promotion(u8), flags(u8)

FLAG_FORFEIT = 0x01
FLAG_DRAW_OFFER = 0x02
FLAG_RESTART = 0x04
KNOWN_FLAGS = FLAG_FORFEIT | FLAG_DRAW_OFFER | FLAG_RESTART


def encode_move(record: MoveRecord) -> bytes:
    flags = 0
    if record.is_forfeit:
        flags |= FLAG_FORFEIT
    if record.is_draw_offer:
        flags |= FLAG_DRAW_OFFER
    if record.is_restart:
        flags |= FLAG_RESTART
    promotion = int(record.promotion) if record.promotion is not None else 0
    return MOVE_FMT.pack(*record.from_square, *record.to_square, promotion, flags)


def decode_move(data: bytes) -> MoveRecord:
    """Decode a MOVE payload. Raises ValueError on malformed data."""
    if len(data) != MOVE_FMT.size:
        raise ValueError(f"Move payload must be {MOVE_FMT.size} bytes, got {len(data)}")
    from_file, from_rank, to_file, to_rank, promotion, flags = MOVE_FMT.unpack(data)
    if max(from_file, from_rank, to_file, to_rank) > 7:
        raise ValueError("Square coordinate out of range")
    if flags & ~KNOWN_FLAGS:
        raise ValueError(f"Unknown move flags: {flags:#04x}")
    if bin(flags).count("1") > 1:
        raise ValueError(f"Move carries more than one signal: {flags:#04x}")
    return MoveRecord(
        from_square=(from_file, from_rank),
        to_square=(to_file, to_rank),
        promotion=PromotionPiece(promotion) if promotion else None,
        is_forfeit=bool(flags & FLAG_FORFEIT),
        is_draw_offer=bool(flags & FLAG_DRAW_OFFER),
        is_restart=bool(flags & FLAG_RESTART),
    )


# --- Ack ---

ACK_FMT = struct.Struct("!B")  # accepted (u8)


def encode_ack(ack: AckRecord) -> bytes:
    return ACK_FMT.pack(int(ack.accepted))


def decode_ack(data: bytes) -> AckRecord:
    if len(data) != ACK_FMT.size:
        raise ValueError(f"Ack payload must be {ACK_FMT.size} byte, got {len(data)}")
    (accepted,) = ACK_FMT.unpack(data)
    if accepted > 1:
        raise ValueError(f"Invalid ack byte: {accepted}")
    return AckRecord(accepted=bool(accepted))
