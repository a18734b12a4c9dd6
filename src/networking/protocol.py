"""Network protocol definitions.

Defines the message types exchanged between the two peers and the
records they carry. These types are the shared contract between the
session layer, the codec, and the turn synchronizer.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class ProtocolError(Exception):
    """The peer sent something the protocol does not allow.

    Malformed or truncated frames, an unexpected message type, or an
    empty read during the handshake. Always fatal to the session.
    """


class MessageType(IntEnum):
    """Wire message types exchanged between peers."""
    START = 1  # Handshake request (joiner -> host) or agreement (host -> joiner)
    MOVE = 2   # One move, forfeit, or draw offer
    ACK = 3    # Answer to a draw offer


class Role(Enum):
    HOST = "host"  # listen and accept one connection
    JOIN = "join"  # connect to a known address


class Color(Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opposite(self) -> Color:
        return Color.BLACK if self is Color.WHITE else Color.WHITE


class PromotionPiece(IntEnum):
    """Promotion choices. Values match python-chess piece types."""
    KNIGHT = 2
    BISHOP = 3
    ROOK = 4
    QUEEN = 5

    @property
    def code(self) -> str:
        """Lower-case letter used as the fifth character of a move string."""
        return "nbrq"[self - PromotionPiece.KNIGHT]

    @classmethod
    def from_code(cls, code: str) -> PromotionPiece:
        try:
            return cls(PromotionPiece.KNIGHT + "nbrq".index(code))
        except ValueError:
            raise ValueError(f"Unknown promotion code: {code!r}") from None


Square = tuple[int, int]  # (file 0-7, rank index 0-7 counted from the eighth rank)


@dataclass(frozen=True, slots=True)
class Handshake:
    """Sent once in each direction during connection setup.

    The joiner sends its request; the host answers with the agreement,
    which is its own request with ``wants_white`` flipped for the joiner.
    """
    wants_white: bool
    name: str
    fen: str | None = None    # optional starting position
    time: int | None = None   # optional clock: seconds per side
    inc: int | None = None    # optional clock: increment per move


@dataclass(frozen=True, slots=True)
class Agreement:
    """Reconciled handshake outcome as seen by one side.

    Both peers hold identical fen/time/inc and complementary colors.
    Immutable for the lifetime of the session.
    """
    local_color: Color
    local_name: str
    peer_name: str
    fen: str | None = None
    time: int | None = None
    inc: int | None = None

    @property
    def peer_color(self) -> Color:
        return self.local_color.opposite


@dataclass(frozen=True, slots=True)
class MoveRecord:
    """A single move, or a forfeit, draw-offer or restart signal.

    Exactly one semantic action per record: a regular move carries
    squares (and optionally a promotion piece) with all flags clear;
    a signal sets exactly one flag and its squares are ignored.
    A restart record marks the end of the previous game on the stream.
    """
    from_square: Square = (0, 0)
    to_square: Square = (0, 0)
    promotion: PromotionPiece | None = None
    is_forfeit: bool = False
    is_draw_offer: bool = False
    is_restart: bool = False


@dataclass(frozen=True, slots=True)
class AckRecord:
    """Answer to a draw offer."""
    accepted: bool
