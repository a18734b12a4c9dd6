"""Move peer interface and loopback implementation.

MovePeer is the contract between the turn synchronizer and the
networking layer. The synchronizer only ever talks to a MovePeer; the
real TCP session and the in-memory loopback both satisfy it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque

from src.networking.protocol import AckRecord, MoveRecord


class MovePeer(ABC):
    """Gameplay half of the session protocol.

    All receive methods are polls: they never block once the session is
    in non-blocking mode, and return None when nothing is available.
    """

    @abstractmethod
    def send_move(self, record: MoveRecord) -> None:
        """Send one move record. Raises OSError on I/O failure."""
        ...

    @abstractmethod
    def receive_move(self) -> MoveRecord | None:
        """Return the next move record from the peer, or None if none has arrived.

        Raises OSError (including ConnectionError) on genuine I/O failure.
        """
        ...

    @abstractmethod
    def send_ack(self, ack: AckRecord) -> None:
        """Send one ack record. Raises OSError on I/O failure."""
        ...

    @abstractmethod
    def receive_ack(self) -> AckRecord | None:
        """Return the next ack record from the peer, or None if none has arrived."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection."""
        ...


class MockMovePeer(MovePeer):
    """In-memory peer for tests.

    Two mock peers created with pair() deliver to each other's inboxes
    immediately. A lone mock peer drops what it sends into ``sent_moves``
    and ``sent_acks`` so tests can inspect them.
    """

    def __init__(self) -> None:
        self._moves: deque[MoveRecord] = deque()
        self._acks: deque[AckRecord] = deque()
        self._remote: MockMovePeer | None = None
        self._closed = False
        self.sent_moves: list[MoveRecord] = []
        self.sent_acks: list[AckRecord] = []

    @classmethod
    def pair(cls) -> tuple[MockMovePeer, MockMovePeer]:
        a, b = cls(), cls()
        a._remote = b
        b._remote = a
        return a, b

    def _check_open(self) -> None:
        if self._closed:
            raise ConnectionError("Mock peer is closed")

    def send_move(self, record: MoveRecord) -> None:
        self._check_open()
        self.sent_moves.append(record)
        if self._remote is not None:
            self._remote._moves.append(record)

    def receive_move(self) -> MoveRecord | None:
        self._check_open()
        return self._moves.popleft() if self._moves else None

    def send_ack(self, ack: AckRecord) -> None:
        self._check_open()
        self.sent_acks.append(ack)
        if self._remote is not None:
            self._remote._acks.append(ack)

    def receive_ack(self) -> AckRecord | None:
        self._check_open()
        return self._acks.popleft() if self._acks else None

    def close(self) -> None:
        self._closed = True

    def inject_move(self, record: MoveRecord) -> None:
        """Test helper: queue a move as if it came from the peer."""
        self._moves.append(record)

    def inject_ack(self, ack: AckRecord) -> None:
        """Test helper: queue an ack as if it came from the peer."""
        self._acks.append(ack)
