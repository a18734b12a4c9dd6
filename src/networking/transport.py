"""TCP byte-stream transport.

One Transport class serves both roles: the host binds a listening socket
on construction and accepts exactly one peer in open(); the joiner
connects to a known address in open(). After that both ends behave
identically. Only the Session touches a Transport.
"""

from __future__ import annotations

import logging
import socket

from src.config import LISTEN_BACKLOG, RECV_CHUNK_SIZE
from src.networking.protocol import Role

logger = logging.getLogger(__name__)


class Transport:
    """A single bidirectional TCP connection."""

    def __init__(self, role: Role, address: tuple[str, int]) -> None:
        self.role = role
        self._address = address
        self._listener: socket.socket | None = None
        self._sock: socket.socket | None = None
        self._peer_closed = False

        if role is Role.HOST:
            try:
                self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
                self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
                self._listener.bind(address)
                self._listener.listen(LISTEN_BACKLOG)
            except OSError as e:
                self._close_listener()
                raise ConnectionError(f"Cannot listen on {address[0]}:{address[1]}: {e}") from e

    @property
    def listen_address(self) -> tuple[str, int]:
        """Bound (host, port) of the listening socket. Host role only."""
        if self._listener is None:
            raise RuntimeError("Transport is not listening")
        return self._listener.getsockname()[:2]

    @property
    def peer_address(self) -> tuple[str, int] | None:
        if self._sock is None:
            return None
        return self._sock.getpeername()[:2]

    def open(self) -> None:
        """Accept one inbound connection (host) or connect to the peer (joiner).

        Blocks until the connection is established. Raises ConnectionError
        if it cannot be.
        """
        if self._sock is not None:
            raise RuntimeError("Transport is already open")
        if self.role is Role.HOST:
            self._accept()
        else:
            self._connect()
        self._sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

    def _accept(self) -> None:
        host, port = self.listen_address
        logger.info("Waiting for a peer on %s:%d", host, port)
        try:
            self._sock, addr = self._listener.accept()
        except OSError as e:
            raise ConnectionError(f"Accept failed: {e}") from e
        finally:
            # One session per process; stop listening once the peer is in.
            self._close_listener()
        logger.info("Peer connected from %s:%d", addr[0], addr[1])

    def _connect(self) -> None:
        host, port = self._address
        logger.info("Connecting to %s:%d", host, port)
        try:
            self._sock = socket.create_connection((host, port))
        except OSError as e:
            raise ConnectionError(f"Cannot connect to {host}:{port}: {e}") from e
        logger.info("Connected to %s:%d", host, port)

    def set_blocking(self, blocking: bool) -> None:
        self._require_open().setblocking(blocking)

    def write(self, data: bytes) -> None:
        """Write one encoded message with a single send call.

        A short write is an error and is not retried.
        """
        sent = self._require_open().send(data)
        if sent != len(data):
            raise OSError(f"Short write: sent {sent} of {len(data)} bytes")

    def read_blocking(self) -> bytes:
        """One blocking read. Returns b"" if the peer closed the stream."""
        return self._require_open().recv(RECV_CHUNK_SIZE)

    def read_available(self) -> bytes:
        """Drain whatever is currently readable without blocking.

        Returns b"" when nothing is available (would-block). Raises
        ConnectionError once the peer has closed the stream and all
        earlier data has been handed out.
        """
        sock = self._require_open()
        if self._peer_closed:
            raise ConnectionError("Peer closed the connection")
        chunks: list[bytes] = []
        while True:
            try:
                chunk = sock.recv(RECV_CHUNK_SIZE)
            except BlockingIOError:
                break
            if not chunk:
                self._peer_closed = True
                if not chunks:
                    raise ConnectionError("Peer closed the connection")
                break
            chunks.append(chunk)
        return b"".join(chunks)

    def close(self) -> None:
        self._close_listener()
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def _close_listener(self) -> None:
        if self._listener is not None:
            self._listener.close()
            self._listener = None

    def _require_open(self) -> socket.socket:
        if self._sock is None:
            raise RuntimeError("Transport is not open")
        return self._sock
