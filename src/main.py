"""Chess duel entry point.

Usage:
    Host a game:    python -m src.main --host 8384
    Join a game:    python -m src.main --join 127.0.0.1:8384
    Host as Black:  python -m src.main --host 8384 --black
    Custom start:   python -m src.main --host 8384 --fen "8/4P3/8/8/8/8/k7/7K w - - 0 1"
"""

from __future__ import annotations

import argparse
import logging
import sys

import pygame

from src.config import (
    BOARD_SIZE_PX,
    DEFAULT_HOST_NAME,
    DEFAULT_JOIN_NAME,
    MAX_CLOCK_SECONDS,
    MAX_NAME_BYTES,
    WINDOW_TITLE,
)
from src.game import Game
from src.networking.protocol import Handshake, ProtocolError, Role
from src.networking.serialization import encode_handshake
from src.networking.session import Session
from src.networking.transport import Transport
from src.rendering.renderer import Resources, load_resources
from src.simulation.rules import MoveApplicationError, RuleEngine

logger = logging.getLogger(__name__)


def parse_address(addr: str) -> tuple[str, int]:
    """Split HOST:PORT. Raises ValueError if malformed."""
    parts = addr.rsplit(":", 1)
    if len(parts) != 2 or not parts[0]:
        raise ValueError(f"Invalid address: {addr}. Expected HOST:PORT")
    return parts[0], int(parts[1])


def clock_seconds(value: str) -> int:
    """argparse type for --time / --inc: a whole number of seconds that fits u32."""
    seconds = int(value)
    if not 0 <= seconds <= MAX_CLOCK_SECONDS:
        raise argparse.ArgumentTypeError(f"must be between 0 and {MAX_CLOCK_SECONDS}")
    return seconds


def display_name(value: str) -> str:
    if not value or len(value.encode("utf-8")) > MAX_NAME_BYTES:
        raise argparse.ArgumentTypeError(f"must be 1 to {MAX_NAME_BYTES} bytes of UTF-8")
    return value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chess Duel: two-player chess over a direct connection")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        "--host", type=int, metavar="PORT",
        help="Host a game on the given port and wait for the opponent",
    )
    group.add_argument(
        "--join", type=str, metavar="HOST:PORT",
        help="Join a game at HOST:PORT",
    )
    parser.add_argument(
        "--name", type=display_name, default=None,
        help="Display name shown to the opponent",
    )
    parser.add_argument(
        "--black", action="store_true",
        help="When hosting, ask to play Black instead of White",
    )
    parser.add_argument(
        "--fen", type=str, default=None,
        help="When hosting, start from this FEN position",
    )
    parser.add_argument(
        "--time", type=clock_seconds, default=None, metavar="SECONDS",
        help="When hosting, clock time per side",
    )
    parser.add_argument(
        "--inc", type=clock_seconds, default=None, metavar="SECONDS",
        help="When hosting, clock increment per move",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )
    return parser


def build_request(args: argparse.Namespace, role: Role) -> Handshake:
    """The local handshake request. The host proposes White unless --black."""
    if role is Role.HOST:
        return Handshake(
            wants_white=not args.black,
            name=args.name or DEFAULT_HOST_NAME,
            fen=args.fen,
            time=args.time,
            inc=args.inc,
        )
    return Handshake(wants_white=False, name=args.name or DEFAULT_JOIN_NAME)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    if args.host is not None:
        role = Role.HOST
        address = ("0.0.0.0", args.host)
    else:
        role = Role.JOIN
        try:
            address = parse_address(args.join)
        except ValueError as e:
            parser.error(str(e))
    if args.fen is not None:
        try:
            RuleEngine().new_game(args.fen)
        except ValueError as e:
            parser.error(f"Invalid --fen: {e}")
    request = build_request(args, role)
    try:
        encode_handshake(request)
    except ValueError as e:
        parser.error(str(e))

    pygame.init()
    screen = pygame.display.set_mode((BOARD_SIZE_PX, BOARD_SIZE_PX))
    pygame.display.set_caption(WINDOW_TITLE)
    resources = load_resources()

    try:
        _run(screen, resources, role, address, request)
    except (OSError, ProtocolError, MoveApplicationError) as e:
        logger.error("Session ended: %s", e)
        pygame.quit()
        sys.exit(1)

    pygame.quit()


def _run(
    screen: pygame.Surface,
    resources: Resources,
    role: Role,
    address: tuple[str, int],
    request: Handshake,
) -> None:
    """Blocking handshake, then the non-blocking game loop."""
    transport = Transport(role, address)
    session = Session(transport)
    if role is Role.HOST:
        host, port = transport.listen_address
        _draw_connecting(screen, resources, f"Listening on {host}:{port}...")
    else:
        _draw_connecting(screen, resources, f"Connecting to {address[0]}:{address[1]}...")

    try:
        agreement = session.establish(request)
    except Exception:
        session.close()
        raise
    session.set_poll_mode(blocking=False)

    try:
        game = Game(screen, session, agreement, resources)
    except ValueError as e:
        session.close()
        raise ProtocolError(f"Unusable start position {agreement.fen!r}: {e}") from e
    game.run()


def _draw_connecting(screen: pygame.Surface, resources: Resources, info: str) -> None:
    """Draw the waiting screen shown while the handshake blocks."""
    sw = screen.get_width()
    sh = screen.get_height()
    screen.fill((20, 20, 30))
    text = resources.large_font.render("Waiting for opponent...", True, (200, 200, 200))
    screen.blit(text, text.get_rect(center=(sw // 2, sh // 2)))
    sub_text = resources.text_font.render(info, True, (150, 150, 150))
    screen.blit(sub_text, sub_text.get_rect(center=(sw // 2, sh // 2 + 50)))
    pygame.display.flip()


if __name__ == "__main__":
    main()
