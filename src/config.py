"""Shared constants for the chess duel client. All process-wide configuration lives here."""

# --- Display ---
BOARD_SQUARES = 8
SQUARE_SIZE_PX = 96
BOARD_SIZE_PX = BOARD_SQUARES * SQUARE_SIZE_PX  # window is exactly the board
FPS = 60
WINDOW_TITLE = "Chess Duel"

# --- Board colors (RGB) ---
COLOR_LIGHT_SQUARE = (0xEB, 0xEC, 0xD0)
COLOR_DARK_SQUARE = (0x77, 0x95, 0x56)
COLOR_MOVABLE = (0xCD, 0xCD, 0xB4)            # legal-target dots
COLOR_WHITE_SELECTED = (0xF5, 0xF5, 0x80)     # selected square, White to move
COLOR_BLACK_SELECTED = (0xB9, 0xCA, 0x42)     # selected square, Black to move
COLOR_LAST_MOVE = (0xF6, 0xEB, 0x72)
COLOR_WHITE_PIECE = (245, 245, 240)
COLOR_BLACK_PIECE = (40, 40, 40)
COLOR_NAME_TEXT = (100, 149, 237)             # cornflower blue
COLOR_STATUS_TEXT = (30, 30, 30)
COLOR_OVERLAY = (0, 0, 0, 0x55)
COLOR_BUTTON = (245, 245, 245)
COLOR_RESULT_TEXT = (200, 122, 255)

# --- Piece rendering ---
PIECE_RADIUS = SQUARE_SIZE_PX * 3 // 8
TARGET_DOT_RADIUS = SQUARE_SIZE_PX // 5

# --- Promotion prompt ---
PROMOTION_EDGE_PAD = 25
PROMOTION_HEIGHT_PAD = 10

# --- Game-over menu ---
MENU_BUTTON_WIDTH = 300
MENU_BUTTON_HEIGHT = 100
MENU_BUTTON_GAP = 50

# --- Networking ---
DEFAULT_PORT = 8384
RECV_CHUNK_SIZE = 4096
MAX_PAYLOAD_SIZE = 0xFFFF  # 2-byte length header
MAX_CLOCK_SECONDS = 0xFFFFFFFF  # u32 clock fields
LISTEN_BACKLOG = 1

# --- Session ---
DEFAULT_HOST_NAME = "host"
DEFAULT_JOIN_NAME = "guest"
MAX_NAME_BYTES = 64  # UTF-8 encoded
