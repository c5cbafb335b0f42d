# config.py
# Game constants and runtime settings. Anything that may differ per deployment
# can be overridden through a GAME128_* environment variable.

import os

# ---------------- GAME RULES ----------------
BOARD_SIZE = 4                   # Fixed; other sizes are not supported
WIN_TILE = 128                   # Exact tile value that wins the game
HISTORY_LIMIT = 10               # Undo window, oldest entry evicted first
NEW_TILE_FOUR_PROBABILITY = 0.1  # Chance a spawned tile is a 4 instead of a 2

# ---------------- PERSISTENCE ----------------
STATE_KEY = "2048-game-state"
HISTORY_KEY = "2048-history"
SAVE_PATH = os.environ.get(
    "GAME128_SAVE_PATH",
    os.path.join(os.path.expanduser("~"), ".game128.json"),
)

# ---------------- SERVICE ----------------
RATE_LIMIT = os.environ.get("GAME128_RATE_LIMIT", "100/minute")
LOG_LEVEL = os.environ.get("GAME128_LOG_LEVEL", "WARNING").upper()
