"""Central configuration — network, playfield geometry, leaderboard timing."""
from pathlib import Path
import os

# ── Filesystem paths ──────────────────────────────────────────────────────────
ROOT = Path(__file__).parent.parent
STATIC_DIR = ROOT / "static"
INDEX_HTML = STATIC_DIR / "index.html"

# ── Network ───────────────────────────────────────────────────────────────────
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8080"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info").lower()

# ── Playfield ─────────────────────────────────────────────────────────────────
PLAYFIELD_WIDTH  = 600
PLAYFIELD_HEIGHT = 400
PLAYER_SIZE      = 20

# Highest legal coordinate on each axis (top-left corner of the player square)
MAX_X = PLAYFIELD_WIDTH - PLAYER_SIZE
MAX_Y = PLAYFIELD_HEIGHT - PLAYER_SIZE

# Inclusive spawn ranges — players start near the left edge
SPAWN_X_RANGE = (50, 149)
SPAWN_Y_RANGE = (50, 349)

# ── Player colours ────────────────────────────────────────────────────────────
# A colour whose R, G and B channels are all above this floor is "near-white"
COLOR_BRIGHTNESS_FLOOR = 200
COLOR_MAX_ATTEMPTS     = 32

# ── Leaderboard ───────────────────────────────────────────────────────────────
LEADERBOARD_SIZE             = 5
LEADERBOARD_INTERVAL_MS      = 3000
LEADERBOARD_WELCOME_DELAY_MS = 500
LEADERBOARD_ON_SCORE_CHANGE  = os.environ.get("LEADERBOARD_ON_SCORE_CHANGE", "0").lower() in ("1", "true", "yes")

# ── Outbound delivery ─────────────────────────────────────────────────────────
OUTBOX_MAX_PENDING = 256   # queued frames per connection before sends fail
