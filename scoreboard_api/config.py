# scoreboard_api/config.py
from __future__ import annotations

import os
from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        return default


# -------------------------
# Cricket rules (fixed)
# -------------------------
BALLS_PER_OVER: int = 6
MAX_WICKETS: int = 10

# -------------------------
# Scoring engine limits
# -------------------------
# Undo log size per match (oldest entries are evicted first)
HISTORY_LIMIT: int = _get_env_int("HISTORY_LIMIT", 50)

# Current-over display buffer (wides / no-balls can make an over long)
OVER_BUFFER_LIMIT: int = _get_env_int("OVER_BUFFER_LIMIT", 60)

# Format used when a match is created without totalOvers (T20)
DEFAULT_TOTAL_OVERS: int = _get_env_int("DEFAULT_TOTAL_OVERS", 20)

# -------------------------
# Logging
# -------------------------
LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO").upper()


def validate_config() -> None:
    if HISTORY_LIMIT <= 0:
        raise RuntimeError("HISTORY_LIMIT must be positive")

    # A full over plus extras has to fit in the display buffer
    if OVER_BUFFER_LIMIT < BALLS_PER_OVER:
        raise RuntimeError(f"OVER_BUFFER_LIMIT must be at least {BALLS_PER_OVER}")

    if DEFAULT_TOTAL_OVERS <= 0:
        raise RuntimeError("DEFAULT_TOTAL_OVERS must be positive")

    if LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
        raise RuntimeError(f"LOG_LEVEL must be a standard logging level, got {LOG_LEVEL!r}")
