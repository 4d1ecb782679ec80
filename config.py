"""Application configuration — environment variables and derived constants.

Loads the Telegram token, command backend location, and polling knobs from
the environment via ``python-dotenv``.  All values are resolved at import
time so other modules can ``from config import …`` without repeated lookups.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import logging
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── core ─────────────────────────────────────────────────────────────────────
from core.logger import AlertorLogger

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

# ── Logger (used for startup diagnostics at the bottom of this module) ───────
logger = AlertorLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_int(name: str, default: int, minimum: int = 0) -> int:
    """Read a non-negative integer from the environment.

    Missing values use *default*; malformed or out-of-range values log a
    warning and fall back to *default* as well.
    """
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning("Invalid integer in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    if value < minimum:
        logger.warning("Out-of-range value in environment, using default", extra={"variable": name, "value": value, "default": default})
        return default
    return value


def _parse_log_level(name: str, default: str = "INFO") -> str:
    """Read a logging level name from the environment.

    Unknown names log a warning and fall back to *default*.
    """
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Invalid log level in environment, using default", extra={"variable": name, "value": raw, "default": default})
        return default
    return level


# ── Public constants ─────────────────────────────────────────────────────────

TELEGRAM_TOKEN: str | None = os.environ.get("TELEGRAM_TOKEN")
TELEGRAM_API_URL: str = os.environ.get("TELEGRAM_API_URL", "https://api.telegram.org").rstrip("/")
BASE_URL: str = f"{TELEGRAM_API_URL}/bot{TELEGRAM_TOKEN or ''}"
COMMAND_BACKEND_URL: str = os.environ.get("COMMAND_BACKEND_URL", "http://localhost:9090")
POLL_TIMEOUT: int = _parse_int("POLL_TIMEOUT", 60)
MAX_IN_FLIGHT: int = _parse_int("MAX_IN_FLIGHT", 0)
LOG_LEVEL: str = _parse_log_level("LOG_LEVEL")


# ── Startup diagnostics ─────────────────────────────────────────────────────

if TELEGRAM_TOKEN:
    logger.info("Config loaded — TELEGRAM_TOKEN is set, BASE_URL ready")
else:
    logger.warning("Config loaded — TELEGRAM_TOKEN is NOT set")

logger.info(
    "Command backend configured",
    extra={"command_backend_url": COMMAND_BACKEND_URL, "poll_timeout": POLL_TIMEOUT, "max_in_flight": MAX_IN_FLIGHT},
)
