# src/xpforge/config.py

"""Runtime settings read from the environment."""

import logging
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


# ===============================================
# Database
# ===============================================

# SQLite file for development; set to a postgresql+asyncpg URL in production
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./xpforge.db")

DB_ECHO = _env_flag("DB_ECHO")

# Pool sizing, ignored for SQLite
DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "20"))
DB_MAX_OVERFLOW = int(os.getenv("DB_MAX_OVERFLOW", "10"))
DB_POOL_RECYCLE = int(os.getenv("DB_POOL_RECYCLE", "3600"))

# Seconds a SQLite writer waits on another connection's write lock
DB_SQLITE_BUSY_TIMEOUT = float(os.getenv("DB_SQLITE_BUSY_TIMEOUT", "15"))


# ===============================================
# Rank rules
# ===============================================

# IANA zone whose calendar days bound the per-activity daily caps
RANK_TIMEZONE = os.getenv("RANK_TIMEZONE", "UTC")

# Number of ledger entries attached to a rank snapshot
RANK_HISTORY_LIMIT = int(os.getenv("RANK_HISTORY_LIMIT", "10"))


# ===============================================
# Server and logging
# ===============================================

API_HOST = os.getenv("API_HOST", "127.0.0.1")
API_PORT = int(os.getenv("API_PORT", "8000"))
API_RELOAD = _env_flag("API_RELOAD")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def get_rank_timezone() -> ZoneInfo:
    """Return the configured zone for daily-cap bookkeeping.

    An unknown zone name is a deployment error and fails loudly.
    """
    try:
        return ZoneInfo(RANK_TIMEZONE)
    except ZoneInfoNotFoundError:
        logger.error("Unknown RANK_TIMEZONE: %s", RANK_TIMEZONE)
        raise


def configure_logging() -> None:
    """Apply LOG_LEVEL to the xpforge logger tree."""
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("xpforge").setLevel(LOG_LEVEL)
