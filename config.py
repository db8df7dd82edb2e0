import logging
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    # Default to local SQLite, but allow override (e.g. Postgres)
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///earnings_analyzer.db")
    STORAGE_PREFIX = os.getenv("EARNINGS_STORAGE_PREFIX", "earningsAnalyzer_")
    DEFAULT_CURRENCY = os.getenv("EARNINGS_DEFAULT_CURRENCY", "₹")

    # Achievement thresholds
    HIGH_ROLLER_THRESHOLD = float(os.getenv("HIGH_ROLLER_THRESHOLD", "10000"))
    STREAK_TARGET = int(os.getenv("STREAK_TARGET", "7"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def configure_logging(level=None):
    """Apply a basic logging setup using ``LOG_LEVEL`` unless a level is given."""
    level = level or Config.LOG_LEVEL
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
