"""Shared helpers: logging setup and tolerant parsing of upstream values."""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Optional

from roster_tracker.config import LOG_LEVEL


def setup_logging(name: str | None = None, level: int | str = LOG_LEVEL) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (usually __name__ from the calling module)
        level: Logging level name or number (default: FT_LOG_LEVEL or INFO)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def to_number(value: Any, default: float = 0) -> float:
    """Return value if it is a finite real number (bools excluded), else default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return value


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an upstream ISO-8601 timestamp ('2025-03-01T18:00:00.000Z').

    Naive values are taken as UTC. Returns None for anything unparseable.
    """
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    if text.endswith('Z'):
        text = text[:-1] + '+00:00'
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
