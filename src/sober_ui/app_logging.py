"""Logging configuration helpers."""

import logging

_LEVELS = {"DEBUG", "INFO", "WARNING", "WARN", "ERROR"}


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger("sober_ui")
    logger.setLevel(_parse_level(level))
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def _parse_level(level: str) -> int:
    """Map a level name to a logging level, falling back to INFO."""
    normalized = level.strip().upper()
    if normalized not in _LEVELS:
        return logging.INFO
    if normalized == "WARN":
        return logging.WARNING
    return logging.getLevelName(normalized)
