"""Logging setup."""

import sys

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSS}Z [{extra[service]}] {level}: {message}"

# Level names accepted in addition to loguru's own.
LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL", "PANIC": "CRITICAL"}


def configure_logging(level: str = "info", json_logs: bool = False, service: str = "alerts-handler") -> str:
    """Replace loguru's default sink with a single stdout sink.

    ``warn``, ``fatal`` and ``panic`` are accepted as aliases. Unknown level
    names fall back to INFO.

    Returns:
        The level name actually applied
    """
    requested = level.upper()
    level_name = LEVEL_ALIASES.get(requested, requested)
    known = True
    try:
        logger.level(level_name)
    except ValueError:
        level_name = "INFO"
        known = False

    logger.remove()
    logger.configure(extra={"service": service})
    if json_logs:
        logger.add(sys.stdout, level=level_name, serialize=True)
    else:
        logger.add(sys.stdout, level=level_name, format=LOG_FORMAT)

    if not known:
        logger.warning(f"Unknown log level {level!r}, using INFO")
    return level_name
