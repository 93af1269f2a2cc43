"""Logger configuration for the FitToday workout pipeline."""

import sys
from typing import Optional

from loguru import logger


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure loguru with a single stderr sink and an optional file sink.

    Library modules only emit records; sinks are set up by entry points such
    as the CLI.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to a log file
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=(
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level> {extra}"
        ),
        level=level.upper(),
        colorize=True,
    )

    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} - {message} {extra}",
            level=level.upper(),
            rotation="10 MB",
            retention="7 days",
            encoding="utf-8",
        )

    logger.debug(f"Logging configured (level={level.upper()})")
