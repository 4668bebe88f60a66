"""Centralized logging configuration."""

import sys
from pathlib import Path
from loguru import logger

LOG_DIR = Path("logs")


def setup(debug: bool = False, log_dir: Path = LOG_DIR) -> None:
    """Configure loguru sinks for the sniper."""
    logger.remove()

    level = "DEBUG" if debug else "INFO"
    fmt = (
        "<dim>{time:HH:mm:ss.SSS}</dim> "
        "<level>{level: <8}</level> "
        "<cyan>{extra[component]: <10}</cyan> "
        "{message}"
    )

    logger.configure(extra={"component": "-"})

    # Console output
    logger.add(sys.stdout, format=fmt, level=level, colorize=True)

    # File output, always at debug so poll ticks can be reconstructed
    log_dir.mkdir(exist_ok=True)
    logger.add(
        log_dir / "sniper_{time:YYYY-MM-DD}.log",
        format=fmt,
        level="DEBUG",
        rotation="1 day",
        retention="7 days",
    )


def get(component: str):
    """Get a logger bound to a component name."""
    return logger.bind(component=component)
