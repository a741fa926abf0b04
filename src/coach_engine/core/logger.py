"""
Logging setup.

The package logs through loguru and is disabled on import. Applications
(the CLI, a service) call setup_logger() once to add sinks and turn
engine logging on.
"""

import sys
from pathlib import Path

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level> {extra}"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message} {extra}"


def setup_logger(
    level: str = "WARNING",
    log_file: str | Path | None = None,
    rotation: str = "10 MB",
) -> None:
    """Configure loguru with a stderr sink and an optional file sink.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a log file
        rotation: Log rotation size for the file sink (e.g. "10 MB")
    """
    logger.remove()
    logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level.upper(), colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_path, format=FILE_FORMAT, level=level.upper(), rotation=rotation)

    logger.enable("coach_engine")
    logger.debug(f"Logger initialized with level={level.upper()}")
