"""Logging configuration using Loguru."""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from engagerr.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | <magenta>{extra[content_id]}</magenta> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{line} | {extra[content_id]} - {message}"


def setup_logging(config: "LoggingConfig") -> None:
    """
    Configure Loguru sinks from the logging config section.

    Console output is always colourised text; the optional daily file sink
    rotates, compresses and (by default) writes one JSON record per line.
    """
    logger.remove()
    # Records logged without a bound content id still satisfy the formats
    logger.configure(extra={"module": "engagerr", "content_id": "-"})

    logger.add(sys.stderr, level=config.level, format=CONSOLE_FORMAT, colorize=True)

    if config.log_to_file:
        log_path = Path(config.log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path / "engagerr_{time:YYYY-MM-DD}.log",
            level=config.level,
            format=FILE_FORMAT,
            rotation=config.file_rotation,
            retention=config.file_retention,
            compression=config.compression,
            serialize=config.serialize,
            enqueue=True,
        )


def get_logger(name: str, content_id: str | None = None):
    """Get a logger for a module, optionally bound to one content item."""
    if content_id is None:
        return logger.bind(module=name)
    return logger.bind(module=name, content_id=content_id)
