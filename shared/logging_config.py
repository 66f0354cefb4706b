"""Logging setup: quiet console on stderr, optional detailed rotating log file."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 1024 * 1024  # 1 MB
DEFAULT_BACKUP_COUNT = 3
DEFAULT_FILE_LEVEL = "INFO"


def resolve_level(level: str | int, default: int = logging.WARNING) -> int:
    """Level name (any case) or number to a logging level; unknown names give ``default``."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).upper())
    return value if isinstance(value, int) else default


def setup_logging(
    name: str,
    level: str | int = "WARNING",
    log_file: str | Path | None = None,
    file_level: str | int = DEFAULT_FILE_LEVEL,
    stream: object = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> logging.Logger:
    """
    Configure the named logger.

    The console handler writes to ``stream`` (stderr by default) at ``level``
    so it never mixes with the progress lines printed on stdout. When
    ``log_file`` is given, a rotating file handler records at ``file_level``,
    which is usually more detailed than the console: a normal run keeps the
    terminal quiet but still leaves the commands it ran in the log.

    Returns:
        Configured logger instance
    """
    console_level = resolve_level(level)
    handlers = []

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(console_level)
    handlers.append(console_handler)

    if log_file:
        log_path = Path(log_file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(resolve_level(file_level, default=logging.INFO))
        handlers.append(file_handler)

    formatter = logging.Formatter(DEFAULT_LOG_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
    logger = logging.getLogger(name)
    # Reconfiguring must not stack handlers
    logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # The logger passes everything either handler wants
    logger.setLevel(min(handler.level for handler in handlers))
    logger.propagate = False

    return logger
