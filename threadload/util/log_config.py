"""
Logging configuration for the thread load monitor.

Provides centralized logging setup with clean, concise terminal output.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

DEFAULT_LEVEL = logging.INFO


def resolve_level(level: Union[int, str, None]) -> int:
    """
    Turn a level name ('debug', 'INFO') or number into a logging level.

    Unknown names fall back to DEFAULT_LEVEL.
    """
    if level is None:
        return DEFAULT_LEVEL
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else DEFAULT_LEVEL


def setup_logger(
    name: str,
    level: Union[int, str] = DEFAULT_LEVEL,
    log_file: Optional[Path] = None
) -> logging.Logger:
    """
    Configure and return a logger with consistent formatting.

    Args:
        name: Logger name (typically __name__)
        level: Logging level, as a number or a level name (default: INFO)
        log_file: Optional file path for log output

    Returns:
        Configured logger instance
    """
    level = resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(fmt='[%(levelname)s] %(message)s'))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            fmt='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        logger.addHandler(file_handler)

    logger.propagate = False

    return logger


def set_package_level(level: Union[int, str]) -> None:
    """Apply a level to every already-configured threadload logger and its handlers."""
    level = resolve_level(level)
    for name, candidate in logging.root.manager.loggerDict.items():
        if not name.startswith("threadload") or not isinstance(candidate, logging.Logger):
            continue
        candidate.setLevel(level)
        for handler in candidate.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(level)
