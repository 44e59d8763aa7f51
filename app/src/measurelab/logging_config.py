"""
Logging setup for the measurelab package.

Usage:
    from measurelab.logging_config import setup_logging, get_logger

    setup_logging(level=logging.DEBUG)
    logger = get_logger(__name__)
    logger.info("Measurement finalized", extra={"measurement_id": mid})
"""
from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

PACKAGE_LOGGER = "measurelab"

_RESERVED_KEYS = {
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'asctime', 'taskName',
}


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter: [TIME] LEVEL logger: message [extra_key=value ...]"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True, show_extra: bool = True):
        super().__init__()
        self.use_colors = use_colors
        self.show_extra = show_extra

    def format(self, record: logging.LogRecord) -> str:
        time_str = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level_str = f"{self.COLORS[level]}{level:8}{self.COLORS['RESET']}"
        else:
            level_str = f"{level:8}"

        logger_name = record.name
        prefix = PACKAGE_LOGGER + "."
        if logger_name.startswith(prefix):
            logger_name = logger_name[len(prefix):]

        extra_str = ""
        if self.show_extra:
            extras = []
            for key, value in record.__dict__.items():
                if key in _RESERVED_KEYS:
                    continue
                if isinstance(value, float):
                    extras.append(f"{key}={value:.3g}")
                elif isinstance(value, (list, tuple, set)) and len(value) > 3:
                    extras.append(f"{key}=[...{len(value)} items]")
                else:
                    extras.append(f"{key}={value}")
            if extras:
                extra_str = " [" + ", ".join(extras) + "]"

        result = f"[{time_str}] {level_str} {logger_name}: {record.getMessage()}{extra_str}"
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


def setup_logging(
    level: int = logging.INFO,
    console: bool = True,
    use_colors: bool = True,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Configure the package logger with a console and optional file handler."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(Path(log_file), encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(ConsoleFormatter(use_colors=False))
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
