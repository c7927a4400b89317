#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging configuration for the Codeur Prospection Bot.

Console logging is always on; a size-rotating file handler is added when a
log file is configured. Records can be emitted as plain text or JSON.
"""

import os
import sys
import json
import logging
from logging.handlers import RotatingFileHandler
from typing import Optional, Dict, Any, Union

# Default log levels
DEFAULT_CONSOLE_LEVEL = logging.INFO
DEFAULT_FILE_LEVEL = logging.DEBUG

# Environment variable names
ENV_LOG_LEVEL = "LOG_LEVEL"
ENV_LOG_FILE_PATH = "LOG_FILE_PATH"
ENV_LOG_JSON = "LOG_JSON"

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s"

# Global logger registry to avoid duplicate handlers
_loggers: Dict[str, logging.Logger] = {}


def _resolve_level(level: Optional[Union[int, str]], default: int) -> int:
    if level is None:
        return default
    if isinstance(level, int):
        return level
    if level.upper() in LOG_LEVELS:
        return LOG_LEVELS[level.upper()]
    try:
        return int(level)
    except ValueError:
        return default


class LoggerConfig:
    """Configuration class for logger settings."""

    def __init__(
        self,
        name: str = "codeur_prospection",
        console_level: Optional[Union[int, str]] = None,
        file_level: Optional[Union[int, str]] = None,
        log_file: Optional[str] = None,
        max_bytes: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
        format_string: Optional[str] = None,
        json_logs: Optional[bool] = None,
        propagate: bool = False,
    ):
        """
        Initialize logger configuration.

        Args:
            name: Logger name
            console_level: Console logging level (int or string)
            file_level: File logging level (int or string)
            log_file: Path to log file (None means LOG_FILE_PATH, if set)
            max_bytes: Maximum file size before rotation
            backup_count: Number of rotated files to keep
            format_string: Custom log format string
            json_logs: Whether to format logs as JSON (None means LOG_JSON)
            propagate: Whether to propagate to parent loggers
        """
        self.name = name

        env_level = os.environ.get(ENV_LOG_LEVEL)
        self.console_level = _resolve_level(
            console_level if console_level is not None else env_level,
            DEFAULT_CONSOLE_LEVEL,
        )
        self.file_level = _resolve_level(
            file_level if file_level is not None else env_level,
            DEFAULT_FILE_LEVEL,
        )

        self.log_file = log_file or os.environ.get(ENV_LOG_FILE_PATH) or None
        self.max_bytes = max_bytes
        self.backup_count = backup_count
        self.format_string = format_string or DEFAULT_FORMAT

        if json_logs is None:
            json_logs = os.environ.get(ENV_LOG_JSON, "false").lower() == "true"
        self.json_logs = json_logs
        self.propagate = propagate


class JsonFormatter(logging.Formatter):
    """
    Formatter that outputs one JSON object per log record.
    """

    def __init__(
        self,
        fmt_dict: Optional[Dict[str, str]] = None,
        time_format: str = "%Y-%m-%d %H:%M:%S",
    ):
        super().__init__()
        self.fmt_dict = fmt_dict or {
            "timestamp": "asctime",
            "level": "levelname",
            "name": "name",
            "module": "module",
            "function": "funcName",
            "line": "lineno",
            "message": "message",
        }
        self.time_format = time_format

    def format(self, record: logging.LogRecord) -> str:
        record.asctime = self.formatTime(record, self.time_format)
        record.message = record.getMessage()

        log_record: Dict[str, Any] = {}
        for key, attribute in self.fmt_dict.items():
            if hasattr(record, attribute):
                log_record[key] = getattr(record, attribute)

        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_record, default=str)


def configure_logger(config: Optional[LoggerConfig] = None) -> logging.Logger:
    """
    Configure a logger with the specified settings.

    Args:
        config: Logger configuration (or None for default)

    Returns:
        Configured logger
    """
    if config is None:
        config = LoggerConfig()

    if config.name in _loggers:
        return _loggers[config.name]

    logger = logging.getLogger(config.name)
    logger.setLevel(min(config.console_level, config.file_level))
    logger.propagate = config.propagate

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    if config.json_logs:
        formatter: logging.Formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(config.format_string)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(config.console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.log_file:
        os.makedirs(os.path.dirname(os.path.abspath(config.log_file)), exist_ok=True)
        file_handler = RotatingFileHandler(
            config.log_file,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(config.file_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _loggers[config.name] = logger

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger by name.

    Loggers inside the package are children of the ``codeur_prospection``
    logger and share its handlers; anything else gets its own configuration.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    if name in _loggers:
        return _loggers[name]

    if name.startswith("codeur_prospection."):
        configure_logger(LoggerConfig(name="codeur_prospection"))
        logger = logging.getLogger(name)
        _loggers[name] = logger
        return logger

    return configure_logger(LoggerConfig(name=name))


def reset_loggers() -> None:
    """Drop every configured handler so the next call reconfigures them."""
    for logger in _loggers.values():
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)
    _loggers.clear()


def log_scraping_event(source: str, event_type: str, message: str, level: int = logging.INFO) -> None:
    """
    Log a scraping event.

    Args:
        source: Source being scraped
        event_type: Type of event (start, error, complete, etc.)
        message: Event description
        level: Logging level
    """
    logger = get_logger("codeur_prospection.scraping")
    logger.log(level, f"[{source}] [{event_type}] {message}")


def log_lifecycle_event(prospect_id: str, event_type: str, message: str, level: int = logging.INFO) -> None:
    """
    Log a prospect lifecycle event.

    Args:
        prospect_id: Prospect the event belongs to
        event_type: Type of event (created, contacted, etc.)
        message: Event description
        level: Logging level
    """
    logger = get_logger("codeur_prospection.lifecycle")
    logger.log(level, f"[{prospect_id}] [{event_type}] {message}")
