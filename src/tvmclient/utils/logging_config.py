"""Logging configuration for the tvm command line."""

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .security import LogSanitizer, log_sanitizer

LOGGER_NAME = "tvmclient"


class LogLevel(str, Enum):
    """Log levels for configuration."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class LogFormat(str, Enum):
    """Log output formats."""

    SIMPLE = "simple"
    JSON = "json"


@dataclass
class LoggingConfig:
    """Configuration for logging system."""

    level: LogLevel = LogLevel.WARNING
    format_type: LogFormat = LogFormat.SIMPLE
    include_timestamps: bool = True


class SensitiveDataFilter(logging.Filter):
    """Filter to redact sensitive data from log records emitted by any logger."""

    def __init__(self, sanitizer: Optional[LogSanitizer] = None) -> None:
        super().__init__()
        self.sanitizer = sanitizer or log_sanitizer

    def filter(self, record: logging.LogRecord) -> bool:
        """
        Redact sensitive data in place.

        Returns:
            bool: Always True (we modify but don't filter out records)
        """
        if isinstance(record.msg, str):
            record.msg = self.sanitizer.sanitize(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = {
                    key: self.sanitizer.sanitize(value) if isinstance(value, str) else value
                    for key, value in record.args.items()
                }
            else:
                record.args = tuple(
                    self.sanitizer.sanitize(arg) if isinstance(arg, str) else arg
                    for arg in record.args
                )

        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured logging with JSON output."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def _build_formatter(config: LoggingConfig) -> logging.Formatter:
    if config.format_type == LogFormat.JSON:
        return StructuredFormatter()
    if config.include_timestamps:
        return logging.Formatter("[%(asctime)s] %(levelname)-8s - %(name)s - %(message)s")
    return logging.Formatter("%(levelname)-8s - %(name)s - %(message)s")


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Attach a redacting stderr handler to the package logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        config: Logging configuration, defaults to warnings in simple format

    Returns:
        The configured package logger
    """
    config = config or LoggingConfig()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, LogLevel(config.level).value))

    for handler in list(logger.handlers):
        if getattr(handler, "_tvm_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_formatter(config))
    handler.addFilter(SensitiveDataFilter())
    handler._tvm_handler = True
    logger.addHandler(handler)

    return logger
