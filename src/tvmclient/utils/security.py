"""Secure logging utilities that keep auth tokens and vended secrets out of logs."""

import logging
import re
import threading
from collections import OrderedDict
from typing import Any

REDACTED = "[REDACTED]"


class LogSanitizer:
    """
    Sanitization utilities for diagnostic output.

    Masks well-known sensitive field patterns as well as any literal
    value registered through :meth:`register_secret`.
    """

    SENSITIVE_PATTERNS = [
        (r"'(auth|auth_token|authorization)':\s*'[^']*'", r"'\1': '[REDACTED]'"),
        (r'"(auth|auth_token|authorization)":\s*"[^"]*"', r'"\1": "[REDACTED]"'),
        (r"'(secretAccessKey|sessionToken|resourceTokens)':\s*'[^']*'", r"'\1': '[REDACTED]'"),
        (r'"(secretAccessKey|sessionToken|resourceTokens)":\s*"[^"]*"', r'"\1": "[REDACTED]"'),
        (r"(authorization|auth_token):\s*[^,}\s]+", r"\1: [REDACTED]"),
        (r"(sig=)[^&\s\"']+", r"\1[REDACTED]"),
    ]

    # Values shorter than this are too ambiguous to mask literally
    MIN_SECRET_LENGTH = 4
    # Oldest registrations are forgotten beyond this many
    MAX_SECRETS = 64

    def __init__(self, max_secrets: int = MAX_SECRETS):
        self.max_secrets = max_secrets
        self._secrets: "OrderedDict[str, None]" = OrderedDict()
        self._lock = threading.Lock()

    def register_secret(self, value: Any) -> None:
        """
        Mask every future occurrence of ``value`` in sanitized output.

        Registering a known value marks it as recently used. Once more than
        ``max_secrets`` values are held, the least recently registered one
        is dropped, so a process cycling through auth tokens keeps a bounded
        set. Clients register their token each time one is created.
        """
        if not isinstance(value, str) or len(value) < self.MIN_SECRET_LENGTH:
            return
        with self._lock:
            self._secrets[value] = None
            self._secrets.move_to_end(value)
            while len(self._secrets) > self.max_secrets:
                self._secrets.popitem(last=False)

    @property
    def secret_count(self) -> int:
        with self._lock:
            return len(self._secrets)

    def sanitize(self, data: Any) -> str:
        """
        Sanitize data for safe logging.

        Args:
            data: Data to sanitize for logging

        Returns:
            Sanitized string safe for logging
        """
        if data is None:
            return "None"

        sanitized = str(data)

        with self._lock:
            secrets = sorted(self._secrets, key=len, reverse=True)
        for secret in secrets:
            sanitized = sanitized.replace(secret, REDACTED)

        for pattern, replacement in self.SENSITIVE_PATTERNS:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        if len(sanitized) > 1000:
            sanitized = sanitized[:997] + "..."

        return sanitized


class SecureLogger:
    """
    Logger wrapper that sanitizes every message and argument before
    handing it to the standard library logger.
    """

    def __init__(self, logger_name: str, sanitizer: "LogSanitizer"):
        self.logger = logging.getLogger(logger_name)
        self.sanitizer = sanitizer

    def _log(self, level: int, message: str, *args) -> None:
        if not self.logger.isEnabledFor(level):
            return
        sanitized_args = tuple(self.sanitizer.sanitize(arg) for arg in args)
        self.logger.log(level, self.sanitizer.sanitize(message), *sanitized_args)

    def debug(self, message: str, *args) -> None:
        self._log(logging.DEBUG, message, *args)

    def info(self, message: str, *args) -> None:
        self._log(logging.INFO, message, *args)

    def warning(self, message: str, *args) -> None:
        self._log(logging.WARNING, message, *args)

    def error(self, message: str, *args) -> None:
        self._log(logging.ERROR, message, *args)


# Global instance shared by every secure logger in the process
log_sanitizer = LogSanitizer()


def get_secure_logger(name: str) -> SecureLogger:
    """
    Get a secure logger instance.

    Args:
        name: Logger name

    Returns:
        SecureLogger instance
    """
    return SecureLogger(name, log_sanitizer)
