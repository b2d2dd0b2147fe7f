"""
Structured logging utility for the admin client.

Provides JSON-formatted logging with email and card-number masking,
context injection, and operation timing.
"""

import json
import logging
import os
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from functools import wraps

LOG_LEVEL_ENV = "MAPLE_ADMIN_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

# Shared across every StructuredLogger so --verbose applies everywhere
_HANDLER_LEVEL: Optional[int] = None
_HANDLER_FILTERS: List[logging.Filter] = []


def _maple_handlers() -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    for name in list(logging.Logger.manager.loggerDict):
        if name == "maple_admin" or name.startswith("maple_admin."):
            handlers.extend(logging.getLogger(name).handlers)
    return handlers


def _resolve_level() -> int:
    if _HANDLER_LEVEL is not None:
        return _HANDLER_LEVEL
    name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING


def configure_level(level: int) -> None:
    """
    Override the output level for all maple_admin loggers.

    Args:
        level: logging level constant (e.g. logging.DEBUG)
    """
    global _HANDLER_LEVEL
    _HANDLER_LEVEL = level
    for handler in _maple_handlers():
        handler.setLevel(level)


def register_handler_filter(log_filter: logging.Filter) -> None:
    """
    Attach a filter (e.g. secret redaction) to every structured log handler,
    including handlers created later.
    """
    if log_filter in _HANDLER_FILTERS:
        return
    _HANDLER_FILTERS.append(log_filter)
    for handler in _maple_handlers():
        handler.addFilter(log_filter)


def mask_email(email: Optional[str]) -> str:
    """
    Mask an email address to preserve privacy in logs.

    Keeps the first character of the local part and the full domain.

    Example:
        >>> mask_email("jane.doe@example.com")
        "j***@example.com"
    """
    if not email:
        return "unknown"

    if "@" not in email:
        return "invalid"

    local, domain = email.split("@", 1)
    if not local or not domain:
        return "invalid"

    return f"{local[0]}***@{domain}"


def mask_card_number(card_number: Optional[str]) -> str:
    """
    Mask a payment card number, keeping the last four digits.

    Example:
        >>> mask_card_number("4111 1111 1111 1111")
        "**** **** **** 1111"
    """
    if not card_number:
        return "-"

    digits = "".join(ch for ch in str(card_number) if ch.isdigit())
    if len(digits) < 4:
        return "****"

    return f"**** **** **** {digits[-4:]}"


class StructuredLogger:
    """
    JSON-formatted logger with context injection and operation timing.

    All log output is one JSON object per line, written to stderr.
    """

    def __init__(self, name: str):
        """
        Initialize structured logger.

        Args:
            name: Logger name (typically __name__ from calling module)
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.DEBUG)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setLevel(_resolve_level())

            formatter = logging.Formatter("%(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
            handler.setFormatter(formatter)
            for log_filter in _HANDLER_FILTERS:
                handler.addFilter(log_filter)
            self.logger.addHandler(handler)
            # Avoid duplicate lines through the root logger
            self.logger.propagate = False

    def _format_log(
        self,
        level: str,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
        error: Optional[str] = None,
    ) -> str:
        """
        Format log entry as JSON.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            message: Human-readable message
            operation: Operation name (e.g., "list_bookings", "update_contact_status")
            context: Context dict with booking_id, contact_id, etc.
            duration_ms: Operation duration in milliseconds
            error: Error message if applicable

        Returns:
            JSON-formatted log string
        """
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level,
            "message": message,
        }

        if operation:
            log_entry["operation"] = operation

        if context:
            log_entry["context"] = context

        if duration_ms is not None:
            log_entry["duration_ms"] = round(duration_ms, 2)

        if error:
            log_entry["error"] = error

        return json.dumps(log_entry, ensure_ascii=False, default=str)

    def debug(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """Log debug message."""
        log_json = self._format_log("DEBUG", message, operation, context)
        self.logger.debug(log_json)

    def info(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[float] = None,
    ):
        """Log info message."""
        log_json = self._format_log("INFO", message, operation, context, duration_ms)
        self.logger.info(log_json)

    def warning(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        """Log warning message."""
        log_json = self._format_log("WARNING", message, operation, context, error=error)
        self.logger.warning(log_json)

    def error(
        self,
        message: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
        duration_ms: Optional[float] = None,
    ):
        """Log error message."""
        log_json = self._format_log(
            "ERROR", message, operation, context, duration_ms, error
        )
        self.logger.error(log_json)


def log_operation(operation_name: str):
    """
    Decorator to automatically log operation start, duration, and completion.

    Usage:
        @log_operation("list_bookings")
        def list_bookings(self):
            ...
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = StructuredLogger(func.__module__)

            context: Dict[str, Any] = {
                "function": func.__name__,
            }

            if len(args) > 0:
                context["arg_count"] = len(args)
            if "email" in kwargs:
                context["email_masked"] = mask_email(kwargs["email"])

            logger.debug(
                f"Starting {operation_name}", operation=operation_name, context=context
            )

            start_time = time.time()
            try:
                result = func(*args, **kwargs)
                duration_ms = (time.time() - start_time) * 1000
                logger.info(
                    f"Completed {operation_name}",
                    operation=operation_name,
                    context=context,
                    duration_ms=duration_ms,
                )
                return result
            except Exception as e:
                duration_ms = (time.time() - start_time) * 1000
                logger.error(
                    f"Failed {operation_name}",
                    operation=operation_name,
                    context=context,
                    error=str(e),
                    duration_ms=duration_ms,
                )
                raise

        return wrapper

    return decorator


def get_logger(name: str) -> StructuredLogger:
    """
    Factory function to get a structured logger instance.

    Args:
        name: Logger name (typically __name__ from calling module)

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)
