"""
Structured logging for the issue/chat proxy.

Wraps the standard logging module so call sites can attach keyword context
(session ids, upstream status codes, timings) to every line.
"""

import os
import sys
import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import traceback


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StructuredFormatter(logging.Formatter):
    """Formats records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": _utcnow().isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if getattr(record, "extra_data", None):
            log_data["data"] = record.extra_data

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter with colors."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m"
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]
        timestamp = _utcnow().strftime("%H:%M:%S")

        msg = f"{color}[{timestamp}] {record.levelname:8}{reset} | {record.name}: {record.getMessage()}"

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            data_str = ", ".join(f"{k}={v}" for k, v in extra_data.items())
            msg += f" | {data_str}"

        if record.exc_info:
            msg += f"\n{self.formatException(record.exc_info)}"

        return msg


class AppLogger:
    """Application logger with keyword context support."""

    _instances: Dict[str, 'AppLogger'] = {}

    def __init__(self, name: str, level: Optional[str] = None):
        """
        Initialize logger.

        Args:
            name: Logger name (usually module name)
            level: Log level name; defaults to the LOG_LEVEL env var
        """
        self.name = name
        self.level = level or os.getenv("LOG_LEVEL", "INFO")
        self.logger = logging.getLogger(name)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        if self.logger.handlers:
            return

        self.logger.setLevel(getattr(logging, self.level.upper(), logging.INFO))

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ConsoleFormatter())
        self.logger.addHandler(console_handler)

        log_file = os.getenv("LOG_FILE")
        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(file_handler)

        self.logger.propagate = False

    def _log(self, level: int, message: str, extra: Optional[Dict[str, Any]] = None, exc_info: bool = False) -> None:
        if not self.logger.isEnabledFor(level):
            return
        record = self.logger.makeRecord(
            self.name, level, "", 0, message, (), sys.exc_info() if exc_info else None
        )
        if extra:
            record.extra_data = extra
        self.logger.handle(record)

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, kwargs or None)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, kwargs or None)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, kwargs or None)

    def error(self, message: str, exc_info: bool = False, **kwargs) -> None:
        """Log error message, optionally with the active traceback."""
        if exc_info:
            kwargs["traceback"] = traceback.format_exc()
        self._log(logging.ERROR, message, kwargs or None)

    def critical(self, message: str, exc_info: bool = False, **kwargs) -> None:
        if exc_info:
            kwargs["traceback"] = traceback.format_exc()
        self._log(logging.CRITICAL, message, kwargs or None)

    def request(self, method: str, path: str, status: int, duration_ms: float, **kwargs) -> None:
        """Log a served HTTP request."""
        level = logging.WARNING if status >= 500 else logging.INFO
        self._log(
            level,
            f"{method} {path} -> {status}",
            {"method": method, "path": path, "status": status,
             "duration_ms": round(duration_ms, 2), **kwargs}
        )

    def llm_call(self, model: str, duration_ms: float, success: bool = True, **kwargs) -> None:
        """Log a Gemini round trip."""
        level = logging.INFO if success else logging.WARNING
        self._log(
            level,
            f"LLM call to {model}: {'SUCCESS' if success else 'FAILED'}",
            {"model": model, "duration_ms": round(duration_ms, 2), **kwargs}
        )

    def jira_call(self, path: str, status: Optional[int], duration_ms: float, **kwargs) -> None:
        """Log a Jira REST round trip. ``status`` is None when no response arrived."""
        ok = status is not None and status < 400
        self._log(
            logging.INFO if ok else logging.WARNING,
            f"Jira GET {path} -> {status if status is not None else 'no response'}",
            {"path": path, "status": status, "duration_ms": round(duration_ms, 2), **kwargs}
        )

    def session_event(self, event: str, session_id: str, **kwargs) -> None:
        """Log a chat session lifecycle event (created, reused, expired, ended, evicted)."""
        self._log(
            logging.INFO,
            f"Session {event}",
            {"session_id": session_id[:8], **kwargs}
        )


def get_logger(name: str) -> AppLogger:
    """
    Get or create a logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        AppLogger instance
    """
    if name not in AppLogger._instances:
        AppLogger._instances[name] = AppLogger(name)
    return AppLogger._instances[name]
