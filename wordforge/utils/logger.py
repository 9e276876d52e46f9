"""
WordForge Logger
================

Structured logging: every call takes a message plus keyword context, and
handlers decide how records are rendered and where they go.

The validation engine itself never logs; the form request gate and the
rule registry report lifecycle events at DEBUG level.

Example:
    logger = get_logger("wordforge.validation")
    logger.debug("Validation failed", form="StoreUserRequest", fields="email")

    # 2026-01-15 10:30:45 [DEBUG] wordforge.validation: Validation failed form=StoreUserRequest fields=email
"""

from __future__ import annotations

import json
import sys
import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional, TextIO, Union


class LogLevel(IntEnum):
    """Severity, numerically compatible with the stdlib levels."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def parse(cls, value: Union[str, int, "LogLevel"]) -> "LogLevel":
        """Resolve a level from a name ("debug") or number."""
        if not isinstance(value, str):
            return cls(value)
        try:
            return cls[value.strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {value!r}") from None


@dataclass
class LogRecord:
    """One log event."""

    level: LogLevel
    message: str
    logger_name: str = "wordforge"
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "message": self.message,
            "logger": self.logger_name,
        }
        if self.context:
            payload["context"] = dict(self.context)
        if self.exception is not None:
            payload["exception"] = {
                "type": type(self.exception).__name__,
                "message": str(self.exception),
            }
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)


# =============================================================================
# Formatters
# =============================================================================

class Formatter(ABC):
    """Turns a record into one output string."""

    @abstractmethod
    def format(self, record: LogRecord) -> str:
        ...


class TextFormatter(Formatter):
    """
    Human-readable lines; context is appended as ``key=value`` pairs and a
    traceback follows when the record carries an exception.
    """

    def __init__(
        self,
        template: str = "{timestamp} [{level}] {logger}: {message}",
        date_format: str = "%Y-%m-%d %H:%M:%S",
    ):
        self.template = template
        self.date_format = date_format

    def format(self, record: LogRecord) -> str:
        pairs = [f"{key}={value}" for key, value in record.context.items()]
        line = self.template.format(
            timestamp=record.timestamp.strftime(self.date_format),
            level=record.level.name,
            logger=record.logger_name,
            message=" ".join([record.message, *pairs]),
        )

        exc = record.exception
        if exc is None:
            return line
        return line + "\n" + "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


class JsonFormatter(Formatter):
    """One JSON object per line."""

    def format(self, record: LogRecord) -> str:
        return record.to_json()


# =============================================================================
# Handlers
# =============================================================================

class LogHandler(ABC):
    """Destination for records at or above its own level."""

    def __init__(
        self,
        formatter: Optional[Formatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        self.formatter = formatter if formatter is not None else TextFormatter()
        self.level = level

    def handle(self, record: LogRecord) -> None:
        if record.level < self.level:
            return
        self.emit(record)

    @abstractmethod
    def emit(self, record: LogRecord) -> None:
        ...


class StreamHandler(LogHandler):
    """Writes to a text stream, stderr when none is given."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        formatter: Optional[Formatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        super().__init__(formatter=formatter, level=level)
        self.stream = stream

    def emit(self, record: LogRecord) -> None:
        target = self.stream if self.stream is not None else sys.stderr
        print(self.formatter.format(record), file=target, flush=True)


# =============================================================================
# Logger
# =============================================================================

class Logger:
    """
    Named logger with bound context.

    Example:
        scoped = get_logger("wordforge.validation").with_context(form="StoreUserRequest")
        scoped.debug("Validation passed", fields=2)
    """

    def __init__(
        self,
        name: str = "wordforge",
        level: LogLevel = LogLevel.WARNING,
        handlers: Optional[List[LogHandler]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.level = level
        self._handlers: List[LogHandler] = [] if handlers is None else handlers
        self._context: Dict[str, Any] = dict(context or {})

    @property
    def handlers(self) -> List[LogHandler]:
        return list(self._handlers)

    def add_handler(self, handler: LogHandler) -> "Logger":
        self._handlers.append(handler)
        return self

    def remove_handler(self, handler: LogHandler) -> "Logger":
        self._handlers.remove(handler)
        return self

    def with_context(self, **context: Any) -> "Logger":
        """Derive a logger that adds ``context`` to every record and shares handlers."""
        return Logger(
            self.name,
            self.level,
            handlers=self._handlers,
            context={**self._context, **context},
        )

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self.level

    def log(
        self,
        level: LogLevel,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        if not self.is_enabled_for(level):
            return

        record = LogRecord(
            level=level,
            message=message,
            logger_name=self.name,
            context={**self._context, **context},
            exception=exception,
        )
        for handler in self._handlers:
            try:
                handler.handle(record)
            except Exception:
                pass  # handler errors are dropped

    def debug(self, message: str, **context: Any) -> None:
        self.log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self.log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self.log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        self.log(LogLevel.ERROR, message, exception, **context)


_loggers: Dict[str, Logger] = {}
_output: Optional[TextIO] = None


def _build_handler(log_format: str, level: LogLevel) -> LogHandler:
    formatter = JsonFormatter() if log_format == "json" else TextFormatter()
    return StreamHandler(_output, formatter, level)


def get_logger(name: str = "wordforge") -> Logger:
    """
    Get the logger registered under ``name``, creating it on first use.

    New loggers take their level and format from the ``logging.level`` and
    ``logging.format`` settings.
    """
    logger = _loggers.get(name)
    if logger is None:
        from wordforge.core.config import get_config

        settings = get_config()
        level = LogLevel.parse(settings.get("logging.level", "WARNING"))
        handler = _build_handler(settings.get("logging.format", "text"), level)
        logger = _loggers[name] = Logger(name, level, [handler])
    return logger


def configure_logging(
    level: Union[str, int, LogLevel] = LogLevel.WARNING,
    format: str = "text",
    stream: Optional[TextIO] = None,
) -> None:
    """
    Apply level, format and output stream to every logger, existing and new.

    Args:
        level: Log level (name or number)
        format: Output format ("text" or "json")
        stream: Output stream, stderr when omitted
    """
    global _output
    from wordforge.core.config import get_config

    resolved = LogLevel.parse(level)
    settings = get_config()
    settings.set("logging.level", resolved.name)
    settings.set("logging.format", format)
    _output = stream

    for logger in _loggers.values():
        logger.level = resolved
        logger._handlers[:] = [_build_handler(format, resolved)]
