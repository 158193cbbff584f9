"""
Structured logging for shellpipe.

Every module logs through a ``PipeLogger`` child of the ``shellpipe``
logger, passing keyword fields instead of formatting them into the
message. One handler on the ``shellpipe`` logger renders records as text
or JSON lines, masking credentials on the way out.

The library only logs at DEBUG level, so nothing is emitted unless a
caller lowers the level with ``PipeLogger.configure`` or sets
``SHELLPIPE_LOG_LEVEL``.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
import time
from enum import Enum
from typing import Any, ClassVar, TextIO

ROOT_LOGGER = "shellpipe"
REDACTED = "***REDACTED***"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        """Convert to standard logging level."""
        return logging.getLevelNamesMapping()[self.value]

    @classmethod
    def from_env(cls, default: LogLevel | None = None) -> LogLevel:
        """Read the level from SHELLPIPE_LOG_LEVEL, ignoring unknown values."""
        raw = os.getenv("SHELLPIPE_LOG_LEVEL", "").strip().upper()
        if raw in cls.__members__:
            return cls[raw]
        return default or cls.INFO


class SensitiveDataMasker:
    """Redacts credentials from log text and keyword fields.

    Text rules catch bearer tokens, Authorization values, passwords in URL
    user-info, and secret query parameters. Fields whose key names a
    secret are replaced outright.
    """

    DEFAULT_PATTERNS: ClassVar[list[tuple[str, str]]] = [
        (r"(Bearer\s+)([^\s\"']+)", rf"\1{REDACTED}"),
        (r"(Authorization[\"']?\s*[:=]\s*[\"']?)(?!Bearer\s)([^\"'\s]+)", rf"\1{REDACTED}"),
        (r"([a-z][a-z0-9+.-]*://)([^/\s:@]+):([^/\s@]+)@", rf"\1\2:{REDACTED}@"),
        (r"([?&](?:token|access_token|api_key|apikey|key|password)=)([^&\s]+)", rf"\1{REDACTED}"),
    ]
    SECRET_KEYS: ClassVar[tuple[str, ...]] = ("token", "secret", "password", "auth", "cookie")

    def __init__(self, patterns: list[tuple[str, str]] | None = None) -> None:
        rules = self.DEFAULT_PATTERNS if patterns is None else patterns
        self._rules = [(re.compile(p, re.IGNORECASE), r) for p, r in rules]

    def mask(self, text: str) -> str:
        """Return ``text`` with every credential redacted."""
        for pattern, replacement in self._rules:
            text = pattern.sub(replacement, text)
        return text

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, dict):
            return self.mask_dict(value)
        if isinstance(value, (list, tuple)):
            return [self._mask_value(item) for item in value]
        return value

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask keyword fields, recursing into nested dicts and lists."""
        return {
            key: REDACTED
            if any(secret in key.lower() for secret in self.SECRET_KEYS)
            else self._mask_value(value)
            for key, value in data.items()
        }


def _record_fields(record: logging.LogRecord, masker: SensitiveDataMasker) -> dict[str, Any]:
    fields = getattr(record, "fields", None)
    if not fields:
        return {}
    return masker.mask_dict(fields)


class JsonFormatter(logging.Formatter):
    """One JSON object per record; keyword fields become top-level keys."""

    converter = time.gmtime

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_timestamp: bool = True,
    ) -> None:
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")
        self._masker = masker or SensitiveDataMasker()
        self._include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {}
        if self._include_timestamp:
            payload["timestamp"] = self.formatTime(record, self.datefmt) + f".{int(record.msecs):03d}Z"
        payload.update(
            level=record.levelname,
            logger=record.name,
            thread=record.threadName,
            message=self._masker.mask(record.getMessage()),
        )
        payload.update(_record_fields(record, self._masker))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """``time | LEVEL | logger | message | key=value ...``"""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_fields: bool = True,
    ) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self._masker = masker or SensitiveDataMasker()
        self._include_fields = include_fields

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = self._masker.mask(super().formatMessage(record))
        if self._include_fields:
            fields = _record_fields(record, self._masker)
            if fields:
                line += " | " + " ".join(f"{k}={v}" for k, v in fields.items())
        return line


class PipeLogger:
    """Keyword-field logger for one shellpipe module.

    Example:
        >>> logger = PipeLogger.get_logger("shellpipe.process")
        >>> logger.debug("process started", argv=["ls", "-l"], pid=4242)
    """

    _handler: ClassVar[logging.Handler | None] = None

    @classmethod
    def _root(cls) -> logging.Logger:
        root = logging.getLogger(ROOT_LOGGER)
        if cls._handler is None:
            cls._install(LogLevel.from_env(), TextFormatter(), sys.stderr)
        return root

    @classmethod
    def _install(cls, level: LogLevel, formatter: logging.Formatter, stream: TextIO) -> None:
        root = logging.getLogger(ROOT_LOGGER)
        if cls._handler is not None:
            root.removeHandler(cls._handler)
        handler = logging.StreamHandler(stream)
        handler.setFormatter(formatter)
        root.addHandler(handler)
        root.setLevel(level.to_logging_level())
        root.propagate = False
        cls._handler = handler

    @classmethod
    def configure(
        cls,
        level: LogLevel = LogLevel.INFO,
        format: str = "text",
        stream: TextIO | None = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        """Replace the output settings of every shellpipe logger.

        Args:
            level: Lowest level emitted
            format: 'text' or 'json'
            stream: Destination (default: stderr)
            masker: Credential masker used by the formatter
        """
        formatter: logging.Formatter
        if format == "json":
            formatter = JsonFormatter(masker=masker)
        else:
            formatter = TextFormatter(masker=masker)
        cls._install(level, formatter, stream or sys.stderr)

    @classmethod
    def level(cls) -> LogLevel:
        """The level currently applied to shellpipe loggers."""
        return LogLevel(logging.getLevelName(cls._root().getEffectiveLevel()))

    @classmethod
    def get_logger(cls, name: str) -> PipeLogger:
        """Get the logger for ``name``, a dotted name under ``shellpipe``."""
        cls._root()
        return cls(logging.getLogger(name))

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def is_enabled_for(self, level: LogLevel) -> bool:
        """Check whether messages at a level would be emitted."""
        return self._logger.isEnabledFor(level.to_logging_level())

    def _log(self, level: int, msg: str, exc_info: bool = False, **fields: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, msg, exc_info=exc_info, extra={"fields": fields})

    def debug(self, msg: str, **fields: Any) -> None:
        self._log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self._log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self._log(logging.WARNING, msg, **fields)

    def error(self, msg: str, exc_info: bool = False, **fields: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=exc_info, **fields)

    def exception(self, msg: str, **fields: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **fields)


def get_logger(name: str) -> PipeLogger:
    """Get a logger instance."""
    return PipeLogger.get_logger(name)
