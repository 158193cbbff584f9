"""
Telemetry module for shellpipe.

Provides structured logging with sensitive data masking.
"""

from shellpipe.telemetry.logger import (
    JsonFormatter,
    LogLevel,
    PipeLogger,
    SensitiveDataMasker,
    TextFormatter,
    get_logger,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "PipeLogger",
    "SensitiveDataMasker",
    "TextFormatter",
    "get_logger",
]
