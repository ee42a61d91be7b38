"""Utility modules for VideoCapsule."""

from backend.utils.logging import (
    get_logger,
    get_log_buffer,
    configure_logging,
    LogLevel,
    LogEntry,
    LogBuffer,
    AppLogger,
    scheduler_logger,
    email_logger,
    storage_logger,
    api_logger,
)

__all__ = [
    "get_logger",
    "get_log_buffer",
    "configure_logging",
    "LogLevel",
    "LogEntry",
    "LogBuffer",
    "AppLogger",
    "scheduler_logger",
    "email_logger",
    "storage_logger",
    "api_logger",
]
