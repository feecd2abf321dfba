"""Utility modules."""

from .log import Log, Logger, LogLevel
from .error import NamedError, ConfigError, SchemaPreferenceError, LSPError, LaunchError, WorkspaceError

__all__ = [
    "Log",
    "Logger",
    "LogLevel",
    "NamedError",
    "ConfigError",
    "SchemaPreferenceError",
    "LSPError",
    "LaunchError",
    "WorkspaceError",
]
