"""Error types."""

from typing import Any, Dict, Optional


class NamedError(Exception):
    """Base class for named errors with structured data."""

    def __init__(self, data: Optional[Dict[str, Any]] = None, message: Optional[str] = None, cause: Optional[Exception] = None):
        self.data = data or {}
        self.message = message or self.__class__.__name__
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "name": self.__class__.__name__,
            "message": self.message,
            "data": self.data,
            "cause": str(self.cause) if self.cause else None,
        }


class ConfigError(NamedError):
    """Preference store errors."""
    pass


class SchemaPreferenceError(ConfigError):
    """The schema preference is not a JSON object of globs."""
    pass


class LSPError(NamedError):
    """Language server session errors."""
    pass


class LaunchError(LSPError):
    """The server runtime or entry script could not be located."""
    pass


class WorkspaceError(NamedError):
    """Resource tree traversal errors."""
    pass
