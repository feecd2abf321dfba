"""Language Server Protocol client runtime."""

from .client import LanguageServerSession, LanguageServiceAccessor
from .connection import ProcessStreamConnectionProvider
from .definitions import LanguageServersRegistry, ServerDefinition

__all__ = [
    "LanguageServerSession",
    "LanguageServiceAccessor",
    "ProcessStreamConnectionProvider",
    "LanguageServersRegistry",
    "ServerDefinition",
]
