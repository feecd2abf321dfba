"""Language server definitions."""

from typing import Callable, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .connection import ProcessStreamConnectionProvider


class ServerDefinition:
    """Handle identifying one kind of language server.

    Definitions compare by identity: sessions are matched against the
    registered instance, never against an equal-looking copy.
    """

    def __init__(self, id: str, label: str, factory: Callable[[], "ProcessStreamConnectionProvider"],
                 languages: Optional[List[str]] = None):
        self.id = id
        self.label = label
        self.factory = factory
        self.languages = languages or []

    def create_connection_provider(self) -> "ProcessStreamConnectionProvider":
        return self.factory()

    def __repr__(self) -> str:
        return f"ServerDefinition({self.id!r})"


class LanguageServersRegistry:
    """Known server definitions, keyed by id."""

    def __init__(self):
        self._definitions: Dict[str, ServerDefinition] = {}

    def register(self, definition: ServerDefinition) -> ServerDefinition:
        """Register a definition; an already registered id keeps its first instance."""
        return self._definitions.setdefault(definition.id, definition)

    def get_definition(self, id: str) -> Optional[ServerDefinition]:
        return self._definitions.get(id)

    def definitions(self) -> List[ServerDefinition]:
        return list(self._definitions.values())
