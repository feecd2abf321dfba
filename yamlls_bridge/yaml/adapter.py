"""Lifecycle of the YAML configuration and workspace listeners."""

from typing import Callable, List, Optional, Type

from ..lsp.client import LanguageServiceAccessor
from ..lsp.definitions import ServerDefinition
from ..preferences import PreferenceStore
from ..util.log import Log
from ..workspace import POST_CHANGE, Workspace
from .listeners import SchemaPreferenceListener, WorkspaceFoldersListener


class YAMLServerAdapter:
    """Owns the preference and resource listeners of the YAML server.

    ``start()`` installs both listeners once; ``stop()`` removes every
    registration even if one removal fails. Usable as a context manager.
    """

    def __init__(self, definition: ServerDefinition, store: PreferenceStore, workspace: Workspace,
                 accessor: Type[LanguageServiceAccessor] = LanguageServiceAccessor):
        self.definition = definition
        self.store = store
        self.workspace = workspace
        self.accessor = accessor
        self._unsubscribers: List[Callable[[], None]] = []
        self._log = Log.create({"service": "yaml.adapter"})

    @property
    def running(self) -> bool:
        return bool(self._unsubscribers)

    def start(self) -> None:
        if self.running:
            return

        self._unsubscribers.append(self.store.add_property_change_listener(
            SchemaPreferenceListener(self.definition, self.store, accessor=self.accessor)
        ))
        self._unsubscribers.append(self.workspace.add_resource_change_listener(
            WorkspaceFoldersListener(self.definition, accessor=self.accessor), POST_CHANGE
        ))
        self._log.info("Listeners registered", {"server": self.definition.id})

    def stop(self) -> None:
        error: Optional[Exception] = None
        while self._unsubscribers:
            unsubscribe = self._unsubscribers.pop()
            try:
                unsubscribe()
            except Exception as e:
                self._log.error("Failed to remove listener", {"error": str(e)})
                error = error or e
        self._log.info("Listeners removed", {"server": self.definition.id})
        if error is not None:
            raise error

    def __enter__(self) -> "YAMLServerAdapter":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
