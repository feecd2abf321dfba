"""Plugin activation: wires the preference store, workspace and YAML server together."""

from pathlib import Path
from typing import Iterable, Optional, Union

from .lsp.client import LanguageServerSession, LanguageServiceAccessor
from .lsp.definitions import LanguageServersRegistry, ServerDefinition
from .preferences import PreferenceStore, initialize_default_preferences
from .util.log import Log
from .workspace import Workspace
from .yaml.adapter import YAMLServerAdapter
from .yaml.listeners import matching_sessions
from .yaml.server import create_yaml_definition


class Plugin:
    """Activation hook owning the YAML adapter.

    ``stop()`` shuts down the YAML sessions and always releases the
    adapter's listeners.
    """

    def __init__(self, store: Optional[PreferenceStore] = None, workspace: Optional[Workspace] = None,
                 registry: Optional[LanguageServersRegistry] = None):
        self.store = store or PreferenceStore()
        self.workspace = workspace or Workspace()
        self.registry = registry or LanguageServersRegistry()
        self.definition: ServerDefinition = self.registry.register(
            create_yaml_definition(self.store, self.workspace)
        )
        self.adapter = YAMLServerAdapter(self.definition, self.store, self.workspace)
        self._log = Log.create({"service": "plugin"})

    def start(self) -> None:
        initialize_default_preferences(self.store)
        self.store.load()
        self.adapter.start()
        self._log.info("Plugin started")

    def stop(self) -> None:
        try:
            for session in matching_sessions(self.definition):
                try:
                    session.stop()
                except Exception as e:
                    self._log.error("Failed to stop session", {"session": str(session), "error": str(e)})
        finally:
            self.adapter.stop()
            self._log.info("Plugin stopped")

    def add_projects(self, directories: Iterable[Union[str, Path]]) -> None:
        """Create one project per directory, named after it."""
        for directory in directories:
            path = Path(directory).absolute()
            self.workspace.create_project(path.name or str(path), path)

    def start_yaml_server(self, root_path: Optional[str] = None) -> LanguageServerSession:
        return LanguageServiceAccessor.start_session(self.definition, root_path)

    def __enter__(self) -> "Plugin":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
