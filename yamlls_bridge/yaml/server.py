"""Connection provider that launches the bundled yaml-language-server."""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from ..lsp.client import LanguageServerSession
from ..lsp.connection import ProcessStreamConnectionProvider
from ..lsp.definitions import ServerDefinition
from ..lsp.protocol import (
    DidChangeConfigurationParams,
    DidChangeWorkspaceFoldersParams,
    WorkspaceFoldersChangeEvent,
    is_initialize_result,
)
from ..node import get_node_location
from ..preferences import PreferenceStore
from ..util.error import LaunchError
from ..util.log import Log
from ..workspace import Workspace
from .folders import list_initial_folders
from .settings import BUNDLE_ID, build_settings

YAML_SERVER_ID = "yamlls_bridge.yaml"
SERVER_JS_ENV = "YAMLLS_SERVER_JS"
SERVER_ENTRY = Path("node_modules") / "yaml-language-server" / "out" / "server" / "src" / "server.js"

_log = Log.create({"service": "yaml.server", "bundle": BUNDLE_ID})


def resolve_server_entry() -> Path:
    """Absolute path of the server script shipped inside the package.

    ``$YAMLLS_SERVER_JS`` points elsewhere when the server is installed
    separately.
    """
    override = os.environ.get(SERVER_JS_ENV, "").strip()
    entry = Path(override) if override else Path(__file__).resolve().parent.parent / SERVER_ENTRY
    if not entry.is_file():
        raise LaunchError({"path": str(entry)}, f"Cannot find yaml-language-server entry {entry}; install it with npm or set {SERVER_JS_ENV}")
    return entry.absolute()


class YAMLLanguageServer(ProcessStreamConnectionProvider):
    """Runs ``node server.js --stdio`` and seeds the server once it is initialized."""

    def __init__(self, store: PreferenceStore, workspace: Workspace,
                 node_locator: Optional[Callable[[], Path]] = None,
                 entry_locator: Optional[Callable[[], Path]] = None):
        super().__init__()
        self.store = store
        self.workspace = workspace

        try:
            node = (node_locator or get_node_location)()
            entry = (entry_locator or resolve_server_entry)()
        except LaunchError as e:
            # Left without commands, start() reports the failure to the session.
            _log.error(e.message, e.data)
            return

        self.set_commands([str(node), str(entry), "--stdio"])
        self.set_working_directory(os.getcwd())

    def handle_message(self, message: Dict[str, Any], session: LanguageServerSession, root_uri: Optional[str]) -> None:
        if not is_initialize_result(message):
            return

        try:
            session.did_change_configuration(DidChangeConfigurationParams(settings=build_settings(self.store)))
        except Exception as e:
            _log.error("Failed to send initial configuration", {"error": str(e)})

        try:
            event = WorkspaceFoldersChangeEvent(added=list_initial_folders(self.workspace), removed=[])
            session.did_change_workspace_folders(DidChangeWorkspaceFoldersParams(event=event))
        except Exception as e:
            _log.error("Failed to send initial workspace folders", {"error": str(e)})

    def __str__(self) -> str:
        return "YAML Language Server: " + super().__str__()


def create_yaml_definition(store: PreferenceStore, workspace: Workspace) -> ServerDefinition:
    return ServerDefinition(
        id=YAML_SERVER_ID,
        label="YAML Language Server",
        factory=lambda: YAMLLanguageServer(store, workspace),
        languages=["yaml"],
    )
