"""YAML language server integration."""

from .adapter import YAMLServerAdapter
from .folders import list_initial_folders, to_workspace_folders
from .listeners import SchemaPreferenceListener, WorkspaceFoldersListener
from .server import YAML_SERVER_ID, YAMLLanguageServer, create_yaml_definition
from .settings import build_settings, read_yaml_config_block

__all__ = [
    "YAMLServerAdapter",
    "list_initial_folders",
    "to_workspace_folders",
    "SchemaPreferenceListener",
    "WorkspaceFoldersListener",
    "YAML_SERVER_ID",
    "YAMLLanguageServer",
    "create_yaml_definition",
    "build_settings",
    "read_yaml_config_block",
]
