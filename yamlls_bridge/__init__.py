"""yamlls-bridge - yaml-language-server with synchronized schemas and workspace folders."""

__version__ = "0.1.0"

from .plugin import Plugin
from .preferences import PreferenceStore, YAML_SCHEMA_PREFERENCE
from .workspace import Workspace

__all__ = ["Plugin", "PreferenceStore", "YAML_SCHEMA_PREFERENCE", "Workspace"]
