"""Listeners forwarding preference and project changes to live YAML servers."""

from typing import List, Type

from ..lsp.client import LanguageServerSession, LanguageServiceAccessor
from ..lsp.definitions import ServerDefinition
from ..lsp.protocol import (
    DidChangeConfigurationParams,
    DidChangeWorkspaceFoldersParams,
    WorkspaceFoldersChangeEvent,
)
from ..preferences import YAML_SCHEMA_PREFERENCE, PreferenceStore, PropertyChangeEvent
from ..util.error import WorkspaceError
from ..util.log import Log
from ..workspace import ADDED, MARKERS, REMOVED, Resource, ResourceChangeEvent, ResourceDelta, ResourceType
from .folders import to_workspace_folders
from .settings import BUNDLE_ID, build_settings

_log = Log.create({"service": "yaml.listeners", "bundle": BUNDLE_ID})


def matching_sessions(definition: ServerDefinition,
                      accessor: Type[LanguageServiceAccessor] = LanguageServiceAccessor) -> List[LanguageServerSession]:
    return [
        session for session in accessor.get_active_language_servers()
        if accessor.resolve_server_definition(session) is definition
    ]


class SchemaPreferenceListener:
    """Pushes fresh settings to every YAML session when the schema preference changes."""

    def __init__(self, definition: ServerDefinition, store: PreferenceStore,
                 preference: str = YAML_SCHEMA_PREFERENCE,
                 accessor: Type[LanguageServiceAccessor] = LanguageServiceAccessor):
        self.definition = definition
        self.store = store
        self.preference = preference
        self.accessor = accessor

    def __call__(self, event: PropertyChangeEvent) -> None:
        try:
            self.property_change(event)
        except Exception as e:
            _log.error("Preference change handling failed", {"property": event.property, "error": str(e)})

    def property_change(self, event: PropertyChangeEvent) -> None:
        if event.property != self.preference:
            return

        params = DidChangeConfigurationParams(settings=build_settings(self.store))
        for session in matching_sessions(self.definition, self.accessor):
            try:
                session.did_change_configuration(params)
            except Exception as e:
                _log.error("Failed to send configuration", {"session": str(session), "error": str(e)})


class WorkspaceFoldersListener:
    """Announces added and removed projects to every YAML session."""

    def __init__(self, definition: ServerDefinition,
                 accessor: Type[LanguageServiceAccessor] = LanguageServiceAccessor):
        self.definition = definition
        self.accessor = accessor

    def __call__(self, event: ResourceChangeEvent) -> None:
        try:
            self.resource_changed(event)
        except Exception as e:
            _log.error("Resource change handling failed", {"error": str(e)})

    def resource_changed(self, event: ResourceChangeEvent) -> None:
        # Marker-only deltas fire constantly while diagnostics update.
        if (event.delta.flags ^ MARKERS) == 0:
            return

        added: List[Resource] = []
        removed: List[Resource] = []

        def visit(delta: ResourceDelta) -> bool:
            if delta.resource.type == ResourceType.PROJECT:
                if delta.kind == ADDED:
                    added.append(delta.resource)
                elif delta.kind == REMOVED:
                    removed.append(delta.resource)
            return True

        try:
            event.delta.accept(visit)
        except WorkspaceError as e:
            _log.error(e.message, e.data)
            return

        if not added and not removed:
            return

        params = DidChangeWorkspaceFoldersParams(event=WorkspaceFoldersChangeEvent(
            added=to_workspace_folders(added),
            removed=to_workspace_folders(removed),
        ))
        for session in matching_sessions(self.definition, self.accessor):
            try:
                session.did_change_workspace_folders(params)
            except Exception as e:
                _log.error("Failed to send workspace folders", {"session": str(session), "error": str(e)})
