"""Shared fixtures."""

import pytest

from yamlls_bridge.lsp.client import LanguageServiceAccessor
from yamlls_bridge.lsp.definitions import ServerDefinition
from yamlls_bridge.preferences import PreferenceStore, initialize_default_preferences
from yamlls_bridge.workspace import Workspace


class FakeSession:
    """Session double recording the notifications it is asked to send."""

    def __init__(self, definition, fail: bool = False):
        self.definition = definition
        self.fail = fail
        self.configurations = []
        self.folder_events = []
        self.stopped = False

    def did_change_configuration(self, params):
        if self.fail:
            raise RuntimeError("broken pipe")
        self.configurations.append(params.model_dump())

    def did_change_workspace_folders(self, params):
        if self.fail:
            raise RuntimeError("broken pipe")
        self.folder_events.append(params.model_dump())

    def stop(self):
        self.stopped = True
        LanguageServiceAccessor.unregister(self)

    @property
    def messages(self):
        return self.configurations + self.folder_events


@pytest.fixture(autouse=True)
def sessions(monkeypatch):
    """Start every test with an empty session registry."""
    registry = []
    monkeypatch.setattr(LanguageServiceAccessor, "_sessions", registry)
    return registry


@pytest.fixture
def store(tmp_path):
    store = PreferenceStore(tmp_path / "preferences.json")
    initialize_default_preferences(store)
    return store


@pytest.fixture
def workspace():
    return Workspace()


@pytest.fixture
def yaml_definition():
    return ServerDefinition("yamlls_bridge.yaml", "YAML", factory=lambda: None)


@pytest.fixture
def other_definition():
    return ServerDefinition("other", "Other", factory=lambda: None)


@pytest.fixture
def live_session(yaml_definition):
    def create(definition=None, fail=False):
        session = FakeSession(definition or yaml_definition, fail=fail)
        LanguageServiceAccessor.register(session)
        return session
    return create
