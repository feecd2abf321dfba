"""Tests for plugin activation and teardown."""

from yamlls_bridge.lsp.client import LanguageServiceAccessor
from yamlls_bridge.lsp.definitions import LanguageServersRegistry
from yamlls_bridge.plugin import Plugin
from yamlls_bridge.preferences import YAML_SCHEMA_PREFERENCE
from yamlls_bridge.yaml.server import YAML_SERVER_ID, YAMLLanguageServer

from .conftest import FakeSession


def test_registers_yaml_definition(store, workspace):
    registry = LanguageServersRegistry()
    plugin = Plugin(store, workspace, registry)

    assert registry.get_definition(YAML_SERVER_ID) is plugin.definition
    assert plugin.definition.languages == ["yaml"]


def test_definition_creates_yaml_provider(store, workspace, monkeypatch):
    monkeypatch.setattr("yamlls_bridge.yaml.server.get_node_location", lambda: "/usr/bin/node")
    plugin = Plugin(store, workspace)

    provider = plugin.definition.create_connection_provider()

    assert isinstance(provider, YAMLLanguageServer)
    assert provider.store is store and provider.workspace is workspace


def test_lifecycle(store, workspace, tmp_path):
    (tmp_path / "one").mkdir()
    with Plugin(store, workspace) as plugin:
        session = FakeSession(plugin.definition)
        LanguageServiceAccessor.register(session)

        plugin.add_projects([tmp_path / "one"])
        store.set_value(YAML_SCHEMA_PREFERENCE, '{"s.json": "*.yml"}')

    assert session.stopped
    assert session.folder_events == [{"event": {"added": [{"uri": (tmp_path / "one").as_uri()}], "removed": []}}]
    assert len(session.configurations) == 1
    assert not plugin.adapter.running


def test_stop_releases_listeners_when_session_fails(store, workspace):
    plugin = Plugin(store, workspace)
    plugin.start()

    class Stubborn(FakeSession):
        def stop(self):
            raise RuntimeError("no response")

    LanguageServiceAccessor.register(Stubborn(plugin.definition))
    plugin.stop()

    assert not plugin.adapter.running
