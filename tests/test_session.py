"""Tests running sessions against a real child process."""

import json
import sys
from pathlib import Path

import pytest

from yamlls_bridge.lsp.client import LanguageServerSession, LanguageServiceAccessor
from yamlls_bridge.lsp.connection import ProcessStreamConnectionProvider
from yamlls_bridge.node import NODE_ENV
from yamlls_bridge.plugin import Plugin
from yamlls_bridge.preferences import YAML_SCHEMA_PREFERENCE
from yamlls_bridge.util.error import LSPError
from yamlls_bridge.yaml.server import SERVER_JS_ENV

SERVER = Path(__file__).with_name("stdio_server.py")
SCHEMA = '{"https://example.com/s.json": "*.yml"}'


@pytest.fixture
def server_log(tmp_path, monkeypatch):
    log = tmp_path / "server.jsonl"
    monkeypatch.setenv("STDIO_SERVER_LOG", str(log))
    monkeypatch.setenv(NODE_ENV, sys.executable)
    monkeypatch.setenv(SERVER_JS_ENV, str(SERVER))
    return log


def received(log):
    return [json.loads(line) for line in log.read_text().splitlines()]


def test_handshake_follows_initialized(store, workspace, server_log, tmp_path):
    project_dir = tmp_path / "proj"
    project_dir.mkdir()
    plugin = Plugin(store, workspace)
    plugin.start()
    plugin.add_projects([project_dir])

    try:
        session = plugin.start_yaml_server(str(tmp_path))
        assert LanguageServiceAccessor.get_active_language_servers() == [session]
        assert session.capabilities == {"hoverProvider": True}

        store.set_value(YAML_SCHEMA_PREFERENCE, SCHEMA)
    finally:
        plugin.stop()

    assert LanguageServiceAccessor.get_active_language_servers() == []
    assert session.provider.process is None

    messages = received(server_log)
    assert [m["method"] for m in messages] == [
        "initialize",
        "initialized",
        "workspace/didChangeConfiguration",
        "workspace/didChangeWorkspaceFolders",
        "workspace/didChangeConfiguration",
        "shutdown",
        "exit",
    ]
    assert messages[0]["params"]["rootUri"] == tmp_path.absolute().as_uri()
    assert messages[2]["params"] == {"settings": {"yaml": {}}}
    assert messages[3]["params"] == {"event": {"added": [{"uri": project_dir.absolute().as_uri()}], "removed": []}}
    assert json.dumps(messages[4]["params"]["settings"]["yaml"]["schemas"]) == SCHEMA


def test_initialize_timeout(yaml_definition, server_log, monkeypatch):
    monkeypatch.setenv("STDIO_SERVER_SILENT", "1")
    provider = ProcessStreamConnectionProvider([sys.executable, str(SERVER)])
    session = LanguageServerSession(yaml_definition, provider)

    with pytest.raises(LSPError):
        session.start(timeout=0.5)

    assert LanguageServiceAccessor.get_active_language_servers() == []
    assert provider.process is None
    assert session.endpoint is None
    assert [m["method"] for m in received(server_log)] == ["initialize"]


def test_missing_executable(yaml_definition):
    provider = ProcessStreamConnectionProvider(["/nonexistent/yaml-language-server"])

    with pytest.raises(LSPError):
        LanguageServerSession(yaml_definition, provider).start()
