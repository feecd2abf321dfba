"""Tests for the preference store."""

import json

import pytest

from yamlls_bridge.preferences import YAML_SCHEMA_PREFERENCE, PreferenceStore
from yamlls_bridge.util.error import ConfigError


def test_defaults(store):
    assert store.get_string(YAML_SCHEMA_PREFERENCE) == ""
    assert store.contains(YAML_SCHEMA_PREFERENCE)
    assert store.get_string("unknown") == ""
    assert not store.contains("unknown")


def test_change_events(store):
    events = []
    unsubscribe = store.add_property_change_listener(events.append)

    store.set_value("k", "v")
    store.set_value("k", "v")
    unsubscribe()
    store.set_value("k", "w")

    assert [(e.property, e.old_value, e.new_value) for e in events] == [("k", "", "v")]


def test_failing_listener_does_not_block_others(store):
    events = []

    def broken(event):
        raise RuntimeError("boom")

    store.add_property_change_listener(broken)
    store.add_property_change_listener(events.append)
    store.set_value("k", "v")

    assert len(events) == 1


def test_save_and_load(tmp_path):
    path = tmp_path / "nested" / "preferences.json"
    store = PreferenceStore(path)
    store.set_value(YAML_SCHEMA_PREFERENCE, '{"a.json": "*.yml"}')
    store.save()

    reloaded = PreferenceStore(path)
    reloaded.load()

    assert reloaded.get_string(YAML_SCHEMA_PREFERENCE) == '{"a.json": "*.yml"}'
    assert json.loads(path.read_text()) == {YAML_SCHEMA_PREFERENCE: '{"a.json": "*.yml"}'}


def test_set_to_default_drops_value(store):
    store.set_value(YAML_SCHEMA_PREFERENCE, "{}")
    store.set_to_default(YAML_SCHEMA_PREFERENCE)
    store.save()

    assert json.loads(store.path.read_text()) == {}


def test_load_missing_file(tmp_path):
    store = PreferenceStore(tmp_path / "missing.json")
    store.load()
    assert store.get_string(YAML_SCHEMA_PREFERENCE) == ""


@pytest.mark.parametrize("content", ["{broken", "[1]"])
def test_load_rejects_bad_file(tmp_path, content):
    path = tmp_path / "preferences.json"
    path.write_text(content)

    with pytest.raises(ConfigError):
        PreferenceStore(path).load()


def test_load_keeps_json_text_of_structured_values(tmp_path):
    path = tmp_path / "preferences.json"
    path.write_text(json.dumps({YAML_SCHEMA_PREFERENCE: {"a.json": ["*.yml"]}, "flag": True}))
    store = PreferenceStore(path)

    store.load()

    assert json.loads(store.get_string(YAML_SCHEMA_PREFERENCE)) == {"a.json": ["*.yml"]}
    assert store.get_string("flag") == "true"
