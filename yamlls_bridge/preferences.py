"""Persistent key/value preference store."""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel

from .bus import EventBus
from .paths import Paths
from .util.error import ConfigError
from .util.log import Log

PROPERTY_CHANGE = "preference.changed"

YAML_SCHEMA_PREFERENCE = "yaml.schema"


class PropertyChangeEvent(BaseModel):
    """A preference value changed."""

    property: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None


class PreferenceStore:
    """String preferences with defaults, stored as a JSON object on disk."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path or Paths.preferences
        self._values: Dict[str, str] = {}
        self._defaults: Dict[str, str] = {}
        self._bus = EventBus("preferences.bus")
        self._log = Log.create({"service": "preferences"})

    def add_property_change_listener(self, listener: Callable[[PropertyChangeEvent], None]) -> Callable[[], None]:
        """Register a listener. Returns unsubscribe function."""
        return self._bus.subscribe(PROPERTY_CHANGE, listener)

    def set_default(self, key: str, value: str) -> None:
        self._defaults[key] = value

    def get_default_string(self, key: str) -> str:
        return self._defaults.get(key, "")

    def contains(self, key: str) -> bool:
        return key in self._values or key in self._defaults

    def get_string(self, key: str) -> str:
        """Current value, falling back to the default and then to an empty string."""
        if key in self._values:
            return self._values[key]
        return self.get_default_string(key)

    def set_value(self, key: str, value: str) -> None:
        """Store a value and notify listeners when it differs from the current one."""
        old_value = self.get_string(key)
        if value == self.get_default_string(key):
            self._values.pop(key, None)
        else:
            self._values[key] = value

        if old_value != value:
            self._bus.publish(PROPERTY_CHANGE, PropertyChangeEvent(
                property=key,
                old_value=old_value,
                new_value=value,
            ))

    def set_to_default(self, key: str) -> None:
        self.set_value(key, self.get_default_string(key))

    def load(self) -> None:
        """Load stored values. A missing file leaves the store empty.

        Non-string values are kept as their JSON text.
        """
        if not self.path.exists():
            return

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data: Any = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self._log.error("Failed to load preferences", {"path": str(self.path), "error": str(e)})
            raise ConfigError({"path": str(self.path)}, f"Cannot read preferences: {e}", e) from e

        if not isinstance(data, dict):
            raise ConfigError({"path": str(self.path)}, "Preferences file must hold a JSON object")

        self._values = {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in data.items()}

    def save(self) -> None:
        """Write the values that differ from their defaults."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(self._values, f, indent=2)
            self._log.info("Preferences saved", {"path": str(self.path)})
        except OSError as e:
            self._log.error("Failed to save preferences", {"error": str(e)})
            raise ConfigError({"path": str(self.path)}, f"Cannot write preferences: {e}", e) from e


def initialize_default_preferences(store: PreferenceStore) -> None:
    """Install the defaults the YAML support reads."""
    store.set_default(YAML_SCHEMA_PREFERENCE, "")
