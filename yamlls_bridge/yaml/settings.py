"""Settings sent to the YAML language server."""

from typing import Any, Dict, List, Union

from pydantic import RootModel, ValidationError

from ..preferences import YAML_SCHEMA_PREFERENCE, PreferenceStore
from ..util.error import SchemaPreferenceError
from ..util.log import Log

YAML_KEY = "yaml"
SCHEMAS_KEY = "schemas"
VALIDATE_KEY = "validate"
COMPLETION_KEY = "completion"
HOVER_KEY = "hover"

BUNDLE_ID = "yamlls_bridge"

_log = Log.create({"service": "yaml.settings", "bundle": BUNDLE_ID})


class SchemaMapping(RootModel[Dict[str, Union[str, List[str]]]]):
    """Schema URI to one glob or a list of globs."""


def read_yaml_config_block(store: PreferenceStore) -> Dict[str, Any]:
    """Build the ``yaml`` block from the schema preference.

    An empty or blank preference yields an empty block. Otherwise the
    value must be a JSON object of schema URI to glob(s), and the block
    turns validation, completion and hover on.

    Raises:
        SchemaPreferenceError: the preference is not such an object
    """
    schema_str = store.get_string(YAML_SCHEMA_PREFERENCE)
    if not schema_str.strip():
        return {}

    try:
        schemas = SchemaMapping.model_validate_json(schema_str).root
    except ValidationError as e:
        raise SchemaPreferenceError(
            {"preference": YAML_SCHEMA_PREFERENCE},
            f"Invalid schema preference: {e.errors()[0]['msg']}",
            e,
        ) from e

    return {
        SCHEMAS_KEY: schemas,
        VALIDATE_KEY: True,
        COMPLETION_KEY: True,
        HOVER_KEY: True,
    }


def build_settings(store: PreferenceStore) -> Dict[str, Any]:
    """The ``settings`` value of ``workspace/didChangeConfiguration``.

    A malformed schema preference is logged and sent as an empty block.
    """
    try:
        yaml = read_yaml_config_block(store)
    except SchemaPreferenceError as e:
        _log.error(e.message, {"preference": YAML_SCHEMA_PREFERENCE})
        yaml = {}
    return {YAML_KEY: yaml}
