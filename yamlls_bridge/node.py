"""Locate the Node.js runtime that executes the bundled language server."""

import os
import shutil
from pathlib import Path

from .util.error import LaunchError
from .util.log import Log

NODE_ENV = "YAMLLS_NODE"

_log = Log.create({"service": "node"})


def get_node_location() -> Path:
    """Absolute path of the node executable.

    ``$YAMLLS_NODE`` wins over a lookup on ``PATH``.
    """
    override = os.environ.get(NODE_ENV, "").strip()
    if override:
        path = Path(override)
        if not path.is_file():
            raise LaunchError({"env": NODE_ENV, "path": override}, f"{NODE_ENV} does not point to a file: {override}")
        return path.absolute()

    found = shutil.which("node")
    if not found:
        raise LaunchError(message="Cannot find node on PATH; set " + NODE_ENV)

    _log.debug("Found node", {"path": found})
    return Path(found).absolute()
