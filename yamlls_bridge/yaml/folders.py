"""Workspace folders announced to the YAML language server."""

from typing import Iterable, List

from ..lsp.protocol import WorkspaceFolder
from ..util.error import WorkspaceError
from ..util.log import Log
from ..workspace import Resource, ResourceType, Workspace
from .settings import BUNDLE_ID

_log = Log.create({"service": "yaml.folders", "bundle": BUNDLE_ID})


def is_workspace_folder(resource: Resource) -> bool:
    return (
        resource.is_accessible()
        and not resource.is_hidden()
        and resource.type == ResourceType.PROJECT
        and not resource.name.startswith(".")
    )


def list_initial_folders(workspace: Workspace) -> List[WorkspaceFolder]:
    """Folders for every visible, open project of the workspace.

    A project whose tree cannot be walked is logged and skipped.
    """
    folders: List[Resource] = []

    def visit(resource: Resource) -> bool:
        if is_workspace_folder(resource):
            folders.append(resource)
        return True

    for project in workspace.root.get_projects():
        try:
            project.accept(visit)
        except WorkspaceError as e:
            _log.error(e.message, {"project": project.name})

    return to_workspace_folders(folders)


def to_workspace_folders(resources: Iterable[Resource]) -> List[WorkspaceFolder]:
    return [WorkspaceFolder(uri=resource.location_uri) for resource in resources]
