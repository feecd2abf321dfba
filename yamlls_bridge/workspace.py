"""Workspace resource model: projects, resource trees and change deltas."""

import os
from enum import IntEnum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict

from .bus import EventBus
from .util.error import WorkspaceError
from .util.log import Log

# Resource change event types
POST_CHANGE = 1

# Delta kinds
ADDED = 0x1
REMOVED = 0x2
CHANGED = 0x4

# Delta flags
CONTENT = 0x100
OPEN = 0x4000
MARKERS = 0x20000


class ResourceType(IntEnum):
    FILE = 1
    FOLDER = 2
    PROJECT = 4
    ROOT = 8


ResourceVisitor = Callable[["Resource"], bool]


class Resource:
    """A file, folder, project or the workspace root."""

    def __init__(self, name: str, type: ResourceType, location: Optional[Path],
                 parent: Optional["Resource"] = None, hidden: bool = False):
        self.name = name
        self.type = type
        self.location = Path(os.path.abspath(location)) if location is not None else None
        self.parent = parent
        self.hidden = hidden

    @property
    def location_uri(self) -> Optional[str]:
        return self.location.as_uri() if self.location is not None else None

    def is_accessible(self) -> bool:
        return self.parent is None or self.parent.is_accessible()

    def is_hidden(self) -> bool:
        return self.hidden

    def members(self) -> List["Resource"]:
        """Direct children found on disk, sorted by name."""
        if self.type == ResourceType.FILE or self.location is None:
            return []
        if not self.is_accessible() or not self.location.is_dir():
            return []

        try:
            entries = sorted(os.scandir(self.location), key=lambda e: e.name)
        except OSError as e:
            raise WorkspaceError({"resource": self.name}, f"Cannot list {self.location}: {e}", e) from e

        children = []
        for entry in entries:
            kind = ResourceType.FOLDER if entry.is_dir(follow_symlinks=False) else ResourceType.FILE
            children.append(Resource(entry.name, kind, Path(entry.path), parent=self))
        return children

    def accept(self, visitor: ResourceVisitor, include_hidden: bool = False) -> None:
        """Visit this resource and, while the visitor returns True, its descendants.

        Hidden resources are skipped unless ``include_hidden`` is set.
        """
        if self.hidden and not include_hidden:
            return
        if visitor(self):
            for member in self.members():
                member.accept(visitor, include_hidden)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r}, {self.type.name})"


class Project(Resource):
    """A top-level project mapped onto a directory."""

    def __init__(self, name: str, location: Union[str, Path], root: "WorkspaceRoot",
                 hidden: bool = False, open: bool = True):
        super().__init__(name, ResourceType.PROJECT, Path(location), parent=root, hidden=hidden)
        self.open = open

    def is_accessible(self) -> bool:
        return self.open


class WorkspaceRoot(Resource):
    def __init__(self):
        super().__init__("", ResourceType.ROOT, None)
        self._projects: Dict[str, Project] = {}

    def get_projects(self) -> List[Project]:
        return [self._projects[name] for name in sorted(self._projects)]

    def get_project(self, name: str) -> Optional[Project]:
        return self._projects.get(name)

    def members(self) -> List[Resource]:
        return list(self.get_projects())


class ResourceDelta:
    """One node of a change tree."""

    def __init__(self, resource: Resource, kind: int = CHANGED, flags: int = 0,
                 children: Optional[List["ResourceDelta"]] = None):
        self.resource = resource
        self.kind = kind
        self.flags = flags
        self.children = children or []

    def accept(self, visitor: Callable[["ResourceDelta"], bool]) -> None:
        if visitor(self):
            for child in self.children:
                child.accept(visitor)


class ResourceChangeEvent(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    type: int
    delta: ResourceDelta


def _topic(event_type: int) -> str:
    return f"resource.{event_type}"


class Workspace:
    """Project container that publishes a delta for every change."""

    def __init__(self):
        self.root = WorkspaceRoot()
        self._bus = EventBus("workspace.bus")
        self._log = Log.create({"service": "workspace"})

    def add_resource_change_listener(self, listener: Callable[[ResourceChangeEvent], None],
                                     mask: int = POST_CHANGE) -> Callable[[], None]:
        """Subscribe ``listener`` to each event type in ``mask``. Returns unsubscribe function."""
        unsubscribers = []
        bit = 1
        while bit <= mask:
            if mask & bit:
                unsubscribers.append(self._bus.subscribe(_topic(bit), listener))
            bit <<= 1

        def unsubscribe():
            for unsub in unsubscribers:
                unsub()

        return unsubscribe

    def create_project(self, name: str, location: Union[str, Path], hidden: bool = False,
                       open: bool = True) -> Project:
        if self.root.get_project(name) is not None:
            raise WorkspaceError({"project": name}, f"Project {name} already exists")

        project = Project(name, location, self.root, hidden=hidden, open=open)
        self.root._projects[name] = project
        self._log.info("Project added", {"project": name, "location": str(project.location)})
        self._fire(ResourceDelta(project, ADDED))
        return project

    def delete_project(self, name: str) -> Project:
        project = self._require(name)
        del self.root._projects[name]
        self._log.info("Project removed", {"project": name})
        self._fire(ResourceDelta(project, REMOVED))
        return project

    def open_project(self, name: str) -> None:
        self._set_open(name, True)

    def close_project(self, name: str) -> None:
        self._set_open(name, False)

    def touch_markers(self, resource: Resource) -> None:
        """Publish an annotation-only change for ``resource``."""
        self._fire(ResourceDelta(resource, CHANGED, MARKERS), root_flags=MARKERS)

    def _set_open(self, name: str, open: bool) -> None:
        project = self._require(name)
        if project.open == open:
            return
        project.open = open
        self._fire(ResourceDelta(project, CHANGED, OPEN))

    def _require(self, name: str) -> Project:
        project = self.root.get_project(name)
        if project is None:
            raise WorkspaceError({"project": name}, f"No project named {name}")
        return project

    def _fire(self, delta: ResourceDelta, root_flags: int = 0) -> None:
        root_delta = ResourceDelta(self.root, CHANGED, root_flags, [delta])
        self._bus.publish(_topic(POST_CHANGE), ResourceChangeEvent(type=POST_CHANGE, delta=root_delta))
