"""Tests for workspace folder enumeration."""

from yamlls_bridge.util.error import WorkspaceError
from yamlls_bridge.workspace import Resource
from yamlls_bridge.yaml.folders import list_initial_folders, to_workspace_folders


def uris(folders):
    return [folder.uri for folder in folders]


def test_empty_workspace(workspace):
    assert list_initial_folders(workspace) == []


def test_visible_projects_only(workspace):
    workspace.create_project("P1", "/a")
    workspace.create_project("P2", "/b")
    workspace.create_project(".hidden", "/h", hidden=True)

    assert uris(list_initial_folders(workspace)) == ["file:///a", "file:///b"]


def test_dot_named_and_closed_projects_are_skipped(workspace):
    workspace.create_project(".settings", "/s")
    workspace.create_project("closed", "/c", open=False)
    workspace.create_project("open", "/o")

    assert uris(list_initial_folders(workspace)) == ["file:///o"]


def test_nested_resources_are_not_folders(workspace, tmp_path):
    project_dir = tmp_path / "proj"
    (project_dir / "sub").mkdir(parents=True)
    (project_dir / "sub" / "values.yaml").write_text("a: 1\n")
    (project_dir / "chart.yaml").write_text("name: x\n")
    workspace.create_project("proj", project_dir)

    assert uris(list_initial_folders(workspace)) == [project_dir.as_uri()]


def test_traversal_error_skips_rest_of_project(workspace, monkeypatch):
    workspace.create_project("bad", "/bad")
    workspace.create_project("good", "/good")

    original = Resource.members

    def members(self):
        if self.name == "bad":
            raise WorkspaceError(message="permission denied")
        return original(self)

    monkeypatch.setattr(Resource, "members", members)

    assert uris(list_initial_folders(workspace)) == ["file:///bad", "file:///good"]


def test_to_workspace_folders(workspace):
    projects = [workspace.create_project("x", "/x"), workspace.create_project("y", "/y")]

    assert [f.model_dump() for f in to_workspace_folders(projects)] == [
        {"uri": "file:///x"},
        {"uri": "file:///y"},
    ]
