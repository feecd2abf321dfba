"""LSP payloads sent to the server."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class WorkspaceFolder(BaseModel):
    uri: str


class WorkspaceFoldersChangeEvent(BaseModel):
    added: List[WorkspaceFolder] = Field(default_factory=list)
    removed: List[WorkspaceFolder] = Field(default_factory=list)


class DidChangeWorkspaceFoldersParams(BaseModel):
    event: WorkspaceFoldersChangeEvent


class DidChangeConfigurationParams(BaseModel):
    settings: Dict[str, Any]


def is_initialize_result(message: Dict[str, Any]) -> bool:
    """True for a successful response carrying server capabilities."""
    if "id" not in message or "method" in message:
        return False
    result = message.get("result")
    return isinstance(result, dict) and isinstance(result.get("capabilities"), dict)
