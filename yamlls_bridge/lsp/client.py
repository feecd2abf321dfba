"""Language server sessions and the registry of active ones."""

import os
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from pathlib import Path
from typing import Any, Dict, List, Optional

from pylsp_jsonrpc.dispatchers import MethodDispatcher
from pylsp_jsonrpc.endpoint import Endpoint
from pylsp_jsonrpc.streams import JsonRpcStreamReader, JsonRpcStreamWriter

from ..util.error import LSPError
from ..util.log import Log
from .connection import ProcessStreamConnectionProvider
from .definitions import ServerDefinition
from .protocol import DidChangeConfigurationParams, DidChangeWorkspaceFoldersParams, is_initialize_result

INITIALIZE_TIMEOUT = 30.0
SHUTDOWN_TIMEOUT = 5.0
READER_JOIN_TIMEOUT = 2.0

_MESSAGE_TYPES = {1: "error", 2: "warn", 3: "info", 4: "debug"}


class LanguageServerSession(MethodDispatcher):
    """One running server, talking JSON-RPC over the provider's streams.

    Every message read from the server is first handed to the provider's
    ``handle_message`` hook on the reader thread, then consumed by the
    endpoint. For the initialize response, ``initialized`` is sent and the
    session registered before the hook runs.
    """

    def __init__(self, definition: ServerDefinition, provider: ProcessStreamConnectionProvider,
                 root_path: Optional[str] = None):
        self.definition = definition
        self.provider = provider
        self.root_path = root_path
        self.endpoint: Optional[Endpoint] = None
        self.capabilities: Dict[str, Any] = {}
        self.diagnostics: Dict[str, List[Dict[str, Any]]] = {}
        self._reader: Optional[JsonRpcStreamReader] = None
        self._writer: Optional[JsonRpcStreamWriter] = None
        self._thread: Optional[threading.Thread] = None
        self._log = Log.create({"service": f"lsp.session.{definition.id}"})

    @property
    def root_uri(self) -> Optional[str]:
        return Path(self.root_path).absolute().as_uri() if self.root_path else None

    def start(self, timeout: float = INITIALIZE_TIMEOUT) -> None:
        """Launch the server and run the initialize exchange."""
        self.provider.start()

        self._reader = JsonRpcStreamReader(self.provider.input_stream)
        self._writer = JsonRpcStreamWriter(self.provider.output_stream)
        self.endpoint = Endpoint(self, self._writer.write)

        self._thread = threading.Thread(
            target=self._reader.listen,
            args=(self._consume,),
            name=f"lsp-reader-{self.definition.id}",
            daemon=True,
        )
        self._thread.start()

        try:
            self._initialize(timeout)
        except Exception:
            LanguageServiceAccessor.unregister(self)
            self._close()
            raise

        LanguageServiceAccessor.register(self)
        self._log.info("Language server started", {"root": self.root_uri})

    def stop(self) -> None:
        """Shut the server down and release its process."""
        LanguageServiceAccessor.unregister(self)

        if self.endpoint:
            try:
                self.endpoint.request("shutdown").result(timeout=SHUTDOWN_TIMEOUT)
                self.endpoint.notify("exit")
            except Exception as e:
                self._log.warn("Shutdown request failed", {"error": str(e)})

        self._close()
        self._log.info("Language server session closed")

    def did_change_configuration(self, params: DidChangeConfigurationParams) -> None:
        self._notify("workspace/didChangeConfiguration", params.model_dump())

    def did_change_workspace_folders(self, params: DidChangeWorkspaceFoldersParams) -> None:
        self._notify("workspace/didChangeWorkspaceFolders", params.model_dump())

    def _notify(self, method: str, params: Dict[str, Any]) -> None:
        if not self.endpoint:
            raise LSPError({"method": method}, "Session is not running")
        self.endpoint.notify(method, params)

    def _initialize(self, timeout: float) -> None:
        init_params = {
            "processId": os.getpid(),
            "rootUri": self.root_uri,
            "capabilities": {
                "workspace": {
                    "workspaceFolders": True,
                    "didChangeConfiguration": {"dynamicRegistration": True},
                },
                "textDocument": {
                    "publishDiagnostics": {"relatedInformation": True},
                },
            },
            "workspaceFolders": None,
        }

        try:
            result = self.endpoint.request("initialize", init_params).result(timeout=timeout)
        except FutureTimeoutError as e:
            raise LSPError({"server": self.definition.id}, f"No initialize response within {timeout}s", e) from e

        self.capabilities = (result or {}).get("capabilities", {})

    def _consume(self, message: Dict[str, Any]) -> None:
        if self.endpoint and is_initialize_result(message):
            # initialized must precede every other notification, including the ones the hook sends.
            self.endpoint.notify("initialized", {})
            LanguageServiceAccessor.register(self)

        try:
            self.provider.handle_message(message, self, self.root_uri)
        except Exception as e:
            self._log.error("Message hook failed", {"error": str(e)})
        if self.endpoint:
            self.endpoint.consume(message)

    def _close(self) -> None:
        if self.endpoint:
            self.endpoint.shutdown()
            self.endpoint = None
        if self._writer:
            self._writer.close()
            self._writer = None
        self.provider.stop()
        if self._thread and self._thread is not threading.current_thread():
            self._thread.join(timeout=READER_JOIN_TIMEOUT)
        self._thread = None
        if self._reader:
            self._reader.close()
            self._reader = None

    # Server to client messages

    def m_window__log_message(self, type: int = 4, message: str = "", **_kwargs):
        level = _MESSAGE_TYPES.get(type, "debug")
        getattr(self._log, level)(message, {"source": "server"})

    def m_window__show_message(self, type: int = 3, message: str = "", **_kwargs):
        self.m_window__log_message(type=type, message=message)

    def m_text_document__publish_diagnostics(self, uri: str = "", diagnostics: Optional[List[Dict[str, Any]]] = None, **_kwargs):
        self.diagnostics[uri] = diagnostics or []
        self._log.debug("Received diagnostics", {"uri": uri, "count": len(self.diagnostics[uri])})

    def m_client__register_capability(self, registrations: Optional[List[Dict[str, Any]]] = None, **_kwargs):
        for registration in registrations or []:
            self._log.debug("Capability registered", {"method": registration.get("method")})
        return None

    def __str__(self) -> str:
        return f"LanguageServerSession({self.definition.id}, {self.provider})"


class LanguageServiceAccessor:
    """Registry of running sessions, queried afresh by each caller."""

    _sessions: List[LanguageServerSession] = []
    _log = Log.create({"service": "lsp.accessor"})

    @classmethod
    def register(cls, session: LanguageServerSession) -> None:
        if session not in cls._sessions:
            cls._sessions.append(session)

    @classmethod
    def unregister(cls, session: LanguageServerSession) -> None:
        try:
            cls._sessions.remove(session)
        except ValueError:
            pass

    @classmethod
    def get_active_language_servers(cls) -> List[LanguageServerSession]:
        return list(cls._sessions)

    @classmethod
    def resolve_server_definition(cls, session: LanguageServerSession) -> Optional[ServerDefinition]:
        return getattr(session, "definition", None)

    @classmethod
    def start_session(cls, definition: ServerDefinition, root_path: Optional[str] = None) -> LanguageServerSession:
        """Create a provider from ``definition`` and start a session on it."""
        session = LanguageServerSession(definition, definition.create_connection_provider(), root_path)
        try:
            session.start()
        except Exception as e:
            cls._log.error("Failed to start language server", {"server": definition.id, "error": str(e)})
            raise
        return session

    @classmethod
    def shutdown_all(cls) -> None:
        for session in cls.get_active_language_servers():
            session.stop()
        cls._sessions.clear()
