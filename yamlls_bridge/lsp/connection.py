"""Child process connections for language servers."""

import subprocess
from typing import Any, Dict, IO, List, Optional, TYPE_CHECKING

from ..util.error import LSPError
from ..util.log import Log

if TYPE_CHECKING:
    from .client import LanguageServerSession

EXIT_GRACE = 2.0


class ProcessStreamConnectionProvider:
    """Spawns a server process and exposes its stdio as the LSP transport."""

    def __init__(self, commands: Optional[List[str]] = None, working_directory: Optional[str] = None):
        self.commands: List[str] = commands or []
        self.working_directory = working_directory
        self.process: Optional[subprocess.Popen] = None
        self._log = Log.create({"service": "lsp.connection"})

    def set_commands(self, commands: List[str]) -> None:
        self.commands = list(commands)

    def set_working_directory(self, working_directory: str) -> None:
        self.working_directory = working_directory

    def start(self) -> None:
        if not self.commands:
            raise LSPError({"provider": str(self)}, "No command to launch")

        self._log.info("Starting language server", {"command": " ".join(self.commands)})
        try:
            self.process = subprocess.Popen(
                self.commands,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                cwd=self.working_directory,
            )
        except OSError as e:
            raise LSPError({"command": self.commands}, f"Failed to launch {self.commands[0]}: {e}", e) from e

    @property
    def input_stream(self) -> IO[bytes]:
        """Bytes coming from the server."""
        if self.process is None or self.process.stdout is None:
            raise LSPError(message="Process not started")
        return self.process.stdout

    @property
    def output_stream(self) -> IO[bytes]:
        """Bytes going to the server."""
        if self.process is None or self.process.stdin is None:
            raise LSPError(message="Process not started")
        return self.process.stdin

    def is_alive(self) -> bool:
        return self.process is not None and self.process.poll() is None

    def stop(self, grace: float = EXIT_GRACE) -> None:
        """Give the process ``grace`` seconds to exit on its own, then terminate it."""
        if self.process is None:
            return

        try:
            self.process.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            pass

        try:
            if self.process.poll() is None:
                self.process.terminate()
            self.process.wait(timeout=5.0)
        except subprocess.TimeoutExpired:
            self.process.kill()
            self.process.wait()

        self._log.info("Language server stopped", {"returncode": self.process.returncode})
        self.process = None

    def handle_message(self, message: Dict[str, Any], session: "LanguageServerSession", root_uri: Optional[str]) -> None:
        """Hook invoked with every message received from the server, before the session dispatches it."""

    def __str__(self) -> str:
        return f"ProcessStreamConnectionProvider({' '.join(self.commands)})"
