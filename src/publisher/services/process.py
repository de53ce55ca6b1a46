"""External command execution for compiler and git wrappers."""

import shlex
import shutil
import subprocess
from pathlib import Path
from typing import Optional, Sequence
import logging

from publisher.errors import CommandError, ToolNotFoundError


class ProcessRunner:
    """Runs external tools synchronously and turns failures into CommandError."""

    def __init__(self):
        """Initialize process runner."""
        self.logger = logging.getLogger("publisher.process")

    def which(self, tool: str) -> Optional[str]:
        return shutil.which(tool)

    def require_tool(self, tool: str, hint: Optional[str] = None) -> str:
        """Return the absolute path of tool.

        Raises:
            ToolNotFoundError: If tool is not on PATH
        """
        path = self.which(tool)
        if path is None:
            self.logger.error(f"Required tool not found: {tool}")
            raise ToolNotFoundError(tool, hint)
        self.logger.debug(f"Found {tool} at {path}")
        return path

    def run(
        self,
        command: Sequence[str],
        cwd: Optional[Path] = None,
        capture: bool = True,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """Run a command and wait for it.

        Args:
            command: Argument vector (no shell)
            cwd: Working directory
            capture: Capture stdout/stderr as text; otherwise stream to the console
            check: Raise CommandError on non-zero exit

        Returns:
            CompletedProcess

        Raises:
            CommandError: If check is set and the command fails
            ToolNotFoundError: If the executable does not exist
        """
        command = [str(part) for part in command]
        location = f" (cwd={cwd})" if cwd else ""
        self.logger.debug(f"Executing{location}: {shlex.join(command)}")

        try:
            result = subprocess.run(
                command,
                cwd=str(cwd) if cwd else None,
                capture_output=capture,
                text=True,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(command[0]) from e

        if check and result.returncode != 0:
            stderr = result.stderr if capture else ""
            self.logger.error(
                f"Command exited with {result.returncode}: {shlex.join(command)}"
            )
            raise CommandError(command, result.returncode, stderr or "")

        return result
