"""Exception hierarchy for publish failures.

Each error carries the exit code reported by the command line entry point.
"""

from typing import Optional

from publisher.models.status import ExitCode


class PublishError(Exception):
    """Base class for failures that abort a publish run."""

    exit_code: ExitCode = ExitCode.FAILED


class ToolNotFoundError(PublishError):
    """A required external tool (esphome, docker, git) is not on PATH."""

    exit_code = ExitCode.TOOL_MISSING

    def __init__(self, tool: str, hint: Optional[str] = None):
        self.tool = tool
        message = f"'{tool}' not found in PATH."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message)


class BuildOutputNotFoundError(PublishError):
    """Compilation did not leave a build directory behind."""

    exit_code = ExitCode.BUILD_OUTPUT_MISSING


class ArtifactNotFoundError(PublishError):
    """No firmware binary was found in the build directory."""

    exit_code = ExitCode.ARTIFACT_MISSING


class ChecksumError(PublishError):
    """The firmware binary could not be hashed."""

    exit_code = ExitCode.CHECKSUM_FAILED


class CommandError(PublishError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = f", stderr: {stderr.strip()}" if stderr and stderr.strip() else ""
        super().__init__(
            f"Command failed: {' '.join(command)} (exit code {returncode}{detail})"
        )


class ManifestError(ValueError):
    """Manifest inputs failed validation."""


class CompileError(PublishError):
    """The firmware compiler exited with an error, so no build output exists."""

    exit_code = ExitCode.BUILD_OUTPUT_MISSING


class ArtifactMismatchError(PublishError, ValueError):
    """The published copy of the binary does not match its checksum."""
