"""ESPHome compiler wrappers and build artifact discovery."""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from publisher.errors import (
    ArtifactNotFoundError,
    BuildOutputNotFoundError,
    CommandError,
    CompileError,
)
from publisher.services.process import ProcessRunner

# Preferred first: the OTA-only image, then the full factory-less image
ARTIFACT_NAMES = ("firmware.ota.bin", "firmware.bin")


def build_dir_for(config_path: Path, device_name: str) -> Path:
    """Where ESPHome leaves build output: <config dir>/.esphome/build/<device>."""
    return Path(config_path).resolve().parent / ".esphome" / "build" / device_name


def find_artifact(build_dir: Path) -> Path:
    """Locate the binary to publish inside an ESPHome build directory.

    Typically .pioenvs/<device>/firmware.ota.bin or firmware.bin.

    Raises:
        ArtifactNotFoundError: If neither file exists anywhere under build_dir
    """
    for artifact_name in ARTIFACT_NAMES:
        matches = sorted(p for p in Path(build_dir).rglob(artifact_name) if p.is_file())
        if matches:
            return matches[0]
    raise ArtifactNotFoundError(
        f"Could not find {' or '.join(ARTIFACT_NAMES)} under {build_dir}"
    )


class Compiler(ABC):
    """Compiles a device YAML and returns the build directory."""

    tool = "esphome"
    hint: Optional[str] = None

    def __init__(self, runner: Optional[ProcessRunner] = None):
        self.logger = logging.getLogger("publisher.compiler")
        self.runner = runner or ProcessRunner()

    def check_available(self) -> None:
        self.runner.require_tool(self.tool, self.hint)

    @abstractmethod
    def command(self, config_path: Path) -> list[str]:
        """Argument vector that compiles config_path."""

    def compile(self, config_path: Path, device_name: str) -> Path:
        """Run the compiler for config_path.

        Returns:
            Build directory for device_name

        Raises:
            CompileError: If the compiler exits non-zero
            BuildOutputNotFoundError: If the build directory is missing afterwards
        """
        config_path = Path(config_path).resolve()
        self.logger.info(f"==> Compiling {device_name} from {config_path}")
        try:
            self.runner.run(self.command(config_path), cwd=config_path.parent, capture=False)
        except CommandError as e:
            raise CompileError(f"Compilation of {config_path.name} failed: {e}") from e

        build_dir = build_dir_for(config_path, device_name)
        if not build_dir.is_dir():
            raise BuildOutputNotFoundError(f"Build dir not found: {build_dir}")
        return build_dir


class LocalCompiler(Compiler):
    """Uses the esphome CLI installed on this machine."""

    hint = "Install ESPHome CLI or run this in an environment where 'esphome' exists."

    def command(self, config_path: Path) -> list[str]:
        return ["esphome", "compile", config_path.name]


class DockerCompiler(Compiler):
    """Runs esphome from its container image with the config dir mounted at /config."""

    tool = "docker"
    hint = "Install Docker or use the local esphome runner."

    def __init__(self, image: str, runner: Optional[ProcessRunner] = None):
        super().__init__(runner)
        self.image = image

    def command(self, config_path: Path) -> list[str]:
        return [
            "docker", "run", "--rm",
            "-v", f"{config_path.parent}:/config",
            self.image,
            "compile", config_path.name,
        ]


def make_compiler(runner_name: str, image: str, runner: Optional[ProcessRunner] = None) -> Compiler:
    if runner_name == "docker":
        return DockerCompiler(image, runner)
    return LocalCompiler(runner)
