"""Publish workflow: compile, checksum, place files, commit."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from publisher.errors import ChecksumError
from publisher.models.config import PublishConfig
from publisher.models.status import PublishStage
from publisher.services.compiler import Compiler, find_artifact, make_compiler
from publisher.services.manifest_builder import PublishedBuild, publish_manifest, resolve_version
from publisher.services.vcs import GitPublisher
from publisher.utils.verification import compute_md5


@dataclass
class PublishResult:
    """Outcome of a publish run."""

    name: str
    version: str
    md5: str
    artifact: Path
    published: PublishedBuild
    committed: bool = False
    update_url: Optional[str] = None
    stages: list[PublishStage] = field(default_factory=list)


class PublishService:
    """Sequences one publish run for a single device.

    Steps run strictly in order and the first failure aborts the run. Nothing
    is rolled back: a git failure leaves the new binary and manifest written
    (and possibly staged) in the output directory.
    """

    def __init__(
        self,
        config: PublishConfig,
        compiler: Optional[Compiler] = None,
        git: Optional[GitPublisher] = None,
    ):
        self.logger = logging.getLogger("publisher.publish")
        self.config = config
        self.compiler = compiler or make_compiler(config.runner, config.image)
        self.git = git or GitPublisher(remote=config.git_remote, branch=config.git_branch)
        self.stage = PublishStage.PREFLIGHT
        self._stages: list[PublishStage] = []

    def _enter(self, stage: PublishStage) -> None:
        self.stage = stage
        self._stages.append(stage)
        self.logger.debug(f"Stage: {stage.value}")

    def preflight(self) -> None:
        """Check external tools before doing any work.

        Raises:
            ToolNotFoundError: If the compiler runtime or git is missing
        """
        self._enter(PublishStage.PREFLIGHT)
        self.compiler.check_available()
        if not self.config.skip_git:
            self.git.check_available()

        if not self.config.base_url:
            self.logger.warning(
                "BASE_URL not set. Manifest will still be created, "
                "but it won't include an absolute URL."
            )
            self.logger.warning(
                "Set BASE_URL to something like: https://<user>.github.io/<repo>/firmware"
            )

    def checksum(self, artifact: Path) -> str:
        self._enter(PublishStage.CHECKSUMMING)
        try:
            return compute_md5(artifact)
        except OSError as e:
            raise ChecksumError(f"Could not compute MD5 of {artifact}: {e}") from e

    def run(self) -> PublishResult:
        """Execute the full publish.

        Returns:
            PublishResult

        Raises:
            PublishError: Subclass matching the failed step
            ManifestError: If manifest inputs are invalid
            OSError: If the output files cannot be written
        """
        config = self.config
        name = config.name
        version = resolve_version(config.version)

        try:
            self.preflight()

            self._enter(PublishStage.COMPILING)
            build_dir = self.compiler.compile(config.config_path, config.build_name)

            self._enter(PublishStage.LOCATING)
            artifact = find_artifact(build_dir)
            self.logger.info(f"==> Using binary: {artifact}")

            md5 = self.checksum(artifact)
            self.logger.info(f"==> MD5: {md5}")
            self.logger.info(f"==> VERSION: {version}")
            self.logger.info(f"==> CHIP_FAMILY: {config.chip_family}")

            self._enter(PublishStage.PLACING)
            published = publish_manifest(
                binary=artifact,
                device_dir=config.device_out_dir,
                name=name,
                version=version,
                chip_family=config.chip_family,
                bin_name=config.bin_name,
                manifest_name=config.manifest_name,
                base_url=config.base_url,
                md5=md5,
            )

            committed = False
            if config.skip_git:
                self.logger.info("Skipping git add/commit/push")
            else:
                self._enter(PublishStage.COMMITTING)
                committed = self.git.publish(published.paths, f"Publish OTA {name} {version}")
        except Exception:
            self.logger.error(f"Publish of {name} failed during {self.stage.value}")
            self._enter(PublishStage.FAILED)
            raise

        self._enter(PublishStage.DONE)
        self.logger.info("==> Done.")
        if config.update_url:
            self.logger.info(f"ESPHome update source URL should be: {config.update_url}")
        else:
            self.logger.info("ESPHome update source URL: (set BASE_URL first to print final URL)")

        return PublishResult(
            name=name,
            version=version,
            md5=md5,
            artifact=artifact,
            published=published,
            committed=committed,
            update_url=config.update_url,
            stages=list(self._stages),
        )
