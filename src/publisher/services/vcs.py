"""Git staging, commit and push of published files."""

import logging
from pathlib import Path
from typing import Optional, Sequence

from publisher.errors import CommandError, PublishError
from publisher.services.process import ProcessRunner


class VcsError(PublishError):
    """git add/commit/push failed; files may be written and staged but not pushed."""


class GitPublisher:
    """Records published files in the current git repository."""

    def __init__(
        self,
        remote: str = "origin",
        branch: str = "",
        runner: Optional[ProcessRunner] = None,
    ):
        self.logger = logging.getLogger("publisher.git")
        self.remote = remote
        self.branch = branch
        self.runner = runner or ProcessRunner()

    def check_available(self) -> None:
        self.runner.require_tool("git")

    def _git(self, *args: str, check: bool = True):
        return self.runner.run(["git", *args], check=check)

    def has_staged_changes(self) -> bool:
        # `git diff --cached --quiet` exits 1 when the index differs from HEAD
        result = self._git("diff", "--cached", "--quiet", check=False)
        if result.returncode not in (0, 1):
            raise VcsError(f"git diff failed with exit code {result.returncode}")
        return result.returncode == 1

    def push_command(self) -> list[str]:
        args = ["push"]
        if self.branch:
            args += [self.remote, self.branch]
        elif self.remote != "origin":
            args.append(self.remote)
        return args

    def publish(self, paths: Sequence[Path], message: str) -> bool:
        """Stage paths, then commit and push if anything changed.

        Returns:
            True if a commit was pushed, False if there was nothing to commit

        Raises:
            VcsError: If any git command fails
        """
        self.logger.info("==> Git add/commit/push")
        try:
            self._git("add", *[str(p) for p in paths])

            if not self.has_staged_changes():
                self.logger.info("No changes to commit.")
                return False

            self._git("commit", "-m", message)
            self._git(*self.push_command())
        except CommandError as e:
            raise VcsError(str(e)) from e

        self.logger.info(f"Committed and pushed: {message}")
        return True
