"""Unit tests for ProcessRunner."""

import subprocess
import pytest
from unittest.mock import patch

from publisher.errors import CommandError, ToolNotFoundError
from publisher.services.process import ProcessRunner


@pytest.mark.unit
class TestProcessRunner:
    """Test ProcessRunner in isolation."""

    @pytest.fixture
    def runner(self):
        return ProcessRunner()

    def test_run_success(self, runner):
        completed = subprocess.CompletedProcess(["git", "status"], 0, "clean", "")

        with patch("subprocess.run", return_value=completed) as mock_run:
            result = runner.run(["git", "status"])

        assert result is completed
        mock_run.assert_called_once_with(
            ["git", "status"], cwd=None, capture_output=True, text=True
        )

    def test_run_stringifies_arguments_and_cwd(self, runner, tmp_path):
        completed = subprocess.CompletedProcess(["git"], 0, "", "")

        with patch("subprocess.run", return_value=completed) as mock_run:
            runner.run(["git", "add", tmp_path / "manifest.json"], cwd=tmp_path, capture=False)

        args, kwargs = mock_run.call_args
        assert args[0] == ["git", "add", str(tmp_path / "manifest.json")]
        assert kwargs["cwd"] == str(tmp_path)
        assert kwargs["capture_output"] is False

    def test_run_failure_raises(self, runner):
        completed = subprocess.CompletedProcess(["git", "push"], 1, "", "rejected\n")

        with patch("subprocess.run", return_value=completed):
            with pytest.raises(CommandError, match="exit code 1, stderr: rejected") as exc_info:
                runner.run(["git", "push"])

        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr == "rejected\n"

    def test_run_failure_unchecked(self, runner):
        completed = subprocess.CompletedProcess(["git", "diff"], 1, "", "")

        with patch("subprocess.run", return_value=completed):
            result = runner.run(["git", "diff"], check=False)

        assert result.returncode == 1

    def test_missing_executable(self, runner):
        with patch("subprocess.run", side_effect=FileNotFoundError("esphome")):
            with pytest.raises(ToolNotFoundError, match="'esphome' not found"):
                runner.run(["esphome", "compile", "dev.yaml"])

    def test_require_tool_found(self, runner):
        with patch("shutil.which", return_value="/usr/bin/git"):
            assert runner.require_tool("git") == "/usr/bin/git"

    def test_require_tool_missing(self, runner):
        with patch("shutil.which", return_value=None):
            with pytest.raises(ToolNotFoundError, match="'git' not found in PATH. Install git"):
                runner.require_tool("git", "Install git")
