"""Global pytest fixtures and configuration."""

import hashlib
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


FIRMWARE_BYTES = b"\xe9\x06\x02\x20" + b"esphome-firmware" * 512


@pytest.fixture
def firmware_bytes():
    """Fake firmware image content."""
    return FIRMWARE_BYTES


@pytest.fixture
def firmware_md5():
    """MD5 of firmware_bytes."""
    return hashlib.md5(FIRMWARE_BYTES).hexdigest()


@pytest.fixture
def sample_binary(tmp_path):
    """Firmware binary outside any output tree."""
    path = tmp_path / "build" / "firmware.ota.bin"
    path.parent.mkdir(parents=True)
    path.write_bytes(FIRMWARE_BYTES)
    return path


@pytest.fixture
def device_yaml(tmp_path):
    """ESPHome config at <tmp>/config/meteo_sonda.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    path = config_dir / "meteo_sonda.yaml"
    path.write_text("esphome:\n  name: meteo_sonda\n", encoding="utf-8")
    return path


@pytest.fixture
def esphome_build(device_yaml):
    """Build output the way `esphome compile` leaves it for device_yaml."""
    pioenv = device_yaml.parent / ".esphome" / "build" / "meteo_sonda" / ".pioenvs" / "meteo_sonda"
    pioenv.mkdir(parents=True)
    (pioenv / "firmware.bin").write_bytes(b"factory image")
    (pioenv / "firmware.ota.bin").write_bytes(FIRMWARE_BYTES)
    return pioenv.parent.parent


@pytest.fixture
def mock_runner():
    """ProcessRunner double: every tool exists and every command succeeds."""
    runner = MagicMock()
    runner.require_tool = MagicMock(side_effect=lambda tool, hint=None: f"/usr/bin/{tool}")
    runner.run = MagicMock(
        side_effect=lambda command, cwd=None, capture=True, check=True: subprocess.CompletedProcess(
            command, 0, "", ""
        )
    )
    return runner
