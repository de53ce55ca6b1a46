"""Publish configuration populated once at startup."""

import logging
import os
import re
from pathlib import Path
from typing import Mapping, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


DEFAULT_OUT_ROOT = "docs/firmware"
DEFAULT_BIN_NAME = "firmware.ota.bin"
DEFAULT_MANIFEST_NAME = "manifest.json"
DEFAULT_IMAGE = "ghcr.io/esphome/esphome:stable"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class PublishConfig(BaseModel):
    """Everything a publish run needs, with documented defaults.

    Built from command line arguments layered over environment variables by
    `from_sources`; the services only ever read this object.
    """

    config_path: Path = Field(..., description="ESPHome device YAML")
    chip_family: str = Field(..., min_length=1, description="e.g. ESP32, ESP32-C3, ESP8266")
    device_name: Optional[str] = Field(
        None,
        pattern=r"^[A-Za-z0-9._-]+$",
        description="Override for the published device name (default: YAML file stem)",
    )
    version: Optional[str] = Field(
        None, description="Explicit build version (default: current minute timestamp)"
    )
    base_url: str = Field("", description="Public URL serving the output root")
    out_root: Path = Field(Path(DEFAULT_OUT_ROOT), description="Static hosting directory")
    bin_name: str = Field(DEFAULT_BIN_NAME, description="Published binary filename")
    manifest_name: str = Field(DEFAULT_MANIFEST_NAME, description="Manifest filename")
    runner: str = Field("local", pattern=r"^(local|docker)$", description="How to run esphome")
    image: str = Field(DEFAULT_IMAGE, description="ESPHome container image for the docker runner")
    git_remote: str = Field("origin", description="Remote to push to")
    git_branch: str = Field("", description="Branch to push (empty: current upstream)")
    skip_git: bool = Field(False, description="Write files but do not commit/push")
    log_file: str = Field("./logs/publisher.log", description="Rotating log file")
    log_level: int = Field(logging.INFO, description="Logging level")

    @field_validator("base_url")
    @classmethod
    def strip_base_url(cls, v: str) -> str:
        """Trim whitespace and trailing slashes so URLs join cleanly."""
        return v.strip().rstrip("/")

    @field_validator("device_name")
    @classmethod
    def not_relative_segment(cls, v: Optional[str]) -> Optional[str]:
        if v in (".", ".."):
            raise ValueError("Device name must not be '.' or '..'")
        return v

    @field_validator("bin_name", "manifest_name")
    @classmethod
    def plain_filename(cls, v: str) -> str:
        if not v or "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"Must be a plain file name: {v!r}")
        return v

    @model_validator(mode="after")
    def safe_published_name(self) -> "PublishConfig":
        """The YAML stem becomes the directory name when there is no override."""
        if not re.match(r"^[A-Za-z0-9._-]+$", self.name) or self.name in (".", ".."):
            raise ValueError(f"Device name is not a safe path segment: {self.name!r}")
        return self

    @property
    def name(self) -> str:
        """Device name used for the output directory and manifest."""
        return self.device_name or self.config_path.stem

    @property
    def build_name(self) -> str:
        """Name esphome builds under: always the YAML file stem."""
        return self.config_path.stem

    @property
    def config_dir(self) -> Path:
        return self.config_path.resolve().parent

    @property
    def device_out_dir(self) -> Path:
        return self.out_root / self.name

    @property
    def manifest_path(self) -> Path:
        return self.device_out_dir / self.manifest_name

    @property
    def update_url(self) -> Optional[str]:
        """ESPHome update source URL, None when no base URL is configured."""
        if not self.base_url:
            return None
        return f"{self.base_url}/{self.name}/{self.manifest_name}"

    @classmethod
    def from_sources(
        cls,
        config_path: str,
        chip_family: Optional[str] = None,
        env: Optional[Mapping[str, str]] = None,
        **overrides,
    ) -> "PublishConfig":
        """Merge explicit arguments over environment variables.

        Args:
            config_path: Path to the device YAML
            chip_family: Chip family label (falls back to CHIP_FAMILY)
            env: Environment mapping (default: os.environ)
            **overrides: Field values from the command line; None means unset

        Raises:
            pydantic.ValidationError: If the merged values are invalid
        """
        env = os.environ if env is None else env

        values = {
            "config_path": Path(config_path),
            "chip_family": chip_family or env.get("CHIP_FAMILY", ""),
            "device_name": env.get("DEVICE_NAME") or None,
            "version": env.get("VERSION") or None,
            "base_url": env.get("BASE_URL", ""),
            "out_root": Path(env.get("OUT_ROOT") or DEFAULT_OUT_ROOT),
            "bin_name": env.get("BIN_OUT_NAME") or DEFAULT_BIN_NAME,
            "runner": env.get("ESPHOME_RUNNER") or "local",
            "image": env.get("ESPHOME_IMAGE") or DEFAULT_IMAGE,
            "git_remote": env.get("GIT_REMOTE") or "origin",
            "git_branch": env.get("GIT_BRANCH", ""),
            "skip_git": env.get("SKIP_GIT", "").lower() in _TRUE_VALUES,
            "log_file": env.get("LOG_FILE") or "./logs/publisher.log",
            "log_level": logging.getLevelName(env.get("LOG_LEVEL", "INFO").upper()),
        }
        if not isinstance(values["log_level"], int):
            values["log_level"] = logging.INFO

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
