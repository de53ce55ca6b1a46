"""Manifest data models for published OTA firmware."""

import json
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class OtaImage(BaseModel):
    """The `ota` block of a build entry.

    Describes the binary a device downloads during an HTTP OTA update.
    """

    path: str = Field(
        ...,
        min_length=1,
        pattern=r"^[^/].*$",
        description="Binary path relative to manifest.json (no leading /)",
    )
    md5: str = Field(..., description="Lowercase 32-char hex MD5 of the binary")
    summary: str = Field(..., min_length=1, description="Human-readable release note")

    @field_validator("path")
    @classmethod
    def no_directory_traversal(cls, v: str) -> str:
        """Keep the binary next to (or below) the manifest."""
        if ".." in v.split("/"):
            raise ValueError("OTA path must not contain '..'")
        return v

    @field_validator("md5", mode="before")
    @classmethod
    def normalize_md5(cls, v):
        """Accept upper-case digests but always store lowercase hex."""
        if not isinstance(v, str):
            raise ValueError(f"Invalid MD5 format: {v!r} (must be 32-char hex)")
        v = v.strip().lower()
        if len(v) != 32 or any(c not in "0123456789abcdef" for c in v):
            raise ValueError(f"Invalid MD5 format: {v!r} (must be 32-char hex)")
        return v


class BuildEntry(BaseModel):
    """Single build target in manifest.json."""

    model_config = ConfigDict(populate_by_name=True)

    chip_family: str = Field(
        ...,
        alias="chipFamily",
        min_length=1,
        description="Target chip family (e.g. 'ESP32-C3'), not validated",
    )
    ota: OtaImage


class Manifest(BaseModel):
    """Root manifest.json schema consumed by the ESPHome http_request update.

    Example:
        {
          "name": "meteo_sonda",
          "version": "2026.02.13-1700",
          "builds": [
            {
              "chipFamily": "ESP32-C3",
              "ota": {
                "path": "firmware.ota.bin",
                "md5": "d41d8cd98f00b204e9800998ecf8427e",
                "summary": "Auto-published build 2026.02.13-1700"
              }
            }
          ]
        }
    """

    name: str = Field(
        ...,
        pattern=r"^[A-Za-z0-9._-]+$",
        description="Device identifier, also the directory name under the output root",
    )
    version: str = Field(..., min_length=1, description="Build revision token")
    builds: list[BuildEntry] = Field(
        ..., min_length=1, max_length=1, description="Exactly one build target"
    )
    homepage: Optional[str] = Field(
        None, description="'{base_url}/{name}/' when a base URL is configured"
    )

    @field_validator("name")
    @classmethod
    def not_relative_segment(cls, v: str) -> str:
        """'.' and '..' match the pattern but are not usable directory names."""
        if v in (".", ".."):
            raise ValueError("Device name must not be '.' or '..'")
        return v

    @field_validator("version")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Version must not be blank")
        return v

    def to_document(self) -> dict:
        """Return the manifest as a plain dict using the wire field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        """Serialize with stable key order, 2-space indent and trailing newline."""
        return json.dumps(self.to_document(), indent=2) + "\n"
