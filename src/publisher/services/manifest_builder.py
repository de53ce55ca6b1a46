"""Manifest construction, version policy and file placement."""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from publisher.errors import ArtifactMismatchError, ManifestError
from publisher.models.manifest import BuildEntry, Manifest, OtaImage
from publisher.utils.verification import compute_md5, verify_md5_or_raise

logger = logging.getLogger("publisher.manifest")

VERSION_FORMAT = "%Y.%m.%d-%H%M"


def default_version(now: Optional[datetime] = None) -> str:
    """Build version from local wall-clock time at minute resolution.

    Two calls within the same minute return the same string; later minutes
    sort after earlier ones both lexicographically and chronologically.
    """
    return (now or datetime.now()).strftime(VERSION_FORMAT)


def resolve_version(explicit: Optional[str] = None, now: Optional[datetime] = None) -> str:
    """Return the trimmed explicit version, or the timestamp default."""
    if explicit and explicit.strip():
        return explicit.strip()
    return default_version(now)


def build_summary(version: str) -> str:
    return f"Auto-published build {version}"


def build_manifest(
    name: str,
    version: str,
    chip_family: str,
    md5: str,
    ota_path: str,
    base_url: Optional[str] = None,
) -> Manifest:
    """Assemble the manifest for a single published build.

    Args:
        name: Device name (path segment, URL-safe)
        version: Build version
        chip_family: Chip family label, passed through as-is
        md5: 32-char hex digest of the binary at ota_path
        ota_path: Binary path relative to the manifest
        base_url: Optional public URL of the output root; adds `homepage`

    Returns:
        Validated Manifest

    Raises:
        ManifestError: If any input fails validation
    """
    base_url = (base_url or "").strip()
    try:
        manifest = Manifest(
            name=name,
            version=version,
            builds=[
                BuildEntry(
                    chipFamily=chip_family,
                    ota=OtaImage(path=ota_path, md5=md5, summary=build_summary(version)),
                )
            ],
            homepage=f"{base_url}/{name}/" if base_url else None,
        )
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest input: {e}") from e

    logger.debug(f"Built manifest: {manifest.to_document()}")
    return manifest


def render_manifest(manifest: Manifest) -> str:
    """Deterministic JSON text of the manifest (trailing newline included)."""
    return manifest.to_json()


def _atomic_write_bytes(path: Path, data: bytes) -> None:
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def write_manifest(manifest: Manifest, path: Path) -> Path:
    """Write manifest JSON to path, replacing any previous manifest.

    Parent directories are created. The content goes to a temporary sibling
    first and is renamed over the target, so readers never see a partial file.

    Raises:
        OSError: If the directory or file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_bytes(path, render_manifest(manifest).encode("utf-8"))
    logger.info(f"Wrote {path}")
    return path


def place_artifact(
    source: Path, device_dir: Path, bin_name: str, expected_md5: str
) -> Path:
    """Copy the firmware binary into the device directory.

    The copy is verified against expected_md5 before it replaces the
    published binary.

    Raises:
        FileNotFoundError: If source doesn't exist
        ArtifactMismatchError: If the copied bytes don't match expected_md5
        OSError: If the copy fails
    """
    device_dir = Path(device_dir)
    device_dir.mkdir(parents=True, exist_ok=True)
    target = device_dir / bin_name

    fd, tmp_name = tempfile.mkstemp(prefix=f".{bin_name}.", suffix=".tmp", dir=device_dir)
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        shutil.copyfile(source, tmp_path)
        try:
            verify_md5_or_raise(tmp_path, expected_md5)
        except ValueError as e:
            raise ArtifactMismatchError(f"{tmp_path.name} for {target}: {e}") from e
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info(f"Copied {source} -> {target}")
    return target


@dataclass
class PublishedBuild:
    """Files written for one device by publish_manifest."""

    manifest: Manifest
    manifest_path: Path
    binary_path: Path

    @property
    def paths(self) -> list[Path]:
        return [self.manifest_path, self.binary_path]


def publish_manifest(
    binary: Path,
    device_dir: Path,
    name: str,
    version: str,
    chip_family: str,
    bin_name: str = "firmware.ota.bin",
    manifest_name: str = "manifest.json",
    base_url: Optional[str] = None,
    md5: Optional[str] = None,
) -> PublishedBuild:
    """Place the binary and write its manifest next to it.

    The manifest is validated before anything touches the device directory
    and written only after the binary is in place.

    Args:
        binary: Compiled firmware image
        device_dir: Output directory for this device
        md5: Precomputed digest of binary (computed here when None)

    Returns:
        PublishedBuild describing the written files
    """
    md5 = md5 or compute_md5(Path(binary))
    manifest = build_manifest(
        name=name,
        version=version,
        chip_family=chip_family,
        md5=md5,
        ota_path=bin_name,
        base_url=base_url,
    )

    binary_path = place_artifact(Path(binary), Path(device_dir), bin_name, manifest.builds[0].ota.md5)
    manifest_path = write_manifest(manifest, Path(device_dir) / manifest_name)
    return PublishedBuild(manifest=manifest, manifest_path=manifest_path, binary_path=binary_path)
