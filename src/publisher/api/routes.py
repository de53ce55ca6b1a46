"""Read-only routes over the published firmware tree."""

import json
import logging
import re
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse
from pydantic import ValidationError

from publisher.api.models import DeviceListResponse, DeviceSummary
from publisher.models.manifest import Manifest

MANIFEST_NAME = "manifest.json"
_SEGMENT_RE = re.compile(r"^[A-Za-z0-9._-]+$")

router = APIRouter(prefix="/firmware")
logger = logging.getLogger("publisher.api")


def _firmware_root(request: Request) -> Path:
    return Path(request.app.state.firmware_root)


def _safe_segment(value: str) -> str:
    """Reject anything that could escape the device directory."""
    if not _SEGMENT_RE.match(value) or value in (".", ".."):
        raise HTTPException(status_code=404, detail=f"Not found: {value}")
    return value


def load_manifest(path: Path) -> Manifest:
    """Parse and validate a manifest file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If it is not valid JSON or fails the schema
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return Manifest(**data)


@router.get("", response_model=DeviceListResponse)
async def list_devices(request: Request):
    """GET /firmware - Devices with a published manifest."""
    root = _firmware_root(request)
    devices: list[DeviceSummary] = []
    invalid: list[str] = []

    if root.is_dir():
        for device_dir in sorted(p for p in root.iterdir() if p.is_dir()):
            manifest_path = device_dir / MANIFEST_NAME
            if not manifest_path.is_file():
                continue
            try:
                manifest = load_manifest(manifest_path)
            except (ValueError, ValidationError) as e:
                logger.warning(f"Invalid manifest {manifest_path}: {e}")
                invalid.append(device_dir.name)
                continue

            build = manifest.builds[0]
            devices.append(
                DeviceSummary(
                    name=manifest.name,
                    version=manifest.version,
                    chip_family=build.chip_family,
                    md5=build.ota.md5,
                    manifest_url=f"/firmware/{device_dir.name}/{MANIFEST_NAME}",
                    homepage=manifest.homepage,
                )
            )

    return DeviceListResponse(count=len(devices), devices=devices, invalid=invalid)


@router.get("/{device}/manifest.json")
async def get_manifest(device: str, request: Request):
    """GET /firmware/{device}/manifest.json - The ESPHome update source."""
    device = _safe_segment(device)
    manifest_path = _firmware_root(request) / device / MANIFEST_NAME

    if not manifest_path.is_file():
        raise HTTPException(status_code=404, detail=f"No manifest for {device}")

    try:
        manifest = load_manifest(manifest_path)
    except (ValueError, ValidationError) as e:
        logger.error(f"Invalid manifest {manifest_path}: {e}")
        raise HTTPException(status_code=500, detail=f"Invalid manifest for {device}")

    return JSONResponse(content=manifest.to_document())


@router.get("/{device}/{filename}")
async def get_binary(device: str, filename: str, request: Request):
    """GET /firmware/{device}/{filename} - Download a published binary."""
    device = _safe_segment(device)
    filename = _safe_segment(filename)
    file_path = _firmware_root(request) / device / filename

    if not file_path.is_file():
        raise HTTPException(status_code=404, detail=f"Not found: {device}/{filename}")

    return FileResponse(file_path, media_type="application/octet-stream", filename=filename)
