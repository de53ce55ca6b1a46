"""Pydantic response models for the preview server."""

from typing import Optional
from pydantic import BaseModel, Field


class DeviceSummary(BaseModel):
    """One published device in GET /firmware."""

    name: str = Field(..., description="Device name (directory under the output root)")
    version: str = Field(..., description="Published build version")
    chip_family: str = Field(..., description="chipFamily of the single build")
    md5: str = Field(..., description="MD5 of the published binary")
    manifest_url: str = Field(
        ...,
        description="Path of the manifest on this server",
        examples=["/firmware/meteo_sonda/manifest.json"],
    )
    homepage: Optional[str] = None


class DeviceListResponse(BaseModel):
    """GET /firmware response.

    Example:
        {
            "count": 1,
            "devices": [
                {
                    "name": "meteo_sonda",
                    "version": "2026.02.13-1700",
                    "chip_family": "ESP32-C3",
                    "md5": "d41d8cd98f00b204e9800998ecf8427e",
                    "manifest_url": "/firmware/meteo_sonda/manifest.json",
                    "homepage": null
                }
            ],
            "invalid": []
        }
    """

    count: int = Field(..., ge=0)
    devices: list[DeviceSummary] = Field(default_factory=list)
    invalid: list[str] = Field(
        default_factory=list, description="Device directories whose manifest failed validation"
    )
