"""Capture stage data structures: one record per page/viewport pair."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ScreenshotRecord(BaseModel):
    name: str
    viewport: str
    filename: str  # "{name}-{viewport}.png"
    url: str
    success: bool
    error: Optional[str] = None


class CaptureManifest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    source: str = "unknown"
    base_url: str = Field(alias="baseUrl")
    timestamp: str  # ISO-8601
    screenshots: list[ScreenshotRecord] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for s in self.screenshots if s.success)

    @property
    def failed(self) -> int:
        return sum(1 for s in self.screenshots if not s.success)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys; successful records carry no error key."""
        return self.model_dump(by_alias=True, exclude_none=True)
