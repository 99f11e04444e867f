"""Comparison engine data structures: per-file diff results and the run summary."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    ACCEPTABLE = "acceptable"
    NEEDS_WORK = "needs_work"
    SIGNIFICANT = "significant"
    ERROR = "error"


BASELINE_MISSING = "baseline_missing"
CURRENT_MISSING = "current_missing"


class Thresholds(BaseModel):
    """Exclusive upper bounds (percent) for each category, ascending."""
    model_config = ConfigDict(populate_by_name=True)

    excellent: float = 1
    good: float = 2
    acceptable: float = 5
    needs_work: float = Field(default=10, alias="needsWork")


class ImageSize(BaseModel):
    width: int
    height: int


class DiffResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error: Optional[str] = None  # baseline_missing, current_missing, or an exception message
    diff_pixels: Optional[int] = Field(default=None, alias="diffPixels")
    total_pixels: Optional[int] = Field(default=None, alias="totalPixels")
    percentage: Optional[float] = None
    width: Optional[int] = None
    height: Optional[int] = None
    baseline_size: Optional[ImageSize] = Field(default=None, alias="baselineSize")
    current_size: Optional[ImageSize] = Field(default=None, alias="currentSize")
    size_match: Optional[bool] = Field(default=None, alias="sizeMatch")
    category: Category = Category.ERROR
    diff_image: Optional[str] = Field(default=None, alias="diffImage")

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        # percentage and diffImage are always present, null for error records
        data["percentage"] = self.percentage
        data["diffImage"] = self.diff_image
        return data


class ComparisonSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int = 0
    excellent: int = 0
    good: int = 0
    acceptable: int = 0
    needs_work: int = 0
    significant: int = 0
    error: int = 0
    average_percentage: Optional[float] = Field(default=None, alias="averagePercentage")

    def count(self, category: Category) -> int:
        return getattr(self, category.value)


class ComparisonResults(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str = ""
    thresholds: Thresholds = Field(default_factory=Thresholds)
    summary: ComparisonSummary = Field(default_factory=ComparisonSummary)
    diffs: dict[str, DiffResult] = Field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "thresholds": self.thresholds.model_dump(by_alias=True),
            "summary": self.summary.model_dump(by_alias=True),
            "diffs": {name: diff.to_dict() for name, diff in self.diffs.items()},
        }
