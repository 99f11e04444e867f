"""Diff categorization and run summary."""

from __future__ import annotations

import math
from typing import Iterable, Optional

from src.models.comparison import Category, ComparisonSummary, DiffResult, Thresholds


def round2(value: float) -> float:
    """Round half up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


def diff_percentage(diff_pixels: int, total_pixels: int) -> float:
    return round2(100 * diff_pixels / total_pixels)


def categorize(percentage: Optional[float], thresholds: Thresholds | None = None) -> Category:
    """Map a diff percentage to a category; bounds are exclusive, checked ascending."""
    if percentage is None:
        return Category.ERROR
    thresholds = thresholds or Thresholds()
    if percentage < thresholds.excellent:
        return Category.EXCELLENT
    if percentage < thresholds.good:
        return Category.GOOD
    if percentage < thresholds.acceptable:
        return Category.ACCEPTABLE
    if percentage < thresholds.needs_work:
        return Category.NEEDS_WORK
    return Category.SIGNIFICANT


def summarize(diffs: Iterable[DiffResult]) -> ComparisonSummary:
    """Count results per category and average the non-null percentages."""
    summary = ComparisonSummary()
    percentages = []
    for diff in diffs:
        summary.total += 1
        field = diff.category.value
        setattr(summary, field, getattr(summary, field) + 1)
        if diff.percentage is not None:
            percentages.append(diff.percentage)

    if percentages:
        summary.average_percentage = round2(sum(percentages) / len(percentages))
    return summary
