"""Comparison engine: diffs a baseline and a current screenshot directory."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from src.models.comparison import (
    BASELINE_MISSING,
    CURRENT_MISSING,
    Category,
    ComparisonResults,
    DiffResult,
    ImageSize,
    Thresholds,
)
from src.reporter.json_report import write_results_json

from .image_ops import load_image, normalize, save_image
from .pixel_diff import DiffOptions, pixel_diff
from .scorer import categorize, diff_percentage, summarize

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


def list_pngs(directory: str | Path) -> list[str]:
    """PNG filenames in *directory*; a missing directory yields an empty list."""
    directory = Path(directory)
    if not directory.is_dir():
        return []
    return sorted(
        p.name for p in directory.iterdir()
        if p.is_file() and p.suffix == ".png" and p.name != MANIFEST_NAME
    )


def compare_pair(
    baseline_path: Path,
    current_path: Path,
    diff_path: Path,
    thresholds: Thresholds | None = None,
    options: DiffOptions | None = None,
) -> DiffResult:
    """Diff one baseline/current pair and write the diff image to *diff_path*."""
    if not baseline_path.exists():
        return DiffResult(error=BASELINE_MISSING)
    if not current_path.exists():
        return DiffResult(error=CURRENT_MISSING)

    baseline = load_image(baseline_path)
    current = load_image(current_path)

    # Pages of different heights are common; pad both to the larger canvas
    width = max(baseline.width, current.width)
    height = max(baseline.height, current.height)
    diff_pixels, diff_image = pixel_diff(
        normalize(baseline, width, height),
        normalize(current, width, height),
        options,
    )
    save_image(diff_image, diff_path)

    total_pixels = width * height
    percentage = diff_percentage(diff_pixels, total_pixels)
    return DiffResult(
        diff_pixels=diff_pixels,
        total_pixels=total_pixels,
        percentage=percentage,
        width=width,
        height=height,
        baseline_size=ImageSize(width=baseline.width, height=baseline.height),
        current_size=ImageSize(width=current.width, height=current.height),
        size_match=baseline.size == current.size,
        category=categorize(percentage, thresholds),
        diff_image=diff_path.name,
    )


class ComparisonEngine:
    """Compares every screenshot in the union of two directories."""

    def __init__(
        self,
        thresholds: Thresholds | None = None,
        options: DiffOptions | None = None,
        workers: int = 1,
    ):
        self.thresholds = thresholds or Thresholds()
        self.options = options or DiffOptions()
        self.workers = max(1, workers)

    def compare_all(
        self,
        baseline_dir: str | Path,
        current_dir: str | Path,
        diff_dir: str | Path,
        output_json: str | Path | None = None,
    ) -> ComparisonResults:
        """Compare all files and optionally persist the results JSON."""
        baseline_dir = Path(baseline_dir)
        current_dir = Path(current_dir)
        diff_dir = Path(diff_dir)
        logger.info("Comparing %s (baseline) against %s (current)", baseline_dir, current_dir)

        filenames = list(dict.fromkeys(list_pngs(baseline_dir) + list_pngs(current_dir)))
        results = ComparisonResults(
            timestamp=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
            thresholds=self.thresholds,
        )

        if not filenames:
            logger.warning("No screenshots found to compare")
        else:
            logger.debug("Comparing %d files with %d worker(s)", len(filenames), self.workers)

            def _one(filename: str) -> DiffResult:
                return self._compare_file(filename, baseline_dir, current_dir, diff_dir)

            if self.workers > 1:
                with ThreadPoolExecutor(max_workers=self.workers) as pool:
                    diffs = list(pool.map(_one, filenames))
            else:
                diffs = [_one(name) for name in filenames]
            results.diffs = dict(zip(filenames, diffs))

        results.summary = summarize(results.diffs.values())

        if output_json is not None:
            write_results_json(results, Path(output_json))
            logger.info("Results written to %s", output_json)
        return results

    def _compare_file(
        self, filename: str, baseline_dir: Path, current_dir: Path, diff_dir: Path,
    ) -> DiffResult:
        try:
            result = compare_pair(
                baseline_dir / filename,
                current_dir / filename,
                diff_dir / f"diff-{filename}",
                self.thresholds,
                self.options,
            )
        except Exception as e:
            logger.warning("Comparison failed for %s: %s", filename, e)
            return DiffResult(error=str(e), category=Category.ERROR)

        if result.percentage is None:
            logger.warning("[%s] %s: %s", result.category.value, filename, result.error)
        else:
            logger.info("[%s] %s: %.2f%%", result.category.value, filename, result.percentage)
        return result
