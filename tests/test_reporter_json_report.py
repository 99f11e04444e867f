"""Tests for JSON results output and loading."""

import json
from pathlib import Path

import pytest

from src.models.comparison import Category, ComparisonResults, DiffResult, Thresholds
from src.reporter.json_report import load_results, write_results_json


class TestWriteResultsJson:
    """Tests for write_results_json function."""

    def test_writes_camel_case_keys(self, tmp_path: Path):
        """Test aliased keys are used in the output file."""
        results = ComparisonResults(
            timestamp="2025-01-01T00:00:00Z",
            thresholds=Thresholds(needs_work=12),
            diffs={"a.png": DiffResult(diff_pixels=3, total_pixels=100, percentage=3.0,
                                       category=Category.ACCEPTABLE, diff_image="diff-a.png")},
        )
        output_file = tmp_path / "results.json"
        write_results_json(results, output_file)

        with open(output_file) as f:
            data = json.load(f)

        assert data["timestamp"] == "2025-01-01T00:00:00Z"
        assert data["thresholds"]["needsWork"] == 12
        assert data["diffs"]["a.png"]["diffPixels"] == 3
        assert data["diffs"]["a.png"]["category"] == "acceptable"

    def test_creates_parent_directories(self, tmp_path: Path):
        output_file = tmp_path / "a" / "b" / "results.json"
        write_results_json(ComparisonResults(), output_file)
        assert output_file.exists()


class TestLoadResults:
    """Tests for load_results function."""

    def test_loads_written_file(self, tmp_path: Path):
        results = ComparisonResults(
            timestamp="t",
            diffs={"gone.png": DiffResult(error="current_missing")},
        )
        results.summary.total = 1
        results.summary.error = 1
        output_file = tmp_path / "results.json"
        write_results_json(results, output_file)

        loaded = load_results(output_file)
        assert loaded.summary.error == 1
        assert loaded.diffs["gone.png"].category == Category.ERROR
        assert loaded.diffs["gone.png"].percentage is None

    def test_accepts_minimal_file(self, tmp_path: Path):
        """Test a file with only diffs still loads with defaults."""
        output_file = tmp_path / "results.json"
        output_file.write_text(json.dumps({"diffs": {"x.png": {"percentage": 0.5, "category": "excellent"}}}))
        loaded = load_results(output_file)
        assert loaded.diffs["x.png"].percentage == 0.5
        assert loaded.thresholds.needs_work == 10

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_results(tmp_path / "missing.json")
