"""JSON results output and loading."""

from __future__ import annotations

import json
from pathlib import Path

from src.models.comparison import ComparisonResults


def write_results_json(results: ComparisonResults, output_path: Path) -> None:
    """Write the machine-readable comparison results."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(results.to_dict(), f, indent=2)


def load_results(results_path: Path) -> ComparisonResults:
    """Load a results file written by the comparison engine."""
    if not results_path.exists():
        raise FileNotFoundError(f"Results file not found: {results_path}")
    with open(results_path) as f:
        data = json.load(f)
    return ComparisonResults.model_validate(data)
