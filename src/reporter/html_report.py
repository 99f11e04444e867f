"""HTML report generator — a static page with one collapsible card per screenshot."""

from __future__ import annotations

import html
import logging
from pathlib import Path
from urllib.parse import quote

from src.models.comparison import Category, ComparisonResults, DiffResult

from .json_report import load_results

logger = logging.getLogger(__name__)

_NOT_FOUND_SVG = (
    "data:image/svg+xml,<svg xmlns=%22http://www.w3.org/2000/svg%22 width=%22200%22 "
    "height=%22100%22><text x=%2250%%22 y=%2250%%22 text-anchor=%22middle%22 "
    "fill=%22%23999%22>Not found</text></svg>"
)

_SUMMARY_CARDS = [
    (Category.EXCELLENT, "excellent", "Excellent (&lt;{excellent:g}%)"),
    (Category.GOOD, "good", "Good (&lt;{good:g}%)"),
    (Category.ACCEPTABLE, "acceptable", "Acceptable (&lt;{acceptable:g}%)"),
    (Category.NEEDS_WORK, "needs-work", "Needs Work (&lt;{needs_work:g}%)"),
    (Category.SIGNIFICANT, "significant", "Significant (&ge;{needs_work:g}%)"),
    (Category.ERROR, "error", "Errors"),
]


def sort_diffs(diffs: dict[str, DiffResult]) -> list[tuple[str, DiffResult]]:
    """Highest percentage first; results without a percentage go last."""
    return sorted(
        diffs.items(),
        key=lambda item: (item[1].percentage is None, -(item[1].percentage or 0.0)),
    )


def _css_class(category: Category) -> str:
    return category.value.replace("_", "-")


def _image_cell(src: str, alt: str, label: str) -> str:
    return f'''
          <div class="image-container">
            <img src="{html.escape(src)}" alt="{alt}" loading="lazy" onerror="this.onerror=null;this.src='{_NOT_FOUND_SVG}'">
            <div class="label">{label}</div>
          </div>'''


def _build_result_row(filename: str, diff: DiffResult) -> str:
    """Build the collapsible card for one compared file."""
    name = html.escape(filename)
    link = quote(filename)
    if diff.percentage is not None:
        badge_text = f"{diff.percentage:.2f}%"
    else:
        badge_text = html.escape(diff.error or "Error")

    if diff.is_error:
        details = f'<p class="error-text">Error: {html.escape(diff.error)}</p>'
    else:
        sizes = ""
        if diff.baseline_size and diff.current_size:
            sizes = (
                f"<span>Baseline: {diff.baseline_size.width}&times;{diff.baseline_size.height}</span>"
                f"<span>Current: {diff.current_size.width}&times;{diff.current_size.height}</span>"
            )
        diff_pixels = f"{diff.diff_pixels:,}" if diff.diff_pixels is not None else "N/A"
        total_pixels = f"{diff.total_pixels:,}" if diff.total_pixels is not None else "N/A"
        details = f'''
        <div class="meta">
          <span>Diff pixels: {diff_pixels}</span>
          <span>Total pixels: {total_pixels}</span>
          <span>Size match: {"Yes" if diff.size_match else "No"}</span>
          {sizes}
        </div>
        <div class="result-images">
          {_image_cell(f"./baseline/{link}", "Baseline", "Baseline")}
          {_image_cell(f"./current/{link}", "Current", "Current")}
          {_image_cell(f"./diffs/diff-{link}", "Diff", "Difference")}
        </div>'''

    return f'''
    <div class="result-row" onclick="this.classList.toggle('expanded')">
      <div class="result-header">
        <span class="result-name">{name}</span>
        <div class="result-badges">
          <span class="result-percentage {_css_class(diff.category)}">{badge_text}</span>
          <span class="expand-icon">&#9660;</span>
        </div>
      </div>
      <div class="result-details">{details}
      </div>
    </div>'''


def render_html_report(results: ComparisonResults) -> str:
    """Render the full report document. Output depends only on *results*."""
    summary = results.summary
    bounds = results.thresholds.model_dump()

    cards = [
        '<div class="summary-card"><div class="count">'
        f'{summary.total}</div><div class="label">Total</div></div>'
    ]
    for category, css, label in _SUMMARY_CARDS:
        cards.append(
            f'<div class="summary-card {css}"><div class="count">{summary.count(category)}</div>'
            f'<div class="label">{label.format(**bounds)}</div></div>'
        )

    average = "n/a" if summary.average_percentage is None else f"{summary.average_percentage:.2f}%"
    rows = [_build_result_row(name, diff) for name, diff in sort_diffs(results.diffs)]

    return f'''<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Visual Comparison Report</title>
<style>
  :root {{ --excellent: #22c55e; --good: #eab308; --acceptable: #f97316; --needs-work: #ef4444; --significant: #dc2626; --error: #6b7280; --bg: #f3f4f6; --card: white; --border: #e5e7eb; --text: #1f2937; --muted: #6b7280; }}
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background: var(--bg); color: var(--text); line-height: 1.5; }}
  .container {{ max-width: 1400px; margin: 0 auto; padding: 2rem; }}
  h1 {{ font-size: 1.875rem; font-weight: 700; margin-bottom: 0.5rem; }}
  .timestamp {{ color: var(--muted); margin-bottom: 2rem; }}
  /* Summary cards */
  .summary {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(150px, 1fr)); gap: 1rem; margin-bottom: 2rem; }}
  .summary-card {{ background: var(--card); border-radius: 0.5rem; padding: 1rem; text-align: center; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }}
  .summary-card .count {{ font-size: 2rem; font-weight: 700; }}
  .summary-card .label {{ font-size: 0.875rem; color: var(--muted); }}
  .summary-card.excellent .count {{ color: var(--excellent); }}
  .summary-card.good .count {{ color: var(--good); }}
  .summary-card.acceptable .count {{ color: var(--acceptable); }}
  .summary-card.needs-work .count {{ color: var(--needs-work); }}
  .summary-card.significant .count {{ color: var(--significant); }}
  .summary-card.error .count {{ color: var(--error); }}
  /* Result rows */
  .results {{ display: flex; flex-direction: column; gap: 1rem; }}
  .result-row {{ background: var(--card); border-radius: 0.5rem; padding: 1rem; box-shadow: 0 1px 3px rgba(0,0,0,0.1); }}
  .result-header {{ display: flex; justify-content: space-between; align-items: center; cursor: pointer; }}
  .result-name {{ font-weight: 600; }}
  .result-badges {{ display: flex; align-items: center; gap: 0.5rem; }}
  .result-percentage {{ font-weight: 700; padding: 0.25rem 0.75rem; border-radius: 9999px; font-size: 0.875rem; }}
  .result-percentage.excellent {{ background: #dcfce7; color: var(--excellent); }}
  .result-percentage.good {{ background: #fef9c3; color: #a16207; }}
  .result-percentage.acceptable {{ background: #ffedd5; color: #c2410c; }}
  .result-percentage.needs-work {{ background: #fee2e2; color: var(--needs-work); }}
  .result-percentage.significant {{ background: #fee2e2; color: var(--significant); }}
  .result-percentage.error {{ background: #f3f4f6; color: var(--error); }}
  .result-details {{ display: none; margin-top: 1rem; padding-top: 1rem; border-top: 1px solid var(--border); }}
  .result-row.expanded .result-details {{ display: block; }}
  .expand-icon {{ color: var(--muted); font-size: 0.7rem; transition: transform 0.2s; }}
  .result-row.expanded .expand-icon {{ transform: rotate(180deg); }}
  .error-text {{ color: var(--error); }}
  .meta {{ display: flex; flex-wrap: wrap; gap: 2rem; font-size: 0.875rem; color: var(--muted); margin-bottom: 1rem; }}
  /* Images */
  .result-images {{ display: grid; grid-template-columns: repeat(3, 1fr); gap: 1rem; }}
  .image-container {{ text-align: center; }}
  .image-container img {{ max-width: 100%; border: 1px solid var(--border); border-radius: 0.25rem; }}
  .image-container .label {{ font-size: 0.75rem; color: var(--muted); margin-top: 0.5rem; }}
  @media (max-width: 768px) {{ .result-images {{ grid-template-columns: 1fr; }} }}
</style>
</head>
<body>
<div class="container">
  <h1>Visual Comparison Report</h1>
  <p class="timestamp">Generated: {html.escape(results.timestamp)} &middot; Average diff: {average}</p>

  <div class="summary">
    {"".join(cards)}
  </div>

  <div class="results">
    {"".join(rows)}
  </div>
</div>
</body>
</html>'''


def generate_html_report(results: ComparisonResults, output_path: Path) -> None:
    """Write the report for already-loaded results."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(render_html_report(results))


def generate_report(results_path: Path, output_path: Path) -> Path:
    """Load a results JSON and write the HTML report next to the screenshots.

    Raises:
        FileNotFoundError: if *results_path* does not exist.
    """
    results = load_results(results_path)
    logger.debug("Loaded %d results from %s", len(results.diffs), results_path)
    generate_html_report(results, output_path)
    logger.info("HTML report: %s", output_path)
    return output_path
