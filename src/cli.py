"""CLI entry point for the visual regression pipeline."""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from src.capture.screenshotter import capture_screenshots
from src.comparison.engine import ComparisonEngine
from src.models.comparison import Category, ComparisonResults
from src.models.config import load_pages, load_viewports
from src.reporter.html_report import generate_report

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_BASELINE_DIR = "comparison/baseline"
DEFAULT_CURRENT_DIR = "comparison/current"
DEFAULT_DIFF_DIR = "comparison/diffs"
DEFAULT_RESULTS = "comparison/results.json"
DEFAULT_REPORT = "comparison/report.html"

_CATEGORY_STYLES = {
    Category.EXCELLENT: "green",
    Category.GOOD: "yellow",
    Category.ACCEPTABLE: "dark_orange",
    Category.NEEDS_WORK: "red",
    Category.SIGNIFICANT: "bold red",
    Category.ERROR: "dim",
}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


@contextmanager
def fatal_errors(stage: str) -> Iterator[None]:
    """Turn any exception escaping a stage into a diagnostic and exit status 1."""
    try:
        yield
    except Exception as e:
        logger.debug("%s failed", stage, exc_info=True)
        console.print(f"[red]Fatal error during {stage}: {escape(str(e))}[/red]")
        sys.exit(1)


def print_comparison_summary(results: ComparisonResults) -> None:
    thresholds = results.thresholds
    labels = {
        Category.EXCELLENT: f"Excellent (<{thresholds.excellent:g}%)",
        Category.GOOD: f"Good (<{thresholds.good:g}%)",
        Category.ACCEPTABLE: f"Acceptable (<{thresholds.acceptable:g}%)",
        Category.NEEDS_WORK: f"Needs Work (<{thresholds.needs_work:g}%)",
        Category.SIGNIFICANT: f"Significant (>={thresholds.needs_work:g}%)",
        Category.ERROR: "Errors",
    }
    table = Table(title="Comparison Summary")
    table.add_column("Category", style="bold")
    table.add_column("Count", justify="right")
    for category, label in labels.items():
        style = _CATEGORY_STYLES[category]
        table.add_row(f"[{style}]{label}[/{style}]", str(results.summary.count(category)))
    table.add_row("Total", str(results.summary.total))
    average = results.summary.average_percentage
    table.add_row("Average diff", "n/a" if average is None else f"{average:.2f}%")
    console.print(table)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual regression checks for a site migration: capture, compare, report."""
    setup_logging(verbose)


@cli.command()
@click.option("--base-url", default="http://localhost:8080", show_default=True,
              help="Site root; page paths are appended to it")
@click.option("--output-dir", default="comparison/screenshots", show_default=True,
              help="Directory for PNGs and manifest.json")
@click.option("--source", default="unknown", show_default=True,
              help="Free-form label stored in the manifest")
@click.option("--viewports", "viewports_path", default="viewports.json", show_default=True,
              help="Viewport definitions (built-in defaults when absent)")
@click.option("--urls", "urls_path", default="urls.json", show_default=True,
              help="Page list (built-in defaults when absent)")
def capture(base_url: str, output_dir: str, source: str, viewports_path: str, urls_path: str) -> None:
    """Capture full-page screenshots of every page at every viewport."""
    with fatal_errors("capture"):
        viewports = load_viewports(viewports_path)
        pages = load_pages(urls_path)
        manifest = capture_screenshots(base_url, pages, viewports, output_dir, source=source)

    console.print(
        f"\n[bold green]Capture complete:[/bold green] {manifest.succeeded} succeeded, "
        f"[red]{manifest.failed} failed[/red]"
    )
    console.print(f"  Manifest: [blue]{escape(str(Path(output_dir) / 'manifest.json'))}[/blue]")


@cli.command()
@click.option("--baseline-dir", default=DEFAULT_BASELINE_DIR, show_default=True)
@click.option("--current-dir", default=DEFAULT_CURRENT_DIR, show_default=True)
@click.option("--diff-dir", default=DEFAULT_DIFF_DIR, show_default=True)
@click.option("--output-json", default=DEFAULT_RESULTS, show_default=True)
@click.option("--workers", default=1, show_default=True, type=click.IntRange(min=1),
              help="Files compared in parallel")
def compare(baseline_dir: str, current_dir: str, diff_dir: str, output_json: str, workers: int) -> None:
    """Diff baseline and current screenshots and write the results JSON."""
    with fatal_errors("comparison"):
        engine = ComparisonEngine(workers=workers)
        results = engine.compare_all(baseline_dir, current_dir, diff_dir, output_json)

    print_comparison_summary(results)
    console.print(f"  Results: [blue]{escape(output_json)}[/blue]")


@cli.command()
@click.option("--results", "results_path", default=DEFAULT_RESULTS, show_default=True)
@click.option("--output", "output_path", default=DEFAULT_REPORT, show_default=True)
def report(results_path: str, output_path: str) -> None:
    """Render the comparison results as a static HTML report."""
    with fatal_errors("report generation"):
        path = generate_report(Path(results_path), Path(output_path))
    console.print(f"[green]Report generated:[/green] [blue]{escape(str(path))}[/blue]")


@cli.command()
@click.option("--baseline-dir", default=DEFAULT_BASELINE_DIR, show_default=True)
@click.option("--current-dir", default=DEFAULT_CURRENT_DIR, show_default=True)
@click.option("--diff-dir", default=DEFAULT_DIFF_DIR, show_default=True)
@click.option("--output-json", default=DEFAULT_RESULTS, show_default=True)
@click.option("--output", "output_path", default=DEFAULT_REPORT, show_default=True)
@click.option("--workers", default=1, show_default=True, type=click.IntRange(min=1))
def run(
    baseline_dir: str, current_dir: str, diff_dir: str,
    output_json: str, output_path: str, workers: int,
) -> None:
    """Compare screenshots, then generate the HTML report."""
    with fatal_errors("comparison"):
        results = ComparisonEngine(workers=workers).compare_all(
            baseline_dir, current_dir, diff_dir, output_json,
        )
    print_comparison_summary(results)

    with fatal_errors("report generation"):
        path = generate_report(Path(output_json), Path(output_path))
    console.print(f"[green]Report generated:[/green] [blue]{escape(str(path))}[/blue]")


if __name__ == "__main__":
    cli()
