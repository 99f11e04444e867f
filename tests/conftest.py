"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest
from PIL import Image

from src.comparison.image_ops import ImageBuffer
from src.models.config import PageSpec, ViewportSpec


WHITE = (255, 255, 255, 255)


# ============================================================================
# Image Fixtures
# ============================================================================


@pytest.fixture
def solid() -> Callable[..., ImageBuffer]:
    """Create an in-memory RGBA buffer filled with one color."""

    def _solid(width: int, height: int, color=WHITE) -> ImageBuffer:
        data = np.empty((height, width, 4), dtype=np.uint8)
        data[...] = color
        return ImageBuffer(data)

    return _solid


@pytest.fixture
def write_png() -> Callable[..., Path]:
    """Write a solid-color PNG and return its path."""

    def _write(path: Path, width: int, height: int, color=WHITE) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGBA", (width, height), color).save(path, "PNG")
        return path

    return _write


@pytest.fixture
def comparison_dirs(tmp_path: Path) -> dict[str, Path]:
    """Baseline, current and diff directories plus a results path."""
    dirs = {
        "baseline": tmp_path / "comparison" / "baseline",
        "current": tmp_path / "comparison" / "current",
        "diffs": tmp_path / "comparison" / "diffs",
    }
    dirs["baseline"].mkdir(parents=True)
    dirs["current"].mkdir(parents=True)
    dirs["results"] = tmp_path / "comparison" / "results.json"
    return dirs


# ============================================================================
# Capture Fixtures
# ============================================================================


@pytest.fixture
def pages() -> list[PageSpec]:
    return [PageSpec(path="/", name="home"), PageSpec(path="/contact/", name="contact")]


@pytest.fixture
def viewports() -> dict[str, ViewportSpec]:
    return {
        "mobile": ViewportSpec(width=375, height=812),
        "desktop": ViewportSpec(width=1024, height=768),
    }


@pytest.fixture
def mock_page() -> AsyncMock:
    """Create a mock Playwright Page."""
    page = AsyncMock()
    page.goto = AsyncMock()
    page.wait_for_timeout = AsyncMock()
    page.evaluate = AsyncMock()
    page.screenshot = AsyncMock()
    return page


@pytest.fixture
def mock_context(mock_page: AsyncMock) -> AsyncMock:
    """Create a mock Playwright BrowserContext returning mock_page."""
    context = AsyncMock()
    context.new_page = AsyncMock(return_value=mock_page)
    context.close = AsyncMock()
    return context


@pytest.fixture
def mock_browser(mock_context: AsyncMock) -> AsyncMock:
    browser = AsyncMock()
    browser.new_context = AsyncMock(return_value=mock_context)
    browser.close = AsyncMock()
    return browser


@pytest.fixture
def mock_playwright(mock_browser: AsyncMock) -> MagicMock:
    """async_playwright() replacement whose chromium launches mock_browser."""
    pw = AsyncMock()
    pw.chromium.launch = AsyncMock(return_value=mock_browser)
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=pw)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    factory.pw = pw
    return factory
