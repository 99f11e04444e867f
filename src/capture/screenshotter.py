"""Screenshot capture — renders every page at every viewport with Playwright."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from pathlib import Path

from playwright.async_api import Browser, async_playwright
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.models.config import PageSpec, ViewportSpec
from src.models.screenshot import CaptureManifest, ScreenshotRecord
from src.utils.browser import create_viewport_context, hide_overlays, launch_browser

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


class CaptureSetupError(Exception):
    """The rendering engine could not be started; nothing was captured."""


def screenshot_filename(page: PageSpec, viewport_name: str) -> str:
    return f"{page.name}-{viewport_name}.png"


class Screenshotter:
    """Captures full-page screenshots, one browser context at a time."""

    NAVIGATION_TIMEOUT_MS = 30_000
    SETTLE_MS = 1_000

    def __init__(self, base_url: str, output_dir: Path, source: str = "unknown"):
        self.base_url = base_url
        self.output_dir = output_dir
        self.source = source

    async def capture(
        self,
        pages: list[PageSpec],
        viewports: dict[str, ViewportSpec],
    ) -> CaptureManifest:
        """Capture every (page, viewport) pair and write the manifest.

        A failed pair is recorded and the batch continues. Only a browser
        launch failure aborts the run, as CaptureSetupError.
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        manifest = CaptureManifest(
            source=self.source,
            base_url=self.base_url,
            timestamp=time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        )
        total = len(pages) * len(viewports)
        logger.info("Capturing %d screenshots (%d pages x %d viewports) from %s",
                    total, len(pages), len(viewports), self.base_url)

        async with async_playwright() as p:
            try:
                browser = await launch_browser(p)
            except Exception as e:
                raise CaptureSetupError(f"Could not launch browser: {e}") from e

            try:
                for page_spec in pages:
                    for viewport_name, viewport in viewports.items():
                        record = await self._capture_one(browser, page_spec, viewport_name, viewport)
                        manifest.screenshots.append(record)
            finally:
                await browser.close()

        self._write_manifest(manifest)
        logger.info("Capture complete: %d succeeded, %d failed",
                    manifest.succeeded, manifest.failed)
        return manifest

    async def _capture_one(
        self,
        browser: Browser,
        page_spec: PageSpec,
        viewport_name: str,
        viewport: ViewportSpec,
    ) -> ScreenshotRecord:
        filename = screenshot_filename(page_spec, viewport_name)
        url = f"{self.base_url}{page_spec.path}"
        record = ScreenshotRecord(
            name=page_spec.name, viewport=viewport_name, filename=filename,
            url=url, success=False,
        )

        context = None
        try:
            context = await create_viewport_context(browser, viewport.width, viewport.height)
            page = await context.new_page()
            try:
                await page.goto(url, wait_until="networkidle", timeout=self.NAVIGATION_TIMEOUT_MS)
            except PlaywrightTimeoutError as e:
                record.error = f"NavigationTimeout: {e}"
                logger.warning("  timeout %s: %s", filename, e)
                return record

            # fonts and late layout shifts
            await page.wait_for_timeout(self.SETTLE_MS)

            try:
                await hide_overlays(page)
            except Exception as e:
                logger.debug("Could not hide overlays on %s: %s", url, e)

            await page.screenshot(path=str(self.output_dir / filename), full_page=True)
            record.success = True
            logger.info("  captured %s", filename)
        except Exception as e:
            record.error = str(e)
            logger.warning("  failed %s: %s", filename, e)
        finally:
            if context is not None:
                try:
                    await context.close()
                except Exception as e:
                    logger.debug("Context close failed for %s: %s", filename, e)

        return record

    def _write_manifest(self, manifest: CaptureManifest) -> Path:
        path = self.output_dir / MANIFEST_NAME
        with open(path, "w") as f:
            json.dump(manifest.to_dict(), f, indent=2)
        logger.debug("Manifest written to %s", path)
        return path


def capture_screenshots(
    base_url: str,
    pages: list[PageSpec],
    viewports: dict[str, ViewportSpec],
    output_dir: str | Path,
    source: str = "unknown",
) -> CaptureManifest:
    """Synchronous entry point for the capture stage."""
    screenshotter = Screenshotter(base_url, Path(output_dir), source=source)
    return asyncio.run(screenshotter.capture(pages, viewports))
