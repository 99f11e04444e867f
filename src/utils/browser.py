"""Browser utilities: Chromium launch, per-viewport contexts and overlay hiding."""

from __future__ import annotations

from playwright.async_api import Browser, BrowserContext, Page, Playwright

# Cookie/GDPR overlays that would otherwise cover page content in screenshots
OVERLAY_SELECTORS = [
    ".cookie-consent",
    ".cookie-banner",
    "#cookie-notice",
    ".cmplz-cookiebanner",
    '[class*="cookie"]',
    '[id*="cookie"]',
    ".gdpr",
    "#gdpr",
]

_HIDE_OVERLAYS_SCRIPT = """(selectors) => {
    selectors.forEach((sel) => {
        document.querySelectorAll(sel).forEach((el) => {
            el.style.display = 'none';
        });
    });
}"""


async def launch_browser(playwright: Playwright, headless: bool = True) -> Browser:
    """Launch headless Chromium."""
    return await playwright.chromium.launch(
        headless=headless,
        args=["--no-sandbox", "--disable-setuid-sandbox"],
    )


async def create_viewport_context(browser: Browser, width: int, height: int) -> BrowserContext:
    """Create an isolated context at the given viewport size and 1x pixel density."""
    return await browser.new_context(
        viewport={"width": width, "height": height},
        device_scale_factor=1,
    )


async def hide_overlays(page: Page, selectors: list[str] | None = None) -> None:
    """Set display:none on every element matching the overlay selectors."""
    await page.evaluate(_HIDE_OVERLAYS_SCRIPT, selectors or OVERLAY_SELECTORS)
