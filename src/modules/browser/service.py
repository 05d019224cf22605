import asyncio
import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager

from playwright.async_api import Dialog, Page, async_playwright
from playwright.async_api import Error as PlaywrightError

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1920, "height": 1080}
SCROLL_PAUSE = 1.5
SCROLL_SETTLE = 1.0
MAX_SCROLL_ROUNDS = 50
COOKIE_BUTTON = "text=accept"

_SCROLL_HEIGHT_JS = "() => document.body.scrollHeight"
_SCROLL_TO_BOTTOM_JS = "() => window.scrollTo(0, document.body.scrollHeight)"


async def _accept_dialog(dialog: Dialog) -> None:
    await dialog.accept()


@asynccontextmanager
async def browser_session(
    page_timeout: int, headless: bool = True
) -> AsyncIterator[Page]:
    """Launch Chromium and yield a single page; the browser is always closed."""
    async with async_playwright() as pw:
        logger.info("Launching browser (headless=%s)", headless)
        browser = await pw.chromium.launch(headless=headless)
        try:
            context = await browser.new_context(viewport=VIEWPORT)
            context.set_default_timeout(page_timeout)
            context.set_default_navigation_timeout(page_timeout)
            page = await context.new_page()
            page.on("dialog", _accept_dialog)
            yield page
        finally:
            await browser.close()
            logger.info("Browser closed")


# ── Page helpers ────────────────────────────────────────────────


async def pause(page: Page, seconds: float) -> None:
    await page.wait_for_timeout(seconds * 1000)


async def accept_cookies(page: Page) -> None:
    try:
        button = await page.query_selector(COOKIE_BUTTON)
        if button:
            await button.click()
            await pause(page, 1.0)
            logger.info("Cookies accepted")
    except PlaywrightError:
        logger.debug("No cookie banner found or already accepted")


async def scroll_to_bottom(page: Page) -> None:
    """Scroll until the document stops growing so lazy content gets loaded."""
    try:
        previous = -1
        current = await page.evaluate(_SCROLL_HEIGHT_JS)
        rounds = 0
        while current != previous and rounds < MAX_SCROLL_ROUNDS:
            previous = current
            await page.evaluate(_SCROLL_TO_BOTTOM_JS)
            await pause(page, SCROLL_PAUSE)
            current = await page.evaluate(_SCROLL_HEIGHT_JS)
            rounds += 1

        await page.evaluate(_SCROLL_TO_BOTTOM_JS)
        await pause(page, SCROLL_SETTLE)
        logger.debug("Finished scrolling after %d rounds (height=%s)", rounds, current)
    except PlaywrightError as exc:
        logger.warning("Error during scroll: %s", exc)


async def wait_for_any(
    page: Page, selectors: Sequence[str], timeout: float
) -> str | None:
    """Wait until one of ``selectors`` is visible; return it, or None if none shows."""
    waits = {
        asyncio.ensure_future(
            page.wait_for_selector(selector, timeout=timeout, state="visible")
        ): selector
        for selector in selectors
    }
    pending = set(waits)
    winner = None
    try:
        while pending and winner is None:
            done, pending = await asyncio.wait(
                pending, return_when=asyncio.FIRST_COMPLETED
            )
            # Read every outcome so failed waits are not reported as unretrieved
            for task in done:
                if task.exception() is None and winner is None:
                    winner = waits[task]
        return winner
    finally:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
