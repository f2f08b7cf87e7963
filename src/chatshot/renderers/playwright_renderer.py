"""Playwright renderer - headless Chromium via the Playwright async API."""

import logging
import math
from contextlib import asynccontextmanager
from typing import List, Optional

from playwright.async_api import (
    Browser,
    Error as PlaywrightError,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
    async_playwright,
)

from .base import PNG_SENTINEL, ContentExtent, HeadlessRenderer
from ..config import settings
from ..exceptions import ChatshotError, ConnectionError, InternalError, NotFoundError, TimeoutError
from ..types import ExtentDict, ViewportDict

logger = logging.getLogger(__name__)

# Messages Playwright uses when the browser process or its pipe goes away
_DISCONNECT_MARKERS = (
    "target closed",
    "has been closed",
    "connection closed",
    "browser has disconnected",
    "executable doesn't exist",
)

_MEASURE_SCRIPT = """() => {
    const root = document.documentElement;
    const body = document.body;
    return {
        width: Math.max(root.scrollWidth, body ? body.scrollWidth : 0),
        height: Math.max(root.scrollHeight, body ? body.scrollHeight : 0),
    };
}"""


def _is_disconnect(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in _DISCONNECT_MARKERS)


class PlaywrightRenderer(HeadlessRenderer):
    """
    Renderer backed by a private headless Chromium instance.

    Each instance launches its own browser in open() and tears it down in
    close(), matching the one-session-per-request model. Playwright errors
    are translated into the chatshot error taxonomy at this boundary.
    """

    name = "playwright"

    def __init__(
        self,
        browser_args: Optional[List[str]] = None,
        device_scale_factor: Optional[float] = None,
        headless: bool = True,
    ):
        self.browser_args = list(browser_args if browser_args is not None else settings.BROWSER_ARGS)
        self.device_scale_factor = device_scale_factor or settings.DEVICE_SCALE_FACTOR
        self.headless = headless
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    @asynccontextmanager
    async def _translate_errors(self, operation: str, unavailable: bool = False):
        """Map Playwright failures onto chatshot errors."""
        try:
            yield
        except ChatshotError:
            raise
        except PlaywrightTimeoutError as e:
            raise TimeoutError(f"Browser timed out during {operation}", detail=str(e)) from e
        except PlaywrightError as e:
            if unavailable or _is_disconnect(e):
                raise ConnectionError(f"Browser unavailable during {operation}", detail=str(e)) from e
            raise InternalError(f"Browser failed during {operation}", detail=str(e)) from e
        except OSError as e:
            # Driver process could not be spawned
            raise ConnectionError(f"Browser unavailable during {operation}", detail=str(e)) from e

    def _require_page(self) -> Page:
        if self._page is None:
            raise ConnectionError("Browser page is not open")
        return self._page

    async def open(self) -> None:
        async with self._translate_errors("launch", unavailable=True):
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.headless,
                args=self.browser_args,
            )
            self._page = await self._browser.new_page(
                device_scale_factor=self.device_scale_factor,
            )
        logger.debug(f"Launched headless Chromium (args: {' '.join(self.browser_args)})")

    async def navigate_blank(self) -> None:
        page = self._require_page()
        async with self._translate_errors("navigate"):
            await page.goto("about:blank")

    async def set_content(self, markup: str) -> None:
        page = self._require_page()
        async with self._translate_errors("set_content"):
            await page.set_content(markup, wait_until="load")

    async def measure_content_extent(self) -> ContentExtent:
        page = self._require_page()
        async with self._translate_errors("measure"):
            extent: ExtentDict = await page.evaluate(_MEASURE_SCRIPT)
        return ContentExtent(
            width=int(math.ceil(extent.get("width", 0))),
            height=int(math.ceil(extent.get("height", 0))),
        )

    async def set_viewport(self, width: int, height: int) -> None:
        page = self._require_page()
        viewport: ViewportDict = {"width": width, "height": height}
        async with self._translate_errors("set_viewport"):
            await page.set_viewport_size(viewport)

    async def wait_for_selector_visible(self, selector: str, timeout_ms: int) -> ContentExtent:
        page = self._require_page()
        async with self._translate_errors("wait_for_selector"):
            try:
                handle = await page.wait_for_selector(
                    selector, state="visible", timeout=timeout_ms
                )
            except PlaywrightTimeoutError as e:
                raise NotFoundError(selector, detail=str(e)) from e

            if handle is None:
                raise NotFoundError(selector)

            box = await handle.bounding_box()

        if not box or box["width"] <= 0 or box["height"] <= 0:
            raise NotFoundError(selector, detail="element has a zero-area bounding box")

        return ContentExtent(
            width=int(math.ceil(box["width"])),
            height=int(math.ceil(box["height"])),
        )

    async def capture_viewport(self) -> bytes:
        page = self._require_page()
        async with self._translate_errors("capture_viewport"):
            return await page.screenshot(type="png")

    async def capture_element(self, selector: str) -> bytes:
        page = self._require_page()
        async with self._translate_errors("capture_element"):
            return await page.locator(selector).first.screenshot(type="png")

    async def capture_full_page(self, quality: int) -> bytes:
        page = self._require_page()
        async with self._translate_errors("capture_full_page"):
            if quality > PNG_SENTINEL:
                return await page.screenshot(type="jpeg", quality=quality, full_page=True)
            return await page.screenshot(type="png", full_page=True)

    async def close(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._page = None
        self._browser = None
        self._playwright = None

        # Closing the browser also closes its pages
        if browser is not None:
            try:
                await browser.close()
            except PlaywrightError as e:
                logger.warning(f"Failed to close browser: {e}")

        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Failed to stop Playwright driver: {e}")

        logger.debug("Playwright renderer closed")
