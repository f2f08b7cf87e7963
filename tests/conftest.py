"""Shared fixtures: an in-memory renderer and sample transcripts."""

import asyncio
from typing import Dict, Iterable, List, Optional

import pytest

from chatshot.exceptions import NotFoundError
from chatshot.renderers.base import PNG_SENTINEL, ContentExtent, HeadlessRenderer

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32


class FakeRenderer(HeadlessRenderer):
    """
    Records every primitive call and returns canned results.

    Failure injection:
    - hang_on: primitive name that never completes
    - fail_on: primitive name -> exception raised when called
    - missing_selectors: selectors that never become visible
    """

    name = "fake"

    def __init__(
        self,
        hang_on: Optional[str] = None,
        fail_on: Optional[Dict[str, Exception]] = None,
        missing_selectors: Iterable[str] = (),
        payload: Optional[bytes] = None,
        page_extent: ContentExtent = ContentExtent(1280, 2400),
        element_extent: ContentExtent = ContentExtent(1280, 480),
    ):
        self.hang_on = hang_on
        self.fail_on = fail_on or {}
        self.missing_selectors = set(missing_selectors)
        self.payload = payload
        self.page_extent = page_extent
        self.element_extent = element_extent

        self.calls: List[str] = []
        self.close_count = 0
        self.markup: Optional[str] = None
        self.viewports: List[tuple] = []
        self.selector_timeouts: List[int] = []
        self.full_page_quality: Optional[int] = None

    async def _step(self, name: str) -> None:
        self.calls.append(name)
        if name == self.hang_on:
            await asyncio.sleep(3600)
        if name in self.fail_on:
            raise self.fail_on[name]

    def _image(self, default: bytes) -> bytes:
        return default if self.payload is None else self.payload

    async def open(self) -> None:
        await self._step("open")

    async def navigate_blank(self) -> None:
        await self._step("navigate_blank")

    async def set_content(self, markup: str) -> None:
        await self._step("set_content")
        self.markup = markup

    async def measure_content_extent(self) -> ContentExtent:
        await self._step("measure_content_extent")
        return self.page_extent

    async def set_viewport(self, width: int, height: int) -> None:
        await self._step("set_viewport")
        self.viewports.append((width, height))

    async def wait_for_selector_visible(self, selector: str, timeout_ms: int) -> ContentExtent:
        await self._step("wait_for_selector_visible")
        self.selector_timeouts.append(timeout_ms)
        if selector in self.missing_selectors:
            raise NotFoundError(selector)
        return self.element_extent

    async def capture_viewport(self) -> bytes:
        await self._step("capture_viewport")
        return self._image(PNG_BYTES)

    async def capture_element(self, selector: str) -> bytes:
        await self._step("capture_element")
        return self._image(PNG_BYTES)

    async def capture_full_page(self, quality: int) -> bytes:
        await self._step("capture_full_page")
        self.full_page_quality = quality
        return self._image(JPEG_BYTES if quality > PNG_SENTINEL else PNG_BYTES)

    async def close(self) -> None:
        self.close_count += 1
        await self._step("close")


@pytest.fixture
def fake_renderer():
    """Renderer that succeeds at every step."""
    return FakeRenderer()


@pytest.fixture
def two_message_transcript():
    """One received and one outgoing message."""
    return {
        "header_text": "Alice",
        "status_line": "online",
        "messages": [
            {"id": "1", "author": "Alice", "body": "Hi *there*", "sent_at": "10:00"},
            {"id": "2", "author": "", "body": "Hello _Alice_", "sent_at": "10:01"},
        ],
    }
