"""Capture strategies: how much of the document is rasterized, and how."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, NamedTuple

from .models.options import CaptureMode, CaptureOptions, ImageFormat
from .renderers.base import PNG_SENTINEL
from .session import RenderSession

logger = logging.getLogger(__name__)


class RawCapture(NamedTuple):
    """Bytes straight from the renderer, with what the strategy knows about them."""
    payload: bytes
    actual_format: ImageFormat
    height: int


def full_page_quality(options: CaptureOptions) -> int:
    """Quality argument for a full-page capture: JPEG quality, or the PNG sentinel."""
    if options.format == ImageFormat.JPEG:
        return options.quality
    return PNG_SENTINEL


def actual_format(options: CaptureOptions) -> ImageFormat:
    """
    Format a capture with these options will actually produce.

    Only full-page capture can emit JPEG, and only with a positive quality;
    viewport and element captures are always PNG.
    """
    if options.mode == CaptureMode.FULL_PAGE and full_page_quality(options) > PNG_SENTINEL:
        return ImageFormat.JPEG
    return ImageFormat.PNG


class CaptureStrategy(ABC):
    """Sizing steps plus one capture primitive for a capture mode."""

    mode: CaptureMode

    async def prepare(self, session: RenderSession, options: CaptureOptions) -> None:
        """Size the viewport to the resolved dimensions."""
        await session.resize(options.width, options.height)

    @abstractmethod
    async def capture(self, session: RenderSession, options: CaptureOptions) -> RawCapture:
        """Run the capture against a session with content loaded."""


class ViewportStrategy(CaptureStrategy):
    """Capture exactly the viewport. Always PNG, whatever format was requested."""

    mode = CaptureMode.VIEWPORT

    async def capture(self, session: RenderSession, options: CaptureOptions) -> RawCapture:
        await self.prepare(session, options)
        logger.info("Capturing viewport screenshot (format: png)")
        payload = await session.capture_viewport()
        return RawCapture(payload, ImageFormat.PNG, options.height)


class ElementStrategy(CaptureStrategy):
    """Capture one element once it is visible. Always PNG."""

    mode = CaptureMode.ELEMENT

    async def capture(self, session: RenderSession, options: CaptureOptions) -> RawCapture:
        await self.prepare(session, options)
        selector = options.selector
        extent = await session.wait_visible(selector)
        logger.info(
            f"Capturing element screenshot (selector: '{selector}', "
            f"{extent.width}x{extent.height}, format: png)"
        )
        payload = await session.capture_element(selector)
        return RawCapture(payload, ImageFormat.PNG, extent.height)


class FullPageStrategy(CaptureStrategy):
    """
    Capture the whole scrollable document.

    The viewport is grown to the measured content height before capture. This
    is the only mode that can emit JPEG: a positive quality requests JPEG, the
    PNG sentinel forces PNG.
    """

    mode = CaptureMode.FULL_PAGE

    async def capture(self, session: RenderSession, options: CaptureOptions) -> RawCapture:
        await self.prepare(session, options)
        extent = await session.measure()
        height = max(1, extent.height)
        await session.resize(options.width, height)

        quality = full_page_quality(options)
        image_format = actual_format(options)
        logger.info(
            f"Capturing full page screenshot ({options.width}x{height}, "
            f"requested format: {options.format.value}, actual: {image_format.value})"
        )
        payload = await session.capture_full_page(quality)
        return RawCapture(payload, image_format, height)


_STRATEGIES: Dict[CaptureMode, CaptureStrategy] = {
    CaptureMode.VIEWPORT: ViewportStrategy(),
    CaptureMode.ELEMENT: ElementStrategy(),
    CaptureMode.FULL_PAGE: FullPageStrategy(),
}


def strategy_for(mode: CaptureMode) -> CaptureStrategy:
    """Strategy instance for a capture mode (strategies are stateless)."""
    return _STRATEGIES[mode]
