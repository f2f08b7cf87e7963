"""Abstract base class for headless renderers."""

from abc import ABC, abstractmethod
from typing import NamedTuple


class ContentExtent(NamedTuple):
    """Width/height of laid-out content in CSS pixels."""
    width: int
    height: int

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


# Passing this as the full-page quality requests PNG encoding
PNG_SENTINEL = 0


class HeadlessRenderer(ABC):
    """
    Primitive operations of a headless rendering capability.

    Implementations can use different underlying systems:
    - Browser automation (Playwright)
    - Lightweight DOM rasterizers
    - External command-line image tools

    One instance serves one capture session and is never shared. The core
    drives it strictly sequentially through RenderSession, which also owns the
    deadline: implementations need no timeouts of their own beyond the one
    passed to wait_for_selector_visible().

    Errors: raise chatshot.exceptions.ConnectionError when the renderer is
    unreachable or dies, NotFoundError when an element never becomes visible.
    Anything else is reported to callers as InternalError.
    """

    name: str = "abstract"

    @abstractmethod
    async def open(self) -> None:
        """Acquire the rendering resources (process, browser, page)."""

    @abstractmethod
    async def navigate_blank(self) -> None:
        """Reset the page to an empty document."""

    @abstractmethod
    async def set_content(self, markup: str) -> None:
        """Load a complete HTML document and wait for it to finish loading."""

    @abstractmethod
    async def measure_content_extent(self) -> ContentExtent:
        """Full scrollable size of the loaded document."""

    @abstractmethod
    async def set_viewport(self, width: int, height: int) -> None:
        """Resize the viewport."""

    @abstractmethod
    async def wait_for_selector_visible(self, selector: str, timeout_ms: int) -> ContentExtent:
        """
        Wait until the first match of ``selector`` has a non-zero bounding box.

        Returns:
            ContentExtent: The element's bounding-box size

        Raises:
            NotFoundError: If the element is absent, hidden or zero-area
        """

    @abstractmethod
    async def capture_viewport(self) -> bytes:
        """PNG of the current viewport."""

    @abstractmethod
    async def capture_element(self, selector: str) -> bytes:
        """PNG of the first element matching ``selector``."""

    @abstractmethod
    async def capture_full_page(self, quality: int) -> bytes:
        """
        Image of the full scrollable page.

        Args:
            quality: JPEG quality 1-100, or PNG_SENTINEL (0) for PNG
        """

    @abstractmethod
    async def close(self) -> None:
        """Release every resource acquired by open(). Safe after partial open."""
