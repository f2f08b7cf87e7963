"""Bounded-lifetime session over one headless renderer."""

import asyncio
import logging
from enum import Enum
from typing import AbstractSet, Awaitable, Callable, FrozenSet, Optional, TypeVar

from .config import settings
from .exceptions import ChatshotError, InternalError, NotFoundError
from .exceptions import TimeoutError as CaptureTimeoutError
from .models.document import RenderedDocument
from .renderers.base import ContentExtent, HeadlessRenderer

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionState(Enum):
    """Render session lifecycle state."""
    CREATED = "created"                  # Renderer not yet opened
    OPENED = "opened"                    # Renderer resources acquired
    CONTENT_LOADED = "content_loaded"    # Document loaded into the page
    SIZED = "sized"                      # Viewport set for capture
    CAPTURED = "captured"                # Pixels extracted
    CLOSED = "closed"                    # Released after success
    FAILED = "failed"                    # Released after an error


TERMINAL_STATES: FrozenSet[SessionState] = frozenset({SessionState.CLOSED, SessionState.FAILED})
_LOADED_STATES = frozenset({SessionState.CONTENT_LOADED, SessionState.SIZED})


class RenderSession:
    """
    Owns one renderer for the duration of one capture.

    Lifecycle:
        created -> opened -> content_loaded -> sized -> captured -> closed

    Any failure (renderer error, deadline expiry, cancellation, or an
    operation called out of order) moves the session to ``failed``. Both
    terminal states release the renderer exactly once: renderer.close() runs
    on every exit path before the outcome reaches the caller.

    Every primitive runs under one deadline that starts at open(). When it
    expires the in-flight primitive is cancelled and TimeoutError is raised,
    except while waiting for an element to become visible, where the expiry
    means the element was never found (NotFoundError).

    Usage:
        async with RenderSession(renderer, timeout_ms=30000) as session:
            await session.load(document)
            await session.resize(1280, 720)
            png = await session.capture_viewport()
    """

    def __init__(
        self,
        renderer: HeadlessRenderer,
        timeout_ms: int,
        close_timeout_ms: Optional[int] = None,
    ):
        self.renderer = renderer
        self.timeout_ms = timeout_ms
        self.close_timeout_ms = close_timeout_ms or settings.CLOSE_TIMEOUT_MS
        self._state = SessionState.CREATED
        self._deadline: Optional[float] = None
        self._released = False

    @property
    def state(self) -> SessionState:
        """Get current session state."""
        return self._state

    @property
    def is_released(self) -> bool:
        """Whether the renderer has been closed."""
        return self._released

    def remaining_ms(self) -> int:
        """Milliseconds left before the deadline (full budget before open)."""
        if self._deadline is None:
            return self.timeout_ms
        remaining = self._deadline - asyncio.get_running_loop().time()
        return max(0, int(remaining * 1000))

    async def __aenter__(self) -> "RenderSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            await self.close()
        elif self._state not in TERMINAL_STATES:
            # Failure raised outside a session operation (e.g. by a strategy)
            await self._fail(f"scope exit ({exc_type.__name__})")
        return False

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Acquire renderer resources and start the deadline."""
        if self._state == SessionState.CREATED:
            self._deadline = asyncio.get_running_loop().time() + self.timeout_ms / 1000
        await self._run(
            "open", self.renderer.open, {SessionState.CREATED}, SessionState.OPENED
        )

    async def load(self, document: RenderedDocument) -> None:
        """Navigate to a blank page, then load the document."""
        await self._run("navigate_blank", self.renderer.navigate_blank, {SessionState.OPENED})
        await self._run(
            "set_content",
            lambda: self.renderer.set_content(document.markup),
            {SessionState.OPENED},
            SessionState.CONTENT_LOADED,
        )

    async def measure(self) -> ContentExtent:
        """Full scrollable extent of the loaded document."""
        return await self._run(
            "measure_content_extent", self.renderer.measure_content_extent, _LOADED_STATES
        )

    async def resize(self, width: int, height: int) -> None:
        """Set the viewport size."""
        await self._run(
            "set_viewport",
            lambda: self.renderer.set_viewport(width, height),
            _LOADED_STATES,
            SessionState.SIZED,
        )

    async def wait_visible(self, selector: str) -> ContentExtent:
        """Wait for an element to become visible; returns its bounding-box extent."""
        return await self._run(
            "wait_for_selector_visible",
            lambda: self.renderer.wait_for_selector_visible(selector, self.remaining_ms()),
            {SessionState.SIZED},
            on_timeout=lambda: NotFoundError(
                selector, detail=f"not visible within {self.timeout_ms} ms"
            ),
        )

    async def capture_viewport(self) -> bytes:
        return await self._run(
            "capture_viewport",
            self.renderer.capture_viewport,
            {SessionState.SIZED},
            SessionState.CAPTURED,
        )

    async def capture_element(self, selector: str) -> bytes:
        return await self._run(
            "capture_element",
            lambda: self.renderer.capture_element(selector),
            {SessionState.SIZED},
            SessionState.CAPTURED,
        )

    async def capture_full_page(self, quality: int) -> bytes:
        return await self._run(
            "capture_full_page",
            lambda: self.renderer.capture_full_page(quality),
            {SessionState.SIZED},
            SessionState.CAPTURED,
        )

    async def close(self) -> None:
        """Release the renderer. No-op once the session is closed or failed."""
        if self._state in TERMINAL_STATES:
            return
        await self._release()
        self._transition(SessionState.CLOSED)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run(
        self,
        operation: str,
        call: Callable[[], Awaitable[T]],
        allowed: AbstractSet[SessionState],
        next_state: Optional[SessionState] = None,
        on_timeout: Optional[Callable[[], ChatshotError]] = None,
    ) -> T:
        """Run one primitive under the deadline, failing the session on any error."""
        if self._state in TERMINAL_STATES:
            raise InternalError(
                f"Cannot {operation}: session already {self._state.value}"
            )
        if self._state not in allowed:
            current = self._state
            await self._fail(operation)
            raise InternalError(f"Cannot {operation} in state {current.value}")

        try:
            remaining = self.remaining_ms()
            if remaining <= 0:
                raise asyncio.TimeoutError()
            result = await asyncio.wait_for(call(), timeout=remaining / 1000)
        except asyncio.TimeoutError:
            await self._fail(operation)
            if on_timeout is not None:
                raise on_timeout() from None
            raise CaptureTimeoutError(
                f"Capture timed out after {self.timeout_ms} ms during {operation}"
            ) from None
        except asyncio.CancelledError:
            await self._fail(operation)
            raise
        except ChatshotError:
            await self._fail(operation)
            raise
        except Exception as e:
            await self._fail(operation)
            raise InternalError(
                f"Renderer failed during {operation}", detail=str(e)
            ) from e

        if next_state is not None:
            self._transition(next_state)
        return result

    def _transition(self, state: SessionState) -> None:
        logger.debug(f"Render session {self._state.value} -> {state.value}")
        self._state = state

    async def _fail(self, operation: str) -> None:
        logger.warning(
            f"Render session failed during {operation} (state: {self._state.value})"
        )
        self._transition(SessionState.FAILED)
        await self._release()

    async def _release(self) -> None:
        """Close the renderer once, bounded by its own grace timeout."""
        if self._released:
            return
        self._released = True

        try:
            await asyncio.wait_for(
                self.renderer.close(), timeout=self.close_timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"Renderer close did not finish within {self.close_timeout_ms} ms"
            )
        except Exception as e:
            logger.warning(f"Renderer close failed: {e}")
