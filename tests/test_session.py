"""Tests for render session lifecycle, deadline and release guarantees."""

import asyncio

import pytest

from chatshot.exceptions import ConnectionError, InternalError, NotFoundError
from chatshot.exceptions import TimeoutError as CaptureTimeoutError
from chatshot.models import RenderedDocument
from chatshot.session import RenderSession, SessionState

from conftest import FakeRenderer

DOCUMENT = RenderedDocument(markup="<html><body><div class='chat-container'></div></body></html>", width=800)


@pytest.mark.asyncio
async def test_successful_lifecycle(fake_renderer):
    """A full capture walks every state and closes the renderer once."""
    session = RenderSession(fake_renderer, timeout_ms=5000)
    assert session.state == SessionState.CREATED

    async with session:
        assert session.state == SessionState.OPENED
        await session.load(DOCUMENT)
        assert session.state == SessionState.CONTENT_LOADED
        await session.resize(800, 600)
        assert session.state == SessionState.SIZED
        payload = await session.capture_viewport()
        assert session.state == SessionState.CAPTURED

    assert payload
    assert session.state == SessionState.CLOSED
    assert fake_renderer.close_count == 1
    assert fake_renderer.calls == [
        "open", "navigate_blank", "set_content", "set_viewport", "capture_viewport", "close",
    ]
    assert fake_renderer.markup == DOCUMENT.markup


@pytest.mark.asyncio
async def test_close_is_idempotent(fake_renderer):
    """Closing twice releases the renderer only once."""
    session = RenderSession(fake_renderer, timeout_ms=5000)
    await session.open()
    await session.close()
    await session.close()

    assert session.state == SessionState.CLOSED
    assert fake_renderer.close_count == 1


@pytest.mark.asyncio
async def test_deadline_expiry_raises_timeout_and_releases():
    """A hung primitive is abandoned at the deadline and the renderer closed."""
    renderer = FakeRenderer(hang_on="set_content")
    session = RenderSession(renderer, timeout_ms=50)

    with pytest.raises(CaptureTimeoutError) as exc_info:
        async with session:
            await session.load(DOCUMENT)

    assert exc_info.value.code == "timeout"
    assert session.state == SessionState.FAILED
    assert renderer.close_count == 1


@pytest.mark.asyncio
async def test_deadline_during_visibility_wait_is_not_found():
    """Running out of time while waiting for an element means it was not found."""
    renderer = FakeRenderer(hang_on="wait_for_selector_visible")
    session = RenderSession(renderer, timeout_ms=50)

    with pytest.raises(NotFoundError) as exc_info:
        async with session:
            await session.load(DOCUMENT)
            await session.resize(800, 600)
            await session.wait_visible(".chat-container")

    assert exc_info.value.selector == ".chat-container"
    assert renderer.close_count == 1


@pytest.mark.asyncio
async def test_visibility_wait_gets_remaining_budget():
    """The renderer is told how much of the deadline is left."""
    renderer = FakeRenderer()
    async with RenderSession(renderer, timeout_ms=5000) as session:
        await session.load(DOCUMENT)
        await session.resize(800, 600)
        await session.wait_visible(".chat-container")

    assert 0 < renderer.selector_timeouts[0] <= 5000


@pytest.mark.asyncio
async def test_renderer_unavailable_on_open():
    """Open failures propagate as ConnectionError after release."""
    renderer = FakeRenderer(fail_on={"open": ConnectionError("Browser unavailable during launch")})
    session = RenderSession(renderer, timeout_ms=5000)

    with pytest.raises(ConnectionError):
        async with session:
            pass

    assert session.state == SessionState.FAILED
    assert renderer.close_count == 1


@pytest.mark.asyncio
async def test_unexpected_error_becomes_internal():
    """Errors outside the taxonomy are reported as InternalError."""
    renderer = FakeRenderer(fail_on={"capture_viewport": RuntimeError("boom")})

    with pytest.raises(InternalError) as exc_info:
        async with RenderSession(renderer, timeout_ms=5000) as session:
            await session.load(DOCUMENT)
            await session.resize(800, 600)
            await session.capture_viewport()

    assert "boom" in exc_info.value.detail
    assert renderer.close_count == 1


@pytest.mark.asyncio
async def test_out_of_order_operation_fails_session(fake_renderer):
    """Capturing before content is loaded fails the session."""
    session = RenderSession(fake_renderer, timeout_ms=5000)
    await session.open()

    with pytest.raises(InternalError):
        await session.capture_viewport()

    assert session.state == SessionState.FAILED
    assert fake_renderer.close_count == 1
    assert "capture_viewport" not in fake_renderer.calls

    # Further operations are rejected without another release
    with pytest.raises(InternalError):
        await session.resize(800, 600)
    assert fake_renderer.close_count == 1


@pytest.mark.asyncio
async def test_failure_outside_session_operation_releases(fake_renderer):
    """An error raised in the session scope still releases the renderer."""
    session = RenderSession(fake_renderer, timeout_ms=5000)

    with pytest.raises(ValueError):
        async with session:
            await session.load(DOCUMENT)
            raise ValueError("strategy bug")

    assert session.state == SessionState.FAILED
    assert fake_renderer.close_count == 1


@pytest.mark.asyncio
async def test_cancellation_releases_renderer():
    """Cancelling the caller closes the renderer before the task finishes."""
    renderer = FakeRenderer(hang_on="set_content")

    async def run():
        async with RenderSession(renderer, timeout_ms=60000) as session:
            await session.load(DOCUMENT)

    task = asyncio.create_task(run())
    await asyncio.sleep(0.05)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task

    assert renderer.close_count == 1


@pytest.mark.asyncio
async def test_hung_close_is_bounded():
    """A renderer that never finishes closing does not block the session."""
    renderer = FakeRenderer(hang_on="close")
    session = RenderSession(renderer, timeout_ms=5000, close_timeout_ms=50)

    await session.open()
    await asyncio.wait_for(session.close(), timeout=2)

    assert session.state == SessionState.CLOSED
    assert session.is_released


@pytest.mark.asyncio
async def test_close_error_is_not_raised():
    """Errors while releasing are logged, not propagated."""
    renderer = FakeRenderer(fail_on={"close": RuntimeError("already gone")})
    async with RenderSession(renderer, timeout_ms=5000):
        pass

    assert renderer.close_count == 1


def test_remaining_budget_before_open(fake_renderer):
    """Before open the whole timeout is available."""
    assert RenderSession(fake_renderer, timeout_ms=1234).remaining_ms() == 1234
