"""Tests for capture strategies."""

import pytest

from chatshot.exceptions import NotFoundError
from chatshot.models import CaptureMode, ImageFormat, RenderedDocument
from chatshot.normalizer import RequestNormalizer
from chatshot.renderers.base import PNG_SENTINEL, ContentExtent
from chatshot.session import RenderSession, SessionState
from chatshot.strategies import (
    ElementStrategy,
    FullPageStrategy,
    ViewportStrategy,
    actual_format,
    full_page_quality,
    strategy_for,
)

from conftest import FakeRenderer

DOCUMENT = RenderedDocument(markup="<html></html>", width=1280)


def resolve(**request):
    return RequestNormalizer().normalize(request)


async def run_strategy(renderer, options):
    async with RenderSession(renderer, options.timeout_ms) as session:
        await session.load(DOCUMENT)
        return await strategy_for(options.mode).capture(session, options)


def test_strategy_lookup():
    """Each mode has its own strategy."""
    assert isinstance(strategy_for(CaptureMode.VIEWPORT), ViewportStrategy)
    assert isinstance(strategy_for(CaptureMode.ELEMENT), ElementStrategy)
    assert isinstance(strategy_for(CaptureMode.FULL_PAGE), FullPageStrategy)


@pytest.mark.parametrize(
    "request_options,expected",
    [
        ({"is_full_page": True, "format": "jpeg", "quality": 90}, ImageFormat.JPEG),
        ({"is_full_page": True, "format": "png", "quality": 90}, ImageFormat.PNG),
        ({"selector": ".el", "format": "png"}, ImageFormat.PNG),
        ({"selector": ".el", "format": "jpeg"}, ImageFormat.PNG),
        ({"mode": "viewport", "format": "png"}, ImageFormat.PNG),
        ({"mode": "viewport", "format": "jpeg"}, ImageFormat.PNG),
    ],
)
def test_actual_format(request_options, expected):
    """Only full-page JPEG requests produce JPEG."""
    assert actual_format(resolve(**request_options)) == expected


def test_full_page_quality_sentinel():
    """PNG full-page captures pass the PNG sentinel as quality."""
    assert full_page_quality(resolve(is_full_page=True, format="png")) == PNG_SENTINEL
    assert full_page_quality(resolve(is_full_page=True, format="jpeg", quality=80)) == 80


@pytest.mark.asyncio
async def test_viewport_capture_is_png_at_viewport_height(fake_renderer):
    """Viewport capture sizes once and reports the viewport height."""
    options = resolve(mode="viewport", format="jpeg", width=1024, height=768)
    raw = await run_strategy(fake_renderer, options)

    assert raw.actual_format == ImageFormat.PNG
    assert raw.height == 768
    assert fake_renderer.viewports == [(1024, 768)]
    assert "capture_viewport" in fake_renderer.calls


@pytest.mark.asyncio
async def test_element_capture_uses_element_height():
    """Element capture reports the element's own height."""
    renderer = FakeRenderer(element_extent=ContentExtent(1280, 333))
    raw = await run_strategy(renderer, resolve())

    assert raw.actual_format == ImageFormat.PNG
    assert raw.height == 333
    assert renderer.calls.index("wait_for_selector_visible") < renderer.calls.index("capture_element")


@pytest.mark.asyncio
async def test_element_not_found_closes_session():
    """A selector that never appears fails with NotFoundError."""
    renderer = FakeRenderer(missing_selectors=[".missing"])

    with pytest.raises(NotFoundError) as exc_info:
        await run_strategy(renderer, resolve(selector=".missing"))

    assert exc_info.value.selector == ".missing"
    assert "capture_element" not in renderer.calls
    assert renderer.close_count == 1


@pytest.mark.asyncio
async def test_full_page_grows_viewport_to_content():
    """Full-page capture measures the document and resizes before capture."""
    renderer = FakeRenderer(page_extent=ContentExtent(1280, 2400))
    raw = await run_strategy(renderer, resolve(is_full_page=True, format="jpeg", quality=70))

    assert renderer.viewports == [(1280, 720), (1280, 2400)]
    assert renderer.full_page_quality == 70
    assert raw.actual_format == ImageFormat.JPEG
    assert raw.height == 2400


@pytest.mark.asyncio
async def test_full_page_png():
    """PNG full-page requests pass the sentinel and report PNG."""
    renderer = FakeRenderer()
    raw = await run_strategy(renderer, resolve(is_full_page=True))

    assert renderer.full_page_quality == PNG_SENTINEL
    assert raw.actual_format == ImageFormat.PNG


@pytest.mark.asyncio
async def test_full_page_empty_document_has_positive_height():
    """An empty measurement still sizes the viewport to at least one pixel."""
    renderer = FakeRenderer(page_extent=ContentExtent(0, 0))
    raw = await run_strategy(renderer, resolve(is_full_page=True))

    assert renderer.viewports[-1] == (1280, 1)
    assert raw.height == 1


@pytest.mark.asyncio
async def test_strategy_leaves_session_captured(fake_renderer):
    """After a strategy runs the session is in the captured state."""
    options = resolve(mode="viewport")
    session = RenderSession(fake_renderer, options.timeout_ms)
    await session.open()
    await session.load(DOCUMENT)
    await strategy_for(options.mode).capture(session, options)

    assert session.state == SessionState.CAPTURED
    await session.close()
