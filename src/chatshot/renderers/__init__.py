"""Headless renderer backends behind one primitive interface."""

from typing import Optional

from .base import PNG_SENTINEL, ContentExtent, HeadlessRenderer

RENDERER_BACKENDS = ("playwright",)


def create_renderer(backend: Optional[str] = None, **kwargs) -> HeadlessRenderer:
    """
    Create a renderer for one capture session.

    Backends are imported lazily so the core never depends on a specific one.

    Args:
        backend: Backend name; defaults to settings.RENDERER_BACKEND
        **kwargs: Backend-specific configuration

    Raises:
        ValueError: If the backend name is unknown
    """
    from ..config import settings

    backend = backend or settings.RENDERER_BACKEND

    if backend == "playwright":
        from .playwright_renderer import PlaywrightRenderer
        return PlaywrightRenderer(**kwargs)

    raise ValueError(
        f"Unknown renderer backend: {backend}. Use one of: {', '.join(RENDERER_BACKENDS)}"
    )


__all__ = [
    "PNG_SENTINEL",
    "ContentExtent",
    "HeadlessRenderer",
    "RENDERER_BACKENDS",
    "create_renderer",
]
