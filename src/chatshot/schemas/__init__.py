"""Schema definitions for API requests/responses."""

from .screenshot import RequestMessage, ScreenshotOptionsIn, ScreenshotRequest

__all__ = [
    "RequestMessage",
    "ScreenshotOptionsIn",
    "ScreenshotRequest",
]
