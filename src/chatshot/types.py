"""Common type definitions for Chatshot.

TypedDict definitions for the small dict-shaped structures that cross the
renderer and transport boundaries.
"""

from typing import Optional, TypedDict


class ViewportDict(TypedDict):
    """Viewport size handed to the browser."""
    width: int
    height: int


class ExtentDict(TypedDict, total=False):
    """Extent reported by in-page measurement scripts."""
    width: float
    height: float


class ErrorDict(TypedDict, total=False):
    """Error body returned by the HTTP transport."""
    type: str
    code: str
    message: str
    detail: Optional[str]


class HealthDict(TypedDict):
    """Health check response."""
    status: str
    service: str
    renderer: str


class DataUrlDict(TypedDict):
    """Screenshot returned inline as a data URL."""
    image: str
    format: str
    width: int
    height: int
