"""Capture option and result models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class CaptureMode(str, Enum):
    """How much of the rendered document is rasterized."""
    VIEWPORT = "viewport"
    ELEMENT = "element"
    FULL_PAGE = "full_page"


class ImageFormat(str, Enum):
    """Output image formats."""
    PNG = "png"
    JPEG = "jpeg"

    @property
    def content_type(self) -> str:
        return f"image/{self.value}"


class CaptureRequest(BaseModel):
    """Partially populated capture options, as supplied by a caller."""

    model_config = ConfigDict(populate_by_name=True)

    width: Optional[int] = Field(None, description="Viewport width in pixels")
    height: Optional[int] = Field(None, description="Viewport height in pixels")
    selector: Optional[str] = Field(None, description="CSS selector for element capture")
    mode: Optional[CaptureMode] = Field(None, description="Capture mode")
    is_full_page: bool = Field(False, alias="isFullPage", description="Capture the full scrollable page")
    format: Optional[str] = Field(None, description="png or jpeg")
    quality: Optional[int] = Field(None, description="JPEG quality (1-100)")
    timeout_ms: Optional[int] = Field(None, alias="timeoutMs", description="Overall deadline in milliseconds")


class CaptureOptions(BaseModel):
    """Fully resolved capture options."""

    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    selector: Optional[str] = None
    mode: CaptureMode
    format: ImageFormat
    quality: int = Field(..., ge=1, le=100)
    timeout_ms: int = Field(..., gt=0)

    @model_validator(mode="after")
    def _element_needs_selector(self):
        if self.mode == CaptureMode.ELEMENT and not self.selector:
            raise ValueError("element capture requires a selector")
        return self


class CaptureResult(BaseModel):
    """Captured image bytes with the format and size actually produced."""

    model_config = ConfigDict(frozen=True)

    payload: bytes = Field(..., repr=False)
    actual_format: ImageFormat
    width: int
    height: int

    @property
    def content_type(self) -> str:
        return self.actual_format.content_type

    @property
    def size(self) -> int:
        return len(self.payload)
