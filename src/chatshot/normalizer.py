"""Resolve partial capture options into a complete configuration."""

import logging
from typing import Any, Mapping, Optional, Union

import pydantic

from .config import Settings, settings as default_settings
from .exceptions import ValidationError
from .models.options import CaptureMode, CaptureOptions, CaptureRequest, ImageFormat
from .models.transcript import ChatTranscript

logger = logging.getLogger(__name__)

_FORMAT_ALIASES = {"png": ImageFormat.PNG, "jpeg": ImageFormat.JPEG, "jpg": ImageFormat.JPEG}


def _summarize(error: pydantic.ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in item['loc']) or 'value'}: {item['msg']}"
        for item in error.errors()
    )


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


class RequestNormalizer:
    """
    Turns caller input into validated core types.

    Defaults and ranges come from Settings:
    - width 1280 (clamped to [MIN_WIDTH, MAX_WIDTH]), height 720
    - format png, quality 90 (anything outside 1-100 resets to 90)
    - timeout 30000 ms, selector .chat-container for element mode
    - is_full_page wins over any selector or explicit mode

    Only structurally invalid input raises ValidationError; out-of-range
    numbers are corrected silently.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings

    def validate_transcript(
        self, transcript: Union[ChatTranscript, Mapping[str, Any], None]
    ) -> ChatTranscript:
        """Return a ChatTranscript, raising ValidationError for malformed input."""
        if transcript is None:
            raise ValidationError("Transcript is required")
        if isinstance(transcript, ChatTranscript):
            return transcript
        if not isinstance(transcript, Mapping):
            raise ValidationError(
                f"Transcript must be an object, got {type(transcript).__name__}"
            )

        try:
            return ChatTranscript.model_validate(transcript)
        except pydantic.ValidationError as e:
            raise ValidationError("Malformed transcript", detail=_summarize(e)) from e

    def normalize(
        self, request: Union[CaptureRequest, Mapping[str, Any], None] = None
    ) -> CaptureOptions:
        """Resolve a partial request into CaptureOptions."""
        request = self._coerce_request(request)
        cfg = self.config

        mode = self._resolve_mode(request)
        image_format = self._resolve_format(request.format)

        selector = request.selector or None
        if mode == CaptureMode.ELEMENT and not selector:
            selector = cfg.DEFAULT_SELECTOR

        quality = request.quality
        if quality is None or not 1 <= quality <= 100:
            if quality is not None and image_format == ImageFormat.JPEG:
                logger.warning(
                    f"Quality {quality} is out of range (1-100). Using default {cfg.DEFAULT_QUALITY} for JPEG."
                )
            quality = cfg.DEFAULT_QUALITY

        timeout_ms = request.timeout_ms
        if not timeout_ms or timeout_ms <= 0:
            timeout_ms = cfg.DEFAULT_TIMEOUT_MS
        timeout_ms = min(timeout_ms, cfg.MAX_TIMEOUT_MS)

        options = CaptureOptions(
            width=self._resolve_dimension(request.width, cfg.DEFAULT_WIDTH, cfg.MIN_WIDTH, cfg.MAX_WIDTH),
            height=self._resolve_dimension(request.height, cfg.DEFAULT_HEIGHT, cfg.MIN_HEIGHT, cfg.MAX_HEIGHT),
            selector=selector,
            mode=mode,
            format=image_format,
            quality=quality,
            timeout_ms=timeout_ms,
        )
        logger.debug(f"Resolved capture options: {options}")
        return options

    def _coerce_request(self, request) -> CaptureRequest:
        if request is None:
            return CaptureRequest()
        if isinstance(request, CaptureRequest):
            return request
        if not isinstance(request, Mapping):
            raise ValidationError(
                f"Capture options must be an object, got {type(request).__name__}"
            )
        try:
            return CaptureRequest.model_validate(request)
        except pydantic.ValidationError as e:
            raise ValidationError("Malformed capture options", detail=_summarize(e)) from e

    def _resolve_mode(self, request: CaptureRequest) -> CaptureMode:
        if request.is_full_page:
            return CaptureMode.FULL_PAGE
        if request.mode is not None:
            return request.mode
        if request.selector:
            return CaptureMode.ELEMENT
        return CaptureMode(self.config.DEFAULT_MODE)

    def _resolve_format(self, value: Optional[str]) -> ImageFormat:
        if not value:
            return ImageFormat(self.config.DEFAULT_FORMAT)
        resolved = _FORMAT_ALIASES.get(value.strip().lower())
        if resolved is None:
            raise ValidationError(f"Unsupported image format: {value}")
        return resolved

    @staticmethod
    def _resolve_dimension(value: Optional[int], default: int, lower: int, upper: int) -> int:
        # Zero means "not supplied", matching callers that send zero-valued structs
        if not value:
            return default
        return _clamp(value, lower, upper)
