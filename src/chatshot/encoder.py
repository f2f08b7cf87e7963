"""Package raw capture bytes into a CaptureResult."""

import logging

from .exceptions import EncodingError
from .models.options import CaptureMode, CaptureOptions, CaptureResult
from .strategies import RawCapture

logger = logging.getLogger(__name__)


class ResultEncoder:
    """Wraps capture bytes with the format and dimensions actually achieved."""

    def encode(self, raw: RawCapture, options: CaptureOptions) -> CaptureResult:
        """
        Build the result for a finished capture.

        Width is always the resolved width; height and format come from the
        strategy (viewport height, element box height, or measured page height).

        Raises:
            EncodingError: If the capture returned no bytes
        """
        if not raw.payload:
            detail = ""
            if options.mode == CaptureMode.ELEMENT:
                detail = (
                    f"ensure selector '{options.selector}' exists, is visible, "
                    "and has non-zero dimensions"
                )
            raise EncodingError(detail=detail)

        result = CaptureResult(
            payload=bytes(raw.payload),
            actual_format=raw.actual_format,
            width=options.width,
            height=raw.height,
        )
        logger.info(
            f"Screenshot captured successfully, size: {result.size} bytes, "
            f"actual format: {result.actual_format.value}"
        )
        return result
