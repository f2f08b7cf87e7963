"""End-to-end capture: transcript and options in, image bytes out."""

import logging
from typing import Any, Callable, Mapping, Optional, Union

from .compositor import ContentCompositor
from .encoder import ResultEncoder
from .models.options import CaptureRequest, CaptureResult
from .models.transcript import ChatTranscript
from .normalizer import RequestNormalizer
from .renderers.base import HeadlessRenderer
from .session import RenderSession
from .strategies import strategy_for

logger = logging.getLogger(__name__)

RendererFactory = Callable[[], HeadlessRenderer]


class CapturePipeline:
    """
    Normalize -> compose -> render session + strategy -> encode.

    Holds no per-request state: every capture() call builds its own renderer
    from the factory and its own RenderSession, so concurrent calls are
    independent. The session is closed before capture() returns or raises.
    """

    def __init__(
        self,
        compositor: ContentCompositor,
        renderer_factory: RendererFactory,
        normalizer: Optional[RequestNormalizer] = None,
        encoder: Optional[ResultEncoder] = None,
    ):
        self.compositor = compositor
        self.renderer_factory = renderer_factory
        self.normalizer = normalizer or RequestNormalizer()
        self.encoder = encoder or ResultEncoder()

    async def capture(
        self,
        transcript: Union[ChatTranscript, Mapping[str, Any], None],
        request: Union[CaptureRequest, Mapping[str, Any], None] = None,
    ) -> CaptureResult:
        """
        Render a transcript to an image.

        Raises:
            ValidationError: Malformed input (before any renderer is created)
            NotFoundError: Element mode and the selector never became visible
            TimeoutError: The deadline expired
            ConnectionError: The renderer is unreachable or crashed
            EncodingError: The capture returned no bytes
            InternalError: Any other renderer failure
        """
        transcript = self.normalizer.validate_transcript(transcript)
        options = self.normalizer.normalize(request)
        document = self.compositor.compose(transcript, options)
        strategy = strategy_for(options.mode)

        logger.info(
            f"Capturing {len(transcript.messages)} message(s): mode={options.mode.value}, "
            f"{options.width}x{options.height}, timeout={options.timeout_ms}ms"
        )

        async with RenderSession(self.renderer_factory(), options.timeout_ms) as session:
            await session.load(document)
            raw = await strategy.capture(session, options)

        return self.encoder.encode(raw, options)
