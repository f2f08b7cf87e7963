"""Main FastAPI application exposing the screenshot endpoint."""

import asyncio
import base64
import logging
from contextlib import asynccontextmanager
from typing import Dict, Type

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from . import __version__
from .compositor import ContentCompositor
from .config import settings
from .exceptions import (
    ChatshotError,
    ConnectionError,
    EncodingError,
    InternalError,
    NotFoundError,
    TimeoutError,
    ValidationError,
)
from .logging_config import setup_logging
from .pipeline import CapturePipeline
from .renderers import create_renderer
from .schemas import ScreenshotRequest
from .types import DataUrlDict, ErrorDict, HealthDict
from .utils.filenames import content_disposition

# Setup logging
setup_logging(level=settings.LOG_LEVEL, debug=settings.DEBUG)
logger = logging.getLogger(__name__)

# Status class for each error kind; transport concern only
ERROR_STATUS: Dict[Type[ChatshotError], int] = {
    ValidationError: 400,
    NotFoundError: 422,
    EncodingError: 500,
    InternalError: 500,
    ConnectionError: 503,
    TimeoutError: 504,
}


def status_for(error: ChatshotError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(error, error_type):
            return status
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info(f"Starting {settings.PROJECT_NAME}...")

    # Template is parsed once here and shared read-only by all requests
    compositor = ContentCompositor()
    backend = settings.RENDERER_BACKEND
    app.state.pipeline = CapturePipeline(
        compositor=compositor,
        renderer_factory=lambda: create_renderer(backend),
    )

    logger.info(f"Using {backend} renderer backend")
    logger.info(f"{settings.PROJECT_NAME} started successfully")

    yield

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=__version__,
    lifespan=lifespan,
)


def get_pipeline(request: Request) -> CapturePipeline:
    """Capture pipeline built at startup."""
    return request.app.state.pipeline


@app.exception_handler(ChatshotError)
async def chatshot_error_handler(request: Request, exc: ChatshotError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error(f"Error taking screenshot: {exc.message} ({exc.detail})")
    else:
        logger.warning(f"Rejected screenshot request: {exc.message} ({exc.detail})")

    body: ErrorDict = {
        "type": "error",
        "code": exc.code,
        "message": exc.message,
        "detail": exc.detail or None,
    }
    return JSONResponse(status_code=status, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies use the same error shape as ValidationError."""
    detail = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return await chatshot_error_handler(request, ValidationError(detail=detail))


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    health: HealthDict = {
        "status": "ok",
        "service": settings.PROJECT_NAME,
        "renderer": settings.RENDERER_BACKEND,
    }
    return health


@app.post("/screenshot")
async def take_screenshot(
    body: ScreenshotRequest,
    pipeline: CapturePipeline = Depends(get_pipeline),
):
    """
    Render a chat transcript to an image.

    Returns the raw image (Content-Type from the format actually produced)
    or, with responseFormat=data_url, a JSON body carrying a data URL.
    """
    result = await pipeline.capture(
        body.to_transcript(settings.SELF_SENDERS),
        body.to_capture_request(),
    )
    image_format = result.actual_format.value

    if body.responseFormat == "data_url":
        # Encode in thread pool to avoid blocking event loop on large images
        loop = asyncio.get_running_loop()
        encoded = await loop.run_in_executor(None, base64.b64encode, result.payload)
        payload: DataUrlDict = {
            "image": f"data:{result.content_type};base64,{encoded.decode('ascii')}",
            "format": image_format,
            "width": result.width,
            "height": result.height,
        }
        return payload

    logger.info(f"Screenshot request processed successfully ({result.size} bytes)")
    return Response(
        content=result.payload,
        media_type=result.content_type,
        headers={
            "Content-Disposition": content_disposition(
                body.outputFileName, image_format, settings.DEFAULT_FILENAME
            ),
        },
    )
