"""Typer CLI interface for Chatshot."""

import asyncio
import json
import os
import signal
import sys
from pathlib import Path
from typing import Optional

import aiofiles
import httpx
import pydantic
import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel

from .compositor import ContentCompositor
from .config import settings
from .exceptions import ChatshotError
from .logging_config import setup_logging
from .models.options import CaptureResult
from .pipeline import CapturePipeline
from .renderers import RENDERER_BACKENDS, create_renderer
from .schemas import ScreenshotOptionsIn, ScreenshotRequest
from .utils.filenames import output_filename

app = typer.Typer(
    name="chatshot",
    help="Chatshot - render chat transcripts into chat-app screenshots",
    add_completion=False,
)
console = Console()


async def check_service_running(host: str, port: int) -> bool:
    """Check if service is already running on port."""
    try:
        async with httpx.AsyncClient() as client:
            resp = await client.get(f"http://{host}:{port}/health", timeout=2.0)
            return resp.status_code == 200
    except httpx.HTTPError:
        return False


def _validate_backend(backend: str) -> None:
    if backend not in RENDERER_BACKENDS:
        console.print(
            f"[red]Error:[/red] Invalid backend: {backend}. "
            f"Use one of: {', '.join(RENDERER_BACKENDS)}"
        )
        raise typer.Exit(1)


@app.command()
def serve(
    port: int = typer.Option(8080, "--port", help="HTTP port"),
    host: str = typer.Option("localhost", "--host", help="Bind address"),
    backend: str = typer.Option("playwright", "--backend", "-b", help="Renderer backend"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
    reload: bool = typer.Option(
        False, "--reload", help="Enable auto-reload (dev mode)"
    ),
):
    """Start the Chatshot HTTP service."""
    _validate_backend(backend)

    # Reloaded workers re-read settings from the environment
    os.environ["RENDERER_BACKEND"] = backend
    os.environ["DEBUG"] = "true" if debug else "false"
    settings.RENDERER_BACKEND = backend
    settings.DEBUG = debug

    # Check if already running
    if asyncio.run(check_service_running(host, port)):
        console.print(f"[red]Error:[/red] Service already running on port {port}")
        raise typer.Exit(1)

    # Setup signal handlers for graceful shutdown
    def signal_handler(sig, frame):
        console.print("\n[yellow]Shutting down gracefully...[/yellow]")
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    console.print(
        Panel.fit(
            f"[bold]Chatshot Service[/bold]\n\n"
            f"🖼  Renderer: {backend}\n"
            f"📡 Endpoint: http://{host}:{port}/screenshot\n"
            f"📐 Defaults: {settings.DEFAULT_WIDTH}x{settings.DEFAULT_HEIGHT} "
            f"{settings.DEFAULT_FORMAT}, {settings.DEFAULT_MODE} mode\n"
            f"🔍 Debug: {'enabled' if debug else 'disabled'}",
            border_style="green",
        )
    )

    uvicorn.run(
        "chatshot.main:app",
        host=host,
        port=port,
        log_level="debug" if debug else "info",
        reload=reload,
        access_log=debug,
    )


async def _render_to_file(
    request: ScreenshotRequest, output: Optional[Path], backend: str
) -> tuple:
    pipeline = CapturePipeline(
        compositor=ContentCompositor(),
        renderer_factory=lambda: create_renderer(backend),
    )
    result: CaptureResult = await pipeline.capture(
        request.to_transcript(settings.SELF_SENDERS),
        request.to_capture_request(),
    )

    path = output or Path(
        output_filename(
            request.outputFileName, result.actual_format.value, settings.DEFAULT_FILENAME
        )
    )
    async with aiofiles.open(path, "wb") as f:
        await f.write(result.payload)

    return result, path


@app.command()
def render(
    request_file: Path = typer.Argument(
        ..., exists=True, dir_okay=False, help="JSON request (same body as POST /screenshot)"
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output image path"),
    width: Optional[int] = typer.Option(None, "--width", help="Viewport width"),
    height: Optional[int] = typer.Option(None, "--height", help="Viewport height"),
    selector: Optional[str] = typer.Option(None, "--selector", help="CSS selector to capture"),
    mode: Optional[str] = typer.Option(None, "--mode", help="viewport, element or full_page"),
    full_page: bool = typer.Option(False, "--full-page", help="Capture the full scrollable page"),
    image_format: Optional[str] = typer.Option(None, "--format", "-f", help="png or jpeg"),
    quality: Optional[int] = typer.Option(None, "--quality", help="JPEG quality (full page only)"),
    timeout: Optional[int] = typer.Option(None, "--timeout", help="Timeout in milliseconds"),
    backend: str = typer.Option("playwright", "--backend", "-b", help="Renderer backend"),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """Render a transcript file to an image without starting the service."""
    _validate_backend(backend)
    setup_logging(level=settings.LOG_LEVEL, debug=debug)

    try:
        request = ScreenshotRequest.model_validate(json.loads(request_file.read_text()))
    except (json.JSONDecodeError, pydantic.ValidationError) as e:
        console.print(f"[red]Error:[/red] Invalid request file {request_file}: {e}")
        raise typer.Exit(1)

    # Command-line flags override options from the file
    overrides = {
        "width": width,
        "height": height,
        "selector": selector,
        "mode": mode,
        "format": image_format,
        "quality": quality,
        "timeout": timeout,
    }
    merged = (request.screenshotOptions or ScreenshotOptionsIn()).model_dump()
    merged.update({key: value for key, value in overrides.items() if value is not None})
    if full_page:
        merged["isFullPage"] = True

    try:
        request.screenshotOptions = ScreenshotOptionsIn.model_validate(merged)
    except pydantic.ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid options: {e}")
        raise typer.Exit(1)

    try:
        result, path = asyncio.run(_render_to_file(request, output, backend))
    except ChatshotError as e:
        console.print(f"[red]Error ({e.code}):[/red] {e.message}")
        if e.detail:
            console.print(f"  {e.detail}")
        raise typer.Exit(1)

    console.print(
        f"[green]✓[/green] Wrote {path} "
        f"({result.actual_format.value}, {result.width}x{result.height}, {result.size} bytes)"
    )


if __name__ == "__main__":
    app()
