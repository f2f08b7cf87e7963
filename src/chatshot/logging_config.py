"""Logging configuration for Chatshot."""

import logging
import sys

# Third-party loggers that only matter when something is already wrong
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "multipart")


def resolve_level(level: str = "INFO", debug: bool = False) -> int:
    """Translate a level name (or the debug flag) into a logging constant."""
    if debug:
        return logging.DEBUG
    return getattr(logging, level.upper(), logging.INFO)


def setup_logging(level: str = "INFO", debug: bool = False) -> None:
    """
    Configure logging for the service and the CLI.

    Capture sessions log their state transitions at DEBUG, so ``debug=True``
    also switches to a format that carries the logger name and line number.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        debug: Enable debug mode with verbose formatting
    """
    log_level = resolve_level(level, debug)

    if debug:
        log_format = (
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
        )
    else:
        log_format = "%(asctime)s | %(levelname)-8s | %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Keep uvicorn in step with our level, but its access log only in debug
    logging.getLogger("uvicorn").setLevel(log_level)
    logging.getLogger("uvicorn.error").setLevel(log_level)
    logging.getLogger("uvicorn.access").setLevel(
        logging.DEBUG if debug else logging.WARNING
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
