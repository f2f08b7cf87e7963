"""Download file names for captured images."""

import unicodedata
from typing import Optional
from urllib.parse import quote

_UNSAFE_CHARS = ('"', "/", "\\")


def sanitize_filename(name: str) -> str:
    """Drop control characters and replace ones that break a header or a path."""
    name = "".join(char for char in name if unicodedata.category(char) != "Cc")
    for char in _UNSAFE_CHARS:
        name = name.replace(char, "_")
    return name.strip()


def output_filename(requested: Optional[str], extension: str, default_stem: str) -> str:
    """
    File name for a capture, always ending in ``.<extension>``.

    Example:
        output_filename("my chat", "png", "shot") -> "my chat.png"
        output_filename(None, "jpeg", "shot") -> "shot.jpeg"
    """
    name = sanitize_filename(requested or "")
    if not name:
        return f"{default_stem}.{extension}"

    if not name.lower().endswith(f".{extension}"):
        name += f".{extension}"
    return name


def content_disposition(requested: Optional[str], extension: str, default_stem: str) -> str:
    """
    Attachment when the caller named the file, inline otherwise.

    HTTP headers are latin-1, so a non-ASCII name goes into an RFC 5987
    ``filename*`` parameter with the default name as the plain fallback.
    """
    disposition = "attachment" if requested else "inline"
    filename = output_filename(requested, extension, default_stem)
    if filename.isascii():
        return f'{disposition}; filename="{filename}"'

    fallback = f"{default_stem}.{extension}"
    return f"{disposition}; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename)}"
