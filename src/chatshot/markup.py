"""Chat markup to HTML conversion.

Message bodies use the chat-app formatting convention:

    *bold*   -> <strong>bold</strong>
    _italic_ -> <em>italic</em>
    ~strike~ -> <del>strike</del>
    ```mono``` -> <code>mono</code>

A delimiter opens a span only when the character before it is not a word
character and the character after it is not whitespace; it closes only when
the character before it is not whitespace and the character after it is not a
word character. Spans never cross a line break. This keeps identifiers such as
``file_name_here`` literal.

Bodies are HTML-escaped before any formatting is applied.
"""

from typing import Optional

FENCE = "```"

DELIMITER_TAGS = {
    "*": "strong",
    "_": "em",
    "~": "del",
}

_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#39;"),
)


def escape_html(text: str) -> str:
    """Escape the five structural HTML characters (ampersand first)."""
    for char, entity in _ESCAPES:
        text = text.replace(char, entity)
    return text


def _is_word(char: str) -> bool:
    return char.isalnum() or char == "_"


def _can_open(text: str, pos: int) -> bool:
    delimiter = text[pos]
    if pos > 0 and _is_word(text[pos - 1]):
        return False
    if pos + 1 >= len(text):
        return False
    following = text[pos + 1]
    return not following.isspace() and following != delimiter


def _find_close(text: str, start: int) -> Optional[int]:
    """Index of the delimiter closing the span opened at ``start``, if any."""
    delimiter = text[start]
    end = text.find(delimiter, start + 1)
    if end == -1:
        return None
    # Inner text may not contain the delimiter, so the first match decides
    if "\n" in text[start + 1:end]:
        return None
    if text[end - 1].isspace():
        return None
    if end + 1 < len(text) and _is_word(text[end + 1]):
        return None
    return end


def _find_fence_close(text: str, start: int) -> Optional[int]:
    end = text.find(FENCE, start + len(FENCE))
    if end == -1:
        return None
    inner = text[start + len(FENCE):end]
    if not inner or "`" in inner or "\n" in inner:
        return None
    return end


def format_spans(text: str) -> str:
    """Apply span formatting to already-escaped text."""
    out = []
    pos = 0
    length = len(text)

    while pos < length:
        if text.startswith(FENCE, pos):
            end = _find_fence_close(text, pos)
            if end is not None:
                # Monospace content is literal; no nested formatting
                out.append(f"<code>{text[pos + len(FENCE):end]}</code>")
                pos = end + len(FENCE)
                continue

        char = text[pos]
        tag = DELIMITER_TAGS.get(char)
        if tag and _can_open(text, pos):
            end = _find_close(text, pos)
            if end is not None:
                out.append(f"<{tag}>{format_spans(text[pos + 1:end])}</{tag}>")
                pos = end + 1
                continue

        out.append(char)
        pos += 1

    return "".join(out)


def format_message_body(text: Optional[str]) -> str:
    """
    Convert a raw chat message body into safe HTML.

    Args:
        text: Raw message text; None or empty yields ""

    Returns:
        str: Escaped HTML with formatting spans and <br> line breaks
    """
    if not text:
        return ""

    text = text.replace("\r\n", "\n")
    html = format_spans(escape_html(text))
    return html.replace("\n", "<br>")
