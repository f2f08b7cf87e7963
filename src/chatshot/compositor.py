"""Compose a transcript into a self-contained chat document."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, NamedTuple, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template
from markupsafe import Markup

from .config import settings
from .markup import format_message_body
from .models.document import RenderedDocument
from .models.options import CaptureOptions
from .models.transcript import ChatTranscript, Message, MessageKind

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"

_TIMESTAMP_LAYOUTS = (
    "%d/%m/%Y, %H:%M",           # D/M/YYYY, HH:MM
    "%m/%d/%Y, %H:%M",           # M/D/YYYY, HH:MM
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",      # 1-6 fractional digits
)

_MEDIA_ICONS = {
    MessageKind.AUDIO: "icon-audio",
    MessageKind.DOCUMENT: "icon-document",
    MessageKind.VIDEO: "icon-video",
}


def format_timestamp(value: str) -> str:
    """Reduce a timestamp to HH:MM; unparseable values are shown unchanged."""
    if ":" not in value:
        return value
    if " " not in value and "T" not in value:
        return value  # Already HH:MM

    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%H:%M")
    except ValueError:
        pass

    for layout in _TIMESTAMP_LAYOUTS:
        try:
            return datetime.strptime(value, layout).strftime("%H:%M")
        except ValueError:
            continue

    logger.debug(f"Could not parse timestamp: {value}, returning as is")
    return value


def message_class(message: Message) -> str:
    """CSS classes for a bubble: direction plus kind."""
    if message.kind == MessageKind.SYSTEM:
        return "message system-message"

    classes = "message sent" if message.is_outgoing else "message received"
    if message.kind != MessageKind.MESSAGE:
        classes += f" {message.kind.value}-message"
    return classes


def media_icon_class(message: Message) -> str:
    return _MEDIA_ICONS.get(message.kind, "")


class Bubble(NamedTuple):
    """Template-ready view of one message."""
    id: str
    css_class: str
    author: str
    body: Markup
    time: str
    outgoing: bool
    kind: str
    media_url: Optional[str]
    file_name: Optional[str]
    file_size: Optional[str]
    icon_class: str


class ContentCompositor:
    """
    Renders transcripts through a Jinja2 template loaded once at construction.

    The compiled template is shared read-only by every compose() call, so a
    single compositor can serve concurrent requests. compose() reads no clock
    and no global state: identical inputs give byte-identical documents.
    """

    def __init__(
        self,
        template_name: Optional[str] = None,
        templates_dir: Optional[Path] = None,
    ):
        self.template_name = template_name or settings.TEMPLATE_NAME
        self.templates_dir = Path(templates_dir) if templates_dir else TEMPLATES_DIR

        env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._template: Template = env.get_template(self.template_name)
        logger.info(f"Loaded chat template: {self.templates_dir / self.template_name}")

    def compose(self, transcript: ChatTranscript, options: CaptureOptions) -> RenderedDocument:
        """Render the transcript at the resolved width."""
        header = transcript.header_text
        markup = self._template.render(
            width=options.width,
            header_text=header,
            status_line=transcript.status_line,
            avatar_initial=header[:1].upper(),
            bubbles=[self._bubble(message) for message in transcript.messages],
        )
        logger.debug(
            f"Composed document: {len(transcript.messages)} message(s), {len(markup)} chars"
        )
        return RenderedDocument(markup=markup, width=options.width)

    @staticmethod
    def _bubble(message: Message) -> Bubble:
        show_author = (
            not message.is_outgoing and message.kind == MessageKind.MESSAGE
        )
        return Bubble(
            id=message.id,
            css_class=message_class(message),
            author=message.author if show_author else "",
            body=Markup(format_message_body(message.body)),
            time=format_timestamp(message.sent_at),
            outgoing=message.is_outgoing,
            kind=message.kind.value,
            media_url=message.media_url,
            file_name=message.file_name,
            file_size=message.file_size,
            icon_class=media_icon_class(message),
        )
