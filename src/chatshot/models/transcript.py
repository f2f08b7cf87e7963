"""Models for the chat transcript being rendered."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class MessageKind(str, Enum):
    """What a message bubble carries."""
    MESSAGE = "message"
    SYSTEM = "system"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    STICKER = "sticker"
    CONTACT = "contact"
    DOCUMENT = "document"


MEDIA_KINDS = frozenset(
    {MessageKind.IMAGE, MessageKind.VIDEO, MessageKind.AUDIO, MessageKind.STICKER, MessageKind.DOCUMENT}
)


class Message(BaseModel):
    """A single chat message. An empty author marks an outgoing bubble."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field("", description="Message identifier (msg{index} when empty)")
    author: str = Field("", description="Sender name; empty for outgoing/self")
    body: str = Field("", description="Raw message text with chat markup")
    sent_at: str = Field("", alias="sentAt", description="Display timestamp")
    kind: MessageKind = Field(MessageKind.MESSAGE, description="Message kind")
    media_url: Optional[str] = Field(None, alias="mediaUrl", description="Media URL for image/sticker")
    file_name: Optional[str] = Field(None, alias="fileName", description="Attachment file name")
    file_size: Optional[str] = Field(None, alias="fileSize", description="Attachment size label")

    @field_validator("id", "author", "body", "sent_at", mode="before")
    @classmethod
    def _missing_as_empty(cls, value):
        # Missing text degrades to an empty bubble rather than failing
        return "" if value is None else value

    @property
    def is_outgoing(self) -> bool:
        return not self.author

    @property
    def is_media(self) -> bool:
        return self.kind in MEDIA_KINDS


class ChatTranscript(BaseModel):
    """Ordered messages plus the header shown above them."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    header_text: str = Field("", alias="headerText", description="Chat header (contact name)")
    status_line: str = Field("", alias="statusLine", description="Status under the header, e.g. last seen")
    messages: List[Message] = Field(default_factory=list, description="Messages in display order")

    @field_validator("header_text", "status_line", mode="before")
    @classmethod
    def _missing_header_as_empty(cls, value):
        return "" if value is None else value

    @field_validator("messages")
    @classmethod
    def _assign_missing_ids(cls, messages: List[Message]) -> List[Message]:
        return [
            message if message.id else message.model_copy(update={"id": f"msg{index}"})
            for index, message in enumerate(messages)
        ]
