"""Wire format of the /screenshot endpoint."""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class RequestMessage(BaseModel):
    """A chat message as sent by clients."""

    id: Optional[str] = Field(None, description="Message identifier")
    timestamp: Optional[str] = Field("", description="Message time (ISO-8601, HH:MM, ...)")
    sender: Optional[str] = Field("", description="Sender name; self senders become outgoing bubbles")
    content: Optional[str] = Field("", description="Message text with chat markup")
    type: Optional[str] = Field("message", description="message, system, image, video, audio, sticker, contact, document")
    mediaUrl: Optional[str] = Field(None, description="Media URL for image/sticker messages")
    fileName: Optional[str] = Field(None, description="Attachment file name")
    fileSize: Optional[str] = Field(None, description="Attachment size label")
    recipient_name: Optional[str] = Field(None, description="Chat partner name")
    recipient_phone: Optional[str] = Field(None, description="Chat partner phone number")


class ScreenshotOptionsIn(BaseModel):
    """Optional overrides for capture defaults."""

    width: Optional[int] = Field(None, description="Viewport width")
    height: Optional[int] = Field(None, description="Viewport height")
    selector: Optional[str] = Field(None, description="CSS selector to capture")
    mode: Optional[Literal["viewport", "element", "full_page"]] = Field(None, description="Capture mode")
    isFullPage: bool = Field(False, description="Capture the full scrollable page (wins over selector)")
    format: Optional[str] = Field(None, description="png or jpeg")
    quality: Optional[int] = Field(None, description="JPEG quality 1-100 (full page only)")
    timeout: Optional[int] = Field(None, description="Overall timeout in milliseconds")

    def to_capture_request(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "selector": self.selector,
            "mode": self.mode,
            "is_full_page": self.isFullPage,
            "format": self.format,
            "quality": self.quality,
            "timeout_ms": self.timeout,
        }


class ScreenshotRequest(BaseModel):
    """Request body for POST /screenshot."""

    model_config = ConfigDict(populate_by_name=True)

    messages: List[RequestMessage] = Field(default_factory=list, description="Messages in display order")
    chatName: Optional[str] = Field("", description="Header text")
    lastSeen: Optional[str] = Field("", description="Status line under the header")
    outputFileName: Optional[str] = Field(None, description="Suggested download file name")
    screenshotOptions: Optional[ScreenshotOptionsIn] = Field(None, description="Capture overrides")
    responseFormat: Literal["binary", "data_url"] = Field(
        "binary", description="Raw image bytes or a JSON data URL"
    )

    def to_transcript(self, self_senders: List[str]) -> Dict[str, Any]:
        """
        Map the wire request onto the transcript shape.

        Senders in ``self_senders`` (case-insensitive) are the viewer's own
        messages and lose their author so they render as outgoing bubbles.
        Null text fields become empty strings, as in the core models.
        """
        own = {sender.lower() for sender in self_senders}
        first = self.messages[0] if self.messages else None
        senders = [message.sender or "" for message in self.messages]

        header = self.chatName or (first.recipient_name if first else None) or "Customer"
        status = self.lastSeen or (first.recipient_phone if first else None) or ""

        return {
            "header_text": header,
            "status_line": status,
            "messages": [
                {
                    "id": message.id or "",
                    "author": "" if sender.lower() in own else sender,
                    "body": message.content or "",
                    "sent_at": message.timestamp or "",
                    "kind": message.type or "message",
                    "media_url": message.mediaUrl,
                    "file_name": message.fileName,
                    "file_size": message.fileSize,
                }
                for message, sender in zip(self.messages, senders)
            ],
        }

    def to_capture_request(self) -> Dict[str, Any]:
        if self.screenshotOptions is None:
            return {}
        return self.screenshotOptions.to_capture_request()
