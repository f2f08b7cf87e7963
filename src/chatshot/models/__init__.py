"""Data models for Chatshot."""

from .document import RenderedDocument
from .options import CaptureMode, CaptureOptions, CaptureRequest, CaptureResult, ImageFormat
from .transcript import ChatTranscript, Message, MessageKind

__all__ = [
    "RenderedDocument",
    "CaptureMode",
    "CaptureOptions",
    "CaptureRequest",
    "CaptureResult",
    "ImageFormat",
    "ChatTranscript",
    "Message",
    "MessageKind",
]
