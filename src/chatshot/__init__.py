"""Chatshot - render chat transcripts into chat-app style screenshots."""

__version__ = "0.1.0"
