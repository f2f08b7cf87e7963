"""Custom exception classes for Chatshot."""


class ChatshotError(Exception):
    """Base exception for Chatshot errors."""

    def __init__(self, message: str, code: str = "internal", detail: str = ""):
        self.message = message
        self.code = code
        self.detail = detail
        super().__init__(message)


class ValidationError(ChatshotError):
    """Malformed transcript or capture options, detected before any session opens."""

    def __init__(self, message: str = "Invalid request", detail: str = ""):
        super().__init__(message, code="invalid_request", detail=detail)


class NotFoundError(ChatshotError):
    """Element never became visible before the deadline."""

    def __init__(self, selector: str, detail: str = ""):
        self.selector = selector
        super().__init__(
            f"Element not visible: {selector}", code="not_found", detail=detail
        )


class TimeoutError(ChatshotError):
    """Capture deadline exceeded."""

    def __init__(self, message: str = "Capture timed out", detail: str = ""):
        super().__init__(message, code="timeout", detail=detail)


class ConnectionError(ChatshotError):
    """Headless renderer unreachable or terminated unexpectedly."""

    def __init__(self, message: str = "Renderer unavailable", detail: str = ""):
        super().__init__(message, code="renderer_unavailable", detail=detail)


class EncodingError(ChatshotError):
    """Capture produced no bytes despite reporting success."""

    def __init__(self, message: str = "Capture produced an empty image", detail: str = ""):
        super().__init__(message, code="empty_capture", detail=detail)


class InternalError(ChatshotError):
    """Any other renderer-originated failure."""

    def __init__(self, message: str = "Internal renderer error", detail: str = ""):
        super().__init__(message, code="internal", detail=detail)
