"""Application configuration with environment variable support."""

from typing import List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Priority: ENV > .env.local > .env > defaults
    .env.local is gitignored for local overrides
    """

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Service configuration
    PROJECT_NAME: str = "Chatshot"
    DEBUG: bool = False
    HOST: str = "localhost"
    PORT: int = 8080
    LOG_LEVEL: str = "INFO"

    # Renderer backend
    RENDERER_BACKEND: Literal["playwright"] = "playwright"
    BROWSER_ARGS: List[str] = [
        "--disable-gpu",
        "--no-sandbox",
        "--disable-dev-shm-usage",
    ]
    DEVICE_SCALE_FACTOR: float = 1.0

    # Capture defaults
    DEFAULT_WIDTH: int = 1280
    DEFAULT_HEIGHT: int = 720
    MIN_WIDTH: int = 300
    MAX_WIDTH: int = 3840
    MIN_HEIGHT: int = 100
    MAX_HEIGHT: int = 4320
    DEFAULT_FORMAT: Literal["png", "jpeg"] = "png"
    DEFAULT_QUALITY: int = 90
    DEFAULT_MODE: Literal["viewport", "element", "full_page"] = "element"
    DEFAULT_SELECTOR: str = ".chat-container"

    # Timeouts (milliseconds)
    DEFAULT_TIMEOUT_MS: int = 30000
    MAX_TIMEOUT_MS: int = 120000
    CLOSE_TIMEOUT_MS: int = 5000  # Grace period for releasing the renderer

    # Composition
    TEMPLATE_NAME: str = "whatsapp_chat.html.jinja"

    # Transport
    SELF_SENDERS: List[str] = ["bot", "user"]  # Senders rendered as outgoing bubbles
    DEFAULT_FILENAME: str = "whatsapp-chat-screenshot"


# Global settings instance
settings = Settings()
