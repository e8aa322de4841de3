"""Configuration for the workstation agent."""

import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Configuration class for the workstation agent."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        # Backend the chat client talks to
        self.api_url = os.getenv("WORKSTATION_API_URL", "http://127.0.0.1:10000")
        self.server_host = os.getenv("WORKSTATION_SERVER_HOST", "127.0.0.1")
        self.server_port = int(os.getenv("WORKSTATION_SERVER_PORT", os.getenv("PORT", "10000")))

        # Simulated desktop size in pixels
        self.desktop_width = int(os.getenv("WORKSTATION_DESKTOP_WIDTH", "1280"))
        self.desktop_height = int(os.getenv("WORKSTATION_DESKTOP_HEIGHT", "720"))

        # Pacing delay before every action (seconds)
        self.action_delay = float(os.getenv("WORKSTATION_ACTION_DELAY", "0.2"))
        # Multiplier applied to every delay and animation; 0 makes them instant
        self.time_scale = float(os.getenv("WORKSTATION_TIME_SCALE", "1.0"))
        self.frame_rate = int(os.getenv("WORKSTATION_FRAME_RATE", "60"))

        # Password unlocking testing mode (disables the chat input path).
        # Testing mode cannot be enabled when unset.
        self.testing_password: Optional[str] = os.getenv("WORKSTATION_TESTING_PASSWORD") or None

        # Display quota for the storage indicator; the backend does not enforce it
        self.max_storage_bytes = int(os.getenv("WORKSTATION_MAX_STORAGE_BYTES", str(10 * 1024 * 1024)))
        # Large session payloads carry data URLs
        self.max_request_bytes = int(os.getenv("WORKSTATION_MAX_REQUEST_BYTES", str(10 * 1024 * 1024)))

        # Generative AI service (OpenAI-compatible endpoint)
        self.ai_api_key: Optional[str] = os.getenv("WORKSTATION_AI_API_KEY") or os.getenv("OPENAI_API_KEY") or None
        self.ai_base_url: Optional[str] = os.getenv("WORKSTATION_AI_BASE_URL") or None
        self.ai_chat_model = os.getenv("WORKSTATION_AI_CHAT_MODEL", "gpt-4o-mini")
        self.ai_image_model = os.getenv("WORKSTATION_AI_IMAGE_MODEL", "dall-e-3")
        self.ai_search_model = os.getenv("WORKSTATION_AI_SEARCH_MODEL", "gpt-4o-mini")

        self.log_level = os.getenv("WORKSTATION_LOG_LEVEL", "INFO").upper()

        # Validate configuration
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if self.desktop_width <= 0 or self.desktop_height <= 0:
            raise ValueError(
                f"Desktop size must be positive, got {self.desktop_width}x{self.desktop_height}"
            )

        if self.action_delay < 0:
            raise ValueError(f"Action delay must not be negative, got {self.action_delay}")

        if self.time_scale < 0:
            raise ValueError(f"Time scale must not be negative, got {self.time_scale}")

        if self.frame_rate <= 0:
            raise ValueError(f"Frame rate must be positive, got {self.frame_rate}")

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_log_levels:
            raise ValueError(
                f"Invalid log level '{self.log_level}'. "
                f"Must be one of: {', '.join(valid_log_levels)}"
            )


# Create a global config instance
_config = Config()

# Expose configuration values as module-level variables
API_URL = _config.api_url
SERVER_HOST = _config.server_host
SERVER_PORT = _config.server_port
DESKTOP_WIDTH = _config.desktop_width
DESKTOP_HEIGHT = _config.desktop_height
ACTION_DELAY = _config.action_delay
TIME_SCALE = _config.time_scale
FRAME_RATE = _config.frame_rate
TESTING_PASSWORD = _config.testing_password
MAX_STORAGE_BYTES = _config.max_storage_bytes
MAX_REQUEST_BYTES = _config.max_request_bytes
AI_API_KEY = _config.ai_api_key
AI_BASE_URL = _config.ai_base_url
AI_CHAT_MODEL = _config.ai_chat_model
AI_IMAGE_MODEL = _config.ai_image_model
AI_SEARCH_MODEL = _config.ai_search_model
LOG_LEVEL = _config.log_level

__all__ = [
    "Config",
    "API_URL",
    "SERVER_HOST",
    "SERVER_PORT",
    "DESKTOP_WIDTH",
    "DESKTOP_HEIGHT",
    "ACTION_DELAY",
    "TIME_SCALE",
    "FRAME_RATE",
    "TESTING_PASSWORD",
    "MAX_STORAGE_BYTES",
    "MAX_REQUEST_BYTES",
    "AI_API_KEY",
    "AI_BASE_URL",
    "AI_CHAT_MODEL",
    "AI_IMAGE_MODEL",
    "AI_SEARCH_MODEL",
    "LOG_LEVEL",
]
