"""Application configuration and constants.

Centralizes the static configuration the chat core reads: provider base URLs,
the deep-link scheme used in error guidance, and local file locations.
"""

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Messages fetched per page of chat history
PAGINATION_LIMIT = 15

# Provider API path version, appended to every base URL
API_VERSION = "v1"

# Header value enabling the OpenAI assistants/threads API
OPENAI_BETA_ASSISTANTS = "assistants=v2"

# Default temperature when none has been selected
DEFAULT_TEMPERATURE = 1.0

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com"
DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api"
DEFAULT_URL_SCHEME = "cortexia"


class AppConfiguration(BaseModel):
    """Static application configuration.

    Base URLs for OpenAI and OpenRouter are fixed per installation; the
    Ollama-compatible base URL is a user setting and lives in ChatSettings.
    """

    model_config = ConfigDict(frozen=True)

    openai_base_url: str = Field(default=DEFAULT_OPENAI_BASE_URL)
    openrouter_base_url: str = Field(default=DEFAULT_OPENROUTER_BASE_URL)
    url_scheme: str = Field(default=DEFAULT_URL_SCHEME, description="Scheme for deep links")
    database_path: Path = Field(default=Path("./cortexia.db"))
    settings_path: Path = Field(default=Path("./cortexia_settings.json"))
    http_timeout: float = Field(default=60.0, gt=0)

    @classmethod
    def from_env(cls) -> "AppConfiguration":
        """Build the configuration from environment variables.

        Environment variables:
            OPENAI_BASE_URL: OpenAI API base URL (default: https://api.openai.com)
            OPENROUTER_BASE_URL: OpenRouter API base URL (default: https://openrouter.ai/api)
            CORTEXIA_URL_SCHEME: Deep-link scheme (default: cortexia)
            CORTEXIA_DB_PATH: SQLite database path (default: ./cortexia.db)
            CORTEXIA_SETTINGS_PATH: Settings file path (default: ./cortexia_settings.json)
            CORTEXIA_HTTP_TIMEOUT: HTTP timeout in seconds (default: 60)
        """
        return cls(
            openai_base_url=os.getenv("OPENAI_BASE_URL", DEFAULT_OPENAI_BASE_URL),
            openrouter_base_url=os.getenv("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL),
            url_scheme=os.getenv("CORTEXIA_URL_SCHEME", DEFAULT_URL_SCHEME),
            database_path=Path(os.getenv("CORTEXIA_DB_PATH", "./cortexia.db")),
            settings_path=Path(os.getenv("CORTEXIA_SETTINGS_PATH", "./cortexia_settings.json")),
            http_timeout=float(os.getenv("CORTEXIA_HTTP_TIMEOUT", "60")),
        )


class DeepLink(str, Enum):
    """Deep-link targets referenced from error guidance."""

    BASE_URL = "base_url"
    SECRET_KEY = "secret_key"
    MODEL = "model"

    def url(self, scheme: str = DEFAULT_URL_SCHEME) -> str:
        return f"{scheme}://{self.value}"
