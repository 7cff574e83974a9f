"""Secret key storage.

The chat core never caches secret keys: every provider request loads the key
again so keys rotated out of band are picked up on the next request.
"""

import os
from abc import ABC, abstractmethod
from enum import Enum

from .errors import CortexiaError
from .settings import CompatibleProvider


class SecretKey(str, Enum):
    """Storage keys for provider secrets."""

    OPENAI = "openAISecretKey"
    OPENROUTER = "openRouterSecretKey"
    OLLAMA = "ollamaSecretKey"

    @classmethod
    def for_provider(cls, provider: CompatibleProvider) -> "SecretKey":
        return {
            CompatibleProvider.OPENAI: cls.OPENAI,
            CompatibleProvider.OPENROUTER: cls.OPENROUTER,
            CompatibleProvider.OLLAMA: cls.OLLAMA,
        }[provider]


class CredentialNotFoundError(CortexiaError):
    """No value is stored under the requested key."""


class CredentialStore(ABC):
    """Abstract secret storage.

    Hides where secrets live (OS keychain, environment, memory).
    """

    @abstractmethod
    async def load(self, key: SecretKey) -> str:
        """Load a secret.

        Raises:
            CredentialNotFoundError: If nothing is stored under the key
        """

    @abstractmethod
    async def save(self, value: str, key: SecretKey) -> None:
        """Store a secret under the given key."""


class InMemoryCredentialStore(CredentialStore):
    """Dict-backed secrets, lost when the process exits."""

    def __init__(self, secrets: dict[SecretKey, str] | None = None):
        self._secrets: dict[SecretKey, str] = dict(secrets or {})

    async def load(self, key: SecretKey) -> str:
        if key not in self._secrets:
            raise CredentialNotFoundError(key.value)
        return self._secrets[key]

    async def save(self, value: str, key: SecretKey) -> None:
        self._secrets[key] = value


class EnvironmentCredentialStore(CredentialStore):
    """Reads secrets from environment variables.

    Saved values override the environment for the lifetime of the store.

    Environment variables:
        OPENAI_API_KEY: OpenAI secret key
        OPENROUTER_API_KEY: OpenRouter secret key
        OLLAMA_API_KEY: Ollama-compatible secret key
    """

    ENV_VARS = {
        SecretKey.OPENAI: "OPENAI_API_KEY",
        SecretKey.OPENROUTER: "OPENROUTER_API_KEY",
        SecretKey.OLLAMA: "OLLAMA_API_KEY",
    }

    def __init__(self):
        self._overrides: dict[SecretKey, str] = {}

    async def load(self, key: SecretKey) -> str:
        if key in self._overrides:
            return self._overrides[key]
        value = os.getenv(self.ENV_VARS[key])
        if value is None:
            raise CredentialNotFoundError(key.value)
        return value

    async def save(self, value: str, key: SecretKey) -> None:
        self._overrides[key] = value
