from ..errors import MissingBaseURLError
from ..settings import ChatSettings, CompatibleProvider
from .base import ProviderClient


class OllamaClient(ProviderClient):
    """Ollama-compatible provider client.

    The base URL is a user setting; requests fail with MissingBaseURLError
    until one is configured.
    """

    provider = CompatibleProvider.OLLAMA

    def base_url(self, settings: ChatSettings | None = None) -> str:
        url = settings.ollama_base_url if settings is not None else None
        if not url or not url.strip():
            raise MissingBaseURLError("Ollama API base URL not configured")
        return url.strip()
