from ..settings import ChatSettings, CompatibleProvider
from .base import ProviderClient


class OpenRouterClient(ProviderClient):
    """OpenRouter provider client.

    Speaks the OpenAI chat completions protocol at a fixed base URL from
    application configuration, authenticated with a bearer token only.
    """

    provider = CompatibleProvider.OPENROUTER

    def base_url(self, settings: ChatSettings | None = None) -> str:
        return self._configuration.openrouter_base_url
