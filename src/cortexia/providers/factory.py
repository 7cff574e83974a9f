from typing import Any

from ..credentials import CredentialStore
from ..settings import CompatibleProvider
from .base import ProviderClient
from .ollama import OllamaClient
from .openai import OpenAIClient
from .openrouter import OpenRouterClient


def create_provider_client(
    provider: CompatibleProvider | str,
    credentials: CredentialStore,
    **config: Any
) -> ProviderClient:
    """Create a provider client instance.

    This factory function hides the instantiation logic for different providers.

    Args:
        provider: Provider type ('openAI', 'openRouter', 'ollama'), case-insensitive
        credentials: Store the client loads its secret key from
        **config: Client configuration
            For all providers:
                - configuration: AppConfiguration | None
                - transport: HTTPTransport | None
            For OpenAI:
                - reachability: ReachabilityMonitor | None

    Returns:
        Initialized provider client

    Raises:
        ValueError: If provider type is not supported

    Examples:
        >>> client = create_provider_client("openRouter", InMemoryCredentialStore())
    """
    provider_lower = provider.value.lower() if isinstance(provider, CompatibleProvider) else provider.lower()

    if provider_lower == "openai":
        return OpenAIClient(credentials, **config)

    if provider_lower == "openrouter":
        config.pop("reachability", None)
        return OpenRouterClient(credentials, **config)

    if provider_lower == "ollama":
        config.pop("reachability", None)
        return OllamaClient(credentials, **config)

    raise ValueError(
        f"Unsupported provider: {provider}. "
        f"Supported providers: 'openAI', 'openRouter', 'ollama'"
    )


def create_provider_clients(
    credentials: CredentialStore,
    **config: Any
) -> dict[CompatibleProvider, ProviderClient]:
    """Create one client per supported provider, sharing the given configuration."""
    return {
        provider: create_provider_client(provider, credentials, **dict(config))
        for provider in CompatibleProvider
    }
