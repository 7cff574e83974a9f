from .base import ProviderClient
from .factory import create_provider_client, create_provider_clients
from .models import (
    ChatBody,
    GenericResponse,
    MessageBody,
    MessageResponse,
    MessageStreamResponse,
    ModelInfo,
    ModelResponse,
    ProviderIdentifiers,
    Usage,
)
from .ollama import OllamaClient
from .openai import OpenAIClient
from .openrouter import OpenRouterClient
from .transport import HTTPMethod, HTTPTransport

__all__ = [
    "ProviderClient",
    "create_provider_client",
    "create_provider_clients",
    "ChatBody",
    "GenericResponse",
    "MessageBody",
    "MessageResponse",
    "MessageStreamResponse",
    "ModelInfo",
    "ModelResponse",
    "ProviderIdentifiers",
    "Usage",
    "OllamaClient",
    "OpenAIClient",
    "OpenRouterClient",
    "HTTPMethod",
    "HTTPTransport",
]
