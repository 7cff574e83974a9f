"""Error taxonomy for the chat core.

Every error raised by the provider, orchestration and storage layers derives
from CortexiaError so the conversation boundary can turn it into a system
message for the user.
"""


class CortexiaError(Exception):
    """Base class for all chat core errors."""


class ConfigurationError(CortexiaError):
    """The application is missing configuration it needs to reach a provider."""


class MissingBaseURLError(ConfigurationError):
    """No base URL is configured for an Ollama-compatible provider."""


class CredentialError(CortexiaError):
    """A provider secret key is missing or rejected."""


class MissingSecretKeyError(CredentialError):
    """The secret key for the selected provider is missing or empty."""


class InvalidSecretKeyError(CredentialError):
    """The provider rejected the secret key (HTTP 401)."""


class MissingModelError(CortexiaError):
    """No model has been selected."""


class MissingAIMessageError(CortexiaError):
    """The provider response carried no completion choice."""


class NoConnectionError(CortexiaError):
    """No network connection was detected before issuing a request."""


class TransportError(CortexiaError):
    """Base class for failures while talking to a provider."""


class HTTPStatusError(TransportError):
    """The provider answered with a non-2xx status code."""

    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        super().__init__(message or f"HTTP status {status_code}")


class InvalidResponseError(TransportError):
    """The provider response could not be decoded."""


class NetworkError(TransportError):
    """The underlying transport failed before a response arrived."""
