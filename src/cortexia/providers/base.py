import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import openai
from openai import AsyncOpenAI
from pydantic import ValidationError

from ..config import API_VERSION, AppConfiguration
from ..credentials import CredentialNotFoundError, CredentialStore, SecretKey
from ..errors import (
    HTTPStatusError,
    InvalidResponseError,
    InvalidSecretKeyError,
    MissingSecretKeyError,
    NetworkError,
)
from ..settings import ChatSettings, CompatibleProvider
from .models import ChatBody, MessageBody, MessageResponse, ModelResponse
from .transport import HTTPTransport

logger = logging.getLogger(__name__)


class ProviderClient(ABC):
    """Abstract client for an OpenAI-compatible provider.

    This module hides the design decision of which backend is in use.
    Implementations decide:
    - Base URL resolution
    - Extra authentication headers
    - Which secret key authenticates requests

    Requests build a fresh SDK client around the shared httpx client so the
    secret key is read again for every call.

    Supports async context manager protocol:
        async with client:
            response = await client.chat_completion(body, settings)
    """

    provider: CompatibleProvider

    def __init__(
        self,
        credentials: CredentialStore,
        configuration: AppConfiguration | None = None,
        transport: HTTPTransport | None = None
    ):
        """Initialize the provider client.

        Args:
            credentials: Store the secret key is loaded from on each request
            configuration: Static application configuration
            transport: HTTP transport; a private one is created when omitted
        """
        self._credentials = credentials
        self._configuration = configuration or AppConfiguration()
        self._owns_transport = transport is None
        self._transport = transport or HTTPTransport(timeout=self._configuration.http_timeout)

    @property
    def secret_key(self) -> SecretKey:
        return SecretKey.for_provider(self.provider)

    @abstractmethod
    def base_url(self, settings: ChatSettings) -> str:
        """Resolve the provider base URL.

        Raises:
            MissingBaseURLError: If the provider has no base URL configured
        """

    def extra_headers(self) -> dict[str, str]:
        """Provider-specific headers sent alongside the bearer token."""
        return {}

    def auth_headers(self, secret_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {secret_key}", **self.extra_headers()}

    def endpoint(self, settings: ChatSettings, path: str) -> str:
        return f"{self.api_root(settings)}/{path.lstrip('/')}"

    def api_root(self, settings: ChatSettings) -> str:
        return f"{self.base_url(settings).rstrip('/')}/{API_VERSION}"

    async def load_secret_key(self) -> str:
        """Load the provider secret key.

        Raises:
            MissingSecretKeyError: If the key is not stored or empty
        """
        try:
            secret = await self._credentials.load(self.secret_key)
        except CredentialNotFoundError as e:
            raise MissingSecretKeyError(
                f"No secret key stored for {self.provider.display_name}"
            ) from e

        if not secret:
            raise MissingSecretKeyError(f"Empty secret key for {self.provider.display_name}")
        return secret

    def build_chat_request(
        self,
        model: str,
        history: list[MessageBody],
        temperature: float
    ) -> ChatBody:
        return ChatBody(model=model, messages=history, temperature=temperature)

    def parse_chat_response(self, completion: Any) -> MessageResponse:
        """Convert an SDK chat completion into a MessageResponse.

        Raises:
            InvalidResponseError: If the completion does not match the expected shape
        """
        payload = completion.model_dump() if hasattr(completion, "model_dump") else completion
        try:
            return MessageResponse.model_validate(payload)
        except ValidationError as e:
            raise InvalidResponseError(str(e)) from e

    async def chat_completion(self, body: ChatBody, settings: ChatSettings) -> MessageResponse:
        """Send a one-shot chat completion request.

        Args:
            body: Request body with model, history and temperature
            settings: Settings snapshot used to resolve the base URL

        Returns:
            Parsed MessageResponse
        """
        client = await self._sdk_client(settings)
        logger.info(
            "Chat completion with %s using model %s (%d messages)",
            self.provider.display_name, body.model, len(body.messages)
        )
        with _map_sdk_errors():
            completion = await client.chat.completions.create(**body.model_dump(mode="json"))
        return self.parse_chat_response(completion)

    async def list_models(self, settings: ChatSettings) -> ModelResponse:
        """Fetch available models from `GET /v1/models`."""
        client = await self._sdk_client(settings)
        with _map_sdk_errors():
            page = await client.models.list()

        try:
            return ModelResponse.model_validate(
                {"data": [model.model_dump() for model in page.data]}
            )
        except ValidationError as e:
            raise InvalidResponseError(str(e)) from e

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.close()

    async def __aenter__(self) -> "ProviderClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _sdk_client(self, settings: ChatSettings) -> AsyncOpenAI:
        base_url = self.api_root(settings)
        secret = await self.load_secret_key()
        return AsyncOpenAI(
            api_key=secret,
            base_url=base_url,
            default_headers=self.extra_headers(),
            max_retries=0,
            http_client=self._transport.client,
        )


@contextmanager
def _map_sdk_errors() -> Iterator[None]:
    """Translate OpenAI SDK exceptions into the chat core's taxonomy."""
    try:
        yield
    except openai.AuthenticationError as e:
        raise InvalidSecretKeyError(str(e)) from e
    except openai.APIStatusError as e:
        raise HTTPStatusError(e.status_code, str(e)) from e
    except openai.APIConnectionError as e:
        raise NetworkError(str(e)) from e
    except openai.APIResponseValidationError as e:
        raise InvalidResponseError(str(e)) from e
