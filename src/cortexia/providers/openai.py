import logging
from collections.abc import AsyncIterator

from pydantic import BaseModel, ValidationError

from ..config import OPENAI_BETA_ASSISTANTS, AppConfiguration
from ..credentials import CredentialStore
from ..errors import HTTPStatusError, InvalidResponseError, InvalidSecretKeyError, NoConnectionError
from ..reachability import ReachabilityMonitor, StaticReachability
from ..roles import Role
from ..settings import ChatSettings, CompatibleProvider
from .base import ProviderClient
from .models import (
    AssistantBody,
    GenericResponse,
    MessageBody,
    MessageStreamResponse,
    RunBody,
)
from .transport import HTTPMethod, HTTPTransport

logger = logging.getLogger(__name__)


class OpenAIClient(ProviderClient):
    """OpenAI provider client.

    Hidden design decisions:
    - Fixed base URL from application configuration
    - Beta header enabling the assistants API
    - Assistants thread/run protocol endpoints
    - Reachability check before thread protocol requests
    """

    provider = CompatibleProvider.OPENAI

    def __init__(
        self,
        credentials: CredentialStore,
        configuration: AppConfiguration | None = None,
        transport: HTTPTransport | None = None,
        reachability: ReachabilityMonitor | None = None
    ):
        super().__init__(credentials, configuration, transport)
        self._reachability = reachability or StaticReachability()

    def base_url(self, settings: ChatSettings | None = None) -> str:
        return self._configuration.openai_base_url

    def extra_headers(self) -> dict[str, str]:
        return {"OpenAI-Beta": OPENAI_BETA_ASSISTANTS}

    async def create_assistant(self, model: str) -> GenericResponse:
        """Create an assistant bound to the given model."""
        data = await self._request("assistants", AssistantBody(model=model))
        return _decode(GenericResponse, data)

    async def create_thread(self) -> GenericResponse:
        """Create an empty thread."""
        data = await self._request("threads", None)
        return _decode(GenericResponse, data)

    async def create_message(self, thread_id: str, content: str) -> MessageStreamResponse:
        """Add a user message to a thread."""
        body = MessageBody(role=Role.USER, content=content)
        data = await self._request(f"threads/{thread_id}/messages", body)
        return _decode(MessageStreamResponse, data)

    async def stream_run(self, thread_id: str, assistant_id: str) -> AsyncIterator[str]:
        """Create a streaming run and yield its raw event lines."""
        headers = await self._thread_headers()
        body = RunBody(assistant_id=assistant_id, stream=True).model_dump_json().encode()
        url = self._url(f"threads/{thread_id}/runs")

        try:
            async for line in self._transport.stream_lines(url, HTTPMethod.POST, headers, body):
                yield line
        except HTTPStatusError as e:
            if e.status_code == 401:
                raise InvalidSecretKeyError(str(e)) from e
            raise

    async def _request(self, path: str, body: BaseModel | None) -> bytes:
        headers = await self._thread_headers()
        url = self._url(path)
        payload = body.model_dump_json().encode() if body is not None else b"{}"

        try:
            data = await self._transport.request(url, HTTPMethod.POST, headers, payload)
        except HTTPStatusError as e:
            if e.status_code == 401:
                raise InvalidSecretKeyError(str(e)) from e
            raise

        logger.debug("OpenAI POST /%s succeeded", path)
        return data

    def _url(self, path: str) -> str:
        return self.endpoint(ChatSettings(provider=self.provider), path)

    async def _thread_headers(self) -> dict[str, str]:
        if not await self._reachability.is_connected():
            raise NoConnectionError("No network connection detected")
        secret = await self.load_secret_key()
        return self.auth_headers(secret)


def _decode(model: type[BaseModel], data: bytes):
    try:
        return model.model_validate_json(data)
    except ValidationError as e:
        raise InvalidResponseError(str(e)) from e
