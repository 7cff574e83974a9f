import logging
from collections.abc import AsyncIterator, Mapping

from ..errors import MissingModelError
from ..providers import (
    MessageBody,
    MessageResponse,
    ModelInfo,
    ModelResponse,
    OpenAIClient,
    ProviderClient,
    ProviderIdentifiers,
)
from ..roles import Role
from ..settings import ChatSettings, CompatibleProvider
from ..storage import GenerativeAIModel, MessageStore, ModelStore
from .streaming import MessageStream, StreamItem, parse_run_stream

logger = logging.getLogger(__name__)


class CompletionOrchestrator:
    """Routes completion requests to the selected provider.

    Hidden design decisions:
    - Preflight order: base URL, then secret key, then model
    - Conversation history is read from the message store, not from the caller
    - System messages are never sent to a provider
    - Model lists are served from the local cache unless empty or forced
    """

    def __init__(
        self,
        clients: Mapping[CompatibleProvider, ProviderClient],
        message_store: MessageStore,
        model_store: ModelStore | None = None
    ):
        """Initialize the orchestrator.

        Args:
            clients: One provider client per supported provider
            message_store: Store the conversation history is read from
            model_store: Optional local cache of provider models
        """
        self._clients = dict(clients)
        self._message_store = message_store
        self._model_store = model_store

    def client_for(self, provider: CompatibleProvider) -> ProviderClient:
        """Get the client serving a provider.

        Raises:
            ValueError: If no client is registered for the provider
        """
        client = self._clients.get(provider)
        if client is None:
            raise ValueError(f"No client registered for provider: {provider.value}")
        return client

    async def prepare(self, settings: ChatSettings) -> ProviderClient:
        """Check that a request can be sent, without touching the network.

        Returns:
            The client for the selected provider

        Raises:
            MissingBaseURLError: If the provider has no base URL configured
            MissingSecretKeyError: If the provider secret key is missing or empty
            MissingModelError: If no model is selected
        """
        client = self.client_for(settings.provider)
        client.base_url(settings)
        await client.load_secret_key()
        if not settings.model_id:
            raise MissingModelError("No model selected")
        return client

    async def chat(
        self,
        chat_id: str,
        settings: ChatSettings,
        until_message_id: str | None = None
    ) -> MessageResponse:
        """Send the conversation history as a one-shot chat completion.

        Args:
            chat_id: Chat whose stored history is sent
            settings: Settings snapshot selecting provider, model and temperature
            until_message_id: When given, history after this message is left out

        Returns:
            Provider response
        """
        client = await self.prepare(settings)

        stored = await self._message_store.fetch_messages(chat_id)
        if until_message_id is not None:
            ids = [message.id for message in stored]
            if until_message_id in ids:
                stored = stored[:ids.index(until_message_id) + 1]

        history = [
            MessageBody(role=message.sender, content=message.content)
            for message in stored
            if message.sender is not Role.SYSTEM
        ]

        body = client.build_chat_request(settings.model_id, history, settings.temperature)
        return await client.chat_completion(body, settings)

    async def chat_stream(
        self,
        message: str,
        model_id: str,
        identifiers: ProviderIdentifiers | None = None
    ) -> MessageStream:
        """Send a message through the OpenAI assistants thread/run protocol.

        The assistant and thread are created on first use and reused through
        the identifiers emitted with every stream item.

        Args:
            message: User message content
            model_id: Model the assistant is bound to
            identifiers: Assistant and thread of the chat, if already created

        Returns:
            Stream whose first item is the created thread message and whose
            last item is the assistant reply
        """
        client = self.client_for(CompatibleProvider.OPENAI)
        if not isinstance(client, OpenAIClient):
            raise ValueError("Thread protocol requires the OpenAI client")

        if identifiers is None:
            assistant = await client.create_assistant(model_id)
            thread = await client.create_thread()
            identifiers = ProviderIdentifiers(assistant_id=assistant.id, thread_id=thread.id)
            logger.info("Created assistant %s and thread %s", assistant.id, thread.id)

        async def produce() -> AsyncIterator[StreamItem]:
            created = await client.create_message(identifiers.thread_id, message)
            yield created, identifiers

            lines = client.stream_run(identifiers.thread_id, identifiers.assistant_id)
            async for response in parse_run_stream(lines):
                yield response, identifiers

        return MessageStream(produce())

    async def fetch_models(self, force_remote: bool, settings: ChatSettings) -> ModelResponse:
        """List the models of the selected provider.

        Args:
            force_remote: Skip the local cache and ask the provider
            settings: Settings snapshot selecting the provider

        Returns:
            Models sorted by id
        """
        if self._model_store is not None and not force_remote:
            cached = await self._model_store.fetch_models()
            if cached:
                logger.debug("Serving %d cached models", len(cached))
                return ModelResponse(
                    data=[ModelInfo(id=model.id, owned_by=model.owner) for model in cached]
                )

        client = self.client_for(settings.provider)
        response = await client.list_models(settings)
        models = sorted(response.data, key=lambda model: model.id)

        if self._model_store is not None:
            await self._model_store.insert_models(
                [GenerativeAIModel(id=model.id, owner=model.owned_by) for model in models]
            )
        logger.info("Fetched %d models from %s", len(models), settings.provider.display_name)
        return ModelResponse(data=models)

    async def close(self) -> None:
        """Close every provider client."""
        for client in self._clients.values():
            await client.close()
