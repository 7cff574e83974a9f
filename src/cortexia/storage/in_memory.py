"""In-memory chat persistence.

Simple list-based storage for session-only use and tests.
Data is lost when the application exits.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from .base import MessageStore, ModelStore, PromptStore
from .models import GenerativeAIModel, Prompt, StoredMessage, utc_now

if TYPE_CHECKING:
    from ..chat.models import Message
    from ..chat.pagination import Pagination

logger = logging.getLogger(__name__)


class InMemoryMessageStore(MessageStore):
    """In-memory message store (session-only)."""

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._messages: list[StoredMessage] = []

    async def connect(self) -> None:
        """Initialize store (no-op for in-memory)."""
        pass

    async def disconnect(self) -> None:
        """Close store (no-op for in-memory)."""
        pass

    async def fetch_chats(self) -> list[StoredMessage]:
        return self._newest_first(self._messages)

    async def fetch_messages(
        self,
        chat_id: str,
        pagination: "Pagination | None" = None
    ) -> list[StoredMessage]:
        messages = self._newest_first([m for m in self._messages if m.chat_id == chat_id])
        if pagination is not None:
            messages = messages[pagination.offset:pagination.offset + pagination.limit]

        logger.debug(
            "Fetched %d messages for chat %s (offset=%s, limit=%s)",
            len(messages), chat_id,
            pagination.offset if pagination else 0,
            pagination.limit if pagination else 0
        )
        return list(reversed(messages))

    async def save_message(self, chat_id: str, message: "Message") -> StoredMessage:
        """Store a message (appends to the list)."""
        record = StoredMessage(
            id=message.id,
            chat_id=chat_id,
            content=message.content,
            sent_at=self._clock(),
            sender=message.sender,
            tokens=message.tokens,
            costs=message.costs or 0.0,
        )
        self._messages.append(record)
        return record

    async def replace_message(self, current_id: str, new_message: "Message") -> None:
        for index, stored in enumerate(self._messages):
            if stored.id == current_id:
                self._messages[index] = stored.model_copy(update={
                    "id": new_message.id,
                    "content": new_message.content,
                    "tokens": new_message.tokens,
                    "costs": new_message.costs or 0.0,
                })
                return

    async def delete_chat(self, chat_id: str) -> None:
        self._messages = [m for m in self._messages if m.chat_id != chat_id]

    async def clean_history(self) -> None:
        self._messages = []

    async def is_chat_deleted(self, chat_id: str) -> bool:
        return not any(m.chat_id == chat_id for m in self._messages)

    @property
    def backend_type(self) -> str:
        return "memory"

    @staticmethod
    def _newest_first(messages: list[StoredMessage]) -> list[StoredMessage]:
        indexed = list(enumerate(messages))
        indexed.sort(key=lambda item: (item[1].sent_at, item[0]), reverse=True)
        return [message for _, message in indexed]


class InMemoryModelStore(ModelStore):
    """In-memory model cache (session-only)."""

    def __init__(self):
        self._models: dict[str, GenerativeAIModel] = {}

    async def fetch_models(self) -> list[GenerativeAIModel]:
        return sorted(self._models.values(), key=lambda model: model.id)

    async def insert_models(self, models: list[GenerativeAIModel]) -> None:
        for model in models:
            self._models[model.id] = model


class InMemoryPromptStore(PromptStore):
    """In-memory prompt library (session-only)."""

    def __init__(self):
        self._prompts: list[Prompt] = []

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    async def fetch_prompts(self) -> list[Prompt]:
        return sorted(self._prompts, key=lambda prompt: prompt.created_at)

    async def insert_prompt(self, prompt: Prompt) -> None:
        self._prompts.append(prompt)

    async def update_prompt(self, prompt_id: str, text: str) -> None:
        self._prompts = [
            prompt.model_copy(update={"text": text}) if prompt.id == prompt_id else prompt
            for prompt in self._prompts
        ]

    async def delete_prompt(self, prompt_id: str) -> None:
        self._prompts = [prompt for prompt in self._prompts if prompt.id != prompt_id]
