"""Abstract base classes for chat persistence.

The abstraction hides:
- Storage format and location
- Connection management
- Ordering of messages that share a timestamp
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .models import GenerativeAIModel, Prompt, StoredMessage

if TYPE_CHECKING:
    from ..chat.models import Message
    from ..chat.pagination import Pagination


class MessageStore(ABC):
    """Abstract chat message store.

    Messages are ordered by sent_at; messages with equal timestamps keep
    their insertion order.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def fetch_chats(self) -> list[StoredMessage]:
        """Fetch every stored message, newest first."""

    @abstractmethod
    async def fetch_messages(
        self,
        chat_id: str,
        pagination: "Pagination | None" = None
    ) -> list[StoredMessage]:
        """Fetch messages of a chat.

        The newest messages are selected first, windowed by the pagination's
        offset and limit when given, and returned in chronological order.
        """

    @abstractmethod
    async def save_message(self, chat_id: str, message: "Message") -> StoredMessage:
        """Store a new message in a chat, stamped with the current time."""

    @abstractmethod
    async def replace_message(self, current_id: str, new_message: "Message") -> None:
        """Replace the message stored under current_id.

        The stored record keeps its chat and timestamp, so it keeps its
        position; id, content, tokens and costs come from new_message. Does
        nothing when current_id is not stored.
        """

    @abstractmethod
    async def delete_chat(self, chat_id: str) -> None:
        """Delete every message of a chat."""

    @abstractmethod
    async def clean_history(self) -> None:
        """Delete every stored message."""

    @abstractmethod
    async def is_chat_deleted(self, chat_id: str) -> bool:
        """Return True when no message of the chat is stored."""

    @property
    @abstractmethod
    def backend_type(self) -> str:
        """Get the backend type identifier."""


class ModelStore(ABC):
    """Abstract local cache of provider models."""

    @abstractmethod
    async def fetch_models(self) -> list[GenerativeAIModel]:
        """Fetch cached models sorted by id."""

    @abstractmethod
    async def insert_models(self, models: list[GenerativeAIModel]) -> None:
        """Insert models, replacing cached entries with the same id."""


class PromptStore(ABC):
    """Abstract store of saved prompts."""

    @abstractmethod
    async def connect(self) -> None:
        """Initialize the store."""

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the store gracefully."""

    @abstractmethod
    async def fetch_prompts(self) -> list[Prompt]:
        """Fetch saved prompts, oldest first."""

    @abstractmethod
    async def insert_prompt(self, prompt: Prompt) -> None:
        """Store a new prompt."""

    @abstractmethod
    async def update_prompt(self, prompt_id: str, text: str) -> None:
        """Change the text of a saved prompt. Does nothing for unknown ids."""

    @abstractmethod
    async def delete_prompt(self, prompt_id: str) -> None:
        """Delete a saved prompt."""
