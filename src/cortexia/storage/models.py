"""Records persisted by the message and model stores.

These models define the stored shape of chat messages, cached provider
models and saved prompts, independent of the storage backend used.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from ..roles import Role


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StoredMessage(BaseModel):
    """A chat message as persisted.

    A chat has no record of its own: it exists as the set of messages
    sharing a chat_id.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique message identifier")
    chat_id: str = Field(description="Chat the message belongs to")
    content: str
    sent_at: datetime = Field(default_factory=utc_now)
    sender: Role
    tokens: int = Field(default=0, ge=0)
    costs: float = Field(default=0.0, ge=0.0)


class GenerativeAIModel(BaseModel):
    """A provider model cached locally."""

    model_config = ConfigDict(frozen=True)

    id: str
    owner: str = ""


class Prompt(BaseModel):
    """A saved prompt text the user can reuse as chat input."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    created_at: datetime = Field(default_factory=utc_now)
