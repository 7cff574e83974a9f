"""Conversation data models.

Messages are immutable: edits and regenerations replace a message with a new
one at the same position instead of mutating it.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..roles import Role
from ..storage.models import StoredMessage


class Message(BaseModel):
    """A message displayed in a conversation."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    sender: Role
    tokens: int = Field(default=0, ge=0)
    costs: float | None = Field(default=None, description="Cost in dollars, when known")

    @classmethod
    def from_stored(cls, record: StoredMessage) -> "Message":
        return cls(
            id=record.id,
            content=record.content,
            sender=record.sender,
            tokens=record.tokens,
            costs=record.costs,
        )


class ViewStateKind(str, Enum):
    NEW_CHAT = "new_chat"
    LOADING = "loading"
    READY = "ready"
    FETCHING_MORE = "fetching_more"
    EDITING = "editing"


class ViewState(BaseModel):
    """Screen state of a conversation.

    `message_id` is only meaningful while editing, where it names the message
    that the edit will replace next.
    """

    model_config = ConfigDict(frozen=True)

    kind: ViewStateKind
    message_id: str | None = None

    @classmethod
    def new_chat(cls) -> "ViewState":
        return cls(kind=ViewStateKind.NEW_CHAT)

    @classmethod
    def loading(cls) -> "ViewState":
        return cls(kind=ViewStateKind.LOADING)

    @classmethod
    def ready(cls) -> "ViewState":
        return cls(kind=ViewStateKind.READY)

    @classmethod
    def fetching_more(cls) -> "ViewState":
        return cls(kind=ViewStateKind.FETCHING_MORE)

    @classmethod
    def editing(cls, message_id: str | None = None) -> "ViewState":
        return cls(kind=ViewStateKind.EDITING, message_id=message_id)

    @property
    def is_busy(self) -> bool:
        return self.kind in (ViewStateKind.LOADING, ViewStateKind.FETCHING_MORE)


class ContextAction(str, Enum):
    """Actions offered on a message."""

    COPY = "Copy"
    EDIT = "Edit"
    REGENERATE = "Regenerate"

    @classmethod
    def for_role(cls, role: Role) -> list["ContextAction"]:
        if role is Role.ASSISTANT:
            return [cls.COPY, cls.REGENERATE]
        if role is Role.USER:
            return [cls.COPY, cls.EDIT]
        return [cls.COPY]


class Chat(BaseModel):
    """A chat, represented by its lead message's timestamp."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: datetime

    @property
    def display_date(self) -> str:
        return self.date.strftime("%b %d, %Y at %I:%M %p")


class UsageSummary(BaseModel):
    """Token and cost totals of a conversation."""

    model_config = ConfigDict(frozen=True)

    tokens: int
    costs: float
