"""Chat history browsing.

Each chat is represented by its lead message: the earliest message the user
sent in it. Lead messages are grouped by the calendar day they were sent.
"""

import logging
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ..roles import Role
from ..storage.base import MessageStore
from ..storage.models import StoredMessage
from .models import Chat, ViewState

if TYPE_CHECKING:
    from .session import ChatSession

logger = logging.getLogger(__name__)


class DateMessageGroup(BaseModel):
    """Lead messages of the chats started on one day."""

    model_config = ConfigDict(frozen=True)

    date: datetime
    messages: list[StoredMessage]

    @property
    def chats(self) -> list[Chat]:
        return [Chat(id=message.chat_id, date=message.sent_at) for message in self.messages]


def _start_of_day(moment: datetime, tz: tzinfo | None) -> datetime:
    local = moment.astimezone(tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def lead_messages(messages: list[StoredMessage]) -> dict[str, StoredMessage]:
    """Earliest user message per chat id.

    On equal timestamps the message encountered first is kept.
    """
    leads: dict[str, StoredMessage] = {}
    for message in messages:
        if message.sender is not Role.USER:
            continue
        current = leads.get(message.chat_id)
        if current is None or message.sent_at < current.sent_at:
            leads[message.chat_id] = message
    return leads


def aggregate_history(
    messages: list[StoredMessage],
    tz: tzinfo | None = None
) -> list[DateMessageGroup]:
    """Group chats by the day their lead message was sent.

    Args:
        messages: Stored messages of any number of chats
        tz: Time zone whose calendar days are used (defaults to local time)

    Returns:
        Day groups, most recent day first; within a group, newest lead
        message first
    """
    by_day: dict[datetime, list[StoredMessage]] = {}
    for lead in lead_messages(messages).values():
        by_day.setdefault(_start_of_day(lead.sent_at, tz), []).append(lead)

    groups = [
        DateMessageGroup(
            date=day,
            messages=sorted(leads, key=lambda message: message.sent_at, reverse=True)
        )
        for day, leads in by_day.items()
    ]
    groups.sort(key=lambda group: group.date, reverse=True)
    return groups


class ChatHistory:
    """History screen state: day groups of chats, with deletion."""

    def __init__(self, store: MessageStore, tz: tzinfo | None = None):
        self._store = store
        self._tz = tz
        self.groups: list[DateMessageGroup] = []

    async def load(self) -> list[DateMessageGroup]:
        """Fetch every stored message and regroup the chats."""
        messages = await self._store.fetch_chats()
        self.groups = aggregate_history(messages, self._tz)
        logger.info("Loaded %d history groups", len(self.groups))
        return self.groups

    async def delete_chat(self, chat_id: str) -> list[DateMessageGroup]:
        """Delete one chat and reload the groups."""
        await self._store.delete_chat(chat_id)
        return await self.load()

    async def clear_history(self) -> list[DateMessageGroup]:
        """Delete every chat."""
        await self._store.clean_history()
        return await self.load()

    def open_chat(self, lead: StoredMessage, **session_kwargs) -> "ChatSession":
        """Build a ready session for the chat a lead message belongs to.

        Args:
            lead: Lead message selected from a group
            **session_kwargs: Collaborators forwarded to ChatSession

        Returns:
            Session to be shown; call `on_appear()` to load its messages
        """
        from .session import ChatSession

        return ChatSession(
            chat_id=lead.chat_id,
            view_state=ViewState.ready(),
            message_store=self._store,
            **session_kwargs
        )
