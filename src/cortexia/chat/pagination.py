"""Offset/limit windowing over persisted chat history."""

from pydantic import BaseModel, Field

from ..config import PAGINATION_LIMIT
from .models import Message


class Pagination(BaseModel):
    """Pagination cursor for one view session of a chat.

    `offset` counts the messages fetched so far. `has_next` only turns false
    on an empty page; a short page still counts as "may have more".
    """

    limit: int = Field(default=PAGINATION_LIMIT, gt=0)
    offset: int = Field(default=0, ge=0)
    has_next: bool = True

    def reset(self) -> None:
        """Rewind to the newest page. `has_next` is left untouched."""
        self.offset = 0

    def apply_page(
        self,
        existing: list[Message],
        page: list[Message],
        paginating: bool
    ) -> list[Message]:
        """Merge a fetched page into the loaded messages and advance the cursor.

        Args:
            existing: Messages already loaded, in chronological order
            page: Fetched messages, in chronological order
            paginating: True when the page holds older messages to prepend,
                False for the first page, which is appended

        Returns:
            The merged list. Messages already loaded keep their position and
            are not duplicated.
        """
        loaded_ids = {message.id for message in existing}
        fresh = [message for message in page if message.id not in loaded_ids]

        merged = fresh + existing if paginating else existing + fresh

        self.offset += len(page)
        self.has_next = len(page) != 0
        return merged
