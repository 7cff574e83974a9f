"""Saved prompt library.

Prompts are reusable texts. Choosing one fills the chat input; it is not
sent until the user sends it.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from uuid_extensions import uuid7

from ..storage.base import PromptStore
from ..storage.models import Prompt, utc_now

if TYPE_CHECKING:
    from .session import ChatSession

logger = logging.getLogger(__name__)


class PromptsViewState(str, Enum):
    LOADING = "loading"
    EMPTY = "empty"
    ERROR = "error"
    READY = "ready"


class PromptLibrary:
    """Prompts screen state: saved prompts, oldest first.

    Every change reloads the list from the store.
    """

    def __init__(
        self,
        store: PromptStore,
        id_factory: Callable[[], str] = lambda: str(uuid7()),
        clock: Callable[[], datetime] = utc_now
    ):
        self._store = store
        self._new_id = id_factory
        self._clock = clock
        self.prompts: list[Prompt] = []
        self.view_state = PromptsViewState.LOADING

    async def load(self) -> list[Prompt]:
        """Fetch the saved prompts; a failing store shows the error state."""
        self.view_state = PromptsViewState.LOADING
        try:
            self.prompts = await self._store.fetch_prompts()
        except Exception as e:
            logger.warning("Could not fetch prompts: %s", e)
            self.prompts = []
            self.view_state = PromptsViewState.ERROR
            return self.prompts

        self.view_state = PromptsViewState.READY if self.prompts else PromptsViewState.EMPTY
        return self.prompts

    async def create(self, text: str) -> Prompt:
        prompt = Prompt(id=self._new_id(), text=text, created_at=self._clock())
        await self._store.insert_prompt(prompt)
        await self.load()
        return prompt

    async def edit(self, prompt: Prompt, text: str) -> None:
        await self._store.update_prompt(prompt.id, text)
        await self.load()

    async def delete(self, prompt: Prompt) -> None:
        await self._store.delete_prompt(prompt.id)
        await self.load()

    def use(self, prompt: Prompt, session: "ChatSession") -> None:
        """Put the prompt text in the session's input."""
        session.use_prompt(prompt)
