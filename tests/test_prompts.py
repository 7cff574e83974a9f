"""Unit tests for the saved prompt library."""
import itertools
from datetime import datetime, timedelta, timezone

import pytest

from cortexia.chat import ChatSession, PromptLibrary, PromptsViewState
from cortexia.storage.in_memory import InMemoryPromptStore


@pytest.fixture
def prompt_store():
    return InMemoryPromptStore()


@pytest.fixture
def library(prompt_store):
    counter = itertools.count(1)
    start = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    ticks = itertools.count()
    return PromptLibrary(
        prompt_store,
        id_factory=lambda: f"p{next(counter)}",
        clock=lambda: start + timedelta(minutes=next(ticks)),
    )


class TestPromptLibrary:
    """Tests for listing and managing prompts."""

    def test_starts_loading(self, library):
        """Test the state before the first load."""
        assert library.view_state is PromptsViewState.LOADING
        assert library.prompts == []

    @pytest.mark.asyncio
    async def test_empty_library(self, library):
        """Test that loading no prompts shows the empty state."""
        assert await library.load() == []
        assert library.view_state is PromptsViewState.EMPTY

    @pytest.mark.asyncio
    async def test_create_appends_in_order(self, library, prompt_store):
        """Test that new prompts are stored and listed oldest first."""
        first = await library.create("Explain like I'm five")
        second = await library.create("Translate to French")

        assert first.id == "p1"
        assert [p.text for p in library.prompts] == ["Explain like I'm five", "Translate to French"]
        assert second.created_at > first.created_at
        assert library.view_state is PromptsViewState.READY
        assert await prompt_store.fetch_prompts() == library.prompts

    @pytest.mark.asyncio
    async def test_edit_keeps_position(self, library):
        """Test that editing changes the text in place."""
        first = await library.create("Explain")
        await library.create("Translate")

        await library.edit(first, "Explain briefly")

        assert [p.text for p in library.prompts] == ["Explain briefly", "Translate"]
        assert library.prompts[0].id == first.id

    @pytest.mark.asyncio
    async def test_delete_last_prompt(self, library):
        """Test that deleting the only prompt returns to the empty state."""
        prompt = await library.create("Explain")

        await library.delete(prompt)

        assert library.prompts == []
        assert library.view_state is PromptsViewState.EMPTY

    @pytest.mark.asyncio
    async def test_failing_store_shows_error(self, library, prompt_store):
        """Test that a fetch failure clears the list and shows the error state."""
        await library.create("Explain")

        async def broken():
            raise RuntimeError("disk error")

        prompt_store.fetch_prompts = broken

        assert await library.load() == []
        assert library.view_state is PromptsViewState.ERROR

    @pytest.mark.asyncio
    async def test_use_fills_session_input(self, library, orchestrator, message_store, settings):
        """Test that using a prompt fills the chat input without sending."""
        prompt = await library.create("Summarize this")
        session = ChatSession(orchestrator, message_store, settings=settings)

        library.use(prompt, session)

        assert session.input_text == "Summarize this"
        assert session.messages == []
