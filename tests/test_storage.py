"""Unit tests for the message store, model cache and prompt store backends."""
from datetime import datetime, timedelta, timezone

import pytest

from cortexia.chat import Message, Pagination
from cortexia.roles import Role
from cortexia.storage import (
    GenerativeAIModel,
    MessageStore,
    ModelStore,
    Prompt,
    PromptStore,
    create_prompt_store,
    create_store,
)
from cortexia.storage.in_memory import InMemoryMessageStore, InMemoryPromptStore
from cortexia.storage.sqlite import SQLiteStore


class TestStoreInterfaces:
    """Tests for the abstract store interfaces."""

    def test_message_store_is_abstract(self):
        """Test that MessageStore cannot be instantiated directly."""
        with pytest.raises(TypeError):
            MessageStore()  # type: ignore

    def test_model_store_is_abstract(self):
        """Test that ModelStore cannot be instantiated directly."""
        with pytest.raises(TypeError):
            ModelStore()  # type: ignore

    def test_prompt_store_is_abstract(self):
        """Test that PromptStore cannot be instantiated directly."""
        with pytest.raises(TypeError):
            PromptStore()  # type: ignore


class TestStoreFactory:
    """Tests for create_store."""

    def test_create_memory_store(self):
        """Test creating the in-memory backend."""
        messages, models = create_store("memory")

        assert isinstance(messages, InMemoryMessageStore)
        assert messages.backend_type == "memory"
        assert models is not messages

    def test_create_sqlite_store(self, tmp_path):
        """Test that the sqlite backend serves both roles."""
        messages, models = create_store("sqlite", path=tmp_path / "chat.db")

        assert isinstance(messages, SQLiteStore)
        assert messages is models
        assert messages.backend_type == "sqlite"

    def test_unsupported_backend(self):
        """Test that unknown backends raise ValueError."""
        with pytest.raises(ValueError, match="Unsupported storage backend"):
            create_store("postgres")

    def test_create_prompt_stores(self, tmp_path):
        """Test creating the prompt store backends."""
        assert isinstance(create_prompt_store("memory"), InMemoryPromptStore)
        assert isinstance(create_prompt_store("sqlite", path=tmp_path / "chat.db"), SQLiteStore)

        with pytest.raises(ValueError, match="Unsupported storage backend"):
            create_prompt_store("postgres")


@pytest.fixture(params=["memory", "sqlite"])
async def store(request, tmp_path, clock):
    """Message store and model cache for each backend."""
    if request.param == "memory":
        messages, models = create_store("memory", clock=clock)
    else:
        messages, models = create_store("sqlite", path=tmp_path / "chat.db", clock=clock)

    await messages.connect()
    yield messages, models
    await messages.disconnect()


def _message(message_id: str, sender: Role = Role.USER, costs: float | None = None) -> Message:
    return Message(id=message_id, content=f"text {message_id}", sender=sender, costs=costs)


class TestMessageStore:
    """Behavior shared by every message store backend."""

    @pytest.mark.asyncio
    async def test_save_and_fetch(self, store):
        """Test that saved messages come back in chronological order."""
        messages, _ = store
        for message_id in ["m1", "m2", "m3"]:
            await messages.save_message("chat", _message(message_id))

        fetched = await messages.fetch_messages("chat")

        assert [m.id for m in fetched] == ["m1", "m2", "m3"]
        assert all(m.chat_id == "chat" for m in fetched)

    @pytest.mark.asyncio
    async def test_save_records_costs(self, store):
        """Test that a missing cost is stored as zero."""
        messages, _ = store

        record = await messages.save_message("chat", _message("m1"))
        priced = await messages.save_message("chat", _message("m2", Role.ASSISTANT, costs=0.5))

        assert record.costs == 0.0
        assert priced.costs == 0.5
        assert record.sent_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_pagination_windows_newest_first(self, store):
        """Test that pages select the newest messages first."""
        messages, _ = store
        for index in range(5):
            await messages.save_message("chat", _message(f"m{index}"))

        newest = await messages.fetch_messages("chat", Pagination(limit=2, offset=0))
        older = await messages.fetch_messages("chat", Pagination(limit=2, offset=2))
        oldest = await messages.fetch_messages("chat", Pagination(limit=2, offset=4))
        beyond = await messages.fetch_messages("chat", Pagination(limit=2, offset=6))

        assert [m.id for m in newest] == ["m3", "m4"]
        assert [m.id for m in older] == ["m1", "m2"]
        assert [m.id for m in oldest] == ["m0"]
        assert beyond == []

    @pytest.mark.asyncio
    async def test_chats_are_isolated(self, store):
        """Test that fetching one chat ignores the others."""
        messages, _ = store
        await messages.save_message("a", _message("a1"))
        await messages.save_message("b", _message("b1"))

        assert [m.id for m in await messages.fetch_messages("a")] == ["a1"]

    @pytest.mark.asyncio
    async def test_replace_keeps_position(self, store):
        """Test that a replaced message keeps its place in the chat."""
        messages, _ = store
        for message_id in ["m1", "m2", "m3"]:
            await messages.save_message("chat", _message(message_id))

        await messages.replace_message(
            "m2", Message(id="new", content="rewritten", sender=Role.ASSISTANT, tokens=7)
        )
        fetched = await messages.fetch_messages("chat")

        assert [m.id for m in fetched] == ["m1", "new", "m3"]
        assert fetched[1].content == "rewritten"
        assert fetched[1].tokens == 7

    @pytest.mark.asyncio
    async def test_saving_keeps_other_chats(self, store):
        """Test that saving into one chat never removes messages of another."""
        messages, _ = store
        await messages.save_message("a", _message("a1"))
        await messages.save_message("a", _message("a2", Role.ASSISTANT))
        await messages.save_message("b", _message("b1"))

        assert [m.id for m in await messages.fetch_messages("a")] == ["a1", "a2"]
        assert [m.id for m in await messages.fetch_messages("b")] == ["b1"]

    @pytest.mark.asyncio
    async def test_replace_missing_message_is_noop(self, store):
        """Test that replacing an unknown id changes nothing."""
        messages, _ = store
        await messages.save_message("chat", _message("m1"))

        await messages.replace_message("missing", _message("other"))

        assert [m.id for m in await messages.fetch_messages("chat")] == ["m1"]

    @pytest.mark.asyncio
    async def test_delete_chat(self, store):
        """Test that deleting a chat removes only its messages."""
        messages, _ = store
        await messages.save_message("a", _message("a1"))
        await messages.save_message("b", _message("b1"))

        await messages.delete_chat("a")

        assert await messages.is_chat_deleted("a")
        assert not await messages.is_chat_deleted("b")

    @pytest.mark.asyncio
    async def test_clean_history(self, store):
        """Test that cleaning history removes every chat."""
        messages, _ = store
        await messages.save_message("a", _message("a1"))
        await messages.save_message("b", _message("b1"))

        await messages.clean_history()

        assert await messages.fetch_chats() == []

    @pytest.mark.asyncio
    async def test_fetch_chats_newest_first(self, store):
        """Test that every stored message is listed newest first."""
        messages, _ = store
        await messages.save_message("a", _message("a1"))
        await messages.save_message("b", _message("b1"))

        assert [m.id for m in await messages.fetch_chats()] == ["b1", "a1"]


class TestModelStore:
    """Behavior shared by every model cache backend."""

    @pytest.mark.asyncio
    async def test_models_sorted_by_id(self, store):
        """Test that cached models come back sorted."""
        _, models = store
        await models.insert_models([
            GenerativeAIModel(id="gpt-4o", owner="openai"),
            GenerativeAIModel(id="gpt-3.5-turbo", owner="openai"),
        ])

        assert [m.id for m in await models.fetch_models()] == ["gpt-3.5-turbo", "gpt-4o"]

    @pytest.mark.asyncio
    async def test_insert_replaces_same_id(self, store):
        """Test that inserting an existing id updates it."""
        _, models = store
        await models.insert_models([GenerativeAIModel(id="llama3", owner="old")])
        await models.insert_models([GenerativeAIModel(id="llama3", owner="meta")])

        assert await models.fetch_models() == [GenerativeAIModel(id="llama3", owner="meta")]


class TestSQLitePersistence:
    """Tests specific to the SQLite backend."""

    @pytest.mark.asyncio
    async def test_messages_survive_reconnect(self, tmp_path, clock):
        """Test that stored messages are read back after reopening the file."""
        path = tmp_path / "nested" / "chat.db"
        store = SQLiteStore(path, clock=clock)
        await store.connect()
        await store.save_message("chat", _message("m1"))
        await store.disconnect()

        reopened = SQLiteStore(path)
        await reopened.connect()
        try:
            fetched = await reopened.fetch_messages("chat")
        finally:
            await reopened.disconnect()

        assert [m.id for m in fetched] == ["m1"]
        assert reopened.db_path == path


@pytest.fixture(params=["memory", "sqlite"])
async def prompt_store(request, tmp_path):
    """Prompt store for each backend."""
    if request.param == "memory":
        prompts = create_prompt_store("memory")
    else:
        prompts = create_prompt_store("sqlite", path=tmp_path / "chat.db")

    await prompts.connect()
    yield prompts
    await prompts.disconnect()


def _prompt(prompt_id: str, minutes: int, text: str | None = None) -> Prompt:
    created_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc) + timedelta(minutes=minutes)
    return Prompt(id=prompt_id, text=text or f"text {prompt_id}", created_at=created_at)


class TestPromptStore:
    """Behavior shared by every prompt store backend."""

    @pytest.mark.asyncio
    async def test_prompts_oldest_first(self, prompt_store):
        """Test that prompts come back in creation order regardless of insertion."""
        await prompt_store.insert_prompt(_prompt("late", 10))
        await prompt_store.insert_prompt(_prompt("early", 0))

        fetched = await prompt_store.fetch_prompts()

        assert [p.id for p in fetched] == ["early", "late"]
        assert fetched[0].created_at == _prompt("early", 0).created_at

    @pytest.mark.asyncio
    async def test_update_prompt(self, prompt_store):
        """Test that updating changes only the text."""
        await prompt_store.insert_prompt(_prompt("p1", 0))

        await prompt_store.update_prompt("p1", "rewritten")
        await prompt_store.update_prompt("missing", "ignored")

        assert await prompt_store.fetch_prompts() == [_prompt("p1", 0, "rewritten")]

    @pytest.mark.asyncio
    async def test_delete_prompt(self, prompt_store):
        """Test that deleting removes only that prompt."""
        await prompt_store.insert_prompt(_prompt("p1", 0))
        await prompt_store.insert_prompt(_prompt("p2", 1))

        await prompt_store.delete_prompt("p1")

        assert [p.id for p in await prompt_store.fetch_prompts()] == ["p2"]
