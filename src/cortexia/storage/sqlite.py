"""SQLite chat persistence.

Provides persistent message, model and prompt storage using a SQLite database.
Uses aiosqlite for async access.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite

from ..roles import Role
from .base import MessageStore, ModelStore, PromptStore
from .models import GenerativeAIModel, Prompt, StoredMessage, utc_now

if TYPE_CHECKING:
    from ..chat.models import Message
    from ..chat.pagination import Pagination

logger = logging.getLogger(__name__)

_MESSAGE_COLUMNS = "id, chat_id, content, sent_at, sender, tokens, costs"


class SQLiteStore(MessageStore, ModelStore, PromptStore):
    """SQLite-backed message store, model cache and prompt library.

    Messages sharing a timestamp are ordered by rowid, which replacement
    keeps intact.
    """

    def __init__(
        self,
        path: str | Path = "./cortexia.db",
        clock: Callable[[], datetime] = utc_now
    ):
        self._db_path = Path(path)
        self._clock = clock
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Initialize database connection and schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._create_schema()

    async def _create_schema(self) -> None:
        """Create database tables."""
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS chat_messages (
                id TEXT NOT NULL UNIQUE,
                chat_id TEXT NOT NULL,
                content TEXT NOT NULL,
                sent_at TEXT NOT NULL,
                sender TEXT NOT NULL,
                tokens INTEGER NOT NULL DEFAULT 0,
                costs REAL NOT NULL DEFAULT 0
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_chat_messages_chat
            ON chat_messages(chat_id, sent_at)
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS generative_ai_models (
                id TEXT PRIMARY KEY,
                owner TEXT NOT NULL DEFAULT ''
            )
        """)

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS prompts (
                id TEXT PRIMARY KEY,
                text TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)

        await self._connection.commit()

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def fetch_chats(self) -> list[StoredMessage]:
        async with self._connection.execute(
            f"SELECT {_MESSAGE_COLUMNS} FROM chat_messages ORDER BY sent_at DESC, rowid DESC"
        ) as cursor:
            rows = await cursor.fetchall()

        logger.debug("Fetched %d stored messages for history", len(rows))
        return [_row_to_message(row) for row in rows]

    async def fetch_messages(
        self,
        chat_id: str,
        pagination: "Pagination | None" = None
    ) -> list[StoredMessage]:
        query = f"""
            SELECT {_MESSAGE_COLUMNS}
            FROM chat_messages
            WHERE chat_id = ?
            ORDER BY sent_at DESC, rowid DESC
        """
        params: tuple = (chat_id,)
        if pagination is not None:
            query += " LIMIT ? OFFSET ?"
            params = (chat_id, pagination.limit, pagination.offset)

        async with self._connection.execute(query, params) as cursor:
            rows = await cursor.fetchall()

        logger.debug(
            "Fetched %d messages for chat %s (offset=%s, limit=%s)",
            len(rows), chat_id,
            pagination.offset if pagination else 0,
            pagination.limit if pagination else 0
        )
        return [_row_to_message(row) for row in reversed(rows)]

    async def save_message(self, chat_id: str, message: "Message") -> StoredMessage:
        record = StoredMessage(
            id=message.id,
            chat_id=chat_id,
            content=message.content,
            sent_at=self._clock(),
            sender=message.sender,
            tokens=message.tokens,
            costs=message.costs or 0.0,
        )

        await self._connection.execute(f"""
            INSERT INTO chat_messages ({_MESSAGE_COLUMNS})
            VALUES (?, ?, ?, ?, ?, ?, ?)
        """, (
            record.id,
            record.chat_id,
            record.content,
            record.sent_at.astimezone(timezone.utc).isoformat(timespec="microseconds"),
            record.sender.value,
            record.tokens,
            record.costs
        ))
        await self._connection.commit()

        logger.info(
            "Stored message %s in chat %s from %s",
            record.id, chat_id, record.sender.value
        )
        return record

    async def replace_message(self, current_id: str, new_message: "Message") -> None:
        await self._connection.execute("""
            UPDATE chat_messages
            SET id = ?, content = ?, tokens = ?, costs = ?
            WHERE id = ?
        """, (
            new_message.id,
            new_message.content,
            new_message.tokens,
            new_message.costs or 0.0,
            current_id
        ))
        await self._connection.commit()

    async def delete_chat(self, chat_id: str) -> None:
        await self._connection.execute("DELETE FROM chat_messages WHERE chat_id = ?", (chat_id,))
        await self._connection.commit()
        logger.info("Deleted chat %s", chat_id)

    async def clean_history(self) -> None:
        await self._connection.execute("DELETE FROM chat_messages")
        await self._connection.commit()
        logger.info("Deleted all chats")

    async def is_chat_deleted(self, chat_id: str) -> bool:
        async with self._connection.execute(
            "SELECT 1 FROM chat_messages WHERE chat_id = ? LIMIT 1",
            (chat_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return row is None

    async def fetch_models(self) -> list[GenerativeAIModel]:
        async with self._connection.execute(
            "SELECT id, owner FROM generative_ai_models ORDER BY id ASC"
        ) as cursor:
            rows = await cursor.fetchall()
        return [GenerativeAIModel(id=model_id, owner=owner) for model_id, owner in rows]

    async def insert_models(self, models: list[GenerativeAIModel]) -> None:
        await self._connection.executemany(
            "INSERT OR REPLACE INTO generative_ai_models (id, owner) VALUES (?, ?)",
            [(model.id, model.owner) for model in models]
        )
        await self._connection.commit()

    async def fetch_prompts(self) -> list[Prompt]:
        async with self._connection.execute(
            "SELECT id, text, created_at FROM prompts ORDER BY created_at ASC, rowid ASC"
        ) as cursor:
            rows = await cursor.fetchall()
        return [
            Prompt(id=prompt_id, text=text, created_at=datetime.fromisoformat(created_at))
            for prompt_id, text, created_at in rows
        ]

    async def insert_prompt(self, prompt: Prompt) -> None:
        await self._connection.execute(
            "INSERT INTO prompts (id, text, created_at) VALUES (?, ?, ?)",
            (
                prompt.id,
                prompt.text,
                prompt.created_at.astimezone(timezone.utc).isoformat(timespec="microseconds")
            )
        )
        await self._connection.commit()
        logger.info("Stored prompt %s", prompt.id)

    async def update_prompt(self, prompt_id: str, text: str) -> None:
        await self._connection.execute(
            "UPDATE prompts SET text = ? WHERE id = ?", (text, prompt_id)
        )
        await self._connection.commit()

    async def delete_prompt(self, prompt_id: str) -> None:
        await self._connection.execute("DELETE FROM prompts WHERE id = ?", (prompt_id,))
        await self._connection.commit()
        logger.info("Deleted prompt %s", prompt_id)

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path


def _row_to_message(row: tuple) -> StoredMessage:
    message_id, chat_id, content, sent_at, sender, tokens, costs = row
    return StoredMessage(
        id=message_id,
        chat_id=chat_id,
        content=content,
        sent_at=datetime.fromisoformat(sent_at),
        sender=Role(sender),
        tokens=tokens,
        costs=costs,
    )
