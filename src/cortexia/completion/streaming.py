"""Assistants run stream parsing.

A run streams server-sent-event style lines (`event: ...` / `data: ...`).
The final thread message is the first `data:` line after the
`thread.message.completed` event; `done` ends the stream. Parsed values are
handed from a producer task to the consumer through a bounded queue.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import aclosing
from enum import Enum
from typing import Any

from pydantic import ValidationError

from ..errors import InvalidResponseError
from ..providers.models import MessageStreamResponse, ProviderIdentifiers

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
EVENT_PREFIX = "event: "

StreamItem = tuple[MessageStreamResponse, ProviderIdentifiers]


class RunEvent(str, Enum):
    COMPLETED = "thread.message.completed"
    DONE = "done"


def parse_line(line: str) -> tuple[str, str] | None:
    """Split a stream line into (key, value); None for unrecognized lines."""
    if line.startswith(DATA_PREFIX):
        return "data", line[len(DATA_PREFIX):].strip()
    if line.startswith(EVENT_PREFIX):
        return "event", line[len(EVENT_PREFIX):].strip()
    return None


async def parse_run_stream(lines: AsyncIterator[str]) -> AsyncIterator[MessageStreamResponse]:
    """Yield the final thread message of a run stream, then stop.

    Raises:
        InvalidResponseError: If the final message payload cannot be decoded
    """
    completed = False
    async with aclosing(lines) as stream:
        async for line in stream:
            parsed = parse_line(line)
            if parsed is None:
                continue

            key, value = parsed
            if completed and key == "data":
                try:
                    response = MessageStreamResponse.model_validate_json(value)
                except ValidationError as e:
                    raise InvalidResponseError(str(e)) from e
                yield response
                return

            if value == RunEvent.COMPLETED.value:
                completed = True
            elif value == RunEvent.DONE.value:
                logger.debug("Run stream finished without a completed message")
                return


class _End:
    pass


class _Failure:
    def __init__(self, error: BaseException):
        self.error = error


class MessageStream:
    """Finite, non-restartable async stream of (message, identifiers) pairs.

    A producer task drains the source into a bounded queue; iteration reads
    until the source ends or re-raises the error that ended it.

    Usage:
        stream = await orchestrator.chat_stream("Hi", "gpt-4o", None)
        message, identifiers = await stream.last()
    """

    def __init__(self, source: AsyncIterator[StreamItem], maxsize: int = 8):
        self._source = source
        self._queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=maxsize)
        self._producer: asyncio.Task | None = None
        self._finished = False

    def __aiter__(self) -> "MessageStream":
        return self

    async def __anext__(self) -> StreamItem:
        if self._finished:
            raise StopAsyncIteration
        if self._producer is None:
            self._producer = asyncio.create_task(self._produce())

        item = await self._queue.get()
        if isinstance(item, _End):
            self._finished = True
            raise StopAsyncIteration
        if isinstance(item, _Failure):
            self._finished = True
            raise item.error
        return item

    async def last(self) -> StreamItem | None:
        """Consume the stream and return the last emitted pair, if any."""
        result = None
        try:
            async for item in self:
                result = item
        finally:
            await self.aclose()
        return result

    async def aclose(self) -> None:
        """Stop the producer and release the source."""
        self._finished = True
        if self._producer is not None and not self._producer.done():
            self._producer.cancel()
            try:
                await self._producer
            except asyncio.CancelledError:
                pass
        elif self._producer is None and hasattr(self._source, "aclose"):
            await self._source.aclose()

    async def _produce(self) -> None:
        try:
            async with aclosing(self._source) as source:
                async for item in source:
                    await self._queue.put(item)
        except Exception as e:
            logger.info("Message stream failed: %s", e)
            await self._queue.put(_Failure(e))
            return
        await self._queue.put(_End())
