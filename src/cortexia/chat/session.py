"""Conversation state machine.

A ChatSession owns the message list of one open chat and drives sending,
editing, regenerating and paging through history. Transitions run on the
caller's task; network and storage calls suspend it while the view state
shows the conversation as busy.
"""

import logging
from collections.abc import Callable

from uuid_extensions import uuid7

from ..completion import CompletionOrchestrator
from ..config import PAGINATION_LIMIT, AppConfiguration
from ..errors import MissingAIMessageError
from ..providers import ProviderIdentifiers
from ..roles import Role
from ..settings import ChatSettings
from ..storage import MessageStore, Prompt
from .costs import ai_message, chat_tokens, chat_usage_costs, stream_message
from .feedback import describe_error
from .models import ContextAction, Message, UsageSummary, ViewState, ViewStateKind
from .pagination import Pagination

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return str(uuid7())


class ChatSession:
    """State of one conversation.

    Hidden design decisions:
    - The user message is shown and stored before the provider is called
    - Edits and regenerations replace messages at their position
    - Replies get a local id; provider response ids are not unique
    - Failures become a system message instead of propagating
    - Settings are read once per request, as an immutable snapshot

    Usage:
        session = ChatSession(orchestrator, store, settings)
        session.input_text = "Hello"
        await session.send()
    """

    def __init__(
        self,
        orchestrator: CompletionOrchestrator,
        message_store: MessageStore,
        settings: ChatSettings | None = None,
        configuration: AppConfiguration | None = None,
        chat_id: str | None = None,
        view_state: ViewState | None = None,
        id_factory: Callable[[], str] = _new_id,
        pagination_limit: int = PAGINATION_LIMIT
    ):
        """Initialize the session.

        Args:
            orchestrator: Completion orchestrator used for provider requests
            message_store: Store messages are persisted to
            settings: Settings snapshot; replace the attribute to change it
            configuration: Application configuration (deep-link scheme)
            chat_id: Existing chat to open, or None for a new chat
            view_state: Initial view state (new chat or ready by default)
            id_factory: Generates message and chat ids
            pagination_limit: Messages fetched per history page
        """
        self._orchestrator = orchestrator
        self._store = message_store
        self._configuration = configuration or AppConfiguration()
        self._new_id = id_factory
        self._pagination_limit = pagination_limit

        self.settings = settings or ChatSettings()
        self.chat_id = chat_id
        self.view_state = view_state or (
            ViewState.new_chat() if chat_id is None else ViewState.ready()
        )
        self.messages: list[Message] = []
        self.input_text = ""
        self.focused_message_id: str | None = None
        self.regenerating_message_id: str | None = None
        self.editing_message_id: str | None = None
        self.pagination = Pagination(limit=pagination_limit)
        self.identifiers: ProviderIdentifiers | None = None

    @property
    def chat_tokens(self) -> int:
        return chat_tokens(self.messages)

    @property
    def chat_usage_costs(self) -> float:
        return chat_usage_costs(self.messages)

    @property
    def usage(self) -> UsageSummary:
        return UsageSummary(tokens=self.chat_tokens, costs=self.chat_usage_costs)

    @property
    def next_editing_message_id(self) -> str | None:
        """Id of the message right after the one being edited, if any."""
        if self.editing_message_id is None:
            return None
        index = self._index_of(self.editing_message_id)
        if index is None or index + 1 >= len(self.messages):
            return None
        return self.messages[index + 1].id

    def context_actions(self, message: Message) -> list[ContextAction]:
        return ContextAction.for_role(message.sender)

    async def on_appear(self) -> None:
        """Load the newest page of the chat when the conversation is shown."""
        if self.chat_id is None:
            return

        self.messages = []
        self.pagination.reset()
        if await self._store.is_chat_deleted(self.chat_id):
            logger.info("Chat %s was deleted, starting a new chat", self.chat_id)
            self.start_new_chat()
            return

        await self._fetch_messages(paginating=False)

    async def first_message_appeared(self, message_id: str) -> bool:
        """Fetch older messages once the first loaded message scrolls into view.

        Returns:
            True when a page was fetched
        """
        if not self.messages or self.messages[0].id != message_id:
            return False
        if not self.pagination.has_next or self.view_state.is_busy:
            return False

        previous = self.view_state
        self.view_state = ViewState.fetching_more()
        try:
            await self._fetch_messages(paginating=True)
        finally:
            if previous.kind is ViewStateKind.EDITING:
                self.view_state = ViewState.editing(self.next_editing_message_id)
            else:
                self.view_state = ViewState.ready()
        return True

    async def send(self) -> None:
        """Send the input text, or resubmit it when an edit is in progress."""
        content = self.input_text.strip()
        if not content:
            return

        if self.chat_id is None:
            self.chat_id = self._new_id()

        settings = self.settings
        editing_id = self.editing_message_id
        reply_target = self.next_editing_message_id
        self.input_text = ""

        if editing_id is not None:
            message = Message(id=editing_id, content=content, sender=Role.USER)
            self._replace(editing_id, message)
            self.view_state = ViewState.editing(reply_target)
        else:
            message = Message(id=self._new_id(), content=content, sender=Role.USER)
            self.messages.append(message)
            self.view_state = ViewState.loading()
        self.focused_message_id = message.id

        try:
            await self._store_message(message, editing_id)
            await self._sending_message(message, settings, reply_target)
        except Exception as e:
            await self._display_error(e, settings, reply_target)

    def edit(self, message: Message) -> None:
        """Start editing a user message."""
        if message.sender is not Role.USER:
            return
        self.input_text = message.content
        self.editing_message_id = message.id
        self.view_state = ViewState.editing(self.next_editing_message_id)

    def use_prompt(self, prompt: Prompt) -> None:
        """Fill the input with a saved prompt, keeping any edit in progress."""
        self.input_text = prompt.text

    def cancel_editing(self) -> None:
        self.input_text = ""
        self.editing_message_id = None
        self.view_state = ViewState.ready() if self.messages else ViewState.new_chat()

    async def regenerate(self, message: Message) -> None:
        """Ask again for an assistant reply and replace it in place.

        The history sent ends with the user prompt preceding the reply.
        """
        if message.sender is not Role.ASSISTANT or self.chat_id is None:
            return

        index = self._index_of(message.id)
        if index is None:
            return
        prompt = next(
            (m for m in reversed(self.messages[:index]) if m.sender is Role.USER),
            None
        )
        if prompt is None:
            logger.info("No prompt precedes message %s, nothing to regenerate", message.id)
            return

        settings = self.settings
        self.regenerating_message_id = message.id
        try:
            response = await self._orchestrator.chat(
                self.chat_id, settings, until_message_id=prompt.id
            )
            await self._message_regenerated(
                message.id, ai_message(response, self._new_id())
            )
        except Exception as e:
            await self._display_error(e, settings)
        finally:
            self.regenerating_message_id = None

    async def perform(self, action: ContextAction, message: Message) -> str | None:
        """Run a context action on a message.

        Returns:
            The message content for COPY, to be put on the clipboard
        """
        if action not in self.context_actions(message):
            return None
        if action is ContextAction.COPY:
            return message.content
        if action is ContextAction.EDIT:
            self.edit(message)
        elif action is ContextAction.REGENERATE:
            await self.regenerate(message)
        return None

    def start_new_chat(self) -> None:
        self.chat_id = None
        self.messages = []
        self.input_text = ""
        self.focused_message_id = None
        self.editing_message_id = None
        self.regenerating_message_id = None
        self.pagination = Pagination(limit=self._pagination_limit)
        self.identifiers = None
        self.view_state = ViewState.new_chat()

    async def _sending_message(
        self,
        message: Message,
        settings: ChatSettings,
        reply_target: str | None
    ) -> None:
        if settings.uses_thread_protocol:
            await self._orchestrator.prepare(settings)
            stream = await self._orchestrator.chat_stream(
                message.content, settings.model_id, self.identifiers
            )
            item = await stream.last()
            if item is None or item[0].role is not Role.ASSISTANT:
                raise MissingAIMessageError("Run finished without an assistant message")
            response, self.identifiers = item
            reply = stream_message(response, self._new_id())
        else:
            response = await self._orchestrator.chat(
                self.chat_id, settings, until_message_id=message.id
            )
            reply = ai_message(response, self._new_id())
            priced = message.model_copy(update={"costs": reply.costs})
            self._replace(message.id, priced)
            await self._store.replace_message(message.id, priced)

        await self._reply_received(reply, reply_target)

    async def _reply_received(self, reply: Message, reply_target: str | None) -> None:
        """Show the reply after the prompt, replacing the previous reply of an edit."""
        if reply_target is not None and self._index_of(reply_target) is not None:
            self._replace(reply_target, reply)
            await self._store.replace_message(reply_target, reply)
        else:
            self.messages.append(reply)
            await self._store.save_message(self.chat_id, reply)

        self.focused_message_id = reply.id
        self.editing_message_id = None
        self.view_state = ViewState.ready()

    async def _message_regenerated(self, current_id: str, reply: Message) -> None:
        self._replace(current_id, reply)
        await self._store.replace_message(current_id, reply)
        self.focused_message_id = reply.id

    async def _store_message(self, message: Message, editing_id: str | None) -> None:
        if editing_id is not None:
            await self._store.replace_message(editing_id, message)
        else:
            await self._store.save_message(self.chat_id, message)

    async def _display_error(
        self,
        error: Exception,
        settings: ChatSettings,
        replace_id: str | None = None
    ) -> None:
        logger.warning("Chat %s request failed: %s", self.chat_id, error)
        text = describe_error(error, settings.provider, self._configuration.url_scheme)
        notice = Message(id=self._new_id(), content=text, sender=Role.SYSTEM)

        replacing = replace_id is not None and self._index_of(replace_id) is not None
        if replacing:
            self._replace(replace_id, notice)
        else:
            self.messages.append(notice)
        self.focused_message_id = notice.id
        self.editing_message_id = None
        self.view_state = ViewState.ready()

        if self.chat_id is None:
            return
        try:
            if replacing:
                await self._store.replace_message(replace_id, notice)
            else:
                await self._store.save_message(self.chat_id, notice)
        except Exception as store_error:
            logger.warning("Could not store error message: %s", store_error)

    async def _fetch_messages(self, paginating: bool) -> None:
        records = await self._store.fetch_messages(self.chat_id, self.pagination)
        page = [Message.from_stored(record) for record in records]
        self.messages = self.pagination.apply_page(self.messages, page, paginating)

        if not paginating and self.messages:
            self.focused_message_id = self.messages[-1].id
        if self.view_state.kind is not ViewStateKind.FETCHING_MORE:
            self.view_state = ViewState.ready()
        logger.debug("Chat %s: %d messages loaded", self.chat_id, len(self.messages))

    def _index_of(self, message_id: str) -> int | None:
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                return index
        return None

    def _replace(self, current_id: str, message: Message) -> None:
        index = self._index_of(current_id)
        if index is not None:
            self.messages[index] = message
