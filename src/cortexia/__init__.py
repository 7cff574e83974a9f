"""
Cortexia: chat orchestration core for OpenAI-compatible providers.

Each module hides one design decision: which provider serves a request,
how messages are persisted, how a conversation reacts to user intents.
"""

__version__ = "0.1.0"

from .chat import ChatHistory, ChatSession, Message, ViewState
from .completion import CompletionOrchestrator
from .config import AppConfiguration
from .errors import CortexiaError
from .providers import create_provider_client, create_provider_clients
from .settings import ChatSettings, CompatibleProvider
from .storage import create_store

__all__ = [
    "AppConfiguration",
    "ChatHistory",
    "ChatSession",
    "ChatSettings",
    "CompatibleProvider",
    "CompletionOrchestrator",
    "CortexiaError",
    "Message",
    "ViewState",
    "create_provider_client",
    "create_provider_clients",
    "create_store",
]
