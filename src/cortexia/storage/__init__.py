"""Chat persistence module for cortexia.

Stores chat messages, the local cache of provider models and saved prompts.
"""

from .base import MessageStore, ModelStore, PromptStore
from .factory import create_prompt_store, create_store
from .models import GenerativeAIModel, Prompt, StoredMessage

__all__ = [
    "GenerativeAIModel",
    "MessageStore",
    "ModelStore",
    "Prompt",
    "PromptStore",
    "StoredMessage",
    "create_prompt_store",
    "create_store",
]
