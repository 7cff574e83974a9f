"""Factory for creating chat persistence backends."""

from typing import Any

from .base import MessageStore, ModelStore, PromptStore


def create_store(backend: str = "memory", **kwargs: Any) -> tuple[MessageStore, ModelStore]:
    """Create a message store and model cache.

    Args:
        backend: Backend type ("memory" or "sqlite")
        **kwargs: Backend-specific configuration
            For sqlite:
                - path: str | Path (default: ./cortexia.db)
            For all backends:
                - clock: Callable[[], datetime] stamping saved messages

    Returns:
        (message_store, model_store) pair; the sqlite backend returns one
        object serving both roles

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryMessageStore, InMemoryModelStore
        return InMemoryMessageStore(**kwargs), InMemoryModelStore()

    elif backend == "sqlite":
        from .sqlite import SQLiteStore
        store = SQLiteStore(**kwargs)
        return store, store

    raise ValueError(
        f"Unsupported storage backend: {backend}. "
        f"Supported backends: memory, sqlite"
    )


def create_prompt_store(backend: str = "memory", **kwargs: Any) -> PromptStore:
    """Create a prompt library store.

    Args:
        backend: Backend type ("memory" or "sqlite")
        **kwargs: Backend-specific configuration
            For sqlite:
                - path: str | Path (default: ./cortexia.db)

    Raises:
        ValueError: If backend type is not supported
    """
    if backend == "memory":
        from .in_memory import InMemoryPromptStore
        return InMemoryPromptStore()

    elif backend == "sqlite":
        from .sqlite import SQLiteStore
        return SQLiteStore(**kwargs)

    raise ValueError(
        f"Unsupported storage backend: {backend}. "
        f"Supported backends: memory, sqlite"
    )
