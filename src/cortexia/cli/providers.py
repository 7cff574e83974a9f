"""Collaborator factory functions for the CLI.

Centralizes creation of stores, credentials and the orchestrator from
environment variables. Hides configuration details from command
implementations.
"""

from ..completion import CompletionOrchestrator
from ..config import AppConfiguration
from ..credentials import CredentialStore, EnvironmentCredentialStore
from ..providers import HTTPTransport, create_provider_clients
from ..reachability import TCPProbeReachability
from ..settings import ChatSettings
from ..storage import MessageStore, ModelStore, PromptStore, create_prompt_store, create_store


def get_configuration() -> AppConfiguration:
    """Build the application configuration from environment variables."""
    return AppConfiguration.from_env()


def get_settings(configuration: AppConfiguration) -> ChatSettings:
    """Load persisted chat settings, defaults when none were saved."""
    return ChatSettings.load(configuration.settings_path)


def get_credentials() -> CredentialStore:
    """Create the credential store.

    Environment variables:
        OPENAI_API_KEY: OpenAI secret key
        OPENROUTER_API_KEY: OpenRouter secret key
        OLLAMA_API_KEY: Ollama-compatible secret key
    """
    return EnvironmentCredentialStore()


def get_store(configuration: AppConfiguration) -> tuple[MessageStore, ModelStore]:
    """Create the SQLite message store and model cache.

    Environment variables:
        CORTEXIA_DB_PATH: SQLite database path (default: ./cortexia.db)
    """
    return create_store("sqlite", path=configuration.database_path)


def get_prompt_store(configuration: AppConfiguration) -> PromptStore:
    """Create the SQLite prompt library, stored next to the chats."""
    return create_prompt_store("sqlite", path=configuration.database_path)


def get_orchestrator(
    configuration: AppConfiguration,
    message_store: MessageStore,
    model_store: ModelStore,
    transport: HTTPTransport
) -> CompletionOrchestrator:
    """Create the orchestrator with one client per provider over a shared transport."""
    clients = create_provider_clients(
        get_credentials(),
        configuration=configuration,
        transport=transport,
        reachability=TCPProbeReachability(),
    )
    return CompletionOrchestrator(clients, message_store, model_store)
