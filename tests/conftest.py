"""Pytest configuration and shared fixtures."""
import itertools
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from cortexia.completion import CompletionOrchestrator
from cortexia.config import AppConfiguration
from cortexia.credentials import InMemoryCredentialStore, SecretKey
from cortexia.providers import HTTPTransport, create_provider_clients
from cortexia.reachability import StaticReachability
from cortexia.settings import ChatSettings, CompatibleProvider
from cortexia.storage.in_memory import InMemoryMessageStore, InMemoryModelStore

OPENAI_BASE_URL = "https://api.openai.test"
OPENROUTER_BASE_URL = "https://openrouter.test/api"
OLLAMA_BASE_URL = "http://localhost:11434"


@pytest.fixture
def configuration():
    """Application configuration pointing at test hosts."""
    return AppConfiguration(
        openai_base_url=OPENAI_BASE_URL,
        openrouter_base_url=OPENROUTER_BASE_URL,
        url_scheme="cortexia",
    )


@pytest.fixture
def credentials():
    """Credential store holding a key for every provider."""
    return InMemoryCredentialStore({
        SecretKey.OPENAI: "sk-openai",
        SecretKey.OPENROUTER: "sk-openrouter",
        SecretKey.OLLAMA: "sk-ollama",
    })


@pytest.fixture
def clock():
    """Deterministic clock advancing one second per call."""
    start = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    ticks = itertools.count()
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def message_store(clock):
    return InMemoryMessageStore(clock=clock)


@pytest.fixture
def model_store():
    return InMemoryModelStore()


@pytest.fixture
def requests_log():
    """Requests seen by the mock provider, in order."""
    return []


@pytest.fixture
def provider_routes():
    """Mapping of (method, path) to a response factory; tests fill it in."""
    return {}


@pytest.fixture
def mock_transport(provider_routes, requests_log):
    """HTTPTransport whose httpx client answers from provider_routes."""
    def handler(request: httpx.Request) -> httpx.Response:
        requests_log.append(request)
        route = provider_routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": {"message": "not found"}})
        return route(request)

    return HTTPTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.fixture
def orchestrator(credentials, configuration, mock_transport, message_store, model_store):
    """Orchestrator over mock-backed clients for every provider."""
    clients = create_provider_clients(
        credentials,
        configuration=configuration,
        transport=mock_transport,
        reachability=StaticReachability(True),
    )
    return CompletionOrchestrator(clients, message_store, model_store)


@pytest.fixture
def settings():
    """OpenRouter settings with a priced model selected."""
    return ChatSettings(provider=CompatibleProvider.OPENROUTER, model_id="gpt-4o-mini")


@pytest.fixture
def completion_payload():
    """Factory for chat completion response bodies."""
    counter = itertools.count(1)

    def build(
        content: str = "Hello there!",
        model: str = "gpt-4o-mini",
        role: str = "assistant",
        prompt_tokens: int = 10,
        completion_tokens: int = 5,
        choices: bool = True
    ) -> dict:
        return {
            "id": f"chatcmpl-{next(counter)}",
            "object": "chat.completion",
            "created": 1714564800,
            "model": model,
            "choices": [
                {
                    "index": 0,
                    "finish_reason": "stop",
                    "message": {"role": role, "content": content},
                }
            ] if choices else [],
            "usage": {
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens,
            },
        }

    return build


@pytest.fixture
def thread_message_payload():
    """Factory for thread message bodies."""
    def build(message_id: str, role: str, text: str, thread_id: str = "thread_1") -> dict:
        return {
            "id": message_id,
            "object": "thread.message",
            "created_at": 1714564800,
            "thread_id": thread_id,
            "role": role,
            "content": [{"type": "text", "text": {"value": text, "annotations": []}}],
        }

    return build


@pytest.fixture
def run_stream_body(thread_message_payload):
    """Factory for the line stream of a completed run."""
    def build(reply: str = "Hi from the assistant", message_id: str = "msg_reply") -> str:
        final = json.dumps(thread_message_payload(message_id, "assistant", reply))
        return "\n".join([
            "event: thread.run.created",
            'data: {"id": "run_1", "object": "thread.run"}',
            "",
            "event: thread.message.delta",
            'data: {"id": "msg_reply", "delta": {}}',
            "",
            "event: thread.message.completed",
            f"data: {final}",
            "",
            "event: done",
            "data: [DONE]",
            "",
        ])

    return build
