"""User settings consumed by the chat core.

Settings are passed around as an immutable snapshot. Callers that change a
preference build a new snapshot with `model_copy(update=...)` and hand it to
the session; in-flight requests keep the snapshot they started with.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .config import DEFAULT_TEMPERATURE


class CompatibleProvider(str, Enum):
    """OpenAI-compatible backends the core can talk to."""

    OPENAI = "openAI"
    OPENROUTER = "openRouter"
    OLLAMA = "ollama"

    @property
    def display_name(self) -> str:
        return {
            CompatibleProvider.OPENAI: "OpenAI",
            CompatibleProvider.OPENROUTER: "OpenRouter",
            CompatibleProvider.OLLAMA: "Ollama",
        }[self]


class ChatSettings(BaseModel):
    """Snapshot of the persisted chat preferences."""

    model_config = ConfigDict(frozen=True)

    provider: CompatibleProvider = Field(default=CompatibleProvider.OPENAI)
    model_id: str | None = Field(default=None, description="Selected model identifier")
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    word_wrap: bool = Field(default=False)
    ollama_base_url: str | None = Field(default=None, description="Base URL for Ollama-compatible APIs")
    assistants_mode: bool = Field(
        default=False,
        description="Use the OpenAI assistants thread/run protocol instead of chat completions"
    )

    @property
    def uses_thread_protocol(self) -> bool:
        return self.assistants_mode and self.provider is CompatibleProvider.OPENAI

    @classmethod
    def load(cls, path: str | Path) -> "ChatSettings":
        """Load settings from a JSON file, falling back to defaults if it does not exist."""
        settings_path = Path(path)
        if not settings_path.exists():
            return cls()
        return cls.model_validate_json(settings_path.read_text(encoding="utf-8"))

    def save(self, path: str | Path) -> None:
        """Persist settings as JSON."""
        settings_path = Path(path)
        settings_path.parent.mkdir(parents=True, exist_ok=True)
        settings_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
