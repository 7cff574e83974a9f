"""Wire models for OpenAI-compatible provider APIs.

Field names match the snake_case JSON keys used by the providers, so the
models decode responses and encode request bodies without key translation.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..roles import Role


class MessageBody(BaseModel):
    """A single message sent to a provider."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ChatBody(BaseModel):
    """Request body for one-shot chat completions."""

    model: str
    messages: list[MessageBody]
    temperature: float = Field(ge=0.0, le=2.0)


class AssistantBody(BaseModel):
    """Request body for creating an assistant bound to a model."""

    model: str


class RunBody(BaseModel):
    """Request body for creating a run in a thread."""

    assistant_id: str
    stream: bool = True


class Usage(BaseModel):
    """Token usage statistics for a completion request."""

    prompt_tokens: int = 0
    completion_tokens: int = 0


class ChoiceMessage(BaseModel):
    role: Role
    content: str

    @field_validator("content", mode="before")
    @classmethod
    def _null_content(cls, value: str | None) -> str:
        return value or ""


class Choice(BaseModel):
    message: ChoiceMessage


class MessageResponse(BaseModel):
    """Response of a one-shot chat completion."""

    id: str
    model: str
    created: int | None = None
    choices: list[Choice] = Field(default_factory=list)
    usage: Usage = Field(default_factory=Usage)

    @field_validator("usage", mode="before")
    @classmethod
    def _null_usage(cls, value: dict | None) -> dict | Usage:
        return value if value is not None else Usage()


class GenericResponse(BaseModel):
    """Any created resource (assistant, thread) identified by id."""

    id: str
    created_at: int


class TextValue(BaseModel):
    value: str


class StreamContent(BaseModel):
    type: str = "text"
    text: TextValue


class MessageStreamResponse(BaseModel):
    """A thread message, as returned on creation and at run completion."""

    id: str
    created_at: int
    thread_id: str
    role: Role
    content: list[StreamContent] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return "".join(part.text.value for part in self.content if part.type == "text")


class ModelInfo(BaseModel):
    id: str
    owned_by: str = ""


class ModelResponse(BaseModel):
    """List of models available from a provider."""

    data: list[ModelInfo] = Field(default_factory=list)


class ProviderIdentifiers(BaseModel):
    """Assistant and thread created once per chat for the thread/run protocol."""

    model_config = ConfigDict(frozen=True)

    assistant_id: str
    thread_id: str
