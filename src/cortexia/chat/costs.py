"""Token usage and dollar cost accounting.

Prices are dollars per million tokens. Models missing from the table cost
nothing.
"""

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict

from ..errors import MissingAIMessageError
from ..providers.models import MessageResponse, MessageStreamResponse, Usage
from ..roles import Role
from .models import Message


class ModelPricing(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_per_million: float
    output_per_million: float


def _price(input_rate: float, output_rate: float) -> ModelPricing:
    return ModelPricing(input_per_million=input_rate, output_per_million=output_rate)


PRICING: dict[str, ModelPricing] = {
    "gpt-3.5": _price(2.0, 2.0),
    "gpt-4-8k": _price(30.0, 60.0),
    "gpt-4-32k": _price(60.0, 120.0),
    "gpt-4-1106-preview": _price(10.0, 30.0),
    "chatgpt-4o-latest": _price(5.0, 15.0),
    "dall-e-2": _price(0.020, 0.020),
    "text-embedding-3-large": _price(0.13, 0.13),
    "tts-1": _price(5.0, 5.0),
    "tts-1-1106": _price(6.0, 6.0),
    "gpt-4-0125-preview": _price(10.0, 30.0),
    "gpt-3.5-turbo-0125": _price(0.50, 1.50),
    "gpt-4-turbo-preview": _price(10.0, 30.0),
    "gpt-3.5-turbo": _price(3.0, 6.0),
    "whisper-1": _price(0.0060, 0.006),
    "gpt-3.5-turbo-16k": _price(3.0, 4.0),
    "text-embedding-3-small": _price(0.02, 0.02),
    "gpt-4-turbo-2024-04-09": _price(10.0, 30.0),
    "gpt-4-turbo": _price(10.0, 30.0),
    "gpt-3.5-turbo-1106": _price(1.0, 2.0),
    "tts-1-hd": _price(7.0, 7.0),
    "tts-1-hd-1106": _price(8.0, 8.0),
    "gpt-3.5-turbo-instruct-0914": _price(1.5, 2.0),
    "gpt-4-0613": _price(30.0, 60.0),
    "gpt-4": _price(30.0, 60.0),
    "gpt-3.5-turbo-instruct": _price(1.5, 2.0),
    "babbage-002": _price(0.4, 0.4),
    "davinci-002": _price(2.0, 2.0),
    "dall-e-3": _price(0.040, 0.040),
    "gpt-4o-2024-05-13": _price(5.0, 15.0),
    "gpt-4o-2024-08-06": _price(2.5, 10.0),
    "gpt-4o": _price(2.5, 10.0),
    "text-embedding-ada-002": _price(1.0, 1.0),
    "gpt-4o-mini": _price(0.15, 0.6),
    "gpt-4o-mini-2024-07-18": _price(0.15, 0.6),
}

_PER_MILLION = 1_000_000


def compute_cost(
    model: str,
    role: Role | None,
    usage: Usage,
    pricing: dict[str, ModelPricing] | None = None
) -> float:
    """Dollar cost of a completion.

    Only the token count on the response role's side is charged: prompt
    tokens when the role is user, completion tokens when it is assistant.

    Args:
        model: Model id reported by the provider
        role: Role of the first completion choice
        usage: Token usage reported by the provider
        pricing: Price table (defaults to PRICING)

    Returns:
        Cost in dollars, 0 for unknown models
    """
    table = PRICING if pricing is None else pricing
    model_pricing = table.get(model)
    if model_pricing is None:
        return 0.0

    input_tokens = usage.prompt_tokens if role is Role.USER else 0
    output_tokens = usage.completion_tokens if role is Role.ASSISTANT else 0

    input_cost = input_tokens / _PER_MILLION * model_pricing.input_per_million
    output_cost = output_tokens / _PER_MILLION * model_pricing.output_per_million
    return input_cost + output_cost


def response_cost(response: MessageResponse) -> float:
    role = response.choices[0].message.role if response.choices else None
    return compute_cost(response.model, role, response.usage)


def ai_message(response: MessageResponse, message_id: str | None = None) -> Message:
    """Build the conversation message carried by a completion response.

    Args:
        response: Completion response
        message_id: Id for the message; the response id when omitted

    Raises:
        MissingAIMessageError: If the response has no choices
    """
    if not response.choices:
        raise MissingAIMessageError(f"Response {response.id} has no choices")

    choice = response.choices[0].message
    if choice.role is Role.USER:
        tokens = response.usage.prompt_tokens
    elif choice.role is Role.ASSISTANT:
        tokens = response.usage.completion_tokens
    else:
        tokens = 0

    return Message(
        id=message_id or response.id,
        content=choice.content,
        sender=choice.role,
        tokens=tokens,
        costs=response_cost(response),
    )


def stream_message(
    response: MessageStreamResponse,
    message_id: str | None = None
) -> Message:
    """Build the conversation message of a completed thread run.

    Thread runs report no usage on the message payload, so the message
    carries no tokens and no cost.
    """
    return Message(
        id=message_id or response.id, content=response.text, sender=response.role
    )


def chat_tokens(messages: Iterable[Message]) -> int:
    return sum(message.tokens for message in messages)


def chat_usage_costs(messages: Iterable[Message]) -> float:
    return sum(message.costs for message in messages if message.costs is not None)
