"""Unit tests for cost and token accounting."""
import pytest
from hypothesis import given
from hypothesis import strategies as st

from cortexia.chat import Message
from cortexia.chat.costs import (
    PRICING,
    ai_message,
    chat_tokens,
    chat_usage_costs,
    compute_cost,
    response_cost,
    stream_message,
)
from cortexia.errors import MissingAIMessageError
from cortexia.providers.models import MessageResponse, MessageStreamResponse, Usage
from cortexia.roles import Role


def _response(role: str = "assistant", model: str = "gpt-4o", choices: bool = True) -> MessageResponse:
    return MessageResponse.model_validate({
        "id": "chatcmpl-1",
        "model": model,
        "created": 1,
        "choices": [{"message": {"role": role, "content": "Hey"}}] if choices else [],
        "usage": {"prompt_tokens": 1_000_000, "completion_tokens": 2_000_000},
    })


class TestComputeCost:
    """Tests for compute_cost."""

    def test_assistant_side_charges_completion_tokens(self):
        """Test that assistant responses are charged at the output rate."""
        usage = Usage(prompt_tokens=1_000_000, completion_tokens=2_000_000)

        cost = compute_cost("gpt-4o", Role.ASSISTANT, usage)

        assert cost == pytest.approx(20.0)

    def test_user_side_charges_prompt_tokens(self):
        """Test that user-role responses are charged at the input rate."""
        usage = Usage(prompt_tokens=1_000_000, completion_tokens=2_000_000)

        cost = compute_cost("gpt-4o", Role.USER, usage)

        assert cost == pytest.approx(2.5)

    def test_system_side_costs_nothing(self):
        """Test that system responses count no tokens."""
        usage = Usage(prompt_tokens=500, completion_tokens=500)

        assert compute_cost("gpt-4o", Role.SYSTEM, usage) == 0.0

    @given(
        st.text(min_size=1).filter(lambda model: model not in PRICING),
        st.integers(min_value=0, max_value=10_000_000),
        st.integers(min_value=0, max_value=10_000_000),
        st.sampled_from(list(Role))
    )
    def test_unknown_model_is_free(self, model: str, prompt: int, completion: int, role: Role):
        """Property test: models missing from the price table always cost 0."""
        usage = Usage(prompt_tokens=prompt, completion_tokens=completion)
        assert compute_cost(model, role, usage) == 0.0

    @given(
        st.sampled_from(sorted(PRICING)),
        st.integers(min_value=0, max_value=10_000_000),
        st.integers(min_value=0, max_value=10_000_000)
    )
    def test_known_model_uses_matching_side(self, model: str, prompt: int, completion: int):
        """Property test: only the token count of the response role is priced."""
        pricing = PRICING[model]
        usage = Usage(prompt_tokens=prompt, completion_tokens=completion)

        assert compute_cost(model, Role.USER, usage) == pytest.approx(
            prompt / 1_000_000 * pricing.input_per_million
        )
        assert compute_cost(model, Role.ASSISTANT, usage) == pytest.approx(
            completion / 1_000_000 * pricing.output_per_million
        )

    def test_custom_pricing_table(self):
        """Test that a custom table overrides the default prices."""
        from cortexia.chat.costs import ModelPricing

        table = {"local": ModelPricing(input_per_million=1.0, output_per_million=4.0)}
        usage = Usage(prompt_tokens=0, completion_tokens=250_000)

        assert compute_cost("local", Role.ASSISTANT, usage, pricing=table) == pytest.approx(1.0)
        assert compute_cost("gpt-4o", Role.ASSISTANT, usage, pricing=table) == 0.0


class TestResponseMessages:
    """Tests for building messages out of provider responses."""

    def test_ai_message_from_assistant_choice(self):
        """Test that the assistant message carries completion tokens and cost."""
        message = ai_message(_response())

        assert message.id == "chatcmpl-1"
        assert message.sender == Role.ASSISTANT
        assert message.content == "Hey"
        assert message.tokens == 2_000_000
        assert message.costs == pytest.approx(20.0)

    def test_ai_message_from_user_choice(self):
        """Test that user-role choices carry prompt tokens."""
        message = ai_message(_response(role="user"))

        assert message.tokens == 1_000_000
        assert message.costs == pytest.approx(2.5)

    def test_ai_message_without_choices_fails(self):
        """Test that an empty choice list raises MissingAIMessageError."""
        with pytest.raises(MissingAIMessageError):
            ai_message(_response(choices=False))

    def test_response_cost_without_choices_is_zero(self):
        """Test that a response without choices has no priced side."""
        assert response_cost(_response(choices=False)) == 0.0

    def test_stream_message_has_no_usage(self):
        """Test that thread messages carry neither tokens nor cost."""
        response = MessageStreamResponse.model_validate({
            "id": "msg_1",
            "created_at": 1,
            "thread_id": "thread_1",
            "role": "assistant",
            "content": [
                {"type": "text", "text": {"value": "Hello "}},
                {"type": "text", "text": {"value": "world"}},
            ],
        })

        message = stream_message(response)

        assert message.content == "Hello world"
        assert message.tokens == 0
        assert message.costs is None


class TestAggregates:
    """Tests for conversation-wide totals."""

    def test_two_message_conversation(self):
        """Test totals of a user prompt followed by a priced reply."""
        messages = [
            Message(id="1", content="Hi", sender=Role.USER, tokens=0),
            Message(id="2", content="Hey", sender=Role.ASSISTANT, tokens=5, costs=0.0001),
        ]

        assert chat_tokens(messages) == 5
        assert chat_usage_costs(messages) == pytest.approx(0.0001)

    def test_empty_conversation(self):
        """Test totals of an empty conversation."""
        assert chat_tokens([]) == 0
        assert chat_usage_costs([]) == 0

    @given(st.lists(st.integers(min_value=0, max_value=100_000), max_size=20))
    def test_tokens_sum_every_message(self, tokens: list[int]):
        """Property test: chat tokens is the sum of message tokens."""
        messages = [
            Message(id=str(i), content="x", sender=Role.ASSISTANT, tokens=count)
            for i, count in enumerate(tokens)
        ]
        assert chat_tokens(messages) == sum(tokens)
