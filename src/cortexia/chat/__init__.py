"""Conversation layer: session state machine, history, paging and cost accounting."""

from .costs import PRICING, ModelPricing, ai_message, compute_cost, response_cost
from .feedback import GENERIC_ERROR_MESSAGE, describe_error
from .history import ChatHistory, DateMessageGroup, aggregate_history
from .models import Chat, ContextAction, Message, UsageSummary, ViewState, ViewStateKind
from .pagination import Pagination
from .prompts import PromptLibrary, PromptsViewState
from .session import ChatSession

__all__ = [
    "PRICING",
    "ModelPricing",
    "ai_message",
    "compute_cost",
    "response_cost",
    "GENERIC_ERROR_MESSAGE",
    "describe_error",
    "ChatHistory",
    "DateMessageGroup",
    "aggregate_history",
    "Chat",
    "ContextAction",
    "Message",
    "UsageSummary",
    "ViewState",
    "ViewStateKind",
    "Pagination",
    "PromptLibrary",
    "PromptsViewState",
    "ChatSession",
]
