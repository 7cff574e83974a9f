"""Human-readable explanations for errors shown in a conversation."""

from ..config import DEFAULT_URL_SCHEME, DeepLink
from ..errors import (
    InvalidSecretKeyError,
    MissingAIMessageError,
    MissingBaseURLError,
    MissingModelError,
    MissingSecretKeyError,
    NoConnectionError,
)
from ..settings import CompatibleProvider

GENERIC_ERROR_MESSAGE = "**Oops! Something went wrong.** Please try again later"


def describe_error(
    error: BaseException,
    provider: CompatibleProvider = CompatibleProvider.OPENAI,
    scheme: str = DEFAULT_URL_SCHEME
) -> str:
    """Markdown explanation for an error, with deep links to the relevant setting."""
    if isinstance(error, MissingBaseURLError):
        return (
            "**Ollama API base URL not found**. "
            f"Please [follow the link]({DeepLink.BASE_URL.url(scheme)}) to add and try again."
        )

    if isinstance(error, MissingSecretKeyError):
        return (
            f"**Secret key not found** for {provider.display_name} API. "
            f"Please [follow the link]({DeepLink.SECRET_KEY.url(scheme)}) to add a brand new one."
        )

    if isinstance(error, InvalidSecretKeyError):
        return (
            "**The secret key you entered is incorrect**. "
            f"Please [follow the link]({DeepLink.SECRET_KEY.url(scheme)}) to change it and try again."
        )

    if isinstance(error, MissingModelError):
        return (
            "**Model selection is essential for proceeding**. "
            f"Please [follow the link]({DeepLink.MODEL.url(scheme)}) "
            "to select a model that meets your needs."
        )

    if isinstance(error, MissingAIMessageError):
        return (
            "I couldn't find any suitable options for your request. "
            "Please try rephrasing your query or providing more context."
        )

    if isinstance(error, NoConnectionError):
        return (
            "**No network connection detected.** "
            "Please ensure you have a stable internet connection and try again"
        )

    return GENERIC_ERROR_MESSAGE
