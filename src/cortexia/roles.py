from enum import Enum


class Role(str, Enum):
    """Author of a chat message, as sent on the wire."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
