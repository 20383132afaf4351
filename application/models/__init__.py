"""Application domain models for chat sessions."""

from .chat import (
    PLACEHOLDER_TITLE,
    TITLE_MAX_LENGTH,
    ChatMessage,
    ChatSession,
    MessageRole,
    derive_title,
)

__all__ = [
    "PLACEHOLDER_TITLE",
    "TITLE_MAX_LENGTH",
    "ChatMessage",
    "ChatSession",
    "MessageRole",
    "derive_title",
]
