"""Domain models for chat sessions and their messages."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

PLACEHOLDER_TITLE = "New Chat"
TITLE_MAX_LENGTH = 30


class MessageRole(str, Enum):
    user = "user"
    assistant = "assistant"
    # Synthesized for the completion request only, never persisted.
    system = "system"


def derive_title(content: str) -> str:
    """Title for a session taken from its first user message."""
    if len(content) > TITLE_MAX_LENGTH:
        return content[:TITLE_MAX_LENGTH] + "..."
    return content


@dataclass(frozen=True)
class ChatSession:
    id: str
    title: Optional[str]
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True)
class ChatMessage:
    id: int
    session_id: str
    role: str
    content: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
