"""Bounds the conversation context sent to the completion provider."""

from typing import Dict, List, Sequence

from application.models import ChatMessage, MessageRole

DEFAULT_HISTORY_WINDOW = 15

SYSTEM_PROMPT = (
    "You are a helpful, detailed, and enthusiastic AI assistant. "
    "Provide comprehensive and thorough responses while maintaining "
    "natural conversation flow."
)


def window_history(
    history: Sequence[ChatMessage],
    limit: int = DEFAULT_HISTORY_WINDOW,
    system_prompt: str = SYSTEM_PROMPT,
) -> List[Dict[str, str]]:
    """Return the system prompt followed by the last ``limit`` messages.

    ``history`` must already be in conversation order (oldest first);
    the kept messages are returned in that same order.
    """
    recent = list(history[-limit:]) if limit > 0 else []
    return [{"role": MessageRole.system.value, "content": system_prompt}] + [
        {"role": m.role, "content": m.content} for m in recent
    ]
