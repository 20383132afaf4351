"""Use case: run one chat turn.

Orchestrates: validate -> persist user message -> window history ->
completion -> persist assistant message.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from application.errors import GatewayError, ValidationError
from application.models import MessageRole
from application.ports.chat_session_repository import ChatSessionRepository
from application.ports.completion_gateway import CompletionConfig, CompletionGateway
from backend.services.history_window import (
    DEFAULT_HISTORY_WINDOW,
    SYSTEM_PROMPT,
    window_history,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendMessageResult:
    session_id: str
    reply: str
    tokens_used: int


class SendMessageUseCase:
    """Core chat turn orchestration."""

    def __init__(
        self,
        session_repo: ChatSessionRepository,
        gateway: CompletionGateway,
        config: CompletionConfig,
        history_window: int = DEFAULT_HISTORY_WINDOW,
        system_prompt: str = SYSTEM_PROMPT,
    ) -> None:
        self._session_repo = session_repo
        self._gateway = gateway
        self._config = config
        self._history_window = history_window
        self._system_prompt = system_prompt

    def execute(self, session_id: str, text: Optional[str]) -> SendMessageResult:
        """Send a user message and return the assistant's reply.

        The user message is persisted before the provider is called and
        stays persisted if the call fails, so re-sending after a failure
        stores the user turn twice.

        Raises:
            ValidationError: text is missing or blank (nothing is written).
            StorageError: the session store failed.
            GatewayError: the completion provider failed.
        """
        if text is None or not str(text).strip():
            raise ValidationError("Message is required")

        # 1. First-message detection drives title derivation
        existing = self._session_repo.get_history(session_id)
        is_first_message = len(existing) == 0

        # 2. Persist user turn
        self._session_repo.append_message(
            session_id, MessageRole.user.value, text, is_first_message
        )

        # 3. Build the bounded context from the store
        history = self._session_repo.get_history(session_id)
        messages = window_history(history, self._history_window, self._system_prompt)
        logger.info(
            "Sending %d messages to completion provider for session %s",
            len(messages),
            session_id,
        )

        # 4. Completion
        try:
            result = self._gateway.complete(messages, self._config)
        except GatewayError as e:
            logger.error(
                "Completion failed for session %s (%s): %s",
                session_id,
                e.kind.value,
                e.message,
            )
            raise

        # 5. Persist assistant turn
        self._session_repo.append_message(
            session_id, MessageRole.assistant.value, result.text, False
        )
        logger.info("Session %s reply stored, tokens used: %d", session_id, result.total_tokens)

        return SendMessageResult(
            session_id=session_id,
            reply=result.text,
            tokens_used=result.total_tokens,
        )
