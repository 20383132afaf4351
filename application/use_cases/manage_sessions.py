"""Use case: create, list, read and delete chat sessions."""

import logging
from typing import List, Tuple

from application.models import PLACEHOLDER_TITLE, ChatMessage, ChatSession
from application.ports.chat_session_repository import ChatSessionRepository

logger = logging.getLogger(__name__)


class ManageSessionsUseCase:
    """Thin orchestration over the session store; holds no state."""

    def __init__(self, session_repo: ChatSessionRepository) -> None:
        self._session_repo = session_repo

    def list_sessions(self) -> List[ChatSession]:
        return self._session_repo.list_sessions()

    def get_history(self, session_id: str) -> List[ChatMessage]:
        # Unknown sessions read as empty; callers can't tell them apart.
        return self._session_repo.get_history(session_id)

    def create_session(self) -> Tuple[str, str]:
        """Create a session; returns (session_id, title)."""
        session_id = self._session_repo.create_session()
        logger.info("Created chat session %s", session_id)
        return session_id, PLACEHOLDER_TITLE

    def delete_session(self, session_id: str) -> None:
        """Delete a session and its messages. Idempotent."""
        self._session_repo.delete_session(session_id)
