"""Port interface for chat session and message persistence."""

from typing import List, Optional, Protocol

from application.models import ChatMessage, ChatSession


class ChatSessionRepository(Protocol):
    """Repository protocol for chat sessions and their messages.

    Implementations raise StorageError for any persistence fault.
    """

    def list_sessions(self) -> List[ChatSession]:
        """List all sessions, most recently active first."""
        ...

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        """Get a session by ID, or None if it does not exist."""
        ...

    def get_history(self, session_id: str) -> List[ChatMessage]:
        """List messages for a session, oldest first.

        Unknown sessions return an empty list, same as empty sessions.
        """
        ...

    def create_session(self) -> str:
        """Create a session with the placeholder title and return its ID."""
        ...

    def append_message(
        self,
        session_id: str,
        role: str,
        content: str,
        is_first_message: bool = False,
    ) -> ChatMessage:
        """Persist a message and bump the session's updated_at atomically.

        When is_first_message is set, the session title is derived from
        content and the session row is inserted if absent.
        """
        ...

    def delete_session(self, session_id: str) -> None:
        """Delete a session and all its messages. Unknown IDs are a no-op."""
        ...
