"""Use case: export a session transcript as plain text."""

from datetime import datetime
from typing import Optional

from application.ports.chat_session_repository import ChatSessionRepository
from backend.services.export_service import ExportService


class ExportSessionUseCase:
    def __init__(self, session_repo: ChatSessionRepository) -> None:
        self._session_repo = session_repo

    def execute(self, session_id: str, exported_at: Optional[datetime] = None) -> str:
        """Render the transcript; unknown sessions export with no messages."""
        session = self._session_repo.get_session(session_id)
        messages = self._session_repo.get_history(session_id)
        return ExportService.render_transcript(
            title=session.title if session else None,
            messages=messages,
            exported_at=exported_at or datetime.now(),
        )
