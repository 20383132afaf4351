"""Export service for rendering chat transcripts as plain text."""

from datetime import datetime
from typing import Optional, Sequence

from application.models import ChatMessage, MessageRole

EXPORT_HEADING = "AI Chat Export"
UNTITLED = "Untitled"
SEPARATOR = "=" * 40


class ExportService:
    """Service for exporting chat sessions."""

    @staticmethod
    def display_role(role: str) -> str:
        return "You" if role == MessageRole.user.value else "AI Assistant"

    @staticmethod
    def render_transcript(
        title: Optional[str],
        messages: Sequence[ChatMessage],
        exported_at: datetime,
    ) -> str:
        """
        Render a session transcript for download.

        Args:
            title: Session title; a placeholder is used when missing
            messages: Messages oldest first
            exported_at: Timestamp printed in the header

        Returns:
            Plain-text document, one "<Role>: <content>" paragraph per message
        """
        lines = [
            EXPORT_HEADING,
            f"Title: {title or UNTITLED}",
            f"Exported: {exported_at.strftime('%Y-%m-%d %H:%M:%S')}",
            SEPARATOR,
            "",
        ]
        for m in messages:
            lines.append(f"{ExportService.display_role(m.role)}: {m.content}")
            lines.append("")
        return "\n".join(lines) + "\n"
