"""Chat session endpoints.

GET    /api/chats                      lists sessions, most recently active first.
GET    /api/chats/{session_id}         returns a session's messages, oldest first.
POST   /api/chats/new                  creates an empty session.
POST   /api/chats/{session_id}/message runs one chat turn.
DELETE /api/chats/{session_id}         deletes a session and its messages.
GET    /api/chats/{session_id}/export  downloads the transcript as text.

Every failure is returned as ``{"error": "<message>"}``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from api.deps import (
    get_export_session_use_case,
    get_manage_sessions_use_case,
    get_send_message_use_case,
)
from application.errors import (
    GatewayError,
    GatewayErrorKind,
    StorageError,
    ValidationError,
)
from application.use_cases.export_session import ExportSessionUseCase
from application.use_cases.manage_sessions import ManageSessionsUseCase
from application.use_cases.send_message import SendMessageUseCase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chats", tags=["chats"])

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment and try again."
QUOTA_MESSAGE = "API quota exceeded. Please check your Groq account."


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


class SendMessageRequest(BaseModel):
    """Request body for a chat turn."""

    message: Optional[str] = None


@router.get("")
def list_chats(
    use_case: ManageSessionsUseCase = Depends(get_manage_sessions_use_case),
):
    """List all chat sessions ordered by updated_at DESC."""
    try:
        sessions = use_case.list_sessions()
    except StorageError as e:
        logger.error("Error loading chats: %s", e)
        return _error(500, "Failed to load chats")
    return {"sessions": [s.to_dict() for s in sessions]}


@router.post("/new")
def create_chat(
    use_case: ManageSessionsUseCase = Depends(get_manage_sessions_use_case),
):
    """Create a new session with the placeholder title."""
    try:
        session_id, title = use_case.create_session()
    except StorageError as e:
        logger.error("Error creating chat: %s", e)
        return _error(500, "Failed to create chat")
    return {"sessionId": session_id, "title": title}


@router.get("/{session_id}")
def get_chat(
    session_id: str,
    use_case: ManageSessionsUseCase = Depends(get_manage_sessions_use_case),
):
    """Get messages for a session in conversation order.

    Unknown sessions return an empty list rather than 404.
    """
    try:
        messages = use_case.get_history(session_id)
    except StorageError as e:
        logger.error("Error loading chat %s: %s", session_id, e)
        return _error(500, "Failed to load chat")
    return {"messages": [m.to_dict() for m in messages]}


@router.post("/{session_id}/message")
def send_message(
    session_id: str,
    body: Optional[SendMessageRequest] = None,
    use_case: SendMessageUseCase = Depends(get_send_message_use_case),
):
    """Send a user message and return the assistant reply.

    Returns:
        {"response", "sessionId", "tokensUsed"} on success.
        400 for a missing/blank message, 429 when the provider reports a
        rate-limit or quota condition, 500 otherwise.
    """
    logger.info("Processing message in session %s", session_id)
    try:
        result = use_case.execute(session_id, body.message if body else None)
    except ValidationError as e:
        return _error(400, str(e))
    except GatewayError as e:
        if e.is_throttled:
            if e.kind == GatewayErrorKind.QUOTA_EXCEEDED:
                return _error(429, QUOTA_MESSAGE)
            return _error(429, RATE_LIMIT_MESSAGE)
        return _error(500, f"AI service error: {e.message}")
    except StorageError as e:
        logger.error("Storage error in session %s: %s", session_id, e)
        return _error(500, "Failed to save message")
    except Exception as e:
        logger.exception("Unexpected error in session %s", session_id)
        return _error(500, f"AI service error: {e}")

    return {
        "response": result.reply,
        "sessionId": result.session_id,
        "tokensUsed": result.tokens_used,
    }


@router.delete("/{session_id}")
def delete_chat(
    session_id: str,
    use_case: ManageSessionsUseCase = Depends(get_manage_sessions_use_case),
):
    """Delete a session and all of its messages. Unknown IDs succeed."""
    try:
        use_case.delete_session(session_id)
    except StorageError as e:
        logger.error("Error deleting chat %s: %s", session_id, e)
        return _error(500, "Failed to delete chat")
    return {"message": "Chat deleted successfully"}


@router.get("/{session_id}/export")
def export_chat(
    session_id: str,
    use_case: ExportSessionUseCase = Depends(get_export_session_use_case),
):
    """Download the session transcript as a text attachment."""
    try:
        text = use_case.execute(session_id)
    except StorageError as e:
        logger.error("Export error for %s: %s", session_id, e)
        return _error(500, "Export failed")
    return PlainTextResponse(
        content=text,
        headers={"Content-Disposition": f"attachment; filename=chat-{session_id}.txt"},
    )
