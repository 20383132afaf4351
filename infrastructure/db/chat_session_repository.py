"""SQLAlchemy implementation of ChatSessionRepository."""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from application.errors import StorageError
from application.models import PLACEHOLDER_TITLE, ChatMessage, ChatSession, derive_title
from infrastructure.db.database import Database
from infrastructure.db.models import ChatSessionRecord, MessageRecord, utcnow

logger = logging.getLogger(__name__)


def _to_session(record: ChatSessionRecord) -> ChatSession:
    return ChatSession(
        id=record.id,
        title=record.title,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _to_message(record: MessageRecord) -> ChatMessage:
    return ChatMessage(
        id=record.id,
        session_id=record.session_id,
        role=record.role,
        content=record.content,
        timestamp=record.timestamp,
    )


class SqlChatSessionRepository:
    """SQLAlchemy-backed chat session repository.

    Every method runs in its own transaction and converts
    SQLAlchemyError into StorageError naming the operation.
    """

    def __init__(self, database: Database) -> None:
        self._db = database

    def list_sessions(self) -> List[ChatSession]:
        try:
            with self._db.session_scope() as session:
                records = session.scalars(
                    select(ChatSessionRecord).order_by(
                        ChatSessionRecord.updated_at.desc(),
                        ChatSessionRecord.created_at.desc(),
                    )
                ).all()
                return [_to_session(r) for r in records]
        except SQLAlchemyError as e:
            raise StorageError("list_sessions", e) from e

    def get_session(self, session_id: str) -> Optional[ChatSession]:
        try:
            with self._db.session_scope() as session:
                record = session.get(ChatSessionRecord, session_id)
                return _to_session(record) if record else None
        except SQLAlchemyError as e:
            raise StorageError("get_session", e) from e

    def get_history(self, session_id: str) -> List[ChatMessage]:
        try:
            with self._db.session_scope() as session:
                records = session.scalars(
                    select(MessageRecord)
                    .where(MessageRecord.session_id == session_id)
                    # autoincrement id is append order; timestamps can go backwards
                    .order_by(MessageRecord.id.asc())
                ).all()
                return [_to_message(r) for r in records]
        except SQLAlchemyError as e:
            raise StorageError("get_history", e) from e

    def create_session(self) -> str:
        session_id = str(uuid.uuid4())
        now = utcnow()
        try:
            with self._db.session_scope() as session:
                session.add(
                    ChatSessionRecord(
                        id=session_id,
                        title=PLACEHOLDER_TITLE,
                        created_at=now,
                        updated_at=now,
                    )
                )
        except SQLAlchemyError as e:
            raise StorageError("create_session", e) from e
        return session_id

    def append_message(
        self,
        session_id: str,
        role: str,
        content: str,
        is_first_message: bool = False,
    ) -> ChatMessage:
        now = utcnow()
        try:
            with self._db.session_scope() as session:
                # Row lock serializes writers on the same session (no-op on SQLite).
                record = session.scalars(
                    select(ChatSessionRecord)
                    .where(ChatSessionRecord.id == session_id)
                    .with_for_update()
                ).first()

                if record is not None:
                    record.updated_at = max(record.updated_at, now)
                    if is_first_message:
                        record.title = derive_title(content)
                elif is_first_message:
                    session.add(
                        ChatSessionRecord(
                            id=session_id,
                            title=derive_title(content),
                            created_at=now,
                            updated_at=now,
                        )
                    )
                    # Parent row must exist before the message on FK-enforcing backends.
                    session.flush()

                message = MessageRecord(
                    session_id=session_id,
                    role=str(getattr(role, "value", role)),
                    content=content,
                    timestamp=now,
                )
                session.add(message)
                session.flush()
                return _to_message(message)
        except SQLAlchemyError as e:
            raise StorageError("append_message", e) from e

    def delete_session(self, session_id: str) -> None:
        try:
            with self._db.session_scope() as session:
                session.execute(
                    delete(MessageRecord).where(MessageRecord.session_id == session_id)
                )
                result = session.execute(
                    delete(ChatSessionRecord).where(ChatSessionRecord.id == session_id)
                )
                if result.rowcount:
                    logger.info("Deleted chat session %s", session_id)
        except SQLAlchemyError as e:
            raise StorageError("delete_session", e) from e
