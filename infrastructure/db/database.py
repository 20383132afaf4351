"""
Database handle for the session store.

Owns the SQLAlchemy engine and hands out transactional units of work.
The handle has an explicit lifecycle: the app factory opens it at startup
and closes it at shutdown.

Usage:
    database = Database("sqlite:///./chat.db")
    database.open()
    with database.session_scope() as session:
        session.add(...)
    database.close()
"""

import logging
from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import Engine, create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from infrastructure.db.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Engine lifecycle plus commit/rollback scoped sessions."""

    def __init__(self, url: str, echo: bool = False) -> None:
        self._url = url
        self._echo = echo
        self._engine: Optional[Engine] = None
        self._sessionmaker: Optional[sessionmaker] = None

    @property
    def url(self) -> str:
        return self._url

    @property
    def safe_url(self) -> str:
        """URL with any password masked, for logging."""
        return make_url(self._url).render_as_string(hide_password=True)

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> None:
        """Create the engine and the tables if they don't exist yet."""
        if self._engine is not None:
            return

        kwargs = {"echo": self._echo}
        url = make_url(self._url)
        if url.get_backend_name() == "sqlite":
            # Requests run in a threadpool and share the engine.
            kwargs["connect_args"] = {"check_same_thread": False}
            if url.database in (None, "", ":memory:"):
                kwargs["poolclass"] = StaticPool

        self._engine = create_engine(self._url, **kwargs)
        Base.metadata.create_all(self._engine)
        self._sessionmaker = sessionmaker(bind=self._engine, expire_on_commit=False)
        logger.info("Session store opened: %s", self.safe_url)

    def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Session store closed")

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Context manager for a single transaction.

        Commits when the block exits normally, rolls back on any exception.

        Usage:
            with database.session_scope() as session:
                session.execute(...)
        """
        if self._sessionmaker is None:
            raise RuntimeError("Database is not open")
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ping(self) -> None:
        """Run a trivial query; raises if the database is unreachable."""
        with self.session_scope() as session:
            session.execute(text("SELECT 1"))
