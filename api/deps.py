"""
FastAPI Dependency Providers for the Chat Session API.

This module provides FastAPI dependency injection functions that return
interface types (Protocols) rather than concrete implementations.

Architecture:
- Settings, the Database handle and the completion gateway live on
  app.state and are created once by the app factory
- Repositories are instantiated per-request over the shared Database
- Use cases are wired through dependency chains
"""

from fastapi import Depends, Request

from application.ports.chat_session_repository import ChatSessionRepository
from application.ports.completion_gateway import CompletionGateway
from application.use_cases.export_session import ExportSessionUseCase
from application.use_cases.manage_sessions import ManageSessionsUseCase
from application.use_cases.send_message import SendMessageUseCase
from backend.services.completion_client import completion_config_from_settings
from backend.settings import Settings
from infrastructure.db.chat_session_repository import SqlChatSessionRepository
from infrastructure.db.database import Database


# =============================================================================
# Settings / Infrastructure Providers
# =============================================================================


def get_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings


def get_database(request: Request) -> Database:
    """Shared Database handle opened at startup."""
    return request.app.state.database


def get_completion_gateway(request: Request) -> CompletionGateway:
    """Completion provider client built by the app factory."""
    return request.app.state.completion_gateway


# =============================================================================
# Repository Providers
# =============================================================================


def get_chat_session_repository(
    database: Database = Depends(get_database),
) -> ChatSessionRepository:
    return SqlChatSessionRepository(database)


# =============================================================================
# Use Case Providers
# =============================================================================


def get_manage_sessions_use_case(
    session_repo: ChatSessionRepository = Depends(get_chat_session_repository),
) -> ManageSessionsUseCase:
    return ManageSessionsUseCase(session_repo)


def get_export_session_use_case(
    session_repo: ChatSessionRepository = Depends(get_chat_session_repository),
) -> ExportSessionUseCase:
    return ExportSessionUseCase(session_repo)


def get_send_message_use_case(
    session_repo: ChatSessionRepository = Depends(get_chat_session_repository),
    gateway: CompletionGateway = Depends(get_completion_gateway),
    settings: Settings = Depends(get_settings),
) -> SendMessageUseCase:
    return SendMessageUseCase(
        session_repo=session_repo,
        gateway=gateway,
        config=completion_config_from_settings(settings),
        history_window=settings.history_window,
    )
