"""
Router package for the Chat Session API.

This package contains all API routers organized by domain:
- health: Health check endpoints
- chats: Chat session, message and export endpoints
"""

from api.routers.health import router as health_router
from api.routers.chats import router as chats_router

__all__ = [
    "health_router",
    "chats_router",
]
