"""
User Management Use Cases

Profile and session management for the signed-in user.
"""

from .load_context_use_case import LoadContextUseCase
from .revoke_sessions_use_case import (
    ListSessionsUseCase,
    RevokeSessionsResponse,
    RevokeSessionsUseCase,
    SessionInfo,
)

__all__ = [
    "LoadContextUseCase",
    "ListSessionsUseCase",
    "RevokeSessionsUseCase",
    "RevokeSessionsResponse",
    "SessionInfo",
]
