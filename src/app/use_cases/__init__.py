"""
Use Cases

Organized into domain folders:
- auth/: Authentication flows
- users/: Profile and session management
- admin/: Maintenance operations

Import from subdirectories for better organization.
"""

from .auth import (
    RegisterUseCase,
    RegisterCommand,
    AuthResponse,
    LoginUseCase,
    RefreshTokenUseCase,
    LogoutUseCase,
    LogoutAllUseCase,
    GoogleAuthUseCase,
    VerifyEmailUseCase,
    ResendVerificationUseCase,
    RequestPasswordResetUseCase,
    ConfirmPasswordResetUseCase,
    ChangePasswordUseCase,
)
from .users import (
    LoadContextUseCase,
    ListSessionsUseCase,
    RevokeSessionsUseCase,
)
from .admin import (
    CleanupExpiredSessionsUseCase,
)

__all__ = [
    # Auth
    "RegisterUseCase",
    "RegisterCommand",
    "AuthResponse",
    "LoginUseCase",
    "RefreshTokenUseCase",
    "LogoutUseCase",
    "LogoutAllUseCase",
    "GoogleAuthUseCase",
    "VerifyEmailUseCase",
    "ResendVerificationUseCase",
    "RequestPasswordResetUseCase",
    "ConfirmPasswordResetUseCase",
    "ChangePasswordUseCase",
    # Users
    "LoadContextUseCase",
    "ListSessionsUseCase",
    "RevokeSessionsUseCase",
    # Admin
    "CleanupExpiredSessionsUseCase",
]
