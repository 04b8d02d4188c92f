"""
Authentication Use Cases

All authentication-related business logic.
"""

from .register_use_case import RegisterUseCase
from .login_use_case import LoginUseCase
from .refresh_token_use_case import RefreshTokenUseCase
from .logout_use_case import LogoutAllUseCase, LogoutUseCase
from .google_auth_use_case import GoogleAuthUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .resend_verification_use_case import ResendVerificationUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .change_password_use_case import ChangePasswordUseCase
from .dtos import (
    AuthResponse,
    ChangePasswordResponse,
    ConfirmPasswordResetResponse,
    GoogleLoginCommand,
    LoginCommand,
    LogoutResponse,
    RefreshTokenResponse,
    RegisterCommand,
    RequestPasswordResetResponse,
    ResendVerificationResponse,
    UserInfo,
    VerifyEmailResponse,
)

__all__ = [
    # Use Cases
    "RegisterUseCase",
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
    # DTOs - Commands
    "RegisterCommand",
    "LoginCommand",
    "GoogleLoginCommand",
    # DTOs - Responses
    "AuthResponse",
    "RefreshTokenResponse",
    "LogoutResponse",
    "VerifyEmailResponse",
    "ResendVerificationResponse",
    "RequestPasswordResetResponse",
    "ConfirmPasswordResetResponse",
    "ChangePasswordResponse",
    # DTOs - Nested Models
    "UserInfo",
]
