"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """
    Register command - represents validated sign-up intent

    Created by API layer after request validation passes.
    Contains only business-relevant data (no HTTP concerns).
    """

    email: str
    user_name: str
    password: str
    full_name: str = ""
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class LoginCommand(BaseModel):
    """Identifier is either an email address or a user name"""

    identifier: str
    password: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


class GoogleLoginCommand(BaseModel):
    id_token: str
    user_agent: Optional[str] = None
    ip_address: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class UserInfo(BaseModel):
    """User information in authentication responses"""

    id: str
    email: str
    user_name: str
    full_name: str
    avatar: Optional[str] = None
    role: str
    email_verified: bool


class AuthResponse(BaseModel):
    """
    Response for register, login and Google login

    Carries both tokens; the API layer decides whether they travel in the
    body or in cookies.
    """

    user: UserInfo
    access_token: str
    refresh_token: str
    session_id: str
    access_token_expires_in: int
    refresh_token_expires_at: datetime


class RefreshTokenResponse(BaseModel):
    """Response for refresh token use case"""

    access_token: str
    refresh_token: str
    session_id: str
    access_token_expires_in: int


class LogoutResponse(BaseModel):
    """Response for logout and logout-all"""

    status: str
    message: str
    revoked_count: int = 0


class VerifyEmailResponse(BaseModel):
    """Response for email verification use case"""

    status: str
    message: str


class ResendVerificationResponse(BaseModel):
    """Response for resend verification email use case"""

    status: str
    message: str


class RequestPasswordResetResponse(BaseModel):
    """Response for request password reset use case"""

    status: str
    message: str


class ConfirmPasswordResetResponse(BaseModel):
    """Response for confirm password reset use case"""

    status: str
    message: str


class ChangePasswordResponse(BaseModel):
    """Response for change password use case"""

    status: str
    message: str
    revoked_count: int
