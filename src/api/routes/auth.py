from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import AliasChoices, BaseModel, EmailStr, Field

from config import ApplicationConfig
from src.api.error import to_http_error
from src.api.utils.cookies import (
    REFRESH_TOKEN_COOKIE,
    clear_auth_cookies,
    client_provenance,
    is_web_client,
    set_auth_cookies,
)
from src.app.services.email_sender import EmailSender
from src.app.services.google_identity import GoogleIdentityVerifier
from src.app.services.session_manager import SessionManager
from src.app.services.token_codec import AccessTokenClaims, TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import (
    AuthResponse,
    ChangePasswordResponse,
    ChangePasswordUseCase,
    ConfirmPasswordResetResponse,
    ConfirmPasswordResetUseCase,
    GoogleAuthUseCase,
    GoogleLoginCommand,
    LoginCommand,
    LoginUseCase,
    LogoutAllUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenUseCase,
    RegisterCommand,
    RegisterUseCase,
    RequestPasswordResetResponse,
    RequestPasswordResetUseCase,
    ResendVerificationResponse,
    ResendVerificationUseCase,
    UserInfo,
    VerifyEmailResponse,
    VerifyEmailUseCase,
)
from src.depends import (
    REFRESH_TOKEN_LIFETIME,
    get_current_user,
    get_email_sender,
    get_google_identity_verifier,
    get_session_manager,
    get_token_codec,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


class AuthHttpResponse(BaseModel):
    """
    Sign-in response body

    Tokens are left out for web clients, which receive them as cookies.
    """

    user: UserInfo
    session_id: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    access_token_expires_in: int
    refresh_token_expires_at: datetime


class RefreshHttpResponse(BaseModel):
    session_id: str
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    access_token_expires_in: int


def _deliver(
    request: Request,
    response: Response,
    access_token: str,
    refresh_token: str,
    codec: TokenCodec,
) -> dict:
    """Set cookies for web clients; returns the token fields for the body"""
    if is_web_client(request):
        set_auth_cookies(
            response,
            access_token,
            refresh_token,
            codec.access_ttl,
            REFRESH_TOKEN_LIFETIME,
            ApplicationConfig.ENVIRONMENT,
        )
        return {}
    return {"access_token": access_token, "refresh_token": refresh_token}


def _auth_body(
    request: Request, response: Response, auth: AuthResponse, codec: TokenCodec
) -> AuthHttpResponse:
    tokens = _deliver(request, response, auth.access_token, auth.refresh_token, codec)
    return AuthHttpResponse(
        user=auth.user,
        session_id=auth.session_id,
        access_token_expires_in=auth.access_token_expires_in,
        refresh_token_expires_at=auth.refresh_token_expires_at,
        **tokens,
    )


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    API layer responsibility: HTTP validation and serialization.
    """

    email: EmailStr = Field(..., description="User email address")
    user_name: str = Field(
        ..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.]+$", description="Public handle"
    )
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    full_name: str = Field("", max_length=255)


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=AuthHttpResponse,
    response_model_exclude_none=True,
)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
    codec: TokenCodec = Depends(get_token_codec),
    email_sender: EmailSender = Depends(get_email_sender),
):
    """
    User Registration

    Creates the account, sends a verification email and signs the user in.

    Raises:
        - 409 Conflict: Email or user name already taken
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    user_agent, ip_address = client_provenance(request)
    command = RegisterCommand(
        email=body.email,
        user_name=body.user_name,
        password=body.password,
        full_name=body.full_name,
        user_agent=user_agent,
        ip_address=ip_address,
    )

    result = await RegisterUseCase(uow, sessions, codec, email_sender).execute(command)

    if result.is_err():
        raise to_http_error(
            result.error,
            {
                "EMAIL_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
                "USERNAME_ALREADY_TAKEN": status.HTTP_409_CONFLICT,
                "INVALID_PASSWORD": status.HTTP_400_BAD_REQUEST,
            },
        )

    return _auth_body(request, response, result.value, codec)


class LoginRequest(BaseModel):
    """Login with email or user name"""

    identifier: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("identifier", "email", "user_name"),
        description="Email address or user name",
    )
    password: str = Field(..., description="User password")


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=AuthHttpResponse,
    response_model_exclude_none=True,
)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    User Login

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: Email not verified (only when verification is required)
    """
    user_agent, ip_address = client_provenance(request)
    command = LoginCommand(
        identifier=body.identifier,
        password=body.password,
        user_agent=user_agent,
        ip_address=ip_address,
    )

    use_case = LoginUseCase(
        uow,
        sessions,
        codec,
        require_email_verification=ApplicationConfig.REQUIRE_EMAIL_VERIFICATION,
        store_timeout=ApplicationConfig.STORE_TIMEOUT_SECONDS,
    )
    result = await use_case.execute(command)

    if result.is_err():
        raise to_http_error(
            result.error,
            {
                "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
                "EMAIL_NOT_VERIFIED": status.HTTP_403_FORBIDDEN,
            },
        )

    return _auth_body(request, response, result.value, codec)


class RefreshRequest(BaseModel):
    """Web clients may omit the body; the refresh cookie is used instead"""

    refresh_token: Optional[str] = Field(None, description="Refresh token")


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    response_model=RefreshHttpResponse,
    response_model_exclude_none=True,
)
async def refresh(
    request: Request,
    response: Response,
    body: Optional[RefreshRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Refresh Access Token

    Rotates the refresh token: the one presented stops working.

    Raises:
        - 401 Unauthorized: INVALID_REFRESH_TOKEN for any unknown, revoked,
          expired, superseded or malformed token
        - 503 Service Unavailable: session store unreachable, retry later
    """
    token = (body.refresh_token if body else None) or request.cookies.get(REFRESH_TOKEN_COOKIE)

    result = await RefreshTokenUseCase(uow, sessions, codec).execute(token or "")

    if result.is_err():
        raise to_http_error(
            result.error, {"INVALID_REFRESH_TOKEN": status.HTTP_401_UNAUTHORIZED}
        )

    refreshed = result.value
    tokens = _deliver(request, response, refreshed.access_token, refreshed.refresh_token, codec)
    return RefreshHttpResponse(
        session_id=refreshed.session_id,
        access_token_expires_in=refreshed.access_token_expires_in,
        **tokens,
    )


class LogoutRequest(BaseModel):
    # Anything that is not a string is treated as no token
    refresh_token: Optional[Any] = None


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Request,
    response: Response,
    body: Optional[LogoutRequest] = None,
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Logout

    Always succeeds. Revokes the session behind the refresh token when it
    can and clears the auth cookies either way.
    """
    token = body.refresh_token if body and isinstance(body.refresh_token, str) else None
    token = token or request.cookies.get(REFRESH_TOKEN_COOKIE)

    result = await LogoutUseCase(uow, sessions).execute(token)

    clear_auth_cookies(response, ApplicationConfig.ENVIRONMENT)
    return result.value


@router.post("/logout-all", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout_all(
    response: Response,
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
):
    """Logout from every device, this one included"""
    result = await LogoutAllUseCase(uow, sessions).execute(current_user.user_uuid)

    clear_auth_cookies(response, ApplicationConfig.ENVIRONMENT)
    return result.value


class GoogleLoginRequest(BaseModel):
    id_token: str = Field(..., min_length=1, description="Google ID token from the client SDK")


@router.post(
    "/google",
    status_code=status.HTTP_200_OK,
    response_model=AuthHttpResponse,
    response_model_exclude_none=True,
)
async def google_login(
    body: GoogleLoginRequest,
    request: Request,
    response: Response,
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
    codec: TokenCodec = Depends(get_token_codec),
    google: GoogleIdentityVerifier = Depends(get_google_identity_verifier),
):
    """
    Sign in with Google

    Raises:
        - 401 Unauthorized: ID token invalid or issued to another app
        - 403 Forbidden: Google account email not verified
    """
    user_agent, ip_address = client_provenance(request)
    command = GoogleLoginCommand(
        id_token=body.id_token, user_agent=user_agent, ip_address=ip_address
    )

    result = await GoogleAuthUseCase(uow, sessions, codec, google).execute(command)

    if result.is_err():
        raise to_http_error(
            result.error,
            {
                "INVALID_GOOGLE_TOKEN": status.HTTP_401_UNAUTHORIZED,
                "GOOGLE_EMAIL_NOT_VERIFIED": status.HTTP_403_FORBIDDEN,
                "USERNAME_ALREADY_TAKEN": status.HTTP_409_CONFLICT,
            },
        )

    return _auth_body(request, response, result.value, codec)


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., description="Email verification token")


VERIFY_EMAIL_ERRORS = {
    "INVALID_TOKEN": status.HTTP_400_BAD_REQUEST,
    "TOKEN_EXPIRED": status.HTTP_410_GONE,
}


@router.post("/verify-email", status_code=status.HTTP_200_OK, response_model=VerifyEmailResponse)
async def verify_email(body: VerifyEmailRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    Email Verification

    Raises:
        - 400 Bad Request: Invalid token
        - 410 Gone: Expired token
    """
    result = await VerifyEmailUseCase(uow).execute(body.token)

    if result.is_err():
        raise to_http_error(result.error, VERIFY_EMAIL_ERRORS)

    return result.value


@router.get(
    "/verify-email/{token}", status_code=status.HTTP_200_OK, response_model=VerifyEmailResponse
)
async def verify_email_link(token: str, uow: UnitOfWork = Depends(get_unit_of_work)):
    """Email Verification from the link in the email"""
    result = await VerifyEmailUseCase(uow).execute(token)

    if result.is_err():
        raise to_http_error(result.error, VERIFY_EMAIL_ERRORS)

    return result.value


class EmailRequest(BaseModel):
    email: EmailStr = Field(..., description="User email address")


@router.post(
    "/resend-verification",
    status_code=status.HTTP_200_OK,
    response_model=ResendVerificationResponse,
)
async def resend_verification(
    body: EmailRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_sender: EmailSender = Depends(get_email_sender),
):
    """Resend Verification Email. Same answer whether or not the email exists."""
    result = await ResendVerificationUseCase(uow, email_sender).execute(body.email)

    if result.is_err():
        raise to_http_error(result.error, {})

    return result.value


@router.post(
    "/forgot-password",
    status_code=status.HTTP_200_OK,
    response_model=RequestPasswordResetResponse,
)
async def forgot_password(
    body: EmailRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_sender: EmailSender = Depends(get_email_sender),
):
    """Request Password Reset. Same answer whether or not the email exists."""
    result = await RequestPasswordResetUseCase(uow, email_sender).execute(body.email)

    if result.is_err():
        raise to_http_error(result.error, {})

    return result.value


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., description="Password reset token from email")
    new_password: str = Field(..., description="New password (min 8 chars)")


@router.post(
    "/reset-password",
    status_code=status.HTTP_200_OK,
    response_model=ConfirmPasswordResetResponse,
)
async def reset_password(
    body: ResetPasswordRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Confirm Password Reset

    Sets the new password and signs the user out everywhere.

    Raises:
        - 400 Bad Request: Invalid token or weak password
        - 409 Conflict: Token already used
        - 410 Gone: Expired token
    """
    result = await ConfirmPasswordResetUseCase(uow, sessions).execute(
        body.token, body.new_password
    )

    if result.is_err():
        raise to_http_error(
            result.error,
            {
                "INVALID_TOKEN": status.HTTP_400_BAD_REQUEST,
                "TOKEN_EXPIRED": status.HTTP_410_GONE,
                "TOKEN_ALREADY_USED": status.HTTP_409_CONFLICT,
                "INVALID_PASSWORD": status.HTTP_400_BAD_REQUEST,
            },
        )

    return result.value


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str


@router.post(
    "/change-password",
    status_code=status.HTTP_200_OK,
    response_model=ChangePasswordResponse,
)
async def change_password(
    body: ChangePasswordRequest,
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
    email_sender: EmailSender = Depends(get_email_sender),
):
    """
    Change Password

    Other sessions are revoked; the current one stays signed in.

    Raises:
        - 400 Bad Request: Wrong current password or weak new password
        - 404 Not Found: User no longer exists
    """
    result = await ChangePasswordUseCase(uow, sessions, email_sender).execute(
        current_user.user_uuid,
        body.current_password,
        body.new_password,
        current_session_id=current_user.session_id,
    )

    if result.is_err():
        raise to_http_error(
            result.error,
            {
                "INVALID_CREDENTIALS": status.HTTP_400_BAD_REQUEST,
                "INVALID_PASSWORD": status.HTTP_400_BAD_REQUEST,
                "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
            },
        )

    return result.value
