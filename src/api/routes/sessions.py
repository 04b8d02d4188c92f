from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.error import to_http_error
from src.app.services.session_manager import SessionManager
from src.app.services.token_codec import AccessTokenClaims
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.users import (
    ListSessionsUseCase,
    RevokeSessionsResponse,
    RevokeSessionsUseCase,
    SessionInfo,
)
from src.depends import get_current_user, get_session_manager, get_unit_of_work

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=List[SessionInfo])
async def list_sessions(
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    List Active Sessions

    Devices the user is signed in on, newest first. The session behind the
    current access token is flagged.
    """
    result = await ListSessionsUseCase(uow, sessions).execute(
        current_user.user_uuid, current_session_id=current_user.session_id
    )

    if result.is_err():
        raise to_http_error(result.error, {})

    return result.value


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionsResponse,
)
async def revoke_specific_session(
    session_id: str,
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Revoke Specific Session

    Logs out one device.

    Raises:
        - 404 Not Found: Session not found (or not the caller's)
        - 409 Conflict: Session already revoked
    """
    result = await RevokeSessionsUseCase(uow, sessions).revoke_specific_session(
        session_id, current_user.user_uuid
    )

    if result.is_err():
        raise to_http_error(
            result.error,
            {
                "SESSION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
                "SESSION_ALREADY_REVOKED": status.HTTP_409_CONFLICT,
            },
        )

    return result.value


class RevokeSelectedSessionsRequest(BaseModel):
    """Sessions to revoke; ids that are not the caller's are ignored"""

    session_ids: List[str] = Field(..., min_length=1, max_length=100)


@router.post(
    "/revoke",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionsResponse,
)
async def revoke_selected_sessions(
    body: RevokeSelectedSessionsRequest,
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
):
    result = await RevokeSessionsUseCase(uow, sessions).revoke_selected_sessions(
        body.session_ids, current_user.user_uuid
    )

    if result.is_err():
        raise to_http_error(result.error, {"VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST})

    return result.value


@router.post(
    "/revoke-others",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionsResponse,
)
async def revoke_other_sessions(
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Revoke All Other Sessions

    Logs out every device except the one making the request.

    Raises:
        - 404 Not Found: Access token does not name a live session
    """
    result = await RevokeSessionsUseCase(uow, sessions).revoke_all_except_current(
        current_user.session_id, current_user.user_uuid
    )

    if result.is_err():
        raise to_http_error(result.error, {"SESSION_NOT_FOUND": status.HTTP_404_NOT_FOUND})

    return result.value
