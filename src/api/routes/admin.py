"""
Admin API Routes - Maintenance Endpoints

These endpoints are for internal callers (e.g., a cron job).
Authentication is via Admin API Key, not user tokens.
"""

from fastapi import APIRouter, Depends, status

from src.api.error import to_http_error
from src.api.utils.admin_auth import verify_admin_api_key
from src.app.services.session_manager import SessionManager
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.admin import (
    CleanupExpiredSessionsResponse,
    CleanupExpiredSessionsUseCase,
)
from src.depends import get_session_manager, get_unit_of_work

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/sessions/cleanup",
    status_code=status.HTTP_200_OK,
    response_model=CleanupExpiredSessionsResponse,
    dependencies=[Depends(verify_admin_api_key)],
)
async def cleanup_expired_sessions(
    uow: UnitOfWork = Depends(get_unit_of_work),
    sessions: SessionManager = Depends(get_session_manager),
):
    """
    Cleanup Expired Sessions

    Hard-deletes sessions past their expiry. Safe to run repeatedly.

    Requires: X-Admin-API-Key header

    Raises:
        - 401 Unauthorized: Missing or invalid admin API key
    """
    result = await CleanupExpiredSessionsUseCase(uow, sessions).execute()

    if result.is_err():
        raise to_http_error(result.error, {})

    return result.value
