from fastapi import APIRouter, Depends, status

from src.api.error import to_http_error
from src.app.services.token_codec import AccessTokenClaims
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import UserInfo
from src.app.use_cases.users import LoadContextUseCase
from src.depends import get_current_user, get_unit_of_work

router = APIRouter(tags=["User"])


@router.get("/me", status_code=status.HTTP_200_OK, response_model=UserInfo)
async def get_me(
    current_user: AccessTokenClaims = Depends(get_current_user),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Load Current User

    Returns the profile of the user behind the access token.

    Raises:
        - 401 Unauthorized: Invalid, expired or revoked token
        - 404 Not Found: User deleted since the token was issued
    """
    result = await LoadContextUseCase(uow).execute(current_user.user_uuid)

    if result.is_err():
        raise to_http_error(result.error, {"USER_NOT_FOUND": status.HTTP_404_NOT_FOUND})

    return result.value
