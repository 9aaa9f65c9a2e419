# =============================================================================
# app/routers/users.py - User Endpoints
# =============================================================================
# Social login is public; everything else requires authentication.
# A caller may only modify or delete their own user; any other id is
# reported as not found.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from app.auth import AuthUser, get_current_user
from app.dependencies import UserServiceDep
from app.exceptions import NotFoundError
from app.responses import created, no_content, pagination_meta, success
from core.models.common import PaginationParams
from core.models.user import FacebookLoginRequest, UserUpdateRequest
from core.services.user_service import USER_NOT_FOUND

router = APIRouter()

UserIdPath = Annotated[UUID, Path(description="User UUID")]


def _require_self(user_id: UUID, caller: AuthUser) -> None:
    if user_id != caller.id:
        raise NotFoundError(USER_NOT_FOUND)


@router.post("/facebook")
async def facebook_login(request: FacebookLoginRequest, users: UserServiceDep):
    """
    Create or get a user via Facebook login.

    Idempotent on (provider, provider_user_id): 201 when the user was just
    created, 200 when it already existed.
    """
    result = users.create_or_get_user_by_identity(request)

    if result.is_new_user:
        return created(result.to_payload())
    return success(result.to_payload())


@router.get("")
async def list_users(
    users: UserServiceDep,
    pagination: Annotated[PaginationParams, Query()],
    user: AuthUser = Depends(get_current_user),
):
    """List users with limit/offset pagination."""
    page = users.list_users(limit=pagination.limit, offset=pagination.offset)

    return success(
        [u.model_dump(mode="json") for u in page.users],
        meta=pagination_meta(pagination.limit, pagination.offset, page.total),
    )


@router.get("/me")
async def get_me(users: UserServiceDep, user: AuthUser = Depends(get_current_user)):
    """The authenticated caller's own user row."""
    return success(users.get_user(user.id).model_dump(mode="json"))


@router.get("/{user_id}")
async def get_user(
    user_id: UserIdPath,
    users: UserServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    return success(users.get_user(user_id).model_dump(mode="json"))


@router.post("/{user_id}")
async def update_user(
    user_id: UserIdPath,
    request: UserUpdateRequest,
    users: UserServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Rename the caller's own user."""
    _require_self(user_id, user)
    return success(users.update_user(user_id, request).model_dump(mode="json"))


@router.delete("/{user_id}")
async def delete_user(
    user_id: UserIdPath,
    users: UserServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Delete the caller's own user.

    Businesses, menus and identities are removed by the database cascade;
    menu images are removed from storage explicitly.
    """
    _require_self(user_id, user)
    users.delete_user(user_id)
    return no_content()
