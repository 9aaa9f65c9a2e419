# =============================================================================
# app/routers/identities.py - User Identity Endpoints
# =============================================================================
# POST links a Facebook identity to an existing user. When an Authorization
# header is present it must carry a Firebase ID token whose uid matches
# provider_user_id. GET and DELETE require Supabase authentication and only
# see the caller's own identities.
# =============================================================================

import logging
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, get_bearer_token, get_current_user
from app.dependencies import IdentityServiceDep
from app.exceptions import UnauthorizedError
from app.responses import created, no_content, success
from core.models.user import IdentityCreateRequest

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def create_user_identity(
    request: IdentityCreateRequest,
    identities: IdentityServiceDep,
    token: Optional[str] = Depends(get_bearer_token),
):
    """
    Create a user identity, with optional Firebase token verification.

    Returns 501 if a token is sent but Firebase is not configured.
    """
    if token:
        verified = identities.verify_token(token)
        if verified.uid != request.provider_user_id:
            logger.warning(f"Token uid {verified.uid} does not match provider_user_id")
            raise UnauthorizedError("Token UID does not match provider user ID")

    identity = identities.create_identity(request)
    return created(identity.model_dump(mode="json"))


@router.get("/{identity_id}")
async def get_user_identity(
    identity_id: Annotated[UUID, Path(description="User identity UUID")],
    identities: IdentityServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """One of the caller's own identities; any other id is not found."""
    identity = identities.get_identity(identity_id, user.id)
    return success(identity.model_dump(mode="json"))


@router.delete("/{identity_id}")
async def delete_user_identity(
    identity_id: Annotated[UUID, Path(description="User identity UUID")],
    identities: IdentityServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    identities.delete_identity(identity_id, user.id)
    return no_content()
