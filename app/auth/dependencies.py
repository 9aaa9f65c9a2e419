# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication.
#
# Bearer tokens are checked against Supabase Auth itself (auth.get_user), so
# token signing keys never have to be configured here. On success the caller's
# row in the users table is created if it doesn't exist yet.
#
# Usage:
#   from app.auth import get_current_user, AuthUser
#
#   @router.get("/protected")
#   async def protected(user: AuthUser = Depends(get_current_user)):
#       return {"user_id": user.id}
# =============================================================================

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.models import AuthUser
from app.dependencies import SupabaseDep, UserServiceDep
from app.exceptions import ApiError, UnauthorizedError

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must produce our 401 envelope
security = HTTPBearer(auto_error=False)


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Optional[str]:
    """Raw bearer token, or None when the header is absent or not Bearer."""
    if credentials is None:
        return None
    return credentials.credentials


async def get_current_user(
    client: SupabaseDep,
    users: UserServiceDep,
    token: Optional[str] = Depends(get_bearer_token),
) -> AuthUser:
    """
    Validate the bearer token with Supabase Auth and return the caller.

    This dependency:
    1. Requires an `Authorization: Bearer <token>` header
    2. Asks Supabase Auth who the token belongs to
    3. Provisions the caller's users row if missing (failures are logged,
       not raised)
    4. Returns an AuthUser

    Raises:
        UnauthorizedError: 401 if the header is missing or the token is rejected
    """
    if not token:
        raise UnauthorizedError("Missing or invalid authorization header")

    try:
        response = client.auth.get_user(token)
    except Exception as e:
        logger.warning(f"Token validation failed: {e}")
        raise UnauthorizedError("Invalid or expired token") from e

    auth_user = getattr(response, "user", None)
    if auth_user is None or not getattr(auth_user, "id", None):
        raise UnauthorizedError("Invalid or expired token")

    try:
        user_id = UUID(str(auth_user.id))
    except ValueError as e:
        logger.warning(f"Invalid user id from auth service: {auth_user.id}")
        raise UnauthorizedError("Invalid token: malformed user ID") from e

    metadata = getattr(auth_user, "user_metadata", None) or {}
    name = metadata.get("name")

    try:
        users.ensure_profile(user_id, name)
    except ApiError as e:
        # Token is valid; the request proceeds without a profile row
        logger.error(f"Failed to provision profile for {user_id}: {e}")

    logger.debug(f"Authenticated user: {user_id}")
    return AuthUser(id=user_id, email=getattr(auth_user, "email", None), name=name)
