# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Handles users, social login and lazy profile provisioning.
#
# Social login is idempotent on (provider, provider_user_id). Creating a new
# user takes two inserts that the store does not run atomically; when the
# identity insert fails the freshly created user row is deleted again before
# the error propagates.
# =============================================================================

import logging
from typing import TYPE_CHECKING, Any
from uuid import UUID

from supabase import Client

from app.exceptions import InternalError, NotFoundError
from core.models.user import (
    FacebookLoginRequest,
    LoginResult,
    User,
    UserIdentity,
    UserList,
    UserUpdateRequest,
)
from core.services.business_service import utc_now_iso
from lib.supabase_client import (
    BUSINESS_TABLE,
    USER_IDENTITIES_TABLE,
    USERS_TABLE,
    is_no_rows,
    is_unique_violation,
    translate_store_error,
)

if TYPE_CHECKING:
    from core.services.business_service import BusinessService

logger = logging.getLogger(__name__)

USER_NOT_FOUND = "User not found"
DEFAULT_PROFILE_NAME = "User"


class UserService:
    """
    Service for user management operations.

    Provides a clean interface between API routes and database.
    """

    def __init__(self, client: Client, businesses: "BusinessService | None" = None):
        self.client = client
        self.businesses = businesses

    # -------------------------------------------------------------------------
    # Social Login
    # -------------------------------------------------------------------------

    def find_identity(self, provider: str, provider_user_id: str) -> dict[str, Any] | None:
        """Identity row with its user embedded under "users", or None."""
        try:
            response = (
                self.client.table(USER_IDENTITIES_TABLE)
                .select("*, users(*)")
                .eq("provider", provider)
                .eq("provider_user_id", provider_user_id)
                .single()
                .execute()
            )
        except Exception as e:
            if is_no_rows(e):
                return None
            raise translate_store_error(e, "Failed to check existing identity") from e

        return response.data or None

    def create_or_get_user_by_identity(self, login: FacebookLoginRequest) -> LoginResult:
        """
        Return the user linked to the identity, creating both if needed.

        Returns:
            LoginResult with is_new_user=False when the identity already existed

        Raises:
            InternalError: If either insert fails (a created user is rolled back)
        """
        existing = self.find_identity(login.provider, login.provider_user_id)
        if existing:
            user_row = existing.pop("users", None)
            if not user_row:
                raise InternalError("Identity exists but its user is missing")
            logger.info(f"Existing {login.provider} login for user: {user_row['id']}")
            return LoginResult(
                user=User.model_validate(user_row),
                identity=UserIdentity.model_validate(existing),
                is_new_user=False,
            )

        try:
            response = self.client.table(USERS_TABLE).insert({"name": login.name}).execute()
        except Exception as e:
            raise translate_store_error(e, "Failed to create user") from e
        if not response.data:
            raise InternalError("Failed to create user")
        user = User.model_validate(response.data[0])

        try:
            response = (
                self.client.table(USER_IDENTITIES_TABLE)
                .insert({
                    "user_id": str(user.id),
                    "provider": login.provider,
                    "provider_user_id": login.provider_user_id,
                    "provider_email": login.provider_email,
                })
                .execute()
            )
            if not response.data:
                raise InternalError("Failed to create user identity")
        except Exception as e:
            self._rollback_user(user.id)
            raise translate_store_error(
                e,
                "Failed to create user identity",
                conflict="Identity is already linked to a user",
            ) from e

        identity = UserIdentity.model_validate(response.data[0])
        logger.info(f"Created user {user.id} via {login.provider} login")
        return LoginResult(user=user, identity=identity, is_new_user=True)

    def _rollback_user(self, user_id: UUID | str) -> None:
        """Compensating delete; a failure here is logged so the original error wins."""
        try:
            self.client.table(USERS_TABLE).delete().eq("id", str(user_id)).execute()
            logger.info(f"Rolled back user {user_id} after identity creation failed")
        except Exception as e:
            logger.error(f"Failed to roll back user {user_id}: {e}")

    # -------------------------------------------------------------------------
    # Profile Provisioning
    # -------------------------------------------------------------------------

    def ensure_profile(self, user_id: UUID | str, name: str | None = None) -> None:
        """
        Create the user row for an authenticated user if it's missing.

        Idempotent. A concurrent request creating the same row (unique
        violation) is not an error.
        """
        user_id_str = str(user_id)

        try:
            response = (
                self.client.table(USERS_TABLE)
                .select("id")
                .eq("id", user_id_str)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to look up profile") from e

        if response.data:
            return

        try:
            self.client.table(USERS_TABLE).insert({
                "id": user_id_str,
                "name": name or DEFAULT_PROFILE_NAME,
            }).execute()
            logger.info(f"Provisioned profile for auth user: {user_id_str}")
        except Exception as e:
            if is_unique_violation(e):
                logger.debug(f"Profile for {user_id_str} created concurrently")
                return
            raise translate_store_error(e, "Failed to create profile") from e

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def get_user(self, user_id: UUID | str) -> User:
        """
        Raises:
            NotFoundError: If the user doesn't exist
        """
        try:
            response = (
                self.client.table(USERS_TABLE)
                .select("*")
                .eq("id", str(user_id))
                .single()
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to fetch user", not_found=USER_NOT_FOUND) from e

        if not response.data:
            raise NotFoundError(USER_NOT_FOUND)
        return User.model_validate(response.data)

    def list_users(self, limit: int = 50, offset: int = 0) -> UserList:
        """
        One page of users, newest first.

        `total` is the full row count, independent of limit/offset.
        """
        try:
            response = (
                self.client.table(USERS_TABLE)
                .select("*", count="exact")
                .order("created_at", desc=True)
                .range(offset, offset + limit - 1)
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to fetch users") from e

        return UserList(
            users=[User.model_validate(row) for row in response.data or []],
            total=response.count or 0,
        )

    def update_user(self, user_id: UUID | str, updates: UserUpdateRequest) -> User:
        """
        Raises:
            NotFoundError: If the user doesn't exist
        """
        try:
            response = (
                self.client.table(USERS_TABLE)
                .update({"name": updates.name, "updated_at": utc_now_iso()})
                .eq("id", str(user_id))
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to update user", not_found=USER_NOT_FOUND) from e

        if not response.data:
            raise NotFoundError(USER_NOT_FOUND)

        logger.info(f"Updated user: {user_id}")
        return User.model_validate(response.data[0])

    def delete_user(self, user_id: UUID | str) -> None:
        """
        Delete a user.

        Businesses, menus and identities go with it through the store's
        cascades. Menu images are not covered by any cascade, so their URLs
        are collected first and deleted (best-effort) after the row is gone.

        Raises:
            NotFoundError: If the user doesn't exist
        """
        image_urls = self._collect_owned_images(user_id)

        try:
            response = (
                self.client.table(USERS_TABLE)
                .delete()
                .eq("id", str(user_id))
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to delete user", not_found=USER_NOT_FOUND) from e

        if not response.data:
            raise NotFoundError(USER_NOT_FOUND)

        logger.info(f"Deleted user: {user_id}")

        if self.businesses is not None and self.businesses.images is not None:
            self.businesses.images.delete_all(image_urls)

    def _collect_owned_images(self, user_id: UUID | str) -> list[str]:
        if self.businesses is None:
            return []

        try:
            response = (
                self.client.table(BUSINESS_TABLE)
                .select("id")
                .eq("user_id", str(user_id))
                .execute()
            )
        except Exception as e:
            logger.warning(f"Could not list businesses of user {user_id} for image cleanup: {e}")
            return []

        return self.businesses.collect_menu_images([row["id"] for row in response.data or []])
