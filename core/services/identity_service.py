# =============================================================================
# core/services/identity_service.py - User Identity Logic
# =============================================================================
# Links social-login identities to existing users.
# =============================================================================

import logging
from uuid import UUID

from supabase import Client

from app.exceptions import InternalError, NotFoundError
from core.models.user import FACEBOOK_PROVIDER, IdentityCreateRequest, UserIdentity
from lib.firebase_client import FirebaseTokenVerifier, VerifiedToken
from lib.supabase_client import USER_IDENTITIES_TABLE, USERS_TABLE, translate_store_error

logger = logging.getLogger(__name__)

IDENTITY_NOT_FOUND = "User identity not found"


class IdentityService:
    """Service for user identity operations."""

    def __init__(self, client: Client, verifier: FirebaseTokenVerifier | None = None):
        self.client = client
        self.verifier = verifier or FirebaseTokenVerifier(None)

    def verify_token(self, id_token: str) -> VerifiedToken:
        """
        Verify an identity-provider token.

        Raises:
            NotImplementedApiError: If no verifier is configured
            UnauthorizedError: If the token is rejected
        """
        return self.verifier.verify(id_token)

    def create_identity(
        self,
        data: IdentityCreateRequest,
        provider: str = FACEBOOK_PROVIDER,
    ) -> UserIdentity:
        """
        Link an identity to an existing user.

        Raises:
            NotFoundError: If the user doesn't exist
            ConflictError: If (provider, provider_user_id) is already linked
        """
        user_id = str(data.user_id)

        try:
            (
                self.client.table(USERS_TABLE)
                .select("id")
                .eq("id", user_id)
                .single()
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to verify user", not_found="User not found") from e

        try:
            response = (
                self.client.table(USER_IDENTITIES_TABLE)
                .insert({
                    "user_id": user_id,
                    "provider": provider,
                    "provider_user_id": data.provider_user_id,
                    "provider_email": data.provider_email,
                })
                .execute()
            )
        except Exception as e:
            raise translate_store_error(
                e,
                "Failed to create user identity",
                conflict="Identity is already linked to a user",
            ) from e

        if not response.data:
            raise InternalError("Failed to create user identity")

        identity = UserIdentity.model_validate(response.data[0])
        logger.info(f"Linked {provider} identity {identity.id} to user {user_id}")
        return identity

    def get_identity(self, identity_id: UUID | str, owner_id: UUID | str) -> UserIdentity:
        """
        Get an identity owned by `owner_id`.

        Raises:
            NotFoundError: If the identity doesn't exist or belongs to another user
        """
        try:
            response = (
                self.client.table(USER_IDENTITIES_TABLE)
                .select("*")
                .eq("id", str(identity_id))
                .eq("user_id", str(owner_id))
                .single()
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to fetch user identity", not_found=IDENTITY_NOT_FOUND) from e

        if not response.data:
            raise NotFoundError(IDENTITY_NOT_FOUND)
        return UserIdentity.model_validate(response.data)

    def delete_identity(self, identity_id: UUID | str, owner_id: UUID | str) -> None:
        """
        Delete an identity owned by `owner_id`.

        The delete is filtered by both ids; zero deleted rows means the
        identity is absent or someone else's.

        Raises:
            NotFoundError: If no identity with that id belongs to the owner
        """
        try:
            response = (
                self.client.table(USER_IDENTITIES_TABLE)
                .delete()
                .eq("id", str(identity_id))
                .eq("user_id", str(owner_id))
                .execute()
            )
        except Exception as e:
            raise translate_store_error(e, "Failed to delete user identity", not_found=IDENTITY_NOT_FOUND) from e

        if not response.data:
            raise NotFoundError(IDENTITY_NOT_FOUND)

        logger.info(f"Deleted user identity: {identity_id}")
