# =============================================================================
# core/models/user.py - User and Identity Schemas
# =============================================================================
# These models define the API contract for users and their linked
# social-login identities:
# - FacebookLoginRequest: Input for idempotent social login
# - UserUpdateRequest: Input for renaming a user
# - IdentityCreateRequest: Input for linking an identity to an existing user
# - User / UserIdentity: Rows as stored in the managed database
# - LoginResult: Outcome of social login (new vs existing)
# =============================================================================

from dataclasses import dataclass
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from .common import Name, ProviderUserId

FACEBOOK_PROVIDER = "facebook"


class FacebookLoginRequest(BaseModel):
    """
    Schema for POST /users/facebook.

    Example:
        {
            "name": "Maria Lopez",
            "provider": "facebook",
            "provider_user_id": "10223344556677",
            "provider_email": "maria@example.com"
        }
    """

    name: Name
    provider: Literal["facebook"]
    provider_user_id: ProviderUserId
    provider_email: EmailStr | None = None


class UserUpdateRequest(BaseModel):
    """Schema for POST /users/{id}."""
    name: Name


class IdentityCreateRequest(BaseModel):
    """Schema for POST /user-identities. The provider is always facebook."""

    user_id: UUID
    provider_user_id: ProviderUserId
    provider_email: EmailStr | None = None


class User(BaseModel):
    """A row of the users table."""

    model_config = ConfigDict(extra="ignore")

    id: UUID
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserIdentity(BaseModel):
    """A row of the user_identities table."""

    model_config = ConfigDict(extra="ignore")

    id: UUID
    user_id: UUID
    provider: str
    provider_user_id: str
    provider_email: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class LoginResult:
    """Social login outcome; `is_new_user` selects 201 vs 200."""
    user: User
    identity: UserIdentity
    is_new_user: bool

    def to_payload(self) -> dict:
        return {
            "user": self.user.model_dump(mode="json"),
            "identity": self.identity.model_dump(mode="json"),
        }


class UserList(BaseModel):
    """Page of users plus the full matching count."""
    users: list[User] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
