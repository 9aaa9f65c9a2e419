# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated caller, as reported by Supabase Auth.

    `id` is both the Supabase Auth user id and the id of the caller's row in
    the users table (provisioned on first request).
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
    name: Optional[str] = None
