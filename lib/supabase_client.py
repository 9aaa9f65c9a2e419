# =============================================================================
# lib/supabase_client.py - Supabase Client Construction and Error Mapping
# =============================================================================
# This module owns everything that talks about Supabase itself rather than
# about our resources:
# - Building the service-role client once at startup
# - Table names
# - Translating PostgREST errors into the API error taxonomy
#
# Services never let a raw PostgREST error escape; they pass it through
# translate_store_error() at the call site.
#
# Usage:
#   from lib.supabase_client import create_supabase_client, translate_store_error
#   client = create_supabase_client(settings)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from postgrest.exceptions import APIError
from supabase import Client, create_client

from app.config import Settings
from app.exceptions import ApiError, ConflictError, InternalError, NotFoundError

logger = logging.getLogger(__name__)

# Tables
USERS_TABLE = "users"
USER_IDENTITIES_TABLE = "user_identities"
BUSINESS_TABLE = "business"
MENU_TABLE = "menu"

# PostgREST: `.single()` matched zero (or many) rows
NO_ROWS_CODE = "PGRST116"
# Postgres: unique_violation
UNIQUE_VIOLATION_CODE = "23505"


def create_supabase_client(settings: Settings) -> Client:
    """
    Build the service-role Supabase client.

    Uses the service_role key, which bypasses Row Level Security, so every
    ownership rule has to be enforced by the services themselves.

    Raises:
        InternalError: If the client cannot be created from the settings
    """
    try:
        client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_KEY)
    except Exception as e:
        raise InternalError(
            f"Failed to create Supabase client: {e}",
            details={"hint": "Check SUPABASE_URL and SUPABASE_SERVICE_KEY"},
        ) from e

    logger.info("Supabase client initialized successfully")
    return client


# =============================================================================
# Error Classification
# =============================================================================

def store_error_code(error: BaseException) -> str | None:
    """Return the PostgREST/Postgres error code, if the error carries one."""
    if isinstance(error, APIError):
        return error.code
    return getattr(error, "code", None)


def is_no_rows(error: BaseException) -> bool:
    return store_error_code(error) == NO_ROWS_CODE


def is_unique_violation(error: BaseException) -> bool:
    return store_error_code(error) == UNIQUE_VIOLATION_CODE


def _diagnostics(error: BaseException) -> dict[str, Any]:
    if isinstance(error, APIError):
        return {
            "store_code": error.code,
            "store_message": error.message,
            "store_details": error.details,
        }
    return {"store_message": str(error)}


def translate_store_error(
    error: BaseException,
    message: str,
    *,
    not_found: str = "Resource not found",
    conflict: str | None = None,
) -> ApiError:
    """
    Classify a store failure into exactly one taxonomy kind.

    Args:
        error: The exception raised by the Supabase client
        message: Message for the INTERNAL_ERROR fallback
        not_found: Message for the NOT_FOUND that a "no rows" result always becomes
        conflict: Message to use when the store reports a unique violation

    Returns:
        The ApiError to raise. Errors that are already classified pass through.
    """
    if isinstance(error, ApiError):
        return error

    if is_no_rows(error):
        return NotFoundError(not_found)

    if conflict is not None and is_unique_violation(error):
        return ConflictError(conflict)

    logger.error(f"{message}: {error}")
    return InternalError(message, details=_diagnostics(error))
