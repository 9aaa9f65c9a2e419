# =============================================================================
# lib/ - External Service Clients
# =============================================================================
# This package wraps the managed services the API delegates to:
# - supabase_client.py: Supabase client construction, table names and
#   PostgREST error classification
# - firebase_client.py: Optional Firebase ID token verification
#
# Clients are built once at startup and injected; nothing here is a
# module-level singleton.
# =============================================================================

from lib.firebase_client import FirebaseTokenVerifier, VerifiedToken
from lib.supabase_client import (
    create_supabase_client,
    is_no_rows,
    is_unique_violation,
    translate_store_error,
)

__all__ = [
    # Supabase
    "create_supabase_client",
    "is_no_rows",
    "is_unique_violation",
    "translate_store_error",
    # Firebase
    "FirebaseTokenVerifier",
    "VerifiedToken",
]
