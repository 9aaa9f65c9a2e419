# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - common.py: Shared field types (coordinates, names) and pagination
# - user.py: Users, social-login identities, login results
# - business.py: Vendor businesses
# - menu.py: Menus and in-memory image uploads
#
# Request models are the declarative constraint descriptors of the
# validation layer; row models describe what the database returns.
# =============================================================================

# -----------------------------------------------------------------------------
# Common
# -----------------------------------------------------------------------------
from .common import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    Latitude,
    Longitude,
    PaginationParams,
)

# -----------------------------------------------------------------------------
# Users and Identities
# -----------------------------------------------------------------------------
from .user import (
    FACEBOOK_PROVIDER,
    FacebookLoginRequest,
    IdentityCreateRequest,
    LoginResult,
    User,
    UserIdentity,
    UserList,
    UserUpdateRequest,
)

# -----------------------------------------------------------------------------
# Businesses
# -----------------------------------------------------------------------------
from .business import (
    Business,
    BusinessCreateRequest,
    BusinessUpdateRequest,
)

# -----------------------------------------------------------------------------
# Menus
# -----------------------------------------------------------------------------
from .menu import (
    MAX_MENU_IMAGES,
    ImageUpload,
    Menu,
    MenuCreateForm,
    MenuUpdateForm,
)

__all__ = [
    # Common
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "Latitude",
    "Longitude",
    "PaginationParams",
    # Users
    "FACEBOOK_PROVIDER",
    "FacebookLoginRequest",
    "IdentityCreateRequest",
    "LoginResult",
    "User",
    "UserIdentity",
    "UserList",
    "UserUpdateRequest",
    # Businesses
    "Business",
    "BusinessCreateRequest",
    "BusinessUpdateRequest",
    # Menus
    "MAX_MENU_IMAGES",
    "ImageUpload",
    "Menu",
    "MenuCreateForm",
    "MenuUpdateForm",
]
