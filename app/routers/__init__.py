# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by resource:
# - health.py: Health check endpoints (unprefixed)
# - users.py: Social login and user management
# - business.py: Owner-scoped business CRUD
# - menu.py: Menus with image uploads, nested under a business
# - identities.py: Linking/unlinking social identities
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import users
from . import business
from . import menu
from . import identities

__all__ = [
    "health",
    "users",
    "business",
    "menu",
    "identities",
]
