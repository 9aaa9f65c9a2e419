# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .business_service import BusinessService
from .identity_service import IdentityService
from .image_storage import ImageStorage
from .menu_service import MenuService
from .user_service import UserService

__all__ = [
    "BusinessService",
    "IdentityService",
    "ImageStorage",
    "MenuService",
    "UserService",
]
