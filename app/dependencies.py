# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
#
# The Supabase client, the image storage and the Firebase verifier are built
# once in the app lifespan (or handed to create_app() by tests) and kept on
# app.state. Services are cheap wrappers and are built per request from them.
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request
from supabase import Client

from app.config import Settings
from core.services import (
    BusinessService,
    IdentityService,
    ImageStorage,
    MenuService,
    UserService,
)
from lib.firebase_client import FirebaseTokenVerifier


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_supabase_client(request: Request) -> Client:
    """Process-wide Supabase client created at startup."""
    return request.app.state.supabase


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage


def get_token_verifier(request: Request) -> FirebaseTokenVerifier:
    return request.app.state.token_verifier


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
SupabaseDep = Annotated[Client, Depends(get_supabase_client)]
ImageStorageDep = Annotated[ImageStorage, Depends(get_image_storage)]


def get_business_service(client: SupabaseDep, images: ImageStorageDep) -> BusinessService:
    return BusinessService(client, images)


def get_menu_service(
    client: SupabaseDep,
    images: ImageStorageDep,
    businesses: Annotated[BusinessService, Depends(get_business_service)],
) -> MenuService:
    return MenuService(client, businesses, images)


def get_user_service(
    client: SupabaseDep,
    businesses: Annotated[BusinessService, Depends(get_business_service)],
) -> UserService:
    return UserService(client, businesses)


def get_identity_service(
    client: SupabaseDep,
    verifier: Annotated[FirebaseTokenVerifier, Depends(get_token_verifier)],
) -> IdentityService:
    return IdentityService(client, verifier)


# Type aliases for dependency injection
BusinessServiceDep = Annotated[BusinessService, Depends(get_business_service)]
MenuServiceDep = Annotated[MenuService, Depends(get_menu_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
IdentityServiceDep = Annotated[IdentityService, Depends(get_identity_service)]
