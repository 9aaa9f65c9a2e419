# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides an in-memory Supabase client (tests/fakes.py)
# - Provides services, an app and a TestClient wired to that client
# - Provides two authenticated callers (alice and bob)
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

from dataclasses import dataclass
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from core.services import (
    BusinessService,
    IdentityService,
    ImageStorage,
    MenuService,
    UserService,
)
from lib.firebase_client import FirebaseTokenVerifier, VerifiedToken
from tests.fakes import BUCKET, FakeSupabase


# =============================================================================
# Clients and Services
# =============================================================================

@pytest.fixture
def supabase():
    """Fresh in-memory Supabase client for every test."""
    return FakeSupabase()


@pytest.fixture
def image_storage(supabase):
    return ImageStorage(supabase, bucket=BUCKET)


@pytest.fixture
def business_service(supabase, image_storage):
    return BusinessService(supabase, image_storage)


@pytest.fixture
def menu_service(supabase, business_service, image_storage):
    return MenuService(supabase, business_service, image_storage)


@pytest.fixture
def user_service(supabase, business_service):
    return UserService(supabase, business_service)


@pytest.fixture
def identity_service(supabase):
    return IdentityService(supabase)


# =============================================================================
# Sample Data
# =============================================================================

@pytest.fixture
def owner(supabase):
    """A user row that owns nothing yet."""
    return supabase.seed("users", name="Maria Lopez")


@pytest.fixture
def other_owner(supabase):
    return supabase.seed("users", name="Sam Chen")


@pytest.fixture
def sample_business_dict():
    """Valid business create payload."""
    return {
        "name": "Taco Cart",
        "description": "Al pastor every night",
        "longitude": -122.4194,
        "latitude": 37.7749,
    }


# =============================================================================
# Firebase
# =============================================================================

class StaticTokenVerifier(FirebaseTokenVerifier):
    """Accepts every token as the configured uid."""

    def __init__(self, uid: str):
        super().__init__(app=object())
        self.uid = uid

    def verify(self, id_token: str) -> VerifiedToken:
        return VerifiedToken(uid=self.uid, email=None)


@pytest.fixture
def static_verifier():
    return StaticTokenVerifier


# =============================================================================
# Application
# =============================================================================

@pytest.fixture
def settings():
    return Settings(ENVIRONMENT="development", DEBUG=False)


@pytest.fixture
def app(settings, supabase):
    return create_app(settings=settings, supabase=supabase)


@pytest.fixture
def client(app):
    """TestClient that renders unhandled errors instead of re-raising them."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@dataclass
class Caller:
    id: UUID
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def alice(supabase):
    """Authenticated caller whose users row is provisioned on first request."""
    user_id = supabase.auth.add_user("alice-token", name="Alice", email="alice@example.com")
    return Caller(id=UUID(user_id), token="alice-token")


@pytest.fixture
def bob(supabase):
    user_id = supabase.auth.add_user("bob-token", name="Bob", email="bob@example.com")
    return Caller(id=UUID(user_id), token="bob-token")
