# =============================================================================
# tests/test_api.py - End-to-End API Tests
# =============================================================================
# Requests go through the full FastAPI app (routing, auth, validation,
# exception handlers, envelope) with the in-memory Supabase client behind it.
#
# Run with: pytest tests/test_api.py -v
# =============================================================================

import asyncio
from uuid import uuid4

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from starlette.datastructures import Headers

from app.exceptions import BadRequestError
from app.main import create_app
from app.routers.menu import _read_images
from core.services.image_storage import ImageStorage
from tests.fakes import BUCKET, FakeSupabase

API = "/api/v1"


@pytest.fixture
def business_id(client, alice, sample_business_dict):
    response = client.post(f"{API}/business", json=sample_business_dict, headers=alice.headers)
    assert response.status_code == 201
    return response.json()["data"]["id"]


def _png(name: str):
    return ("images", (name, b"\x89PNG\r\n\x1a\n", "image/png"))


# =============================================================================
# Health and Envelope
# =============================================================================

class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["service"] == "ultimate-street-food-finder-api"
        assert body["environment"] == "development"
        assert body["timestamp"]

    def test_ready(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"] == {"database": "healthy", "storage": "healthy"}

    def test_ready_reports_database_failure(self, client, supabase):
        supabase.fail_next("users", "select")

        body = client.get("/health/ready").json()

        assert body["ok"] is False
        assert body["checks"]["database"].startswith("unhealthy")

    def test_live(self, client):
        assert client.get("/health/live").json()["ok"] is True


class TestEnvelope:

    def test_unknown_route(self, client):
        response = client.get(f"{API}/unknown")

        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "NOT_FOUND", "message": f"Cannot GET {API}/unknown"}
        }

    def test_invalid_path_uuid(self, client, alice):
        response = client.get(f"{API}/business/not-a-uuid", headers=alice.headers)

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["path"] == "path.business_id"


# =============================================================================
# Auth Gate
# =============================================================================

class TestAuthGate:

    def test_missing_token(self, client):
        response = client.get(f"{API}/business")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json() == {
            "error": {"code": "UNAUTHORIZED", "message": "Missing or invalid authorization header"}
        }

    def test_non_bearer_scheme(self, client):
        response = client.get(f"{API}/business", headers={"Authorization": "Basic abc"})
        assert response.status_code == 401

    def test_rejected_token(self, client):
        response = client.get(f"{API}/business", headers={"Authorization": "Bearer forged"})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid or expired token"

    def test_first_request_provisions_profile(self, client, alice, supabase):
        client.get(f"{API}/business", headers=alice.headers)
        client.get(f"{API}/business", headers=alice.headers)

        rows = supabase.rows("users")
        assert len(rows) == 1
        assert rows[0]["id"] == str(alice.id)
        assert rows[0]["name"] == "Alice"

    def test_profile_provisioning_failure_does_not_block_request(self, client, alice, supabase):
        supabase.fail_next("users", "insert")

        response = client.get(f"{API}/business", headers=alice.headers)

        assert response.status_code == 200
        assert response.json() == {"data": []}
        assert supabase.count("users") == 0


# =============================================================================
# Business
# =============================================================================

class TestBusinessApi:

    def test_create_and_list(self, client, alice, business_id):
        response = client.get(f"{API}/business", headers=alice.headers)

        assert response.status_code == 200
        data = response.json()["data"]
        assert [b["id"] for b in data] == [business_id]
        assert data[0]["user_id"] == str(alice.id)

    def test_longitude_out_of_range(self, client, alice):
        response = client.post(
            f"{API}/business",
            json={"name": "Taco Cart", "longitude": 200, "latitude": 10},
            headers=alice.headers,
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["message"] == "Validation failed"
        assert "body.longitude" in [d["path"] for d in error["details"]]

    def test_other_users_business_is_not_found(self, client, bob, business_id, supabase):
        response = client.delete(f"{API}/business/{business_id}", headers=bob.headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"
        assert supabase.count("business") == 1

    def test_get_other_users_business(self, client, bob, business_id):
        response = client.get(f"{API}/business/{business_id}", headers=bob.headers)
        assert response.status_code == 404

    def test_put_update(self, client, alice, business_id):
        response = client.put(
            f"{API}/business/{business_id}",
            json={"name": "Taco Truck", "latitude": 40.0},
            headers=alice.headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Taco Truck"
        assert data["latitude"] == 40.0
        assert data["longitude"] == -122.4194

    def test_post_update_alias(self, client, alice, business_id):
        response = client.post(
            f"{API}/business/{business_id}",
            json={"description": "Now with churros"},
            headers=alice.headers,
        )
        assert response.json()["data"]["description"] == "Now with churros"

    def test_empty_update(self, client, alice, business_id):
        response = client.put(f"{API}/business/{business_id}", json={}, headers=alice.headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

    def test_delete(self, client, alice, business_id, supabase):
        response = client.delete(f"{API}/business/{business_id}", headers=alice.headers)

        assert response.status_code == 204
        assert response.content == b""
        assert supabase.count("business") == 0


# =============================================================================
# Menu
# =============================================================================

class TestMenuApi:

    def _create(self, client, alice, business_id, *files):
        return client.post(
            f"{API}/business/{business_id}/menu",
            data={"menu": "Tacos al pastor"},
            files=list(files) or [_png("front.png")],
            headers=alice.headers,
        )

    def test_create_with_images(self, client, alice, business_id, supabase):
        response = self._create(client, alice, business_id, _png("front.png"), _png("back.png"))

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["menu"] == "Tacos al pastor"
        assert len(data["images"]) == 2
        assert len(supabase.storage.paths(BUCKET)) == 2

    def test_non_image_rejected(self, client, alice, business_id, supabase):
        response = self._create(
            client, alice, business_id, ("images", ("menu.txt", b"tacos", "text/plain"))
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Only image files are allowed"
        assert supabase.storage.upload_attempts == 0

    def test_too_many_images(self, client, alice, business_id):
        response = self._create(client, alice, business_id, *[_png(f"{i}.png") for i in range(4)])

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Maximum 3 images allowed"

    def test_missing_menu_text(self, client, alice, business_id):
        response = client.post(
            f"{API}/business/{business_id}/menu",
            files=[_png("a.png")],
            headers=alice.headers,
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert error["details"][0]["path"] == "body.menu"

    def test_foreign_business(self, client, bob, business_id, supabase):
        response = client.post(
            f"{API}/business/{business_id}/menu",
            data={"menu": "Stolen"},
            files=[_png("a.png")],
            headers=bob.headers,
        )

        assert response.status_code == 404
        assert supabase.storage.upload_attempts == 0

    def test_duplicate_filenames_in_one_request(self, client, alice, business_id, supabase):
        photo = ("images", ("photo.jpg", b"\xff\xd8\xff\xe0", "image/jpeg"))

        response = self._create(client, alice, business_id, photo, photo)

        assert response.status_code == 201
        images = response.json()["data"]["images"]
        assert len(set(images)) == 2
        assert len(supabase.storage.paths(BUCKET)) == 2

    def test_oversized_image(self, settings, supabase, alice, business_id):
        app = create_app(
            settings=settings.model_copy(update={"MAX_IMAGE_SIZE_MB": 1}),
            supabase=supabase,
        )
        client = TestClient(app)
        big = ("images", ("huge.png", b"\x89" * (1024 * 1024 + 1), "image/png"))

        response = self._create(client, alice, business_id, big)

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Image too large: huge.png"
        assert supabase.storage.upload_attempts == 0

    def test_replace_images(self, client, alice, business_id, supabase):
        menu_id = self._create(client, alice, business_id, _png("old.png")).json()["data"]["id"]

        response = client.post(
            f"{API}/business/{business_id}/menu/{menu_id}",
            files=[_png("new.png")],
            headers=alice.headers,
        )

        assert response.status_code == 200
        assert response.json()["data"]["menu"] == "Tacos al pastor"
        remaining = supabase.storage.paths(BUCKET)
        assert len(remaining) == 1
        assert remaining[0].endswith("-new.png")

    def test_update_text_only(self, client, alice, business_id):
        menu = self._create(client, alice, business_id).json()["data"]

        response = client.post(
            f"{API}/business/{business_id}/menu/{menu['id']}",
            data={"menu": "Churros"},
            headers=alice.headers,
        )

        assert response.json()["data"]["menu"] == "Churros"
        assert response.json()["data"]["images"] == menu["images"]

    def test_get_list_delete(self, client, alice, business_id, supabase):
        menu_id = self._create(client, alice, business_id).json()["data"]["id"]
        base = f"{API}/business/{business_id}/menu"

        assert client.get(f"{base}/{menu_id}", headers=alice.headers).status_code == 200
        assert len(client.get(base, headers=alice.headers).json()["data"]) == 1

        response = client.delete(f"{base}/{menu_id}", headers=alice.headers)

        assert response.status_code == 204
        assert supabase.count("menu") == 0
        assert supabase.storage.paths(BUCKET) == []


# =============================================================================
# Users
# =============================================================================

class TestUsersApi:

    LOGIN = {
        "name": "Maria Lopez",
        "provider": "facebook",
        "provider_user_id": "10223344556677",
        "provider_email": "maria@example.com",
    }

    def test_facebook_login_created_then_ok(self, client):
        first = client.post(f"{API}/users/facebook", json=self.LOGIN)
        second = client.post(f"{API}/users/facebook", json=self.LOGIN)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["data"]["user"]["id"] == second.json()["data"]["user"]["id"]

    def test_facebook_login_wrong_provider(self, client):
        response = client.post(f"{API}/users/facebook", json={**self.LOGIN, "provider": "google"})

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["path"] == "body.provider"

    def test_list_with_pagination_meta(self, client, alice, supabase):
        for i in range(3):
            supabase.seed("users", name=f"user-{i}")

        response = client.get(f"{API}/users?limit=2&offset=0", headers=alice.headers)

        assert response.status_code == 200
        body = response.json()
        assert len(body["data"]) == 2
        assert body["meta"] == {"pagination": {"limit": 2, "offset": 0, "total": 4}}

    @pytest.mark.parametrize("query,path", [
        ("limit=0", "query.limit"),
        ("limit=201", "query.limit"),
        ("offset=-1", "query.offset"),
    ])
    def test_list_bad_pagination(self, client, alice, query, path):
        response = client.get(f"{API}/users?{query}", headers=alice.headers)

        assert response.status_code == 400
        assert response.json()["error"]["details"][0]["path"] == path

    def test_me(self, client, alice):
        response = client.get(f"{API}/users/me", headers=alice.headers)
        assert response.json()["data"]["id"] == str(alice.id)

    def test_get_missing_user(self, client, alice):
        response = client.get(f"{API}/users/{uuid4()}", headers=alice.headers)
        assert response.status_code == 404

    def test_rename_self(self, client, alice):
        response = client.post(f"{API}/users/{alice.id}", json={"name": "Alicia"}, headers=alice.headers)

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Alicia"

    def test_cannot_rename_someone_else(self, client, alice, bob, supabase):
        client.get(f"{API}/users/me", headers=bob.headers)

        response = client.post(f"{API}/users/{bob.id}", json={"name": "Hacked"}, headers=alice.headers)

        assert response.status_code == 404
        assert {row["name"] for row in supabase.rows("users")} == {"Alice", "Bob"}

    def test_delete_self(self, client, alice, business_id, supabase):
        response = client.delete(f"{API}/users/{alice.id}", headers=alice.headers)

        assert response.status_code == 204
        assert supabase.count("users") == 0
        assert supabase.count("business") == 0


# =============================================================================
# User Identities
# =============================================================================

class TestIdentitiesApi:

    def _body(self, user_id, provider_user_id="fb-42"):
        return {"user_id": str(user_id), "provider_user_id": provider_user_id}

    def test_create_without_token(self, client, alice):
        client.get(f"{API}/users/me", headers=alice.headers)

        response = client.post(f"{API}/user-identities", json=self._body(alice.id))

        assert response.status_code == 201
        assert response.json()["data"]["provider"] == "facebook"

    def test_create_for_unknown_user(self, client):
        response = client.post(f"{API}/user-identities", json=self._body(uuid4()))
        assert response.status_code == 404

    def test_token_without_firebase_is_not_implemented(self, client, alice):
        client.get(f"{API}/users/me", headers=alice.headers)

        response = client.post(
            f"{API}/user-identities",
            json=self._body(alice.id),
            headers={"Authorization": "Bearer firebase-id-token"},
        )

        assert response.status_code == 501
        assert response.json()["error"]["code"] == "NOT_IMPLEMENTED"

    def test_token_uid_must_match(self, settings, supabase, alice, static_verifier):
        app = create_app(settings=settings, supabase=supabase, token_verifier=static_verifier("fb-other"))
        client = TestClient(app)
        client.get(f"{API}/users/me", headers=alice.headers)

        mismatch = client.post(
            f"{API}/user-identities",
            json=self._body(alice.id, "fb-42"),
            headers={"Authorization": "Bearer firebase-id-token"},
        )
        match = client.post(
            f"{API}/user-identities",
            json=self._body(alice.id, "fb-other"),
            headers={"Authorization": "Bearer firebase-id-token"},
        )

        assert mismatch.status_code == 401
        assert match.status_code == 201

    def test_duplicate_is_conflict(self, client, alice):
        client.get(f"{API}/users/me", headers=alice.headers)
        client.post(f"{API}/user-identities", json=self._body(alice.id))

        response = client.post(f"{API}/user-identities", json=self._body(alice.id))

        assert response.status_code == 409

    def test_delete_scoped_to_owner(self, client, alice, bob, supabase):
        client.get(f"{API}/users/me", headers=alice.headers)
        identity_id = client.post(
            f"{API}/user-identities", json=self._body(alice.id)
        ).json()["data"]["id"]

        foreign = client.delete(f"{API}/user-identities/{identity_id}", headers=bob.headers)
        own = client.delete(f"{API}/user-identities/{identity_id}", headers=alice.headers)

        assert foreign.status_code == 404
        assert own.status_code == 204
        assert supabase.count("user_identities") == 0

    def test_get_scoped_to_owner(self, client, alice, bob):
        client.get(f"{API}/users/me", headers=alice.headers)
        identity_id = client.post(
            f"{API}/user-identities", json=self._body(alice.id)
        ).json()["data"]["id"]

        own = client.get(f"{API}/user-identities/{identity_id}", headers=alice.headers)
        foreign = client.get(f"{API}/user-identities/{identity_id}", headers=bob.headers)

        assert own.status_code == 200
        assert own.json()["data"]["user_id"] == str(alice.id)
        assert foreign.status_code == 404
        assert foreign.json()["error"]["message"] == "User identity not found"

    def test_delete_requires_auth(self, client):
        response = client.delete(f"{API}/user-identities/{uuid4()}")
        assert response.status_code == 401


# =============================================================================
# Multipart Image Reading
# =============================================================================

class UnreadablePart:
    """File object that fails the test if anything reads it."""

    def read(self, size: int = -1) -> bytes:
        raise AssertionError("image part was read before it was checked")


def _part(filename: str, size: int) -> UploadFile:
    return UploadFile(
        file=UnreadablePart(),
        size=size,
        filename=filename,
        headers=Headers({"content-type": "image/png"}),
    )


class TestReadImages:

    @pytest.fixture
    def storage(self):
        return ImageStorage(FakeSupabase(), BUCKET, max_image_bytes=10)

    def test_declared_size_checked_before_read(self, storage):
        with pytest.raises(BadRequestError) as exc_info:
            asyncio.run(_read_images([_part("big.png", 11)], storage))

        assert exc_info.value.message == "Image too large: big.png"

    def test_count_checked_before_read(self, storage):
        parts = [_part(f"{i}.png", 1) for i in range(4)]

        with pytest.raises(BadRequestError) as exc_info:
            asyncio.run(_read_images(parts, storage))

        assert exc_info.value.message == "Maximum 3 images allowed"

    def test_no_parts(self, storage):
        assert asyncio.run(_read_images(None, storage)) == []
