"""
Tests for /api/users endpoints.
"""
import time

import pytest

from raugupatis.auth import accounts, sessions
from raugupatis.infra.db.repositories import UserRepository

DEFAULT_PASSWORD = "securepass123"


@pytest.fixture
def clock(monkeypatch):
    """Session clock that tests can move forward."""
    state = {"now": int(time.time())}
    monkeypatch.setattr(sessions, "_now", lambda: state["now"])
    return state


class TestRegister:

    @pytest.mark.asyncio
    async def test_register_returns_user_without_secrets(self, client):
        response = await client.post(
            "/api/users/register",
            json={"email": "a@b.com", "password": "securepass123", "experience_level": "beginner"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "a@b.com"
        assert body["role"] == "user"
        assert body["experience_level"] == "beginner"
        assert body["preferred_temp_unit"] == "fahrenheit"
        assert "password" not in body
        assert "password_hash" not in body
        # registering does not log in
        assert "raugupatis_session" not in response.cookies

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, client, create_user):
        await create_user("taken@example.com")
        response = await client.post(
            "/api/users/register",
            json={"email": "Taken@Example.com", "password": "securepass123"},
        )
        assert response.status_code == 409
        assert response.json()["code"] == "DUPLICATE_EMAIL"

    @pytest.mark.asyncio
    async def test_invalid_fields_reported(self, client, app_session):
        response = await client.post("/api/users/register", json={"email": "nope", "password": "short"})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert set(body["fields"]) == {"email", "password"}
        assert await UserRepository(app_session).count() == 0

    @pytest.mark.asyncio
    async def test_missing_body_fields(self, client):
        response = await client.post("/api/users/register", json={"email": "a@b.com"})
        assert response.status_code == 400
        assert "password" in response.json()["fields"]


class TestLogin:

    @pytest.mark.asyncio
    async def test_login_sets_http_only_cookie(self, client, create_user):
        await create_user("alice@example.com")
        response = await client.post(
            "/api/users/login",
            json={"email": "alice@example.com", "password": DEFAULT_PASSWORD},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["user"]["email"] == "alice@example.com"
        assert "password_hash" not in body["user"]

        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("raugupatis_session=")
        assert "HttpOnly" in set_cookie
        assert "samesite=lax" in set_cookie.lower()
        assert "Max-Age=86400" in set_cookie

    @pytest.mark.asyncio
    async def test_remember_me_extends_cookie(self, client, create_user):
        await create_user("alice@example.com")
        response = await client.post(
            "/api/users/login",
            json={"email": "alice@example.com", "password": DEFAULT_PASSWORD, "remember_me": True},
        )
        assert "Max-Age=432000" in response.headers["set-cookie"]

    @pytest.mark.asyncio
    async def test_bad_credentials(self, client, create_user):
        await create_user("alice@example.com")
        for email, password in (("alice@example.com", "wrongpass123"), ("ghost@example.com", DEFAULT_PASSWORD)):
            response = await client.post("/api/users/login", json={"email": email, "password": password})
            assert response.status_code == 401
            assert response.json() == {
                "success": False,
                "user": None,
                "message": "Invalid email or password",
            }
            assert "set-cookie" not in response.headers

    @pytest.mark.asyncio
    async def test_locked_account_message(self, client, create_user, app_session):
        user = await create_user("locked@example.com")
        await accounts.set_locked(app_session, user.id, True)

        response = await client.post(
            "/api/users/login",
            json={"email": "locked@example.com", "password": DEFAULT_PASSWORD},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Account is locked. Please contact an administrator."


class TestSession:

    @pytest.mark.asyncio
    async def test_profile_requires_login(self, client):
        response = await client.get("/api/users/profile")
        assert response.status_code == 401
        assert response.json()["code"] == "SESSION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_logout_invalidates_session(self, user_client, client):
        token = user_client.cookies.get("raugupatis_session")
        assert (await user_client.get("/api/users/profile")).status_code == 200

        response = await user_client.post("/api/users/logout")
        assert response.status_code == 200
        assert response.json()["success"] is True

        # replaying the old token no longer works
        replay = await client.get("/api/users/profile", headers={"Cookie": f"raugupatis_session={token}"})
        assert replay.status_code == 401

    @pytest.mark.asyncio
    async def test_logout_without_session_succeeds(self, client):
        response = await client.post("/api/users/logout")
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_forged_cookie_rejected(self, client):
        response = await client.get("/api/users/profile", headers={"Cookie": "raugupatis_session=forged-token"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_activity_resends_cookie_with_full_ttl(self, clock, client, create_user, login_as):
        await create_user("alice@example.com")
        await login_as(client, "alice@example.com")

        clock["now"] += 20 * 3600
        response = await client.get("/api/users/profile")
        assert response.status_code == 200
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("raugupatis_session=")
        assert "Max-Age=86400" in set_cookie
        assert "HttpOnly" in set_cookie

        # 40h after login but only 20h idle
        clock["now"] += 20 * 3600
        assert (await client.get("/api/users/profile")).status_code == 200

        clock["now"] += 25 * 3600
        assert (await client.get("/api/users/profile")).status_code == 401

    @pytest.mark.asyncio
    async def test_remember_me_cookie_keeps_its_ttl(self, clock, client, create_user, login_as):
        await create_user("alice@example.com")
        await login_as(client, "alice@example.com", remember_me=True)

        clock["now"] += 100 * 3600
        response = await client.get("/api/fermentations")
        assert response.status_code == 200
        assert "Max-Age=432000" in response.headers["set-cookie"]

    @pytest.mark.asyncio
    async def test_anonymous_request_sets_no_cookie(self, client):
        response = await client.get("/api/users/profile")
        assert "set-cookie" not in response.headers


class TestProfile:

    @pytest.mark.asyncio
    async def test_get_profile(self, user_client):
        response = await user_client.get("/api/users/profile")
        assert response.status_code == 200
        assert response.json()["email"] == "alice@example.com"

    @pytest.mark.asyncio
    async def test_update_profile(self, user_client):
        response = await user_client.put(
            "/api/users/profile",
            json={"preferred_temp_unit": "celsius", "experience_level": "advanced", "first_name": " Alice "},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["preferred_temp_unit"] == "celsius"
        assert body["experience_level"] == "advanced"
        assert body["first_name"] == "Alice"

        # POST is accepted as well
        response = await user_client.post("/api/users/profile", json={"last_name": "Smith"})
        assert response.json()["last_name"] == "Smith"
        assert response.json()["preferred_temp_unit"] == "celsius"

    @pytest.mark.asyncio
    async def test_invalid_unit(self, user_client):
        response = await user_client.put("/api/users/profile", json={"preferred_temp_unit": "kelvin"})
        assert response.status_code == 400
        assert "preferred_temp_unit" in response.json()["fields"]


class TestChangePassword:

    @pytest.mark.asyncio
    async def test_change_password_then_login(self, user_client, make_client, login_as):
        response = await user_client.post(
            "/api/users/change-password",
            json={"current_password": DEFAULT_PASSWORD, "new_password": "brandnew456", "confirm_password": "brandnew456"},
        )
        assert response.status_code == 200

        fresh = make_client()
        bad = await fresh.post("/api/users/login", json={"email": "alice@example.com", "password": DEFAULT_PASSWORD})
        assert bad.status_code == 401
        await login_as(fresh, "alice@example.com", "brandnew456")

    @pytest.mark.asyncio
    async def test_mismatched_confirmation(self, user_client):
        response = await user_client.post(
            "/api/users/change-password",
            json={"current_password": DEFAULT_PASSWORD, "new_password": "brandnew456", "confirm_password": "other4567"},
        )
        assert response.status_code == 400
        assert "confirm_password" in response.json()["fields"]

    @pytest.mark.asyncio
    async def test_wrong_current_password(self, user_client):
        response = await user_client.post(
            "/api/users/change-password",
            json={"current_password": "notmine123", "new_password": "brandnew456"},
        )
        assert response.status_code == 400
        assert "current_password" in response.json()["fields"]
