"""
Tests for server-rendered pages and the health check.
"""
import pytest


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.text == "OK"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/", "/login", "/register"])
async def test_public_pages_render(client, path):
    response = await client.get(path)
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    ["/dashboard", "/profile", "/change-password", "/fermentations", "/fermentation/new", "/admin/users"],
)
async def test_protected_pages_redirect_to_login(client, path):
    response = await client.get(path)
    assert response.status_code == 303
    assert response.headers["location"] == "/login"


@pytest.mark.asyncio
async def test_logged_in_user_skips_login_page(user_client):
    response = await user_client.get("/login")
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"
    assert "Max-Age=86400" in response.headers["set-cookie"]


@pytest.mark.asyncio
async def test_rendered_page_refreshes_session_cookie(user_client):
    response = await user_client.get("/dashboard")
    assert response.status_code == 200
    set_cookie = response.headers["set-cookie"]
    assert set_cookie.startswith("raugupatis_session=")
    assert "Max-Age=86400" in set_cookie


@pytest.mark.asyncio
async def test_anonymous_page_sets_no_cookie(client):
    response = await client.get("/")
    assert "set-cookie" not in response.headers


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/dashboard", "/profile", "/change-password", "/fermentations", "/fermentation/new"])
async def test_user_pages_render(user_client, path):
    response = await user_client.get(path)
    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]


@pytest.mark.asyncio
async def test_fermentation_pages(user_client):
    profiles = (await user_client.get("/api/fermentation/profiles")).json()
    created = (
        await user_client.post("/api/fermentation", json={"profile_id": profiles[0]["id"], "name": "Jar on the shelf"})
    ).json()
    await user_client.post(f"/api/fermentation/{created['id']}/temperature", json={"temperature": 71.5})

    detail = await user_client.get(f"/fermentation/{created['id']}")
    assert detail.status_code == 200
    assert "Jar on the shelf" in detail.text
    assert "71.5" in detail.text

    edit = await user_client.get(f"/fermentation/{created['id']}/edit")
    assert edit.status_code == 200

    listing = await user_client.get("/fermentations")
    assert "Jar on the shelf" in listing.text


@pytest.mark.asyncio
async def test_other_users_fermentation_page_redirects(user_client, make_client, create_user, login_as):
    profiles = (await user_client.get("/api/fermentation/profiles")).json()
    created = (
        await user_client.post("/api/fermentation", json={"profile_id": profiles[0]["id"], "name": "Private"})
    ).json()

    await create_user("bob@example.com")
    bob = make_client()
    await login_as(bob, "bob@example.com")
    response = await bob.get(f"/fermentation/{created['id']}")
    assert response.status_code == 303
    assert response.headers["location"] == "/fermentations"


@pytest.mark.asyncio
async def test_admin_pages(user_client, admin_client):
    response = await user_client.get("/admin/users")
    assert response.status_code == 303
    assert response.headers["location"] == "/dashboard"

    for path in ("/admin/users", "/admin/profiles"):
        response = await admin_client.get(path)
        assert response.status_code == 200
