"""
Shared fixtures: a fresh, fully migrated SQLite database per test and an
httpx client bound to the ASGI app.
"""
from typing import AsyncIterator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from raugupatis.auth import accounts, passwords
from raugupatis.config import Settings
from raugupatis.infra.db.migrate import apply_migrations
from raugupatis.infra.db.models import User
from raugupatis.infra.db.session import Database
from raugupatis.main import create_app

DEFAULT_PASSWORD = "securepass123"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    # Minimum work factor keeps the suite fast; the algorithm is unchanged
    monkeypatch.setattr(passwords, "BCRYPT_ROUNDS", 4)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        database_url=f"sqlite+aiosqlite:///{(tmp_path / 'test.db').as_posix()}",
        session_secret="test-session-secret-0123456789",
        data_dir=tmp_path / "data",
        uploads_dir=tmp_path / "uploads",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(settings) -> AsyncIterator[Database]:
    db = Database(settings.database_url)
    await apply_migrations(db.engine)
    yield db
    await db.close()


@pytest_asyncio.fixture
async def session(database) -> AsyncIterator[AsyncSession]:
    async with database.session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    # ASGITransport does not run the lifespan, so migrate explicitly
    await apply_migrations(application.state.db.engine)
    yield application
    await application.state.db.close()


@pytest_asyncio.fixture
async def app_session(app) -> AsyncIterator[AsyncSession]:
    """A session on the app's own database, for arranging and asserting rows."""
    async with app.state.db.session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def make_client(app) -> AsyncIterator[Callable[[], AsyncClient]]:
    """Factory for independent clients, each with its own cookie jar."""
    clients: list[AsyncClient] = []

    def _make() -> AsyncClient:
        c = AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver")
        clients.append(c)
        return c

    yield _make
    for c in clients:
        await c.aclose()


@pytest_asyncio.fixture
async def client(make_client) -> AsyncClient:
    return make_client()


@pytest_asyncio.fixture
async def create_user(app_session) -> Callable[..., Awaitable[User]]:
    async def _create(email: str, password: str = DEFAULT_PASSWORD, role: str = "user", **fields) -> User:
        return await accounts.register(app_session, email=email, password=password, role=role, **fields)

    return _create


async def login(client: AsyncClient, email: str, password: str = DEFAULT_PASSWORD, remember_me: bool = False):
    response = await client.post(
        "/api/users/login",
        json={"email": email, "password": password, "remember_me": remember_me},
    )
    assert response.status_code == 200, response.text
    return response


@pytest_asyncio.fixture
async def user_client(make_client, create_user) -> AsyncClient:
    """Client logged in as alice@example.com."""
    await create_user("alice@example.com")
    c = make_client()
    await login(c, "alice@example.com")
    return c


@pytest_asyncio.fixture
async def admin_client(make_client, create_user) -> AsyncClient:
    """Client logged in as admin@example.com."""
    await create_user("admin@example.com", role="admin")
    c = make_client()
    await login(c, "admin@example.com")
    return c


@pytest.fixture
def login_as() -> Callable[..., Awaitable]:
    return login
