"""Service test fixtures — both persistence variants + FastAPI test client.

Invariants:
    - Every test gets a fresh store under tmp_path (file JSON or SQLite file DB)
    - `backend` is parametrized: each test using it runs once per variant
    - `client` talks to an app built by create_app() with isolated settings;
      its backend selector is pinned to the file store (no DATABASE_URL)

Design Decisions:
    - SQLite file DB over :memory:: pool-agnostic, and foreign keys (cascade)
      behave like PostgreSQL once the PRAGMA listener runs
    - Route tests go through ASGITransport without lifespan: backend selection
      is lazy on first request, exactly like production's first call
"""

import pytest
from httpx import ASGITransport, AsyncClient

import app.models  # noqa: F401
from app.config import Settings
from app.core.domain_types import DeploymentMode
from app.db.base import Base
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.file_store import FileBackedStore
from app.infrastructure.identity import SessionTokenService
from app.infrastructure.relational_store import RelationalStore
from app.main import create_app
from app.services.favorites import FavoritesService
from app.services.user_directory import UserDirectoryService

OWNER_OPEN_ID = "owner-open-id"
TEST_SECRET = "test-session-secret"


@pytest.fixture
def file_store(tmp_path):
    return FileBackedStore(tmp_path / "server_data.json")


@pytest.fixture
async def relational_store(tmp_path):
    db = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with db.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield RelationalStore(db)
    await db.dispose()


@pytest.fixture(params=["file", "relational"])
def backend(request):
    fixture_name = "file_store" if request.param == "file" else "relational_store"
    return request.getfixturevalue(fixture_name)


@pytest.fixture
def owner_open_id():
    return OWNER_OPEN_ID


@pytest.fixture
def users(backend):
    return UserDirectoryService(backend, owner_open_id=OWNER_OPEN_ID)


@pytest.fixture
def favorites(backend):
    return FavoritesService(backend)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=None,
        dev_db_path=str(tmp_path / "app_data.json"),
        owner_open_id=OWNER_OPEN_ID,
        jwt_secret=TEST_SECRET,
        deployment_mode=DeploymentMode.DEVELOPMENT,
    )


@pytest.fixture
def test_app(settings):
    app = create_app(settings)
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def tokens():
    return SessionTokenService(TEST_SECRET)


@pytest.fixture
async def client(test_app):
    async with AsyncClient(
        transport=ASGITransport(app=test_app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def signed_in(test_app, client, tokens):
    """Create a user in the app's store and attach a session cookie to client."""
    backend = await test_app.state.backend_selector.get()
    directory = UserDirectoryService(backend)
    await directory.upsert_user("viewer-1", {"name": "Chihiro"})
    user = await directory.get_user_by_open_id("viewer-1")
    client.cookies.set(
        test_app.state.settings.session_cookie_name,
        tokens.create_session_token("viewer-1", "Chihiro"),
    )
    return user
