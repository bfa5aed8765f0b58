"""
Test infrastructure for the board API.

Strategy
--------
- SQLite in-memory via aiosqlite eliminates the need for a running Postgres
  instance in CI, keeping the suite fast and self-contained.
- StaticPool forces all async tasks to share the same in-memory database
  connection, which is required because SQLite in-memory databases are
  connection-scoped; a new connection would see an empty database.
- Foreign keys are switched on for every connection so ON DELETE CASCADE
  behaves as it does on Postgres.
- The app's get_db dependency is overridden so every test-time request
  (including the bearer-token dependency) uses the test session factory.
- All tables are created fresh before each test and dropped after.
- PBKDF2 iterations are lowered through the environment before the app
  is imported; hashing strength is irrelevant to what the tests check.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("PASSWORD_HASH_ITERATIONS", "1000")

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from board.database import Base, get_db
from board.main import app
from board.middleware import install_query_counter

# ---------------------------------------------------------------------------
# Test database engine — SQLite in-memory with aiosqlite
# ---------------------------------------------------------------------------

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "password123"

engine_test = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Register the per-request SQL query counter on the test engine.
install_query_counter(engine_test)


@event.listens_for(engine_test.sync_engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


async_session_test = async_sessionmaker(
    engine_test,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ---------------------------------------------------------------------------
# Dependency override — replace production get_db with the test session factory
# ---------------------------------------------------------------------------

async def override_get_db():
    async with async_session_test() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    """Create all tables before each test, drop after to guarantee isolation."""
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine_test.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session() -> AsyncSession:
    """
    Yield a live AsyncSession for tests that call service functions
    directly or need to assert ORM state.
    """
    async with async_session_test() as session:
        yield session


@pytest_asyncio.fixture
async def async_client() -> AsyncClient:
    """Yield an httpx.AsyncClient wired to the FastAPI app via ASGITransport."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def signup(async_client: AsyncClient):
    """
    Return a coroutine that registers an account under *nickname*, logs
    it in and returns ``(account_id, auth_headers)``.
    """
    async def _signup(nickname: str) -> tuple[int, dict]:
        email = f"{nickname}@example.com"
        resp = await async_client.post("/api/v1/auth/signup", json={
            "email": email,
            "nickname": nickname,
            "password": TEST_PASSWORD,
        })
        assert resp.status_code == 201, resp.text
        account_id = resp.json()["id"]

        login = await async_client.post("/api/v1/auth/login", json={
            "email": email,
            "password": TEST_PASSWORD,
        })
        assert login.status_code == 200, login.text
        token = login.json()["access_token"]
        return account_id, {"Authorization": f"Bearer {token}"}

    return _signup


@pytest_asyncio.fixture
async def captured_sql():
    """Collect every SQL statement the test engine executes while in scope."""
    statements: list[str] = []

    def _capture(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine_test.sync_engine, "before_cursor_execute", _capture)
    yield statements
    event.remove(engine_test.sync_engine, "before_cursor_execute", _capture)
