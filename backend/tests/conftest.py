"""
TourStack Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment is pointed at temporary locations before anything from
       tourstack is imported, so the settings singleton (and every service
       singleton built from it) never touches a developer's data.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── db_engine:           SQLite file in tmp_path with every table created
    ├── session_factory:     async_sessionmaker bound to db_engine
    ├── db_session:          one AsyncSession for service-level tests
    ├── test_client:         HTTPX AsyncClient on the FastAPI app, each request
    │                        getting its own session from session_factory
    ├── temp_uploads:        FileService rooted in tmp_path
    ├── recording_transport: httpx.MockTransport that remembers requests
    └── sample_png_bytes:    a few bytes with a PNG signature
"""

import os
import tempfile

# Override settings for testing BEFORE any tourstack imports
_TEST_ROOT = tempfile.mkdtemp(prefix="tourstack_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_ROOT}/default.db"
os.environ["GOOGLE_VISION_API_KEY"] = "test-google-key"
os.environ["GEMINI_API_KEY"] = "test-gemini-key"
os.environ["UPLOADS_DIR"] = os.path.join(_TEST_ROOT, "uploads")
os.environ["NODE_ENV"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Callable, List

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tourstack.database import Base, build_engine, get_db_session
from tourstack.services.file_service import FileService
import tourstack.models  # noqa: F401


class RecordingTransport(httpx.MockTransport):
    """
    MockTransport that keeps every request it answered.

    Usage:
        transport = recording_transport(lambda req: httpx.Response(200, json={...}))
        service = GoogleTranslateService("key", "http://localhost", transport=transport)
        ...
        assert len(transport.requests) == 0
    """

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return responder(request)

        super().__init__(handler)


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(session_factory):
    """
    HTTPX AsyncClient talking to the app through ASGITransport.

    get_db_session is overridden so requests commit into the per-test
    database; the lifespan hook is not run.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/api/health")
            assert response.status_code == 200
    """
    from tourstack.main import app

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def recording_transport():
    return RecordingTransport


# ══════════════════════════════════════════════════════════════════════════
# File Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def temp_uploads(tmp_path) -> FileService:
    service = FileService(uploads_root=str(tmp_path / "uploads"), max_upload_size=1024 * 1024)
    service.ensure_directories()
    return service


@pytest.fixture
def sample_png_bytes() -> bytes:
    # PNG signature + IHDR chunk header; enough for anything that sniffs bytes
    return b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 17


@pytest.fixture
def google_error() -> Callable[[int, str], Any]:
    """Build a Google-style error response."""

    def build(status: int, message: str) -> httpx.Response:
        return httpx.Response(status, json={"error": {"code": status, "message": message, "status": "ERROR"}})

    return build
