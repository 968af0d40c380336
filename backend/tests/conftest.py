"""Pytest configuration and fixtures for the financials backend tests"""
import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Load environment variables, then point the application at SQLite before it builds its engine
load_dotenv()
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"

from app.main import app  # noqa: E402
from app.models.database import Base, get_db, get_session_factory  # noqa: E402
from app.models.startup import Startup  # noqa: E402
from app.services.attachments import AttachmentService, get_attachment_service  # noqa: E402

# In-memory database shared by every connection of one test engine
TEST_DATABASE_URL = "sqlite+aiosqlite://"


def make_engine() -> AsyncEngine:
    return create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest_asyncio.fixture(scope="function")
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory schema for each test"""
    engine = make_engine()
    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


class FailingCommitSession(AsyncSession):
    """Session whose commits fail as if the database had gone away"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.rollbacks = 0

    async def commit(self) -> None:
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    async def rollback(self) -> None:
        self.rollbacks += 1
        await super().rollback()


@pytest_asyncio.fixture(scope="function")
async def failing_session(engine: AsyncEngine) -> AsyncGenerator[FailingCommitSession, None]:
    """Session over the test schema that cannot commit"""
    session = FailingCommitSession(bind=engine, expire_on_commit=False)
    try:
        yield session
    finally:
        await session.close()


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test"""
    session = session_factory()
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def attachment_service(tmp_path) -> AttachmentService:
    """Attachment service writing into the test's temporary directory"""
    return AttachmentService(
        storage_dir=str(tmp_path / "attachments"),
        base_url="http://test/attachments",
        max_bytes=1024,
        allowed_extensions=["pdf", "png", "csv"],
    )


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    session_factory: async_sessionmaker,
    attachment_service: AttachmentService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_attachment_service] = lambda: attachment_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def startup(db_session: AsyncSession) -> Startup:
    """A registered startup with one subsidiary and no funding"""
    s = Startup(
        name="Acme Robotics",
        country_of_registration="India",
        currency="USD",
        registration_date=date(2023, 3, 1),
        subsidiaries=[{"country": "US"}],
        international_ops=[{"country": "Singapore"}],
        total_funding=Decimal("0"),
    )
    db_session.add(s)
    await db_session.commit()
    await db_session.refresh(s)
    return s


@pytest.fixture
def mock_startup_data():
    """Startup registration payload"""
    return {
        "name": "Test Startup",
        "country_of_registration": "India",
        "currency": "usd",
        "registration_date": "2023-01-15",
        "subsidiaries": [{"country": "US"}],
        "international_ops": [],
    }


@pytest.fixture
def mock_investment_data():
    """Investment payload"""
    return {
        "date": "2024-01-15",
        "investor_type": "VC Firm",
        "investment_type": "Equity",
        "investor_name": "Seed Capital Partners",
        "amount": "100000",
        "equity_allocated": "10",
    }


@pytest.fixture
def live_client(attachment_service: AttachmentService):
    """Starlette TestClient running the app lifespan over its own in-memory schema"""
    engine = make_engine()
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: factory
    app.dependency_overrides[get_attachment_service] = lambda: attachment_service
    try:
        with TestClient(app) as tc:
            tc.portal.call(create_schema, engine)
            yield tc
            tc.portal.call(engine.dispose)
    finally:
        app.dependency_overrides.clear()
