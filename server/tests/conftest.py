"""Test configuration and fixtures."""

import os
from datetime import date, timedelta

# The application engine is created at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DISCORD_WEBHOOK_URL", "")

import pytest
import pytest_asyncio
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from aerodemo.core.database import Base
from aerodemo.models import *  # noqa: F403 - Import all models
from aerodemo.services.messages import NotificationPayload
from aerodemo.services.notifier import NotificationDispatcher
from aerodemo.services.record_store import RecordStore
from aerodemo.services.status_policy import TransitionPolicy
from aerodemo.services.subscriptions import SnapshotHub
from aerodemo.services.workflow_engine import WorkflowEngine

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingNotifier:
    """Notifier double that remembers every payload it was handed."""

    def __init__(self, result: bool = True, error: Exception | None = None):
        self.result = result
        self.error = error
        self.sent: list[NotificationPayload] = []

    async def send(self, payload: NotificationPayload) -> bool:
        self.sent.append(payload)
        if self.error is not None:
            raise self.error
        return self.result

    @property
    def titles(self) -> list[str]:
        return [payload.title for payload in self.sent]


async def create_test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    return engine


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = await create_test_engine()

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def snapshot_hub(session_factory):
    return SnapshotHub(session_factory)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    """Notifier whose webhook call always throws."""
    return RecordingNotifier(error=RuntimeError("webhook down"))


@pytest.fixture
def dispatcher(notifier):
    """Inline dispatcher so notifications are delivered before the call returns."""
    return NotificationDispatcher(notifier, background=False)


@pytest_asyncio.fixture(scope="function")
async def record_store(test_session, snapshot_hub):
    return RecordStore(test_session, snapshot_hub)


@pytest_asyncio.fixture(scope="function")
async def workflow_engine(record_store, dispatcher):
    return WorkflowEngine(record_store, dispatcher, TransitionPolicy())


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, snapshot_hub, dispatcher):
    """Create a test FastAPI application."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError

    from aerodemo.core import dependencies
    from aerodemo.core.exceptions import (
        ProblemDetailsException,
        generic_exception_handler,
        problem_details_handler,
        request_validation_handler,
    )
    from aerodemo.core.middleware import setup_middleware
    from aerodemo.routers import enlistments, health, metrics, presentations, showcase

    # Simplified test app without lifespan
    app = FastAPI(
        title="Aerial Demonstration Team API (Test)",
        description="Test version of the API",
        version="1.0.0-test",
    )

    setup_middleware(app, enable_logging=False)

    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "aerodemo-api",
            "version": "1.0.0",
            "environment": "test",
            "debug": True,
        }

    app.include_router(health.router)
    app.include_router(presentations.router)
    app.include_router(enlistments.router)
    app.include_router(showcase.router)
    app.include_router(metrics.router)

    async def override_get_db():
        yield test_session

    app.dependency_overrides[dependencies.get_db] = override_get_db
    app.dependency_overrides[dependencies.get_snapshot_hub] = lambda: snapshot_hub
    app.dependency_overrides[dependencies.get_notification_dispatcher] = lambda: dispatcher
    app.dependency_overrides[dependencies.get_transition_policy] = lambda: TransitionPolicy()

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    from httpx import ASGITransport
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def future_date():
    return date.today() + timedelta(days=30)


@pytest.fixture
def sample_presentation_data(future_date):
    """Booking request as posted by the public form."""
    return {
        "city": "Curitiba",
        "email": "eventos@curitiba.example",
        "date": future_date.isoformat(),
        "time": "14:00",
        "description": "Air show for festival",
        "discordId": "curitiba#0001",
    }


@pytest.fixture
def sample_enlistment_data():
    """Enlistment application as posted by the public form."""
    return {
        "nome": "Ana",
        "sobrenome": "Souza",
        "email": "ana.souza@example.com",
        "discordNick": "ana_pilot",
        "motivoEntrada": "I have followed the team for years and want to fly with you",
        "conhecimentoAviao": "willing-to-learn",
        "idade": "24",
        "vooFivem": "sim",
        "conheceEsquadrilha": "nao",
        "turno": ["Night", "Weekend"],
    }
