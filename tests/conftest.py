"""Shared test fixtures."""

from __future__ import annotations

import os

# Configure before the application reads its settings
os.environ["ECO_DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["ECO_REDIS_URL"] = ""
os.environ["ECO_JWT_SECRET_KEY"] = "test-secret-key-for-eco-ideias-suite-0123456789"
os.environ["ECO_LOG_FORMAT"] = "console"
os.environ["ECO_AI_API_KEY"] = ""
os.environ["ECO_FRONTEND_BASE_URL"] = "http://localhost:5173"

from collections.abc import AsyncGenerator, Awaitable, Callable, Iterator  # noqa: E402
from dataclasses import dataclass  # noqa: E402
from datetime import datetime  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from ecoideias.ai.client import AIClient, get_ai_client  # noqa: E402
from ecoideias.auth.jwt import create_access_token  # noqa: E402
from ecoideias.auth.roles import ROLE_ADMIN, ROLE_USER  # noqa: E402
from ecoideias.auth.service import create_account  # noqa: E402
from ecoideias.config import get_settings  # noqa: E402
from ecoideias.database import close_db, get_engine, get_session_factory, init_db  # noqa: E402
from ecoideias.db import models  # noqa: E402, F401
from ecoideias.db.base import Base  # noqa: E402
from ecoideias.email.service import reset_email_service  # noqa: E402
from ecoideias.ideas.service import submit_idea  # noqa: E402
from ecoideias.main import create_app  # noqa: E402
from ecoideias.ws.manager import manager  # noqa: E402

# Modules that look up the email service at call time
_EMAIL_CALLERS = (
    "ecoideias.auth.router",
    "ecoideias.users.router",
    "ecoideias.ideas.service",
    "ecoideias.functions.router",
)


@dataclass
class Account:
    """A seeded account and a valid access token for it."""

    id: str
    email: str
    password: str
    name: str
    role: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture(autouse=True)
def _isolate_singletons() -> Iterator[None]:
    """Fresh settings and email service per test; no WebSocket clients left behind."""
    get_settings.cache_clear()
    reset_email_service()
    yield
    get_settings.cache_clear()
    reset_email_service()
    manager._connections.clear()
    manager._channels.clear()


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[None, None]:
    """In-memory SQLite database with the full schema, dropped after the test."""
    await init_db(get_settings().database_url)
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_db()


@pytest_asyncio.fixture
async def db_session(database: None) -> AsyncGenerator[AsyncSession, None]:
    """Get a direct database session for test setup and assertions."""
    async with get_session_factory()() as session:
        yield session


@pytest_asyncio.fixture
async def app(database: None) -> FastAPI:
    return create_app()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app (lifespan not run; the database fixture sets up state)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture
async def make_account(database: None) -> Callable[..., Awaitable[Account]]:
    """Factory: create an account directly in the database and issue its token."""

    async def _make(
        email: str,
        name: str = "Usuária Teste",
        password: str = "segredo123",
        role: str = ROLE_USER,
    ) -> Account:
        async with get_session_factory()() as db:
            user = await create_account(db, email, password, name, role=role)
            await db.commit()
            user_id = user.id
        return Account(
            id=user_id,
            email=email,
            password=password,
            name=name,
            role=role,
            token=create_access_token(user_id, role),
        )

    return _make


@pytest_asyncio.fixture
async def user(make_account: Callable[..., Awaitable[Account]]) -> Account:
    return await make_account("maria@example.com", "Maria Silva")


@pytest_asyncio.fixture
async def other_user(make_account: Callable[..., Awaitable[Account]]) -> Account:
    return await make_account("joao@example.com", "João Souza")


@pytest_asyncio.fixture
async def admin(make_account: Callable[..., Awaitable[Account]]) -> Account:
    return await make_account("admin@example.com", "Ana Admin", role=ROLE_ADMIN)


@pytest_asyncio.fixture
async def make_idea(database: None) -> Callable[..., Awaitable[str]]:
    """Factory: submit an idea through the service layer, optionally forcing status and timestamp."""

    async def _make(
        owner: Account,
        title: str = "Captação de água da chuva",
        description: str = "Instalar cisternas para reaproveitar a água da chuva nos jardins.",
        category: str = "water",
        impact: str | None = None,
        status: str | None = None,
        created_at: datetime | None = None,
    ) -> str:
        async with get_session_factory()() as db:
            idea, _ = await submit_idea(db, owner.id, title, description, category, impact)
            if status is not None:
                idea.status = status
            if created_at is not None:
                idea.created_at = created_at
            await db.commit()
            return idea.id

    return _make


@pytest.fixture
def mock_email_service(monkeypatch: pytest.MonkeyPatch) -> MagicMock:
    """Mock the email service to prevent actual email sending."""
    mock_service = MagicMock()
    mock_service.send_template = AsyncMock(return_value="msg-123")
    mock_service.send_email = AsyncMock(return_value="msg-123")
    for module in _EMAIL_CALLERS:
        monkeypatch.setattr(f"{module}.get_email_service", lambda: mock_service)
    return mock_service


@pytest.fixture
def mock_ai(app: FastAPI) -> Iterator[Callable[[Callable[[httpx.Request], httpx.Response]], AIClient]]:
    """Install an AI client whose HTTP calls are answered by ``handler``."""

    def _install(handler: Callable[[httpx.Request], httpx.Response]) -> AIClient:
        ai_client = AIClient(
            api_key="test-key",
            base_url="https://ai.test/v1",
            model="test-model",
            transport=httpx.MockTransport(handler),
        )
        app.dependency_overrides[get_ai_client] = lambda: ai_client
        return ai_client

    yield _install
    app.dependency_overrides.clear()
