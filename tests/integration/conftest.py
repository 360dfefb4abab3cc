"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.

Pre-condition: a PostgreSQL reachable via DATABASE_URL with ``alembic upgrade head``
applied, and RUN_INTEGRATION=1 in the environment.
"""

import uuid

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from src.main import app
from src.pf_gateway.auth.jwt_handler import create_access_token


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client — keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def fresh_user_headers() -> dict[str, str]:
    """Bearer header for a brand-new owner id, so tests never share rows."""
    user_id = f"it-{uuid.uuid4().hex[:12]}"
    return {"Authorization": f"Bearer {create_access_token(user_id)}"}
