"""Tests for the main API endpoints."""
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from xpforge import __version__, main


@pytest.mark.asyncio
async def test_read_root(async_client: AsyncClient):
    """Test if the root endpoint names the service and its version."""
    response = await async_client.get("/")

    assert response.status_code == 200
    assert response.json() == {"service": "XPForge API", "version": __version__}


@pytest.mark.asyncio
async def test_health_check(async_client: AsyncClient):
    response = await async_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "ok"}


@pytest.mark.asyncio
async def test_health_check_reports_unreachable_database(
    async_client: AsyncClient, db_session: AsyncSession
):
    failing_execute = AsyncMock(
        side_effect=OperationalError("SELECT 1", {}, Exception("unable to open file"))
    )

    with patch.object(db_session, "execute", failing_execute):
        response = await async_client.get("/health")

    assert response.status_code == 503
    assert response.json() == {"status": "unhealthy", "database": "unreachable"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(async_client: AsyncClient):
    response = await async_client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_serve_runs_the_app_under_uvicorn():
    with (
        patch.object(main.config, "API_HOST", "0.0.0.0"),
        patch.object(main.config, "API_PORT", 9100),
        patch("uvicorn.run") as run,
    ):
        main.serve()

    run.assert_called_once()
    args, kwargs = run.call_args
    assert args == ("xpforge.main:app",)
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 9100
    assert kwargs["reload"] is False
