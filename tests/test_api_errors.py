# tests/test_api_errors.py

"""Tests for HTTP error responses across all API endpoints."""

import logging
from unittest.mock import AsyncMock, patch

import pytest
from conftest import create_user, total_xp_of
from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from xpforge.services import ledger

# =============================================================================
# 404 Not Found Errors
# =============================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path",
    [
        "/users/nobody",
        "/users/nobody/rank",
        "/users/nobody/rank/activity",
        "/users/nobody/rank/limits/win_match",
    ],
)
async def test_unknown_user_returns_404(async_client: AsyncClient, path: str):
    response = await async_client.get(path)

    assert response.status_code == 404
    data = response.json()
    assert "not found" in data["detail"].lower()
    assert data["error_type"] == "UserNotFoundError"


# =============================================================================
# 422 Validation Errors
# =============================================================================


@pytest.mark.asyncio
async def test_unknown_activity_returns_422(
    async_client: AsyncClient, db_session: AsyncSession
):
    await create_user(db_session, "err-unknown")

    response = await async_client.post(
        "/users/err-unknown/rank/xp", json={"activity": "teleport_hack"}
    )

    assert response.status_code == 422
    data = response.json()
    assert data["error_type"] == "UnknownActivityError"
    assert "teleport_hack" in data["detail"]
    assert await total_xp_of(db_session, "err-unknown") == 0


@pytest.mark.asyncio
async def test_award_to_unregistered_user_returns_422(async_client: AsyncClient):
    response = await async_client.post(
        "/users/ghost/rank/xp", json={"activity": "win_match"}
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "InvalidUserError"


@pytest.mark.asyncio
async def test_award_to_malformed_user_returns_422(async_client: AsyncClient):
    response = await async_client.post(
        "/users/bad;id/rank/xp", json={"activity": "win_match"}
    )

    assert response.status_code == 422
    assert response.json()["error_type"] == "InvalidUserError"


@pytest.mark.asyncio
async def test_limits_for_unknown_activity_returns_422(
    async_client: AsyncClient, db_session: AsyncSession
):
    await create_user(db_session, "err-limits")

    response = await async_client.get("/users/err-limits/rank/limits/teleport_hack")

    assert response.status_code == 422
    assert response.json()["error_type"] == "UnknownActivityError"


@pytest.mark.asyncio
async def test_invalid_award_payload_returns_422(
    async_client: AsyncClient, db_session: AsyncSession
):
    await create_user(db_session, "err-payload")

    missing_activity = await async_client.post("/users/err-payload/rank/xp", json={})
    bad_reference_type = await async_client.post(
        "/users/err-payload/rank/xp",
        json={"activity": "win_match", "reference_type": "planet"},
    )

    assert missing_activity.status_code == 422
    assert bad_reference_type.status_code == 422


@pytest.mark.asyncio
async def test_history_limit_out_of_range_returns_422(
    async_client: AsyncClient, db_session: AsyncSession
):
    await create_user(db_session, "err-history")

    response = await async_client.get(
        "/users/err-history/rank", params={"history_limit": 101}
    )

    assert response.status_code == 422


# =============================================================================
# 429 Rejected Awards
# =============================================================================


@pytest.mark.asyncio
async def test_exhausted_daily_limit_returns_429(
    async_client: AsyncClient, db_session: AsyncSession
):
    await create_user(db_session, "err-capped")

    first = await async_client.post(
        "/users/err-capped/rank/xp", json={"activity": "first_blood"}
    )
    second = await async_client.post(
        "/users/err-capped/rank/xp", json={"activity": "first_blood"}
    )

    assert first.status_code == 201
    assert second.status_code == 429
    data = second.json()
    assert data["error_type"] == "DailyLimitExceededError"
    assert "daily limit" in data["detail"].lower()
    assert await total_xp_of(db_session, "err-capped") == 100


@pytest.mark.asyncio
async def test_rejected_award_is_logged_once(
    async_client: AsyncClient, db_session: AsyncSession, caplog
):
    """Only the 429 handler reports the rejection, not the award service too."""
    await create_user(db_session, "err-capped-log")
    await async_client.post(
        "/users/err-capped-log/rank/xp", json={"activity": "first_blood"}
    )

    with caplog.at_level(logging.WARNING, logger="xpforge"):
        response = await async_client.post(
            "/users/err-capped-log/rank/xp", json={"activity": "first_blood"}
        )

    assert response.status_code == 429
    rejections = [
        r for r in caplog.records if r.getMessage().startswith("Award rejected")
    ]
    assert len(rejections) == 1
    assert rejections[0].name == "xpforge.main"
    assert not [
        r for r in caplog.records if r.name == "xpforge.services.award_service"
    ]


# =============================================================================
# 409 Conflict and 503 Storage Errors
# =============================================================================


@pytest.mark.asyncio
async def test_duplicate_username_returns_409(async_client: AsyncClient):
    first = await async_client.post("/users/", json={"id": "err-dup-1", "username": "Twin"})
    second = await async_client.post(
        "/users/", json={"id": "err-dup-2", "username": "Twin"}
    )

    assert first.status_code == 201
    assert second.status_code == 409
    assert "already exists" in second.json()["detail"]


@pytest.mark.asyncio
async def test_storage_failure_returns_503(
    async_client: AsyncClient, db_session: AsyncSession
):
    await create_user(db_session, "err-storage")
    failing_append = AsyncMock(
        side_effect=OperationalError("INSERT", {}, Exception("database is locked"))
    )

    with patch.object(ledger, "append", failing_append):
        response = await async_client.post(
            "/users/err-storage/rank/xp", json={"activity": "win_match"}
        )

    assert response.status_code == 503
    assert response.json()["error_type"] == "StorageUnavailableError"
    assert await total_xp_of(db_session, "err-storage") == 0
