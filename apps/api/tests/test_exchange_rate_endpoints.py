from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from xpoints_api.core.settings import settings
from xpoints_api.domain.programs import LoyaltyProgram


@pytest.mark.asyncio
async def test_get_exchange_rate(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/exchange-rates", params={"from": "QANTAS", "to": "XPOINTS"})
        same = await client.get("/api/v1/exchange-rates", params={"from": "GYG", "to": "GYG"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["rate"] == "0.600000"
    assert payload["verification"]["isVerified"] is True
    assert payload["verification"]["source"] == "rate-table"
    assert same.json()["rate"] == "1.000000"


@pytest.mark.asyncio
async def test_list_all_exchange_rates(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/exchange-rates/all")

    assert response.status_code == 200
    assert len(response.json()) == 100


@pytest.mark.asyncio
async def test_missing_exchange_rate_returns_404(session_factory) -> None:
    from xpoints_api.app import create_app
    from xpoints_api.db.session import get_session

    app = create_app()

    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/exchange-rates", params={"from": "QANTAS", "to": "XPOINTS"})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_compare_exchange_rate(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        offered = await client.get(
            "/api/v1/exchange-rates/compare",
            params={"from": "QANTAS", "to": "XPOINTS", "rate": 0.75},
        )
        published = await client.get("/api/v1/exchange-rates/compare", params={"from": "QANTAS", "to": "XPOINTS"})

    assert offered.json()["isFavorable"] is True
    assert offered.json()["differencePercent"] == pytest.approx(25.0)
    assert published.json()["isFavorable"] is False
    assert published.json()["offeredRate"] == "0.600000"


@pytest.mark.asyncio
async def test_compare_published_rate_with_repeating_ratio(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/exchange-rates/compare", params={"from": "XPOINTS", "to": "QANTAS"})

    payload = response.json()
    assert response.status_code == 200
    assert payload["offeredRate"] == "1.666667"
    assert payload["valueRatio"] == "1.666667"
    assert payload["isFavorable"] is False
    assert payload["differencePercent"] == 0.0
    assert payload["recommendation"] == "Converting XPOINTS to QANTAS matches market value."


@pytest.mark.asyncio
async def test_every_published_rate_matches_market_value(app_with_db) -> None:
    app, _ = app_with_db
    verdicts = {}

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        for from_program in LoyaltyProgram:
            for to_program in LoyaltyProgram:
                response = await client.get(
                    "/api/v1/exchange-rates/compare",
                    params={"from": from_program.value, "to": to_program.value},
                )
                assert response.status_code == 200
                payload = response.json()
                verdicts[(from_program, to_program)] = (
                    payload["isFavorable"],
                    str(payload["differencePercent"]),
                    payload["recommendation"].endswith("matches market value."),
                )

    assert len(verdicts) == 100
    assert set(verdicts.values()) == {(False, "0.0", True)}


@pytest.mark.asyncio
async def test_sync_requires_admin_key(app_with_db) -> None:
    app, _ = app_with_db
    previous_key = settings.admin_api_key
    settings.admin_api_key = "sync-key"

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            denied = await client.post("/api/v1/exchange-rates/sync")
            allowed = await client.post("/api/v1/exchange-rates/sync", headers={"X-API-Key": "sync-key"})
    finally:
        settings.admin_api_key = previous_key

    assert denied.status_code == 401
    assert allowed.status_code == 200
    assert allowed.json() == {"pairs": 100}
