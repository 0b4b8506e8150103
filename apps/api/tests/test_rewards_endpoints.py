from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.mark.asyncio
async def test_affordable_rewards_boundary(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        included = await client.get("/api/v1/rewards/affordable", params={"program": "XPOINTS", "balance": 10_000})
        excluded = await client.get("/api/v1/rewards/affordable", params={"program": "XPOINTS", "balance": 9_999})

    assert included.status_code == 200
    assert [item["pointsRequired"] for item in included.json()] == [10_000, 4_000, 3_000]
    assert "A $100 shopping voucher" not in {item["description"] for item in excluded.json()}


@pytest.mark.asyncio
async def test_translate_endpoint(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get(
            "/api/v1/rewards/translate",
            params={"program": "QANTAS", "points": 20_000, "order": "cheapest_first"},
        )
        empty = await client.get("/api/v1/rewards/translate", params={"program": "QANTAS", "points": 0})

    payload = response.json()
    assert response.status_code == 200
    assert payload["dollarValue"] == pytest.approx(120.0)
    required = [item["pointsRequired"] for item in payload["rewards"]]
    assert required == sorted(required)
    assert required[0] == 5_000
    assert empty.json()["rewards"] == []


@pytest.mark.asyncio
async def test_unknown_program_is_rejected(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/rewards/catalog", params={"program": "BOGUS"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_catalog_filters_by_category(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/rewards/catalog", params={"program": "HILTON", "category": "hotel"})

    assert response.status_code == 200
    assert [item["pointsRequired"] for item in response.json()] == [150_000, 100_000]


@pytest.mark.asyncio
async def test_upcoming_and_value_endpoints(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        upcoming = await client.get("/api/v1/rewards/upcoming", params={"program": "XPOINTS", "points": 5_000})
        value = await client.get("/api/v1/rewards/value", params={"program": "XPOINTS", "points": 1_000})

    goals = upcoming.json()
    assert goals[0]["reward"]["category"] == "shopping"
    assert goals[0]["pointsNeeded"] == 5_000
    assert goals[0]["progressPercent"] == pytest.approx(50.0)

    body = value.json()
    assert body["dollarValue"] == pytest.approx(10.0)
    assert "$10" in body["summary"]


@pytest.mark.asyncio
async def test_programs_endpoint(app_with_db) -> None:
    app, _ = app_with_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/api/v1/programs")

    programs = {item["program"]: item for item in response.json()}
    assert len(programs) == 10
    assert programs["XPOINTS"]["isHub"] is True
    assert programs["AIRBNB"]["pointValue"] == "0.0095"
