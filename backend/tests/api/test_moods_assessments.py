"""
기분 기록과 일일 평가 엔드포인트 테스트
"""
from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
import pytest
from pymongo.errors import PyMongoError
from asgi_lifespan import LifespanManager

from backend.app.main import app
from backend.app.schemas.assessments import CategoryRatings

PASSWORD = "senha-segura-123"


@asynccontextmanager
async def _client():
    async with LifespanManager(app):
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
            yield client


async def _login(client: httpx.AsyncClient, email: str = "ana@example.com") -> dict[str, str]:
    await client.post("/api/auth/signup", json={"email": email, "password": PASSWORD, "name": "Ana"})
    response = await client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def _ratings(value: int = 7, **overrides: int) -> dict[str, int]:
    ratings = {name: value for name in CategoryRatings.model_fields}
    ratings.update(overrides)
    return ratings


@pytest.mark.asyncio
async def test_mood_entries_and_analysis():
    async with _client() as client:
        headers = await _login(client)

        empty = await client.get("/api/moods/analysis", params={"timeframe": "weekly"}, headers=headers)
        assert empty.status_code == 200
        assert empty.json() is None

        first = await client.post(
            "/api/moods",
            json={"primary": "triste", "intensity": 2, "activities": ["trabalho"]},
            headers=headers,
        )
        assert first.status_code == 201
        assert first.json()["mood"]["primary"] == "triste"
        assert first.json()["context"]["activities"] == ["trabalho"]

        await client.post(
            "/api/moods",
            json={"primary": "feliz", "intensity": 4, "secondary": ["grato"], "activities": ["caminhada"]},
            headers=headers,
        )

        entries = (await client.get("/api/moods", headers=headers)).json()
        assert len(entries) == 2

        analysis = await client.get("/api/moods/analysis", params={"timeframe": "weekly"}, headers=headers)
        assert analysis.status_code == 200
        body = analysis.json()
        assert body["timeframe"] == "weekly"
        assert body["entry_count"] == 2
        assert body["metrics"]["recovery_resilience"] == 1.0
        assert body["metrics"]["positive_negative_ratio"] == 1.0
        assert any(i["type"] == "improvement" and "caminhada" in i["description"] for i in body["insights"])


@pytest.mark.asyncio
async def test_mood_entry_validation():
    async with _client() as client:
        headers = await _login(client)

        too_intense = await client.post("/api/moods", json={"primary": "feliz", "intensity": 6}, headers=headers)
        assert too_intense.status_code == 422

        unknown = await client.post("/api/moods", json={"primary": "eufórico", "intensity": 3}, headers=headers)
        assert unknown.status_code == 422

        timeframe = await client.get("/api/moods/analysis", params={"timeframe": "yearly"}, headers=headers)
        assert timeframe.status_code == 422


@pytest.mark.asyncio
async def test_assessment_once_per_day():
    async with _client() as client:
        headers = await _login(client)

        today = await client.get("/api/assessments/today", headers=headers)
        assert today.json() is None

        created = await client.post(
            "/api/assessments",
            json={"ratings": _ratings(), "gratitude": "Pelo jantar"},
            headers=headers,
        )
        assert created.status_code == 201
        assert created.json()["ratings"]["comunicacao"] == 7

        duplicate = await client.post("/api/assessments", json={"ratings": _ratings()}, headers=headers)
        assert duplicate.status_code == 409

        today = await client.get("/api/assessments/today", headers=headers)
        assert today.json()["gratitude"] == "Pelo jantar"

        history = await client.get("/api/assessments/history", headers=headers)
        assert len(history.json()) == 1


@pytest.mark.asyncio
async def test_assessment_rating_range():
    async with _client() as client:
        headers = await _login(client)

        response = await client.post("/api/assessments", json={"ratings": _ratings(comunicacao=11)}, headers=headers)
        assert response.status_code == 422

        response = await client.post("/api/assessments", json={"ratings": _ratings(gratidao=0)}, headers=headers)
        assert response.status_code == 422


@pytest.mark.asyncio
async def test_assessment_statistics():
    async with _client() as client:
        headers = await _login(client)
        await client.post("/api/assessments", json={"ratings": _ratings(intimidade_fisica=8)}, headers=headers)

        response = await client.get("/api/assessments/statistics", headers=headers)
        assert response.status_code == 200
        stats = response.json()
        assert len(stats["time_series"]) == 1
        record = stats["time_series"][0]
        assert record["userComunicacao"] == 7
        assert record["userPhysicalIntimacy"] == 4.0
        assert "partnerComunicacao" not in record
        assert len(stats["radar_chart"]) == 13
        assert stats["radar_chart"][0]["partner"] == 0
        assert stats["trends"]["user"]["comunicacao"] == "stable"


def _break_find(monkeypatch: pytest.MonkeyPatch, collection) -> None:
    def broken_find(*_args, **_kwargs):
        raise PyMongoError("connection refused")

    monkeypatch.setattr(collection, "find", broken_find)


@pytest.mark.asyncio
async def test_mood_analysis_store_failure_returns_503(monkeypatch, dummy_mongo):
    async with _client() as client:
        headers = await _login(client)
        _break_find(monkeypatch, dummy_mongo["any"]["moodEntries"])

        response = await client.get("/api/moods/analysis", headers=headers)
        assert response.status_code == 503
        assert response.json()["detail"] == "Falha ao carregar os dados de humor."


@pytest.mark.asyncio
async def test_statistics_store_failure_returns_503(monkeypatch, dummy_mongo):
    async with _client() as client:
        headers = await _login(client)
        _break_find(monkeypatch, dummy_mongo["any"]["assessments"])

        response = await client.get("/api/assessments/statistics", headers=headers)
        assert response.status_code == 503
        assert response.json()["detail"] == "Falha ao carregar as avaliações."
