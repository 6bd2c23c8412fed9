"""
Integration tests for the gamification API (XP, streaks, badges).
"""

import uuid
from datetime import date

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_xp_for_new_user(client: AsyncClient, test_trainer):
    """Users without any XP row start at level 1."""
    response = await client.get(f"/api/v1/users/{test_trainer.id}/xp")

    assert response.status_code == 200
    data = response.json()
    assert data["level"]["level"] == 1
    assert data["level"]["name"] == "Novice"
    assert data["level"]["total_xp"] == 0
    assert data["history"] == []


@pytest.mark.asyncio
async def test_grant_xp_levels_up(client: AsyncClient, test_trainer):
    first = await client.post(
        f"/api/v1/users/{test_trainer.id}/xp",
        json={"amount": 450, "description": "Workshop"},
    )
    assert first.status_code == 200
    assert first.json()["leveled_up"] is False

    second = await client.post(f"/api/v1/users/{test_trainer.id}/xp", json={"amount": 100})
    data = second.json()
    assert data["total_xp"] == 550
    assert data["current_level"] == 2
    assert data["level_name"] == "Learner"
    assert data["level_xp"] == 50
    assert data["leveled_up"] is True
    assert data["level_up_at"] is not None

    progress = (await client.get(f"/api/v1/users/{test_trainer.id}/xp")).json()
    assert progress["level"]["total_xp"] == 550
    assert progress["level_up_at"] is not None
    assert [h["xp_amount"] for h in progress["history"]] == [100, 450]


@pytest.mark.asyncio
async def test_negative_xp_rejected(client: AsyncClient, test_trainer):
    response = await client.post(f"/api/v1/users/{test_trainer.id}/xp", json={"amount": -10})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_xp_unknown_user(client: AsyncClient, setup_db):
    response = await client.get(f"/api/v1/users/{uuid.uuid4()}/xp")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_record_streak_activity(client: AsyncClient, test_trainer):
    url = f"/api/v1/users/{test_trainer.id}/streaks/consistency"

    await client.post(url, json={"activity_date": "2026-03-01"})
    await client.post(url, json={"activity_date": "2026-03-02"})
    same_day = await client.post(url, json={"activity_date": "2026-03-02"})

    assert same_day.status_code == 200
    data = same_day.json()
    assert data["type"] == "consistency"
    assert data["current_streak"] == 2
    assert data["longest_streak"] == 2
    assert data["streak_start_date"] == "2026-03-01"

    reset = (await client.post(url, json={"activity_date": "2026-03-10"})).json()
    assert reset["current_streak"] == 1
    assert reset["longest_streak"] == 2

    streaks = (await client.get(f"/api/v1/users/{test_trainer.id}/streaks")).json()
    assert len(streaks) == 1


@pytest.mark.asyncio
async def test_streak_defaults_to_today(client: AsyncClient, test_trainer):
    response = await client.post(f"/api/v1/users/{test_trainer.id}/streaks/improvement")

    assert response.status_code == 200
    assert response.json()["last_activity_date"] == date.today().isoformat()


@pytest.mark.asyncio
async def test_invalid_streak_type(client: AsyncClient, test_trainer):
    response = await client.post(f"/api/v1/users/{test_trainer.id}/streaks/daily_login")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_badges_empty(client: AsyncClient, test_trainer):
    response = await client.get(f"/api/v1/users/{test_trainer.id}/badges")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_feedback_suggestions(client: AsyncClient):
    response = await client.get(
        "/api/v1/feedback/suggestions",
        params={"rating": 4.8, "parameter": "clear_speech", "tone": "encouraging"},
    )

    assert response.status_code == 200
    suggestions = response.json()
    assert len(suggestions) == 3
    assert "Clear Speech" in suggestions[0]["text"]
    assert all(s["tone"] == "encouraging" for s in suggestions)


@pytest.mark.asyncio
async def test_feedback_suggestions_validation(client: AsyncClient):
    bad_tone = await client.get(
        "/api/v1/feedback/suggestions",
        params={"rating": 3, "parameter": "clear_speech", "tone": "sarcastic"},
    )
    bad_param = await client.get(
        "/api/v1/feedback/suggestions",
        params={"rating": 3, "parameter": "charisma"},
    )

    assert bad_tone.status_code == 400
    assert bad_param.status_code == 422
