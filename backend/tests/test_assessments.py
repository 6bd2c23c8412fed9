"""
Integration tests for the Assessments API.

Covers validation, eligibility, immutability, and the gamification
side effects of submitting an assessment.
"""

import uuid
from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from trainer_insights.config import settings
from trainer_insights.structure import ParameterId


def _payload(trainer, assessor, score=4, day=None, **extra):
    return {
        "trainer_id": str(trainer.id),
        "assessor_id": str(assessor.id),
        "assessment_date": (day or date.today()).isoformat(),
        "ratings": {param.value: score for param in ParameterId},
        **extra,
    }


@pytest.mark.asyncio
async def test_create_assessment(client: AsyncClient, test_trainer, test_manager):
    """POST /api/v1/assessments stores the assessment and awards XP."""
    response = await client.post(
        "/api/v1/assessments",
        json=_payload(
            test_trainer, test_manager, score=4,
            comments={"clear_speech": "Very clear"},
            overall_comments="Solid session",
        ),
    )

    assert response.status_code == 201
    data = response.json()
    assert data["trainer_id"] == str(test_trainer.id)
    assert data["average"] == 4.0
    assert data["ratings"]["logs_in_early"] == 4
    assert data["comments"] == {"clear_speech": "Very clear"}
    assert data["overall_comments"] == "Solid session"

    rewards = data["rewards"]
    # first_assessment, rising_star and all_rounder on the first 4.0 assessment
    assert set(rewards["badges_awarded"]) == {"first_assessment", "rising_star", "all_rounder"}
    assert rewards["xp_awarded"] == 100 + 3 * 50
    assert rewards["total_xp"] == 250
    assert rewards["current_level"] == 1
    assert rewards["assessment_streak"] == 1


@pytest.mark.asyncio
async def test_get_assessment(client: AsyncClient, test_trainer, test_manager):
    """GET /api/v1/assessments/{id} returns the stored ratings."""
    payload = _payload(test_trainer, test_manager)
    payload["ratings"] = {"logs_in_early": 5, "clear_speech": 3, "session_recording": 0}
    created = (await client.post("/api/v1/assessments", json=payload)).json()

    response = await client.get(f"/api/v1/assessments/{created['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["ratings"]["logs_in_early"] == 5
    assert data["ratings"]["session_recording"] == 0
    assert data["ratings"]["survey_assignment"] is None
    assert data["average"] == 4.0                # 0 is "not rated"
    assert data["rewards"] is None


@pytest.mark.asyncio
async def test_get_assessment_not_found(client: AsyncClient):
    response = await client.get(f"/api/v1/assessments/{uuid.uuid4()}")
    assert response.status_code == 404


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_rating", [6, -1])
async def test_rating_out_of_range_rejected(client: AsyncClient, test_trainer, test_manager, bad_rating):
    payload = _payload(test_trainer, test_manager)
    payload["ratings"]["clear_speech"] = bad_rating

    response = await client.post("/api/v1/assessments", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_parameter_rejected(client: AsyncClient, test_trainer, test_manager):
    payload = _payload(test_trainer, test_manager)
    payload["ratings"]["charisma"] = 5

    response = await client.post("/api/v1/assessments", json=payload)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_trainer(client: AsyncClient, test_trainer, test_manager):
    payload = _payload(test_trainer, test_manager)
    payload["trainer_id"] = str(uuid.uuid4())

    response = await client.post("/api/v1/assessments", json=payload)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_assessor(client: AsyncClient, test_trainer, test_manager):
    payload = _payload(test_trainer, test_manager)
    payload["assessor_id"] = str(uuid.uuid4())

    response = await client.post("/api/v1/assessments", json=payload)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_line_manager_cannot_assess_reportee(
    client: AsyncClient, test_trainer, test_line_manager,
):
    """Managers may not assess anyone in their own reporting line."""
    response = await client.post(
        "/api/v1/assessments", json=_payload(test_trainer, test_line_manager),
    )
    assert response.status_code == 400
    assert "not eligible" in response.json()["detail"]


@pytest.mark.asyncio
async def test_allow_override_lets_line_manager_assess_reportee(
    client: AsyncClient, test_trainer, test_line_manager,
):
    override = await client.post("/api/v1/admin/overrides", json={
        "assessor_id": str(test_line_manager.id),
        "assessee_id": str(test_trainer.id),
        "override_type": "allow",
    })
    assert override.status_code == 201

    response = await client.post(
        "/api/v1/assessments", json=_payload(test_trainer, test_line_manager),
    )
    assert response.status_code == 201


@pytest.mark.asyncio
async def test_block_override_rejects_outside_manager(
    client: AsyncClient, test_trainer, test_manager,
):
    """test_manager is outside the reporting line, but a block always wins."""
    await client.post("/api/v1/admin/overrides", json={
        "assessor_id": str(test_manager.id),
        "assessee_id": str(test_trainer.id),
        "override_type": "block",
    })

    response = await client.post(
        "/api/v1/assessments", json=_payload(test_trainer, test_manager),
    )
    assert response.status_code == 400
    assert "not eligible" in response.json()["detail"]


@pytest.mark.asyncio
async def test_assessments_are_immutable(client: AsyncClient, test_trainer, test_manager):
    """There is no update route for a submitted assessment."""
    created = (await client.post(
        "/api/v1/assessments", json=_payload(test_trainer, test_manager),
    )).json()

    put = await client.put(f"/api/v1/assessments/{created['id']}", json={"ratings": {}})
    patch = await client.patch(f"/api/v1/assessments/{created['id']}", json={"ratings": {}})

    assert put.status_code == 405
    assert patch.status_code == 405


@pytest.mark.asyncio
async def test_assessment_streak_and_badges_accumulate(
    client: AsyncClient, test_trainer, test_manager,
):
    """Consecutive days extend the streak; badges are only awarded once."""
    today = date.today()
    for offset in (2, 1):
        response = await client.post(
            "/api/v1/assessments",
            json=_payload(test_trainer, test_manager, score=3, day=today - timedelta(days=offset)),
        )
        assert response.status_code == 201

    third = (await client.post(
        "/api/v1/assessments", json=_payload(test_trainer, test_manager, score=3, day=today),
    )).json()

    assert third["rewards"]["assessment_streak"] == 3
    assert third["rewards"]["badges_awarded"] == []     # first_assessment already held
    assert third["rewards"]["total_xp"] == 3 * 100 + 50

    badges = (await client.get(f"/api/v1/users/{test_trainer.id}/badges")).json()
    assert [b["code"] for b in badges] == ["first_assessment"]


@pytest.mark.asyncio
async def test_gamification_disabled(client: AsyncClient, test_trainer, test_manager, monkeypatch):
    monkeypatch.setattr(settings, "GAMIFICATION_ENABLED", False)

    response = await client.post(
        "/api/v1/assessments", json=_payload(test_trainer, test_manager),
    )

    assert response.status_code == 201
    assert response.json()["rewards"] is None
    xp = (await client.get(f"/api/v1/users/{test_trainer.id}/xp")).json()
    assert xp["level"]["total_xp"] == 0
