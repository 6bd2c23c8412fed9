"""
Integration tests for the Trainers API.

Tests the dashboard, alerts, insights, and PDF export endpoints.
These are read-only views computed from the assessments table.
"""

import uuid
from datetime import date, timedelta

import pytest
from httpx import AsyncClient

from trainer_insights.structure import CategoryId, ParameterId


def _days_ago(n: int) -> date:
    return date.today() - timedelta(days=n)


@pytest.mark.asyncio
async def test_dashboard_success(client: AsyncClient, test_trainer, test_manager, seed_assessments):
    """GET /api/v1/trainers/{id}/dashboard returns aggregated data."""
    await seed_assessments(test_trainer, test_manager, [(_days_ago(1), 4), (_days_ago(8), 2)])

    response = await client.get(f"/api/v1/trainers/{test_trainer.id}/dashboard")

    assert response.status_code == 200
    data = response.json()
    assert data["trainer_name"] == "Test Trainer"
    assert data["date_range"] == "all-time"
    assert data["overall_average"] == 3.0
    assert data["stats"]["total_assessments"] == 2
    assert data["stats"]["last_assessment_date"] == _days_ago(1).isoformat()

    assert len(data["parameter_averages"]) == 21
    assert [c["category"] for c in data["category_averages"]] == [c.value for c in CategoryId]
    assert len(data["monthly_trend"]) == 6
    assert data["monthly_trend"][-1]["month"] == date.today().strftime("%Y-%m")

    # Seeded rows bypass the API, so no XP has been earned yet
    assert data["level"]["level"] == 1
    assert data["level"]["total_xp"] == 0
    assert data["streaks"] == []
    assert data["badges"] == []


@pytest.mark.asyncio
async def test_dashboard_date_range(client: AsyncClient, test_trainer, test_manager, seed_assessments):
    await seed_assessments(test_trainer, test_manager, [(_days_ago(0), 5), (_days_ago(400), 1)])

    response = await client.get(
        f"/api/v1/trainers/{test_trainer.id}/dashboard",
        params={"date_range": "last-6-months"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["overall_average"] == 5.0
    assert data["stats"]["total_assessments"] == 1


@pytest.mark.asyncio
async def test_dashboard_invalid_date_range(client: AsyncClient, test_trainer):
    response = await client.get(
        f"/api/v1/trainers/{test_trainer.id}/dashboard",
        params={"date_range": "forever"},
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_dashboard_trainer_not_found(client: AsyncClient):
    response = await client.get(f"/api/v1/trainers/{uuid.uuid4()}/dashboard")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_dashboard_rejects_non_trainer(client: AsyncClient, test_manager):
    response = await client.get(f"/api/v1/trainers/{test_manager.id}/dashboard")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_trainer_alerts(client: AsyncClient, test_trainer, test_manager, seed_assessments):
    """Three strictly falling scores raise a declining alert."""
    await seed_assessments(test_trainer, test_manager, [
        (_days_ago(20), 5), (_days_ago(10), 4), (_days_ago(1), 3),
    ])

    response = await client.get(f"/api/v1/trainers/{test_trainer.id}/alerts")

    assert response.status_code == 200
    alerts = response.json()["alerts"]
    declining = [a for a in alerts if a["type"] == "declining"]
    assert len(declining) == 1
    assert declining[0]["id"] == f"declining-{test_trainer.id}"
    assert declining[0]["severity"] == "high"
    assert declining[0]["data"]["scores"] == [5.0, 4.0, 3.0]


@pytest.mark.asyncio
async def test_trainer_alerts_empty(client: AsyncClient, test_trainer):
    response = await client.get(f"/api/v1/trainers/{test_trainer.id}/alerts")
    assert response.status_code == 200
    assert response.json()["alerts"] == []


@pytest.mark.asyncio
async def test_trainer_insights(client: AsyncClient, test_trainer, test_manager, seed_assessments):
    await seed_assessments(
        test_trainer, test_manager, [(_days_ago(3), 5)],
        ratings_for=[ParameterId.LOGS_IN_EARLY],
    )
    await seed_assessments(
        test_trainer, test_manager, [(_days_ago(2), 2)],
        ratings_for=[ParameterId.SESSION_RECORDING],
    )

    response = await client.get(f"/api/v1/trainers/{test_trainer.id}/insights")

    assert response.status_code == 200
    insights = response.json()
    assert insights[0]["type"] == "strength"
    assert insights[0]["data"]["parameter"] == "logs_in_early"
    assert insights[1]["data"]["parameter"] == "session_recording"


@pytest.mark.asyncio
async def test_download_report_pdf(client: AsyncClient, test_trainer, test_manager, seed_assessments):
    """GET /api/v1/trainers/{id}/report/pdf returns a PDF attachment."""
    await seed_assessments(test_trainer, test_manager, [
        (_days_ago(20), 5), (_days_ago(10), 4), (_days_ago(1), 3),
    ])

    response = await client.get(f"/api/v1/trainers/{test_trainer.id}/report/pdf")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "attachment" in response.headers["content-disposition"]
    assert "Test_Trainer" in response.headers["content-disposition"]
    assert response.content[:5] == b"%PDF-"


@pytest.mark.asyncio
async def test_download_report_pdf_non_latin1_name(
    client: AsyncClient, test_polish_trainer, test_line_manager, seed_assessments,
):
    """Names outside Latin-1 are folded to ASCII in filename and kept in filename*."""
    await seed_assessments(test_polish_trainer, test_line_manager, [(_days_ago(1), 4)])

    response = await client.get(f"/api/v1/trainers/{test_polish_trainer.id}/report/pdf")

    assert response.status_code == 200
    assert response.content[:5] == b"%PDF-"
    disposition = response.headers["content-disposition"]
    assert 'filename="performance_report_ukasz_Nowak_' in disposition
    assert "filename*=UTF-8''performance_report_%C5%81ukasz_Nowak_" in disposition


@pytest.mark.asyncio
async def test_download_report_pdf_without_assessments(client: AsyncClient, test_trainer):
    response = await client.get(f"/api/v1/trainers/{test_trainer.id}/report/pdf")
    assert response.status_code == 200
    assert response.content[:5] == b"%PDF-"
