"""
Trainer dashboard and performance API.

1. GET /trainers/{id}/dashboard — Stats, averages, monthly trend, alerts, progress
2. GET /trainers/{id}/alerts — Trend alerts over the trainer's history
3. GET /trainers/{id}/insights — Strongest and weakest parameter
4. GET /trainers/{id}/report/pdf — Download the performance report as PDF

These are READ-ONLY endpoints: everything is computed on the fly from the
assessments table. The date_range filter narrows the averages; alerts and
the monthly trend always look at the full history.
"""

import unicodedata
from datetime import date
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from trainer_insights.config import settings
from trainer_insights.database import get_db
from trainer_insights.models import Profile
from trainer_insights.schemas.analytics import (
    AlertResponse,
    CategoryAverageResponse,
    InsightResponse,
    ParameterAverageResponse,
    TrainerAlertsResponse,
    TrainerDashboard,
    TrainerStatsResponse,
    TrendPointResponse,
)
from trainer_insights.schemas.gamification import BadgeResponse, LevelResponse, StreakResponse
from trainer_insights.services.feedback import fallback_insights
from trainer_insights.services.gamification import level_progress
from trainer_insights.services.pdf_report import TrainerReportPDF
from trainer_insights.services.progression import get_user_xp, load_badges, load_streaks
from trainer_insights.services.records import get_profile, load_trainer_history
from trainer_insights.services.scoring import (
    category_averages,
    filter_by_date_range,
    monthly_trend,
    overall_average,
    trainer_stats,
)
from trainer_insights.services.trends import generate_trend_alerts

router = APIRouter(prefix="/api/v1/trainers", tags=["trainers"])

RANGE_LABELS = {
    "current-month": "Current month",
    "last-3-months": "Last 3 months",
    "last-6-months": "Last 6 months",
    "year-to-date": "Year to date",
    "all-time": "All time",
}


@router.get("/{trainer_id}/dashboard", response_model=TrainerDashboard)
async def get_trainer_dashboard(
    trainer_id: UUID,
    date_range: str = "all-time",
    months: int = 6,
    db: AsyncSession = Depends(get_db),
):
    """Get the trainer's performance dashboard.

    Args:
        date_range: current-month, last-3-months, last-6-months,
            year-to-date or all-time (default)
        months: How many calendar months the trend chart covers (max 24)
    """
    trainer = await _get_trainer_or_404(db, trainer_id)
    history = await load_trainer_history(db, trainer_id)
    today = date.today()

    try:
        in_range = filter_by_date_range(history, date_range, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    stats = trainer_stats(in_range, today)
    dashboard = TrainerDashboard(
        trainer_id=trainer.id,
        trainer_name=trainer.full_name,
        date_range=date_range,
        overall_average=overall_average(in_range),
        stats=TrainerStatsResponse.model_validate(stats),
        category_averages=[
            CategoryAverageResponse.model_validate(c) for c in stats.category_averages
        ],
        parameter_averages=[
            ParameterAverageResponse.model_validate(p) for p in stats.parameter_averages
        ],
        monthly_trend=[
            TrendPointResponse.model_validate(point)
            for point in monthly_trend(history, min(max(months, 1), 24), today)
        ],
        alerts=[
            AlertResponse.model_validate(alert)
            for alert in generate_trend_alerts(trainer.id, history)
        ],
    )

    if settings.GAMIFICATION_ENABLED:
        user_xp = await get_user_xp(db, trainer.id)
        dashboard.level = LevelResponse.model_validate(
            level_progress(user_xp.total_xp if user_xp else 0)
        )
        dashboard.streaks = [
            StreakResponse.model_validate(s) for s in await load_streaks(db, trainer.id)
        ]
        dashboard.badges = [
            BadgeResponse(
                code=badge.code,
                name=badge.name,
                description=badge.description,
                rarity=badge.rarity,
                earned_at=earned_at,
            )
            for badge, earned_at in await load_badges(db, trainer.id)
        ]

    return dashboard


@router.get("/{trainer_id}/alerts", response_model=TrainerAlertsResponse)
async def get_trainer_alerts(
    trainer_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    trainer = await _get_trainer_or_404(db, trainer_id)
    history = await load_trainer_history(db, trainer_id)

    return TrainerAlertsResponse(
        trainer_id=trainer.id,
        alerts=[
            AlertResponse.model_validate(alert)
            for alert in generate_trend_alerts(trainer.id, history)
        ],
    )


@router.get("/{trainer_id}/insights", response_model=list[InsightResponse])
async def get_trainer_insights(
    trainer_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Rule-based strength / focus-area insights. Empty until something is rated."""
    await _get_trainer_or_404(db, trainer_id)
    history = await load_trainer_history(db, trainer_id)
    return [InsightResponse.model_validate(i) for i in fallback_insights(history)]


@router.get("/{trainer_id}/report/pdf")
async def download_trainer_report_pdf(
    trainer_id: UUID,
    date_range: str = "all-time",
    db: AsyncSession = Depends(get_db),
):
    """Download the trainer's performance report as a PDF.

    Returns the PDF as a binary download with the appropriate
    Content-Type and Content-Disposition headers.
    """
    trainer = await _get_trainer_or_404(db, trainer_id)
    history = await load_trainer_history(db, trainer_id)
    today = date.today()

    try:
        in_range = filter_by_date_range(history, date_range, today)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    stats = trainer_stats(in_range, today)
    level = None
    badges = []
    if settings.GAMIFICATION_ENABLED:
        user_xp = await get_user_xp(db, trainer.id)
        level = level_progress(user_xp.total_xp if user_xp else 0)
        badges = [badge for badge, _ in await load_badges(db, trainer.id)]

    pdf_bytes = TrainerReportPDF().generate(
        trainer_name=trainer.full_name,
        stats=stats,
        overall_average=overall_average(in_range),
        category_averages=category_averages(in_range),
        alerts=generate_trend_alerts(trainer.id, history),
        level=level,
        badges=badges,
        period_label=RANGE_LABELS[date_range],
    )

    filename = f"performance_report_{trainer.full_name.replace(' ', '_')}_{today.isoformat()}.pdf"
    print(f"📄 Performance report generated for {trainer.full_name} ({len(pdf_bytes)} bytes)")

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": _content_disposition(filename)},
    )


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def _content_disposition(filename: str) -> str:
    """Attachment header that survives non-Latin-1 names.

    Headers are sent as latin-1, so the plain filename is folded to ASCII
    and the real name goes in the RFC 5987 filename* parameter.
    """
    ascii_name = (
        unicodedata.normalize("NFKD", filename).encode("ascii", "ignore").decode("ascii")
    )
    ascii_name = ascii_name.replace('"', "").replace("\\", "")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


async def _get_trainer_or_404(db: AsyncSession, trainer_id: UUID) -> Profile:
    trainer = await get_profile(db, trainer_id)
    if not trainer or trainer.role != "trainer":
        raise HTTPException(status_code=404, detail="Trainer not found")
    return trainer
