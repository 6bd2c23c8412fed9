"""
Admin analytics API.

1. GET /admin/alerts — Platform, trainer and manager-inactivity alerts
2. GET /admin/correlations — Correlation matrix across categories or parameters
3. GET /admin/manager-activity — How actively each manager is assessing
4. GET /admin/top-performers — Trainer leaderboard by average score
5. GET /admin/improvement-areas — Parameters ranked by room to improve
6. GET /admin/platform-metrics — Executive headline numbers + risk flags
7. GET /admin/overrides — Assessor/trainer allow and block exceptions
8. POST /admin/overrides — Create or replace an override
9. DELETE /admin/overrides/{id} — Remove an override

Every analytics view is computed from the full assessments table on request.
"""

from collections import Counter, defaultdict
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trainer_insights.database import get_db
from trainer_insights.models import AssessorAssesseeOverride
from trainer_insights.schemas.analytics import (
    AdminAlertsResponse,
    AlertResponse,
    CorrelationMatrixResponse,
    CorrelationResponse,
    ImprovementAreaResponse,
    LeaderboardEntryResponse,
    ManagerActivityResponse,
    OverrideCreateRequest,
    OverrideResponse,
    PlatformMetricsResponse,
    RiskIndicatorResponse,
)
from trainer_insights.services.correlation import (
    build_correlation_matrix,
    correlation_insights,
    frequency_vs_performance,
)
from trainer_insights.services.gamification import rank_top_performers
from trainer_insights.services.records import (
    get_profile,
    load_all_records,
    load_overrides,
    load_profiles,
)
from trainer_insights.services.reporting import (
    improvement_areas,
    manager_activity,
    platform_metrics,
)
from trainer_insights.services.scoring import filter_by_date_range
from trainer_insights.services.trends import (
    detect_manager_inactivity,
    detect_platform_trends,
    generate_trend_alerts,
    identify_risk_indicators,
)

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])

SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}
OVERRIDE_TYPES = ("allow", "block")


@router.get("/alerts", response_model=AdminAlertsResponse)
async def get_admin_alerts(
    severity: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Every active alert on the platform, most severe first.

    Args:
        severity: Optional filter (low, medium, high)
    """
    if severity is not None and severity not in SEVERITY_ORDER:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid severity. Must be one of: {list(SEVERITY_ORDER)}",
        )

    records = await load_all_records(db)
    alerts = list(detect_platform_trends(records))

    for trainer_id, history in _group_by(records, "trainer_id").items():
        alerts.extend(generate_trend_alerts(trainer_id, history))

    last_by_assessor = _last_assessment_by(records, "assessor_id")
    for manager in await load_profiles(db, role="manager"):
        inactivity = detect_manager_inactivity(manager.id, last_by_assessor.get(manager.id))
        if inactivity:
            alerts.append(inactivity)

    if severity:
        alerts = [a for a in alerts if a.severity == severity]
    alerts.sort(key=lambda a: SEVERITY_ORDER.get(a.severity, len(SEVERITY_ORDER)))

    return AdminAlertsResponse(
        total=len(alerts),
        by_severity=dict(Counter(a.severity for a in alerts)),
        alerts=[AlertResponse.model_validate(a) for a in alerts],
    )


@router.get("/correlations", response_model=CorrelationMatrixResponse)
async def get_correlations(
    variables: str = "categories",
    db: AsyncSession = Depends(get_db),
):
    """Pearson correlation matrix.

    Args:
        variables: "categories" (5x5, default) or "parameters" (21x21)
    """
    records = await load_all_records(db)
    try:
        matrix = build_correlation_matrix(records, variables)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    frequency = frequency_vs_performance(_group_by(records, "trainer_id"))

    return CorrelationMatrixResponse(
        variables=matrix.variables,
        matrix=matrix.matrix,
        insights=[CorrelationResponse.model_validate(r) for r in matrix.insights],
        takeaways=correlation_insights(matrix),
        frequency_vs_performance=CorrelationResponse.model_validate(frequency),
    )


@router.get("/manager-activity", response_model=list[ManagerActivityResponse])
async def get_manager_activity(db: AsyncSession = Depends(get_db)):
    """One row per manager, least active first."""
    records = await load_all_records(db)
    by_assessor = _group_by(records, "assessor_id")
    today = date.today()

    activity = [
        manager_activity(manager.id, manager.full_name, by_assessor.get(manager.id, []), today)
        for manager in await load_profiles(db, role="manager")
    ]
    activity.sort(key=lambda a: (a.activity_status == "active", a.all_time_total))
    return [ManagerActivityResponse.model_validate(a) for a in activity]


@router.get("/top-performers", response_model=list[LeaderboardEntryResponse])
async def get_top_performers(
    limit: int = 5,
    date_range: str = "all-time",
    db: AsyncSession = Depends(get_db),
):
    records = await load_all_records(db)
    try:
        records = filter_by_date_range(records, date_range)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    names = {p.id: p.full_name for p in await load_profiles(db, role="trainer")}
    ranked = rank_top_performers(records, limit=min(max(limit, 1), 100), names=names)
    return [LeaderboardEntryResponse.model_validate(entry) for entry in ranked]


@router.get("/improvement-areas", response_model=list[ImprovementAreaResponse])
async def get_improvement_areas(
    limit: int = 21,
    db: AsyncSession = Depends(get_db),
):
    records = await load_all_records(db)
    areas = improvement_areas(records)[:max(limit, 0)]
    return [ImprovementAreaResponse.model_validate(a) for a in areas]


@router.get("/platform-metrics", response_model=PlatformMetricsResponse)
async def get_platform_metrics(db: AsyncSession = Depends(get_db)):
    records = await load_all_records(db)
    metrics = platform_metrics(records)

    return PlatformMetricsResponse(
        overall_effectiveness=metrics.overall_effectiveness,
        trainer_competency_index=metrics.trainer_competency_index,
        trend_direction=metrics.trend_direction,
        trend_percentage=metrics.trend_percentage,
        assessment_count=metrics.assessment_count,
        trainers_assessed=metrics.trainers_assessed,
        risk_indicators=[
            RiskIndicatorResponse.model_validate(r) for r in identify_risk_indicators(records)
        ],
    )


@router.get("/overrides", response_model=list[OverrideResponse])
async def list_overrides(db: AsyncSession = Depends(get_db)):
    return [OverrideResponse.model_validate(o) for o in await load_overrides(db)]


@router.post("/overrides", response_model=OverrideResponse, status_code=201)
async def upsert_override(
    request: OverrideCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Allow a manager to assess a reportee, or block a pair outright.

    One override per (assessor, trainer) pair: posting again replaces the type.
    """
    if request.override_type not in OVERRIDE_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid override_type. Must be one of: {', '.join(OVERRIDE_TYPES)}",
        )
    if request.assessor_id == request.assessee_id:
        raise HTTPException(status_code=400, detail="Assessor and trainer must differ")
    for profile_id in (request.assessor_id, request.assessee_id):
        if not await get_profile(db, profile_id):
            raise HTTPException(status_code=404, detail=f"Profile {profile_id} not found")

    result = await db.execute(
        select(AssessorAssesseeOverride).where(
            AssessorAssesseeOverride.assessor_id == request.assessor_id,
            AssessorAssesseeOverride.assessee_id == request.assessee_id,
        )
    )
    override = result.scalar_one_or_none()
    if override is None:
        override = AssessorAssesseeOverride(
            assessor_id=request.assessor_id,
            assessee_id=request.assessee_id,
        )
        db.add(override)
    override.override_type = request.override_type
    override.created_by = request.created_by

    await db.commit()
    await db.refresh(override)
    print(f"🔐 Override saved: {override.assessor_id} -> {override.assessee_id} ({override.override_type})")
    return OverrideResponse.model_validate(override)


@router.delete("/overrides/{override_id}")
async def delete_override(
    override_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(AssessorAssesseeOverride).where(AssessorAssesseeOverride.id == override_id)
    )
    override = result.scalar_one_or_none()
    if not override:
        raise HTTPException(status_code=404, detail="Override not found")

    await db.delete(override)
    await db.commit()
    return {"detail": "Override deleted", "id": str(override_id)}


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def _group_by(records: list, attribute: str) -> dict:
    """Group records by trainer_id / assessor_id, keeping their order."""
    groups = defaultdict(list)
    for record in records:
        groups[getattr(record, attribute)].append(record)
    return dict(groups)


def _last_assessment_by(records: list, attribute: str) -> dict:
    last = {}
    for record in records:
        key = getattr(record, attribute)
        if key not in last or record.assessment_date > last[key]:
            last[key] = record.assessment_date
    return last
