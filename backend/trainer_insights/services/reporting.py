"""
Admin reporting views and assessor eligibility rules.

Pure functions behind the admin dashboard tabs:
1. platform_metrics — executive headline numbers
2. improvement_areas — the 21 parameters ranked by headroom (5 - average)
3. manager_activity — how actively a manager is assessing
4. is_eligible_assessor — conflict-of-interest rules for who may assess whom
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Iterable, Mapping, Optional, Sequence

from trainer_insights.services.scoring import overall_average, parameter_averages
from trainer_insights.services.trends import INACTIVITY_DAYS, month_over_month
from trainer_insights.structure import CATEGORIES, PARAMETERS, AssessmentRecord


@dataclass
class PlatformMetrics:
    overall_effectiveness: float
    trainer_competency_index: float   # effectiveness on a 0-100 scale
    trend_direction: str
    trend_percentage: float
    assessment_count: int
    trainers_assessed: int


@dataclass
class ImprovementArea:
    parameter: str
    label: str
    category: str
    current_average: float
    potential_impact: float


@dataclass
class ManagerActivity:
    manager_id: Any
    full_name: str
    assessments_this_month: int
    assessments_this_quarter: int
    assessments_this_year: int
    all_time_total: int
    avg_rating_given: float
    unique_trainers_assessed: int
    last_assessment_date: Optional[date]
    activity_status: str          # active | inactive


def platform_metrics(
    records: Sequence[AssessmentRecord],
    today: Optional[date] = None,
) -> PlatformMetrics:
    today = today or date.today()
    effectiveness = overall_average(records)
    trend, percentage = month_over_month(records, today)

    return PlatformMetrics(
        overall_effectiveness=effectiveness,
        trainer_competency_index=round(effectiveness * 20, 1),
        trend_direction=trend,
        trend_percentage=percentage,
        assessment_count=len(records),
        trainers_assessed=len({r.trainer_id for r in records}),
    )


def improvement_areas(records: Sequence[AssessmentRecord]) -> list[ImprovementArea]:
    """All parameters, biggest room for improvement first."""
    areas = [
        ImprovementArea(
            parameter=avg.parameter.value,
            label=avg.label,
            category=CATEGORIES[PARAMETERS[avg.parameter].category].name,
            current_average=avg.average,
            potential_impact=round(5.0 - avg.average, 2),
        )
        for avg in parameter_averages(records)
    ]
    return sorted(areas, key=lambda a: a.potential_impact, reverse=True)


def manager_activity(
    manager_id: Any,
    full_name: str,
    records: Sequence[AssessmentRecord],
    today: Optional[date] = None,
) -> ManagerActivity:
    """Activity summary for one manager, over the assessments they submitted."""
    today = today or date.today()
    month_start = date(today.year, today.month, 1)
    quarter_start = date(today.year, (today.month - 1) // 3 * 3 + 1, 1)
    year_start = date(today.year, 1, 1)

    last = max((r.assessment_date for r in records), default=None)
    active = last is not None and last >= today - timedelta(days=INACTIVITY_DAYS)

    return ManagerActivity(
        manager_id=manager_id,
        full_name=full_name,
        assessments_this_month=sum(1 for r in records if r.assessment_date >= month_start),
        assessments_this_quarter=sum(1 for r in records if r.assessment_date >= quarter_start),
        assessments_this_year=sum(1 for r in records if r.assessment_date >= year_start),
        all_time_total=len(records),
        avg_rating_given=overall_average(records),
        unique_trainers_assessed=len({r.trainer_id for r in records}),
        last_assessment_date=last,
        activity_status="active" if active else "inactive",
    )


def reportee_ids(manager_id: Any, reporting_lines: Mapping[Any, Any]) -> set:
    """Everyone who reports to manager_id, directly or indirectly.

    reporting_lines maps profile id → reporting manager id (or None).
    """
    reportees: set = set()
    frontier = {manager_id}
    while frontier:
        next_frontier = {
            person
            for person, boss in reporting_lines.items()
            if boss in frontier and person not in reportees and person != manager_id
        }
        reportees |= next_frontier
        frontier = next_frontier
    return reportees


def is_eligible_assessor(
    assessor_id: Any,
    trainer_id: Any,
    reporting_lines: Mapping[Any, Any],
    allow: Iterable = (),
    block: Iterable = (),
) -> bool:
    """May assessor_id assess trainer_id?

    No self-assessment. No one in the assessor's reporting line unless
    the pair is explicitly allowed. Blocked pairs are never eligible.
    """
    if assessor_id == trainer_id:
        return False
    if trainer_id in set(block):
        return False
    if trainer_id in reportee_ids(assessor_id, reporting_lines):
        return trainer_id in set(allow)
    return True
