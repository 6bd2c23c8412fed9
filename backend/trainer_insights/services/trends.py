"""
Trend detection — turns score histories into actionable alerts.

Given a trainer's assessment history (most recent first), this module
looks for five qualitative patterns:

- declining:    last 3 overall scores strictly decreasing
- improving:    last 3 overall scores strictly increasing (positive signal)
- inconsistent: high spread (population std dev) across the last 10
- skill_gap:    a category that is consistently low across the last 10
- inactivity:   a manager who hasn't submitted an assessment in 30+ days

Plus a platform-wide variant (month-over-month drop, weak categories).

Every alert carries the raw numbers behind it (scores with dates, mean,
std dev, min/max, period bounds) so a dashboard can render drill-down
detail without recomputing anything.

Design notes:
- The declining/improving window is exactly 3 points with strict
  monotonicity, so a single tie breaks detection. DECLINE_WINDOW is the
  knob if it ever needs tuning.
- Assessments with no rated parameter are ignored by every detector:
  they are "no score", not "a score of 0".
- Anything clock-dependent takes `now` / `today` explicitly.
"""

import statistics
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Optional, Sequence

from trainer_insights.services.scoring import (
    assessment_average,
    is_rated,
    month_key,
    overall_average,
    record_category_average,
    shift_month,
)
from trainer_insights.structure import CATEGORIES, AssessmentRecord

# --- Thresholds ---
DECLINE_WINDOW = 3
DECLINE_HIGH_SPREAD = 1.0
INCONSISTENCY_MIN_ASSESSMENTS = 5
INCONSISTENCY_WINDOW = 10
INCONSISTENCY_STD_DEV = 0.8
INCONSISTENCY_HIGH_STD_DEV = 1.0
SKILL_GAP_MIN_ASSESSMENTS = 3
SKILL_GAP_WINDOW = 10
SKILL_GAP_MEAN = 2.5
SKILL_GAP_ALL_BELOW = 3.0
SKILL_GAP_HIGH_MEAN = 2.0
INACTIVITY_DAYS = 30
INACTIVITY_HIGH_DAYS = 60
PLATFORM_DROP_PERCENT = 10.0
PLATFORM_CATEGORY_WINDOW = 50
PLATFORM_CATEGORY_MIN_RATINGS = 10
PLATFORM_CATEGORY_FLOOR = 3.0


@dataclass
class TrendPattern:
    """A detected pattern before it is addressed to a trainer/manager."""
    type: str
    severity: str
    description: str
    data: dict = field(default_factory=dict)
    parameter: Optional[str] = None


@dataclass
class TrendAlert:
    id: str
    type: str                # declining | improving | inconsistent | skill_gap | inactivity
    severity: str            # low | medium | high
    message: str
    created_at: datetime
    trainer_id: Optional[Any] = None
    manager_id: Optional[Any] = None
    parameter: Optional[str] = None
    data: dict = field(default_factory=dict)


@dataclass
class RiskIndicator:
    area: str
    risk_level: str
    description: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _scored(history: Sequence[AssessmentRecord]) -> list[tuple[AssessmentRecord, float]]:
    """(record, overall average) pairs for rated records, order preserved."""
    return [(r, assessment_average(r)) for r in history if is_rated(r)]


def _points(pairs) -> list[dict]:
    return [
        {"date": record.assessment_date.isoformat(), "score": score}
        for record, score in pairs
    ]


# ------------------------------------------------------------------
# Trainer-scoped detectors
# ------------------------------------------------------------------

def _recent_window(history: Sequence[AssessmentRecord]):
    """The DECLINE_WINDOW most recent scores, oldest → newest."""
    scored = _scored(history)
    if len(scored) < DECLINE_WINDOW:
        return None
    return list(reversed(scored[:DECLINE_WINDOW]))


def detect_declining(history: Sequence[AssessmentRecord]) -> Optional[TrendPattern]:
    window = _recent_window(history)
    if window is None:
        return None

    scores = [score for _, score in window]
    if not all(later < earlier for earlier, later in zip(scores, scores[1:])):
        return None

    decline = round(scores[0] - scores[-1], 2)
    return TrendPattern(
        type="declining",
        severity="high" if decline > DECLINE_HIGH_SPREAD else "medium",
        description=f"Performance declining: {scores[0]:.2f} → {scores[-1]:.2f}",
        data={
            "scores": scores,
            "points": _points(window),
            "decline": decline,
            "period_start": window[0][0].assessment_date.isoformat(),
            "period_end": window[-1][0].assessment_date.isoformat(),
        },
    )


def detect_improving(history: Sequence[AssessmentRecord]) -> Optional[TrendPattern]:
    window = _recent_window(history)
    if window is None:
        return None

    scores = [score for _, score in window]
    if not all(later > earlier for earlier, later in zip(scores, scores[1:])):
        return None

    improvement = round(scores[-1] - scores[0], 2)
    return TrendPattern(
        type="improving",
        severity="low",
        description=f"Rapid improvement: {scores[0]:.2f} → {scores[-1]:.2f}",
        data={
            "scores": scores,
            "points": _points(window),
            "improvement": improvement,
            "period_start": window[0][0].assessment_date.isoformat(),
            "period_end": window[-1][0].assessment_date.isoformat(),
        },
    )


def detect_inconsistency(history: Sequence[AssessmentRecord]) -> Optional[TrendPattern]:
    scored = _scored(history)
    if len(scored) < INCONSISTENCY_MIN_ASSESSMENTS:
        return None

    window = scored[:INCONSISTENCY_WINDOW]
    scores = [score for _, score in window]
    mean = statistics.fmean(scores)
    std_dev = statistics.pstdev(scores)

    if std_dev <= INCONSISTENCY_STD_DEV:
        return None

    return TrendPattern(
        type="inconsistent",
        severity="high" if std_dev > INCONSISTENCY_HIGH_STD_DEV else "medium",
        description=f"High variance in scores (std dev: {std_dev:.2f})",
        data={
            "mean": round(mean, 2),
            "std_dev": round(std_dev, 2),
            "min": min(scores),
            "max": max(scores),
            "scores": scores,
            "points": _points(window),
            # window is most-recent-first
            "period_start": window[-1][0].assessment_date.isoformat(),
            "period_end": window[0][0].assessment_date.isoformat(),
        },
    )


def detect_skill_gaps(history: Sequence[AssessmentRecord]) -> list[TrendPattern]:
    """One pattern per category that is consistently low.

    A category is flagged when its mean per-assessment average is below
    2.5, OR when every one of those averages is below 3.0. The two
    triggers are independent and both are kept.
    """
    rated = [r for r, _ in _scored(history)]
    if len(rated) < SKILL_GAP_MIN_ASSESSMENTS:
        return []

    window = rated[:SKILL_GAP_WINDOW]
    gaps = []
    for category in CATEGORIES.values():
        pairs = [
            (record, record_category_average(record, category.id))
            for record in window
            if record.rated_values(category.parameters)
        ]
        if len(pairs) < SKILL_GAP_MIN_ASSESSMENTS:
            continue

        values = [value for _, value in pairs]
        mean = statistics.fmean(values)
        all_low = all(v < SKILL_GAP_ALL_BELOW for v in values)
        if not (mean < SKILL_GAP_MEAN or all_low):
            continue

        gaps.append(TrendPattern(
            type="skill_gap",
            severity="high" if mean < SKILL_GAP_HIGH_MEAN else "medium",
            description=f"{category.name} consistently low (avg: {mean:.2f})",
            parameter=category.id.value,
            data={
                "category": category.id.value,
                "average": round(mean, 2),
                "all_below_threshold": all_low,
                "min": min(values),
                "max": max(values),
                "scores": values,
                "points": _points(pairs),
            },
        ))
    return gaps


def generate_trend_alerts(
    trainer_id: Any,
    history: Sequence[AssessmentRecord],
    now: Optional[datetime] = None,
) -> list[TrendAlert]:
    """Run every trainer detector and address the results to trainer_id."""
    now = now or _utcnow()
    alerts = []

    declining = detect_declining(history)
    if declining:
        alerts.append(TrendAlert(
            id=f"declining-{trainer_id}",
            type="declining",
            severity=declining.severity,
            message=f"Declining performance detected: {declining.description}",
            trainer_id=trainer_id,
            data=declining.data,
            created_at=now,
        ))

    improving = detect_improving(history)
    if improving:
        alerts.append(TrendAlert(
            id=f"improving-{trainer_id}",
            type="improving",
            severity=improving.severity,
            message=f"Rapid improvement detected: {improving.description}",
            trainer_id=trainer_id,
            data=improving.data,
            created_at=now,
        ))

    inconsistent = detect_inconsistency(history)
    if inconsistent:
        alerts.append(TrendAlert(
            id=f"inconsistent-{trainer_id}",
            type="inconsistent",
            severity=inconsistent.severity,
            message=f"Inconsistent performance: {inconsistent.description}",
            trainer_id=trainer_id,
            data=inconsistent.data,
            created_at=now,
        ))

    for gap in detect_skill_gaps(history):
        alerts.append(TrendAlert(
            id=f"gap-{trainer_id}-{gap.parameter}",
            type="skill_gap",
            severity=gap.severity,
            message=f"Skill gap detected: {gap.description}",
            trainer_id=trainer_id,
            parameter=gap.parameter,
            data=gap.data,
            created_at=now,
        ))

    return alerts


# ------------------------------------------------------------------
# Manager- and platform-scoped detectors
# ------------------------------------------------------------------

def detect_manager_inactivity(
    manager_id: Any,
    last_assessment_date: Optional[date],
    today: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Optional[TrendAlert]:
    """Flag managers who never assessed, or haven't in over 30 days."""
    now = now or _utcnow()
    today = today or now.date()

    if last_assessment_date is None:
        return TrendAlert(
            id=f"inactivity-{manager_id}",
            type="inactivity",
            severity="medium",
            message="No assessments submitted yet",
            manager_id=manager_id,
            data={"days_since": None, "last_assessment_date": None},
            created_at=now,
        )

    if isinstance(last_assessment_date, datetime):
        last_assessment_date = last_assessment_date.date()

    days_since = (today - last_assessment_date).days
    if days_since <= INACTIVITY_DAYS:
        return None

    return TrendAlert(
        id=f"inactivity-{manager_id}",
        type="inactivity",
        severity="high" if days_since > INACTIVITY_HIGH_DAYS else "medium",
        message=f"No assessments in {days_since} days",
        manager_id=manager_id,
        data={
            "days_since": days_since,
            "last_assessment_date": last_assessment_date.isoformat(),
            "period_start": last_assessment_date.isoformat(),
            "period_end": today.isoformat(),
        },
        created_at=now,
    )


def detect_platform_trends(
    records: Sequence[AssessmentRecord],
    now: Optional[datetime] = None,
) -> list[TrendAlert]:
    """Platform-wide alerts: month-over-month drop and weak categories."""
    now = now or _utcnow()
    alerts = []
    ordered = sorted(records, key=lambda r: r.assessment_date, reverse=True)

    monthly: dict[str, list[float]] = {}
    for record, score in _scored(ordered):
        monthly.setdefault(month_key(record.assessment_date), []).append(score)

    months = sorted(monthly)
    if len(months) >= 2:
        recent_month, previous_month = months[-1], months[-2]
        recent_avg = statistics.fmean(monthly[recent_month])
        previous_avg = statistics.fmean(monthly[previous_month])
        change = (recent_avg - previous_avg) / previous_avg * 100

        if change < -PLATFORM_DROP_PERCENT:
            alerts.append(TrendAlert(
                id="platform-declining",
                type="declining",
                severity="high",
                message=f"Platform-wide average dropped {abs(change):.1f}% this month",
                data={
                    "recent_month": recent_month,
                    "previous_month": previous_month,
                    "recent_avg": round(recent_avg, 2),
                    "previous_avg": round(previous_avg, 2),
                    "change_percent": round(change, 1),
                },
                created_at=now,
            ))

    window = ordered[:PLATFORM_CATEGORY_WINDOW]
    for category in CATEGORIES.values():
        values = [
            record_category_average(record, category.id)
            for record in window
            if record.rated_values(category.parameters)
        ]
        if len(values) < PLATFORM_CATEGORY_MIN_RATINGS:
            continue

        mean = statistics.fmean(values)
        if mean < PLATFORM_CATEGORY_FLOOR:
            alerts.append(TrendAlert(
                id=f"platform-{category.id.value}",
                type="skill_gap",
                severity="medium",
                message=f"{category.name} scores below average ({mean:.2f})",
                parameter=category.id.value,
                data={
                    "average": round(mean, 2),
                    "sample_size": len(values),
                    "min": min(values),
                    "max": max(values),
                },
                created_at=now,
            ))

    return alerts


def month_over_month(
    records: Sequence[AssessmentRecord],
    today: Optional[date] = None,
) -> tuple[str, float]:
    """Compare this month's average to last month's.

    Returns (trend, trend_percentage) where trend is up / down / stable.
    A change within ±0.1 points is "stable".
    """
    today = today or date.today()
    current_key = month_key(today)
    previous_key = month_key(shift_month(today, 1))

    current = overall_average(
        [r for r in records if month_key(r.assessment_date) == current_key]
    )
    previous = overall_average(
        [r for r in records if month_key(r.assessment_date) == previous_key]
    )
    if previous <= 0:
        return "stable", 0.0

    change = current - previous
    percentage = round(change / previous * 100, 1)
    if change > 0.1:
        return "up", percentage
    if change < -0.1:
        return "down", percentage
    return "stable", percentage


def identify_risk_indicators(records: Sequence[AssessmentRecord]) -> list[RiskIndicator]:
    """Coarse executive risk flags over a most-recent-first history."""
    scores = [score for _, score in _scored(records)]
    risks = []

    recent, older = scores[:10], scores[10:20]
    if recent and older:
        recent_avg = statistics.fmean(recent)
        older_avg = statistics.fmean(older)
        if recent_avg < older_avg - 0.3:
            risks.append(RiskIndicator(
                area="Overall Performance",
                risk_level="high",
                description=f"Performance declined from {older_avg:.2f} to {recent_avg:.2f}",
            ))

    low = [s for s in scores if s < 3.0]
    if scores and len(low) > len(scores) * 0.2:
        risks.append(RiskIndicator(
            area="Low Performance Assessments",
            risk_level="medium",
            description=f"{len(low) / len(scores) * 100:.1f}% of assessments below 3.0",
        ))

    return risks
