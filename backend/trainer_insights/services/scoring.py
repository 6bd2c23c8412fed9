"""
Score aggregation — the leaf dependency of every analytics view.

Reduces one or many assessment records into:
1. A record's overall average (mean of its rated parameters)
2. Per-parameter averages across many records (with rating counts)
3. Per-category averages across many records
4. Dashboard summaries built from those (best/worst parameter,
   monthly trend, date-range filtering, trainer stats)

The one rule everything here follows: a rating of 0 or None means
"not rated" and is excluded from BOTH the sum and the divisor. An
assessment where nothing is rated contributes nothing to any average,
so incomplete ratings never drag a trainer's score down.

All functions are pure: they never mutate the records they receive.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Sequence

from trainer_insights.structure import (
    CATEGORIES,
    PARAMETERS,
    AssessmentRecord,
    CategoryId,
    ParameterId,
)

DATE_RANGES = (
    "current-month",
    "last-3-months",
    "last-6-months",
    "year-to-date",
    "all-time",
)


@dataclass
class ParameterAverage:
    parameter: ParameterId
    label: str
    average: float
    count: int


@dataclass
class CategoryAverage:
    category: CategoryId
    name: str
    average: float
    count: int


@dataclass
class TrendDataPoint:
    month: str      # "YYYY-MM"
    average: float
    count: int


@dataclass
class TrainerStats:
    """Headline numbers for a trainer's dashboard."""
    current_month_average: float
    total_assessments: int
    best_parameter: Optional[ParameterAverage]
    worst_parameter: Optional[ParameterAverage]
    parameter_averages: list[ParameterAverage] = field(default_factory=list)
    category_averages: list[CategoryAverage] = field(default_factory=list)
    last_assessment_date: Optional[date] = None


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def assessment_average(record: AssessmentRecord) -> float:
    """Mean of a record's rated parameters, 2 dp. 0 when nothing is rated."""
    return round(_mean(record.rated_values()), 2)


def record_category_average(record: AssessmentRecord, category: CategoryId) -> float:
    """Mean of one category's rated parameters on a single record."""
    values = record.rated_values(CATEGORIES[category].parameters)
    return round(_mean(values), 2)


def is_rated(record: AssessmentRecord) -> bool:
    return bool(record.rated_values())


def overall_average(records: Iterable[AssessmentRecord]) -> float:
    """Mean of per-record averages over the records that have any rating."""
    averages = [assessment_average(r) for r in records if is_rated(r)]
    return round(_mean(averages), 2)


def parameter_averages(records: Sequence[AssessmentRecord]) -> list[ParameterAverage]:
    """One entry per parameter, in schema order."""
    results = []
    for param in PARAMETERS.values():
        values = []
        for record in records:
            value = record.rating(param.id)
            if value is not None and value > 0:
                values.append(value)
        results.append(ParameterAverage(
            parameter=param.id,
            label=param.label,
            average=round(_mean(values), 2),
            count=len(values),
        ))
    return results


def category_averages(records: Sequence[AssessmentRecord]) -> list[CategoryAverage]:
    """One entry per category, pooling every rated value of its parameters.

    count is the number of contributing ratings, so it never exceeds
    len(records) * len(category.parameters).
    """
    results = []
    for category in CATEGORIES.values():
        values = []
        for record in records:
            values.extend(record.rated_values(category.parameters))
        results.append(CategoryAverage(
            category=category.id,
            name=category.name,
            average=round(_mean(values), 2),
            count=len(values),
        ))
    return results


def best_parameter(averages: Sequence[ParameterAverage]) -> Optional[ParameterAverage]:
    """Highest-scoring parameter among those with at least one rating.

    Ties keep the earliest parameter in schema order.
    """
    rated = [a for a in averages if a.count > 0]
    if not rated:
        return None
    best = rated[0]
    for current in rated[1:]:
        if current.average > best.average:
            best = current
    return best


def worst_parameter(averages: Sequence[ParameterAverage]) -> Optional[ParameterAverage]:
    rated = [a for a in averages if a.count > 0]
    if not rated:
        return None
    worst = rated[0]
    for current in rated[1:]:
        if current.average < worst.average:
            worst = current
    return worst


def score_band(score: float) -> str:
    """Qualitative band used for colouring scores: strong / fair / weak."""
    if score >= 4:
        return "strong"
    if score >= 3:
        return "fair"
    return "weak"


def month_key(day: date) -> str:
    return day.strftime("%Y-%m")


def shift_month(day: date, months_back: int) -> date:
    """First day of the month `months_back` months before `day`'s month."""
    index = day.year * 12 + (day.month - 1) - months_back
    return date(index // 12, index % 12 + 1, 1)


def monthly_trend(
    records: Sequence[AssessmentRecord],
    months: int = 6,
    today: Optional[date] = None,
) -> list[TrendDataPoint]:
    """Average and count per calendar month for the last `months` months.

    Oldest month first. Months without assessments report 0 / 0.
    """
    today = today or date.today()
    by_month: dict[str, list[AssessmentRecord]] = {}
    for record in records:
        by_month.setdefault(month_key(record.assessment_date), []).append(record)

    points = []
    for back in range(months - 1, -1, -1):
        key = month_key(shift_month(today, back))
        month_records = by_month.get(key, [])
        points.append(TrendDataPoint(
            month=key,
            average=overall_average(month_records),
            count=len(month_records),
        ))
    return points


def filter_by_date_range(
    records: Sequence[AssessmentRecord],
    date_range: str,
    today: Optional[date] = None,
) -> list[AssessmentRecord]:
    """Keep records on or after the start of the named range.

    Raises:
        ValueError: If date_range is not one of DATE_RANGES.
    """
    today = today or date.today()
    if date_range == "all-time":
        return list(records)
    if date_range == "current-month":
        start = shift_month(today, 0)
    elif date_range == "last-3-months":
        start = shift_month(today, 3)
    elif date_range == "last-6-months":
        start = shift_month(today, 6)
    elif date_range == "year-to-date":
        start = date(today.year, 1, 1)
    else:
        raise ValueError(
            f"Unknown date range: {date_range}. Expected one of: {list(DATE_RANGES)}"
        )
    return [r for r in records if r.assessment_date >= start]


def trainer_stats(
    records: Sequence[AssessmentRecord],
    today: Optional[date] = None,
) -> TrainerStats:
    """Summary numbers for a trainer's home screen."""
    today = today or date.today()
    this_month = month_key(today)
    param_avgs = parameter_averages(records)

    return TrainerStats(
        current_month_average=overall_average(
            [r for r in records if month_key(r.assessment_date) == this_month]
        ),
        total_assessments=len(records),
        best_parameter=best_parameter(param_avgs),
        worst_parameter=worst_parameter(param_avgs),
        parameter_averages=param_avgs,
        category_averages=category_averages(records),
        last_assessment_date=max(
            (r.assessment_date for r in records), default=None
        ),
    )
