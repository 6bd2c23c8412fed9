"""
Correlation analysis — which assessment dimensions move together?

Builds a symmetric matrix of Pearson correlations across the category
averages (or all 21 parameters) of a set of assessments, then ranks
the strongest relationships and phrases them as plain-English insights
for the admin dashboard.

    r = (nΣxy − ΣxΣy) / sqrt((nΣx² − (Σx)²)(nΣy² − (Σy)²))

Degenerate inputs (no aligned samples, a constant series) give r = 0
rather than NaN or an exception.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from trainer_insights.services.scoring import assessment_average, record_category_average
from trainer_insights.structure import CATEGORIES, PARAMETERS, AssessmentRecord

VARIABLE_SETS = ("categories", "parameters")
INSIGHT_THRESHOLD = 0.3
MAX_INSIGHTS = 10


@dataclass
class CorrelationResult:
    variable1: str
    variable2: str
    correlation: float      # -1 .. 1
    r_squared: float        # 0 .. 1
    significance: str       # high | medium | low
    sample_size: int
    interpretation: str
    insight: str


@dataclass
class CorrelationMatrix:
    variables: list[str]
    matrix: list[list[float]]
    insights: list[CorrelationResult] = field(default_factory=list)


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """Pearson correlation coefficient of two equal-length series."""
    if len(x) != len(y) or not x:
        return 0.0

    n = len(x)
    sum_x = sum(x)
    sum_y = sum(y)
    sum_xy = sum(xi * yi for xi, yi in zip(x, y))
    sum_x2 = sum(xi * xi for xi in x)
    sum_y2 = sum(yi * yi for yi in y)

    numerator = n * sum_xy - sum_x * sum_y
    radicand = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    if radicand <= 0:
        return 0.0
    return numerator / math.sqrt(radicand)


def classify_significance(correlation: float, sample_size: int) -> str:
    strength = abs(correlation)
    if strength >= 0.7 and sample_size >= 30:
        return "high"
    if strength >= 0.5 and sample_size >= 20:
        return "medium"
    return "low"


def interpret(correlation: float) -> str:
    strength = abs(correlation)
    if strength >= 0.7:
        return "Strong correlation"
    if strength >= 0.5:
        return "Moderate correlation"
    if strength >= 0.3:
        return "Weak correlation"
    return "No significant correlation"


def analyze_correlation(
    variable1: str,
    variable2: str,
    rows: Sequence[Mapping[str, Optional[float]]],
) -> CorrelationResult:
    """Correlate two named variables across rows.

    Rows missing either value are dropped, so x[i] and y[i] always come
    from the same row.
    """
    aligned = [
        (row[variable1], row[variable2])
        for row in rows
        if row.get(variable1) is not None and row.get(variable2) is not None
    ]
    x = [a for a, _ in aligned]
    y = [b for _, b in aligned]

    correlation = pearson(x, y)
    interpretation = interpret(correlation)
    direction = "positive" if correlation > 0 else "negative"
    insight = (
        f"{interpretation} ({direction}). {abs(correlation) * 100:.1f}% of variance "
        f"in {variable2} can be explained by {variable1}."
    )

    return CorrelationResult(
        variable1=variable1,
        variable2=variable2,
        correlation=round(correlation, 3),
        r_squared=round(correlation * correlation, 3),
        significance=classify_significance(correlation, len(aligned)),
        sample_size=len(aligned),
        interpretation=interpretation,
        insight=insight,
    )


def _rows_for(records: Sequence[AssessmentRecord], variables: str) -> tuple[list[str], list[dict]]:
    """Flatten records into {variable: value} rows; unrated → None."""
    if variables == "categories":
        names = [c.value for c in CATEGORIES]
        rows = []
        for record in records:
            row = {}
            for category in CATEGORIES.values():
                rated = record.rated_values(category.parameters)
                row[category.id.value] = (
                    record_category_average(record, category.id) if rated else None
                )
            rows.append(row)
        return names, rows

    if variables == "parameters":
        names = [p.value for p in PARAMETERS]
        rows = []
        for record in records:
            row = {}
            for param in PARAMETERS:
                value = record.rating(param)
                row[param.value] = value if value is not None and value > 0 else None
            rows.append(row)
        return names, rows

    raise ValueError(
        f"Unknown variable set: {variables}. Expected one of: {list(VARIABLE_SETS)}"
    )


def build_correlation_matrix(
    records: Sequence[AssessmentRecord],
    variables: str = "categories",
) -> CorrelationMatrix:
    """Pairwise correlation matrix plus the top 10 headline insights.

    Raises:
        ValueError: If variables is not "categories" or "parameters".
    """
    names, rows = _rows_for(records, variables)
    matrix = []
    insights = []

    for i, name_i in enumerate(names):
        row = []
        for j, name_j in enumerate(names):
            if i == j:
                row.append(1.0)
                continue
            result = analyze_correlation(name_i, name_j, rows)
            row.append(result.correlation)
            # Each unordered pair once
            if i < j and abs(result.correlation) > INSIGHT_THRESHOLD:
                insights.append(result)
        matrix.append(row)

    insights.sort(key=lambda r: abs(r.correlation), reverse=True)
    return CorrelationMatrix(
        variables=names,
        matrix=matrix,
        insights=insights[:MAX_INSIGHTS],
    )


def frequency_vs_performance(
    groups: Mapping[Any, Sequence[AssessmentRecord]],
) -> CorrelationResult:
    """Do trainers who are assessed more often score higher?

    groups maps trainer id → that trainer's assessments.
    """
    rows = []
    for records in groups.values():
        scores = [assessment_average(r) for r in records if r.rated_values()]
        if scores:
            rows.append({
                "frequency": float(len(records)),
                "performance": sum(scores) / len(scores),
            })
    return analyze_correlation("frequency", "performance", rows)


def correlation_insights(matrix: CorrelationMatrix) -> list[str]:
    """Short actionable takeaways for the admin dashboard."""
    takeaways = []
    for result in matrix.insights:
        if abs(result.correlation) >= 0.7:
            takeaways.append(
                f"Strong correlation ({result.correlation:.2f}) between "
                f"{result.variable1.replace('_', ' ')} and "
                f"{result.variable2.replace('_', ' ')}. Improving one may improve the other."
            )

    pair_count = len(matrix.variables) * (len(matrix.variables) - 1) // 2
    if pair_count and len(matrix.insights) < min(pair_count, MAX_INSIGHTS):
        takeaways.append(
            "Some parameters show weak correlation, suggesting they measure "
            "independent skills. Focus on each separately."
        )
    return takeaways
