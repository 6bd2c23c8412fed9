"""
Unit tests for the correlation engine.
"""

import pytest

from trainer_insights.services.correlation import (
    analyze_correlation,
    build_correlation_matrix,
    classify_significance,
    correlation_insights,
    frequency_vs_performance,
    interpret,
    pearson,
)
from trainer_insights.structure import CATEGORIES, CategoryId, ParameterId


def test_pearson_perfect_positive_and_negative():
    assert pearson([1, 2, 3, 4], [2, 4, 6, 8]) == pytest.approx(1.0)
    assert pearson([1, 2, 3, 4], [8, 6, 4, 2]) == pytest.approx(-1.0)


def test_pearson_exact_linear_relation():
    x = [1, 2, 3, 4, 5]
    y = [2 * v + 1 for v in x]
    assert abs(pearson(x, y) - 1.0) < 1e-9


def test_pearson_degenerate_inputs():
    assert pearson([], []) == 0
    assert pearson([1, 2], [1, 2, 3]) == 0
    # Zero variance → zero denominator
    assert pearson([3, 3, 3], [1, 2, 3]) == 0


@pytest.mark.parametrize("r,n,expected", [
    (0.75, 30, "high"),
    (0.75, 29, "medium"),
    (-0.55, 20, "medium"),
    (0.55, 19, "low"),
    (0.2, 100, "low"),
])
def test_classify_significance(r, n, expected):
    assert classify_significance(r, n) == expected


@pytest.mark.parametrize("r,expected", [
    (0.7, "Strong correlation"),
    (-0.5, "Moderate correlation"),
    (0.3, "Weak correlation"),
    (0.29, "No significant correlation"),
])
def test_interpret(r, expected):
    assert interpret(r) == expected


def test_analyze_correlation_aligns_rows():
    rows = [
        {"a": 1, "b": 2},
        {"a": 2, "b": None},       # dropped, b missing
        {"a": 3, "b": 6},
        {"b": 9},                  # dropped, a missing
        {"a": 4, "b": 8},
    ]
    result = analyze_correlation("a", "b", rows)

    assert result.sample_size == 3
    assert result.correlation == 1.0
    assert result.r_squared == 1.0
    assert result.significance == "low"    # n < 20
    assert result.insight == (
        "Strong correlation (positive). 100.0% of variance in b can be explained by a."
    )


def test_analyze_correlation_negative_insight():
    rows = [{"x": v, "y": 10 - v} for v in range(1, 6)]
    result = analyze_correlation("x", "y", rows)
    assert result.correlation == -1.0
    assert "(negative)" in result.insight


def _records_with_categories(record_factory, pairs):
    """Records where readiness and communication take the given values."""
    records = []
    for readiness, communication in pairs:
        ratings = {p: readiness for p in CATEGORIES[CategoryId.TRAINER_READINESS].parameters}
        ratings.update({p: communication for p in CATEGORIES[CategoryId.COMMUNICATION].parameters})
        records.append(record_factory(ratings=ratings))
    return records


def test_category_matrix_shape_and_symmetry(record_factory):
    records = _records_with_categories(record_factory, [(1, 1), (2, 2), (3, 4), (5, 5)])
    matrix = build_correlation_matrix(records)

    assert matrix.variables == [c.value for c in CategoryId]
    assert len(matrix.matrix) == 5
    for i in range(5):
        assert matrix.matrix[i][i] == 1.0
        for j in range(5):
            assert matrix.matrix[i][j] == matrix.matrix[j][i]


def test_category_matrix_insights(record_factory):
    records = _records_with_categories(record_factory, [(1, 1), (2, 2), (3, 3), (4, 4)])
    matrix = build_correlation_matrix(records)

    # Only readiness and communication are rated, and they move together
    assert len(matrix.insights) == 1
    insight = matrix.insights[0]
    assert {insight.variable1, insight.variable2} == {"trainer_readiness", "communication"}
    assert insight.correlation == 1.0


def test_unrated_values_are_missing_not_zero(record_factory):
    records = _records_with_categories(record_factory, [(1, 1), (2, 2), (3, 3)])
    # Readiness rated, communication not: must not drag the correlation down
    records.append(record_factory(ratings={ParameterId.LOGS_IN_EARLY: 5}))
    matrix = build_correlation_matrix(records)

    i = matrix.variables.index("trainer_readiness")
    j = matrix.variables.index("communication")
    assert matrix.matrix[i][j] == 1.0


def test_parameter_matrix(record_factory):
    records = [record_factory(s) for s in (1, 2, 3)]
    matrix = build_correlation_matrix(records, variables="parameters")

    assert len(matrix.variables) == 21
    assert len(matrix.matrix) == 21
    # 210 perfectly correlated pairs, capped at 10 insights
    assert len(matrix.insights) == 10


def test_unknown_variable_set(record_factory):
    with pytest.raises(ValueError, match="Unknown variable set"):
        build_correlation_matrix([record_factory(3)], variables="legacy")


def test_frequency_vs_performance(record_factory):
    groups = {
        "a": [record_factory(2)],
        "b": [record_factory(3), record_factory(3)],
        "c": [record_factory(4), record_factory(4), record_factory(4)],
    }
    result = frequency_vs_performance(groups)

    assert result.variable1 == "frequency"
    assert result.variable2 == "performance"
    assert result.sample_size == 3
    assert result.correlation == 1.0


def test_correlation_insights_text(record_factory):
    records = _records_with_categories(record_factory, [(1, 1), (2, 2), (3, 3), (4, 4)])
    takeaways = correlation_insights(build_correlation_matrix(records))

    assert any("trainer readiness" in t and "communication" in t for t in takeaways)
    assert any("independent skills" in t for t in takeaways)
