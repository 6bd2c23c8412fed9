"""
Pydantic schemas for the trainer dashboard and admin analytics views.

Most of these mirror the dataclasses returned by the analytics services;
from_attributes lets us hand a dataclass straight to model_validate().
"""

from datetime import date, datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel

from trainer_insights.structure import CategoryId, ParameterId
from trainer_insights.schemas.gamification import BadgeResponse, LevelResponse, StreakResponse


class ParameterAverageResponse(BaseModel):
    parameter: ParameterId
    label: str
    average: float
    count: int

    model_config = {"from_attributes": True}


class CategoryAverageResponse(BaseModel):
    category: CategoryId
    name: str
    average: float
    count: int

    model_config = {"from_attributes": True}


class TrendPointResponse(BaseModel):
    """One month on the trend chart. Example: {"month": "2026-03", "average": 3.8, "count": 4}"""
    month: str
    average: float
    count: int

    model_config = {"from_attributes": True}


class AlertResponse(BaseModel):
    id: str
    type: str             # declining | improving | inconsistent | skill_gap | inactivity
    severity: str         # low | medium | high
    message: str
    created_at: datetime
    trainer_id: Optional[UUID] = None
    manager_id: Optional[UUID] = None
    parameter: Optional[str] = None
    data: dict[str, Any] = {}

    model_config = {"from_attributes": True}


class TrainerStatsResponse(BaseModel):
    current_month_average: float
    total_assessments: int
    best_parameter: Optional[ParameterAverageResponse] = None
    worst_parameter: Optional[ParameterAverageResponse] = None
    last_assessment_date: Optional[date] = None

    model_config = {"from_attributes": True}


class TrainerDashboard(BaseModel):
    """Everything the trainer's home screen needs in one payload."""
    trainer_id: UUID
    trainer_name: str
    date_range: str
    overall_average: float
    stats: TrainerStatsResponse
    category_averages: list[CategoryAverageResponse]
    parameter_averages: list[ParameterAverageResponse]
    monthly_trend: list[TrendPointResponse]
    alerts: list[AlertResponse]
    level: Optional[LevelResponse] = None
    streaks: list[StreakResponse] = []
    badges: list[BadgeResponse] = []


class TrainerAlertsResponse(BaseModel):
    trainer_id: UUID
    alerts: list[AlertResponse]


class InsightResponse(BaseModel):
    type: str          # strength | improvement
    title: str
    description: str
    data: dict[str, Any] = {}

    model_config = {"from_attributes": True}


class SuggestionResponse(BaseModel):
    text: str
    tone: str
    confidence: float

    model_config = {"from_attributes": True}


class AdminAlertsResponse(BaseModel):
    total: int
    by_severity: dict[str, int]
    alerts: list[AlertResponse]


class CorrelationResponse(BaseModel):
    variable1: str
    variable2: str
    correlation: float
    r_squared: float
    significance: str
    sample_size: int
    interpretation: str
    insight: str

    model_config = {"from_attributes": True}


class CorrelationMatrixResponse(BaseModel):
    variables: list[str]
    matrix: list[list[float]]
    insights: list[CorrelationResponse]
    takeaways: list[str] = []
    frequency_vs_performance: Optional[CorrelationResponse] = None


class ManagerActivityResponse(BaseModel):
    manager_id: UUID
    full_name: str
    assessments_this_month: int
    assessments_this_quarter: int
    assessments_this_year: int
    all_time_total: int
    avg_rating_given: float
    unique_trainers_assessed: int
    last_assessment_date: Optional[date] = None
    activity_status: str

    model_config = {"from_attributes": True}


class LeaderboardEntryResponse(BaseModel):
    rank: int
    user_id: UUID
    user_name: str
    score: float
    assessment_count: int

    model_config = {"from_attributes": True}


class ImprovementAreaResponse(BaseModel):
    parameter: str
    label: str
    category: str
    current_average: float
    potential_impact: float

    model_config = {"from_attributes": True}


class RiskIndicatorResponse(BaseModel):
    area: str
    risk_level: str
    description: str

    model_config = {"from_attributes": True}


class PlatformMetricsResponse(BaseModel):
    overall_effectiveness: float
    trainer_competency_index: float
    trend_direction: str        # up | down | stable
    trend_percentage: float
    assessment_count: int
    trainers_assessed: int
    risk_indicators: list[RiskIndicatorResponse] = []


class OverrideCreateRequest(BaseModel):
    """Allow or block one assessor/trainer pair. Replaces any existing override."""
    assessor_id: UUID
    assessee_id: UUID
    override_type: str          # allow | block
    created_by: Optional[UUID] = None


class OverrideResponse(BaseModel):
    id: UUID
    assessor_id: UUID
    assessee_id: UUID
    override_type: str
    created_by: Optional[UUID] = None
    created_at: datetime

    model_config = {"from_attributes": True}
