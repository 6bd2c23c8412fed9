"""
Pydantic schemas for the Assessment API.

Ratings are keyed by parameter id. Each rating is an integer 0-5, where
0 (or null, or simply leaving the key out) means "not rated".
"""

from datetime import date, datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from trainer_insights.structure import ParameterId

Rating = Annotated[int, Field(ge=0, le=5)]


class AssessmentCreateRequest(BaseModel):
    """A manager's assessment of one trainer."""
    trainer_id: UUID
    assessor_id: UUID
    assessment_date: date
    ratings: dict[ParameterId, Optional[Rating]] = {}
    comments: dict[ParameterId, str] = {}
    overall_comments: Optional[str] = None


class RewardSummary(BaseModel):
    """What the trainer earned from receiving this assessment."""
    xp_awarded: int
    total_xp: int
    current_level: int
    leveled_up: bool
    badges_awarded: list[str] = []
    assessment_streak: int


class AssessmentResponse(BaseModel):
    id: UUID
    trainer_id: UUID
    assessor_id: UUID
    assessment_date: date
    ratings: dict[ParameterId, Optional[int]]
    comments: dict[ParameterId, str] = {}
    overall_comments: Optional[str] = None
    average: float
    created_at: Optional[datetime] = None
    rewards: Optional[RewardSummary] = None
