"""
Pydantic schemas for XP, levels, streaks and badges.
"""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class LevelResponse(BaseModel):
    level: int
    name: str
    total_xp: int
    level_xp: int
    xp_for_next_level: int
    progress_percent: float

    model_config = {"from_attributes": True}


class XPHistoryEntry(BaseModel):
    xp_amount: int
    source: str
    source_id: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class XPResponse(BaseModel):
    user_id: UUID
    level: LevelResponse
    level_up_at: Optional[datetime] = None
    history: list[XPHistoryEntry] = []


class XPAwardRequest(BaseModel):
    """Manual XP grant. Total XP never decreases, so amounts are >= 0."""
    amount: int = Field(ge=0)
    source: str = "manual"
    source_id: Optional[str] = None
    description: Optional[str] = None


class XPAwardResponse(BaseModel):
    user_id: UUID
    total_xp: int
    current_level: int
    level_name: str
    level_xp: int
    leveled_up: bool
    level_up_at: Optional[datetime] = None


class StreakResponse(BaseModel):
    type: str
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[date] = None
    streak_start_date: Optional[date] = None

    model_config = {"from_attributes": True}


class StreakActivityRequest(BaseModel):
    """Record activity for a streak. Defaults to today when no date is given."""
    activity_date: Optional[date] = None


class BadgeResponse(BaseModel):
    code: str
    name: str
    description: str
    rarity: str
    earned_at: Optional[datetime] = None
