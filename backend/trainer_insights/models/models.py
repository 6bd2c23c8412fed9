"""
SQLAlchemy models mirroring the assessment store's tables.

Tables:
- profiles:     admins, managers and trainers (with reporting lines)
- assessments:  one row per manager-to-trainer assessment, 21 ratings
- user_xp:      cumulative XP and derived level per user
- xp_history:   append-only log of XP awards
- streaks:      one row per (user, streak type)
- user_badges:  one row per (user, badge code)
- assessor_assessee_overrides: admin allow/block exceptions per pair

Assessments have no update path: once submitted they are immutable.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from trainer_insights.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Profile(Base):
    __tablename__ = "profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True)
    full_name: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(20))  # admin | manager | trainer
    team_name: Mapped[Optional[str]] = mapped_column(String(255))
    reporting_manager_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("profiles.id")
    )
    status: Mapped[str] = mapped_column(String(20), default="active")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Assessment(Base):
    __tablename__ = "assessments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trainer_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), index=True)
    assessor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), index=True)
    assessment_date: Mapped[date] = mapped_column(Date, index=True)

    # Category 1: Trainer Initial Readiness
    logs_in_early: Mapped[Optional[int]] = mapped_column(SmallInteger)
    logs_in_early_comments: Mapped[Optional[str]] = mapped_column(Text)
    video_always_on: Mapped[Optional[int]] = mapped_column(SmallInteger)
    video_always_on_comments: Mapped[Optional[str]] = mapped_column(Text)
    minimal_disturbance: Mapped[Optional[int]] = mapped_column(SmallInteger)
    minimal_disturbance_comments: Mapped[Optional[str]] = mapped_column(Text)
    presentable_prompt: Mapped[Optional[int]] = mapped_column(SmallInteger)
    presentable_prompt_comments: Mapped[Optional[str]] = mapped_column(Text)
    ready_with_tools: Mapped[Optional[int]] = mapped_column(SmallInteger)
    ready_with_tools_comments: Mapped[Optional[str]] = mapped_column(Text)

    # Category 2: Trainer Expertise & Delivery
    adequate_knowledge: Mapped[Optional[int]] = mapped_column(SmallInteger)
    adequate_knowledge_comments: Mapped[Optional[str]] = mapped_column(Text)
    simplifies_topics: Mapped[Optional[int]] = mapped_column(SmallInteger)
    simplifies_topics_comments: Mapped[Optional[str]] = mapped_column(Text)
    encourages_participation: Mapped[Optional[int]] = mapped_column(SmallInteger)
    encourages_participation_comments: Mapped[Optional[str]] = mapped_column(Text)
    handles_questions: Mapped[Optional[int]] = mapped_column(SmallInteger)
    handles_questions_comments: Mapped[Optional[str]] = mapped_column(Text)
    provides_context: Mapped[Optional[int]] = mapped_column(SmallInteger)
    provides_context_comments: Mapped[Optional[str]] = mapped_column(Text)

    # Category 3: Participant Engagement & Interaction
    maintains_attention: Mapped[Optional[int]] = mapped_column(SmallInteger)
    maintains_attention_comments: Mapped[Optional[str]] = mapped_column(Text)
    uses_interactive_tools: Mapped[Optional[int]] = mapped_column(SmallInteger)
    uses_interactive_tools_comments: Mapped[Optional[str]] = mapped_column(Text)
    assesses_learning: Mapped[Optional[int]] = mapped_column(SmallInteger)
    assesses_learning_comments: Mapped[Optional[str]] = mapped_column(Text)
    clear_speech: Mapped[Optional[int]] = mapped_column(SmallInteger)
    clear_speech_comments: Mapped[Optional[str]] = mapped_column(Text)

    # Category 4: Communication Skills
    minimal_grammar_errors: Mapped[Optional[int]] = mapped_column(SmallInteger)
    minimal_grammar_errors_comments: Mapped[Optional[str]] = mapped_column(Text)
    professional_tone: Mapped[Optional[int]] = mapped_column(SmallInteger)
    professional_tone_comments: Mapped[Optional[str]] = mapped_column(Text)
    manages_teams_well: Mapped[Optional[int]] = mapped_column(SmallInteger)
    manages_teams_well_comments: Mapped[Optional[str]] = mapped_column(Text)

    # Category 5: Technical Acumen
    efficient_tool_switching: Mapped[Optional[int]] = mapped_column(SmallInteger)
    efficient_tool_switching_comments: Mapped[Optional[str]] = mapped_column(Text)
    audio_video_clarity: Mapped[Optional[int]] = mapped_column(SmallInteger)
    audio_video_clarity_comments: Mapped[Optional[str]] = mapped_column(Text)
    session_recording: Mapped[Optional[int]] = mapped_column(SmallInteger)
    session_recording_comments: Mapped[Optional[str]] = mapped_column(Text)
    survey_assignment: Mapped[Optional[int]] = mapped_column(SmallInteger)
    survey_assignment_comments: Mapped[Optional[str]] = mapped_column(Text)

    overall_comments: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class UserXP(Base):
    __tablename__ = "user_xp"

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), primary_key=True)
    total_xp: Mapped[int] = mapped_column(Integer, default=0)
    current_level: Mapped[int] = mapped_column(Integer, default=1)
    level_xp: Mapped[int] = mapped_column(Integer, default=0)
    level_up_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class XPHistory(Base):
    __tablename__ = "xp_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), index=True)
    xp_amount: Mapped[int] = mapped_column(Integer)
    source: Mapped[str] = mapped_column(String(50))   # assessment | badge | manual
    source_id: Mapped[Optional[str]] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class Streak(Base):
    __tablename__ = "streaks"
    __table_args__ = (
        UniqueConstraint("user_id", "type", name="uq_streak_user_type"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), index=True)
    type: Mapped[str] = mapped_column(String(30))
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0)
    last_activity_date: Mapped[Optional[date]] = mapped_column(Date)
    streak_start_date: Mapped[Optional[date]] = mapped_column(Date)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )


class UserBadge(Base):
    __tablename__ = "user_badges"
    __table_args__ = (
        UniqueConstraint("user_id", "badge_code", name="uq_user_badge"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), index=True)
    badge_code: Mapped[str] = mapped_column(String(50))
    earned_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)


class AssessorAssesseeOverride(Base):
    """Admin exception to the reporting-line rule for one assessor/trainer pair.

    allow: the assessor may assess this reportee anyway.
    block: the assessor may never assess this trainer.
    """
    __tablename__ = "assessor_assessee_overrides"
    __table_args__ = (
        UniqueConstraint("assessor_id", "assessee_id", name="uq_assessor_assessee"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    assessor_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), index=True)
    assessee_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), index=True)
    override_type: Mapped[str] = mapped_column(String(10))  # allow | block
    created_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, ForeignKey("profiles.id"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow)
