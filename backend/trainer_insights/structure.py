"""
The fixed assessment structure: 21 rating parameters in 5 categories.

Every assessment a manager submits rates a trainer on the same 21
parameters, each an integer 0-5 where 0 (or NULL) means "not rated".
The parameters are grouped into 5 categories for reporting.

This module is the single source of truth for that structure:
- ParameterId / CategoryId enums give every parameter a typed identity
- PARAMETERS / CATEGORIES are the accessor tables (id → metadata)
- AssessmentRecord is the immutable shape the analytics services consume

Usage:
    from trainer_insights.structure import AssessmentRecord, ParameterId
    record = AssessmentRecord.from_row(assessment_row)
    record.rating(ParameterId.CLEAR_SPEECH)   # → 4 or None
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional


class CategoryId(str, Enum):
    TRAINER_READINESS = "trainer_readiness"
    EXPERTISE_DELIVERY = "expertise_delivery"
    ENGAGEMENT_INTERACTION = "engagement_interaction"
    COMMUNICATION = "communication"
    TECHNICAL_ACUMEN = "technical_acumen"


class ParameterId(str, Enum):
    # Trainer Initial Readiness
    LOGS_IN_EARLY = "logs_in_early"
    VIDEO_ALWAYS_ON = "video_always_on"
    MINIMAL_DISTURBANCE = "minimal_disturbance"
    PRESENTABLE_PROMPT = "presentable_prompt"
    READY_WITH_TOOLS = "ready_with_tools"
    # Trainer Expertise & Delivery
    ADEQUATE_KNOWLEDGE = "adequate_knowledge"
    SIMPLIFIES_TOPICS = "simplifies_topics"
    ENCOURAGES_PARTICIPATION = "encourages_participation"
    HANDLES_QUESTIONS = "handles_questions"
    PROVIDES_CONTEXT = "provides_context"
    # Participant Engagement & Interaction
    MAINTAINS_ATTENTION = "maintains_attention"
    USES_INTERACTIVE_TOOLS = "uses_interactive_tools"
    ASSESSES_LEARNING = "assesses_learning"
    CLEAR_SPEECH = "clear_speech"
    # Communication Skills
    MINIMAL_GRAMMAR_ERRORS = "minimal_grammar_errors"
    PROFESSIONAL_TONE = "professional_tone"
    MANAGES_TEAMS_WELL = "manages_teams_well"
    # Technical Acumen
    EFFICIENT_TOOL_SWITCHING = "efficient_tool_switching"
    AUDIO_VIDEO_CLARITY = "audio_video_clarity"
    SESSION_RECORDING = "session_recording"
    SURVEY_ASSIGNMENT = "survey_assignment"


@dataclass(frozen=True)
class Parameter:
    id: ParameterId
    label: str
    description: str
    category: CategoryId


@dataclass(frozen=True)
class Category:
    id: CategoryId
    name: str
    parameters: tuple[ParameterId, ...]


# --- Accessor tables ---
# Order matters: reports and averages are emitted in this order.

_P = ParameterId
_C = CategoryId

PARAMETERS: dict[ParameterId, Parameter] = {
    p.id: p
    for p in [
        Parameter(_P.LOGS_IN_EARLY, "Early Login",
                  "Trainer logs in a few minutes before the session to host the participants",
                  _C.TRAINER_READINESS),
        Parameter(_P.VIDEO_ALWAYS_ON, "Video Always On",
                  "Trainer on video at all times for the training",
                  _C.TRAINER_READINESS),
        Parameter(_P.MINIMAL_DISTURBANCE, "Minimal Disturbance",
                  "Trainer ensured minimal / zero background disturbance",
                  _C.TRAINER_READINESS),
        Parameter(_P.PRESENTABLE_PROMPT, "Presentable & Prompt",
                  "Trainer looks presentable and prompt for the training session",
                  _C.TRAINER_READINESS),
        Parameter(_P.READY_WITH_TOOLS, "Ready with Tools",
                  "Trainer is ready with content and tools needed for the session",
                  _C.TRAINER_READINESS),
        Parameter(_P.ADEQUATE_KNOWLEDGE, "Subject Knowledge",
                  "Trainer demonstrated adequate knowledge of the subject",
                  _C.EXPERTISE_DELIVERY),
        Parameter(_P.SIMPLIFIES_TOPICS, "Simplifies Topics",
                  "Trainer simplified complex topics for ease of understanding",
                  _C.EXPERTISE_DELIVERY),
        Parameter(_P.ENCOURAGES_PARTICIPATION, "Encourages Participation",
                  "Trainer encouraged participation",
                  _C.EXPERTISE_DELIVERY),
        Parameter(_P.HANDLES_QUESTIONS, "Handles Questions",
                  "Trainer encouraged questions and provided real-time responses",
                  _C.EXPERTISE_DELIVERY),
        Parameter(_P.PROVIDES_CONTEXT, "Provides Context",
                  "Trainer related learning material to BU / Production requirements",
                  _C.EXPERTISE_DELIVERY),
        Parameter(_P.MAINTAINS_ATTENTION, "Maintains Attention",
                  "Trainer kept every participant's attention to the session",
                  _C.ENGAGEMENT_INTERACTION),
        Parameter(_P.USES_INTERACTIVE_TOOLS, "Uses Interactive Tools",
                  "Trainer engaged participants with quiz / polls / activities",
                  _C.ENGAGEMENT_INTERACTION),
        Parameter(_P.ASSESSES_LEARNING, "Assesses Learning",
                  "Trainer called out to participants to confirm understanding",
                  _C.ENGAGEMENT_INTERACTION),
        Parameter(_P.CLEAR_SPEECH, "Clear Speech",
                  "Trainer maintained clarity and an acceptable rate of speech",
                  _C.ENGAGEMENT_INTERACTION),
        Parameter(_P.MINIMAL_GRAMMAR_ERRORS, "Grammar & Language",
                  "Trainer spoke well with little / no grammatical errors",
                  _C.COMMUNICATION),
        Parameter(_P.PROFESSIONAL_TONE, "Professional Tone",
                  "Trainer sounded energetic and maintained a professional tone",
                  _C.COMMUNICATION),
        Parameter(_P.MANAGES_TEAMS_WELL, "Manages Teams",
                  "Trainer displayed efficiency to manage Teams",
                  _C.COMMUNICATION),
        Parameter(_P.EFFICIENT_TOOL_SWITCHING, "Tool Switching",
                  "Trainer toggled efficiently between tools during screen share",
                  _C.TECHNICAL_ACUMEN),
        Parameter(_P.AUDIO_VIDEO_CLARITY, "Audio/Video Clarity",
                  "Trainer ensured audio / video clarity throughout the session",
                  _C.TECHNICAL_ACUMEN),
        Parameter(_P.SESSION_RECORDING, "Session Recording",
                  "Trainer recorded the session for reference of participants",
                  _C.TECHNICAL_ACUMEN),
        Parameter(_P.SURVEY_ASSIGNMENT, "Survey Assignment",
                  "Trainer assigned survey / assessment seamlessly",
                  _C.TECHNICAL_ACUMEN),
    ]
}

_CATEGORY_NAMES = {
    _C.TRAINER_READINESS: "Trainer Initial Readiness",
    _C.EXPERTISE_DELIVERY: "Trainer Expertise & Delivery",
    _C.ENGAGEMENT_INTERACTION: "Participant Engagement & Interaction",
    _C.COMMUNICATION: "Communication Skills",
    _C.TECHNICAL_ACUMEN: "Technical Acumen",
}

CATEGORIES: dict[CategoryId, Category] = {
    cat_id: Category(
        id=cat_id,
        name=name,
        parameters=tuple(p.id for p in PARAMETERS.values() if p.category == cat_id),
    )
    for cat_id, name in _CATEGORY_NAMES.items()
}

MAX_RATING = 5


def comment_field(parameter: ParameterId) -> str:
    """Column name of the free-text comment paired with a parameter."""
    return f"{parameter.value}_comments"


@dataclass(frozen=True)
class AssessmentRecord:
    """One manager-to-trainer assessment, as the analytics core sees it.

    Ratings are keyed by ParameterId. A missing key, None, or 0 all
    mean "not rated" and are excluded from every average.
    """
    id: Any
    trainer_id: Any
    assessor_id: Any
    assessment_date: date
    ratings: Mapping[ParameterId, Optional[int]] = field(default_factory=dict)
    comments: Mapping[ParameterId, str] = field(default_factory=dict)
    overall_comments: Optional[str] = None
    created_at: Optional[datetime] = None

    def rating(self, parameter: ParameterId) -> Optional[int]:
        return self.ratings.get(parameter)

    def rated_values(self, parameters=None) -> list[int]:
        """Ratings > 0 for the given parameters (all 21 by default)."""
        params = parameters if parameters is not None else PARAMETERS.keys()
        values = []
        for param in params:
            value = self.ratings.get(param)
            if value is not None and value > 0:
                values.append(value)
        return values

    @classmethod
    def from_row(cls, row: Any) -> "AssessmentRecord":
        """Build a record from an ORM row (or any object with one attribute
        per parameter id, e.g. a Pydantic model)."""
        ratings = {param: getattr(row, param.value, None) for param in PARAMETERS}
        comments = {}
        for param in PARAMETERS:
            text = getattr(row, comment_field(param), None)
            if text:
                comments[param] = text
        assessment_date = row.assessment_date
        if isinstance(assessment_date, datetime):
            assessment_date = assessment_date.date()
        return cls(
            id=row.id,
            trainer_id=row.trainer_id,
            assessor_id=row.assessor_id,
            assessment_date=assessment_date,
            ratings=ratings,
            comments=comments,
            overall_comments=getattr(row, "overall_comments", None),
            created_at=getattr(row, "created_at", None),
        )
