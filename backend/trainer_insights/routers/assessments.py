"""
Assessment API endpoints.

1. POST /assessments — Submit a manager's assessment of a trainer
2. GET /assessments/{id} — Fetch a submitted assessment

Submitted assessments are immutable: there is deliberately no PUT or
PATCH route. A correction is a new assessment.

On submit, the trainer's gamification progress is updated in the same
transaction (assessment_received streak, XP, newly earned badges) unless
GAMIFICATION_ENABLED is off.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trainer_insights.config import settings
from trainer_insights.database import get_db
from trainer_insights.models import Assessment
from trainer_insights.schemas.assessments import AssessmentCreateRequest, AssessmentResponse
from trainer_insights.services.progression import apply_assessment_rewards
from trainer_insights.services.records import (
    get_profile,
    load_assessor_overrides,
    load_reporting_lines,
    load_trainer_history,
)
from trainer_insights.services.reporting import is_eligible_assessor
from trainer_insights.services.scoring import assessment_average
from trainer_insights.structure import AssessmentRecord, comment_field

router = APIRouter(prefix="/api/v1/assessments", tags=["assessments"])


@router.post("", response_model=AssessmentResponse, status_code=201)
async def create_assessment(
    request: AssessmentCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Store a new assessment.

    Ratings outside 0-5 are rejected by the request schema (422).
    The trainer and assessor must both exist (404), and the assessor must
    be allowed to assess this trainer (400).
    """
    trainer = await get_profile(db, request.trainer_id)
    if not trainer:
        raise HTTPException(status_code=404, detail="Trainer not found")
    if trainer.role != "trainer":
        raise HTTPException(status_code=400, detail="Only trainers can be assessed")

    assessor = await get_profile(db, request.assessor_id)
    if not assessor:
        raise HTTPException(status_code=404, detail="Assessor not found")

    reporting_lines = await load_reporting_lines(db)
    allow, block = await load_assessor_overrides(db, assessor.id)
    if not is_eligible_assessor(assessor.id, trainer.id, reporting_lines, allow, block):
        raise HTTPException(
            status_code=400,
            detail="Assessor is not eligible to assess this trainer "
                   "(self-assessment, reporting line, or blocked by an admin)",
        )

    assessment = Assessment(
        trainer_id=trainer.id,
        assessor_id=assessor.id,
        assessment_date=request.assessment_date,
        overall_comments=request.overall_comments,
    )
    for param, value in request.ratings.items():
        setattr(assessment, param.value, value)
    for param, text in request.comments.items():
        setattr(assessment, comment_field(param), text)

    db.add(assessment)
    await db.flush()
    record = AssessmentRecord.from_row(assessment)

    rewards = None
    if settings.GAMIFICATION_ENABLED:
        history = await load_trainer_history(db, trainer.id)
        rewards = await apply_assessment_rewards(db, record, history)

    await db.commit()
    print(f"📋 Assessment stored: {assessment.id} "
          f"(trainer {trainer.full_name}, average {assessment_average(record):.2f})")

    response = _to_response(record)
    response.rewards = rewards
    return response


@router.get("/{assessment_id}", response_model=AssessmentResponse)
async def get_assessment(
    assessment_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Assessment).where(Assessment.id == assessment_id)
    )
    assessment = result.scalar_one_or_none()
    if not assessment:
        raise HTTPException(status_code=404, detail="Assessment not found")

    return _to_response(AssessmentRecord.from_row(assessment))


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

def _to_response(record: AssessmentRecord) -> AssessmentResponse:
    return AssessmentResponse(
        id=record.id,
        trainer_id=record.trainer_id,
        assessor_id=record.assessor_id,
        assessment_date=record.assessment_date,
        ratings=dict(record.ratings),
        comments=dict(record.comments),
        overall_comments=record.overall_comments,
        average=assessment_average(record),
        created_at=record.created_at,
    )
