"""
Loading assessment rows out of the store for the analytics core.

The analytics services work on AssessmentRecord values, never on ORM
rows. These helpers run the queries and do the conversion, always
returning histories most-recent-first.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trainer_insights.models import Assessment, AssessorAssesseeOverride, Profile
from trainer_insights.structure import AssessmentRecord

_NEWEST_FIRST = (Assessment.assessment_date.desc(), Assessment.created_at.desc())


async def get_profile(db: AsyncSession, profile_id: UUID) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.id == profile_id))
    return result.scalar_one_or_none()


async def load_trainer_history(db: AsyncSession, trainer_id: UUID) -> list[AssessmentRecord]:
    """Every assessment a trainer has received, most recent first."""
    result = await db.execute(
        select(Assessment)
        .where(Assessment.trainer_id == trainer_id)
        .order_by(*_NEWEST_FIRST)
    )
    return [AssessmentRecord.from_row(row) for row in result.scalars().all()]


async def load_assessor_records(db: AsyncSession, assessor_id: UUID) -> list[AssessmentRecord]:
    """Every assessment a manager has submitted, most recent first."""
    result = await db.execute(
        select(Assessment)
        .where(Assessment.assessor_id == assessor_id)
        .order_by(*_NEWEST_FIRST)
    )
    return [AssessmentRecord.from_row(row) for row in result.scalars().all()]


async def load_all_records(db: AsyncSession) -> list[AssessmentRecord]:
    result = await db.execute(select(Assessment).order_by(*_NEWEST_FIRST))
    return [AssessmentRecord.from_row(row) for row in result.scalars().all()]


async def load_profiles(db: AsyncSession, role: Optional[str] = None) -> list[Profile]:
    query = select(Profile).order_by(Profile.full_name)
    if role:
        query = query.where(Profile.role == role)
    result = await db.execute(query)
    return list(result.scalars().all())


async def load_reporting_lines(db: AsyncSession) -> dict[UUID, Optional[UUID]]:
    """profile id → reporting manager id, for the whole organisation."""
    result = await db.execute(select(Profile.id, Profile.reporting_manager_id))
    return {profile_id: manager_id for profile_id, manager_id in result.all()}


async def load_overrides(db: AsyncSession) -> list[AssessorAssesseeOverride]:
    result = await db.execute(
        select(AssessorAssesseeOverride).order_by(AssessorAssesseeOverride.created_at.desc())
    )
    return list(result.scalars().all())


async def load_assessor_overrides(
    db: AsyncSession, assessor_id: UUID
) -> tuple[set[UUID], set[UUID]]:
    """(allowed assessee ids, blocked assessee ids) for one assessor."""
    result = await db.execute(
        select(AssessorAssesseeOverride.assessee_id, AssessorAssesseeOverride.override_type)
        .where(AssessorAssesseeOverride.assessor_id == assessor_id)
    )
    allow: set[UUID] = set()
    block: set[UUID] = set()
    for assessee_id, override_type in result.all():
        (allow if override_type == "allow" else block).add(assessee_id)
    return allow, block
