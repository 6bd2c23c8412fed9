"""
Gamification API: XP, levels, streaks and badges for any user.

1. GET /users/{id}/xp — Level progress and recent XP history
2. POST /users/{id}/xp — Grant XP manually (admin tooling)
3. GET /users/{id}/streaks — All of a user's streaks
4. POST /users/{id}/streaks/{type} — Record activity for one streak
5. GET /users/{id}/badges — Badges the user has earned

XP, streaks and badges for received assessments are granted automatically
by POST /assessments; these endpoints are for reading progress and for the
streak types that aren't tied to an assessment.
"""

from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trainer_insights.database import get_db
from trainer_insights.models import Profile, XPHistory
from trainer_insights.schemas.gamification import (
    BadgeResponse,
    LevelResponse,
    StreakActivityRequest,
    StreakResponse,
    XPAwardRequest,
    XPAwardResponse,
    XPHistoryEntry,
    XPResponse,
)
from trainer_insights.services.gamification import STREAK_TYPES, level_name, level_progress
from trainer_insights.services.progression import (
    award_xp,
    get_user_xp,
    load_badges,
    load_streaks,
    record_streak_activity,
)
from trainer_insights.services.records import get_profile

router = APIRouter(prefix="/api/v1/users", tags=["gamification"])


@router.get("/{user_id}/xp", response_model=XPResponse)
async def get_user_xp_progress(
    user_id: UUID,
    history_limit: int = 20,
    db: AsyncSession = Depends(get_db),
):
    """Level progress plus the most recent XP awards (newest first).

    Users who have never earned XP are reported at level 1 with 0 XP.
    """
    await _get_user_or_404(db, user_id)
    user_xp = await get_user_xp(db, user_id)

    history_result = await db.execute(
        select(XPHistory)
        .where(XPHistory.user_id == user_id)
        .order_by(XPHistory.created_at.desc())
        .limit(min(max(history_limit, 0), 100))
    )

    return XPResponse(
        user_id=user_id,
        level=LevelResponse.model_validate(level_progress(user_xp.total_xp if user_xp else 0)),
        level_up_at=user_xp.level_up_at if user_xp else None,
        history=[XPHistoryEntry.model_validate(h) for h in history_result.scalars().all()],
    )


@router.post("/{user_id}/xp", response_model=XPAwardResponse)
async def grant_user_xp(
    user_id: UUID,
    request: XPAwardRequest,
    db: AsyncSession = Depends(get_db),
):
    await _get_user_or_404(db, user_id)

    try:
        award = await award_xp(
            db, user_id, request.amount,
            source=request.source,
            source_id=request.source_id,
            description=request.description,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    await db.commit()

    return XPAwardResponse(
        user_id=user_id,
        total_xp=award.total_xp,
        current_level=award.current_level,
        level_name=level_name(award.current_level),
        level_xp=award.level_xp,
        leveled_up=award.leveled_up,
        level_up_at=award.level_up_at,
    )


@router.get("/{user_id}/streaks", response_model=list[StreakResponse])
async def get_user_streaks(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    await _get_user_or_404(db, user_id)
    return [StreakResponse.model_validate(s) for s in await load_streaks(db, user_id)]


@router.post("/{user_id}/streaks/{streak_type}", response_model=StreakResponse)
async def record_user_streak(
    user_id: UUID,
    streak_type: str,
    request: Optional[StreakActivityRequest] = None,
    db: AsyncSession = Depends(get_db),
):
    """Record activity for a streak.

    Args:
        streak_type: improvement, assessment_received or consistency
        request: Optional body with activity_date (defaults to today)
    """
    if streak_type not in STREAK_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid streak type. Must be one of: {list(STREAK_TYPES)}",
        )
    await _get_user_or_404(db, user_id)

    activity_date = (request.activity_date if request else None) or date.today()
    streak = await record_streak_activity(db, user_id, streak_type, activity_date)
    await db.commit()

    return StreakResponse.model_validate(streak)


@router.get("/{user_id}/badges", response_model=list[BadgeResponse])
async def get_user_badges(
    user_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    await _get_user_or_404(db, user_id)
    return [
        BadgeResponse(
            code=badge.code,
            name=badge.name,
            description=badge.description,
            rarity=badge.rarity,
            earned_at=earned_at,
        )
        for badge, earned_at in await load_badges(db, user_id)
    ]


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------

async def _get_user_or_404(db: AsyncSession, user_id: UUID) -> Profile:
    user = await get_profile(db, user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user
