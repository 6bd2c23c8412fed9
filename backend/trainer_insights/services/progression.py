"""
Persisting gamification progress.

The rules live in services/gamification.py as pure functions. This module
is the glue that loads the current row, applies a rule, and writes the
result back:

1. award_xp — add XP, append to xp_history, recompute level
2. record_streak_activity — advance one (user, type) streak row
3. award_new_badges — insert badges whose predicate now holds (+ bonus XP)
4. apply_assessment_rewards — all of the above for a freshly stored assessment

Nothing here commits. The caller owns the transaction, so an assessment
and its rewards are stored together or not at all.
"""

from datetime import date, datetime
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trainer_insights.models import Streak, UserBadge, UserXP, XPHistory
from trainer_insights.schemas.assessments import RewardSummary
from trainer_insights.services.gamification import (
    BADGE_XP_BONUS,
    BADGES,
    Badge,
    XP_PER_ASSESSMENT,
    StreakState,
    XPAward,
    apply_xp_award,
    evaluate_badges,
    level_name,
    update_streak,
)
from trainer_insights.structure import AssessmentRecord


async def get_user_xp(db: AsyncSession, user_id: UUID) -> Optional[UserXP]:
    result = await db.execute(select(UserXP).where(UserXP.user_id == user_id))
    return result.scalar_one_or_none()


async def award_xp(
    db: AsyncSession,
    user_id: UUID,
    amount: int,
    source: str,
    source_id: Optional[str] = None,
    description: Optional[str] = None,
) -> XPAward:
    """Add XP to a user's running total and log the award.

    Raises:
        ValueError: If amount is negative.
    """
    user_xp = await get_user_xp(db, user_id)
    if user_xp is None:
        user_xp = UserXP(user_id=user_id, total_xp=0, current_level=1, level_xp=0)
        db.add(user_xp)

    award = apply_xp_award(user_xp.total_xp or 0, amount)
    user_xp.total_xp = award.total_xp
    user_xp.current_level = award.current_level
    user_xp.level_xp = award.level_xp
    if award.leveled_up:
        user_xp.level_up_at = award.level_up_at
        print(f"🎉 User {user_id} reached level {award.current_level} "
              f"({level_name(award.current_level)})")

    db.add(XPHistory(
        user_id=user_id,
        xp_amount=amount,
        source=source,
        source_id=source_id,
        description=description,
    ))
    await db.flush()
    return award


async def get_streak(db: AsyncSession, user_id: UUID, streak_type: str) -> Optional[Streak]:
    result = await db.execute(
        select(Streak).where(Streak.user_id == user_id, Streak.type == streak_type)
    )
    return result.scalar_one_or_none()


async def record_streak_activity(
    db: AsyncSession,
    user_id: UUID,
    streak_type: str,
    activity_date: date,
) -> Streak:
    streak = await get_streak(db, user_id, streak_type)
    state = None
    if streak is not None:
        state = StreakState(
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            last_activity_date=streak.last_activity_date,
            streak_start_date=streak.streak_start_date,
        )
    else:
        streak = Streak(user_id=user_id, type=streak_type)
        db.add(streak)

    updated = update_streak(state, activity_date)
    streak.current_streak = updated.current_streak
    streak.longest_streak = updated.longest_streak
    streak.last_activity_date = updated.last_activity_date
    streak.streak_start_date = updated.streak_start_date
    await db.flush()
    return streak


async def earned_badge_codes(db: AsyncSession, user_id: UUID) -> set[str]:
    result = await db.execute(
        select(UserBadge.badge_code).where(UserBadge.user_id == user_id)
    )
    return set(result.scalars().all())


async def award_new_badges(
    db: AsyncSession,
    user_id: UUID,
    history: Sequence[AssessmentRecord],
) -> list[str]:
    """Insert every badge the history now qualifies for, once.

    Already-earned badges are skipped silently. Each new badge is worth
    BADGE_XP_BONUS on top.
    """
    already = await earned_badge_codes(db, user_id)
    new_codes = [code for code in evaluate_badges(history) if code not in already]

    for code in new_codes:
        badge, _ = BADGES[code]
        db.add(UserBadge(user_id=user_id, badge_code=code))
        print(f"🏅 Badge awarded to {user_id}: {badge.name}")
        await award_xp(
            db, user_id, BADGE_XP_BONUS,
            source="badge", source_id=code,
            description=f"Earned badge: {badge.name}",
        )
    return new_codes


async def apply_assessment_rewards(
    db: AsyncSession,
    record: AssessmentRecord,
    history: Sequence[AssessmentRecord],
) -> RewardSummary:
    """Streak, XP and badges for the trainer who just received `record`.

    `history` is the trainer's full history including `record`,
    most recent first.
    """
    streak = await record_streak_activity(
        db, record.trainer_id, "assessment_received", record.assessment_date
    )
    award = await award_xp(
        db, record.trainer_id, XP_PER_ASSESSMENT,
        source="assessment", source_id=str(record.id),
        description="Received an assessment",
    )
    leveled_up = award.leveled_up

    badges = await award_new_badges(db, record.trainer_id, history)
    if badges:
        user_xp = await get_user_xp(db, record.trainer_id)
        leveled_up = leveled_up or user_xp.current_level > award.current_level
        award = XPAward(
            total_xp=user_xp.total_xp,
            current_level=user_xp.current_level,
            level_xp=user_xp.level_xp,
            leveled_up=leveled_up,
            level_up_at=user_xp.level_up_at,
        )

    return RewardSummary(
        xp_awarded=XP_PER_ASSESSMENT + BADGE_XP_BONUS * len(badges),
        total_xp=award.total_xp,
        current_level=award.current_level,
        leveled_up=leveled_up,
        badges_awarded=badges,
        assessment_streak=streak.current_streak,
    )


async def load_streaks(db: AsyncSession, user_id: UUID) -> list[Streak]:
    result = await db.execute(
        select(Streak).where(Streak.user_id == user_id).order_by(Streak.type)
    )
    return list(result.scalars().all())


async def load_badges(db: AsyncSession, user_id: UUID) -> list[tuple[Badge, datetime]]:
    """(badge definition, earned_at) for every badge the user holds."""
    result = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at)
    )
    return [
        (BADGES[row.badge_code][0], row.earned_at)
        for row in result.scalars().all()
        if row.badge_code in BADGES
    ]
