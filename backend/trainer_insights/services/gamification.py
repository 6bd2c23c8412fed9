"""
Gamification rules — levels, XP awards, streaks, badges, leaderboards.

Everything here is a pure function. Persistence is the caller's job:
the routers load the current row, call these functions, and write the
result back. In particular, a level-up is just `leveled_up=True` on
the returned XPAward; there is no hidden trigger that stamps it.

Level tiers (cumulative XP):
    1 Novice      0 – 499
    2 Learner     500 – 999
    3 Competent   1000 – 1999
    4 Proficient  2000 – 3999
    5 Expert      4000 – 7999
    6 Master      8000+
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping, Optional, Sequence

from trainer_insights.services.scoring import assessment_average, is_rated
from trainer_insights.structure import AssessmentRecord

# (level, name, minimum total XP)
LEVELS = [
    (1, "Novice", 0),
    (2, "Learner", 500),
    (3, "Competent", 1000),
    (4, "Proficient", 2000),
    (5, "Expert", 4000),
    (6, "Master", 8000),
]
MAX_LEVEL = LEVELS[-1][0]

# XP granted per event
XP_PER_ASSESSMENT = 100
BADGE_XP_BONUS = 50

STREAK_TYPES = ("improvement", "assessment_received", "consistency")


@dataclass
class LevelProgress:
    level: int
    name: str
    total_xp: int
    level_xp: int              # XP earned inside the current level
    xp_for_next_level: int     # width of the current level band (0 at max)
    progress_percent: float


@dataclass
class XPAward:
    total_xp: int
    current_level: int
    level_xp: int
    leveled_up: bool
    level_up_at: Optional[datetime] = None


@dataclass
class StreakState:
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[date]
    streak_start_date: Optional[date]


@dataclass
class Badge:
    code: str
    name: str
    description: str
    rarity: str


@dataclass
class LeaderboardEntry:
    rank: int
    user_id: Any
    user_name: str
    score: float
    assessment_count: int


# ------------------------------------------------------------------
# Levels & XP
# ------------------------------------------------------------------

def calculate_level(total_xp: int) -> int:
    """Level for a cumulative XP total. Monotonic step function, capped at 6."""
    level = 1
    for tier, _, minimum in LEVELS:
        if total_xp >= minimum:
            level = tier
    return level


def level_name(level: int) -> str:
    for tier, name, _ in LEVELS:
        if tier == level:
            return name
    return "Unknown"


def level_threshold(level: int) -> int:
    """Minimum total XP needed to reach `level`."""
    level = max(1, min(level, MAX_LEVEL))
    return LEVELS[level - 1][2]


def xp_for_next_level(level: int) -> int:
    if level >= MAX_LEVEL:
        return 0
    return level_threshold(level + 1) - level_threshold(level)


def level_progress(total_xp: int) -> LevelProgress:
    level = calculate_level(total_xp)
    level_xp = total_xp - level_threshold(level)
    needed = xp_for_next_level(level)
    progress = level_xp / needed * 100 if needed > 0 else 100.0

    return LevelProgress(
        level=level,
        name=level_name(level),
        total_xp=total_xp,
        level_xp=level_xp,
        xp_for_next_level=needed,
        progress_percent=round(min(100.0, max(0.0, progress)), 1),
    )


def apply_xp_award(
    total_xp: int,
    amount: int,
    now: Optional[datetime] = None,
) -> XPAward:
    """Add `amount` XP to a running total and recompute the level.

    Raises:
        ValueError: If amount is negative (total XP never decreases).
    """
    if amount < 0:
        raise ValueError(f"XP awards must be non-negative, got {amount}")

    previous_level = calculate_level(total_xp)
    new_total = total_xp + amount
    new_level = calculate_level(new_total)
    leveled_up = new_level > previous_level

    return XPAward(
        total_xp=new_total,
        current_level=new_level,
        level_xp=new_total - level_threshold(new_level),
        leveled_up=leveled_up,
        level_up_at=(now or datetime.now(timezone.utc)) if leveled_up else None,
    )


# ------------------------------------------------------------------
# Streaks
# ------------------------------------------------------------------

def _as_day(value) -> date:
    # Calendar-day granularity: time of day is irrelevant
    return value.date() if isinstance(value, datetime) else value


def update_streak(state: Optional[StreakState], activity_date) -> StreakState:
    """Advance a streak for an activity on `activity_date`.

    Same day → unchanged; next day → +1; any gap → restart at 1.
    An activity older than the last recorded one leaves the streak as is.
    """
    day = _as_day(activity_date)

    if state is None:
        return StreakState(
            current_streak=1,
            longest_streak=1,
            last_activity_date=day,
            streak_start_date=day,
        )

    if state.last_activity_date is None:
        return StreakState(
            current_streak=1,
            longest_streak=max(state.longest_streak, 1),
            last_activity_date=day,
            streak_start_date=day,
        )

    days_diff = (day - _as_day(state.last_activity_date)).days
    if days_diff <= 0:
        return StreakState(
            current_streak=state.current_streak,
            longest_streak=state.longest_streak,
            last_activity_date=state.last_activity_date,
            streak_start_date=state.streak_start_date,
        )

    if days_diff == 1:
        current = state.current_streak + 1
        start = state.streak_start_date or _as_day(state.last_activity_date)
    else:
        current = 1
        start = day

    return StreakState(
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        last_activity_date=day,
        streak_start_date=start,
    )


# ------------------------------------------------------------------
# Badges
# ------------------------------------------------------------------
# Each predicate looks at a most-recent-first history. Predicates are
# idempotent; "already awarded" is enforced by the user_badges unique
# constraint, not here.

def _averages(history: Sequence[AssessmentRecord]) -> list[float]:
    return [assessment_average(r) for r in history if is_rated(r)]


def has_rising_star(history: Sequence[AssessmentRecord]) -> bool:
    return any(avg >= 4.0 for avg in _averages(history))


def has_first_assessment(history: Sequence[AssessmentRecord]) -> bool:
    return len(history) >= 1


def has_perfect_score(history: Sequence[AssessmentRecord]) -> bool:
    return any(avg >= 4.95 for avg in _averages(history))


def has_consistency_king(history: Sequence[AssessmentRecord]) -> bool:
    recent = _averages(history)[:5]
    return len(recent) == 5 and all(avg >= 4.0 for avg in recent)


def has_all_rounder(history: Sequence[AssessmentRecord]) -> bool:
    if not history:
        return False
    ratings = history[0].rated_values()
    return bool(ratings) and all(value >= 4 for value in ratings)


BADGES: dict[str, tuple[Badge, Callable[[Sequence[AssessmentRecord]], bool]]] = {
    "first_assessment": (
        Badge("first_assessment", "First Steps", "Received your first assessment", "common"),
        has_first_assessment,
    ),
    "rising_star": (
        Badge("rising_star", "Rising Star", "Scored an average of 4.0 or higher", "common"),
        has_rising_star,
    ),
    "consistency_king": (
        Badge("consistency_king", "Consistency King",
              "Five consecutive assessments averaging 4.0 or higher", "epic"),
        has_consistency_king,
    ),
    "all_rounder": (
        Badge("all_rounder", "All-Rounder",
              "Every rated parameter at 4 or above on your latest assessment", "rare"),
        has_all_rounder,
    ),
    "perfect_score": (
        Badge("perfect_score", "Perfect Score", "An assessment averaging 4.95 or higher",
              "legendary"),
        has_perfect_score,
    ),
}


def evaluate_badges(history: Sequence[AssessmentRecord]) -> list[str]:
    """Codes of every badge whose predicate holds for this history."""
    return [code for code, (_, predicate) in BADGES.items() if predicate(history)]


# ------------------------------------------------------------------
# Leaderboards
# ------------------------------------------------------------------

def rank_top_performers(
    records: Sequence[AssessmentRecord],
    limit: int = 5,
    names: Optional[Mapping[Any, str]] = None,
) -> list[LeaderboardEntry]:
    """Trainers ranked by the mean of their assessment averages."""
    names = names or {}
    scores: dict[Any, list[float]] = defaultdict(list)
    counts: dict[Any, int] = defaultdict(int)
    for record in records:
        counts[record.trainer_id] += 1
        if is_rated(record):
            scores[record.trainer_id].append(assessment_average(record))

    ranked = sorted(
        (
            (trainer_id, round(sum(values) / len(values), 2))
            for trainer_id, values in scores.items()
        ),
        key=lambda item: item[1],
        reverse=True,
    )

    return [
        LeaderboardEntry(
            rank=position,
            user_id=trainer_id,
            user_name=names.get(trainer_id, "Unknown"),
            score=score,
            assessment_count=counts[trainer_id],
        )
        for position, (trainer_id, score) in enumerate(ranked[:limit], 1)
    ]
