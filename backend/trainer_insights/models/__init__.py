from trainer_insights.models.models import (
    Assessment,
    AssessorAssesseeOverride,
    Base,
    Profile,
    Streak,
    UserBadge,
    UserXP,
    XPHistory,
)

__all__ = [
    "Base",
    "Profile",
    "Assessment",
    "AssessorAssesseeOverride",
    "UserXP",
    "XPHistory",
    "Streak",
    "UserBadge",
]
