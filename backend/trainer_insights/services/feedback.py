"""
Deterministic feedback suggestions and insights.

These are the rule-based texts shown when no AI provider is configured.
Suggestions are tiered by rating (>= 4.5 excellent, >= 3.5 good, below
that needs improvement); insights name a trainer's strongest and weakest
parameter.
"""

from dataclasses import dataclass, field
from typing import Sequence

from trainer_insights.services.scoring import (
    best_parameter,
    parameter_averages,
    worst_parameter,
)
from trainer_insights.structure import AssessmentRecord

TONES = ("professional", "encouraging", "direct")


@dataclass
class Suggestion:
    text: str
    tone: str
    confidence: float


@dataclass
class PerformanceInsight:
    type: str        # strength | improvement
    title: str
    description: str
    data: dict = field(default_factory=dict)


_TEMPLATES = {
    "excellent": [
        ("Excellent performance in {p}. Consistently demonstrates strong capabilities "
         "and sets a high standard for others.", 0.9),
        ("Outstanding {p} skills. The trainer shows exceptional proficiency and should "
         "continue building on these strengths.", 0.9),
        ("Strong {p} abilities. This is a clear strength area that contributes "
         "significantly to overall effectiveness.", 0.85),
    ],
    "good": [
        ("Good {p} performance. Shows solid understanding with room for continued "
         "growth and development.", 0.8),
        ("Competent in {p}. With focused effort, there's potential to reach the next "
         "level of proficiency.", 0.8),
        ("Adequate {p} skills. Consider additional practice and feedback to enhance "
         "performance in this area.", 0.75),
    ],
    "needs_improvement": [
        ("{p} needs improvement. Focus on specific skill development and seek "
         "additional training or mentorship in this area.", 0.8),
        ("Development opportunity in {p}. Create a targeted improvement plan with "
         "clear goals and milestones.", 0.8),
        ("Requires attention in {p}. Consider structured learning resources and "
         "regular practice to build competency.", 0.75),
    ],
}


def fallback_suggestions(rating: float, parameter: str, tone: str = "professional") -> list[Suggestion]:
    """Three canned feedback sentences appropriate to the rating."""
    if rating >= 4.5:
        tier = "excellent"
    elif rating >= 3.5:
        tier = "good"
    else:
        tier = "needs_improvement"

    return [
        Suggestion(text=template.format(p=parameter), tone=tone, confidence=confidence)
        for template, confidence in _TEMPLATES[tier]
    ]


def fallback_insights(records: Sequence[AssessmentRecord]) -> list[PerformanceInsight]:
    averages = parameter_averages(records)
    best = best_parameter(averages)
    worst = worst_parameter(averages)
    if best is None or worst is None:
        return []

    return [
        PerformanceInsight(
            type="strength",
            title=f"Your Strongest Skill: {best.label}",
            description=(
                f"You consistently excel in {best.label} with an average rating "
                f"of {best.average:.2f}/5.0."
            ),
            data={"parameter": best.parameter.value, "score": best.average},
        ),
        PerformanceInsight(
            type="improvement",
            title=f"Focus Area: {worst.label}",
            description=(
                f"{worst.label} shows the most opportunity for growth. "
                "Consider targeted development in this area."
            ),
            data={"parameter": worst.parameter.value, "score": worst.average},
        ),
    ]
