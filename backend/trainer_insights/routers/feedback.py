"""
Feedback suggestions for the assessment form.

GET /feedback/suggestions — three canned comment suggestions for a rating.
"""

from fastapi import APIRouter, HTTPException, Query

from trainer_insights.schemas.analytics import SuggestionResponse
from trainer_insights.services.feedback import TONES, fallback_suggestions
from trainer_insights.structure import PARAMETERS, ParameterId

router = APIRouter(prefix="/api/v1/feedback", tags=["feedback"])


@router.get("/suggestions", response_model=list[SuggestionResponse])
async def get_feedback_suggestions(
    rating: float = Query(ge=0, le=5),
    parameter: ParameterId = Query(...),
    tone: str = "professional",
):
    if tone not in TONES:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid tone. Must be one of: {list(TONES)}",
        )

    label = PARAMETERS[parameter].label
    return [
        SuggestionResponse.model_validate(s)
        for s in fallback_suggestions(rating, label, tone)
    ]
