from typing import List, Optional

from pydantic import BaseModel, Field

from ..schemas import ActivityCandidate, ActivityRecord
from ..services.submission import ReviewDecision


class ValidateActivityRequest(BaseModel):
    candidate: ActivityCandidate
    existing_activities: List[ActivityRecord] = Field(
        default_factory=list, description="The submitter's stored activities"
    )


class CalculateRequest(BaseModel):
    activity_type: str
    quantity: float = Field(..., description="Quantity in the activity type's unit")


class CalculateResponse(BaseModel):
    activity_type: str
    quantity: float
    co2_saved: float = Field(..., description="kg CO₂ saved, 2 decimals")
    impact_score: float = Field(..., description="Impact points, 1 decimal")
    co2_display: str


class SubmitActivityRequest(BaseModel):
    candidate: ActivityCandidate
    existing_activities: List[ActivityRecord] = Field(default_factory=list)
    user_id: Optional[str] = None
    user_name: Optional[str] = None


class ReviewRequest(BaseModel):
    record: ActivityRecord
    decision: ReviewDecision
    reviewer_id: Optional[str] = None
    comment: str = ""
