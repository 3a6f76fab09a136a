from typing import List

from pydantic import BaseModel, Field

from ..schemas import ActivityRecord
from ..settings import settings


class ActivitiesPayload(BaseModel):
    activities: List[ActivityRecord] = Field(default_factory=list)


class TrendsRequest(ActivitiesPayload):
    months_back: int = Field(default=settings.trend_months, ge=1, le=120)
