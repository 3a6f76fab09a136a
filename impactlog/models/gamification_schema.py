from typing import List, Optional

from pydantic import BaseModel, Field

from ..schemas import ActivityRecord
from ..services.gamification import BadgeDefinition, Challenge, LeaderboardPeriod, UserRef
from ..settings import settings


class BadgesRequest(BaseModel):
    activities: List[ActivityRecord] = Field(default_factory=list)
    badges: Optional[List[BadgeDefinition]] = Field(
        default=None, description="Custom badge set; the built-in badges when omitted"
    )


class LeaderboardRequest(BaseModel):
    activities: List[ActivityRecord] = Field(default_factory=list)
    period: LeaderboardPeriod = settings.leaderboard_period
    users: List[UserRef] = Field(default_factory=list)


class ChallengeRequest(BaseModel):
    challenge: Challenge
    activities: List[ActivityRecord] = Field(default_factory=list)
