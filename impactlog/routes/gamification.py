from typing import List

from fastapi import APIRouter, Depends

from ..dependencies import get_gamification_service
from ..models.gamification_schema import BadgesRequest, ChallengeRequest, LeaderboardRequest
from ..services.gamification import (
    DEFAULT_BADGES,
    BadgeStatus,
    ChallengeProgress,
    GamificationService,
    LeaderboardEntry,
)

router = APIRouter(prefix="/gamification", tags=["gamification"])


@router.post("/badges", response_model=List[BadgeStatus])
async def badges(payload: BadgesRequest, service: GamificationService = Depends(get_gamification_service)):
    return service.evaluate_badges(payload.activities, payload.badges or DEFAULT_BADGES)


@router.post("/leaderboard", response_model=List[LeaderboardEntry])
async def leaderboard(
    payload: LeaderboardRequest, service: GamificationService = Depends(get_gamification_service)
):
    return service.build_leaderboard(payload.activities, payload.period, payload.users)


@router.post("/challenge", response_model=ChallengeProgress)
async def challenge(payload: ChallengeRequest, service: GamificationService = Depends(get_gamification_service)):
    return service.challenge_progress(payload.challenge, payload.activities)
