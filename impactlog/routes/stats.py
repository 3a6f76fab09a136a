from typing import Dict, List

from fastapi import APIRouter, Depends

from ..dependencies import get_calculator
from ..models.stats_schema import ActivitiesPayload, TrendsRequest
from ..schemas import ImpactSummary, MonthlyTrendPoint, TypeStats
from ..services.calculator import ImpactCalculator

router = APIRouter(prefix="/stats", tags=["stats"])


@router.post("/summary", response_model=ImpactSummary)
async def summary(payload: ActivitiesPayload, calculator: ImpactCalculator = Depends(get_calculator)):
    return calculator.summarize(payload.activities)


@router.post("/by-type", response_model=Dict[str, TypeStats])
async def by_type(payload: ActivitiesPayload, calculator: ImpactCalculator = Depends(get_calculator)):
    return calculator.get_stats_by_activity_type(payload.activities)


@router.post("/trends", response_model=List[MonthlyTrendPoint])
async def trends(payload: TrendsRequest, calculator: ImpactCalculator = Depends(get_calculator)):
    return calculator.get_monthly_trends(payload.activities, payload.months_back)
