from fastapi import APIRouter, Depends

from ..clock import Clock
from ..dependencies import get_clock
from ..models.forecast_schema import ForecastRequest
from ..services.forecast import TargetForecast, forecast_target

router = APIRouter(tags=["forecast"])


@router.post("/forecast", response_model=TargetForecast)
async def forecast(payload: ForecastRequest, clock: Clock = Depends(get_clock)) -> TargetForecast:
    return forecast_target(
        payload.current_value,
        payload.target_value,
        payload.deadline,
        period_days=payload.period_days,
        clock=clock,
    )
