from datetime import date

from pydantic import BaseModel, Field

from ..settings import settings


class ForecastRequest(BaseModel):
    current_value: float = Field(..., ge=0)
    target_value: float
    deadline: date
    period_days: int = Field(default=settings.forecast_period_days, ge=1)
