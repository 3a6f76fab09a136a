import math
from datetime import date, datetime

from pydantic import BaseModel

from ..clock import Clock, system_clock
from ..settings import settings


class TargetForecast(BaseModel):
    current_value: float
    target_value: float
    progress: float
    remaining: float
    days_remaining: int
    daily_rate: float
    projected_total: float
    will_meet_target: bool


def forecast_target(
    current_value: float,
    target_value: float,
    deadline: date,
    period_days: int = settings.forecast_period_days,
    clock: Clock = system_clock,
) -> TargetForecast:
    """Linear projection of an ESG target over a fixed-length period.

    The period is assumed to end at ``deadline`` (midnight); the rate so far
    is extrapolated across the whole period.
    """
    now = clock()
    seconds_left = (datetime.combine(deadline, datetime.min.time()) - now).total_seconds()
    days_remaining = math.ceil(seconds_left / 86400)

    days_passed = period_days - days_remaining
    daily_rate = current_value / days_passed if days_passed > 0 else 0.0
    projected_total = daily_rate * period_days
    progress = min(current_value * 100 / target_value, 100.0) if target_value > 0 else 0.0

    return TargetForecast(
        current_value=current_value,
        target_value=target_value,
        progress=progress,
        remaining=target_value - current_value,
        days_remaining=days_remaining,
        daily_rate=daily_rate,
        projected_total=projected_total,
        will_meet_target=projected_total >= target_value,
    )
