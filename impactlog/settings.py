import os
from typing import Literal

from pydantic import BaseModel, Field
from dotenv import load_dotenv

# load .env on startup
load_dotenv()


class Settings(BaseModel):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    trend_months: int = Field(default=6, ge=1, alias="TREND_MONTHS")
    leaderboard_period: Literal["week", "month", "all"] = Field(
        default="all", alias="LEADERBOARD_PERIOD"
    )
    forecast_period_days: int = Field(default=30, ge=1, alias="FORECAST_PERIOD_DAYS")

    @classmethod
    def from_env(cls):
        data = {
            "LOG_LEVEL": os.getenv("LOG_LEVEL", "INFO").upper(),
            "TREND_MONTHS": os.getenv("TREND_MONTHS", "6"),
            "LEADERBOARD_PERIOD": os.getenv("LEADERBOARD_PERIOD", "all"),
            "FORECAST_PERIOD_DAYS": os.getenv("FORECAST_PERIOD_DAYS", "30"),
        }
        return cls.model_validate(data)


settings = Settings.from_env()
