import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes.activities import router as activities_router
from .routes.forecast import router as forecast_router
from .routes.gamification import router as gamification_router
from .routes.reports import router as reports_router
from .routes.stats import router as stats_router
from .settings import settings

logging.basicConfig(level=settings.log_level)

app = FastAPI(
    title="ImpactLog Impact Engine",
    version="0.1.0",
    description="CO₂ and impact scoring, submission screening and gamification for sustainability activities.",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "impact-engine"}


app.include_router(activities_router)
app.include_router(stats_router)
app.include_router(gamification_router)
app.include_router(forecast_router)
app.include_router(reports_router)
