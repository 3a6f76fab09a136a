from functools import lru_cache

from fastapi import Depends

from .clock import Clock, system_clock
from .registry import ActivityTypeRegistry, default_registry
from .services.calculator import ImpactCalculator
from .services.gamification import GamificationService
from .services.report import ReportService
from .services.submission import SubmissionService
from .services.validator import SubmissionValidator


@lru_cache
def get_registry() -> ActivityTypeRegistry:
    return default_registry()


def get_clock() -> Clock:
    return system_clock


def get_calculator(
    registry: ActivityTypeRegistry = Depends(get_registry), clock: Clock = Depends(get_clock)
) -> ImpactCalculator:
    return ImpactCalculator(registry, clock)


def get_validator(
    registry: ActivityTypeRegistry = Depends(get_registry), clock: Clock = Depends(get_clock)
) -> SubmissionValidator:
    return SubmissionValidator(registry, clock)


def get_submission_service(
    registry: ActivityTypeRegistry = Depends(get_registry), clock: Clock = Depends(get_clock)
) -> SubmissionService:
    return SubmissionService(registry, clock)


def get_gamification_service(
    registry: ActivityTypeRegistry = Depends(get_registry), clock: Clock = Depends(get_clock)
) -> GamificationService:
    return GamificationService(registry, clock)


def get_report_service(
    registry: ActivityTypeRegistry = Depends(get_registry), clock: Clock = Depends(get_clock)
) -> ReportService:
    return ReportService(registry, clock)
