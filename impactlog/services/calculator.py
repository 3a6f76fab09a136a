import calendar
import math
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional

from ..clock import Clock, system_clock
from ..registry import ActivityTypeRegistry, default_registry
from ..schemas import ActivityRecord, ImpactSummary, MonthlyTrendPoint, TypeStats


MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def round_half_up(value: float, places: int) -> float:
    """Round half away from zero: 0.125 -> 0.13."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def format_co2(value: float) -> str:
    if value >= 1000:
        return f"{round_half_up(value / 1000, 1):.1f}t"
    return f"{round_half_up(value, 1):.1f}kg"


def format_number(value: float) -> str:
    if value >= 1_000_000:
        return f"{round_half_up(value / 1_000_000, 1):.1f}M"
    if value >= 1000:
        return f"{round_half_up(value / 1000, 1):.1f}K"
    return f"{round_half_up(value, 0):.0f}"


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    last_day = calendar.monthrange(year, month)[1]
    return datetime(year, month, 1), datetime(year, month, last_day, 23, 59, 59, 999999)


def shift_month(year: int, month: int, offset: int) -> tuple[int, int]:
    y, m = divmod(year * 12 + (month - 1) + offset, 12)
    return y, m + 1


class ImpactCalculator:
    """CO₂ and impact-score arithmetic over activity records.

    Nothing here raises on bad data: unknown activity types use the
    registry's neutral defaults and missing numbers count as zero.
    """

    def __init__(self, registry: Optional[ActivityTypeRegistry] = None, clock: Clock = system_clock):
        self.registry = registry if registry is not None else default_registry()
        self.clock = clock

    # Per-activity values

    def calculate_co2_saved(self, activity_type: Optional[str], quantity: float) -> float:
        return round_half_up(self.registry.co2_factor(activity_type) * (quantity or 0), 2)

    def calculate_impact_score(self, activity_type: Optional[str], quantity: float) -> float:
        return round_half_up(self.registry.impact_weight(activity_type) * (quantity or 0), 1)

    # Aggregates (approved activities only)

    @staticmethod
    def _approved(activities: Iterable[ActivityRecord]) -> List[ActivityRecord]:
        return [a for a in activities if a.is_approved]

    def _is_hours(self, activity: ActivityRecord) -> bool:
        return self.registry.unit(activity.activity_type) == "hours"

    def _csr_hours(self, approved: Iterable[ActivityRecord]) -> float:
        return sum((a.effective_quantity for a in approved if self._is_hours(a)), 0.0)

    def calculate_total_csr_hours(self, activities: Iterable[ActivityRecord]) -> float:
        return self._csr_hours(self._approved(activities))

    def calculate_total_co2_saved(self, activities: Iterable[ActivityRecord]) -> float:
        return sum((a.co2_saved or 0.0 for a in self._approved(activities)), 0.0)

    def calculate_total_impact_score(self, activities: Iterable[ActivityRecord]) -> float:
        return sum((a.impact_score or 0.0 for a in self._approved(activities)), 0.0)

    def get_stats_by_activity_type(self, activities: Iterable[ActivityRecord]) -> Dict[str, TypeStats]:
        stats = {type_id: TypeStats() for type_id in self.registry}
        for activity in self._approved(activities):
            entry = stats.get(activity.activity_type)
            if entry is None:
                continue
            entry.count += 1
            entry.total_quantity += activity.effective_quantity
            entry.total_co2 += activity.co2_saved or 0.0
            entry.total_impact += activity.impact_score or 0.0
        return stats

    def get_monthly_trends(self, activities: Iterable[ActivityRecord], months_back: int = 6) -> List[MonthlyTrendPoint]:
        approved = [a for a in self._approved(activities) if a.effective_date is not None]
        now = self.clock()
        trends: List[MonthlyTrendPoint] = []

        for offset in range(months_back - 1, -1, -1):
            year, month = shift_month(now.year, now.month, -offset)
            start, end = month_bounds(year, month)
            in_month = [a for a in approved if start <= a.effective_date <= end]
            trends.append(
                MonthlyTrendPoint(
                    month=MONTH_ABBR[month - 1],
                    year=year,
                    activity_count=len(in_month),
                    co2_saved=sum((a.co2_saved or 0.0 for a in in_month), 0.0),
                    impact_score=sum((a.impact_score or 0.0 for a in in_month), 0.0),
                    csr_hours=self._csr_hours(in_month),
                )
            )

        return trends

    def summarize(self, activities: Iterable[ActivityRecord]) -> ImpactSummary:
        activities = list(activities)
        statuses = [a.status for a in activities]
        return ImpactSummary(
            total_co2_saved=self.calculate_total_co2_saved(activities),
            total_impact_score=self.calculate_total_impact_score(activities),
            total_csr_hours=self.calculate_total_csr_hours(activities),
            approved_count=statuses.count("approved"),
            pending_count=statuses.count("pending"),
            rejected_count=statuses.count("rejected"),
        )

    format_co2 = staticmethod(format_co2)
    format_number = staticmethod(format_number)


_default = ImpactCalculator()


def calculate_co2_saved(activity_type: Optional[str], quantity: float) -> float:
    return _default.calculate_co2_saved(activity_type, quantity)


def calculate_impact_score(activity_type: Optional[str], quantity: float) -> float:
    return _default.calculate_impact_score(activity_type, quantity)
