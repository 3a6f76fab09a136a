import csv
import io
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from ..clock import Clock, system_clock
from ..registry import ActivityTypeRegistry, default_registry
from ..schemas import ActivityRecord, ImpactSummary, MonthlyTrendPoint, TypeStats
from ..settings import settings
from .calculator import ImpactCalculator, format_co2, format_number, round_half_up

CSV_HEADERS = [
    "Date",
    "Type",
    "Description",
    "Quantity",
    "Unit",
    "CO₂ Saved (kg)",
    "Impact Score",
    "Status",
    "Location",
]


class ReportHeadline(BaseModel):
    co2_saved: str
    csr_hours: str
    impact_score: str


class ActivityReport(BaseModel):
    title: str
    generated_at: datetime
    headline: ReportHeadline
    summary: ImpactSummary
    by_type: Dict[str, TypeStats]
    trends: List[MonthlyTrendPoint]


class ReportService:
    def __init__(self, registry: Optional[ActivityTypeRegistry] = None, clock: Clock = system_clock):
        self.registry = registry if registry is not None else default_registry()
        self.calculator = ImpactCalculator(self.registry, clock)
        self.clock = clock

    def build_report(
        self,
        activities: Iterable[ActivityRecord],
        title: str = "Team Report",
        months_back: int = settings.trend_months,
    ) -> ActivityReport:
        activities = list(activities)
        summary = self.calculator.summarize(activities)
        return ActivityReport(
            title=title,
            generated_at=self.clock(),
            headline=ReportHeadline(
                co2_saved=format_co2(summary.total_co2_saved),
                csr_hours=f"{summary.total_csr_hours:g}h",
                impact_score=format_number(summary.total_impact_score),
            ),
            summary=summary,
            by_type=self.calculator.get_stats_by_activity_type(activities),
            trends=self.calculator.get_monthly_trends(activities, months_back),
        )

    def export_csv(self, activities: Iterable[ActivityRecord]) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for a in activities:
            definition = self.registry.lookup(a.activity_type)
            writer.writerow([
                a.activity_date.date().isoformat() if a.activity_date else "",
                definition.label if definition else (a.activity_type or ""),
                a.description or "",
                f"{a.effective_quantity:g}",
                definition.unit if definition else "",
                f"{round_half_up(a.co2_saved or 0.0, 2):.2f}",
                f"{round_half_up(a.impact_score or 0.0, 2):.2f}",
                a.status or "",
                a.location or "",
            ])
        return buffer.getvalue()
