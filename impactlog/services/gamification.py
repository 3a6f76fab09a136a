import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from ..clock import Clock, system_clock
from ..registry import ActivityTypeRegistry, default_registry
from ..schemas import ActivityRecord
from .calculator import ImpactCalculator

logger = logging.getLogger(__name__)

LeaderboardPeriod = Literal["week", "month", "all"]


class BadgeDefinition(BaseModel):
    id: str
    name: str
    description: str = ""
    icon: str = "medal"
    criteria: Dict[str, float] = Field(..., description="criterion -> minimum value")
    points: int = 0


class BadgeStatus(BaseModel):
    badge: BadgeDefinition
    earned: bool
    progress: float = Field(..., ge=0, le=100, description="Percent towards the badge")


class UserRef(BaseModel):
    id: str
    name: Optional[str] = None


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: str
    user_name: Optional[str] = None
    points: float = 0.0
    co2_saved: float = 0.0
    activity_count: int = 0
    badge_count: int = 0


class Challenge(BaseModel):
    id: str
    title: str
    description: str = ""
    target_value: float
    activity_type: Optional[str] = Field(
        default=None, description="None means any activity counts, measured in kg CO₂"
    )
    start_date: date
    end_date: date
    points_reward: int = 0
    is_active: bool = True
    joined_users: List[str] = Field(default_factory=list)


class ChallengeProgress(BaseModel):
    challenge_id: str
    current_value: float
    target_value: float
    percent: float
    completed: bool
    participants: int


def _badge(id, name, description, icon, criteria, points):
    return BadgeDefinition(id=id, name=name, description=description, icon=icon, criteria=criteria, points=points)


DEFAULT_BADGES = (
    _badge("badge-001", "Green Starter", "Complete your first sustainability activity", "🌱",
           {"activities_count": 1}, 50),
    _badge("badge-002", "Eco Warrior", "Complete 10 approved activities", "🛡️",
           {"activities_count": 10}, 200),
    _badge("badge-003", "Carbon Cutter", "Save 100kg of CO₂", "✂️",
           {"co2_saved": 100}, 300),
    _badge("badge-004", "Volunteer Champion", "Complete 20 hours of volunteering", "🏆",
           {"volunteering_hours": 20}, 400),
    _badge("badge-005", "Recycling Master", "Recycle 50kg of materials", "♻️",
           {"recycling_quantity": 50}, 250),
    _badge("badge-006", "Tree Hugger", "Plant 10 trees", "🌳",
           {"trees_planted": 10}, 350),
    _badge("badge-007", "Energy Saver", "Save 500 kWh of energy", "⚡",
           {"energy_saved": 500}, 300),
    _badge("badge-008", "Sustainability Leader", "Reach 1000 total impact points", "👑",
           {"total_points": 1000}, 500),
)

# criterion -> activity type whose quantity it sums
_QUANTITY_CRITERIA = {
    "volunteering_hours": "volunteering",
    "recycling_quantity": "recycling",
    "trees_planted": "tree_planting",
    "energy_saved": "energy_saving",
}


def _percent(value: float, target: float) -> float:
    if target <= 0:
        return 100.0
    return max(0.0, min(value * 100 / target, 100.0))


class GamificationService:
    def __init__(self, registry: Optional[ActivityTypeRegistry] = None, clock: Clock = system_clock):
        registry = registry if registry is not None else default_registry()
        self.calculator = ImpactCalculator(registry, clock)
        self.clock = clock

    def user_progress(self, activities: Iterable[ActivityRecord]) -> Dict[str, float]:
        approved = [a for a in activities if a.is_approved]
        progress = {
            "activities_count": float(len(approved)),
            "co2_saved": self.calculator.calculate_total_co2_saved(approved),
            "total_points": self.calculator.calculate_total_impact_score(approved),
        }
        for criterion, type_id in _QUANTITY_CRITERIA.items():
            progress[criterion] = sum(
                (a.effective_quantity for a in approved if a.activity_type == type_id), 0.0
            )
        return progress

    def evaluate_badges(
        self,
        activities: Iterable[ActivityRecord],
        badges: Sequence[BadgeDefinition] = DEFAULT_BADGES,
    ) -> List[BadgeStatus]:
        progress = self.user_progress(activities)
        statuses = []
        for badge in badges:
            percents = []
            for criterion, threshold in badge.criteria.items():
                if criterion not in progress:
                    logger.warning("Badge %s uses unknown criterion %r", badge.id, criterion)
                percents.append(_percent(progress.get(criterion, 0.0), threshold))
            earned = bool(percents) and all(p >= 100 for p in percents)
            statuses.append(BadgeStatus(badge=badge, earned=earned, progress=min(percents, default=0.0)))
        return statuses

    def _in_period(self, activity: ActivityRecord, period: LeaderboardPeriod, now: datetime) -> bool:
        if period == "all":
            return True
        when = activity.effective_date
        if when is None:
            return False
        if period == "week":
            return when >= now - timedelta(days=7)
        return (when.year, when.month) == (now.year, now.month)

    def build_leaderboard(
        self,
        activities: Iterable[ActivityRecord],
        period: LeaderboardPeriod = "all",
        users: Sequence[UserRef] = (),
        badges: Sequence[BadgeDefinition] = DEFAULT_BADGES,
    ) -> List[LeaderboardEntry]:
        now = self.clock()
        by_user: Dict[str, List[ActivityRecord]] = defaultdict(list)
        names: Dict[str, Optional[str]] = {u.id: u.name for u in users}

        for activity in activities:
            if activity.user_id is None:
                continue
            by_user[activity.user_id].append(activity)
            if not names.get(activity.user_id) and activity.user_name:
                names[activity.user_id] = activity.user_name

        rows = []
        for user_id in set(by_user) | set(names):
            history = by_user.get(user_id, [])
            in_period = [a for a in history if a.is_approved and self._in_period(a, period, now)]
            rows.append(
                LeaderboardEntry(
                    rank=0,
                    user_id=user_id,
                    user_name=names.get(user_id),
                    points=self.calculator.calculate_total_impact_score(in_period),
                    co2_saved=self.calculator.calculate_total_co2_saved(in_period),
                    activity_count=len(in_period),
                    badge_count=sum(1 for s in self.evaluate_badges(history, badges) if s.earned),
                )
            )

        rows.sort(key=lambda r: (-r.points, -r.co2_saved, r.user_id))
        for index, row in enumerate(rows):
            if index and row.points == rows[index - 1].points:
                row.rank = rows[index - 1].rank
            else:
                row.rank = index + 1
        return rows

    def challenge_progress(self, challenge: Challenge, activities: Iterable[ActivityRecord]) -> ChallengeProgress:
        start = datetime.combine(challenge.start_date, datetime.min.time())
        end = datetime.combine(challenge.end_date, datetime.max.time())
        joined = set(challenge.joined_users)

        counted = [
            a for a in activities
            if a.is_approved
            and a.user_id in joined
            and a.effective_date is not None
            and start <= a.effective_date <= end
        ]
        if challenge.activity_type:
            current = sum(
                (a.effective_quantity for a in counted if a.activity_type == challenge.activity_type), 0.0
            )
        else:
            current = self.calculator.calculate_total_co2_saved(counted)

        percent = _percent(current, challenge.target_value) if challenge.target_value > 0 else 0.0
        return ChallengeProgress(
            challenge_id=challenge.id,
            current_value=current,
            target_value=challenge.target_value,
            percent=percent,
            completed=challenge.target_value > 0 and current >= challenge.target_value,
            participants=len(joined),
        )
