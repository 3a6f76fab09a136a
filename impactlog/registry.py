import logging
from collections import Counter
from types import MappingProxyType
from typing import Iterable, Iterator, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

Unit = Literal["hours", "kg", "kWh", "liters", "trees", "km", "sheets", "uses"]

DEFAULT_DAILY_CEILING = 100.0


class ActivityTypeDefinition(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable activity type key, e.g. recycling")
    label: str
    unit: Unit
    co2_factor: float = Field(..., ge=0, description="kg CO₂ saved per unit")
    impact_weight: float = Field(..., gt=0, description="Impact points per unit")
    daily_ceiling: Optional[float] = Field(
        default=None, gt=0, description="Quantity above which a single-day entry is flagged"
    )
    color: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None


class ActivityTypeRegistry(Mapping[str, ActivityTypeDefinition]):
    """Read-only lookup of activity types.

    Lookups of unregistered ids never raise: they fall back to neutral
    defaults (CO₂ factor 0, impact weight 1, daily ceiling 100) and are
    tallied in ``unknown_lookups`` so data-quality problems stay visible.
    At most ``max_tracked_unknown`` distinct ids get their own key; the rest
    share the ``OVERFLOW_KEY`` bucket.
    """

    OVERFLOW_KEY = "<other>"

    def __init__(self, definitions: Iterable[ActivityTypeDefinition], max_tracked_unknown: int = 50):
        table: dict[str, ActivityTypeDefinition] = {}
        for definition in definitions:
            if definition.id in table:
                raise ValueError(f"Duplicate activity type: {definition.id}")
            table[definition.id] = definition
        self._types = MappingProxyType(table)
        self.max_tracked_unknown = max_tracked_unknown
        self.unknown_lookups: Counter = Counter()
        self.unknown_total = 0

    def __getitem__(self, type_id: str) -> ActivityTypeDefinition:
        return self._types[type_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._types

    def lookup(self, type_id: Optional[str]) -> Optional[ActivityTypeDefinition]:
        definition = self._types.get(type_id) if isinstance(type_id, str) else None
        if definition is None:
            self._record_unknown(type_id)
        return definition

    def _record_unknown(self, type_id: object) -> None:
        self.unknown_total += 1
        key = str(type_id)
        if key in self.unknown_lookups:
            self.unknown_lookups[key] += 1
            return
        tracked = len(self.unknown_lookups) - (self.OVERFLOW_KEY in self.unknown_lookups)
        if tracked < self.max_tracked_unknown:
            logger.warning("Unknown activity type %r, using neutral defaults", type_id)
            self.unknown_lookups[key] += 1
            return
        if self.OVERFLOW_KEY not in self.unknown_lookups:
            logger.warning(
                "More than %d distinct unknown activity types, counting the rest as %s",
                self.max_tracked_unknown,
                self.OVERFLOW_KEY,
            )
        self.unknown_lookups[self.OVERFLOW_KEY] += 1

    def co2_factor(self, type_id: Optional[str]) -> float:
        definition = self.lookup(type_id)
        return definition.co2_factor if definition else 0.0

    def impact_weight(self, type_id: Optional[str]) -> float:
        definition = self.lookup(type_id)
        return definition.impact_weight if definition else 1.0

    def unit(self, type_id: Optional[str]) -> Optional[str]:
        definition = self.lookup(type_id)
        return definition.unit if definition else None

    def daily_ceiling(self, type_id: Optional[str]) -> float:
        definition = self.lookup(type_id)
        if definition is None or definition.daily_ceiling is None:
            return DEFAULT_DAILY_CEILING
        return definition.daily_ceiling


def _define(id, label, unit, co2_factor, impact_weight, daily_ceiling, color, icon, description):
    return ActivityTypeDefinition(
        id=id,
        label=label,
        unit=unit,
        co2_factor=co2_factor,
        impact_weight=impact_weight,
        daily_ceiling=daily_ceiling,
        color=color,
        icon=icon,
        description=description,
    )


# kg CO₂ factors and impact weights per unit of quantity
DEFAULT_ACTIVITY_TYPES = (
    _define("volunteering", "Volunteering", "hours", 0, 10, 12,
            "#8b5cf6", "VolunteerActivism", "Community service and volunteer work"),
    _define("recycling", "Recycling", "kg", 2.5, 5, 100,
            "#10b981", "Recycling", "Recycling materials (paper, plastic, glass, metal)"),
    _define("energy_saving", "Energy Saving", "kWh", 0.5, 8, 500,
            "#f59e0b", "BoltOutlined", "Reducing electricity consumption"),
    _define("water_saving", "Water Conservation", "liters", 0.3, 4, 1000,
            "#3b82f6", "WaterDrop", "Reducing water usage"),
    _define("tree_planting", "Tree Planting", "trees", 22, 15, 50,
            "#059669", "Park", "Planting trees and vegetation"),
    _define("composting", "Composting", "kg", 0.5, 4, 50,
            "#84cc16", "Compost", "Composting organic waste"),
    _define("public_transport", "Public Transport", "km", 0.15, 3, 200,
            "#6366f1", "DirectionsBus", "Using public transportation instead of driving"),
    _define("cycling", "Cycling/Walking", "km", 0.21, 5, 100,
            "#ec4899", "DirectionsBike", "Cycling or walking instead of driving"),
    _define("carpooling", "Carpooling", "km", 0.1, 3, 200,
            "#14b8a6", "Groups", "Sharing rides with colleagues"),
    _define("paperless", "Paperless Initiative", "sheets", 0.01, 2, 1000,
            "#0ea5e9", "Description", "Reducing paper usage"),
    _define("reusable_items", "Reusable Items", "uses", 0.5, 3, 50,
            "#f97316", "ShoppingBag", "Using reusable bags, bottles, containers"),
    _define("food_waste_reduction", "Food Waste Reduction", "kg", 2.5, 6, 50,
            "#ef4444", "NoFood", "Reducing food waste"),
    _define("renewable_energy", "Renewable Energy", "kWh", 0.4, 7, 500,
            "#fbbf24", "SolarPower", "Using renewable energy sources"),
    _define("education", "Sustainability Education", "hours", 0, 8, 8,
            "#a855f7", "School", "Teaching or learning about sustainability"),
)


def default_registry() -> ActivityTypeRegistry:
    return ActivityTypeRegistry(DEFAULT_ACTIVITY_TYPES)
