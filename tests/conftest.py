from datetime import datetime

import pytest

from impactlog.clock import fixed_clock
from impactlog.registry import default_registry
from impactlog.schemas import ActivityCandidate, ActivityRecord
from impactlog.services.calculator import ImpactCalculator
from impactlog.services.validator import SubmissionValidator

NOW = datetime(2026, 3, 15, 12, 0, 0)


@pytest.fixture
def clock():
    return fixed_clock(NOW)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def calculator(registry, clock):
    return ImpactCalculator(registry, clock)


@pytest.fixture
def validator(registry, clock):
    return SubmissionValidator(registry, clock)


def make_activity(activity_type="recycling", quantity=15, status="approved", **fields):
    calc = ImpactCalculator()
    data = {
        "user_id": "emp-001",
        "activity_type": activity_type,
        "description": "Collected and recycled office paper",
        "quantity": quantity,
        "activity_date": NOW,
        "status": status,
        "co2_saved": calc.calculate_co2_saved(activity_type, quantity or 0),
        "impact_score": calc.calculate_impact_score(activity_type, quantity or 0),
    }
    data.update(fields)
    return ActivityRecord(**data)


def make_candidate(**fields):
    data = {
        "activity_type": "recycling",
        "description": "Recycled cardboard boxes from the office",
        "quantity": 15,
        "activity_date": NOW,
        "location": "HQ",
        "photo_url": "https://example.com/proof.jpg",
    }
    data.update(fields)
    return ActivityCandidate(**data)
