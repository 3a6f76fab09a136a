import logging
from datetime import datetime

from impactlog.schemas import ActivityRecord

from .conftest import make_activity


def test_date_only_string_is_midnight():
    record = ActivityRecord(activity_date="2026-03-10")
    assert record.activity_date == datetime(2026, 3, 10)


def test_numeric_strings_are_read():
    record = ActivityRecord(quantity="15", co2_saved="37.5")
    assert record.quantity == 15
    assert record.co2_saved == 37.5


def test_corrupt_fields_become_missing(caplog):
    with caplog.at_level(logging.WARNING, logger="impactlog.schemas"):
        record = ActivityRecord(
            status=1,
            activity_date="not-a-date",
            quantity="n/a",
            impact_score={"bad": True},
            validation_flags="missing_photo",
        )
    assert record.status is None
    assert not record.is_approved
    assert record.activity_date is None
    assert record.quantity is None
    assert record.effective_quantity == 0
    assert record.impact_score is None
    assert record.validation_flags == []
    assert len(caplog.records) == 5
    assert "not-a-date" in caplog.text


def test_corrupt_rows_do_not_break_aggregates(calculator):
    activities = [
        make_activity(),
        ActivityRecord(activity_type="recycling", status=1, co2_saved=37.5, activity_date="2026-03-10"),
        ActivityRecord(activity_type="recycling", status="approved", quantity="n/a", co2_saved="oops"),
    ]
    summary = calculator.summarize(activities)
    assert summary.total_co2_saved == 37.5
    assert summary.approved_count == 2
    assert summary.pending_count == 0
    assert calculator.get_stats_by_activity_type(activities)["recycling"].count == 2
