import csv
import io
from datetime import datetime

import pytest

from impactlog.services.report import CSV_HEADERS, ReportService

from .conftest import NOW, make_activity


@pytest.fixture
def service(registry, clock):
    return ReportService(registry, clock)


def test_csv_export(service):
    activities = [
        make_activity(
            "recycling",
            15,
            description='Sorted paper, cardboard and "mixed" plastics',
            activity_date=datetime(2026, 3, 10, 9, 30),
            location="HQ",
        ),
        make_activity("moon_walk", 2, status="pending", location=None),
    ]
    text = service.export_csv(activities)
    lines = text.splitlines()

    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1] == '2026-03-10,Recycling,"Sorted paper, cardboard and ""mixed"" plastics",15,kg,37.50,75.00,approved,HQ'

    rows = list(csv.reader(io.StringIO(text)))
    assert rows[2][1] == "moon_walk"
    assert rows[2][4] == ""
    assert rows[2][7] == "pending"


def test_csv_export_empty(service):
    assert service.export_csv([]) == ",".join(CSV_HEADERS) + "\n"


def test_build_report(service):
    activities = [
        make_activity("recycling", 500),
        make_activity("volunteering", 6),
        make_activity("recycling", 3, status="rejected"),
    ]
    report = service.build_report(activities, title="Alex Johnson", months_back=3)

    assert report.title == "Alex Johnson"
    assert report.generated_at == NOW
    assert report.headline.co2_saved == "1.3t"
    assert report.headline.csr_hours == "6h"
    assert report.headline.impact_score == "2.6K"
    assert report.summary.rejected_count == 1
    assert report.by_type["recycling"].count == 1
    assert len(report.trends) == 3
    assert report.trends[-1].activity_count == 2
