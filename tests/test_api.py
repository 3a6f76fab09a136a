import pytest
from fastapi.testclient import TestClient

from impactlog.clock import fixed_clock
from impactlog.dependencies import get_clock, get_registry
from impactlog.registry import DEFAULT_ACTIVITY_TYPES, ActivityTypeRegistry
from impactlog.main import app

from .conftest import NOW


@pytest.fixture
def client():
    app.dependency_overrides[get_clock] = lambda: fixed_clock(NOW)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _activity(**fields):
    data = {
        "id": "act-001",
        "user_id": "emp-001",
        "user_name": "Alex Johnson",
        "activity_type": "recycling",
        "description": "Collected and recycled office paper",
        "quantity": 15,
        "activity_date": "2026-03-10",
        "status": "approved",
        "co2_saved": 37.5,
        "impact_score": 75.0,
    }
    data.update(fields)
    return data


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_activity_types(client):
    r = client.get("/activity-types")
    assert r.status_code == 200
    types = {t["id"]: t for t in r.json()}
    assert len(types) == 14
    assert types["recycling"]["co2_factor"] == 2.5
    assert types["volunteering"]["unit"] == "hours"


def test_calculate(client):
    r = client.post("/activities/calculate", json={"activity_type": "recycling", "quantity": 15})
    assert r.status_code == 200
    body = r.json()
    assert body["co2_saved"] == 37.5
    assert body["impact_score"] == 75.0
    assert body["co2_display"] == "37.5kg"


def test_calculate_rejects_non_numeric_quantity(client):
    r = client.post("/activities/calculate", json={"activity_type": "recycling", "quantity": "lots"})
    assert r.status_code == 422


def test_validate(client):
    payload = {
        "candidate": {
            "activity_type": "cycling",
            "description": "",
            "quantity": 10,
            "activity_date": "2026-03-16",
        },
        "existing_activities": [],
    }
    r = client.post("/activities/validate", json=payload)
    assert r.status_code == 200
    verdict = r.json()
    assert verdict["is_valid"] is False
    assert len(verdict["errors"]) == 2
    assert "missing_location_for_outdoor" in verdict["flags"]
    assert verdict["requires_review"] is False


def test_required_fields(client):
    r = client.post("/activities/required-fields", json={"description": "Planted trees"})
    assert r.status_code == 200
    body = r.json()
    assert body["is_valid"] is False
    assert set(body["field_errors"]) == {"activity_type", "quantity", "activity_date"}


def test_submit_and_review(client):
    payload = {
        "candidate": {
            "activity_type": "recycling",
            "description": "Recycled cardboard boxes from the office",
            "quantity": 150,
            "activity_date": "2026-03-14",
            "photo_url": "https://example.com/proof.jpg",
        },
        "existing_activities": [_activity(activity_date="2026-03-14", status="pending")],
        "user_id": "emp-001",
    }
    r = client.post("/activities/submit", json=payload)
    assert r.status_code == 200
    body = r.json()
    record = body["record"]
    assert record["status"] == "pending"
    assert record["co2_saved"] == 375.0
    assert record["validation_flags"] == ["excessive_quantity", "duplicate_submission"]
    assert body["verdict"]["requires_review"] is True

    r = client.post("/activities/review", json={"record": record, "decision": "approve", "reviewer_id": "mgr-001"})
    assert r.status_code == 200
    approved = r.json()
    assert approved["status"] == "approved"
    assert approved["reviewed_at"].startswith("2026-03-15T12:00")

    r = client.post("/activities/review", json={"record": approved, "decision": "reject"})
    assert r.status_code == 409


def test_submit_blocked(client):
    payload = {"candidate": {"activity_type": "recycling", "quantity": 5, "activity_date": "2026-03-20"}}
    r = client.post("/activities/submit", json=payload)
    assert r.status_code == 200
    body = r.json()
    assert body["record"] is None
    assert body["verdict"]["is_valid"] is False


def test_stats_endpoints(client):
    activities = [
        _activity(),
        _activity(id="act-002", activity_type="volunteering", quantity=4, co2_saved=0, impact_score=40),
        _activity(id="act-003", status="pending", co2_saved=100),
    ]
    summary = client.post("/stats/summary", json={"activities": activities}).json()
    assert summary["total_co2_saved"] == 37.5
    assert summary["total_csr_hours"] == 4
    assert summary["pending_count"] == 1

    by_type = client.post("/stats/by-type", json={"activities": activities}).json()
    assert by_type["recycling"]["count"] == 1
    assert by_type["education"]["count"] == 0

    trends = client.post("/stats/trends", json={"activities": activities}).json()
    assert len(trends) == 6
    assert (trends[-1]["month"], trends[-1]["year"]) == ("Mar", 2026)
    assert trends[-1]["activity_count"] == 2


def test_trends_window_must_be_positive(client):
    r = client.post("/stats/trends", json={"activities": [], "months_back": 0})
    assert r.status_code == 422


def test_gamification_endpoints(client):
    activities = [_activity(), _activity(id="act-002", user_id="emp-002", user_name="Michael Chen", quantity=30, co2_saved=75, impact_score=150)]

    badges = client.post("/gamification/badges", json={"activities": activities[:1]}).json()
    assert badges[0]["badge"]["name"] == "Green Starter"
    assert badges[0]["earned"] is True

    board = client.post("/gamification/leaderboard", json={"activities": activities, "period": "month"}).json()
    assert [e["user_id"] for e in board] == ["emp-002", "emp-001"]
    assert board[0]["rank"] == 1

    challenge = {
        "id": "chal-002",
        "title": "Recycle Week",
        "target_value": 20,
        "activity_type": "recycling",
        "start_date": "2026-03-09",
        "end_date": "2026-03-15",
        "joined_users": ["emp-001"],
    }
    progress = client.post("/gamification/challenge", json={"challenge": challenge, "activities": activities}).json()
    assert progress["current_value"] == 15
    assert progress["percent"] == 75


def test_forecast(client):
    r = client.post("/forecast", json={"current_value": 140, "target_value": 500, "deadline": "2026-03-31"})
    assert r.status_code == 200
    body = r.json()
    assert body["days_remaining"] == 16
    assert body["will_meet_target"] is False


def test_reports(client):
    activities = [_activity()]
    report = client.post("/reports/summary", json={"activities": activities, "title": "Alex Johnson"}).json()
    assert report["headline"]["co2_saved"] == "37.5kg"
    assert len(report["trends"]) == 6

    r = client.post("/reports/csv", json={"activities": activities})
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    assert "impactlog_activities_2026-03-15.csv" in r.headers["content-disposition"]
    assert r.text.splitlines()[1].startswith("2026-03-10,Recycling,")


def test_corrupt_rows_still_aggregate(client):
    activities = [
        _activity(),
        _activity(id="act-002", status=1),
        _activity(id="act-003", activity_date="not-a-date"),
        _activity(id="act-004", quantity="n/a"),
    ]
    for path in ("/stats/summary", "/stats/by-type", "/stats/trends", "/reports/summary", "/reports/csv",
                 "/gamification/badges", "/gamification/leaderboard"):
        assert client.post(path, json={"activities": activities}).status_code == 200, path

    summary = client.post("/stats/summary", json={"activities": activities}).json()
    assert summary["approved_count"] == 3
    assert summary["total_co2_saved"] == 112.5

    trends = client.post("/stats/trends", json={"activities": activities}).json()
    assert trends[-1]["activity_count"] == 2


def test_unknown_types_do_not_grow_registry(client):
    registry = ActivityTypeRegistry(DEFAULT_ACTIVITY_TYPES, max_tracked_unknown=10)
    app.dependency_overrides[get_registry] = lambda: registry
    for i in range(50):
        r = client.post("/activities/calculate", json={"activity_type": f"junk-{i}", "quantity": 1})
        assert r.status_code == 200
    assert len(registry.unknown_lookups) == 11
    assert registry.unknown_total == 100
