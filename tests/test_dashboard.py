# tests/test_dashboard.py
from datetime import datetime, timedelta, timezone

import pytest

from poliux.dashboard import committee_activity, party_breakdown, trending_since
from poliux.models import Person, utc_now
from poliux.store import get_session

def test_trending_since_is_start_of_day():
    now = datetime(2025, 3, 8, 15, 30, tzinfo=timezone.utc)
    assert trending_since(now) == datetime(2025, 3, 1, tzinfo=timezone.utc)

def test_committee_activity_counts_and_keeps_latest_action():
    rows = [("Finance", "Reported"), ("Rules", "Heard"), ("Finance", "Introduced"), (None, "x"), ("Rules", None)]
    out = committee_activity(rows)
    assert out == [
        {"committee": "Finance", "bill_count": 2, "recent_activity": "Reported"},
        {"committee": "Rules", "bill_count": 2, "recent_activity": "Heard"},
    ]
    assert committee_activity([(f"c{i}", None) for i in range(15)], top=10)[0]["recent_activity"] == "No recent activity"
    assert len(committee_activity([(f"c{i}", None) for i in range(15)])) == 10

def test_party_breakdown():
    out = party_breakdown(["D", "R", "D", None, "I", "D"])
    assert [p["party"] for p in out] == ["D", "R", "I"]
    assert out[0]["count"] == 3 and out[0]["percentage"] == pytest.approx(60.0)
    assert party_breakdown([]) == []

@pytest.fixture()
def dashboard_data(add_bill):
    now = utc_now()
    add_bill("1", "HB1", status="Passed", committee="Finance", last_action="Signed", last_action_date=now - timedelta(days=1))
    add_bill("2", "HB2", status="Vetoed", committee="Finance", last_action="Vetoed", last_action_date=now - timedelta(days=3))
    add_bill("3", "SB3", status="In Committee", committee="Rules", last_action="Heard", last_action_date=now - timedelta(days=20))
    add_bill("4", "SB4", status="Introduced")
    add_bill("5", "SB5")
    with get_session() as s:
        s.add(Person(people_id="p1", party="D")); s.add(Person(people_id="p2", party="R"))
        s.add(Person(people_id="p3", party="D")); s.commit()

def test_stats_endpoint(client, dashboard_data, auth_headers):
    anon = client.get("/dashboard/stats").json()
    assert anon == {
        "total_bills": 5, "active_bills": 2, "bills_passed": 1, "bills_failed": 1,
        "total_legislators": 3, "user_tracked_bills": 0,
    }
    client.post("/tracked/bills", json={"bill_id": "1"}, headers=auth_headers)
    assert client.get("/dashboard/stats", headers=auth_headers).json()["user_tracked_bills"] == 1

def test_trending_committees_parties(client, dashboard_data):
    trending = client.get("/dashboard/trending").json()["bills"]
    assert [b["bill_id"] for b in trending] == ["1", "2"]
    assert trending[0]["display_number"] == "H.R. 1"
    assert len(client.get("/dashboard/trending", params={"limit": 1}).json()["bills"]) == 1

    committees = client.get("/dashboard/committees").json()["committees"]
    assert committees[0] == {"committee": "Finance", "bill_count": 2, "recent_activity": "Signed"}
    assert committees[1]["committee"] == "Rules"

    parties = client.get("/dashboard/parties").json()["parties"]
    assert parties[0]["party"] == "D" and parties[0]["count"] == 2
