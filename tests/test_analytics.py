# tests/test_analytics.py
import pytest
from sqlmodel import select

from poliux.analytics import record_event, record_event_safely
from poliux.errors import NotFoundError, ValidationError
from poliux.models import AnalyticsEvent
from poliux.store import get_session

def _all_events():
    with get_session() as s:
        return s.exec(select(AnalyticsEvent)).all()

def test_record_event_validates():
    with get_session() as s:
        with pytest.raises(ValidationError):
            record_event(s, "")
        with pytest.raises(ValidationError):
            record_event(s, "page_scroll")
        with pytest.raises(NotFoundError):
            record_event(s, "article_view", article_id="missing")
    assert _all_events() == []

def test_record_event_safely_never_raises(mocker):
    mocker.patch("poliux.analytics.record_event", side_effect=RuntimeError("db gone"))
    assert record_event_safely("newsfeed_load", user_id="u1") is False

def test_post_analytics_anonymous(client, add_article):
    add_article("art-1")
    r = client.post(
        "/analytics",
        json={"event_type": "article_click", "article_id": "art-1", "metadata": {"position": 3}},
        headers={"User-Agent": "pytest-agent"},
    )
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True and body["event_type"] == "article_click"
    assert body["recorded_at"]

    [event] = _all_events()
    assert event.user_id is None
    assert event.event_metadata["position"] == 3
    assert event.event_metadata["user_agent"] == "pytest-agent"
    assert "timestamp" in event.event_metadata

def test_post_analytics_attaches_user(client, auth_headers):
    r = client.post("/analytics", json={"event_type": "newsfeed_load"}, headers=auth_headers)
    assert r.status_code == 200
    assert _all_events()[0].user_id == "user-1"

def test_post_analytics_errors(client):
    r = client.post("/analytics", json={})
    assert r.status_code == 400
    assert r.json()["message"] == "Missing required field: event_type"

    r = client.post("/analytics", json={"event_type": "bogus"})
    assert r.status_code == 400
    assert r.json()["message"].startswith("Invalid event_type")

    # Server-side events are not accepted from clients
    assert client.post("/analytics", json={"event_type": "article_vote"}).status_code == 400

    r = client.post("/analytics", json={"event_type": "article_view", "article_id": "missing"})
    assert r.status_code == 404
