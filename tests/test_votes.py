# tests/test_votes.py
from datetime import timedelta

import pytest
from sqlmodel import select

from poliux.errors import NotFoundError, ValidationError
from poliux.models import AnalyticsEvent, ArticleVote
from poliux.store import get_session
from poliux.votes import VoteCounts, cast_vote, tally_votes, vote_counts

def test_tally_votes():
    rows = [("a", "up"), ("a", "up"), ("a", "down"), ("b", "down")]
    counts = tally_votes(rows)
    assert counts["a"] == VoteCounts(up=2, down=1)
    assert counts["b"].as_dict() == {"up": 0, "down": 1}

def test_second_vote_replaces_first(add_article):
    add_article("art-1")
    with get_session() as s:
        assert cast_vote(s, "art-1", "u1", "up") == VoteCounts(up=1, down=0)
        assert cast_vote(s, "art-1", "u1", "down") == VoteCounts(up=0, down=1)
        cast_vote(s, "art-1", "u2", "down")
        rows = s.exec(select(ArticleVote).where(ArticleVote.article_id == "art-1")).all()
        assert len(rows) == 2
        assert vote_counts(s, "art-1") == VoteCounts(up=0, down=2)

def test_vote_on_missing_article_writes_nothing():
    with get_session() as s:
        with pytest.raises(NotFoundError):
            cast_vote(s, "missing", "u1", "up")
        assert s.exec(select(ArticleVote)).all() == []

def test_bad_direction_rejected(add_article):
    add_article("art-1")
    with get_session() as s:
        with pytest.raises(ValidationError):
            cast_vote(s, "art-1", "u1", "sideways")

def test_vote_endpoint(client, add_article, auth_headers):
    add_article("art-1")
    r = client.post("/newsfeed/votes", json={"article_id": "art-1", "vote_type": "up"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"success": True, "vote_counts": {"up": 1, "down": 0}, "user_vote": "up"}

    r = client.post("/newsfeed/votes", json={"article_id": "art-1", "vote_type": "down"}, headers=auth_headers)
    assert r.json()["vote_counts"] == {"up": 0, "down": 1}

def test_vote_endpoint_errors(client, add_article, auth_headers, token_for):
    add_article("art-1")
    body = {"article_id": "art-1", "vote_type": "up"}
    assert client.post("/newsfeed/votes", json=body).status_code == 401
    expired = token_for("old-user", expires_in=timedelta(minutes=-1))
    assert client.post("/newsfeed/votes", json=body, headers=expired).status_code == 401

    r = client.post("/newsfeed/votes", json={"article_id": "art-1", "vote_type": "meh"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Invalid request"

    assert client.post("/newsfeed/votes", json={"vote_type": "up"}, headers=auth_headers).status_code == 400

    r = client.post("/newsfeed/votes", json={"article_id": "nope", "vote_type": "up"}, headers=auth_headers)
    assert r.status_code == 404
    assert r.json() == {"error": "Not found", "message": "Article not found"}

def test_cast_vote_records_analytics_event(add_article):
    add_article("art-1")
    with get_session() as s:
        cast_vote(s, "art-1", "u1", "up")
        [event] = s.exec(select(AnalyticsEvent).where(AnalyticsEvent.event_type == "article_vote")).all()
    assert event.user_id == "u1" and event.article_id == "art-1"
    assert event.event_metadata == {"vote_type": "up", "counts": {"up": 1, "down": 0}}

def test_cast_vote_survives_analytics_failure(add_article, mocker):
    add_article("art-1")
    mocker.patch("poliux.analytics.record_event", side_effect=RuntimeError("analytics down"))
    with get_session() as s:
        assert cast_vote(s, "art-1", "u1", "down") == VoteCounts(up=0, down=1)
