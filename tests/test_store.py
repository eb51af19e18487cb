# tests/test_store.py
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from poliux.errors import ConflictError
from poliux.models import Article, ArticleVote, as_utc, utc_now
from poliux.store import get_session, insert_unique, is_unique_violation

def test_db_roundtrip():
    with get_session() as s:
        a = Article(link="u", title="t", domain="d")
        s.add(a); s.commit(); s.refresh(a)
        got = s.exec(select(Article).where(Article.id == a.id)).first()
        assert got and got.title == "t"

def test_unique_vote_per_user_and_article():
    with get_session() as s:
        s.add(ArticleVote(article_id="a", user_id="u", vote_type="up")); s.commit()
        s.add(ArticleVote(article_id="a", user_id="u", vote_type="down"))
        with pytest.raises(IntegrityError) as exc:
            s.commit()
        assert is_unique_violation(exc.value)

def test_insert_unique_maps_to_conflict():
    with get_session() as s:
        insert_unique(s, ArticleVote(article_id="a", user_id="u", vote_type="up"), "dup")
        with pytest.raises(ConflictError, match="dup"):
            insert_unique(s, ArticleVote(article_id="a", user_id="u", vote_type="up"), "dup")

def test_timestamps_are_utc_aware(add_article):
    a = add_article("art-1", hours_ago=2)
    with get_session() as s:
        got = s.get(Article, "art-1")
        assert as_utc(got.pub_date) == as_utc(a.pub_date)
    assert utc_now().tzinfo is not None
    assert as_utc(datetime(2025, 1, 1)) == datetime(2025, 1, 1, tzinfo=timezone.utc)
