# poliux/newsfeed.py
"""
Newsfeed: load recent articles, rank them, attach votes, record the load.

The ranking itself is poliux.ranker.rank_articles; this module only supplies the
I/O around it. The HTTP endpoint and the direct (fallback) path both go through
load_newsfeed() and differ only in how many candidates they pull.
"""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
import random
import time

from sqlmodel import Session, select

from .analytics import record_event_safely
from .config import (
    DEFAULT_LIMIT, DEFAULT_MAX_PER_DOMAIN, DEFAULT_OFFSET, NEWSFEED_FALLBACK_CAP, NEWSFEED_WINDOW_DAYS,
)
from .logging_setup import get_logger
from .models import Article
from .ranker import rank_articles
from .votes import VoteCounts, user_votes, vote_counts_for

logger = get_logger("poliux.newsfeed")

LIMIT_RANGE = (1, 100)
OFFSET_RANGE = (0, 10_000)
MAX_PER_DOMAIN_RANGE = (1, 50)

ARTICLE_FIELDS = (
    "id", "title", "description", "link", "canonical_link",
    "domain", "publication", "author", "pub_date", "image_url",
)


@dataclass
class NewsfeedPage:
    articles: List[Dict[str, Any]] = field(default_factory=list)
    total_count: int = 0
    has_more: bool = False


def clamp(value: int, bounds) -> int:
    lo, hi = bounds
    return max(lo, min(hi, int(value)))


def _to_dict(article: Article) -> Dict[str, Any]:
    return {name: getattr(article, name) for name in ARTICLE_FIELDS}


def fetch_candidates(session: Session, now: datetime, cap: Optional[int] = None) -> List[Dict[str, Any]]:
    """Articles published inside the window, newest first."""
    since = now.astimezone(timezone.utc) - timedelta(days=NEWSFEED_WINDOW_DAYS)
    stmt = select(Article).where(Article.pub_date >= since).order_by(Article.pub_date.desc())
    if cap:
        stmt = stmt.limit(cap)
    return [_to_dict(a) for a in session.exec(stmt).all()]


def load_newsfeed(
    session: Session,
    user_id: Optional[str] = None,
    *,
    limit: int = DEFAULT_LIMIT,
    offset: int = DEFAULT_OFFSET,
    max_per_domain: int = DEFAULT_MAX_PER_DOMAIN,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
    candidate_cap: Optional[int] = None,
) -> NewsfeedPage:
    t0 = time.perf_counter()
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    limit = clamp(limit, LIMIT_RANGE)
    offset = clamp(offset, OFFSET_RANGE)
    max_per_domain = clamp(max_per_domain, MAX_PER_DOMAIN_RANGE)

    candidates = fetch_candidates(session, now, cap=candidate_cap)
    page = rank_articles(
        candidates, now, max_per_domain=max_per_domain, limit=limit, offset=offset, rng=rng
    )

    ids = [a["id"] for a in page.articles]
    counts = vote_counts_for(session, ids)
    mine = user_votes(session, user_id, ids)

    articles = []
    for a in page.articles:
        item = {k: v for k, v in a.items() if k != "weight"}
        item["vote_counts"] = counts.get(a["id"], VoteCounts()).as_dict()
        item["user_vote"] = mine.get(a["id"])
        articles.append(item)

    result = NewsfeedPage(
        articles=articles,
        total_count=page.total_count,
        has_more=offset + len(articles) < page.total_count,
    )

    logger.info(
        "NEWSFEED_RANKED",
        extra={
            "candidates": len(candidates),
            "ranked": page.total_count,
            "returned": len(articles),
            "limit": limit,
            "offset": offset,
            "max_per_domain": max_per_domain,
            "elapsed_ms": round((time.perf_counter() - t0) * 1000),
        },
    )

    if user_id:
        record_event_safely(
            "newsfeed_load",
            user_id=user_id,
            metadata={
                "articles_count": len(articles),
                "limit": limit,
                "offset": offset,
                "max_per_domain": max_per_domain,
            },
        )

    return result


def load_newsfeed_direct(session: Session, user_id: Optional[str] = None, **kwargs) -> NewsfeedPage:
    """Fallback path: same ranking over at most NEWSFEED_FALLBACK_CAP candidates."""
    return load_newsfeed(session, user_id, candidate_cap=NEWSFEED_FALLBACK_CAP, **kwargs)
