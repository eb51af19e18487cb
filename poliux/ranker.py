from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
import random

# Age buckets in hours -> weight. Anything older than the last bucket is dropped.
WEIGHT_BUCKETS = ((24, 4), (72, 2), (168, 1))


@dataclass
class RankedPage:
    articles: List[Dict[str, Any]] = field(default_factory=list)
    total_count: int = 0


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def recency_weight(published_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    if published_at is None:
        return 0
    now = _as_utc(now or datetime.now(timezone.utc))
    age_hours = (now - _as_utc(published_at)).total_seconds() / 3600.0
    for max_age, weight in WEIGHT_BUCKETS:
        if age_hours <= max_age:
            return weight
    return 0


def diversify_by_domain(articles: Iterable[Dict[str, Any]], max_per_domain: int) -> List[Dict[str, Any]]:
    """Keep at most `max_per_domain` articles per domain, first come first kept."""
    counts: Dict[str, int] = {}
    kept: List[Dict[str, Any]] = []
    for article in articles:
        domain = article.get("domain") or ""
        count = counts.get(domain, 0)
        if count < max_per_domain:
            counts[domain] = count + 1
            kept.append(article)
    return kept


def weighted_shuffle(articles: Iterable[Dict[str, Any]], rng: Optional[random.Random] = None) -> List[Dict[str, Any]]:
    """
    Random order biased toward heavier articles: each gets key U(0,1) * weight and
    the list is sorted by key, highest first. Weight-0 articles never come out.
    """
    rng = rng or random
    keyed = [(rng.random() * a["weight"], a) for a in articles if a.get("weight", 0) > 0]
    keyed.sort(key=lambda pair: pair[0], reverse=True)
    return [a for _, a in keyed]


def rank_articles(
    candidates: Iterable[Dict[str, Any]],
    now: Optional[datetime] = None,
    *,
    max_per_domain: int = 2,
    limit: int = 20,
    offset: int = 0,
    rng: Optional[random.Random] = None,
) -> RankedPage:
    """
    The newsfeed ranking: weight by recency, drop stale items, cap per domain,
    weighted shuffle, then slice one page. `candidates` should be newest first so
    the domain cap keeps the most recent articles of each source.
    """
    now = now or datetime.now(timezone.utc)
    weighted = []
    for article in candidates:
        weight = recency_weight(article.get("pub_date"), now)
        if weight > 0:
            weighted.append({**article, "weight": weight})

    ranked = weighted_shuffle(diversify_by_domain(weighted, max_per_domain), rng)
    return RankedPage(articles=ranked[offset:offset + limit], total_count=len(ranked))
