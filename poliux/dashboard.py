# poliux/dashboard.py
"""Aggregates for the dashboard widgets, computed over rows already fetched."""
from collections import Counter
from datetime import datetime, time, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

# Statuses after which a bill no longer moves
PASSED_STATUSES = ("Passed",)
FAILED_STATUSES = ("Failed", "Vetoed", "Withdrawn")
FINAL_STATUSES = PASSED_STATUSES + FAILED_STATUSES

TOP_COMMITTEES = 10
TRENDING_DAYS = 7


def trending_since(now: datetime, days: int = TRENDING_DAYS) -> datetime:
    """Start of the UTC day `days` ago; whole days, like the date filter on bills."""
    day = (now.astimezone(timezone.utc) - timedelta(days=days)).date()
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def committee_activity(rows: Iterable[Tuple[Optional[str], Optional[str]]], top: int = TOP_COMMITTEES) -> List[Dict[str, Any]]:
    """
    `rows` are (committee, last_action) pairs ordered by last action date, newest
    first. Each committee keeps the first (most recent) action it sees; the result
    is sorted by bill count, ties keeping recency order.
    """
    stats: Dict[str, Dict[str, Any]] = {}
    for committee, last_action in rows:
        if not committee:
            continue
        entry = stats.setdefault(
            committee,
            {"committee": committee, "bill_count": 0, "recent_activity": last_action or "No recent activity"},
        )
        entry["bill_count"] += 1
    ranked = sorted(stats.values(), key=lambda e: e["bill_count"], reverse=True)
    return ranked[:top]


def party_breakdown(parties: Iterable[Optional[str]]) -> List[Dict[str, Any]]:
    counts = Counter(p for p in parties if p)
    total = sum(counts.values())
    return [
        {"party": party, "count": count, "percentage": (count / total) * 100 if total else 0.0}
        for party, count in counts.most_common()
    ]
