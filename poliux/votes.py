# poliux/votes.py
from dataclasses import asdict, dataclass
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .analytics import record_event_safely
from .errors import NotFoundError, ValidationError
from .logging_setup import get_logger
from .models import Article, ArticleVote, utc_now
from .store import is_unique_violation

logger = get_logger("poliux.votes")

VOTE_TYPES = ("up", "down")


@dataclass
class VoteCounts:
    up: int = 0
    down: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def tally_votes(rows: Iterable) -> Dict[str, VoteCounts]:
    """Count up/down votes per article from raw (article_id, vote_type) rows."""
    counts: Dict[str, VoteCounts] = {}
    for article_id, vote_type in rows:
        c = counts.setdefault(article_id, VoteCounts())
        if vote_type == "up":
            c.up += 1
        elif vote_type == "down":
            c.down += 1
    return counts


def vote_counts_for(session: Session, article_ids: List[str]) -> Dict[str, VoteCounts]:
    if not article_ids:
        return {}
    rows = session.exec(
        select(ArticleVote.article_id, ArticleVote.vote_type).where(ArticleVote.article_id.in_(article_ids))
    ).all()
    return tally_votes(rows)


def vote_counts(session: Session, article_id: str) -> VoteCounts:
    return vote_counts_for(session, [article_id]).get(article_id, VoteCounts())


def user_votes(session: Session, user_id: Optional[str], article_ids: List[str]) -> Dict[str, str]:
    if not user_id or not article_ids:
        return {}
    rows = session.exec(
        select(ArticleVote.article_id, ArticleVote.vote_type).where(
            ArticleVote.user_id == user_id, ArticleVote.article_id.in_(article_ids)
        )
    ).all()
    return {article_id: vote_type for article_id, vote_type in rows}


def _upsert(session: Session, article_id: str, user_id: str, direction: str) -> None:
    existing = session.exec(
        select(ArticleVote).where(ArticleVote.article_id == article_id, ArticleVote.user_id == user_id)
    ).first()
    if existing is None:
        session.add(ArticleVote(article_id=article_id, user_id=user_id, vote_type=direction))
    else:
        existing.vote_type = direction
        existing.updated_at = utc_now()
        session.add(existing)
    session.commit()


def cast_vote(session: Session, article_id: str, user_id: str, direction: str) -> VoteCounts:
    """
    Record `user_id`'s vote on an article, replacing any earlier vote by the
    same user. Returns the article's counts after the write and records a
    best-effort `article_vote` analytics event.
    """
    if direction not in VOTE_TYPES:
        raise ValidationError('vote_type must be "up" or "down"')
    if session.get(Article, article_id) is None:
        raise NotFoundError("Article not found")

    try:
        _upsert(session, article_id, user_id, direction)
    except IntegrityError as e:
        # A concurrent first vote won the insert; the unique key lets us retry as an update
        session.rollback()
        if not is_unique_violation(e):
            raise
        _upsert(session, article_id, user_id, direction)

    counts = vote_counts(session, article_id)
    logger.info(
        "VOTE_CAST",
        extra={"article_id": article_id, "user_id": user_id, "vote_type": direction, "up": counts.up, "down": counts.down},
    )
    record_event_safely(
        "article_vote",
        user_id=user_id,
        article_id=article_id,
        metadata={"vote_type": direction, "counts": counts.as_dict()},
    )
    return counts
