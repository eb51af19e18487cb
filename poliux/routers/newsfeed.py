from typing import Optional

from fastapi import APIRouter, Depends, Header, Query

from ..auth import optional_user, require_user
from ..config import DEFAULT_LIMIT, DEFAULT_MAX_PER_DOMAIN, DEFAULT_OFFSET
from ..logging_setup import get_logger
from ..newsfeed import load_newsfeed
from ..schema import VoteIn
from ..store import get_session
from ..errors import ValidationError
from ..votes import VOTE_TYPES, cast_vote

logger = get_logger("poliux.routes.newsfeed")

router = APIRouter(prefix="/newsfeed", tags=["Newsfeed"])


@router.get("")
def get_newsfeed(
    limit: int = Query(DEFAULT_LIMIT),
    offset: int = Query(DEFAULT_OFFSET),
    max_per_domain: int = Query(DEFAULT_MAX_PER_DOMAIN, alias="maxPerDomain"),
    user_id: Optional[str] = Depends(optional_user),
):
    """
    Ranked page of recent articles. Out-of-range paging values are clamped
    (limit 1..100, maxPerDomain 1..50, offset >= 0).
    """
    with get_session() as s:
        page = load_newsfeed(s, user_id, limit=limit, offset=offset, max_per_domain=max_per_domain)
    return {"articles": page.articles, "total_count": page.total_count, "has_more": page.has_more}


@router.post("/votes")
def post_vote(body: VoteIn, authorization: Optional[str] = Header(default=None)):
    # Body is validated before auth so a malformed request gets a 400, not a 401
    if body.vote_type not in VOTE_TYPES:
        raise ValidationError('vote_type must be "up" or "down"')
    user_id = require_user(authorization)
    logger.info(f"Vote received: article={body.article_id} vote_type={body.vote_type}")
    with get_session() as s:
        counts = cast_vote(s, body.article_id, user_id, body.vote_type)

    return {"success": True, "vote_counts": counts.as_dict(), "user_vote": body.vote_type}
