# poliux/analytics.py
from typing import Any, Dict, Optional

from sqlmodel import Session

from .errors import NotFoundError, ValidationError
from .logging_setup import get_logger
from .models import AnalyticsEvent, Article
from .store import get_session

logger = get_logger("poliux.analytics")

# Accepted from clients
PUBLIC_EVENT_TYPES = (
    "article_view",
    "article_click",
    "newsfeed_load",
    "article_share",
    "article_bookmark",
)
# Emitted by the server itself
EVENT_TYPES = PUBLIC_EVENT_TYPES + ("article_vote",)


def record_event(
    session: Session,
    event_type: str,
    *,
    user_id: Optional[str] = None,
    article_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    allowed=EVENT_TYPES,
) -> AnalyticsEvent:
    if not event_type:
        raise ValidationError("Missing required field: event_type")
    if event_type not in allowed:
        raise ValidationError(f"Invalid event_type. Must be one of: {', '.join(allowed)}")
    if article_id and session.get(Article, article_id) is None:
        raise NotFoundError("Article not found")

    event = AnalyticsEvent(
        event_type=event_type,
        user_id=user_id,
        article_id=article_id,
        event_metadata=dict(metadata or {}),
    )
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


def record_event_safely(event_type: str, **kwargs) -> bool:
    """
    Best-effort variant for side effects (newsfeed loads, votes). Uses its own
    session so a failure cannot roll back the caller's work. Never raises.
    """
    try:
        with get_session() as s:
            record_event(s, event_type, **kwargs)
        return True
    except Exception as e:
        logger.warning(
            "ANALYTICS_FAILED",
            extra={"handled": True, "event_type": event_type, "error": type(e).__name__},
        )
        return False
