from typing import Optional

from fastapi import APIRouter, Depends, Request

from ..analytics import PUBLIC_EVENT_TYPES, record_event
from ..auth import optional_user
from ..logging_setup import get_logger
from ..models import utc_now
from ..schema import AnalyticsIn
from ..store import get_session

logger = get_logger("poliux.routes.analytics")

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.post("")
def post_event(body: AnalyticsIn, request: Request, user_id: Optional[str] = Depends(optional_user)):
    """Record a client-side event. Anonymous events are accepted."""
    metadata = {
        **(body.metadata or {}),
        "user_agent": request.headers.get("User-Agent"),
        "referer": request.headers.get("Referer"),
        "timestamp": utc_now().isoformat(),
    }
    with get_session() as s:
        event = record_event(
            s,
            body.event_type,
            user_id=user_id,
            article_id=body.article_id,
            metadata=metadata,
            allowed=PUBLIC_EVENT_TYPES,
        )
        recorded_at = event.created_at.isoformat()
    logger.debug(f"Analytics event recorded: {body.event_type}")
    return {"success": True, "event_type": body.event_type, "recorded_at": recorded_at}
