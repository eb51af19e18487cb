from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, col, func, select

from ..auth import optional_user
from ..dashboard import (
    FAILED_STATUSES, FINAL_STATUSES, PASSED_STATUSES,
    committee_activity, party_breakdown, trending_since,
)
from ..logging_setup import get_logger
from ..models import Bill, Person, TrackedBill, utc_now
from .bills import bill_out
from ..store import get_session

logger = get_logger("poliux.routes.dashboard")

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def _count(session: Session, table, *where) -> int:
    stmt = select(func.count()).select_from(table)
    for clause in where:
        stmt = stmt.where(clause)
    return session.exec(stmt).one()


@router.get("/stats")
def dashboard_stats(user_id: Optional[str] = Depends(optional_user)):
    status = col(Bill.status)
    with get_session() as s:
        stats = {
            "total_bills": _count(s, Bill),
            # NOT IN skips bills with no status, same as the source query
            "active_bills": _count(s, Bill, status.not_in(FINAL_STATUSES)),
            "bills_passed": _count(s, Bill, status.in_(PASSED_STATUSES)),
            "bills_failed": _count(s, Bill, status.in_(FAILED_STATUSES)),
            "total_legislators": _count(s, Person),
            "user_tracked_bills": _count(s, TrackedBill, TrackedBill.user_id == user_id) if user_id else 0,
        }
    logger.debug(f"Dashboard stats: {stats}")
    return stats


@router.get("/trending")
def trending_bills(limit: int = Query(10, ge=1, le=100)):
    since = trending_since(utc_now())
    with get_session() as s:
        rows = s.exec(
            select(Bill)
            .where(col(Bill.last_action_date) >= since)
            .order_by(col(Bill.last_action_date).desc())
            .limit(limit)
        ).all()
        return {"bills": [bill_out(b) for b in rows]}


@router.get("/committees")
def committees():
    with get_session() as s:
        rows = s.exec(
            select(Bill.committee, Bill.last_action)
            .where(col(Bill.committee).is_not(None))
            .order_by(col(Bill.last_action_date).desc())
        ).all()
    return {"committees": committee_activity(rows)}


@router.get("/parties")
def parties():
    with get_session() as s:
        rows = s.exec(select(Person.party).where(col(Person.party).is_not(None))).all()
    return {"parties": party_breakdown(rows)}
