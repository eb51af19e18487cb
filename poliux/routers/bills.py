from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Query
from sqlmodel import Session, col, func, or_, select

from ..bill_numbers import SEARCH_BILL_NUMBER, SEARCH_MIXED, analyze_search_term, format_bill_number
from ..errors import NotFoundError
from ..logging_setup import get_logger
from ..models import Bill, Person
from ..store import get_session

logger = get_logger("poliux.routes.bills")

router = APIRouter(tags=["Bills & legislators"])


def _count(session: Session, stmt) -> int:
    return session.exec(select(func.count()).select_from(stmt.subquery())).one()


def bill_out(bill: Bill) -> Dict[str, Any]:
    return {**bill.model_dump(), "display_number": format_bill_number(bill.bill_number)}


def bill_search_filter(q: str):
    """WHERE clause for a free-text search, or None when there is nothing to search."""
    analysis = analyze_search_term(q)
    if not analysis.search_terms:
        return None

    number_terms = [t.upper() for t in analysis.search_terms] + analysis.bill_numbers
    number_match = func.upper(col(Bill.bill_number)).in_(number_terms)
    if analysis.search_type == SEARCH_BILL_NUMBER:
        return number_match

    like = f"%{analysis.search_terms[0]}%"
    text_match = or_(col(Bill.title).ilike(like), col(Bill.description).ilike(like))
    if analysis.search_type == SEARCH_MIXED:
        return or_(number_match, text_match)
    return or_(text_match, col(Bill.bill_number).ilike(like))


@router.get("/bills")
def list_bills(
    q: Optional[str] = Query(None, description="Bill number (HB123, H.R. 123) or free text"),
    status: Optional[List[str]] = Query(None),
    committee: Optional[List[str]] = Query(None),
    session_id: Optional[int] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    stmt = select(Bill)
    if q:
        where = bill_search_filter(q)
        if where is not None:
            stmt = stmt.where(where)
    if status:
        stmt = stmt.where(col(Bill.status).in_(status))
    if committee:
        stmt = stmt.where(col(Bill.committee).in_(committee))
    if session_id is not None:
        stmt = stmt.where(Bill.session_id == session_id)

    with get_session() as s:
        total = _count(s, stmt)
        rows = s.exec(
            stmt.order_by(col(Bill.last_action_date).desc()).offset((page - 1) * per_page).limit(per_page)
        ).all()
        bills = [bill_out(b) for b in rows]

    logger.info(f"Bill search q={q!r} -> {total} results")
    return {"bills": bills, "total_count": total, "page": page, "per_page": per_page}


@router.get("/bills/{bill_id}")
def get_bill(bill_id: str):
    with get_session() as s:
        bill = s.get(Bill, bill_id)
        if bill is None:
            raise NotFoundError("Bill not found")
        return bill_out(bill)


@router.get("/legislators")
def list_legislators(
    q: Optional[str] = None,
    party: Optional[List[str]] = Query(None),
    role: Optional[List[str]] = Query(None),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
):
    stmt = select(Person)
    if q and q.strip():
        like = f"%{q.strip()}%"
        stmt = stmt.where(
            or_(col(Person.name).ilike(like), col(Person.first_name).ilike(like), col(Person.last_name).ilike(like))
        )
    if party:
        stmt = stmt.where(col(Person.party).in_(party))
    if role:
        stmt = stmt.where(col(Person.role).in_(role))

    with get_session() as s:
        total = _count(s, stmt)
        rows = s.exec(stmt.order_by(col(Person.name)).offset((page - 1) * per_page).limit(per_page)).all()
        people = [p.model_dump() for p in rows]
    return {"people": people, "total_count": total, "page": page, "per_page": per_page}


@router.get("/legislators/{people_id}")
def get_legislator(people_id: str):
    with get_session() as s:
        person = s.get(Person, people_id)
        if person is None:
            raise NotFoundError("Legislator not found")
        return person.model_dump()
