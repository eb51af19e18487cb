from fastapi import APIRouter, Depends, status
from sqlmodel import col, select

from ..auth import require_user
from ..bill_numbers import format_bill_number
from ..errors import NotFoundError
from ..logging_setup import get_logger
from ..models import Bill, Person, TrackedBill, TrackedLegislator
from ..schema import TrackBillIn, TrackLegislatorIn
from ..store import get_session, insert_unique
from .campaigns import owned_campaign

logger = get_logger("poliux.routes.tracking")

router = APIRouter(prefix="/tracked", tags=["Tracking"])


# ---- Bills ----

@router.get("/bills")
def list_tracked_bills(user_id: str = Depends(require_user)):
    with get_session() as s:
        rows = s.exec(
            select(TrackedBill, Bill)
            .join(Bill, Bill.bill_id == TrackedBill.bill_id, isouter=True)
            .where(TrackedBill.user_id == user_id)
            .order_by(col(TrackedBill.tracked_at).desc())
        ).all()
        out = []
        for tracked, bill in rows:
            item = tracked.model_dump()
            item["bill"] = {**bill.model_dump(), "bill_number": format_bill_number(bill.bill_number)} if bill else None
            out.append(item)
    return {"tracked_bills": out}


@router.post("/bills", status_code=status.HTTP_201_CREATED)
def track_bill(body: TrackBillIn, user_id: str = Depends(require_user)):
    with get_session() as s:
        if s.get(Bill, body.bill_id) is None:
            raise NotFoundError("Bill not found")
        if body.campaign_id:
            owned_campaign(s, body.campaign_id, user_id)
        row = insert_unique(
            s,
            TrackedBill(user_id=user_id, bill_id=body.bill_id, campaign_id=body.campaign_id, notes=body.notes),
            "Bill is already tracked",
        )
        logger.info(f"Bill tracked: bill={body.bill_id}")
        return row.model_dump()


@router.get("/bills/{bill_id}")
def is_tracking_bill(bill_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        row = s.exec(
            select(TrackedBill).where(TrackedBill.user_id == user_id, TrackedBill.bill_id == bill_id)
        ).first()
    return {"bill_id": bill_id, "tracked": row is not None}


@router.delete("/bills/{bill_id}")
def untrack_bill(bill_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        row = s.exec(
            select(TrackedBill).where(TrackedBill.user_id == user_id, TrackedBill.bill_id == bill_id)
        ).first()
        if row is None:
            raise NotFoundError("Bill is not tracked")
        s.delete(row)
        s.commit()
    return {"ok": True}


# ---- Legislators ----

@router.get("/legislators")
def list_tracked_legislators(user_id: str = Depends(require_user)):
    with get_session() as s:
        rows = s.exec(
            select(TrackedLegislator, Person)
            .join(Person, Person.people_id == TrackedLegislator.people_id, isouter=True)
            .where(TrackedLegislator.user_id == user_id)
            .order_by(col(TrackedLegislator.tracked_at).desc())
        ).all()
        out = [{**t.model_dump(), "person": p.model_dump() if p else None} for t, p in rows]
    return {"tracked_legislators": out}


@router.post("/legislators", status_code=status.HTTP_201_CREATED)
def track_legislator(body: TrackLegislatorIn, user_id: str = Depends(require_user)):
    with get_session() as s:
        if s.get(Person, body.people_id) is None:
            raise NotFoundError("Legislator not found")
        row = insert_unique(
            s,
            TrackedLegislator(
                user_id=user_id,
                people_id=body.people_id,
                notes=body.notes,
                notification_types=body.notification_types,
            ),
            "Legislator is already tracked",
        )
        return row.model_dump()


@router.get("/legislators/{people_id}")
def is_tracking_legislator(people_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        row = s.exec(
            select(TrackedLegislator).where(
                TrackedLegislator.user_id == user_id, TrackedLegislator.people_id == people_id
            )
        ).first()
    return {"people_id": people_id, "tracked": row is not None}


@router.delete("/legislators/{people_id}")
def untrack_legislator(people_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        row = s.exec(
            select(TrackedLegislator).where(
                TrackedLegislator.user_id == user_id, TrackedLegislator.people_id == people_id
            )
        ).first()
        if row is None:
            raise NotFoundError("Legislator is not tracked")
        s.delete(row)
        s.commit()
    return {"ok": True}
