from collections import Counter
from datetime import timedelta

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import col, func, select

from ..auth import require_user
from ..bill_numbers import format_bill_number
from ..config import REPORT_TTL_DAYS
from ..errors import NotFoundError
from ..logging_setup import get_logger
from ..models import ReportInbox, as_utc, utc_now
from ..schema import ReportIn
from ..store import get_session

logger = get_logger("poliux.routes.reports")

router = APIRouter(prefix="/reports", tags=["Report inbox"])


def report_out(report: ReportInbox):
    data = report.model_dump()
    if report.bill_number:
        data["bill_number"] = format_bill_number(report.bill_number)
    return data


@router.get("")
def list_reports(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    user_id: str = Depends(require_user),
):
    mine = ReportInbox.user_id == user_id
    with get_session() as s:
        total = s.exec(select(func.count()).select_from(ReportInbox).where(mine)).one()
        rows = s.exec(
            select(ReportInbox)
            .where(mine)
            .order_by(col(ReportInbox.date_created).desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        ).all()
        reports = [report_out(r) for r in rows]
    return {"reports": reports, "total_count": total, "page": page, "per_page": per_page}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_report(body: ReportIn, user_id: str = Depends(require_user)):
    created = utc_now()
    report = ReportInbox(
        user_id=user_id,
        date_created=created,
        expiration_date=created + timedelta(days=REPORT_TTL_DAYS),
        **body.model_dump(),
    )
    with get_session() as s:
        s.add(report)
        s.commit()
        s.refresh(report)
        logger.info(f"Report saved: type={report.report_type} id={report.id}")
        return report_out(report)


# Declared before /{report_id} so "stats" is not read as an id
@router.get("/stats")
def report_stats(user_id: str = Depends(require_user)):
    with get_session() as s:
        rows = s.exec(select(ReportInbox).where(ReportInbox.user_id == user_id)).all()
    week_ago = utc_now() - timedelta(days=7)
    return {
        "total": len(rows),
        "by_type": dict(Counter(r.report_type for r in rows)),
        "last_7_days": sum(1 for r in rows if as_utc(r.date_created) >= week_ago),
    }


@router.get("/{report_id}")
def get_report(report_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        report = s.get(ReportInbox, report_id)
        if report is None or report.user_id != user_id:
            raise NotFoundError("Report not found")
        return report_out(report)


@router.delete("/{report_id}")
def delete_report(report_id: str, user_id: str = Depends(require_user)):
    with get_session() as s:
        report = s.get(ReportInbox, report_id)
        if report is None or report.user_id != user_id:
            raise NotFoundError("Report not found")
        s.delete(report)
        s.commit()
    return {"ok": True}
