# poliux/analysis.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

import httpx
from sqlmodel import Session, func, select

from .config import ANALYSIS_WEBHOOK_URL, WEBHOOK_TIMEOUT
from .errors import NotFoundError, ServiceUnavailableError, UpstreamError
from .logging_setup import get_logger
from .models import Bill, SimpleBillAnalysis

logger = get_logger("poliux.analysis")

STATUS_CURRENT = "current"
STATUS_QUEUED = "queued"


@dataclass
class AnalysisTrigger:
    status: str
    analysis_id: Optional[str] = None


def _utc_date(dt: datetime):
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc)
    return dt.date()


def is_stale(analysis: SimpleBillAnalysis, bill: Bill) -> bool:
    """
    An analysis is stale when the bill saw action on a later calendar day (UTC)
    than the analysis was written. Same-day action does not count.
    """
    if bill.last_action_date is None:
        return False
    return _utc_date(analysis.created_at) < _utc_date(bill.last_action_date)


def latest_analysis(session: Session, bill_id: str) -> Optional[SimpleBillAnalysis]:
    return session.exec(
        select(SimpleBillAnalysis)
        .where(SimpleBillAnalysis.bill_id == bill_id)
        .order_by(SimpleBillAnalysis.created_at.desc())
    ).first()


def webhook_client() -> httpx.Client:
    return httpx.Client(timeout=WEBHOOK_TIMEOUT)


def _enqueue(bill: Bill, webhook_url: str, client: Optional[httpx.Client]) -> None:
    payload = {
        "bill_id": bill.bill_id,
        "bill_number": bill.bill_number,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    owns_client = client is None
    client = client or webhook_client()
    try:
        r = client.post(webhook_url, json=payload)
    except httpx.HTTPError as e:
        logger.exception("ANALYSIS_WEBHOOK_UNREACHABLE", extra={"bill_id": bill.bill_id, "error": type(e).__name__})
        raise UpstreamError("Failed to start analysis") from e
    finally:
        if owns_client:
            client.close()

    if r.status_code >= 300:
        logger.error(
            "ANALYSIS_WEBHOOK_FAILED",
            extra={"bill_id": bill.bill_id, "status_code": r.status_code, "body": r.text[:500]},
        )
        raise UpstreamError("Failed to start analysis")


def start_bill_analysis(
    session: Session,
    bill_id: str,
    force: bool = False,
    *,
    webhook_url: Optional[str] = None,
    client: Optional[httpx.Client] = None,
) -> AnalysisTrigger:
    """
    Return the current analysis for a bill, or hand the bill to the analysis
    workflow when there is none (or it is stale, or `force` is set).
    """
    bill = session.get(Bill, bill_id)
    if bill is None:
        raise NotFoundError("Bill not found")

    if not force:
        latest = latest_analysis(session, bill_id)
        if latest is not None and not is_stale(latest, bill):
            logger.info("ANALYSIS_CURRENT", extra={"bill_id": bill_id, "analysis_id": latest.id})
            return AnalysisTrigger(status=STATUS_CURRENT, analysis_id=latest.id)

    url = webhook_url if webhook_url is not None else ANALYSIS_WEBHOOK_URL
    if not url:
        logger.error("ANALYSIS_WEBHOOK_NOT_CONFIGURED", extra={"bill_id": bill_id})
        raise ServiceUnavailableError("Analysis service not available")

    _enqueue(bill, url, client)
    logger.info("ANALYSIS_QUEUED", extra={"bill_id": bill_id, "force": force})
    return AnalysisTrigger(status=STATUS_QUEUED)


def list_analyses(session: Session, page: int = 1, per_page: int = 20) -> tuple[List[SimpleBillAnalysis], int]:
    stmt = select(SimpleBillAnalysis).order_by(SimpleBillAnalysis.created_at.desc())
    total = session.exec(select(func.count()).select_from(SimpleBillAnalysis)).one()
    rows = session.exec(stmt.offset((page - 1) * per_page).limit(per_page)).all()
    return list(rows), total


def delete_analysis(session: Session, analysis_id: str) -> None:
    row = session.get(SimpleBillAnalysis, analysis_id)
    if row is None:
        raise NotFoundError("Analysis not found")
    session.delete(row)
    session.commit()
