from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse

from ..analysis import STATUS_CURRENT, delete_analysis, list_analyses, start_bill_analysis
from ..auth import require_user
from ..errors import PoliuxError
from ..logging_setup import get_logger
from ..schema import AnalysisIn
from ..store import get_session

logger = get_logger("poliux.routes.analysis")

router = APIRouter(prefix="/analysis", tags=["Bill analysis"])


@router.post("")
def post_analysis(body: AnalysisIn):
    """
    Start (or reuse) an AI analysis of a bill.
    200 {status: current, analysis_id} when a fresh one exists, 202 {status: queued} otherwise.
    """
    if not body.bill_id or not body.bill_id.strip():
        return JSONResponse({"status": "error", "message": "Valid bill_id is required"}, status_code=400)

    logger.info(f"Analysis requested: bill={body.bill_id} force={body.force}")
    try:
        with get_session() as s:
            result = start_bill_analysis(s, body.bill_id, body.force)
    except PoliuxError as e:
        return JSONResponse({"status": "error", "message": e.message}, status_code=e.status_code)

    if result.status == STATUS_CURRENT:
        return {"status": result.status, "analysis_id": result.analysis_id}
    return JSONResponse({"status": result.status}, status_code=status.HTTP_202_ACCEPTED)


@router.get("")
def get_analyses(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    _: str = Depends(require_user),
):
    with get_session() as s:
        rows, total = list_analyses(s, page, per_page)
        items = [r.model_dump() for r in rows]
    return {"analyses": items, "total_count": total, "page": page, "per_page": per_page}


@router.delete("/{analysis_id}")
def remove_analysis(analysis_id: str, _: str = Depends(require_user)):
    with get_session() as s:
        delete_analysis(s, analysis_id)
    return {"ok": True}
