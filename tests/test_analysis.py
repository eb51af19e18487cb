# tests/test_analysis.py
from datetime import datetime, timezone

import httpx
import pytest

from poliux.analysis import (
    STATUS_CURRENT, STATUS_QUEUED, is_stale, list_analyses, start_bill_analysis,
)
from poliux.errors import NotFoundError, ServiceUnavailableError, UpstreamError
from poliux.models import Bill, SimpleBillAnalysis
from poliux.store import get_session

URL = "http://analysis.test/hook"

def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)

def _add_analysis(bill_id, created_at, id="an-1"):
    with get_session() as s:
        s.add(SimpleBillAnalysis(id=id, bill_id=bill_id, summary="s", created_at=created_at)); s.commit()

@pytest.fixture()
def webhook(mocker):
    client = mocker.Mock()
    client.post.return_value = httpx.Response(202, json={"ok": True})
    return client

def test_is_stale_compares_calendar_days():
    bill = Bill(bill_id="b", last_action_date=utc(2025, 1, 2, 0, 30))
    assert is_stale(SimpleBillAnalysis(bill_id="b", created_at=utc(2025, 1, 1, 23, 59)), bill)
    assert not is_stale(SimpleBillAnalysis(bill_id="b", created_at=utc(2025, 1, 2, 0, 1)), bill)
    # Later the same day is still current
    same_day = Bill(bill_id="b", last_action_date=utc(2025, 1, 2, 18, 0))
    assert not is_stale(SimpleBillAnalysis(bill_id="b", created_at=utc(2025, 1, 2, 9, 0)), same_day)
    assert not is_stale(SimpleBillAnalysis(bill_id="b", created_at=utc(2025, 1, 1)), Bill(bill_id="b"))

def test_current_analysis_is_reused(add_bill, webhook):
    add_bill("b1", last_action_date=utc(2025, 1, 1))
    _add_analysis("b1", utc(2025, 1, 3))
    with get_session() as s:
        result = start_bill_analysis(s, "b1", webhook_url=URL, client=webhook)
    assert result.status == STATUS_CURRENT and result.analysis_id == "an-1"
    webhook.post.assert_not_called()

def test_stale_analysis_is_requeued(add_bill, webhook):
    add_bill("b1", bill_number="SB9", last_action_date=utc(2025, 1, 5))
    _add_analysis("b1", utc(2025, 1, 3))
    with get_session() as s:
        result = start_bill_analysis(s, "b1", webhook_url=URL, client=webhook)
    assert result.status == STATUS_QUEUED
    url = webhook.post.call_args.args[0]
    payload = webhook.post.call_args.kwargs["json"]
    assert url == URL
    assert payload["bill_id"] == "b1" and payload["bill_number"] == "SB9"
    assert "timestamp" in payload

def test_force_skips_current_check(add_bill, webhook):
    add_bill("b1")
    _add_analysis("b1", utc(2030, 1, 1))
    with get_session() as s:
        assert start_bill_analysis(s, "b1", True, webhook_url=URL, client=webhook).status == STATUS_QUEUED

def test_failures(add_bill, webhook):
    add_bill("b1")
    with get_session() as s:
        with pytest.raises(NotFoundError):
            start_bill_analysis(s, "nope", webhook_url=URL, client=webhook)
        with pytest.raises(ServiceUnavailableError):
            start_bill_analysis(s, "b1", webhook_url="", client=webhook)

        webhook.post.return_value = httpx.Response(500, text="boom")
        with pytest.raises(UpstreamError):
            start_bill_analysis(s, "b1", webhook_url=URL, client=webhook)

        webhook.post.side_effect = httpx.ConnectError("refused")
        with pytest.raises(UpstreamError):
            start_bill_analysis(s, "b1", webhook_url=URL, client=webhook)

def test_analysis_endpoint(client, add_bill, mocker):
    add_bill("b1")
    http = mocker.patch("poliux.analysis.webhook_client")
    http.return_value.post.return_value = httpx.Response(200)

    r = client.post("/analysis", json={"bill_id": "b1"})
    assert r.status_code == 202
    assert r.json() == {"status": "queued"}
    http.return_value.close.assert_called_once()

    _add_analysis("b1", utc(2030, 1, 1), id="an-9")
    r = client.post("/analysis", json={"bill_id": "b1"})
    assert r.status_code == 200
    assert r.json() == {"status": "current", "analysis_id": "an-9"}

def test_analysis_endpoint_errors(client, add_bill, mocker):
    r = client.post("/analysis", json={})
    assert r.status_code == 400
    assert r.json() == {"status": "error", "message": "Valid bill_id is required"}

    assert client.post("/analysis", json={"bill_id": "missing"}).status_code == 404

    add_bill("b1")
    mocker.patch("poliux.analysis.webhook_client").return_value.post.side_effect = httpx.ConnectError("x")
    r = client.post("/analysis", json={"bill_id": "b1"})
    assert r.status_code == 500
    assert r.json() == {"status": "error", "message": "Failed to start analysis"}

def test_list_and_delete_analyses(client, add_bill, auth_headers):
    add_bill("b1")
    _add_analysis("b1", utc(2025, 1, 1), id="an-1")
    _add_analysis("b1", utc(2025, 2, 1), id="an-2")
    with get_session() as s:
        rows, total = list_analyses(s, 1, 1)
    assert total == 2 and [r.id for r in rows] == ["an-2"]

    assert client.get("/analysis").status_code == 401
    body = client.get("/analysis", headers=auth_headers).json()
    assert body["total_count"] == 2

    assert client.delete("/analysis/an-1", headers=auth_headers).json() == {"ok": True}
    assert client.delete("/analysis/an-1", headers=auth_headers).status_code == 404
