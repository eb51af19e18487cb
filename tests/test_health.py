# tests/test_health.py
def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}

def test_request_id_echoed(client):
    r = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert r.headers["X-Request-ID"] == "abc123"
    assert client.get("/health").headers["X-Request-ID"]

def test_unknown_route_uses_error_body(client):
    r = client.get("/nope")
    assert r.status_code == 404
    assert set(r.json()) == {"error", "message"}

def test_server_timing_header(client):
    assert client.get("/health").headers["Server-Timing"].startswith("app;dur=")

def test_event_formatter_appends_extra_fields():
    import logging
    from poliux.logging_setup import EventFormatter
    record = logging.LogRecord("poliux.votes", logging.INFO, __file__, 1, "VOTE_CAST", (), None)
    record.request_id = "r1"
    record.article_id, record.up = "a1", 2
    line = EventFormatter("%(name)s | %(message)s").format(record)
    assert line == "poliux.votes | VOTE_CAST | article_id=a1 up=2"
