# tests/conftest.py
import os, pathlib, tempfile
from datetime import timedelta

import pytest
from dotenv import load_dotenv

# poliux reads its settings at import time, so the test env goes in first
_TMP = pathlib.Path(tempfile.mkdtemp(prefix="poliux-tests-"))
os.environ["DB_URL"] = f"sqlite:///{_TMP / 'test.db'}"
os.environ["LOG_DIR"] = str(_TMP / "logs")
load_dotenv(pathlib.Path(__file__).parent / ".env.test", override=True)


@pytest.fixture(autouse=True)
def _fresh_db():
    from sqlmodel import SQLModel
    from poliux.store import engine, init_db
    SQLModel.metadata.drop_all(engine)
    init_db()
    yield


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient
    from poliux.main import app
    return TestClient(app)


@pytest.fixture()
def token_for():
    """Factory: register a bearer token for a user and return auth headers."""
    from poliux.models import AuthToken, utc_now
    from poliux.store import get_session

    def _make(user_id="user-1", expires_in=timedelta(hours=1)):
        token = f"tok-{user_id}"
        expires_at = utc_now() + expires_in if expires_in is not None else None
        with get_session() as s:
            s.merge(AuthToken(token=token, user_id=user_id, expires_at=expires_at))
            s.commit()
        return {"Authorization": f"Bearer {token}"}
    return _make


@pytest.fixture()
def auth_headers(token_for):
    return token_for("user-1")


@pytest.fixture()
def add_article():
    from poliux.models import Article, utc_now
    from poliux.store import get_session

    def _add(id, domain="a.example", hours_ago=1.0, now=None, **kw):
        now = now or utc_now()
        a = Article(id=id, title=f"Article {id}", link=f"https://{domain}/{id}", domain=domain,
                    pub_date=now - timedelta(hours=hours_ago), **kw)
        with get_session() as s:
            s.add(a); s.commit(); s.refresh(a)
        return a
    return _add


@pytest.fixture()
def add_bill():
    from poliux.models import Bill
    from poliux.store import get_session

    def _add(bill_id, bill_number="HB123", **kw):
        b = Bill(bill_id=bill_id, bill_number=bill_number, **kw)
        with get_session() as s:
            s.add(b); s.commit(); s.refresh(b)
        return b
    return _add
