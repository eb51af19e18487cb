# poliux/middleware.py
import logging
import time
import uuid
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .logging_setup import request_id_var, get_logger

logger = get_logger("poliux.http")

# Polled by the load balancer; logged at DEBUG so they don't bury real traffic
QUIET_PATHS = frozenset({"/health", "/"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an id (reusing X-Request-ID from the edge when sent),
    echoes it back, and logs one START/END pair with timing. Requests carrying
    a bearer token are marked so anonymous and signed-in feed traffic can be
    told apart without logging the token.
    """

    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        token = request_id_var.set(req_id)
        level = logging.DEBUG if request.url.path in QUIET_PATHS else logging.INFO
        authed = request.headers.get("Authorization", "").lower().startswith("bearer ")

        start = time.perf_counter()
        response: Optional[Response] = None

        try:
            logger.log(level, f"REQUEST START: {request.method} {request.url.path} auth={'bearer' if authed else 'anon'}")
            response = await call_next(request)
            elapsed_ms = (time.perf_counter() - start) * 1000
            response.headers["X-Request-ID"] = req_id
            response.headers["Server-Timing"] = f"app;dur={elapsed_ms:.1f}"
            return response
        except Exception:
            logger.exception(f"REQUEST EXCEPTION: {request.method} {request.url.path}")
            raise
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            status = getattr(response, "status_code", 500)
            if status >= 500:
                level = logging.ERROR
            logger.log(level, f"REQUEST END: {request.method} {request.url.path} -> {status} ({elapsed_ms:.1f} ms)")
            request_id_var.reset(token)
