# poliux/exception_handling.py
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException

from .errors import PoliuxError
from .logging_setup import get_logger

# Keep a separate logger namespace for exceptions
logger = get_logger("poliux.exceptions")


def _body(error: str, message: str) -> dict:
    return {"error": error, "message": message}


async def poliux_error_handler(request: Request, exc: PoliuxError):
    if exc.status_code >= 500:
        logger.exception(
            "DOMAIN_ERROR",
            extra={"handled": True, "path": str(request.url.path), "status_code": exc.status_code},
        )
    else:
        logger.info(
            f"DOMAIN_ERROR {exc.status_code}: {exc.message}",
            extra={"handled": True, "path": str(request.url.path), "status_code": exc.status_code},
        )
    return JSONResponse(_body(exc.error, exc.message), status_code=exc.status_code)


async def http_exception_handler(request: Request, exc: HTTPException):
    logger.info(
        f"HTTP_EXCEPTION {exc.status_code}: {exc.detail}",
        extra={"handled": True, "path": str(request.url.path), "status_code": exc.status_code},
    )
    return JSONResponse(_body("HTTP error", str(exc.detail)), status_code=exc.status_code, headers=exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Missing or malformed body fields are a 400, same as the handlers' own checks
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
    message = "Invalid or missing fields: " + ", ".join(f for f in fields if f)
    logger.info(
        "REQUEST_VALIDATION_FAILED",
        extra={"handled": True, "path": str(request.url.path), "fields": fields},
    )
    return JSONResponse(_body("Invalid request", message), status_code=400)


async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(
        "STORE_EXCEPTION",
        extra={"handled": False, "path": str(request.url.path)},
    )
    return JSONResponse(_body("Database error", str(exc.__cause__ or exc)), status_code=500)


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(
        "UNHANDLED_EXCEPTION",
        extra={"handled": False, "path": str(request.url.path)},
    )
    return JSONResponse(_body("Internal server error", str(exc) or type(exc).__name__), status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers in one place.
    Call from poliux/main.py after creating the FastAPI app.
    """
    app.add_exception_handler(PoliuxError, poliux_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, store_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
