"""
Exception handlers producing the API's error envelope.

Every failed request answers with::

    {"success": false, "error": "<message>", "code": "<KIND>", "details": {...}}

``BookingError`` subclasses carry their own kind and status.  Request
body validation failures become ``VALIDATION_ERROR``; HTTP errors
raised by the auth dependencies keep their status.  Anything else is
an infrastructure failure: it is logged with its traceback and the
caller receives a generic 500.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .errors import BookingError, ViolationKind

logger = logging.getLogger(__name__)


def error_body(message: str, code: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"success": False, "error": message, "code": code, "details": details or {}}


def setup_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.kind.value, exc.details),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        first = errors[0]["msg"] if errors else "Invalid request"
        return JSONResponse(
            status_code=422,
            content=error_body(first, ViolationKind.VALIDATION_ERROR.value, {"errors": errors}),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail), f"HTTP_{exc.status_code}"),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", "INTERNAL_ERROR"),
        )
