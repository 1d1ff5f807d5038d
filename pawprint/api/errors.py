"""
pawprint.api.errors — Failure → HTTP response mapping
======================================================

Expected failures carry their own taxonomy (see
:mod:`pawprint.engine.errors`); this module turns them into JSON bodies of
the form ``{"error": <code>, "detail": <message>}``.

Store outages and lock timeouts are transient and answered with 503 so
clients retry; a retried claim or vote is safe.  Anything else is logged
with its traceback and reported as an opaque 500.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from pawprint.engine.errors import EngagementError

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "validation": status.HTTP_400_BAD_REQUEST,
}

RETRY_AFTER_SECONDS = 1


async def _engagement_error(request: Request, exc: EngagementError) -> JSONResponse:
    return JSONResponse(
        status_code=_STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content={"error": exc.code, "detail": exc.message},
    )


async def _transient_error(request: Request, exc: Exception) -> JSONResponse:
    logger.warning("Transient store failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": "transient", "detail": "Temporarily unavailable, please retry"},
        headers={"Retry-After": str(RETRY_AFTER_SECONDS)},
    )


async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "internal_error"},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EngagementError, _engagement_error)
    app.add_exception_handler(OperationalError, _transient_error)
    app.add_exception_handler(PoolTimeoutError, _transient_error)
    app.add_exception_handler(Exception, _internal_error)
