"""Exception handlers for FastAPI application."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from outpost_service.core.exceptions import AppException, PaginationFailedError
from outpost_service.core.schemas.problem_details import PROBLEM_JSON, ProblemDetails

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str | None:
    """Extract request ID from request state, if a middleware set one."""
    return getattr(request.state, "request_id", None)


def _problem_body(request: Request, exc: AppException, request_id: str | None) -> dict[str, Any]:
    """RFC 7807 body for ``exc``; ``extra`` members sit beside the standard ones."""
    problem = ProblemDetails(
        type=exc.type,
        title=exc.title,
        status=exc.status_code,
        detail=exc.detail,
        instance=exc.instance or str(request.url),
        **exc.extra,
    )
    body = problem.model_dump(exclude_none=True)
    if request_id:
        body["request_id"] = request_id
    return body


def _log_failure(request: Request, exc: AppException, request_id: str | None) -> None:
    context = {
        "request_id": request_id,
        "path": request.url.path,
        "method": request.method,
        "exception_type": exc.type,
        "status_code": exc.status_code,
        "detail": exc.detail,
        **{f"problem_{key}": value for key, value in exc.extra.items()},
    }

    if exc.status_code < 500:
        logger.warning("Application exception occurred", extra=context)
        return

    # Point the traceback at the store's exception, not at the wrapper
    if isinstance(exc, PaginationFailedError):
        cause = exc.cause
        exc_info: Any = (type(cause), cause, cause.__traceback__)
    else:
        exc_info = True
    logger.error("Application error occurred", extra=context, exc_info=exc_info)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Convert AppException instances into ``application/problem+json`` responses.

    Client errors (an undecodable cursor) are logged at WARNING. Server errors
    (a failing store) are logged at ERROR together with the original
    exception's traceback.
    """
    request_id = _get_request_id(request)
    _log_failure(request, exc, request_id)
    return JSONResponse(
        status_code=exc.status_code,
        content=_problem_body(request, exc, request_id),
        media_type=PROBLEM_JSON,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register the RFC 7807 handlers on ``app``.

    Example:
        app = FastAPI()
        register_exception_handlers(app)
    """
    app.add_exception_handler(AppException, app_exception_handler)
    logger.info("Exception handlers configured")
