# backend/marketplace/errors.py
"""
Problem-details rendering for every error response.

Bodies follow RFC 7807 (``type``, ``title``, ``status``, ``detail``,
``instance``) plus an optional machine-readable ``code`` and ``errors`` list.
"""

from http import HTTPStatus
import logging
from typing import Any, Dict, Mapping, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.exceptions import DomainException

logger = logging.getLogger(__name__)

PROBLEM_MEDIA_TYPE = "application/problem+json"


def problem_response(
    request: Request,
    status_code: int,
    detail: Optional[str] = None,
    *,
    code: Optional[str] = None,
    errors: Any = None,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    """Build a problem+json response for ``request``."""
    try:
        title = HTTPStatus(status_code).phrase
    except ValueError:
        title = "Error"

    body: Dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "status": status_code,
        "detail": detail or "",
        "instance": request.url.path,
    }
    if code:
        body["code"] = code
    if errors:
        body["errors"] = jsonable_encoder(errors)

    return JSONResponse(
        body,
        status_code=status_code,
        media_type=PROBLEM_MEDIA_TYPE,
        headers=dict(headers) if headers else None,
    )


def _unpack_http_detail(detail: Any) -> Dict[str, Any]:
    # DomainException.to_http_exception() puts message/code/details in a dict
    if isinstance(detail, dict):
        message = detail.get("message") or detail.get("detail")
        code = detail.get("code")
        return {
            "detail": message if isinstance(message, str) else None,
            "code": code if isinstance(code, str) else None,
            "errors": detail.get("details") or detail.get("errors"),
        }
    return {"detail": None if detail is None else str(detail), "code": None, "errors": None}


def register_error_handlers(app: FastAPI) -> None:
    """Install the problem-details handlers on ``app``."""

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return problem_response(
            request,
            exc.status_code,
            headers=getattr(exc, "headers", None),
            **_unpack_http_detail(exc.detail),
        )

    @app.exception_handler(DomainException)
    async def handle_domain_error(request: Request, exc: DomainException) -> JSONResponse:
        return problem_response(
            request, exc.status_code, exc.message, code=exc.code, errors=exc.details
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return problem_response(
            request,
            422,
            "Request validation failed",
            code="validation_error",
            errors=exc.errors(),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=exc)
        return problem_response(
            request, 500, "Internal Server Error", code="internal_server_error"
        )
