"""
Exception handlers

Translate domain exceptions and request-shape errors into structured JSON
at the request boundary.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.core.exceptions import AuthenticationError, TripRequestManagerError, ValidationError, Violation

logger = logging.getLogger(__name__)


def _field_name(loc) -> str:
    # Drop the "body"/"query"/"path" prefix FastAPI puts in front
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts) or "__root__"


def violations_from_request_error(exc: RequestValidationError):
    return [
        Violation(_field_name(err.get("loc", ())), err.get("type", "invalid"), err.get("msg", "Invalid value."))
        for err in exc.errors()
    ]


async def domain_error_handler(request: Request, exc: TripRequestManagerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Unhandled domain error on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.info("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(violations_from_request_error(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TripRequestManagerError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
