"""Exception handlers shared by the API apps.

Every error body carries both ``detail`` (FastAPI convention) and ``message``
(what the SPA clients display).
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from libs.common.logging import get_logger, get_request_id
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = get_logger(__name__)

VALIDATION_MESSAGE = "Некорректные данные"
INTERNAL_MESSAGE = "Внутренняя ошибка сервера"


def _error_body(message, **extra) -> dict:
    body = {"detail": message, "message": message}
    body.update(extra)
    return body


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg"),
        }
        for err in exc.errors()
    ]
    logger.info("Validation failed on %s: %s", request.url.path, errors)
    return JSONResponse(
        status_code=400,
        content=_error_body(VALIDATION_MESSAGE, errors=errors),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body(INTERNAL_MESSAGE, request_id=get_request_id()),
    )


def add_exception_handlers(app: FastAPI) -> None:
    """Register the shared exception handlers on an app."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
