"""
Exception handlers that render every failure in one JSON envelope:

    {"error": {"status_code": 404,
               "error_code": "RESOURCE_REVISION_NOT_FOUND",
               "message": "Revision with id '123' not found",
               "type": "Not Found",
               "details": {"resource_type": "Revision", "resource_id": 123},
               "path": "/api/admin/revisions/123"}}

`details` and `path` are omitted when empty. Tenant mismatches arrive here as
ordinary not-found errors, so the envelope never reveals that a foreign row
exists.
"""

import logging
from typing import Any, Optional, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from orgcms.exceptions import CMSError, ErrorCode

logger = logging.getLogger(__name__)

# status -> (type label, error code used when the raiser did not pick one)
_STATUS_TABLE: dict[int, tuple[str, ErrorCode]] = {
    400: ("Bad Request", ErrorCode.VALIDATION_FAILED),
    401: ("Unauthorized", ErrorCode.AUTH_FAILED),
    403: ("Forbidden", ErrorCode.AUTH_PERMISSION_DENIED),
    404: ("Not Found", ErrorCode.RESOURCE_NOT_FOUND),
    405: ("Method Not Allowed", ErrorCode.VALIDATION_FAILED),
    409: ("Conflict", ErrorCode.VALIDATION_DUPLICATE_RESOURCE),
    422: ("Validation Error", ErrorCode.VALIDATION_FAILED),
    429: ("Too Many Requests", ErrorCode.RATE_LIMIT_EXCEEDED),
    500: ("Internal Server Error", ErrorCode.INTERNAL_ERROR),
    501: ("Not Implemented", ErrorCode.NOT_IMPLEMENTED),
    503: ("Service Unavailable", ErrorCode.SERVICE_UNAVAILABLE),
}


def get_error_type(status_code: int) -> str:
    return _STATUS_TABLE.get(status_code, ("Error", ErrorCode.UNKNOWN_ERROR))[0]


def get_http_error_code(status_code: int) -> str:
    return _STATUS_TABLE.get(status_code, ("Error", ErrorCode.UNKNOWN_ERROR))[1].value


def create_error_response(
    status_code: int,
    message: str,
    error_code: Union[str, ErrorCode, None] = None,
    details: Optional[dict[str, Any]] = None,
    path: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    """
    Build the error envelope.

    Args:
        status_code: HTTP status code
        message: Human-readable error message
        error_code: Machine-readable code; derived from the status when omitted
        details: Extra structured context
        path: Request path that failed
        headers: Response headers to keep (e.g. WWW-Authenticate)
    """
    if error_code is None:
        error_code = get_http_error_code(status_code)
    body: dict[str, Any] = {
        "status_code": status_code,
        "message": message,
        "type": get_error_type(status_code),
        "error_code": error_code.value if isinstance(error_code, ErrorCode) else error_code,
    }
    if details:
        body["details"] = details
    if path:
        body["path"] = path

    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


async def cms_exception_handler(request: Request, exc: CMSError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s %s -> %s: %s",
        request.method,
        request.url.path,
        exc.error_code.value,
        exc.message,
        extra={"status_code": exc.status_code, "error_code": exc.error_code.value, "path": request.url.path},
    )

    return create_error_response(
        status_code=exc.status_code,
        message=exc.message,
        error_code=exc.error_code,
        details=exc.details or None,
        path=request.url.path,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Framework errors (unknown route, wrong method, OAuth2 bearer challenge)."""
    logger.warning(
        "HTTPException %s on %s: %s",
        exc.status_code,
        request.url.path,
        exc.detail,
        extra={"status_code": exc.status_code, "path": request.url.path},
    )

    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        path=request.url.path,
        headers=getattr(exc, "headers", None),
    )


def _format_validation_errors(exc: Union[RequestValidationError, PydanticValidationError]) -> list[dict[str, str]]:
    # Request bodies are prefixed with "body" in loc; that prefix means nothing to clients
    skip = "body" if isinstance(exc, RequestValidationError) else None
    return [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != skip),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


async def validation_exception_handler(
    request: Request, exc: Union[RequestValidationError, PydanticValidationError]
) -> JSONResponse:
    errors = _format_validation_errors(exc)
    logger.warning("Validation error on %s", request.url.path, extra={"errors": errors})

    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation error",
        error_code=ErrorCode.VALIDATION_FAILED,
        details={"validation_errors": errors},
        path=request.url.path,
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    A unique constraint tripped after the service-level checks passed, e.g. two
    requests creating the same slug at once. Reported as a conflict without the
    driver's message.
    """
    logger.warning("Integrity error on %s: %s", request.url.path, exc.orig)

    return create_error_response(
        status_code=status.HTTP_409_CONFLICT,
        message="Resource conflicts with an existing record",
        error_code=ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
        path=request.url.path,
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Database error",
        error_code=ErrorCode.DATABASE_ERROR,
        path=request.url.path,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback, return a generic 500."""
    logger.error(
        "Unhandled exception on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
        extra={"path": request.url.path, "method": request.method},
    )

    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="Internal server error",
        error_code=ErrorCode.INTERNAL_ERROR,
        path=request.url.path,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CMSError, cms_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(PydanticValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
