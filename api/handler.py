"""JSON error envelope for the gatekeeper API."""
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.responses import JSONResponse

from verification.exceptions import VerificationException

logger = logging.getLogger(__name__)


def error_envelope(status_code: int, message: str, data: dict[str, Any] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "data": data},
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return error_envelope(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report each invalid field of a malformed request, e.g. a quiz submission without a score."""
    problems = []
    for error in exc.errors():
        # Request-body errors are reported by field name alone
        location = [str(part) for part in error.get("loc", ()) if part != "body"]
        problems.append({
            "field": ".".join(location) or "body",
            "message": error.get("msg", "").removeprefix("Value error, "),
        })

    return error_envelope(
        422,
        "Validation error",
        {"validation_errors": problems},
    )


async def verification_exception_handler(request: Request, exc: VerificationException) -> JSONResponse:
    return error_envelope(exc.status_code, exc.message, exc.data or None)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception during verification request",
        extra={"path": request.url.path, "method": request.method},
    )
    return error_envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(VerificationException, verification_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
