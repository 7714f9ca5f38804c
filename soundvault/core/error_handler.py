"""Exception handlers translating errors into the uniform JSON envelope."""
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import InternalError, SoundVaultError
from .logging import get_logger

logger = get_logger(__name__)


def error_response(
    status_code: int,
    message: str,
    extra: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Build ``{success: false, error: {message, statusCode}}``."""
    error: Dict[str, Any] = {"message": message, "statusCode": status_code}
    if extra:
        error.update(extra)
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def _describe_validation_error(err: Dict[str, Any]) -> str:
    location = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
    field = ".".join(location)
    msg = err.get("msg", "Invalid value")
    return f"{field}: {msg}" if field else msg


async def soundvault_error_handler(request: Request, exc: SoundVaultError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "request_failed",
            path=request.url.path,
            error=exc.message,
            details=exc.details,
        )
        return error_response(exc.status_code, "Internal server error")

    logger.info(
        "request_rejected",
        path=request.url.path,
        status=exc.status_code,
        error=exc.message,
    )
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in e.get("loc", ())), "message": e.get("msg")}
        for e in exc.errors()
    ]
    message = _describe_validation_error(exc.errors()[0]) if exc.errors() else "Invalid request"
    logger.info("request_validation_failed", path=request.url.path, errors=errors)
    return error_response(status.HTTP_400_BAD_REQUEST, message, {"errors": errors})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        message = f"Route {request.url.path} not found"
    else:
        message = str(exc.detail)
    return error_response(exc.status_code, message)


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("integrity_error", path=request.url.path, error=str(exc.orig))
    return error_response(status.HTTP_409_CONFLICT, "Resource already exists")


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Unrecognized errors are reported as :class:`InternalError`."""
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return await soundvault_error_handler(
        request,
        InternalError(details={"error_type": exc.__class__.__name__}),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the application."""
    app.add_exception_handler(SoundVaultError, soundvault_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
