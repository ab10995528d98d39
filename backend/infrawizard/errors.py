import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from infrawizard.config import settings

logger = logging.getLogger(__name__)

__all__ = ["register_exception_handlers"]


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Collapse pydantic's error list into a single line."""
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    summary = f"{loc}: {message}" if loc else message
    if len(errors) > 1:
        summary += f" (and {len(errors) - 1} more)"
    return f"Invalid request: {summary}"


def register_exception_handlers(app: FastAPI) -> None:
    """Map malformed input to 400 and unexpected failures to 500."""

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        detail = _describe_validation_error(exc)
        logger.info(f"Rejected {request.method} {request.url.path}: {detail}")
        return JSONResponse(status_code=400, content={"detail": detail})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        detail = str(exc) if settings.debug else "Internal server error"
        return JSONResponse(status_code=500, content={"detail": detail})
