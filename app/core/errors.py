from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import SleepHavenError, ExternalServiceError
from app.core.logging import get_logger
from app.schemas.response import ErrorResponse
from utils.constants import INTERNAL_ERROR_MESSAGE

logger = get_logger(__name__)


def _request_context(request: Request) -> dict:
    return {
        "method": request.method,
        "url": str(request.url),
        "client": request.client.host if request.client else "unknown"
    }


def add_exception_handlers(app: FastAPI):
    """
    Registers exception handlers with the FastAPI app.
    """
    @app.exception_handler(SleepHavenError)
    async def sleephaven_exception_handler(request: Request, exc: SleepHavenError):
        message = exc.message
        if isinstance(exc, ExternalServiceError):
            logger.error(
                f"External service failure: {exc.message}",
                extra=_request_context(request)
            )
            message = INTERNAL_ERROR_MESSAGE

        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=message).model_dump()
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """
        Handles standard HTTP exceptions (404, 405, etc.)
        """
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(message=str(exc.detail)).model_dump(),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """
        Handles Pydantic validation errors (malformed body, wrong types).
        """
        logger.info(
            "Request validation failed",
            extra={**_request_context(request), "errors": exc.errors()}
        )
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(message="Invalid request data").model_dump()
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """
        Catch-all for unhandled exceptions. Detail stays in the server log.
        """
        logger.error(
            f"Unhandled exception: {str(exc)}",
            extra=_request_context(request),
            exc_info=True
        )

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(message=INTERNAL_ERROR_MESSAGE).model_dump()
        )
