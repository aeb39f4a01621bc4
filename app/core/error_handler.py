"""
Error handling for the application.

Every failure leaves the API as the standard envelope:
``{"success": false, "message": ..., "error": ...}``.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import config
from app.core.exceptions import AppError
from app.core.responses import error_content

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Something went wrong"


def _internal_detail(exc: Exception) -> str:
    # Raw detail only outside production
    return GENERIC_ERROR if config.is_production else str(exc) or exc.__class__.__name__


def _format_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query"))
        message = err.get("msg", "Invalid value")
        # pydantic prefixes custom ValueError messages
        message = message.removeprefix("Value error, ")
        messages.append(f"{location}: {message}" if location else message)
    return ", ".join(messages)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(f"Application error: {exc.message}: {exc.error}")
        error = exc.error if not config.is_production else GENERIC_ERROR
    else:
        logger.warning(f"Application error ({exc.status_code}): {exc.error}")
        error = exc.error
    return JSONResponse(
        status_code=exc.status_code, content=error_content(exc.message, error)
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
        logger.warning(f"Unknown endpoint: {request.method} {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_content(
                "API endpoint not found",
                f"The requested endpoint {request.method} {request.url.path} does not exist",
            ),
        )

    logger.warning(f"HTTP exception: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_content(str(exc.detail), str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning(f"Validation error: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_content("Validation error", _format_validation_errors(exc)),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_content("Database operation failed", _internal_detail(exc)),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort for anything not handled above."""
    logger.error(f"Unexpected error: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_content("Internal server error", _internal_detail(exc)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
