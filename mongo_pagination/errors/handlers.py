"""FastAPI exception handlers for pagination errors."""

import logging
from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from .problem_details import (
    ProblemDetailException,
    CursorError,
    create_problem_response
)

logger = logging.getLogger(__name__)


async def problem_detail_exception_handler(
    request: Request,
    exc: ProblemDetailException
) -> JSONResponse:
    """Handle ProblemDetailException instances."""
    logger.info(
        f"Problem detail exception: {exc.status} - {exc.title}",
        extra={
            "status_code": exc.status,
            "path": str(request.url.path),
            "method": request.method,
            "detail": exc.detail
        }
    )
    return exc.to_response(request)


async def cursor_error_handler(
    request: Request,
    exc: CursorError
) -> JSONResponse:
    """Handle pagination failures, logging server-side stages as errors."""
    log = logger.error if exc.status >= 500 else logger.info
    log(
        f"Pagination failed at stage '{exc.stage}': {exc.detail}",
        extra={
            "status_code": exc.status,
            "path": str(request.url.path),
            "method": request.method,
            "stage": exc.stage
        }
    )
    return exc.to_response(request)


def _format_errors(errors) -> str:
    messages = []
    for error in errors:
        loc = " -> ".join(str(x) for x in error["loc"])
        messages.append(f"{loc}: {error['msg']}")
    return "; ".join(messages)


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Handle invalid pagination query parameters."""
    logger.info(
        f"Validation error: {len(exc.errors())} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "errors": exc.errors()
        }
    )

    return create_problem_response(
        status=422,
        title="Validation Error",
        detail="Validation failed: " + _format_errors(exc.errors()),
        request=request
    )


async def pydantic_validation_exception_handler(
    request: Request,
    exc: ValidationError
) -> JSONResponse:
    """Handle direct Pydantic validation errors."""
    logger.info(
        f"Pydantic validation error: {len(exc.errors())} errors",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "errors": exc.errors()
        }
    )

    return create_problem_response(
        status=400,
        title="Validation Error",
        detail="Data validation failed: " + _format_errors(exc.errors()),
        request=request
    )


async def general_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.error(
        f"Unhandled exception: {type(exc).__name__} - {str(exc)}",
        extra={
            "path": str(request.url.path),
            "method": request.method,
            "exception_type": type(exc).__name__
        },
        exc_info=True
    )

    # Don't expose internal error details
    return create_problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred",
        request=request
    )


def register_exception_handlers(app):
    """Register pagination exception handlers with a FastAPI app."""

    # Most specific first; Starlette resolves handlers along the MRO
    app.add_exception_handler(CursorError, cursor_error_handler)
    app.add_exception_handler(ProblemDetailException, problem_detail_exception_handler)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)

    # Catch-all for unexpected exceptions
    app.add_exception_handler(Exception, general_exception_handler)
