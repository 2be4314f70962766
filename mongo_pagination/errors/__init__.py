"""Error handling module for Mongo Cursor Pagination."""

from .problem_details import (
    ProblemDetail,
    ProblemDetailException,
    CursorError,
    DecodeError,
    InvalidCursor,
    StoreError,
    SerializationError,
    create_problem_response
)
from .handlers import register_exception_handlers

__all__ = [
    "ProblemDetail",
    "ProblemDetailException",
    "CursorError",
    "DecodeError",
    "InvalidCursor",
    "StoreError",
    "SerializationError",
    "create_problem_response",
    "register_exception_handlers"
]
