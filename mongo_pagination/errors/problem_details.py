"""Problem Details (RFC 9457) errors raised by the pagination engine."""

from typing import Optional, Any
from pydantic import BaseModel, Field
from fastapi import Request
from fastapi.responses import JSONResponse


PROBLEM_JSON = "application/problem+json"


class ProblemDetail(BaseModel):
    """Problem Details as defined in RFC 9457."""

    type: str = Field(default="about:blank", description="A URI reference that identifies the problem type")
    title: str = Field(description="A short, human-readable summary of the problem type")
    status: int = Field(description="The HTTP status code")
    detail: Optional[str] = Field(default=None, description="A human-readable explanation specific to this occurrence")
    instance: Optional[str] = Field(default=None, description="A URI reference that identifies the specific occurrence")

    # Extension members such as ``stage`` are kept as extra fields
    model_config = {"extra": "allow"}

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status,
            content=self.model_dump(exclude_none=True),
            headers={"Content-Type": PROBLEM_JSON}
        )


def _instance_of(instance: Optional[str], request: Optional[Request]) -> Optional[str]:
    if instance is None and request:
        return str(request.url.path)
    return instance


class ProblemDetailException(Exception):
    """Exception rendered as a Problem Details response."""

    def __init__(
        self,
        status: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: str = "about:blank",
        instance: Optional[str] = None,
        **extensions: Any
    ):
        self.status = status
        self.title = title
        self.detail = detail
        self.type_uri = type_uri
        self.instance = instance
        self.extensions = extensions
        super().__init__(detail or title)

    def to_problem_detail(self, request: Optional[Request] = None) -> ProblemDetail:
        """Convert to ProblemDetail model, taking ``instance`` from the request path if unset."""
        return ProblemDetail(
            type=self.type_uri,
            title=self.title,
            status=self.status,
            detail=self.detail,
            instance=_instance_of(self.instance, request),
            **self.extensions
        )

    def to_response(self, request: Optional[Request] = None) -> JSONResponse:
        return self.to_problem_detail(request).to_response()


class CursorError(ProblemDetailException):
    """Base class for every failure of a pagination call."""

    stage: str = "pagination"

    def __init__(self, status: int, title: str, detail: str, **extensions: Any):
        extensions.setdefault("stage", self.stage)
        super().__init__(
            status=status,
            title=title,
            detail=detail,
            **extensions
        )


class DecodeError(CursorError):
    """400 error for a cursor token that is not valid base64 or BSON."""

    stage = "decode"

    def __init__(self, detail: str = "Malformed cursor", **extensions: Any):
        super().__init__(
            status=400,
            title="Bad Request",
            detail=detail,
            **extensions
        )


class InvalidCursor(CursorError):
    """400 error for a well-formed cursor that cannot seek under the active sort."""

    stage = "query"

    def __init__(self, detail: str = "Invalid cursor", **extensions: Any):
        super().__init__(
            status=400,
            title="Bad Request",
            detail=detail,
            **extensions
        )


class StoreError(CursorError):
    """503 error wrapping a failure reported by the document store."""

    stage = "store"

    def __init__(self, detail: str = "Document store unavailable", **extensions: Any):
        super().__init__(
            status=503,
            title="Service Unavailable",
            detail=detail,
            **extensions
        )


class SerializationError(CursorError):
    """500 error for a document that cannot be converted to the item type."""

    stage = "deserialize"

    def __init__(self, detail: str = "Unable to deserialize document", **extensions: Any):
        super().__init__(
            status=500,
            title="Internal Server Error",
            detail=detail,
            **extensions
        )


def create_problem_response(
    status: int,
    title: str,
    detail: Optional[str] = None,
    type_uri: str = "about:blank",
    instance: Optional[str] = None,
    request: Optional[Request] = None,
    **extensions: Any
) -> JSONResponse:
    """Create a Problem Details response for errors raised outside this package."""
    problem = ProblemDetail(
        type=type_uri,
        title=title,
        status=status,
        detail=detail,
        instance=_instance_of(instance, request),
        **extensions
    )
    return problem.to_response()
