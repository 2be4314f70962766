"""Opaque cursor tokens for keyset pagination.

A cursor is the projection of one document onto the fields of the active
sort, serialized as BSON and wrapped in URL-safe base64 without padding.
Cursors only make sense relative to the sort that produced them.
"""

import base64
import binascii
from typing import Annotated, Any, Dict, Literal, Mapping, Optional, Sequence, Tuple, Union

import bson
from bson.errors import BSONError
from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator

from ..errors.problem_details import DecodeError


_MISSING = object()


def encode_cursor(position: Mapping[str, Any]) -> str:
    """Encode a field/value mapping into a cursor token.

    Args:
        position: Sort-key values of a single document, in sort order

    Returns:
        URL-safe base64 token without padding

    Raises:
        ValueError: If a value cannot be represented as BSON
    """
    try:
        raw = bson.encode(dict(position))
    except (BSONError, TypeError) as e:
        raise ValueError(f"Failed to encode cursor: {e}")

    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def decode_cursor(token: str) -> Dict[str, Any]:
    """Decode a cursor token back into its field/value mapping.

    Args:
        token: Token produced by ``encode_cursor``

    Returns:
        Decoded mapping; ``_id`` comes first, other keys keep their order

    Raises:
        DecodeError: If the token is empty, not base64, or not BSON
    """
    if not token:
        raise DecodeError("Empty cursor provided")

    try:
        padded = token.encode("ascii") + b"=" * (-len(token) % 4)
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeError(f"Invalid cursor encoding: {e}")

    try:
        return bson.decode(raw)
    except (BSONError, ValueError) as e:
        raise DecodeError(f"Invalid cursor contents: {e}")


def resolve_field(document: Mapping[str, Any], path: str) -> Any:
    """Return the value at a dotted path, or the module sentinel when absent."""
    value = document
    for part in path.split("."):
        if isinstance(value, Mapping) and part in value:
            value = value[part]
        else:
            return _MISSING
    return value


class Edge(BaseModel):
    """Position of a single item under the active sort."""

    model_config = ConfigDict(frozen=True)

    position: Dict[str, Any] = Field(default_factory=dict, description="Sort-key values of the item")

    @model_validator(mode="before")
    @classmethod
    def coerce_token(cls, data):
        if isinstance(data, str):
            return {"position": decode_cursor(data)}
        return data

    @model_serializer
    def serialize_token(self) -> str:
        return self.token

    @classmethod
    def from_document(cls, document: Mapping[str, Any], sort: Sequence[Tuple[str, int]]) -> "Edge":
        """Project a document onto the sort fields it actually contains."""
        position = {}
        for field, _direction in sort:
            value = resolve_field(document, field)
            if value is not _MISSING:
                position[field] = value
        return cls(position=position)

    @classmethod
    def from_token(cls, token: str) -> "Edge":
        return cls(position=decode_cursor(token))

    @property
    def token(self) -> str:
        return encode_cursor(self.position)

    def get(self, field: str, default: Any = None) -> Any:
        return self.position.get(field, default)

    def __contains__(self, field: str) -> bool:
        return field in self.position

    def __str__(self) -> str:
        return self.token


class _DirectedCursorBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    edge: Edge

    @classmethod
    def from_token(cls, token: str):
        return cls(edge=Edge.from_token(token))

    @classmethod
    def from_document(cls, document: Mapping[str, Any], sort: Sequence[Tuple[str, int]]):
        return cls(edge=Edge.from_document(document, sort))

    @property
    def token(self) -> str:
        return self.edge.token

    def get(self, field: str, default: Any = None) -> Any:
        return self.edge.get(field, default)

    def __str__(self) -> str:
        # Drops the direction; callers pass it back as `after`/`before`
        return self.token


class ForwardCursor(_DirectedCursorBase):
    """Resume after the edge in sort order."""

    direction: Literal["forward"] = "forward"

    def reverse(self) -> "BackwardCursor":
        return BackwardCursor(edge=self.edge)


class BackwardCursor(_DirectedCursorBase):
    """Resume before the edge in sort order."""

    direction: Literal["backward"] = "backward"

    def reverse(self) -> ForwardCursor:
        return ForwardCursor(edge=self.edge)


DirectedCursor = Annotated[
    Union[ForwardCursor, BackwardCursor],
    Field(discriminator="direction")
]


def is_backward(cursor: Optional[DirectedCursor]) -> bool:
    """True when the cursor seeks before its edge."""
    return isinstance(cursor, BackwardCursor)
