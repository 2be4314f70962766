"""Tests for cursor token encoding and directed cursors."""

import base64
from datetime import datetime

import bson
import pytest
from bson import ObjectId
from pydantic import TypeAdapter

from mongo_pagination.errors import DecodeError
from mongo_pagination.pagination.cursor import (
    BackwardCursor,
    DirectedCursor,
    Edge,
    ForwardCursor,
    decode_cursor,
    encode_cursor,
    is_backward,
)


class TestCursorCodec:
    """Test encode_cursor / decode_cursor."""

    def test_round_trip(self):
        """Decoding an encoded mapping returns the same mapping."""
        position = {
            "how_many": 5,
            "name": "Apple",
            "created_at": datetime(2024, 1, 2, 3, 4, 5),
            "_id": ObjectId(),
        }

        assert decode_cursor(encode_cursor(position)) == position

    def test_round_trip_preserves_key_order(self):
        position = {"b": 1, "a": 2, "c": 3}

        assert list(decode_cursor(encode_cursor(position))) == ["b", "a", "c"]

    def test_id_is_encoded_first(self):
        """BSON always writes a top-level _id first; the other keys keep their order."""
        position = {"b": 1, "a": 2, "_id": 3}

        assert list(decode_cursor(encode_cursor(position))) == ["_id", "b", "a"]

    def test_encoding_is_deterministic(self):
        """Same mapping always yields the same token."""
        oid = ObjectId()

        assert encode_cursor({"name": "Apple", "_id": oid}) == encode_cursor({"name": "Apple", "_id": oid})

    def test_token_is_url_safe_without_padding(self):
        for size in range(1, 12):
            token = encode_cursor({"name": "x" * size})
            assert "=" not in token
            assert "+" not in token
            assert "/" not in token

    def test_token_wraps_bson(self):
        token = encode_cursor({"name": "Apple"})
        padded = token + "=" * (-len(token) % 4)

        assert bson.decode(base64.urlsafe_b64decode(padded)) == {"name": "Apple"}

    def test_null_values_survive(self):
        assert decode_cursor(encode_cursor({"missing": None})) == {"missing": None}

    def test_decode_empty_token(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_cursor("")

        assert "Empty cursor" in str(exc_info.value)
        assert exc_info.value.status == 400

    def test_decode_bad_base64(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_cursor("not base64!")

        assert "Invalid cursor encoding" in str(exc_info.value)

    def test_decode_non_ascii(self):
        with pytest.raises(DecodeError):
            decode_cursor("äöü")

    def test_decode_bad_bson(self):
        token = base64.urlsafe_b64encode(b"definitely not bson").rstrip(b"=").decode()

        with pytest.raises(DecodeError) as exc_info:
            decode_cursor(token)

        assert "Invalid cursor contents" in str(exc_info.value)

    def test_encode_unencodable_value(self):
        with pytest.raises(ValueError):
            encode_cursor({"value": object()})


class TestEdge:
    """Test Edge construction and serialization."""

    SORT = (("how_many", 1), ("name", -1), ("_id", -1))

    def test_from_document_keeps_sort_fields_only(self):
        oid = ObjectId()
        document = {"_id": oid, "name": "Apple", "how_many": 5, "color": "red"}

        edge = Edge.from_document(document, self.SORT)

        assert edge.position == {"how_many": 5, "name": "Apple", "_id": oid}
        assert list(edge.position) == ["how_many", "name", "_id"]

    def test_from_document_skips_missing_fields(self):
        edge = Edge.from_document({"_id": 1, "name": "Apple"}, self.SORT)

        assert edge.position == {"name": "Apple", "_id": 1}
        assert "how_many" not in edge
        assert edge.get("how_many") is None

    def test_from_document_resolves_dotted_paths(self):
        document = {"_id": 1, "stats": {"views": 42}}

        edge = Edge.from_document(document, (("stats.views", -1), ("_id", -1)))

        assert edge.position == {"stats.views": 42, "_id": 1}

    def test_token_round_trip(self):
        edge = Edge(position={"name": "Apple", "_id": ObjectId()})

        assert Edge.from_token(edge.token) == edge
        assert str(edge) == edge.token

    def test_serializes_to_token(self):
        edge = Edge(position={"_id": 7})

        assert edge.model_dump() == edge.token

    def test_validates_from_token(self):
        edge = Edge(position={"_id": 7})

        assert Edge.model_validate(edge.token) == edge

    def test_invalid_token_raises_decode_error(self):
        with pytest.raises(DecodeError):
            Edge.from_token("%%%")

    def test_edge_is_immutable(self):
        edge = Edge(position={"_id": 7})

        with pytest.raises(Exception):
            edge.position = {}


class TestDirectedCursor:
    """Test the forward/backward tagged cursors."""

    def test_reverse(self):
        edge = Edge(position={"_id": 1})

        backward = ForwardCursor(edge=edge).reverse()

        assert isinstance(backward, BackwardCursor)
        assert backward.edge == edge
        assert isinstance(backward.reverse(), ForwardCursor)

    def test_direction_tags(self):
        edge = Edge(position={"_id": 1})

        assert ForwardCursor(edge=edge).direction == "forward"
        assert BackwardCursor(edge=edge).direction == "backward"
        assert is_backward(BackwardCursor(edge=edge))
        assert not is_backward(ForwardCursor(edge=edge))
        assert not is_backward(None)

    def test_string_form_drops_direction(self):
        edge = Edge(position={"_id": 1})

        assert str(ForwardCursor(edge=edge)) == str(BackwardCursor(edge=edge)) == edge.token

    def test_from_token(self):
        token = encode_cursor({"name": "Apple", "_id": 3})

        cursor = BackwardCursor.from_token(token)

        assert cursor.get("name") == "Apple"
        assert cursor.get("_id") == 3
        assert cursor.token == token

    def test_discriminated_union(self):
        adapter = TypeAdapter(DirectedCursor)
        edge = Edge(position={"_id": 1})

        dumped = BackwardCursor(edge=edge).model_dump()
        restored = adapter.validate_python(dumped)

        assert dumped == {"edge": edge.token, "direction": "backward"}
        assert isinstance(restored, BackwardCursor)
        assert restored.edge == edge

    def test_union_json_round_trip(self):
        adapter = TypeAdapter(DirectedCursor)
        cursor = ForwardCursor(edge=Edge(position={"name": "Apple", "_id": 2}))

        assert adapter.validate_json(cursor.model_dump_json()) == cursor
