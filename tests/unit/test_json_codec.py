"""
Unit tests for the JSON codec.

Tests cover:
- Collection and store encoding
- Decoding errors (syntax, top-level shape, element shape)
- Lazy per-collection decoding of store payloads
"""

import json

import pytest

from docdb.codec import BatchMode, JsonCodec
from docdb.errors import MalformedInputError
from docdb.store import Collection, Record


class TestJsonEncode:
    """Tests for JSON encoding."""

    @pytest.fixture
    def codec(self):
        return JsonCodec()

    def test_encode_collection(self, codec):
        """Collection encodes as an array of {id, data}."""
        collection = Collection.from_records("T", [Record(id="a1", data={"x": 1})])
        assert codec.encode_collection(collection) == b'[{"id":"a1","data":{"x":1}}]'

    def test_encode_empty_collection(self, codec):
        """Empty collection encodes as an empty array."""
        assert codec.encode_collection(Collection("T")) == b"[]"

    def test_encode_keeps_unicode(self, codec):
        """Non-ASCII text is written as UTF-8, not escaped."""
        collection = Collection.from_records("T", [Record(id="a", data={"name": "Zoë"})])
        encoded = codec.encode_collection(collection)
        assert "Zoë".encode("utf-8") in encoded

    def test_encode_store(self, codec):
        """Store encodes as an object keyed by collection name."""
        collections = [
            Collection.from_records("a", [Record(id="1", data=[1])]),
            Collection("b"),
        ]
        assert json.loads(codec.encode_store(collections)) == {
            "a": [{"id": "1", "data": [1]}],
            "b": [],
        }


class TestJsonDecode:
    """Tests for JSON decoding."""

    @pytest.fixture
    def codec(self):
        return JsonCodec()

    def test_decode_collection(self, codec):
        """Array decodes into a REPLACE batch."""
        batch = codec.decode_collection("T", b'[{"id": "a1", "data": {"x": 1}}, {"data": 2}]')

        assert batch.name == "T"
        assert batch.mode is BatchMode.REPLACE
        assert batch.records[0] == Record(id="a1", data={"x": 1})
        assert batch.records[1].data == 2

    def test_decode_collection_invalid_json(self, codec):
        """Syntax errors raise MalformedInputError with a position."""
        with pytest.raises(MalformedInputError) as exc_info:
            codec.decode_collection("T", b'[{"id": ')
        assert exc_info.value.fmt == "json"
        assert "line 1" in exc_info.value.position

    def test_decode_collection_requires_array(self, codec):
        """Top-level object is rejected for collection scope."""
        with pytest.raises(MalformedInputError):
            codec.decode_collection("T", b'{"T": []}')

    def test_decode_collection_requires_object_elements(self, codec):
        """Elements must be objects."""
        with pytest.raises(MalformedInputError) as exc_info:
            codec.decode_collection("T", b'[{"id": "a"}, "b"]')
        assert exc_info.value.position == "T[1]"

    def test_decode_store_requires_object(self, codec):
        """Top-level array is rejected eagerly for store scope."""
        with pytest.raises(MalformedInputError):
            codec.decode_store(b"[]")

    def test_decode_store_yields_per_collection(self, codec):
        """One REPLACE batch per key, in document order."""
        batches = list(codec.decode_store(b'{"b": [{"id": "1"}], "a": []}'))

        assert [b.name for b in batches] == ["b", "a"]
        assert all(b.mode is BatchMode.REPLACE for b in batches)
        assert batches[0].records[0].id == "1"
        assert batches[0].records[0].data == {}

    def test_decode_store_later_error_is_lazy(self, codec):
        """A malformed later collection raises only when reached."""
        batches = codec.decode_store(b'{"good": [], "bad": 5}')

        first = next(batches)
        assert first.name == "good"
        with pytest.raises(MalformedInputError):
            next(batches)

    def test_decode_deeply_nested(self, codec):
        """Nesting deeper than the decoder can handle is malformed input."""
        depth = 100_000
        with pytest.raises(MalformedInputError):
            codec.decode_collection("T", b"[" * depth + b"]" * depth)

    def test_decode_store_deeply_nested(self, codec):
        depth = 100_000
        with pytest.raises(MalformedInputError):
            codec.decode_store(b'{"T":' + b"[" * depth + b"]" * depth + b"}")


class TestJsonSurrogates:
    """Tests for strings holding lone surrogates."""

    @pytest.fixture
    def codec(self):
        return JsonCodec()

    def test_lone_surrogate_round_trips(self, codec):
        """Escaped lone surrogates import, export as escapes, and re-import."""
        batch = codec.decode_collection("T", b'[{"id": "a", "data": {"s": "\\ud800"}}]')
        assert batch.records[0].data == {"s": "\ud800"}

        exported = codec.encode_collection(Collection.from_records("T", batch.records))

        assert b"\\ud800" in exported
        assert codec.decode_collection("T", exported).records == batch.records

    def test_store_export_with_lone_surrogate(self, codec):
        collections = [Collection.from_records("T", [Record(id="\udc00", data=["\ud800"])])]

        exported = codec.encode_store(collections)

        assert json.loads(exported) == {"T": [{"id": "\udc00", "data": ["\ud800"]}]}

    def test_paired_characters_unchanged(self, codec):
        """Characters outside the BMP are written as plain UTF-8."""
        collection = Collection.from_records("T", [Record(id="a", data={"e": "\U0001f600"})])
        assert "\U0001f600".encode("utf-8") in codec.encode_collection(collection)
