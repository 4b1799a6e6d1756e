"""Tests for code page encoding of text and data."""

import pytest

from etp.encoding import Encoder
from etp.errors import EncodingError


class TestEncodeString:
    """Test single string encoding."""

    def test_ascii_unchanged(self):
        """ASCII text maps to itself."""
        assert Encoder().encode_string("Total: 12.50") == "Total: 12.50"

    def test_latin2_characters(self):
        """Czech characters map to their CP852 bytes."""
        encoded = Encoder().encode_string("žluťoučký kůň")
        assert Encoder.to_bytes(encoded) == "žluťoučký kůň".encode("cp852")

    def test_one_character_per_byte(self):
        """Encoded strings carry exactly one character per device byte."""
        encoded = Encoder().encode_string("č")
        assert encoded == "\x9f"

    def test_unrepresentable_character(self):
        """Characters outside CP852 fail."""
        with pytest.raises(EncodingError):
            Encoder().encode_string("price €5")


class TestEncodeValue:
    """Test recursive encoding of data values."""

    def test_nested_structures(self):
        """Strings are encoded inside lists and mappings."""
        data = {
            "name": "Čaj",
            "items": [{"name": "Ďábel", "qty": 2}, "ůň"],
            "total": 12.5,
        }
        encoded = Encoder().encode(data)

        assert encoded["name"] == "Čaj".encode("cp852").decode("latin-1")
        assert encoded["items"][0]["name"] == "Ďábel".encode("cp852").decode("latin-1")
        assert encoded["items"][0]["qty"] == 2
        assert encoded["items"][1] == "ůň".encode("cp852").decode("latin-1")
        assert encoded["total"] == 12.5

    def test_keys_unchanged(self):
        """Mapping keys are not encoded."""
        encoded = Encoder().encode({"název": "x"})
        assert list(encoded) == ["název"]

    def test_sequences_keep_order_and_type(self):
        """Lists stay lists, tuples stay tuples."""
        encoder = Encoder()
        assert encoder.encode(["a", "b", "c"]) == ["a", "b", "c"]
        assert encoder.encode(("a", 1)) == ("a", 1)

    def test_other_values_pass_through(self):
        """Non-string scalars are returned as they are."""
        encoder = Encoder()
        marker = object()
        assert encoder.encode(None) is None
        assert encoder.encode(42) == 42
        assert encoder.encode(marker) is marker
        assert encoder.encode(b"\x1b") == b"\x1b"

    def test_does_not_mutate_input(self):
        """The caller's data is left unchanged."""
        data = {"name": "Čaj"}
        Encoder().encode(data)
        assert data == {"name": "Čaj"}

    def test_nested_failure(self):
        """A bad character anywhere fails the whole value."""
        with pytest.raises(EncodingError):
            Encoder().encode({"items": [{"name": "ok"}, {"name": "日本"}]})


class TestToBytes:
    """Test conversion of rendered output into bytes."""

    def test_transport_to_bytes(self):
        """Every character becomes one byte."""
        assert Encoder.to_bytes("\x1b@\xff") == b"\x1b\x40\xff"

    def test_non_device_characters(self):
        """Characters above U+00FF cannot be sent."""
        with pytest.raises(EncodingError, match="not device bytes"):
            Encoder.to_bytes("€")
