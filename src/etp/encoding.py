"""
Code page encoding for template text and data.

Encoded text is kept as a str holding one character per device byte
(U+0000..U+00FF, i.e. Latin-1 transport). Command output uses the same
representation, so text and command bytes can be assembled by the
template engine and turned into bytes in one step without command
bytes ever being re-encoded.
"""

from collections.abc import Mapping
from typing import Any

from .errors import EncodingError

DEFAULT_CODEC = "cp852"  # Latin-2, selected by the printer prologue
TRANSPORT_CODEC = "latin-1"


class Encoder:
    """Converts Unicode text into the printer code page."""

    def __init__(self, codec: str = DEFAULT_CODEC):
        self.codec = codec

    def encode_string(self, text: str) -> str:
        """
        Encode text to the code page.

        Returns:
            The device bytes as a transport string

        Raises:
            EncodingError: If a character has no representation
        """
        try:
            data = text.encode(self.codec)
        except UnicodeEncodeError as e:
            raise EncodingError(str(e)) from e
        return data.decode(TRANSPORT_CODEC)

    def encode(self, value: Any) -> Any:
        """
        Encode strings inside value, walking lists, tuples and mappings.

        Mapping keys are left as they are. Other values pass through
        unchanged.
        """
        if isinstance(value, str):
            return self.encode_string(value)
        if isinstance(value, list):
            return [self.encode(item) for item in value]
        if isinstance(value, tuple):
            return tuple(self.encode(item) for item in value)
        if isinstance(value, Mapping):
            return {key: self.encode(item) for key, item in value.items()}
        return value

    @staticmethod
    def to_bytes(text: str) -> bytes:
        """Convert a transport string back into device bytes."""
        try:
            return text.encode(TRANSPORT_CODEC)
        except UnicodeEncodeError as e:
            raise EncodingError(f"output is not device bytes: {e}") from e
