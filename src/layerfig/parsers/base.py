"""Parser protocol for structured configuration formats."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from layerfig.exceptions import ParseError


@runtime_checkable
class Parser(Protocol):
    """Protocol for format parsers used by structural collectors.

    A parser turns raw bytes into plain Python data (dicts, lists, scalars).
    Shaping that data into a target type is the collector's job.
    """

    name: str

    def parse(self, data: bytes) -> object:
        """Parse raw bytes into plain Python data.

        Args:
            data: Raw input bytes

        Returns:
            Parsed data

        Raises:
            ParseError: If the input is malformed or not valid UTF-8
        """
        ...


def decode_utf8(data: bytes, parser: str) -> str:
    """Decode parser input as UTF-8.

    Args:
        data: Raw input bytes
        parser: Name of the calling parser, for error reporting

    Returns:
        Decoded text

    Raises:
        ParseError: If data is not valid UTF-8
    """
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"Input is not valid UTF-8: {e}", parser=parser) from e
