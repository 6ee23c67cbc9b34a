"""TOML configuration parser."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass

from layerfig.exceptions import ParseError
from layerfig.parsers.base import decode_utf8


@dataclass(frozen=True, slots=True)
class Toml:
    """Parser for TOML documents."""

    name: str = "toml"

    def parse(self, data: bytes) -> object:
        """Parse a TOML document.

        Args:
            data: Raw TOML bytes

        Returns:
            Parsed document as a dict

        Raises:
            ParseError: If the document cannot be parsed
        """
        text = decode_utf8(data, self.name)
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise ParseError(f"Failed to parse TOML: {e}", parser=self.name) from e
