"""JSON configuration parser."""

from __future__ import annotations

import json
from dataclasses import dataclass

from layerfig.exceptions import ParseError
from layerfig.parsers.base import decode_utf8


@dataclass(frozen=True, slots=True)
class Json:
    """Parser for JSON documents."""

    name: str = "json"

    def parse(self, data: bytes) -> object:
        """Parse a JSON document.

        Raises:
            ParseError: If the document cannot be parsed
        """
        text = decode_utf8(data, self.name)
        try:
            return json.loads(text)  # pyright: ignore[reportAny]
        except json.JSONDecodeError as e:
            raise ParseError(f"Failed to parse JSON: {e}", parser=self.name) from e
