"""YAML configuration parser."""

from __future__ import annotations

from dataclasses import dataclass

import yaml

from layerfig.exceptions import ParseError
from layerfig.parsers.base import decode_utf8


@dataclass(frozen=True, slots=True)
class Yaml:
    """Parser for YAML documents."""

    name: str = "yaml"

    def parse(self, data: bytes) -> object:
        """Parse a YAML document.

        Args:
            data: Raw YAML bytes

        Returns:
            Parsed document; an empty document yields an empty dict

        Raises:
            ParseError: If the document cannot be parsed
        """
        text = decode_utf8(data, self.name)
        try:
            content: object = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}", parser=self.name) from e
        # Handle empty documents
        if content is None:
            return {}
        return content
