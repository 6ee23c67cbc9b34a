"""Tests for format parsers."""

from __future__ import annotations

from pathlib import Path

import pytest

from layerfig.exceptions import ParseError
from layerfig.parsers import Json, Parser, Toml, Yaml, parser_for_path


class TestParsers:
    """Test parsing of each supported format."""

    def test_toml(self) -> None:
        assert Toml().parse(b'a = 1\n[section]\nb = "x"\n') == {"a": 1, "section": {"b": "x"}}

    def test_yaml(self) -> None:
        assert Yaml().parse(b"a: 1\nlist:\n  - x\n") == {"a": 1, "list": ["x"]}

    def test_json(self) -> None:
        assert Json().parse(b'{"a": [1, 2]}') == {"a": [1, 2]}

    def test_empty_yaml_is_empty_mapping(self) -> None:
        assert Yaml().parse(b"") == {}

    @pytest.mark.parametrize(
        ("parser", "data"),
        [
            (Toml(), b"a = "),
            (Yaml(), b"a: [1, 2"),
            (Json(), b"{"),
        ],
    )
    def test_malformed_input(self, parser: Parser, data: bytes) -> None:
        """Test that malformed input raises ParseError naming the parser."""
        with pytest.raises(ParseError) as exc_info:
            _ = parser.parse(data)

        assert exc_info.value.parser == parser.name
        assert exc_info.value.context["parser"] == parser.name

    def test_invalid_utf8(self) -> None:
        """Test that undecodable input is a parse error."""
        with pytest.raises(ParseError, match="UTF-8"):
            _ = Json().parse(b"\xff\xfe")

    def test_parsers_satisfy_protocol(self) -> None:
        assert isinstance(Yaml(), Parser)
        assert isinstance(Toml(), Parser)
        assert isinstance(Json(), Parser)


class TestParserForPath:
    """Test parser selection by file extension."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("config.toml", Toml),
            ("config.yaml", Yaml),
            ("config.YML", Yaml),
            (Path("/etc/app/config.json"), Json),
        ],
    )
    def test_known_extensions(self, path: str | Path, expected: type) -> None:
        assert isinstance(parser_for_path(path), expected)

    def test_unknown_extension(self) -> None:
        with pytest.raises(ParseError, match="Unsupported"):
            _ = parser_for_path("config.ini")
