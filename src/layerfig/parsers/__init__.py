"""Parsers for structured configuration formats."""

from __future__ import annotations

from pathlib import Path

from .base import Parser
from .json_parser import Json
from .toml_parser import Toml
from .yaml_parser import Yaml
from ..exceptions import ParseError

_PARSERS_BY_SUFFIX: dict[str, type[Json] | type[Toml] | type[Yaml]] = {
    ".json": Json,
    ".toml": Toml,
    ".yaml": Yaml,
    ".yml": Yaml,
}


def parser_for_path(path: str | Path) -> Parser:
    """Pick a parser from a file extension.

    Args:
        path: Configuration file path

    Returns:
        Parser instance for the file format

    Raises:
        ParseError: If the extension is not recognized
    """
    suffix = Path(path).suffix.lower()
    parser_type = _PARSERS_BY_SUFFIX.get(suffix)
    if parser_type is None:
        supported = ", ".join(sorted(_PARSERS_BY_SUFFIX))
        raise ParseError(
            f"Unsupported configuration format '{suffix or path}'. Supported extensions: {supported}",
            context={"file_path": str(path)},
        )
    return parser_type()


__all__ = [
    "Json",
    "ParseError",
    "Parser",
    "Toml",
    "Yaml",
    "parser_for_path",
]
