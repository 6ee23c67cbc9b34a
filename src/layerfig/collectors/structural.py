"""Collectors that parse structured input (files, readers, strings)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import IO, override

from layerfig.collectors.base import snapshot
from layerfig.exceptions import ConfigLoadError
from layerfig.parsers.base import Parser
from layerfig.value.convert import UnknownFieldObserver
from layerfig.value.model import Value

logger = logging.getLogger(__name__)


class Structural:
    """Collector that reads raw bytes and parses them with a format parser.

    The bytes are read at collect time, so a missing file is reported by the
    build step that needs it rather than when the collector is created.
    """

    def __init__(
        self,
        parser: Parser,
        read: Callable[[], bytes],
        name: str,
        on_unknown: UnknownFieldObserver | None = None,
    ) -> None:
        """Initialize Structural.

        Args:
            parser: Parser for the input format
            read: Callable returning the raw input
            name: Source name used in logs and audit trails
            on_unknown: Called with the dotted path of every field the target
                does not declare
        """
        self.parser: Parser = parser
        self.name: str = name
        self.on_unknown: UnknownFieldObserver | None = on_unknown
        self._read: Callable[[], bytes] = read

    def collect(self, target: type[object]) -> Value:
        """Read, parse and shape the input after the target type.

        Raises:
            ConfigLoadError: If the input cannot be read or parsed
            ConfigValidationError: If the parsed data does not satisfy the target
        """
        data = self.parser.parse(self._read())
        logger.debug(f"Parsed value from {self.name}: {data}")
        return snapshot(data, target, self.on_unknown)

    @override
    def __repr__(self) -> str:
        return f"Structural(name={self.name!r}, parser={self.parser.name!r})"


def _file_reader(path: Path) -> Callable[[], bytes]:
    def read() -> bytes:
        try:
            return path.read_bytes()
        except OSError as e:
            raise ConfigLoadError(f"Failed to load {path}: {e}", file_path=str(path)) from e

    return read


def _stream_reader(reader: IO[bytes] | IO[str]) -> Callable[[], bytes]:
    def read() -> bytes:
        try:
            content = reader.read()
        except OSError as e:
            raise ConfigLoadError(f"Failed to read from reader: {e}") from e
        if isinstance(content, str):
            return content.encode("utf-8")
        return content

    return read


def from_file(parser: Parser, path: str | Path, *, on_unknown: UnknownFieldObserver | None = None) -> Structural:
    """Load config from a file path with a specific format.

    Example:
        >>> builder = Builder(AppConfig).collect(from_file(Toml(), "config.toml"))
    """
    file_path = Path(path)
    return Structural(parser, _file_reader(file_path), f"file:{file_path}", on_unknown)


def from_reader(
    parser: Parser,
    reader: IO[bytes] | IO[str],
    *,
    on_unknown: UnknownFieldObserver | None = None,
) -> Structural:
    """Load config from a binary or text stream with a specific format.

    The stream is read to its end at collect time.
    """
    return Structural(parser, _stream_reader(reader), "reader", on_unknown)


def from_str(parser: Parser, text: str, *, on_unknown: UnknownFieldObserver | None = None) -> Structural:
    """Load config from a string with a specific format.

    Example:
        >>> builder = Builder(AppConfig).collect(from_str(Toml(), 'a = "Hello, World!"'))
    """
    data = text.encode("utf-8")
    return Structural(parser, lambda: data, "str", on_unknown)
