"""Command line entry point for layerfig.

Merges configuration files and prefixed environment variables, in the order
given, and prints the result. Sources are merged without a schema: each one
is a plain map and later sources override earlier ones key by key.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import NoReturn

import yaml

from layerfig.collectors.env import Environment
from layerfig.exceptions import (
    ConfigError,
    ConfigLoadError,
    NoValidConfigError,
    log_config_error,
    suggest_config_fix,
)
from layerfig.merge.engine import merge
from layerfig.parsers import parser_for_path
from layerfig.utils.logging import build_context, configure_logging
from layerfig.value.convert import to_python, to_value
from layerfig.value.model import Map, Value

__all__ = ["main"]

# Exit codes
EXIT_SUCCESS = 0
EXIT_CONFIG_ERROR = 1


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments namespace

    CLI Arguments:
        --file, -f: Configuration file, repeatable, later files win
        --env-prefix: Merge environment variables with this prefix last
        --format: Output format (yaml or json)
        --log-level: Log level
    """
    parser = argparse.ArgumentParser(
        prog="layerfig",
        description="Merge layered configuration sources and print the result",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  layerfig -f defaults.toml -f local.yaml
  layerfig -f config.yaml --env-prefix APP_ --format json
        """,
    )

    _ = parser.add_argument(
        "--file",
        "-f",
        type=Path,
        action="append",
        default=[],
        help="Configuration file (.yaml, .yml, .toml, .json); repeatable, later files take precedence",
        metavar="PATH",
    )

    _ = parser.add_argument(
        "--env-prefix",
        type=str,
        default=None,
        help="Merge environment variables starting with this prefix after all files",
        metavar="PREFIX",
    )

    _ = parser.add_argument(
        "--format",
        choices=["yaml", "json"],
        default="yaml",
        help="Output format (default: yaml)",
    )

    _ = parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Log level (default: WARNING)",
        metavar="LEVEL",
    )

    return parser.parse_args(argv)


def collect_sources(files: list[Path], env_prefix: str | None) -> Value:
    """Merge files and environment into one value.

    Sources that fail are logged and skipped.

    Args:
        files: Configuration files in precedence order
        env_prefix: Environment variable prefix, or None to skip the environment

    Returns:
        Merged value

    Raises:
        NoValidConfigError: If no source could be loaded
    """
    accumulated: Value = Map()
    failures: list[ConfigError] = []
    loaded = 0

    for path in files:
        try:
            raw = path.read_bytes()
            value = to_value(parser_for_path(path).parse(raw))
        except (OSError, ValueError) as e:
            failures.append(ConfigLoadError(f"Failed to load {path}: {e}", file_path=str(path)))
            log_config_error(failures[-1])
            continue
        except ConfigError as e:
            failures.append(e)
            log_config_error(e)
            continue
        accumulated = merge(accumulated, value)
        loaded += 1

    if env_prefix is not None:
        try:
            env_value = to_value(Environment(prefix=env_prefix).load())
        except ValueError as e:
            failures.append(ConfigLoadError(f"Failed to load environment: {e}"))
            log_config_error(failures[-1])
        except ConfigError as e:
            failures.append(e)
            log_config_error(e)
        else:
            accumulated = merge(accumulated, env_value)
            loaded += 1

    if loaded == 0:
        raise NoValidConfigError("No configuration source could be loaded", layer_errors=failures)
    return accumulated


def render(value: Value, output_format: str) -> str:
    """Render a value as YAML or JSON text."""
    data = to_python(value)
    if output_format == "json":
        return json.dumps(data, indent=2, default=str)
    return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the layerfig command.

    Exit Codes:
        0: Configuration printed
        1: No source could be loaded
    """
    args = parse_arguments(argv)

    files: list[Path] = args.file  # pyright: ignore[reportAny]  # argparse boundary
    env_prefix: str | None = args.env_prefix  # pyright: ignore[reportAny]  # argparse boundary
    output_format: str = args.format  # pyright: ignore[reportAny]  # argparse boundary
    log_level: str = args.log_level  # pyright: ignore[reportAny]  # argparse boundary

    configure_logging(log_level=log_level)

    try:
        with build_context():
            value = collect_sources(files, env_prefix)
    except ConfigError as exc:
        print(f"Configuration error:\n{exc}", file=sys.stderr)
        suggestion = suggest_config_fix(exc)
        if suggestion:
            print(f"Hint: {suggestion}", file=sys.stderr)
        sys.exit(EXIT_CONFIG_ERROR)

    _ = sys.stdout.write(render(value, output_format))
    if output_format == "json":
        _ = sys.stdout.write("\n")
    sys.exit(EXIT_SUCCESS)


if __name__ == "__main__":
    main()
