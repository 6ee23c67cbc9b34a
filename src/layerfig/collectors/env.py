"""Environment variable collector."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from collections.abc import Mapping
from typing import cast, get_args

from pydantic import BaseModel

from layerfig.collectors.base import snapshot
from layerfig.exceptions import ConfigValidationError, EnvLoadError
from layerfig.value.convert import dataclass_hints, is_union, strip_annotated
from layerfig.value.model import Value

logger = logging.getLogger(__name__)


class Environment:
    """Environment variable collector with support for nested structures and type conversion.

    When the target type declares fields, variables are looked up field by
    field: ``PREFIX + FIELD`` for top-level fields and ``PREFIX + FIELD +
    SEPARATOR + SUBFIELD`` for fields of nested models, case-insensitively.
    Otherwise every variable starting with the prefix is loaded, with the
    separator marking nesting.
    """

    def __init__(
        self,
        prefix: str = "",
        separator: str = "_",
        convert_types: bool = True,
        mappings: dict[str, str] | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize Environment.

        Args:
            prefix: Prefix for environment variables to load
            separator: Separator for nested field names (default: "_")
            convert_types: Whether to decode JSON arrays and objects (and,
                without a schema, booleans and numbers)
            mappings: Custom mappings from env var names to dotted config paths
            environ: Environment to read instead of os.environ
        """
        self.prefix: str = prefix
        self.separator: str = separator
        self.convert_types: bool = convert_types
        self.mappings: dict[str, str] = mappings or {}
        self._environ: Mapping[str, str] | None = environ
        self.name: str = f"env:{prefix}" if prefix else "env"

    def collect(self, target: type[object]) -> Value:
        """Collect the environment shaped after the target type.

        Raises:
            EnvLoadError: If a variable cannot be decoded or the environment
                does not satisfy the target type
        """
        config = self.load(target)
        logger.debug(f"Value parsed from env: {config}")
        try:
            return snapshot(config, target)
        except ConfigValidationError as e:
            raise EnvLoadError(
                f"Environment does not match {getattr(target, '__name__', target)}",
                context=e.context,
            ) from e

    def load(self, target: type[object] | None = None) -> dict[str, object]:
        """Load configuration from environment variables.

        Args:
            target: Type whose fields drive the lookup, if any

        Returns:
            Dictionary containing the loaded configuration

        Raises:
            EnvLoadError: If there are errors processing environment variables
        """
        environ = self._environ if self._environ is not None else os.environ
        config: dict[str, object] = {}

        has_schema = target is not None and _schema_fields(target) is not None

        # Process custom mappings first
        for env_var, config_path in self.mappings.items():
            if env_var in environ:
                value = self._convert_value(environ[env_var], env_var, schema=has_schema)
                self._set_nested_value(config, config_path, value)

        if target is not None and has_schema:
            upper_environ = {key.upper(): (key, value) for key, value in environ.items() if key not in self.mappings}
            self._load_fields(target, self.prefix, upper_environ, config)
            return config

        # Process prefix-based environment variables
        for env_var, raw_value in environ.items():
            if not env_var.startswith(self.prefix) or env_var in self.mappings:
                continue

            config_key = env_var[len(self.prefix):]
            if not config_key:
                continue

            # If we have double separators, use them for nesting and preserve single ones
            config_path = config_key.lower()
            double = self.separator * 2
            if double in config_path:
                config_path = config_path.replace(double, ".")
            elif self.separator != ".":
                config_path = config_path.replace(self.separator, ".")

            self._set_nested_value(config, config_path, self._convert_value(raw_value, env_var, schema=False))

        return config

    def _load_fields(
        self,
        target: type,
        prefix: str,
        environ: Mapping[str, tuple[str, str]],
        config: dict[str, object],
    ) -> None:
        """Load the declared fields of target into config.

        Args:
            target: Model or dataclass whose fields are looked up
            prefix: Variable prefix for this nesting level
            environ: Environment keyed by upper-cased variable name
            config: Dictionary to fill
        """
        for key, annotation in _schema_fields(target) or []:
            variable = (prefix + key).upper()
            if variable in environ:
                env_var, raw_value = environ[variable]
                config.setdefault(key, self._convert_value(raw_value, env_var, annotation=annotation))
                continue

            nested = _nested_type(annotation)
            nested_prefix = (prefix + key + self.separator).upper()
            # Self-referencing models only descend as deep as the variables go
            if nested is None or not any(name.startswith(nested_prefix) for name in environ):
                continue
            section: dict[str, object] = {}
            self._load_fields(nested, prefix + key + self.separator, environ, section)
            if section:
                existing = config.get(key)
                if isinstance(existing, dict):
                    cast(dict[str, object], existing).update(section)
                else:
                    config[key] = section

    def _convert_value(
        self,
        value: str,
        env_var: str,
        schema: bool = True,
        annotation: object = None,
    ) -> object:
        """Convert string value to appropriate Python type.

        With a schema, booleans and numbers are left to validation, and values
        of text fields are never decoded as JSON.

        Args:
            value: String value to convert
            env_var: Environment variable name (for error reporting)
            schema: Whether a target schema will validate the value
            annotation: Annotation of the field the value is loaded into

        Returns:
            Converted value

        Raises:
            EnvLoadError: If JSON parsing fails
        """
        if not value or not self.convert_types or _is_text(annotation):
            return value

        if not schema:
            bool_value = self._try_bool_conversion(value)
            if bool_value is not None:
                return bool_value

            numeric_value = self._try_numeric_conversion(value)
            if numeric_value is not None:
                return numeric_value

        # Try JSON parsing for complex types
        if value.startswith(("[", "{")):
            try:
                return cast(object, json.loads(value))
            except json.JSONDecodeError as e:
                raise EnvLoadError(f"Failed to parse JSON for {env_var}: {e}", env_var) from e

        return value

    def _try_bool_conversion(self, value: str) -> bool | None:
        """Try to convert string to boolean.

        Args:
            value: String value to convert

        Returns:
            Boolean value or None if not a boolean
        """
        lower_value = value.lower()
        if lower_value in ("true", "yes", "on"):
            return True
        elif lower_value in ("false", "no", "off"):
            return False
        return None

    def _try_numeric_conversion(self, value: str) -> int | float | None:
        """Try to convert string to numeric value.

        Args:
            value: String value to convert

        Returns:
            Numeric value or None if not numeric
        """
        try:
            if "." not in value and "e" not in value.lower():
                return int(value)
            return float(value)
        except ValueError:
            return None

    def _set_nested_value(self, config: dict[str, object], path: str, value: object) -> None:
        """Set a value in a nested dictionary using dot notation.

        Args:
            config: Dictionary to modify
            path: Dot-separated path to the value
            value: Value to set
        """
        keys = path.split(".")
        current: dict[str, object] = config

        for key in keys[:-1]:
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = cast(dict[str, object], current[key])

        current[keys[-1]] = value


def _schema_fields(target: object) -> list[tuple[str, object]] | None:
    if not isinstance(target, type):
        return None
    if issubclass(target, BaseModel):
        return [(field.alias or name, field.annotation) for name, field in target.model_fields.items()]
    if dataclasses.is_dataclass(target):
        hints = dataclass_hints(target)
        return [(field.name, hints.get(field.name, field.type)) for field in dataclasses.fields(target)]
    return None


def _is_text(annotation: object) -> bool:
    """Check whether annotation is str, optional or not."""
    annotation = strip_annotated(annotation)
    if is_union(annotation):
        arms = [arm for arm in get_args(annotation) if arm is not type(None)]
        return len(arms) == 1 and strip_annotated(arms[0]) is str
    return annotation is str


def _nested_type(annotation: object) -> type | None:
    """Return the model or dataclass behind a field annotation, optional or not."""
    annotation = strip_annotated(annotation)
    if is_union(annotation):
        arms = [arm for arm in get_args(annotation) if arm is not type(None)]
        if len(arms) != 1:
            return None
        annotation = strip_annotated(arms[0])
    if _schema_fields(annotation) is not None:
        return cast(type, annotation)
    return None


def from_env(
    prefix: str = "",
    *,
    separator: str = "_",
    convert_types: bool = True,
    mappings: dict[str, str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Environment:
    """Collect configuration from the current environment.

    Example:
        >>> builder = Builder(AppConfig).collect(from_env("APP_"))
    """
    return Environment(
        prefix=prefix,
        separator=separator,
        convert_types=convert_types,
        mappings=mappings,
        environ=environ,
    )
