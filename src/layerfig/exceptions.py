"""Error handling for layered configuration building."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from pydantic import ValidationError

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Base exception for all configuration-related errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:  # pyright: ignore[reportExplicitAny] # Flexible config error context
        """Initialize ConfigError.

        Args:
            message: Error message
            context: Additional context information for debugging
        """
        super().__init__(message)
        self.context: dict[str, Any] = context or {}  # pyright: ignore[reportExplicitAny] # Flexible config error context


class ConfigLoadError(ConfigError):
    """Exception raised when a source fails to collect a value."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        context: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny] # Flexible config error context
    ) -> None:
        """Initialize ConfigLoadError.

        Args:
            message: Error message
            file_path: Path to the configuration file that failed to load
            context: Additional context information
        """
        full_context = context or {}
        if file_path is not None:
            full_context["file_path"] = file_path

        super().__init__(message, full_context)
        self.file_path: str | None = file_path


class EnvLoadError(ConfigLoadError):
    """Exception raised when environment variable loading fails."""

    def __init__(
        self,
        message: str,
        env_var: str | None = None,
        context: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny] # Flexible config error context
    ) -> None:
        """Initialize EnvLoadError.

        Args:
            message: Error message
            env_var: Environment variable name that caused the error
            context: Additional context information
        """
        full_context = context or {}
        if env_var is not None:
            full_context["env_var"] = env_var

        super().__init__(message, context=full_context)
        self.env_var: str | None = env_var


class ParseError(ConfigLoadError):
    """Exception raised when a format parser rejects its input."""

    def __init__(
        self,
        message: str,
        parser: str | None = None,
        context: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny] # Flexible config error context
    ) -> None:
        """Initialize ParseError.

        Args:
            message: Error message
            parser: Name of the parser that failed
            context: Additional context information
        """
        full_context = context or {}
        if parser is not None:
            full_context["parser"] = parser

        super().__init__(message, context=full_context)
        self.parser: str | None = parser


class ConfigMergeError(ConfigError):
    """Exception raised when a candidate value does not fit the default layer.

    The default snapshot must be a structural superset of every candidate.
    A key missing from the default is a mismatch between the default instance
    and what sources produce, so no precedence decision is possible.
    """

    def __init__(
        self,
        message: str,
        config_path: str = "",
        context: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny] # Flexible config error context
    ) -> None:
        """Initialize ConfigMergeError.

        Args:
            message: Error message
            config_path: Path to the configuration field that caused the error
            context: Additional context information
        """
        full_context = context or {}
        if config_path:
            full_context["config_path"] = config_path

        super().__init__(message, full_context)
        self.config_path: str = config_path


class ConfigValidationError(ConfigError):
    """Exception raised when a merged value cannot be projected into the target type."""

    def __init__(
        self,
        message: str,
        pydantic_error: ValidationError | None = None,
        context: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny] # Flexible config error context
    ) -> None:
        """Initialize ConfigValidationError.

        Args:
            message: Error message
            pydantic_error: Original Pydantic ValidationError
            context: Additional context information
        """
        full_context = context or {}
        if pydantic_error is not None:
            full_context["validation_errors"] = self._format_validation_errors(pydantic_error)

        super().__init__(message, full_context)
        self.pydantic_error: ValidationError | None = pydantic_error

    def _format_validation_errors(self, error: ValidationError) -> list[dict[str, Any]]:  # pyright: ignore[reportExplicitAny] # Flexible error formatting
        """Format Pydantic validation errors for better readability.

        Args:
            error: Pydantic ValidationError

        Returns:
            List of formatted error dictionaries
        """
        formatted_errors: list[dict[str, Any]] = []  # pyright: ignore[reportExplicitAny] # Flexible error formatting
        for err in error.errors():
            formatted_errors.append({
                "field": ".".join(str(loc) for loc in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
                "input": err.get("input"),
            })
        return formatted_errors


class NoValidConfigError(ConfigError):
    """Exception raised when no layer produced a valid configuration."""

    def __init__(
        self,
        message: str = "No valid configuration could be built",
        layer_errors: Sequence[ConfigError] = (),
        context: dict[str, Any] | None = None,  # pyright: ignore[reportExplicitAny] # Flexible config error context
    ) -> None:
        """Initialize NoValidConfigError.

        Args:
            message: Error message
            layer_errors: Per-layer failures recorded during the build
            context: Additional context information
        """
        full_context = context or {}
        if layer_errors:
            full_context["layer_errors"] = [str(error) for error in layer_errors]

        super().__init__(message, full_context)
        self.layer_errors: tuple[ConfigError, ...] = tuple(layer_errors)


def handle_config_error(error: Exception, operation: str) -> ConfigError:
    """Handle and wrap configuration errors with consistent error types.

    Args:
        error: Original exception
        operation: Description of the operation that failed

    Returns:
        Wrapped ConfigError instance
    """
    logger.debug(f"Configuration error during {operation}: {error}", exc_info=True)

    if isinstance(error, ConfigError):
        return error

    if isinstance(error, ValidationError):
        wrapped: ConfigError = ConfigValidationError(
            f"Configuration validation failed during {operation}",
            pydantic_error=error,
        )
    elif isinstance(error, OSError):
        wrapped = ConfigLoadError(
            f"Configuration error during {operation}: {error}",
            file_path=str(error.filename) if error.filename is not None else None,
            context={"operation": operation, "original_error_type": type(error).__name__},
        )
    else:
        wrapped = ConfigError(
            f"Configuration error during {operation}: {error}",
            context={"operation": operation, "original_error_type": type(error).__name__},
        )
    wrapped.__cause__ = error
    return wrapped


def log_config_error(error: ConfigError, level: int = logging.WARNING) -> None:
    """Log configuration error with appropriate context.

    Args:
        error: Configuration error to log
        level: Logging level (default: WARNING)
    """
    message = str(error)
    if error.context:
        context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())  # pyright: ignore[reportAny] # Flexible context values
        message = f"{message} (context: {context_str})"

    logger.log(level, message, exc_info=error.__cause__ is not None)


def suggest_config_fix(error: ConfigError) -> str | None:
    """Suggest potential fixes for configuration errors.

    Args:
        error: Configuration error

    Returns:
        Suggested fix or None if no suggestion available
    """
    if isinstance(error, EnvLoadError):
        if error.env_var:
            return f"Check the format and value of environment variable: {error.env_var}"
        return "Check the format and values of environment variables"

    if isinstance(error, ParseError):
        if error.parser:
            return f"Check that the input is valid {error.parser}"
        return "Check the syntax of the configuration input"

    if isinstance(error, ConfigLoadError):
        if error.file_path:
            return f"Check that the file exists and is readable: {error.file_path}"
        return "Check that the configuration source is readable"

    if isinstance(error, ConfigValidationError) and error.pydantic_error:
        error_count = len(error.pydantic_error.errors())
        if error_count == 1:
            err = error.pydantic_error.errors()[0]
            field_path = ".".join(str(loc) for loc in err["loc"])
            return f"Fix validation error in field '{field_path}': {err['msg']}"
        return f"Fix {error_count} validation errors in the configuration"

    if isinstance(error, ConfigMergeError):
        if error.config_path:
            return f"Make the default instance declare the field: {error.config_path}"
        return "Make the default instance match the shape sources produce"

    if isinstance(error, NoValidConfigError):
        return "Check the warnings logged for each configuration source"

    return None
