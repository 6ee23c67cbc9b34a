"""Tests for configuration error types and helpers."""

from __future__ import annotations

import logging

import pytest
from pydantic import BaseModel, ValidationError

from layerfig.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigMergeError,
    ConfigValidationError,
    EnvLoadError,
    NoValidConfigError,
    ParseError,
    handle_config_error,
    log_config_error,
    suggest_config_fix,
)


class PortModel(BaseModel):
    port: int


def make_validation_error() -> ValidationError:
    try:
        _ = PortModel.model_validate({"port": "not-a-port"})
    except ValidationError as e:
        return e
    pytest.fail("validation unexpectedly succeeded")


class TestExceptionHierarchy:
    """Test the exception types and their context."""

    def test_load_errors_are_config_errors(self) -> None:
        assert issubclass(EnvLoadError, ConfigLoadError)
        assert issubclass(ParseError, ConfigLoadError)
        assert issubclass(ConfigLoadError, ConfigError)
        assert issubclass(ConfigMergeError, ConfigError)
        assert issubclass(NoValidConfigError, ConfigError)

    def test_context_fields(self) -> None:
        """Test that specific arguments are mirrored into the context."""
        assert ConfigLoadError("x", file_path="/a.toml").context == {"file_path": "/a.toml"}
        assert EnvLoadError("x", env_var="APP_X").context == {"env_var": "APP_X"}
        assert ParseError("x", parser="yaml").context == {"parser": "yaml"}
        assert ConfigMergeError("x", config_path="db.port").context == {"config_path": "db.port"}
        assert ConfigError("x").context == {}

    def test_validation_error_formatting(self) -> None:
        """Test that pydantic errors are flattened into the context."""
        error = ConfigValidationError("invalid", pydantic_error=make_validation_error())

        [formatted] = error.context["validation_errors"]
        assert formatted["field"] == "port"
        assert formatted["type"] == "int_parsing"
        assert formatted["input"] == "not-a-port"

    def test_no_valid_config_error_defaults(self) -> None:
        error = NoValidConfigError()

        assert str(error) == "No valid configuration could be built"
        assert error.layer_errors == ()
        assert "layer_errors" not in error.context


class TestErrorHelpers:
    """Test error handling helpers."""

    def test_handle_config_error_keeps_config_errors(self) -> None:
        error = ParseError("bad")

        assert handle_config_error(error, "collect") is error

    def test_handle_config_error_wraps_validation_error(self) -> None:
        original = make_validation_error()

        wrapped = handle_config_error(original, "collect from file")

        assert isinstance(wrapped, ConfigValidationError)
        assert wrapped.__cause__ is original

    def test_handle_config_error_wraps_os_error(self) -> None:
        wrapped = handle_config_error(FileNotFoundError(2, "No such file", "/missing.toml"), "read")

        assert isinstance(wrapped, ConfigLoadError)
        assert wrapped.file_path == "/missing.toml"
        assert wrapped.context["original_error_type"] == "FileNotFoundError"

    def test_handle_config_error_wraps_other_errors(self) -> None:
        wrapped = handle_config_error(ValueError("odd"), "collect")

        assert type(wrapped) is ConfigError
        assert "odd" in str(wrapped)
        assert wrapped.context["operation"] == "collect"

    def test_log_config_error(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="layerfig.exceptions"):
            log_config_error(ConfigLoadError("cannot read", file_path="/a.toml"))

        assert "cannot read (context: file_path=/a.toml)" in caplog.text


class TestSuggestConfigFix:
    """Test fix suggestions for each error type."""

    @pytest.mark.parametrize(
        ("error", "fragment"),
        [
            (EnvLoadError("x", env_var="APP_PORT"), "APP_PORT"),
            (ParseError("x", parser="toml"), "valid toml"),
            (ConfigLoadError("x", file_path="/a.toml"), "/a.toml"),
            (ConfigMergeError("x", config_path="db.extra"), "db.extra"),
            (NoValidConfigError(), "warnings"),
        ],
    )
    def test_suggestions(self, error: ConfigError, fragment: str) -> None:
        suggestion = suggest_config_fix(error)

        assert suggestion is not None
        assert fragment in suggestion

    def test_validation_suggestion_names_field(self) -> None:
        error = ConfigValidationError("invalid", pydantic_error=make_validation_error())

        assert "port" in (suggest_config_fix(error) or "")

    def test_plain_config_error_has_no_suggestion(self) -> None:
        assert suggest_config_fix(ConfigError("x")) is None
