"""Tests for the environment variable collector."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import BaseModel

from layerfig.builder import Builder
from layerfig.collectors.env import Environment, from_env
from layerfig.exceptions import EnvLoadError
from layerfig.value.model import Bool, Int, Seq, Str, Struct, UnitVariant
from tests.fixtures.config_models import AppConfig, PairConfig, RetryPolicy


class Node(BaseModel):
    name: str = ""
    child: Node | None = None


class TestEnvironmentLoad:
    """Test loading raw data from environment variables."""

    def test_load_simple_env_vars(self) -> None:
        """Test loading simple environment variables without a schema."""
        loader = Environment(prefix="TEST_")

        test_env = {
            "TEST_KEY1": "value1",
            "TEST_KEY2": "value2",
            "OTHER_KEY": "ignored",
        }

        with patch.dict(os.environ, test_env, clear=True):
            result = loader.load()

        assert result == {"key1": "value1", "key2": "value2"}

    def test_load_nested_env_vars_with_underscores(self) -> None:
        """Test that the separator marks nesting without a schema."""
        loader = Environment(prefix="APP_", environ={"APP_DATABASE_HOST": "db", "APP_NAME": "svc"})

        assert loader.load() == {"database": {"host": "db"}, "name": "svc"}

    def test_double_separator_preserves_single_ones(self) -> None:
        """Test that a doubled separator nests and keeps single separators in keys."""
        loader = Environment(prefix="APP_", environ={"APP_RETRY__MAX_ATTEMPTS": "3"})

        assert loader.load() == {"retry": {"max_attempts": 3}}

    def test_type_conversion_without_schema(self) -> None:
        """Test boolean, numeric and JSON conversion without a schema."""
        loader = Environment(
            prefix="APP_",
            environ={
                "APP_DEBUG": "yes",
                "APP_QUIET": "off",
                "APP_WORKERS": "4",
                "APP_RATIO": "0.5",
                "APP_TAGS": '["a", "b"]',
                "APP_RAW": "1",
            },
        )

        assert loader.load() == {
            "debug": True,
            "quiet": False,
            "workers": 4,
            "ratio": 0.5,
            "tags": ["a", "b"],
            "raw": 1,
        }

    def test_convert_types_disabled(self) -> None:
        """Test that values stay strings when conversion is disabled."""
        loader = Environment(prefix="APP_", convert_types=False, environ={"APP_WORKERS": "4"})

        assert loader.load() == {"workers": "4"}

    def test_invalid_json_raises(self) -> None:
        """Test that malformed JSON values raise EnvLoadError naming the variable."""
        loader = Environment(prefix="APP_", environ={"APP_TAGS": "[unclosed"})

        with pytest.raises(EnvLoadError) as exc_info:
            _ = loader.load()

        assert exc_info.value.env_var == "APP_TAGS"

    def test_custom_mappings(self) -> None:
        """Test that mappings route a variable to a dotted path."""
        loader = Environment(
            prefix="APP_",
            mappings={"DATABASE_URL": "database.host"},
            environ={"DATABASE_URL": "db.example", "APP_NAME": "svc"},
        )

        assert loader.load() == {"database": {"host": "db.example"}, "name": "svc"}

    def test_schema_lookup_is_field_driven(self) -> None:
        """Test that a schema selects variables by field name, case-insensitively."""
        loader = Environment(
            prefix="APP_",
            environ={
                "APP_NAME": "svc",
                "app_workers": "4",
                "APP_DATABASE_PORT": "6000",
                "APP_UNRELATED_THING": "x",
            },
        )

        assert loader.load(AppConfig) == {"name": "svc", "workers": "4", "database": {"port": "6000"}}

    def test_schema_lookup_without_prefix(self) -> None:
        """Test field lookup with an empty prefix."""
        loader = Environment(environ={"test_a": "test_a", "TEST_B": "test_b", "PATH": "/usr/bin"})

        assert loader.load(PairConfig) == {"test_a": "test_a", "test_b": "test_b"}

    def test_text_fields_are_not_decoded_as_json(self) -> None:
        """Test that bracketed text stays a string for str fields."""
        loader = Environment(environ={"TEST_A": "[dev] service", "TEST_B": "{name}"})

        assert loader.load(PairConfig) == {"test_a": "[dev] service", "test_b": "{name}"}

    def test_self_referencing_model_stops_at_unset_levels(self) -> None:
        """Test that nested lookup only descends while variables exist for the level."""
        loader = Environment(environ={"NAME": "root", "CHILD_NAME": "leaf"})

        assert loader.load(Node) == {"name": "root", "child": {"name": "leaf"}}
        assert Environment(environ={"NAME": "root"}).load(Node) == {"name": "root"}


class TestEnvironmentCollect:
    """Test collecting typed snapshots from the environment."""

    def test_collect_keeps_only_set_fields(self) -> None:
        """Test that the snapshot holds the validated fields the environment set."""
        collector = from_env(
            "APP_",
            environ={"APP_WORKERS": "4", "APP_DEBUG": "true", "APP_MODE": "prod", "APP_DATABASE_HOST": "db"},
        )

        value = collector.collect(AppConfig)

        assert value == Struct(
            "AppConfig",
            {
                "debug": Bool(True),
                "workers": Int(4),
                "mode": UnitVariant("Mode", 1, "PROD"),
                "database": Struct("DatabaseConfig", {"host": Str("db")}),
            },
        )

    def test_collect_json_list(self) -> None:
        """Test that JSON arrays validate into list fields."""
        value = from_env("APP_", environ={"APP_TAGS": '["a"]'}).collect(AppConfig)

        assert value == Struct("AppConfig", {"tags": Seq([Str("a")])})

    def test_collect_dataclass(self) -> None:
        """Test collecting into a dataclass target."""
        value = from_env("RETRY_", environ={"RETRY_ATTEMPTS": "7"}).collect(RetryPolicy)

        assert value == Struct("RetryPolicy", {"attempts": Int(7)})

    def test_collect_invalid_value(self) -> None:
        """Test that values the target rejects raise EnvLoadError with validation context."""
        collector = from_env("APP_", environ={"APP_WORKERS": "many"})

        with pytest.raises(EnvLoadError) as exc_info:
            _ = collector.collect(AppConfig)

        assert exc_info.value.context["validation_errors"][0]["field"] == "workers"

    def test_collect_reads_process_environment(self) -> None:
        """Test that os.environ is read at collect time."""
        collector = from_env("APP_")

        with patch.dict(os.environ, {"APP_NAME": "from-os"}, clear=True):
            value = collector.collect(AppConfig)

        assert value == Struct("AppConfig", {"name": Str("from-os")})

    def test_collector_name(self) -> None:
        assert from_env().name == "env"
        assert from_env("APP_").name == "env:APP_"

    def test_collect_bracketed_text(self) -> None:
        """Test that a str field accepts text starting with a bracket."""
        collector = from_env(environ={"TEST_A": "[dev] service"})

        assert collector.collect(PairConfig) == Struct("PairConfig", {"test_a": Str("[dev] service")})
        assert Builder(PairConfig).collect(collector).build() == PairConfig(test_a="[dev] service")

    def test_build_self_referencing_model(self) -> None:
        config = Builder(Node).collect(from_env(environ={"NAME": "root"})).build()

        assert config == Node(name="root")
