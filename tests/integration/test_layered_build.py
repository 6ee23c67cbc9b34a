"""Integration tests building configurations from files, environment and code."""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from layerfig import Builder, NoValidConfigError, from_env, from_file, from_self, parser_for_path
from layerfig.parsers import Json, Toml, Yaml
from tests.fixtures.config_models import AppConfig, DatabaseConfig, Mode


class TestLayeredBuild:
    """Test complete builds across every kind of source."""

    def test_files_then_environment(self, config_dir: Path) -> None:
        """Test the usual stack of defaults, files and environment overrides."""
        environ = {"APP_DATABASE_USER": "admin", "APP_MODE": "prod", "APP_WORKERS": "12"}

        with patch.dict(os.environ, environ, clear=True):
            builder = (
                Builder(AppConfig, AppConfig(tags=["default"]))
                .collect(from_file(Toml(), config_dir / "config.toml"))
                .collect(from_file(Yaml(), config_dir / "config.yaml"))
                .collect(from_env("APP_"))
            )
            config = builder.build()

        assert config == AppConfig(
            name="yaml-app",
            debug=True,
            workers=12,
            mode=Mode.PROD,
            tags=["default"],
            database=DatabaseConfig(host="db.internal", port=6000, user="admin"),
        )
        assert builder.get_audit_trail() == {
            "name": f"file:{config_dir / 'config.yaml'}",
            "workers": "env:APP_",
            "database.port": f"file:{config_dir / 'config.toml'}",
            "debug": f"file:{config_dir / 'config.yaml'}",
            "database.host": f"file:{config_dir / 'config.yaml'}",
            "mode": "env:APP_",
            "database.user": "env:APP_",
        }

    def test_missing_optional_file_is_skipped(self, config_dir: Path) -> None:
        """Test that an absent override file does not stop the build."""
        builder = (
            Builder(AppConfig)
            .collect(from_file(Json(), config_dir / "config.json"))
            .collect(from_file(Yaml(), config_dir / "local.yaml"))
        )

        assert builder.build() == AppConfig(workers=8, tags=["a", "b"])
        assert len(builder.layer_errors) == 1

    def test_instance_layer_overrides_files(self, config_dir: Path) -> None:
        """Test that a typed instance acts as a layer of its own."""
        config = (
            Builder(AppConfig)
            .collect(from_file(parser_for_path(config_dir / "config.toml"), config_dir / "config.toml"))
            .collect(from_self(AppConfig(debug=True, token="secret")))
            .build()
        )

        assert config.name == "toml-app"
        assert config.debug is True
        assert config.token == "secret"
        assert config.database.port == 6000

    def test_unknown_keys_are_reported(self, tmp_path: Path) -> None:
        """Test that unknown keys in files are reported and do not break the build."""
        path = tmp_path / "config.yaml"
        _ = path.write_text("name: svc\nworker: 4\n")
        seen: list[str] = []

        config = Builder(AppConfig).collect(from_file(Yaml(), path, on_unknown=seen.append)).build()

        assert config == AppConfig(name="svc")
        assert seen == ["worker"]

    def test_every_source_missing(self, tmp_path: Path) -> None:
        builder = Builder(AppConfig).collect(from_file(Toml(), tmp_path / "a.toml"))

        with pytest.raises(NoValidConfigError):
            _ = builder.build()
