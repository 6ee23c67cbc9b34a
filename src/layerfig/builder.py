"""Layered configuration builder.

The builder asks each collector in turn for a value snapshot and folds it into
an accumulated value with the default-aware three-way merge. Collectors added
later take precedence. After every layer the accumulated value is projected
into the target type; the last successful projection is the build result.

Per-layer failures (a collector that cannot produce a value, or an
accumulated value that does not satisfy the target yet) are logged and
skipped. Only a build where no layer ever projected successfully fails, with
a single NoValidConfigError.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterator
from typing import cast

from pydantic import BaseModel

from layerfig.collectors.base import Collector
from layerfig.exceptions import (
    ConfigError,
    ConfigValidationError,
    NoValidConfigError,
    handle_config_error,
)
from layerfig.merge.engine import changed_paths, merge3, merge_with_default
from layerfig.utils.logging import build_context, log_with_context
from layerfig.value.convert import project, to_value
from layerfig.value.defaults import zero_value
from layerfig.value.model import Value

logger = logging.getLogger(__name__)

ROOT_PATH = "<root>"


class Builder[T]:
    """Builder for a configuration of type T from ordered sources.

    Example:
        >>> config = (
        ...     Builder(AppConfig)
        ...     .collect(from_file(Toml(), "config.toml"))
        ...     .collect(from_env("APP_"))
        ...     .build()
        ... )
    """

    def __init__(
        self,
        target: type[T],
        default: T | None = None,
    ) -> None:
        """Initialize Builder.

        Args:
            target: Type the configuration is projected into
            default: Default instance used as the reference layer; a fully
                defaulted target instance, or the target's declared zero
                value when the target has required fields
        """
        self.target: type[T] = target
        self.default: T | None = default
        self._collectors: list[Collector] = []
        self._audit_trail: dict[str, str] = {}
        self._layer_errors: list[ConfigError] = []

    @property
    def collectors(self) -> tuple[Collector, ...]:
        """Collectors in precedence order (last wins)."""
        return tuple(self._collectors)

    @property
    def layer_errors(self) -> tuple[ConfigError, ...]:
        """Per-layer failures recorded by the last build."""
        return tuple(self._layer_errors)

    def collect(self, collector: Collector) -> Builder[T]:
        """Append a collector with higher precedence than those already added.

        Args:
            collector: Source to collect from

        Returns:
            This builder, for chaining
        """
        self._collectors.append(collector)
        return self

    def default_value(self) -> Value:
        """Snapshot of the default layer.

        Without a default instance, a target whose fields all have defaults is
        instantiated with no arguments, so validators and post-init hooks shape
        the default layer. Other targets use their declared zero value.
        """
        if self.default is not None:
            return to_value(self.default)
        if _defaults_every_field(self.target):
            return to_value(self.target())
        return zero_value(self.target)

    def build(self) -> T:
        """Build the configuration.

        Returns:
            Projection of the last accumulated value that satisfied the target

        Raises:
            NoValidConfigError: If no layer produced a valid configuration
            ConfigMergeError: If a source produced a field the default layer
                does not declare
        """
        found = False
        result: T | None = None
        with build_context() as build_id:
            logger.info(f"Building {self._target_name()} from {len(self._collectors)} source(s)")
            for collector, accumulated in self._layers():
                try:
                    result = project(accumulated, self.target)
                except ConfigValidationError as e:
                    self._record_failure(collector, "deserialize", e)
                    continue
                found = True
                logger.debug(f"Accumulated value after {collector.name} is valid")

            if not found:
                raise NoValidConfigError(
                    f"No valid configuration could be built for {self._target_name()}",
                    layer_errors=self._layer_errors,
                    context={"build_id": build_id},
                )
            logger.info(f"Built {self._target_name()} with {len(self._layer_errors)} skipped layer(s)")
        return cast(T, result)

    def build_value(self) -> Value:
        """Build the merged value without projecting it.

        Returns:
            Final accumulated value

        Raises:
            NoValidConfigError: If no collector produced a value
            ConfigMergeError: If a source produced a field the default layer
                does not declare
        """
        accumulated: Value | None = None
        with build_context() as build_id:
            for _, accumulated in self._layers():
                pass
            if accumulated is None:
                raise NoValidConfigError(
                    f"No source produced a value for {self._target_name()}",
                    layer_errors=self._layer_errors,
                    context={"build_id": build_id},
                )
        return accumulated

    def _layers(self) -> Iterator[tuple[Collector, Value]]:
        """Yield each collector with the accumulated value after its merge.

        Collectors that fail are recorded and skipped.
        """
        self._layer_errors = []
        self._audit_trail.clear()

        default = self.default_value()
        accumulated = default
        for collector in self._collectors:
            try:
                raw = collector.collect(self.target)
            except Exception as e:
                self._record_failure(collector, "collect", handle_config_error(e, f"collect from {collector.name}"))
                continue

            normalized = merge_with_default(default, raw)
            merged = merge3(default, accumulated, normalized)
            for path in changed_paths(accumulated, merged):
                self._audit_trail[path or ROOT_PATH] = collector.name
            accumulated = merged
            yield collector, accumulated

    def _record_failure(self, collector: Collector, stage: str, error: ConfigError) -> None:
        self._layer_errors.append(error)
        log_with_context(
            logger,
            logging.WARNING,
            f"Layer {collector.name} failed to {stage}: {error}",
            extra={"layer": collector.name, "stage": stage},
        )

    def _target_name(self) -> str:
        return getattr(self.target, "__name__", str(self.target))

    def get_audit_trail(self) -> dict[str, str]:
        """Get the source that last changed each configuration path.

        Returns:
            Dictionary mapping dotted configuration paths to collector names
        """
        return self._audit_trail.copy()

    def clear_audit_trail(self) -> None:
        """Clear the audit trail information."""
        self._audit_trail.clear()


def _defaults_every_field(target: object) -> bool:
    """Check whether target is a model or dataclass constructible with no arguments."""
    if isinstance(target, type) and issubclass(target, BaseModel):
        return not any(field.is_required() for field in target.model_fields.values())
    if isinstance(target, type) and dataclasses.is_dataclass(target):
        return all(
            field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING
            for field in dataclasses.fields(target)
            if field.init
        )
    return False
