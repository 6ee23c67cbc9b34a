"""Configuration types shared by the test suite."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field


class Mode(Enum):
    """Deployment mode."""

    DEV = "dev"
    PROD = "prod"


class DatabaseConfig(BaseModel):
    """Nested section with non-zero defaults."""

    host: str = "localhost"
    port: int = 5432
    user: str = ""


class AppConfig(BaseModel):
    """Application configuration covering scalars, enums, nesting and optionals."""

    name: str = ""
    debug: bool = False
    workers: int = 1
    mode: Mode = Mode.DEV
    tags: list[str] = Field(default_factory=list)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    token: str | None = None


class PairConfig(BaseModel):
    """Two string fields, both empty by default."""

    test_a: str = ""
    test_b: str = ""


class StrictConfig(BaseModel):
    """Configuration whose zero value does not validate."""

    port: int = Field(ge=1)
    host: str = "localhost"


@dataclass
class RetryPolicy:
    """Dataclass configuration."""

    attempts: int = 3
    backoff: float = 0.5
    codes: list[int] = field(default_factory=list)


class Point(NamedTuple):
    x: int
    y: int
