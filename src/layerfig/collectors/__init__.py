"""Configuration sources.

Available collectors:

- ``from_env``: load from the current environment
- ``from_file``: load from a file with a specific format
- ``from_reader``: load from a stream with a specific format
- ``from_str``: load from a string with a specific format
- ``from_self``: load a configuration instance
- ``from_value``: load an already built generic value
"""

from __future__ import annotations

from .base import Collector, snapshot
from .env import Environment, from_env
from .structural import Structural, from_file, from_reader, from_str
from .value import FromSelf, FromValue, from_self, from_value
from ..exceptions import ConfigLoadError, EnvLoadError

__all__ = [
    "Collector",
    "ConfigLoadError",
    "EnvLoadError",
    "Environment",
    "FromSelf",
    "FromValue",
    "Structural",
    "from_env",
    "from_file",
    "from_reader",
    "from_self",
    "from_str",
    "from_value",
    "snapshot",
]
