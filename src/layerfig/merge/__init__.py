"""Structural merge engine for layered configuration values."""

from __future__ import annotations

from .engine import changed_paths, compatible, merge, merge3, merge_with_default
from ..exceptions import ConfigMergeError

__all__ = [
    "ConfigMergeError",
    "changed_paths",
    "compatible",
    "merge",
    "merge3",
    "merge_with_default",
]
