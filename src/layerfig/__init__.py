"""layerfig - layered configuration built by structural merging.

Configuration is collected from ordered sources (environment, files,
readers, strings, program defaults), converted into a generic value model and
merged layer by layer. A field set by an earlier source survives a later
source that leaves the same field at its default.

Example:
    >>> from layerfig import Builder, from_env, from_file
    >>> from layerfig.parsers import Toml
    >>> config = (
    ...     Builder(AppConfig)
    ...     .collect(from_file(Toml(), "config.toml"))
    ...     .collect(from_env("APP_"))
    ...     .build()
    ... )
"""

from layerfig.builder import Builder
from layerfig.collectors import (
    Collector,
    from_env,
    from_file,
    from_reader,
    from_self,
    from_str,
    from_value,
)
from layerfig.exceptions import (
    ConfigError,
    ConfigLoadError,
    ConfigMergeError,
    ConfigValidationError,
    EnvLoadError,
    NoValidConfigError,
    ParseError,
)
from layerfig.merge import merge, merge3, merge_with_default
from layerfig.parsers import Json, Parser, Toml, Yaml, parser_for_path
from layerfig.value import Value, is_default, project, to_python, to_value

__all__ = [
    "Builder",
    # Collectors
    "Collector",
    "from_env",
    "from_file",
    "from_reader",
    "from_self",
    "from_str",
    "from_value",
    # Parsers
    "Json",
    "Parser",
    "Toml",
    "Yaml",
    "parser_for_path",
    # Merge engine
    "merge",
    "merge3",
    "merge_with_default",
    # Values
    "Value",
    "is_default",
    "project",
    "to_python",
    "to_value",
    # Exceptions
    "ConfigError",
    "ConfigLoadError",
    "ConfigMergeError",
    "ConfigValidationError",
    "EnvLoadError",
    "NoValidConfigError",
    "ParseError",
]
