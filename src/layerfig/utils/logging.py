"""Logging infrastructure with build ID tracking.

Every configuration build runs under a build ID stored in a ContextVar. A
logging filter copies it onto each record so the per-layer warnings of one
build can be told apart from another's.
"""

import contextvars
import logging
import sys
import uuid
from collections.abc import Generator, Mapping
from contextlib import contextmanager
from typing import Final, override

# Build ID context variable for tracking log records of one build
build_id_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "build_id",
    default=None,
)

DEFAULT_LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - [%(build_id)s] - %(message)s"


class BuildIDFilter(logging.Filter):
    """Logging filter that adds the build ID to log records.

    Records emitted outside a build get "N/A".
    """

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        """Add build ID to log record from ContextVar.

        Args:
            record: Log record to enhance with build ID

        Returns:
            True to allow the record to be logged
        """
        build_id = build_id_var.get()
        record.build_id = build_id if build_id is not None else "N/A"
        return True


def configure_logging(
    *,
    log_level: str = "INFO",
    enable_console: bool = True,
) -> None:
    """Configure application logging with structured output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        enable_console: Enable console output handler

    Example:
        >>> configure_logging(log_level="DEBUG")
        >>> logger = logging.getLogger(__name__)
        >>> logger.info("Building configuration")
    """
    root_logger = logging.getLogger()

    level = getattr(logging, log_level.upper(), logging.INFO)  # pyright: ignore[reportAny]
    root_logger.setLevel(level)  # pyright: ignore[reportAny]

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(DEFAULT_LOG_FORMAT))
        console_handler.addFilter(BuildIDFilter())
        root_logger.addHandler(console_handler)


def get_build_id() -> str | None:
    """Get the current build ID from context.

    Returns:
        Current build ID or None if not set
    """
    return build_id_var.get()


@contextmanager
def build_context(build_id: str | None = None) -> Generator[str, None, None]:
    """Run a block under a build ID, restoring the previous one afterwards.

    Args:
        build_id: Build ID to use; a new UUID when omitted

    Yields:
        The active build ID

    Example:
        >>> with build_context() as build_id:
        ...     logger.info("Collecting sources")
    """
    active = build_id or uuid.uuid4().hex[:12]
    token = build_id_var.set(active)
    try:
        yield active
    finally:
        build_id_var.reset(token)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    *,
    extra: Mapping[str, object] | None = None,
) -> None:
    """Log a message with additional context fields.

    Args:
        logger: Logger instance to use
        level: Logging level (e.g., logging.INFO)
        message: Log message
        extra: Additional context fields to include in log

    Example:
        >>> log_with_context(logger, logging.WARNING, "Layer skipped", extra={"layer": "env"})
    """
    context = dict(extra) if extra else {}

    build_id = get_build_id()
    if build_id:
        context["build_id"] = build_id

    logger.log(level, message, extra=context)
