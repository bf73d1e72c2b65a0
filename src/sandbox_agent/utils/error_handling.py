"""Helpers for best-effort steps that must never abort a pipeline."""

import logging
from typing import Optional

logger = logging.getLogger(__name__)


def log_and_ignore(
    error: Exception,
    message: str,
    *,
    logger_instance: Optional[logging.Logger] = None,
    level: int = logging.WARNING,
) -> None:
    """
    Log an error and ignore it (don't re-raise).

    Use for diagnostic or setup steps whose failure shouldn't stop the
    command being run, e.g. ``mkdir -p`` on a pre-provisioned directory.

    Args:
        error: Exception to log
        message: Context message to log
        logger_instance: Logger to use (defaults to module logger)
        level: Log level (default: WARNING)
    """
    log = logger_instance or logger
    log.log(level, f"{message}: {error}")


class ErrorContext:
    """
    Context manager that logs failures and optionally suppresses them.

    Usage:
        with ErrorContext("attaching label to PR #12", raise_on_error=False):
            client.add_label(...)
    """

    def __init__(
        self,
        operation: str,
        *,
        raise_on_error: bool = True,
        logger_instance: Optional[logging.Logger] = None,
        log_level: int = logging.ERROR,
    ):
        self.operation = operation
        self.raise_on_error = raise_on_error
        self.logger = logger_instance or logger
        self.log_level = log_level
        self.error: Optional[Exception] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or not issubclass(exc_type, Exception):
            return False

        self.error = exc_val
        self.logger.log(
            self.log_level,
            f"Error during {self.operation}: {exc_val}",
        )
        return not self.raise_on_error
