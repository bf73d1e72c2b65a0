"""Shared utility functions for the sandbox agent."""

from .error_handling import ErrorContext, log_and_ignore
from .rich_logging import AgentLogFormatter, ContextLogger, setup_rich_logging
from .stream_parser import StreamingJSONExtractor, parse_stream_json_messages
from .validators import sanitize_branch_name, validate_owner_repo

__all__ = [
    # Error handling
    "log_and_ignore",
    "ErrorContext",
    # Logging
    "AgentLogFormatter",
    "ContextLogger",
    "setup_rich_logging",
    # Stream parsing
    "StreamingJSONExtractor",
    "parse_stream_json_messages",
    # Validators
    "sanitize_branch_name",
    "validate_owner_repo",
]
