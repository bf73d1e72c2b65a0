"""Error taxonomy for the sandbox agent."""

from .exceptions import (
    CommandFailedError,
    ConfigurationError,
    ExternalAPIError,
    GitStateError,
    NoChangesError,
    SandboxAgentError,
    SandboxTransportError,
    SummarizationError,
)

__all__ = [
    "SandboxAgentError",
    "ConfigurationError",
    "GitStateError",
    "NoChangesError",
    "SandboxTransportError",
    "CommandFailedError",
    "ExternalAPIError",
    "SummarizationError",
]
