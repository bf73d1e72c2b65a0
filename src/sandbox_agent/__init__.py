"""Run AI coding agents inside remote sandboxes and publish their work to GitHub."""

from .core import (
    AgentResponse,
    ExecuteCommandOptions,
    GitHubConfig,
    LabelOptions,
    ModelConfig,
    PullRequestResult,
    SandboxAgent,
    SandboxAgentConfig,
    StreamCallbacks,
    WorktreeConfig,
    load_config,
)
from .kit import AgentKit

__version__ = "0.1.0"

__all__ = [
    "AgentKit",
    "AgentResponse",
    "ExecuteCommandOptions",
    "GitHubConfig",
    "LabelOptions",
    "ModelConfig",
    "PullRequestResult",
    "SandboxAgent",
    "SandboxAgentConfig",
    "StreamCallbacks",
    "WorktreeConfig",
    "load_config",
]
