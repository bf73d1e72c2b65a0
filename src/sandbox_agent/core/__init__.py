"""Core agent, configuration and models."""

from .config import (
    GitHubConfig,
    ModelConfig,
    SandboxAgentConfig,
    WorktreeConfig,
    clear_config_cache,
    load_config,
)
from .models import (
    AgentResponse,
    ExecuteCommandOptions,
    GitWorktreeContext,
    LabelOptions,
    MergePullRequestResult,
    MessageType,
    PullRequestResult,
    StreamCallbacks,
    StreamingMessage,
)
from .session import SandboxSessionManager, SessionState
from .git_operations import GitWorkflowController
from .pr_publisher import PullRequestPublisher
from .agent import SandboxAgent

__all__ = [
    "GitHubConfig",
    "ModelConfig",
    "SandboxAgentConfig",
    "WorktreeConfig",
    "clear_config_cache",
    "load_config",
    "AgentResponse",
    "ExecuteCommandOptions",
    "GitWorktreeContext",
    "LabelOptions",
    "MergePullRequestResult",
    "MessageType",
    "PullRequestResult",
    "StreamCallbacks",
    "StreamingMessage",
    "SandboxSessionManager",
    "SessionState",
    "GitWorkflowController",
    "PullRequestPublisher",
    "SandboxAgent",
]
