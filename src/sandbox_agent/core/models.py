"""Data models exchanged between the agent, its callers and GitHub."""

import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

DEFAULT_TIMEOUT_MS = 3_600_000

# Items delivered to on_update: structured messages as dicts, raw output as text
UpdateCallback = Callable[[Union[Dict[str, Any], str]], None]
ErrorCallback = Callable[[str], None]


class MessageType(str, Enum):
    """Streaming message types on the wire."""
    START = "start"
    GIT = "git"
    END = "end"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    TEXT = "text"


class StreamingMessage(BaseModel):
    """Lifecycle or tool event delivered to the caller's update callback."""
    type: MessageType
    sandbox_id: Optional[str] = None
    output: Optional[str] = None
    message: Optional[str] = None
    timestamp: Optional[float] = Field(default_factory=lambda: time.time() * 1000)

    def to_wire(self) -> Dict[str, Any]:
        """Wire shape: ``{"type": ..., "sandbox_id"?, "output"?, "message"?, "timestamp"?}``."""
        return self.model_dump(mode="json", exclude_none=True)


@dataclass
class StreamCallbacks:
    """Push-model listener pair; invoked synchronously as output arrives."""
    on_update: Optional[UpdateCallback] = None
    on_error: Optional[ErrorCallback] = None

    def update(self, item: Union[Dict[str, Any], str]) -> None:
        if self.on_update:
            self.on_update(item)

    def error(self, message: str) -> None:
        if self.on_error:
            self.on_error(message)


@dataclass
class ExecuteCommandOptions:
    """Options for a single command invocation."""
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    background: bool = False
    branch: Optional[str] = None
    callbacks: Optional[StreamCallbacks] = None
    output_format: Optional[Literal["text", "stream-json"]] = None


@dataclass
class AgentResponse:
    """Result of a command or code-generation run."""
    sandbox_id: str
    exit_code: int
    stdout: str
    stderr: str
    # Only set when structured stream output was requested or detected
    messages: Optional[List[Dict[str, Any]]] = None
    raw_stdout: Optional[str] = None

    @property
    def is_stream_json(self) -> bool:
        return self.messages is not None


@dataclass
class GitWorktreeContext:
    """Worktree state for one branch-scoped operation."""
    branch: str
    sanitized_branch: str
    root: str
    enabled: bool = True
    cleanup: bool = True
    active_directory: Optional[str] = None


class LabelOptions(BaseModel):
    """GitHub label attached to created pull requests."""
    name: str
    color: str
    description: str = ""


class PullRequestResult(BaseModel):
    """Normalized subset of the GitHub pull request object."""
    id: int
    number: int
    state: str
    title: str
    body: Optional[str] = None
    html_url: str
    head_ref: str
    head_sha: Optional[str] = None
    base_ref: str
    user_login: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    merged: bool = False
    mergeable: Optional[bool] = None
    merge_commit_sha: Optional[str] = None
    # Computed locally, not returned by GitHub
    branch_name: str
    commit_sha: Optional[str] = None


class MergePullRequestResult(BaseModel):
    """Outcome of a merge request."""
    sha: Optional[str] = None
    merged: bool
    message: str = ""
